# -*- coding: utf-8 -*-
# core/page_model.py
"""
Единый список страниц из нескольких файлов с информацией о происхождении.

Индекс страницы в списке всегда совпадает с display_order: после любой
операции порядок плотный и начинается с нуля.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import DEFAULT_PDF_MODE
from .exceptions import FileImportError, PageOrderError
from .file_repository import FileRepository
from .models import (
    CardType, DecodedFile, Duplex, FileKind, FileSource, Page, PageType, PdfMode
)

logger = logging.getLogger(__name__)

IndexMap = Dict[int, Optional[int]]


@dataclass
class ImportResult:
    pages: Tuple[Page, ...] = ()
    files: List[FileSource] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.files)


def default_page_type(kind: FileKind, original_page_index: int, pdf_mode: PdfMode) -> CardType:
    if kind == FileKind.PDF and isinstance(pdf_mode, Duplex):
        return CardType.FRONT if original_page_index % 2 == 0 else CardType.BACK
    return CardType.FRONT


def pages_for_file(decoded: DecodedFile, pdf_mode: PdfMode) -> List[Page]:
    source = decoded.source
    page_count = 1 if source.kind == FileKind.IMAGE else source.original_page_count
    pages = []
    for index in range(page_count):
        width = height = None
        if index < len(decoded.page_sizes):
            width, height = decoded.page_sizes[index]
        pages.append(Page(
            source_file=source.name,
            original_page_index=index,
            file_kind=source.kind,
            type=default_page_type(source.kind, index, pdf_mode),
            width=width,
            height=height,
        ))
    return pages


def recompact_display_order(pages: Iterable[Page]) -> Tuple[Page, ...]:
    return tuple(
        page if page.display_order == position else replace(page, display_order=position)
        for position, page in enumerate(pages)
    )


def move_page(pages: Sequence[Page], from_index: int, to_index: int) -> Tuple[Page, ...]:
    """Перемещение страницы с from_index на to_index (как splice)"""
    count = len(pages)
    if not (0 <= from_index < count) or not (0 <= to_index < count):
        raise PageOrderError(f"Invalid reorder indices {from_index} -> {to_index} for {count} pages")
    reordered = list(pages)
    page = reordered.pop(from_index)
    reordered.insert(to_index, page)
    return recompact_display_order(reordered)


def index_map(old_pages: Sequence[Page], new_pages: Sequence[Page]) -> IndexMap:
    """Старый индекс -> новый индекс по идентичности страницы; None если страницы больше нет"""
    positions = {page.identity: position for position, page in enumerate(new_pages)}
    return {position: positions.get(page.identity) for position, page in enumerate(old_pages)}


class PageModel:
    def __init__(self, pdf_mode: PdfMode = DEFAULT_PDF_MODE, repository: Optional[FileRepository] = None):
        self.pdf_mode = pdf_mode
        self.repository = repository or FileRepository()
        self.pages: Tuple[Page, ...] = ()
        self.errors: Dict[str, str] = {}
        self._import_order: Tuple[Tuple[str, int, FileKind], ...] = ()

    @property
    def files(self) -> List[FileSource]:
        return self.repository.sources()

    def _register(self, decoded_files: Sequence[DecodedFile], result: ImportResult) -> List[Page]:
        new_pages: List[Page] = []
        ordered = sorted(decoded_files, key=lambda decoded: decoded.source.import_timestamp)
        for decoded in ordered:
            name = decoded.name
            if self.repository.contains(name):
                error = FileImportError(name, "a file with this name is already imported")
                logger.warning(f"Skipping duplicate file: {error}")
                result.errors[name] = error.message
                continue
            self.repository.create(decoded.source, decoded.payload)
            result.files.append(decoded.source)
            new_pages.extend(pages_for_file(decoded, self.pdf_mode))
        self.errors.update(result.errors)
        return new_pages

    def combine(self, decoded_files: Sequence[DecodedFile]) -> ImportResult:
        """Полный импорт: заменяет текущие файлы и страницы"""
        self.repository.dispose_all()
        self.errors = {}
        result = ImportResult()
        self.pages = recompact_display_order(self._register(decoded_files, result))
        self._import_order = tuple(page.identity for page in self.pages)
        result.pages = self.pages
        logger.info(f"Imported {len(result.files)} files, {len(self.pages)} pages")
        return result

    def add_files(self, decoded_files: Sequence[DecodedFile]) -> ImportResult:
        """Добавление файлов в конец списка; дубликаты имен отклоняются по отдельности"""
        result = ImportResult()
        new_pages = self._register(decoded_files, result)
        start = len(self.pages)
        self.pages = recompact_display_order(self.pages + tuple(new_pages))
        self._import_order = self._import_order + tuple(page.identity for page in new_pages)
        result.pages = self.pages[start:]
        logger.info(f"Added {len(result.files)} files ({len(result.pages)} pages), {len(result.errors)} rejected")
        return result

    def remove_file(self, name: str) -> IndexMap:
        if not self.repository.contains(name):
            logger.warning(f"Cannot remove unknown file: {name}")
            return {position: position for position in range(len(self.pages))}
        old_pages = self.pages
        self.pages = recompact_display_order(page for page in old_pages if page.source_file != name)
        self._import_order = tuple(identity for identity in self._import_order if identity[0] != name)
        self.repository.dispose(name)
        self.errors.pop(name, None)
        logger.info(f"Removed file {name}, {len(old_pages) - len(self.pages)} pages dropped")
        return index_map(old_pages, self.pages)

    def reorder(self, from_index: int, to_index: int) -> IndexMap:
        old_pages = self.pages
        self.pages = move_page(old_pages, from_index, to_index)
        logger.debug(f"Moved page {from_index} -> {to_index}")
        return index_map(old_pages, self.pages)

    def reset_to_import_order(self) -> IndexMap:
        """Возврат к порядку импорта с сохранением изменений самих страниц"""
        old_pages = self.pages
        by_identity = {page.identity: page for page in old_pages}
        restored = [by_identity[identity] for identity in self._import_order if identity in by_identity]
        self.pages = recompact_display_order(restored)
        return index_map(old_pages, self.pages)

    def is_reordered(self) -> bool:
        if len(self.pages) != len(self._import_order):
            return True
        return any(page.identity != identity for page, identity in zip(self.pages, self._import_order))

    # Изменение отдельных страниц

    def _check_index(self, page_index: int):
        if not 0 <= page_index < len(self.pages):
            raise PageOrderError(f"Page index {page_index} out of range for {len(self.pages)} pages")

    def update_page(self, page_index: int, **changes) -> Page:
        self._check_index(page_index)
        page = replace(self.pages[page_index], **changes)
        self.pages = self.pages[:page_index] + (page,) + self.pages[page_index + 1:]
        return page

    def remove_page(self, page_index: int) -> Page:
        return self.update_page(page_index, removed=True)

    def restore_page(self, page_index: int) -> Page:
        return self.update_page(page_index, removed=False)

    def set_page_skip(self, page_index: int, skip: bool) -> Page:
        return self.update_page(page_index, skip=skip)

    def set_page_card_type(self, page_index: int, card_type: CardType) -> Page:
        if card_type == CardType.UNKNOWN:
            raise PageOrderError("Page type must be front or back")
        return self.update_page(page_index, type=card_type)

    def set_page_type(self, page_index: int, page_type: PageType) -> Page:
        changes = {'page_type': page_type}
        if page_type == PageType.SKIP:
            changes['skip'] = True
        return self.update_page(page_index, **changes)

    # Запросы

    def active_pages(self) -> List[Page]:
        return [page for page in self.pages if page.is_active]

    def active_page_indices(self) -> List[int]:
        return [position for position, page in enumerate(self.pages) if page.is_active]

    def statistics(self) -> Dict[str, int]:
        sources = self.files
        return {
            'totalFiles': len(sources),
            'totalPages': len(self.pages),
            'activePages': len(self.active_pages()),
            'skippedPages': sum(1 for page in self.pages if page.skip),
            'removedPages': sum(1 for page in self.pages if page.removed),
            'totalSize': sum(source.size for source in sources),
            'pdfFiles': sum(1 for source in sources if source.kind == FileKind.PDF),
            'imageFiles': sum(1 for source in sources if source.kind == FileKind.IMAGE),
            'errorCount': len(self.errors),
        }


def get_active_pages(pages: Iterable[Page]) -> List[Page]:
    return [page for page in pages if page.is_active]
