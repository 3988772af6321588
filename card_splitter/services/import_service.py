# -*- coding: utf-8 -*-
# services/import_service.py
"""
Чтение загруженных файлов: число страниц и размеры каждой страницы.
Пиксели здесь не обрабатываются.
"""
import logging
import time
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import fitz  # PyMuPDF
from PIL import Image

from card_splitter.core.config import IMAGE_EXTENSIONS, SUPPORTED_EXTENSIONS
from card_splitter.core.exceptions import FileImportError
from card_splitter.core.models import DecodedFile, FileKind, FileSource
from card_splitter.utils.helpers import file_extension, format_file_size

logger = logging.getLogger(__name__)

PDF_MAX_SIZE = 100 * 1024 * 1024
IMAGE_MAX_SIZE = 50 * 1024 * 1024
MAX_FILES = 50


@dataclass
class BatchDecodeResult:
    files: List[DecodedFile] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


class ImportService:
    def __init__(self, keep_payload: bool = False):
        self.keep_payload = keep_payload

    @staticmethod
    def is_supported(name: str) -> bool:
        return file_extension(name) in SUPPORTED_EXTENSIONS

    def decode(self, name: str, data: bytes, import_timestamp: float = None) -> DecodedFile:
        extension = file_extension(name)
        if extension not in SUPPORTED_EXTENSIONS:
            raise FileImportError(name, f"Unsupported file type '{extension}'. Only PDF, PNG, JPG and JPEG are supported")
        if not data:
            raise FileImportError(name, "File is empty")

        limit = IMAGE_MAX_SIZE if extension in IMAGE_EXTENSIONS else PDF_MAX_SIZE
        if len(data) > limit:
            raise FileImportError(
                name, f"File too large: {format_file_size(len(data))} (max: {format_file_size(limit)})"
            )

        timestamp = import_timestamp if import_timestamp is not None else time.time()
        if extension == '.pdf':
            return self._decode_pdf(name, data, timestamp)
        return self._decode_image(name, data, timestamp)

    def decode_path(self, path: Path) -> DecodedFile:
        path = Path(path)
        if not path.exists():
            raise FileImportError(path.name, "File does not exist")
        return self.decode(path.name, path.read_bytes())

    def _decode_pdf(self, name: str, data: bytes, timestamp: float) -> DecodedFile:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise FileImportError(name, f"Cannot read PDF: {e}") from e
        try:
            sizes = tuple((page.rect.width, page.rect.height) for page in doc)
        finally:
            doc.close()
        if not sizes:
            raise FileImportError(name, "PDF has no pages")

        source = FileSource(name, FileKind.PDF, len(sizes), len(data), timestamp)
        logger.info(f"PDF {name}: {len(sizes)} pages, {format_file_size(len(data))}")
        return DecodedFile(source, sizes, data if self.keep_payload else None)

    def _decode_image(self, name: str, data: bytes, timestamp: float) -> DecodedFile:
        try:
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                img.verify()
        except Exception as e:
            raise FileImportError(name, f"Image is corrupted: {e}") from e

        source = FileSource(name, FileKind.IMAGE, 1, len(data), timestamp)
        logger.info(f"Image {name}: {width}x{height}, {format_file_size(len(data))}")
        return DecodedFile(source, ((float(width), float(height)),), data if self.keep_payload else None)

    def decode_batch(self, files: Iterable[Tuple[str, bytes]]) -> BatchDecodeResult:
        """Чтение нескольких файлов; ошибка одного файла не прерывает остальные"""
        result = BatchDecodeResult()
        files = list(files)
        if len(files) > MAX_FILES:
            for name, _ in files[MAX_FILES:]:
                result.errors[name] = f"Too many files selected. Maximum is {MAX_FILES} files"
            files = files[:MAX_FILES]

        base_timestamp = time.time()
        for position, (name, data) in enumerate(files):
            try:
                result.files.append(self.decode(name, data, base_timestamp + position / 1000.0))
            except FileImportError as e:
                logger.warning(f"Import failed for {name}: {e.message}")
                result.errors[name] = e.message
        return result
