# -*- coding: utf-8 -*-
# core/page_groups.py
"""
Группы страниц.

Страницы, не входящие ни в одну явную группу, принадлежат синтезированной
группе "Default". Она попадает в сохраняемый список только тогда, когда
участвует в перестановке порядка.
"""
import logging
import random
import string
import time
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .config import (
    DEFAULT_GROUP_COLOR, DEFAULT_GROUP_ID, DEFAULT_GROUP_NAME,
    DEFAULT_PDF_MODE, GROUP_COLORS, MAX_GROUP_NAME_LENGTH, NEW_GROUP_COLOR
)
from .exceptions import GroupOperationError
from .models import GroupKind, Page, PageGroup, PdfMode

logger = logging.getLogger(__name__)


def generate_group_id() -> str:
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"group_{int(time.time() * 1000)}_{suffix}"


def validate_group_name(name: str, groups: Iterable[PageGroup], exclude_group_id: Optional[str] = None):
    """Проверка имени группы, GroupOperationError при ошибке"""
    cleaned = (name or '').strip()
    if not cleaned:
        raise GroupOperationError("Group name cannot be empty")
    if len(cleaned) > MAX_GROUP_NAME_LENGTH:
        raise GroupOperationError(f"Group name cannot exceed {MAX_GROUP_NAME_LENGTH} characters")
    for group in groups:
        if group.id != exclude_group_id and group.name.strip().lower() == cleaned.lower():
            raise GroupOperationError(f"A group named '{cleaned}' already exists")
    return cleaned


class PageGroupManager:
    def __init__(self, groups: Iterable[PageGroup] = (), pdf_mode: PdfMode = DEFAULT_PDF_MODE):
        self._groups = tuple(groups)
        self.pdf_mode = pdf_mode

    @property
    def groups(self) -> tuple:
        """Сохраняемые группы (Default только если материализована)"""
        return self._groups

    def _persisted_default(self) -> Optional[PageGroup]:
        for group in self._groups:
            if group.id == DEFAULT_GROUP_ID:
                return group
        return None

    def _explicit_groups(self) -> List[PageGroup]:
        return [group for group in self._groups if group.id != DEFAULT_GROUP_ID]

    def default_group(self) -> PageGroup:
        persisted = self._persisted_default()
        if persisted is not None:
            return persisted
        return PageGroup(
            id=DEFAULT_GROUP_ID,
            name=DEFAULT_GROUP_NAME,
            kind=GroupKind.MANUAL,
            order=0,
            processing_mode=self.pdf_mode,
            color=DEFAULT_GROUP_COLOR,
        )

    def sorted_groups(self) -> List[PageGroup]:
        """Все группы по порядку, включая Default"""
        groups = list(self._groups)
        if self._persisted_default() is None:
            groups.insert(0, self.default_group())
        return sorted(groups, key=lambda group: group.order)

    def get_group(self, group_id: str) -> Optional[PageGroup]:
        if group_id == DEFAULT_GROUP_ID:
            return self.default_group()
        for group in self._groups:
            if group.id == group_id:
                return group
        return None

    def _require(self, group_id: str) -> PageGroup:
        group = self.get_group(group_id)
        if group is None:
            raise GroupOperationError(f"Unknown group: {group_id}")
        return group

    def _replace_group(self, updated: PageGroup):
        if any(group.id == updated.id for group in self._groups):
            self._groups = tuple(updated if group.id == updated.id else group for group in self._groups)
        else:
            self._groups = self._groups + (updated,)

    # Состав групп

    def group_page_indices(self, group_id: str, page_count: int) -> List[int]:
        if group_id == DEFAULT_GROUP_ID:
            claimed = {index for group in self._explicit_groups() for index in group.page_indices}
            return [index for index in range(page_count) if index not in claimed]
        group = self.get_group(group_id)
        if group is None:
            return []
        return [index for index in group.page_indices if 0 <= index < page_count]

    def group_for_page(self, page_index: int) -> PageGroup:
        for group in self._explicit_groups():
            if page_index in group.page_indices:
                return group
        return self.default_group()

    def processing_mode_for(self, group_id: str) -> PdfMode:
        group = self.get_group(group_id)
        if group is None or group.id == DEFAULT_GROUP_ID:
            return self.pdf_mode
        return group.processing_mode

    # Создание, удаление, переименование

    def _next_group_name(self) -> str:
        existing = {group.name.strip().lower() for group in self.sorted_groups()}
        number = 1
        while f"group {number}" in existing:
            number += 1
        return f"Group {number}"

    def _next_order(self) -> float:
        return max([group.order for group in self.sorted_groups()] + [0]) + 1

    def _next_color(self) -> str:
        used = {group.color for group in self._groups}
        for color in GROUP_COLORS:
            if color not in used:
                return color
        return NEW_GROUP_COLOR

    def create_group(self, name: Optional[str] = None, page_indices: Sequence[int] = (),
                     kind: GroupKind = GroupKind.MANUAL, color: Optional[str] = None,
                     processing_mode: Optional[PdfMode] = None) -> PageGroup:
        group_name = validate_group_name(name, self.sorted_groups()) if name else self._next_group_name()
        now = time.time()
        group = PageGroup(
            id=generate_group_id(),
            name=group_name,
            kind=kind,
            order=self._next_order(),
            processing_mode=processing_mode or self.pdf_mode,
            color=color or (NEW_GROUP_COLOR if kind == GroupKind.MANUAL else self._next_color()),
            created_at=now,
            modified_at=now,
        )
        self._groups = self._groups + (group,)
        if page_indices:
            group = self.add_pages_to_group(group.id, page_indices)
        logger.info(f"Created group '{group.name}' ({group.id})")
        return group

    def delete_group(self, group_id: str):
        """Удаление группы; ее страницы возвращаются в Default"""
        if group_id == DEFAULT_GROUP_ID:
            raise GroupOperationError("The default group cannot be deleted")
        group = self._require(group_id)
        self._groups = tuple(g for g in self._groups if g.id != group_id)
        logger.info(f"Deleted group '{group.name}', {len(group.page_indices)} pages returned to default")

    def rename_group(self, group_id: str, name: str) -> PageGroup:
        if group_id == DEFAULT_GROUP_ID:
            raise GroupOperationError("The default group cannot be renamed")
        group = self._require(group_id)
        cleaned = validate_group_name(name, self.sorted_groups(), exclude_group_id=group_id)
        updated = replace(group, name=cleaned, modified_at=time.time())
        self._replace_group(updated)
        return updated

    def set_processing_mode(self, group_id: str, pdf_mode: PdfMode) -> PageGroup:
        group = self._require(group_id)
        if group_id == DEFAULT_GROUP_ID:
            self.pdf_mode = pdf_mode
            if self._persisted_default() is None:
                return self.default_group()
        updated = replace(group, processing_mode=pdf_mode, modified_at=time.time())
        self._replace_group(updated)
        return updated

    def update_group_settings(self, group_id: str, settings: Optional[Mapping[str, Any]]) -> PageGroup:
        group = self._require(group_id)
        updated = replace(group, settings=dict(settings) if settings else None, modified_at=time.time())
        self._replace_group(updated)
        return updated

    # Порядок групп

    def _swap(self, group_id: str, offset: int) -> bool:
        ordered = self.sorted_groups()
        position = next((i for i, group in enumerate(ordered) if group.id == group_id), None)
        if position is None:
            raise GroupOperationError(f"Unknown group: {group_id}")
        neighbour_position = position + offset
        if not 0 <= neighbour_position < len(ordered):
            return False

        current, neighbour = ordered[position], ordered[neighbour_position]
        # Default материализуется здесь, если еще не сохранена
        self._replace_group(replace(current, order=neighbour.order))
        self._replace_group(replace(neighbour, order=current.order))
        logger.debug(f"Swapped order of groups {current.id} and {neighbour.id}")
        return True

    def move_up(self, group_id: str) -> bool:
        return self._swap(group_id, -1)

    def move_down(self, group_id: str) -> bool:
        return self._swap(group_id, 1)

    # Перемещение страниц

    def add_pages_to_group(self, group_id: str, page_indices: Iterable[int]) -> PageGroup:
        """Добавление страниц в группу; из других явных групп они удаляются"""
        if group_id == DEFAULT_GROUP_ID:
            self._remove_from_all(page_indices)
            return self.default_group()
        group = self._require(group_id)
        incoming = list(dict.fromkeys(page_indices))
        self._remove_from_all(incoming)
        group = self._require(group_id)
        merged = tuple(dict.fromkeys(group.page_indices + tuple(incoming)))
        updated = replace(group, page_indices=merged, modified_at=time.time())
        self._replace_group(updated)
        return updated

    def remove_pages_from_group(self, group_id: str, page_indices: Iterable[int]) -> PageGroup:
        group = self._require(group_id)
        removed = set(page_indices)
        updated = replace(
            group,
            page_indices=tuple(index for index in group.page_indices if index not in removed),
            modified_at=time.time()
        )
        if group_id != DEFAULT_GROUP_ID or self._persisted_default() is not None:
            self._replace_group(updated)
        return updated

    def _remove_from_all(self, page_indices: Iterable[int]):
        removed = set(page_indices)
        self._groups = tuple(
            replace(group, page_indices=tuple(i for i in group.page_indices if i not in removed))
            if removed.intersection(group.page_indices) else group
            for group in self._groups
        )

    def move_page(self, page_local_index: int, source_group_id: str, target_group_id: str,
                  page_count: int) -> bool:
        """Перемещение страницы по ее индексу внутри исходной группы"""
        self._require(target_group_id)
        source_pages = self.group_page_indices(source_group_id, page_count)
        if not 0 <= page_local_index < len(source_pages):
            logger.warning(f"Page {page_local_index} not found in group {source_group_id}")
            return False
        page_index = source_pages[page_local_index]
        self._remove_from_all([page_index])
        if target_group_id != DEFAULT_GROUP_ID:
            target = self._require(target_group_id)
            self._replace_group(replace(
                target, page_indices=target.page_indices + (page_index,), modified_at=time.time()
            ))
        logger.debug(f"Moved page {page_index} from {source_group_id} to {target_group_id}")
        return True

    def remap_pages(self, index_map: Mapping[int, Optional[int]]):
        """Перенумерация страниц после перестановки или удаления файла"""
        remapped = []
        for group in self._groups:
            indices = [index_map.get(index, index) for index in group.page_indices]
            indices = tuple(dict.fromkeys(index for index in indices if index is not None))
            remapped.append(group if indices == group.page_indices else replace(group, page_indices=indices))
        self._groups = tuple(remapped)

    # Автоматическая группировка

    def _auto_group(self, buckets: Dict[str, List[int]]) -> List[PageGroup]:
        created = []
        taken = {group.name.strip().lower() for group in self.sorted_groups()}
        for label, indices in buckets.items():
            if not indices:
                continue
            name = label[:MAX_GROUP_NAME_LENGTH]
            suffix = 2
            while name.lower() in taken:
                name = f"{label[:MAX_GROUP_NAME_LENGTH - 4]} ({suffix})"
                suffix += 1
            taken.add(name.lower())
            created.append(self.create_group(name, indices, kind=GroupKind.AUTO))
        return created

    def auto_group_by_file(self, pages: Sequence[Page]) -> List[PageGroup]:
        buckets: Dict[str, List[int]] = {}
        for position, page in enumerate(pages):
            buckets.setdefault(page.source_file, []).append(position)
        return self._auto_group(buckets)

    def auto_group_by_page_type(self, pages: Sequence[Page]) -> List[PageGroup]:
        buckets: Dict[str, List[int]] = {}
        for position, page in enumerate(pages):
            buckets.setdefault(f"{page.page_type.value.capitalize()} Pages", []).append(position)
        return self._auto_group(buckets)

    def statistics(self, page_count: int) -> Dict[str, int]:
        grouped = {index for group in self._explicit_groups() for index in group.page_indices
                   if 0 <= index < page_count}
        explicit = self._explicit_groups()
        return {
            'totalGroups': len(explicit),
            'groupedPages': len(grouped),
            'ungroupedPages': page_count - len(grouped),
            'autoGroups': sum(1 for group in explicit if group.kind == GroupKind.AUTO),
            'manualGroups': sum(1 for group in explicit if group.kind == GroupKind.MANUAL),
        }
