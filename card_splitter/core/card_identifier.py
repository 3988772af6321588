# -*- coding: utf-8 -*-
# core/card_identifier.py
"""
Идентификация карт: тип (лицевая/оборотная) и порядковый номер для каждой
ячейки каждой активной страницы.

Номера назначаются в порядке растрового обхода, раздельно для каждого типа,
начиная с 1. Пропущенные ячейки номер не получают. На оборотных страницах
дуплекса и на оборотной половине при фальцовке ячейки ранжируются по
зеркальной координате, чтобы оборот получал номер своей лицевой карты.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .card_skipping import find_override, is_card_skipped
from .extraction_grid import ExtractionGrid, duplex_mirror_axis, page_orientation
from .models import (
    UNKNOWN_CARD, CardEntry, CardInfo, CardType, Duplex, ExtractionSettings,
    FlipEdge, GutterFold, GutterOrientation, MirrorAxis, Page, PageDimensions,
    PageOrientation, PdfMode
)

logger = logging.getLogger(__name__)


class CardIdentifier:
    """Полный пересчет типов и номеров карт для набора активных страниц"""

    def __init__(self, active_pages: Sequence[Page], extraction_settings: ExtractionSettings,
                 pdf_mode: PdfMode):
        self.active_pages = tuple(active_pages)
        self.settings = extraction_settings
        self.pdf_mode = pdf_mode
        self.grid = ExtractionGrid(extraction_settings.grid)
        self.degraded = False
        self._entries: List[CardEntry] = self._build_entries()

    # Зеркалирование

    def _duplex_axis(self) -> MirrorAxis:
        orientation = page_orientation(self._page_dimensions())
        if orientation is None:
            self.degraded = True
            logger.warning(
                "Page dimensions are missing or invalid for duplex mirroring; "
                "assuming portrait page with short-edge flip, card IDs may be inconsistent"
            )
            return duplex_mirror_axis(PageOrientation.PORTRAIT, FlipEdge.SHORT)
        return duplex_mirror_axis(orientation, self.pdf_mode.flip_edge)

    def _page_dimensions(self) -> Optional[PageDimensions]:
        if self.settings.page_dimensions is not None:
            return self.settings.page_dimensions
        for page in self.active_pages:
            if page.dimensions is not None:
                return page.dimensions
        return None

    def _rank_key(self, page: Page, row: int, column: int, duplex_axis: MirrorAxis) -> Tuple[int, int, int]:
        rank_row, rank_column = row, column
        if isinstance(self.pdf_mode, Duplex) and page.type == CardType.BACK:
            rank_row, rank_column = self.grid.mirrored_cell(row, column, duplex_axis)
        elif isinstance(self.pdf_mode, GutterFold):
            orientation = self.pdf_mode.orientation
            if self.grid.gutter_half(row, column, orientation) == CardType.BACK:
                axis = MirrorAxis.COLUMNS if orientation == GutterOrientation.VERTICAL else MirrorAxis.ROWS
                rank_row, rank_column = self.grid.mirrored_cell(row, column, axis)
        return rank_row, rank_column, self.grid.linear_index(row, column)

    # Построение таблицы

    def _build_entries(self) -> List[CardEntry]:
        if not self.active_pages:
            return []

        duplex_axis = MirrorAxis.NONE
        if isinstance(self.pdf_mode, Duplex) and any(p.type == CardType.BACK for p in self.active_pages):
            duplex_axis = self._duplex_axis()

        cards_per_page = self.grid.cards_per_page
        entries: List[Optional[CardEntry]] = [None] * (len(self.active_pages) * cards_per_page)
        counters: Dict[CardType, int] = {CardType.FRONT: 0, CardType.BACK: 0}

        for page_index, page in enumerate(self.active_pages):
            cells = []
            for row, column in self.grid.cells():
                base_type = self.grid.base_card_type(row, column, page.type, self.pdf_mode)
                override = find_override(page_index, row, column, self.settings.card_type_overrides)
                card_type = override.card_type if override else base_type
                skipped = is_card_skipped(page_index, row, column, self.settings.skipped_cards, card_type)
                rank = self._rank_key(page, row, column, duplex_axis)
                cells.append((rank, row, column, card_type, skipped, override is not None))

            cells.sort(key=lambda cell: cell[0])
            for _, row, column, card_type, skipped, overridden in cells:
                card_id = 0
                if not skipped:
                    counters[card_type] += 1
                    card_id = counters[card_type]
                card_index = page_index * cards_per_page + self.grid.linear_index(row, column)
                entries[card_index] = CardEntry(
                    card_index, page_index, row, column, card_type, card_id, skipped, overridden
                )

        logger.debug(
            f"Identified {counters[CardType.FRONT]} front and {counters[CardType.BACK]} back cards "
            f"on {len(self.active_pages)} pages"
        )
        return entries

    # Запросы

    def total_cards(self) -> int:
        return len(self._entries)

    def entries(self) -> Tuple[CardEntry, ...]:
        return tuple(self._entries)

    def get_card_info(self, card_index: int) -> CardInfo:
        """
        Тип и номер карты по глобальному индексу.
        Для пропущенной ячейки возвращается ее тип с номером 0.
        """
        if card_index < 0 or card_index >= len(self._entries):
            return UNKNOWN_CARD
        entry = self._entries[card_index]
        return CardInfo(entry.card_type, entry.card_id)

    def available_card_ids(self, card_type: CardType) -> List[int]:
        return sorted(e.card_id for e in self._entries if e.card_type == card_type and not e.skipped)

    def count_cards(self, card_type: CardType) -> int:
        return sum(1 for e in self._entries if e.card_type == card_type and not e.skipped)

    def effective_card_count(self) -> int:
        return sum(1 for e in self._entries if not e.skipped)

    def find_card(self, card_type: CardType, card_id: int) -> Optional[CardEntry]:
        for entry in self._entries:
            if entry.card_type == card_type and entry.card_id == card_id and not entry.skipped:
                return entry
        return None


def get_card_info(card_index: int, active_pages: Sequence[Page],
                  extraction_settings: ExtractionSettings, pdf_mode: PdfMode) -> CardInfo:
    return CardIdentifier(active_pages, extraction_settings, pdf_mode).get_card_info(card_index)


def calculate_total_cards(active_page_count: int, extraction_settings: ExtractionSettings) -> int:
    return active_page_count * extraction_settings.grid.cards_per_page
