# -*- coding: utf-8 -*-
# core/card_skipping.py
"""
Пропуск карт и ручное переопределение типа карты.

Записи адресуются тройкой (страница, строка, столбец); поле card_type
работает как фильтр: None совпадает с любым типом карты. Реестр неизменяем,
каждая операция возвращает новый экземпляр.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .extraction_grid import ExtractionGrid
from .models import (
    CardType, CardTypeOverride, ExtractionSettings, GridSettings, GutterFold,
    PdfMode, SkippedCard
)

logger = logging.getLogger(__name__)


def _matches(entry, page_index: int, row: int, column: int, card_type: Optional[CardType]) -> bool:
    if (entry.page_index, entry.grid_row, entry.grid_column) != (page_index, row, column):
        return False
    return entry.card_type is None or card_type is None or entry.card_type == card_type


def is_card_skipped(page_index: int, row: int, column: int,
                    skipped_cards: Iterable[SkippedCard],
                    card_type: Optional[CardType] = None) -> bool:
    return any(_matches(card, page_index, row, column, card_type) for card in skipped_cards)


def find_override(page_index: int, row: int, column: int,
                  overrides: Iterable[CardTypeOverride]) -> Optional[CardTypeOverride]:
    for override in overrides:
        if (override.page_index, override.grid_row, override.grid_column) == (page_index, row, column):
            return override
    return None


@dataclass(frozen=True)
class PairedCard:
    page_index: int
    grid_row: int
    grid_column: int
    card_type: CardType


class SkipAndOverrideRegistry:
    def __init__(self, skipped_cards: Iterable[SkippedCard] = (),
                 overrides: Iterable[CardTypeOverride] = ()):
        self._skipped: Tuple[SkippedCard, ...] = tuple(skipped_cards)
        self._overrides: Tuple[CardTypeOverride, ...] = tuple(overrides)

    @classmethod
    def from_extraction(cls, settings: ExtractionSettings) -> 'SkipAndOverrideRegistry':
        return cls(settings.skipped_cards, settings.card_type_overrides)

    def apply_to(self, settings: ExtractionSettings) -> ExtractionSettings:
        return settings.with_changes(skipped_cards=self._skipped, card_type_overrides=self._overrides)

    @property
    def skipped_cards(self) -> Tuple[SkippedCard, ...]:
        return self._skipped

    @property
    def overrides(self) -> Tuple[CardTypeOverride, ...]:
        return self._overrides

    def _with(self, skipped=None, overrides=None) -> 'SkipAndOverrideRegistry':
        return SkipAndOverrideRegistry(
            self._skipped if skipped is None else skipped,
            self._overrides if overrides is None else overrides,
        )

    def __eq__(self, other):
        if not isinstance(other, SkipAndOverrideRegistry):
            return NotImplemented
        return self._skipped == other._skipped and self._overrides == other._overrides

    def __repr__(self):
        return f"SkipAndOverrideRegistry(skipped={len(self._skipped)}, overrides={len(self._overrides)})"

    # Пропуски

    def is_skipped(self, page_index: int, row: int, column: int,
                   card_type: Optional[CardType] = None) -> bool:
        return is_card_skipped(page_index, row, column, self._skipped, card_type)

    def count_skipped_cards(self) -> int:
        return len(self._skipped)

    def toggle_skip(self, page_index: int, row: int, column: int,
                    card_type: Optional[CardType] = None) -> 'SkipAndOverrideRegistry':
        """Снимает первую совпавшую запись пропуска или добавляет новую"""
        for position, card in enumerate(self._skipped):
            if _matches(card, page_index, row, column, card_type):
                logger.debug(f"Unskip card page={page_index} row={row} col={column}")
                return self._with(skipped=self._skipped[:position] + self._skipped[position + 1:])
        logger.debug(f"Skip card page={page_index} row={row} col={column}")
        return self._with(skipped=self._skipped + (SkippedCard(page_index, row, column, card_type),))

    def _add_missing(self, cells: Iterable[Tuple[int, int, int, Optional[CardType]]]) -> 'SkipAndOverrideRegistry':
        skipped = list(self._skipped)
        for page_index, row, column, card_type in cells:
            if not is_card_skipped(page_index, row, column, skipped, card_type):
                skipped.append(SkippedCard(page_index, row, column, card_type))
        return self._with(skipped=tuple(skipped))

    def skip_all_in_row(self, page_index: int, row: int, grid: GridSettings,
                        card_type: Optional[CardType] = None) -> 'SkipAndOverrideRegistry':
        return self._add_missing((page_index, row, column, card_type) for column in range(grid.columns))

    def skip_all_in_column(self, page_index: int, column: int, grid: GridSettings,
                           card_type: Optional[CardType] = None) -> 'SkipAndOverrideRegistry':
        return self._add_missing((page_index, row, column, card_type) for row in range(grid.rows))

    def clear_skips(self) -> 'SkipAndOverrideRegistry':
        return self._with(skipped=())

    # Пары при фальцовке по корешку

    def find_paired_card(self, page_index: int, row: int, column: int,
                         grid: GridSettings, pdf_mode: PdfMode) -> Optional[PairedCard]:
        if not isinstance(pdf_mode, GutterFold):
            return None
        extraction_grid = ExtractionGrid(grid)
        pair = extraction_grid.gutter_pair(row, column, pdf_mode.orientation)
        if pair is None:
            return None
        pair_row, pair_column = pair
        return PairedCard(page_index, pair_row, pair_column,
                          extraction_grid.gutter_half(pair_row, pair_column, pdf_mode.orientation))

    def toggle_skip_with_pairing(self, page_index: int, row: int, column: int,
                                 grid: GridSettings, pdf_mode: PdfMode,
                                 card_type: Optional[CardType] = None) -> 'SkipAndOverrideRegistry':
        """Переключает ячейку и приводит парную ячейку к тому же состоянию"""
        registry = self.toggle_skip(page_index, row, column, card_type)
        pair = registry.find_paired_card(page_index, row, column, grid, pdf_mode)
        if pair is None:
            return registry

        clicked_skipped = registry.is_skipped(page_index, row, column, card_type)
        pair_skipped = registry.is_skipped(pair.page_index, pair.grid_row, pair.grid_column, pair.card_type)
        if clicked_skipped != pair_skipped:
            registry = registry.toggle_skip(pair.page_index, pair.grid_row, pair.grid_column, pair.card_type)
        return registry

    def _with_pairs(self, cells, grid: GridSettings, pdf_mode: PdfMode):
        for page_index, row, column, card_type in cells:
            yield page_index, row, column, card_type
            pair = self.find_paired_card(page_index, row, column, grid, pdf_mode)
            if pair is not None:
                yield pair.page_index, pair.grid_row, pair.grid_column, pair.card_type

    def skip_all_in_row_with_pairing(self, page_index: int, row: int, grid: GridSettings,
                                     pdf_mode: PdfMode,
                                     card_type: Optional[CardType] = None) -> 'SkipAndOverrideRegistry':
        cells = [(page_index, row, column, card_type) for column in range(grid.columns)]
        return self._add_missing(self._with_pairs(cells, grid, pdf_mode))

    def skip_all_in_column_with_pairing(self, page_index: int, column: int, grid: GridSettings,
                                        pdf_mode: PdfMode,
                                        card_type: Optional[CardType] = None) -> 'SkipAndOverrideRegistry':
        cells = [(page_index, row, column, card_type) for row in range(grid.rows)]
        return self._add_missing(self._with_pairs(cells, grid, pdf_mode))

    # Ручное переопределение типа

    def get_override(self, page_index: int, row: int, column: int) -> Optional[CardType]:
        override = find_override(page_index, row, column, self._overrides)
        return override.card_type if override else None

    def set_override(self, page_index: int, row: int, column: int,
                     card_type: CardType) -> 'SkipAndOverrideRegistry':
        remaining = self.remove_override(page_index, row, column)._overrides
        return self._with(overrides=remaining + (CardTypeOverride(page_index, row, column, card_type),))

    def remove_override(self, page_index: int, row: int, column: int) -> 'SkipAndOverrideRegistry':
        remaining = tuple(
            override for override in self._overrides
            if (override.page_index, override.grid_row, override.grid_column) != (page_index, row, column)
        )
        return self._with(overrides=remaining)

    def toggle_override(self, page_index: int, row: int, column: int) -> 'SkipAndOverrideRegistry':
        """Цикл: нет -> лицевая -> оборотная -> нет"""
        current = self.get_override(page_index, row, column)
        if current is None:
            return self.set_override(page_index, row, column, CardType.FRONT)
        if current == CardType.FRONT:
            return self.set_override(page_index, row, column, CardType.BACK)
        return self.remove_override(page_index, row, column)

    def clear_overrides(self) -> 'SkipAndOverrideRegistry':
        return self._with(overrides=())
