# -*- coding: utf-8 -*-
# core/extraction_grid.py
"""
Геометрия сетки извлечения: ячейки, порядок обхода и зеркалирование
"""
import logging
from typing import Iterator, Optional, Tuple

from .models import (
    CardRegion, CardType, CropSettings, Duplex, FlipEdge, GridSettings,
    GutterFold, GutterOrientation, MirrorAxis, PageDimensions,
    PageOrientation, PdfMode
)

logger = logging.getLogger(__name__)


def page_orientation(dimensions: Optional[PageDimensions]) -> Optional[PageOrientation]:
    """Ориентация страницы, None если размеры отсутствуют или некорректны"""
    if dimensions is None or not dimensions.is_valid:
        return None
    if dimensions.width > dimensions.height:
        return PageOrientation.LANDSCAPE
    return PageOrientation.PORTRAIT


def duplex_mirror_axis(orientation: PageOrientation, flip_edge: FlipEdge) -> MirrorAxis:
    # Книжная: короткий край -> строки, длинный -> столбцы. Альбомная наоборот.
    if orientation == PageOrientation.PORTRAIT:
        return MirrorAxis.ROWS if flip_edge == FlipEdge.SHORT else MirrorAxis.COLUMNS
    return MirrorAxis.COLUMNS if flip_edge == FlipEdge.SHORT else MirrorAxis.ROWS


class ExtractionGrid:
    def __init__(self, grid: GridSettings):
        self.grid = grid

    @property
    def rows(self) -> int:
        return self.grid.rows

    @property
    def columns(self) -> int:
        return self.grid.columns

    @property
    def cards_per_page(self) -> int:
        return self.grid.cards_per_page

    def cell_at(self, card_on_page: int) -> Tuple[int, int]:
        return card_on_page // self.columns, card_on_page % self.columns

    def linear_index(self, row: int, column: int) -> int:
        return row * self.columns + column

    def contains(self, row: int, column: int) -> bool:
        return 0 <= row < self.rows and 0 <= column < self.columns

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Ячейки страницы в порядке растрового обхода"""
        for row in range(self.rows):
            for column in range(self.columns):
                yield row, column

    def locate(self, card_index: int) -> Tuple[int, int, int]:
        """Глобальный индекс карты -> (страница, строка, столбец)"""
        page_index = card_index // self.cards_per_page
        row, column = self.cell_at(card_index % self.cards_per_page)
        return page_index, row, column

    def mirrored_cell(self, row: int, column: int, axis: MirrorAxis) -> Tuple[int, int]:
        if axis == MirrorAxis.ROWS:
            return self.rows - 1 - row, column
        if axis == MirrorAxis.COLUMNS:
            return row, self.columns - 1 - column
        return row, column

    # Фальцовка по корешку

    def gutter_half(self, row: int, column: int, orientation: GutterOrientation) -> CardType:
        """Лицевая половина: левая (вертикально) или верхняя (горизонтально)"""
        if orientation == GutterOrientation.VERTICAL:
            return CardType.FRONT if column < self.columns / 2 else CardType.BACK
        return CardType.FRONT if row < self.rows / 2 else CardType.BACK

    def gutter_pair(self, row: int, column: int, orientation: GutterOrientation) -> Optional[Tuple[int, int]]:
        """Парная ячейка через корешок; None если ячейка отражается сама в себя"""
        if orientation == GutterOrientation.VERTICAL:
            pair = (row, self.columns - 1 - column)
        else:
            pair = (self.rows - 1 - row, column)
        if pair == (row, column):
            return None
        return pair

    def base_card_type(self, row: int, column: int, page_type: CardType, pdf_mode: PdfMode) -> CardType:
        if isinstance(pdf_mode, Duplex):
            return page_type
        if isinstance(pdf_mode, GutterFold):
            return self.gutter_half(row, column, pdf_mode.orientation)
        return CardType.FRONT

    def card_region(self, page_width: float, page_height: float, row: int, column: int,
                    crop: CropSettings, pdf_mode: PdfMode, gutter_width: float = 0) -> Optional[CardRegion]:
        """
        Прямоугольник ячейки в пикселях страницы с учетом обрезки и корешка.
        None если после обрезки площадь пуста или ячейка вне сетки.
        """
        if not self.contains(row, column):
            return None

        cropped_width = page_width - crop.left - crop.right
        cropped_height = page_height - crop.top - crop.bottom
        if cropped_width <= 0 or cropped_height <= 0:
            logger.warning(f"Crop leaves no usable area on {page_width}x{page_height} page")
            return None

        gutter = gutter_width or 0
        if isinstance(pdf_mode, GutterFold) and gutter > 0:
            if pdf_mode.orientation == GutterOrientation.VERTICAL:
                half_width = (cropped_width - gutter) / 2
                card_width = half_width / (self.columns / 2)
                card_height = cropped_height / self.rows
                half_columns = self.columns // 2
                if column < half_columns:
                    x = crop.left + column * card_width
                else:
                    x = crop.left + half_width + gutter + (column - half_columns) * card_width
                y = crop.top + row * card_height
            else:
                half_height = (cropped_height - gutter) / 2
                card_width = cropped_width / self.columns
                card_height = half_height / (self.rows / 2)
                half_rows = self.rows // 2
                x = crop.left + column * card_width
                if row < half_rows:
                    y = crop.top + row * card_height
                else:
                    y = crop.top + half_height + gutter + (row - half_rows) * card_height
            if card_width <= 0 or card_height <= 0:
                logger.warning(f"Gutter width {gutter} leaves no room for cards")
                return None
            return CardRegion(x, y, card_width, card_height)

        card_width = cropped_width / self.columns
        card_height = cropped_height / self.rows
        return CardRegion(crop.left + column * card_width, crop.top + row * card_height,
                          card_width, card_height)
