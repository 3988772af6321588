# -*- coding: utf-8 -*-
# core/validation.py
"""
Проверка настроек извлечения перед обработкой
"""
import logging

from .extraction_grid import ExtractionGrid
from .models import (
    Duplex, ExtractionSettings, GutterFold, GutterOrientation, PdfMode,
    ValidationResult
)

logger = logging.getLogger(__name__)


def validate_extraction_settings(settings: ExtractionSettings, pdf_mode: PdfMode) -> ValidationResult:
    result = ValidationResult()
    grid = ExtractionGrid(settings.grid)

    crop = settings.crop
    if min(crop.top, crop.right, crop.bottom, crop.left) < 0:
        result.add_error("Crop values cannot be negative")

    if settings.gutter_width and settings.gutter_width < 0:
        result.add_error("Gutter width cannot be negative")

    if isinstance(pdf_mode, GutterFold):
        if pdf_mode.orientation == GutterOrientation.VERTICAL and grid.columns % 2:
            result.add_warning(f"Vertical gutter-fold expects an even number of columns, got {grid.columns}")
        if pdf_mode.orientation == GutterOrientation.HORIZONTAL and grid.rows % 2:
            result.add_warning(f"Horizontal gutter-fold expects an even number of rows, got {grid.rows}")
    elif settings.gutter_width:
        result.add_warning("Gutter width is only used in gutter-fold mode")

    if isinstance(pdf_mode, Duplex):
        dimensions = settings.page_dimensions
        if dimensions is not None and not dimensions.is_valid:
            result.add_warning(
                f"Page dimensions {dimensions.width}x{dimensions.height} are invalid; "
                "duplex back numbering will assume a portrait page"
            )

    for entry in settings.skipped_cards:
        if not grid.contains(entry.grid_row, entry.grid_column):
            result.add_warning(
                f"Skipped card at page {entry.page_index}, row {entry.grid_row}, "
                f"column {entry.grid_column} is outside the {grid.rows}x{grid.columns} grid"
            )
    for entry in settings.card_type_overrides:
        if not grid.contains(entry.grid_row, entry.grid_column):
            result.add_warning(
                f"Card type override at page {entry.page_index}, row {entry.grid_row}, "
                f"column {entry.grid_column} is outside the {grid.rows}x{grid.columns} grid"
            )

    if not result.is_valid:
        logger.warning(f"Extraction settings invalid: {'; '.join(result.errors)}")
    return result
