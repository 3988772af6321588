# -*- coding: utf-8 -*-
# core/config.py
import copy
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List
import logging

from .models import (
    CropSettings, Duplex, ExtractionSettings, FlipEdge, GridSettings,
    GutterFold, GutterOrientation, PdfMode
)

logger = logging.getLogger(__name__)

EXTRACTION_DPI = 300
SCREEN_DPI = 72

DEFAULT_PDF_MODE: PdfMode = Duplex(FlipEdge.SHORT)

DEFAULT_GROUP_ID = 'default'
DEFAULT_GROUP_NAME = 'Default Group'
DEFAULT_GROUP_COLOR = '#6b7280'
NEW_GROUP_COLOR = '#3b82f6'
MAX_GROUP_NAME_LENGTH = 50

GROUP_COLORS = [
    '#3b82f6', '#ef4444', '#10b981', '#f59e0b',
    '#8b5cf6', '#ec4899', '#14b8a6', '#f97316',
]

SUPPORTED_EXTENSIONS = {'.pdf', '.png', '.jpg', '.jpeg'}
IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg'}

DEFAULT_OUTPUT_SETTINGS: Dict[str, Any] = {
    'pageSize': {'width': 3.5, 'height': 3.5},
    'offset': {'horizontal': 0, 'vertical': 0},
    'cardSize': {'widthInches': 2.5, 'heightInches': 3.5},
    'cardScalePercent': 100,
    'bleedMarginInches': 0,
    'rotation': {'front': 0, 'back': 0},
    'cardImageSizingMode': 'actual-size',
    'spacing': {'horizontal': 0, 'vertical': 0},
    'cardAlignment': 'center',
    'includeColorCalibration': False,
}

DEFAULT_COLOR_ADJUSTMENTS: Dict[str, float] = {
    'brightness': 0,
    'contrast': 1.0,
    'saturation': 0,
    'hue': 0,
    'gamma': 1.0,
    'vibrance': 0,
    'redMultiplier': 1.0,
    'greenMultiplier': 1.0,
    'blueMultiplier': 1.0,
    'shadows': 0,
    'highlights': 0,
    'midtoneBalance': 0,
    'blackPoint': 0,
    'whitePoint': 255,
    'outputBlack': 0,
    'outputWhite': 255,
}

DEFAULT_COLOR_SETTINGS: Dict[str, Any] = {
    'selectedRegion': None,
    'gridConfig': {'columns': 4, 'rows': 4},
    'transformations': {
        'horizontal': {'type': 'brightness', 'min': -20, 'max': 20},
        'vertical': {'type': 'contrast', 'min': 0.8, 'max': 1.3},
    },
    'selectedPreset': None,
    'finalAdjustments': DEFAULT_COLOR_ADJUSTMENTS,
}


def get_default_grid(pdf_mode: PdfMode) -> GridSettings:
    """Сетка по умолчанию для режима печати"""
    if isinstance(pdf_mode, Duplex):
        return GridSettings(rows=2, columns=3)
    if isinstance(pdf_mode, GutterFold):
        if pdf_mode.orientation == GutterOrientation.VERTICAL:
            return GridSettings(rows=4, columns=2)
        return GridSettings(rows=2, columns=4)
    return GridSettings(rows=2, columns=3)


def get_default_rotation(pdf_mode: PdfMode) -> Dict[str, int]:
    """Поворот лицевой и оборотной стороны по умолчанию"""
    if isinstance(pdf_mode, Duplex) and pdf_mode.flip_edge == FlipEdge.LONG:
        return {'front': 0, 'back': 180}
    if isinstance(pdf_mode, GutterFold) and pdf_mode.orientation == GutterOrientation.HORIZONTAL:
        return {'front': 0, 'back': 180}
    return {'front': 0, 'back': 0}


def get_default_extraction_settings(pdf_mode: PdfMode = DEFAULT_PDF_MODE) -> ExtractionSettings:
    return ExtractionSettings(
        grid=get_default_grid(pdf_mode),
        crop=CropSettings(),
        image_rotation={'front': 0, 'back': 0},
    )


def get_default_output_settings(pdf_mode: PdfMode = DEFAULT_PDF_MODE) -> Dict[str, Any]:
    settings = copy.deepcopy(DEFAULT_OUTPUT_SETTINGS)
    settings['rotation'] = get_default_rotation(pdf_mode)
    return settings


def get_default_color_settings() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_COLOR_SETTINGS)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class AppConfig:
    app_name: str = "Card Sheet Splitter"
    version: str = "1.0.0"
    debug: bool = False
    max_upload_size: int = 100 * 1024 * 1024  # 100MB
    allowed_extensions: List[str] = field(default_factory=lambda: sorted(SUPPORTED_EXTENSIONS))
    log_folder: str = "logs"
    settings_folder: str = "settings"
    secret_key: str = "change-me-in-production"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Конфигурация из переменных окружения CARD_SPLITTER_*"""
        config = cls()
        config.debug = _env_bool('CARD_SPLITTER_DEBUG', config.debug)
        config.log_folder = os.getenv('CARD_SPLITTER_LOG_FOLDER', config.log_folder)
        config.settings_folder = os.getenv('CARD_SPLITTER_SETTINGS_FOLDER', config.settings_folder)
        config.secret_key = os.getenv('CARD_SPLITTER_SECRET_KEY', config.secret_key)
        max_upload = os.getenv('CARD_SPLITTER_MAX_UPLOAD_MB')
        if max_upload:
            try:
                config.max_upload_size = int(max_upload) * 1024 * 1024
            except ValueError:
                logger.warning(f"Ignoring invalid CARD_SPLITTER_MAX_UPLOAD_MB={max_upload!r}")
        logger.debug(f"App config: debug={config.debug}, log_folder={config.log_folder}")
        return config

