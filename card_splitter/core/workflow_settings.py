# -*- coding: utf-8 -*-
# core/workflow_settings.py
"""
Документ WorkflowSettings: экспорт и импорт настроек обработки.

Имя и содержимое исходного PDF в документ не попадают.
"""
import copy
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .config import DEFAULT_PDF_MODE, get_default_color_settings, get_default_extraction_settings, \
    get_default_output_settings
from .exceptions import SettingsImportError, ValidationError
from .models import ExtractionSettings, PdfMode, pdf_mode_from_dict, pdf_mode_to_dict

logger = logging.getLogger(__name__)

SETTINGS_VERSION = '1.0'

EXTRACTION_FIELDS = ('crop', 'grid', 'gutterWidth', 'cardCrop', 'imageRotation', 'skippedCards', 'cardTypeOverrides')
OUTPUT_FIELDS = (
    'pageSize', 'offset', 'cardSize', 'cardScalePercent', 'bleedMarginInches', 'rotation',
    'cardImageSizingMode', 'spacing', 'cardAlignment', 'includeColorCalibration',
)

LABEL_PDF_MODE = 'PDF Mode'
LABEL_EXTRACTION = 'Extraction Settings (grid layout, cropping)'
LABEL_OUTPUT = 'Output Settings (page size, card dimensions, positioning)'
LABEL_COLOR = 'Color Calibration Settings'
LABEL_PAGE_SETTINGS = 'Page Settings (page types and skip flags)'

_EXTENSION_PATTERN = re.compile(r'\.(pdf|png|jpg|jpeg)$', re.IGNORECASE)


def _pick(data: Dict[str, Any], keys: Sequence[str]) -> Dict[str, Any]:
    return {key: copy.deepcopy(data[key]) for key in keys if key in data}


@dataclass
class WorkflowSettings:
    pdf_mode: PdfMode = DEFAULT_PDF_MODE
    page_settings: List[Dict[str, Any]] = field(default_factory=list)
    extraction_settings: Dict[str, Any] = field(default_factory=dict)
    output_settings: Dict[str, Any] = field(default_factory=dict)
    color_settings: Dict[str, Any] = field(default_factory=dict)
    saved_at: Optional[str] = None
    version: Optional[str] = SETTINGS_VERSION

    @classmethod
    def build(cls, pdf_mode: PdfMode, page_settings: Sequence[Dict[str, Any]],
              extraction: ExtractionSettings, output: Dict[str, Any],
              color: Dict[str, Any]) -> 'WorkflowSettings':
        return cls(
            pdf_mode=pdf_mode,
            page_settings=[copy.deepcopy(dict(page)) for page in page_settings],
            extraction_settings=_pick(extraction.to_dict(), EXTRACTION_FIELDS),
            output_settings=_pick(output, OUTPUT_FIELDS),
            color_settings=copy.deepcopy(dict(color)),
            saved_at=datetime.now(timezone.utc).isoformat(),
            version=SETTINGS_VERSION,
        )

    @classmethod
    def defaults(cls, pdf_mode: PdfMode = DEFAULT_PDF_MODE) -> 'WorkflowSettings':
        return cls(
            pdf_mode=pdf_mode,
            extraction_settings=_pick(get_default_extraction_settings(pdf_mode).to_dict(), EXTRACTION_FIELDS),
            output_settings=get_default_output_settings(pdf_mode),
            color_settings=get_default_color_settings(),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'pdfMode': pdf_mode_to_dict(self.pdf_mode),
            'pageSettings': copy.deepcopy(self.page_settings),
            'extractionSettings': copy.deepcopy(self.extraction_settings),
            'outputSettings': copy.deepcopy(self.output_settings),
            'colorSettings': copy.deepcopy(self.color_settings),
        }
        if self.saved_at is not None:
            data['savedAt'] = self.saved_at
        if self.version is not None:
            data['version'] = self.version
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> 'WorkflowSettings':
        if not isinstance(data, dict):
            raise SettingsImportError("Settings document must be a JSON object")
        missing = [key for key in ('pdfMode', 'extractionSettings', 'outputSettings') if not data.get(key)]
        if missing:
            raise SettingsImportError(f"Invalid settings file: missing {', '.join(missing)}")
        try:
            pdf_mode = pdf_mode_from_dict(data['pdfMode'])
        except ValidationError as e:
            raise SettingsImportError(f"Invalid settings file: {e}") from e
        page_settings = data.get('pageSettings') or []
        if not isinstance(page_settings, list):
            raise SettingsImportError("Invalid settings file: pageSettings must be a list")
        return cls(
            pdf_mode=pdf_mode,
            page_settings=copy.deepcopy(page_settings),
            extraction_settings=copy.deepcopy(data['extractionSettings']),
            output_settings=copy.deepcopy(data['outputSettings']),
            color_settings=copy.deepcopy(data.get('colorSettings') or {}),
            saved_at=data.get('savedAt'),
            version=data.get('version'),
        )

    @classmethod
    def from_json(cls, text: str) -> 'WorkflowSettings':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SettingsImportError(f"Settings file is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def extraction(self) -> ExtractionSettings:
        return ExtractionSettings.from_dict(self.extraction_settings)


@dataclass(frozen=True)
class PageCountMismatch:
    current_page_count: int
    imported_page_count: int


@dataclass
class SettingsImportResult:
    settings: WorkflowSettings
    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    mismatch: Optional[PageCountMismatch] = None

    @property
    def apply_page_settings(self) -> bool:
        return LABEL_PAGE_SETTINGS in self.applied

    def to_dict(self) -> Dict[str, Any]:
        data = {'applied': list(self.applied), 'skipped': list(self.skipped), 'mismatch': None}
        if self.mismatch is not None:
            data['mismatch'] = {
                'currentPageCount': self.mismatch.current_page_count,
                'importedPageCount': self.mismatch.imported_page_count,
            }
        return data


def plan_settings_import(settings: WorkflowSettings, current_page_count: int) -> SettingsImportResult:
    """
    Определяет, какие разделы документа можно применить к текущему файлу.
    При расхождении числа страниц настройки страниц не применяются, а
    расхождение возвращается в результате.
    """
    result = SettingsImportResult(settings=settings)
    result.applied.append(LABEL_PDF_MODE)
    result.applied.append(LABEL_EXTRACTION)
    result.applied.append(LABEL_OUTPUT)
    if settings.color_settings:
        result.applied.append(LABEL_COLOR)

    imported_count = len(settings.page_settings)
    if imported_count == current_page_count:
        if imported_count:
            result.applied.append(LABEL_PAGE_SETTINGS)
    else:
        result.skipped.append(LABEL_PAGE_SETTINGS)
        result.mismatch = PageCountMismatch(current_page_count, imported_count)
        logger.warning(
            f"Settings were saved for {imported_count} pages, current document has "
            f"{current_page_count}; page settings not applied"
        )
    return result


def default_settings_filename(file_names: Sequence[str]) -> str:
    if len(file_names) == 1:
        return f"{_EXTENSION_PATTERN.sub('', file_names[0])}_settings.json"
    if len(file_names) > 1:
        first = _EXTENSION_PATTERN.sub('', file_names[0])
        if len(first) > 20:
            first = first[:20] + '...'
        return f"{first}_and_{len(file_names) - 1}_others_settings.json"
    return 'workflow_settings.json'
