# -*- coding: utf-8 -*-
# core/settings_hierarchy.py
"""
Иерархия настроек: Global -> PageType -> Group -> Page.

Уровни накладываются по очереди, более поздний уровень побеждает, поэтому
итоговый приоритет: Page > Group > PageType > Global. Вложенные словари
объединяются по ключам, остальные значения заменяются целиком.
"""
import copy
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .models import ExtractionSettings, Page, PageGroup, PageType

logger = logging.getLogger(__name__)

SECTIONS = ('extraction', 'output', 'color')


class SettingsLevel(Enum):
    GLOBAL = "global"
    PAGE_TYPE = "pageType"
    GROUP = "group"
    PAGE = "page"


# Порядок наложения: от слабого к сильному
LEVEL_PRECEDENCE = (SettingsLevel.GLOBAL, SettingsLevel.PAGE_TYPE, SettingsLevel.GROUP, SettingsLevel.PAGE)


@dataclass(frozen=True)
class PageTypeSettings:
    page_type: PageType
    display_name: str
    is_processed: bool
    color_scheme: Dict[str, str]
    default_extraction_settings: Optional[Dict[str, Any]] = None
    default_output_settings: Optional[Dict[str, Any]] = None
    default_color_settings: Optional[Dict[str, Any]] = None

    def as_partial(self) -> Dict[str, Any]:
        partial = {}
        if self.default_extraction_settings:
            partial['extraction'] = self.default_extraction_settings
        if self.default_output_settings:
            partial['output'] = self.default_output_settings
        if self.default_color_settings:
            partial['color'] = self.default_color_settings
        return partial


DEFAULT_PAGE_TYPE_SETTINGS: Dict[PageType, PageTypeSettings] = {
    PageType.CARD: PageTypeSettings(
        page_type=PageType.CARD,
        display_name='Card',
        is_processed=True,
        color_scheme={'primary': '#3b82f6', 'background': '#dbeafe', 'text': '#1e40af'},
        default_extraction_settings={
            'grid': {'rows': 3, 'columns': 3},
            'crop': {'left': 0, 'right': 0, 'top': 0, 'bottom': 0},
            'cardCrop': {'top': 0, 'right': 0, 'bottom': 0, 'left': 0},
        },
        default_output_settings={
            'cardSize': {'widthInches': 2.5, 'heightInches': 3.5},
            'cardScalePercent': 100,
            'bleedMarginInches': 0.125,
            'cardImageSizingMode': 'fit-to-card',
            'cardAlignment': 'center',
            'includeColorCalibration': False,
        },
    ),
    PageType.RULE: PageTypeSettings(
        page_type=PageType.RULE,
        display_name='Rule',
        is_processed=True,
        color_scheme={'primary': '#10b981', 'background': '#d1fae5', 'text': '#047857'},
        default_extraction_settings={
            'grid': {'rows': 1, 'columns': 1},
            'crop': {'left': 0, 'right': 0, 'top': 0, 'bottom': 0},
            'cardCrop': {'top': 0, 'right': 0, 'bottom': 0, 'left': 0},
        },
        default_output_settings={
            'cardSize': {'widthInches': 8.5, 'heightInches': 11},
            'cardScalePercent': 95,
            'bleedMarginInches': 0.25,
            'cardImageSizingMode': 'fit-to-card',
            'cardAlignment': 'center',
            'includeColorCalibration': False,
        },
    ),
    PageType.SKIP: PageTypeSettings(
        page_type=PageType.SKIP,
        display_name='Skip',
        is_processed=False,
        color_scheme={'primary': '#6b7280', 'background': '#f3f4f6', 'text': '#374151'},
    ),
}


def get_page_type_settings(page_type: PageType,
                           custom: Optional[Mapping[PageType, PageTypeSettings]] = None) -> PageTypeSettings:
    if custom and page_type in custom:
        return custom[page_type]
    return DEFAULT_PAGE_TYPE_SETTINGS[page_type]


def apply_page_type(page: Page, page_type: PageType) -> Page:
    """Смена типа страницы; тип skip также исключает страницу из обработки"""
    if page_type == PageType.SKIP:
        return replace(page, page_type=page_type, skip=True)
    return replace(page, page_type=page_type)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def page_level_settings(page: Optional[Page]) -> Dict[str, Any]:
    """Настройки уровня страницы: поворот, масштаб и собственная обрезка"""
    if page is None:
        return {}
    extraction = {}
    if page.rotation is not None:
        extraction['pageRotation'] = page.rotation
    if page.scale is not None:
        extraction['pageScale'] = page.scale
    if page.custom_crop is not None:
        extraction['crop'] = page.custom_crop.to_dict()
    return {'extraction': extraction} if extraction else {}


@dataclass(frozen=True)
class SettingsConflict:
    section: str
    key: str
    values: Dict[SettingsLevel, Any]
    resolved_level: SettingsLevel
    resolved_value: Any


@dataclass
class ResolvedSettings:
    extraction: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)
    color: Dict[str, Any] = field(default_factory=dict)
    sources: Dict[str, SettingsLevel] = field(default_factory=dict)
    conflicts: List[SettingsConflict] = field(default_factory=list)
    is_processed: bool = True

    def extraction_settings(self) -> ExtractionSettings:
        return ExtractionSettings.from_dict(self.extraction)

    def section(self, name: str) -> Dict[str, Any]:
        return getattr(self, name)


class SettingsHierarchyResolver:
    def __init__(self, global_settings: Mapping[str, Mapping[str, Any]],
                 page_type_settings: Optional[Mapping[PageType, PageTypeSettings]] = None):
        self.global_settings = {name: dict(global_settings.get(name) or {}) for name in SECTIONS}
        self.page_type_settings = dict(page_type_settings or {})

    def _layers(self, page: Optional[Page], group: Optional[PageGroup]):
        layers = [(SettingsLevel.GLOBAL, self.global_settings)]
        if page is not None and page.page_type in self.page_type_settings:
            layers.append((SettingsLevel.PAGE_TYPE, self.page_type_settings[page.page_type].as_partial()))
        if group is not None and group.settings:
            layers.append((SettingsLevel.GROUP, group.settings))
        page_layer = page_level_settings(page)
        if page_layer:
            layers.append((SettingsLevel.PAGE, page_layer))
        return layers

    def resolve(self, page: Optional[Page] = None, group: Optional[PageGroup] = None) -> ResolvedSettings:
        result = ResolvedSettings()
        layers = self._layers(page, group)
        for section in SECTIONS:
            merged: Dict[str, Any] = {}
            defined: Dict[str, Dict[SettingsLevel, Any]] = {}
            for level, partial in layers:
                values = partial.get(section) or {}
                merged = deep_merge(merged, values)
                for key, value in values.items():
                    defined.setdefault(key, {})[level] = value
                    result.sources[f"{section}.{key}"] = level

            for key, by_level in defined.items():
                distinct = []
                for value in by_level.values():
                    if value not in distinct:
                        distinct.append(value)
                if len(distinct) > 1:
                    winner = max(by_level, key=LEVEL_PRECEDENCE.index)
                    result.conflicts.append(SettingsConflict(section, key, dict(by_level), winner, merged[key]))
            setattr(result, section, merged)

        if page is not None:
            result.is_processed = get_page_type_settings(page.page_type, self.page_type_settings).is_processed
        if result.conflicts:
            logger.debug(f"Resolved settings with {len(result.conflicts)} conflicts")
        return result

    def resolve_for_page(self, page: Page, group: Optional[PageGroup] = None) -> ResolvedSettings:
        return self.resolve(page=page, group=group)

    def resolve_for_group(self, group: Optional[PageGroup]) -> ResolvedSettings:
        return self.resolve(group=group)
