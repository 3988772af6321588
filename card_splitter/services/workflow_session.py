# -*- coding: utf-8 -*-
# services/workflow_session.py
"""
Рабочая сессия: страницы, группы, пропуски и настройки одного документа
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from card_splitter.core.card_identifier import CardIdentifier
from card_splitter.core.card_skipping import SkipAndOverrideRegistry
from card_splitter.core.config import (
    DEFAULT_GROUP_ID, DEFAULT_PDF_MODE, get_default_color_settings,
    get_default_extraction_settings, get_default_grid, get_default_output_settings,
    get_default_rotation
)
from card_splitter.core.exceptions import SettingsImportError, ValidationError
from card_splitter.core.models import (
    CardType, CropSettings, DecodedFile, ExtractionSettings, GutterFold, Page,
    PageRecord, PageType, PdfMode, ValidationResult
)
from card_splitter.core.page_groups import PageGroupManager
from card_splitter.core.page_model import ImportResult, PageModel
from card_splitter.core.settings_hierarchy import (
    PageTypeSettings, ResolvedSettings, SettingsHierarchyResolver, deep_merge
)
from card_splitter.core.validation import validate_extraction_settings
from card_splitter.core.workflow_settings import (
    SettingsImportResult, WorkflowSettings, plan_settings_import
)

logger = logging.getLogger(__name__)


class WorkflowSession:
    def __init__(self, pdf_mode: PdfMode = DEFAULT_PDF_MODE):
        self.page_model = PageModel(pdf_mode)
        self.groups = PageGroupManager(pdf_mode=pdf_mode)
        self.extraction: ExtractionSettings = get_default_extraction_settings(pdf_mode)
        self.output: Dict[str, Any] = get_default_output_settings(pdf_mode)
        self.color: Dict[str, Any] = get_default_color_settings()
        self.page_type_settings: Dict[PageType, PageTypeSettings] = {}

    @property
    def pdf_mode(self) -> PdfMode:
        return self.groups.pdf_mode

    @property
    def pages(self) -> Sequence[Page]:
        return self.page_model.pages

    def set_pdf_mode(self, pdf_mode: PdfMode, reset_layout: bool = True):
        """Смена глобального режима печати; сетка и поворот сбрасываются на значения режима"""
        self.page_model.pdf_mode = pdf_mode
        self.groups.set_processing_mode(DEFAULT_GROUP_ID, pdf_mode)
        if reset_layout:
            self.extraction = self.extraction.with_changes(grid=get_default_grid(pdf_mode))
            self.output = dict(self.output, rotation=get_default_rotation(pdf_mode))
        logger.info(f"PDF mode set to {pdf_mode}")

    # Файлы и страницы

    def import_files(self, decoded_files: Sequence[DecodedFile], replace_existing: bool = False) -> ImportResult:
        if replace_existing or not self.page_model.pages:
            # Пропуски и переопределения адресуют страницы прежнего документа
            self.groups = PageGroupManager(pdf_mode=self.pdf_mode)
            self.extraction = self.extraction.with_changes(skipped_cards=(), card_type_overrides=())
            return self.page_model.combine(decoded_files)
        return self.page_model.add_files(decoded_files)

    def remove_file(self, name: str):
        self.groups.remap_pages(self.page_model.remove_file(name))

    def reorder_pages(self, from_index: int, to_index: int):
        self.groups.remap_pages(self.page_model.reorder(from_index, to_index))

    def reset_page_order(self):
        self.groups.remap_pages(self.page_model.reset_to_import_order())

    def page_records(self) -> List[PageRecord]:
        """Все страницы в порядке отображения с файлом и группой"""
        sources = {source.name: source for source in self.page_model.files}
        records = []
        for page_index, page in enumerate(self.page_model.pages):
            group = self.groups.group_for_page(page_index)
            records.append(PageRecord(page_index, page, sources.get(page.source_file), group.id, group.name))
        return records

    def group_pages(self, group_id: str = DEFAULT_GROUP_ID) -> List[Page]:
        """Активные страницы группы в порядке отображения"""
        pages = self.page_model.pages
        indices = sorted(self.groups.group_page_indices(group_id, len(pages)))
        return [pages[index] for index in indices if pages[index].is_active]

    # Настройки

    def resolver(self) -> SettingsHierarchyResolver:
        return SettingsHierarchyResolver(
            {'extraction': self.extraction.to_dict(), 'output': self.output, 'color': self.color},
            self.page_type_settings
        )

    def resolved_settings(self, group_id: str = DEFAULT_GROUP_ID, page_index: Optional[int] = None) -> ResolvedSettings:
        group = self.groups.get_group(group_id)
        if page_index is not None:
            return self.resolver().resolve_for_page(self.page_model.pages[page_index], group)
        return self.resolver().resolve_for_group(group)

    def group_extraction(self, group_id: str = DEFAULT_GROUP_ID) -> ExtractionSettings:
        return self.resolved_settings(group_id).extraction_settings()

    def card_identifier(self, group_id: str = DEFAULT_GROUP_ID) -> CardIdentifier:
        return CardIdentifier(
            self.group_pages(group_id),
            self.group_extraction(group_id),
            self.groups.processing_mode_for(group_id)
        )

    def validate(self, group_id: str = DEFAULT_GROUP_ID) -> ValidationResult:
        return validate_extraction_settings(self.group_extraction(group_id), self.groups.processing_mode_for(group_id))

    def update_extraction(self, changes: Mapping[str, Any]):
        self.extraction = ExtractionSettings.from_dict(deep_merge(self.extraction.to_dict(), changes))

    def update_output(self, changes: Mapping[str, Any]):
        self.output = deep_merge(self.output, changes)

    # Пропуски и переопределения

    def registry(self, group_id: str = DEFAULT_GROUP_ID) -> SkipAndOverrideRegistry:
        return SkipAndOverrideRegistry.from_extraction(self.group_extraction(group_id))

    def _store_registry(self, group_id: str, registry: SkipAndOverrideRegistry):
        group = self.groups.get_group(group_id)
        if group is None or group.id == DEFAULT_GROUP_ID:
            self.extraction = registry.apply_to(self.extraction)
            return
        # Пропуски явной группы хранятся в ее собственных настройках
        lists = {
            'skippedCards': [card.to_dict() for card in registry.skipped_cards],
            'cardTypeOverrides': [override.to_dict() for override in registry.overrides],
        }
        settings = dict(group.settings or {})
        settings['extraction'] = dict(settings.get('extraction') or {}, **lists)
        self.groups.update_group_settings(group.id, settings)

    def toggle_skip(self, page_index: int, row: int, column: int,
                    card_type: Optional[CardType] = None, group_id: str = DEFAULT_GROUP_ID):
        registry = self.registry(group_id)
        pdf_mode = self.groups.processing_mode_for(group_id)
        if isinstance(pdf_mode, GutterFold):
            grid = self.group_extraction(group_id).grid
            registry = registry.toggle_skip_with_pairing(page_index, row, column, grid, pdf_mode, card_type)
        else:
            registry = registry.toggle_skip(page_index, row, column, card_type)
        self._store_registry(group_id, registry)
        return registry

    def skip_row(self, page_index: int, row: int, group_id: str = DEFAULT_GROUP_ID):
        grid = self.group_extraction(group_id).grid
        pdf_mode = self.groups.processing_mode_for(group_id)
        registry = self.registry(group_id).skip_all_in_row_with_pairing(page_index, row, grid, pdf_mode)
        self._store_registry(group_id, registry)
        return registry

    def skip_column(self, page_index: int, column: int, group_id: str = DEFAULT_GROUP_ID):
        grid = self.group_extraction(group_id).grid
        pdf_mode = self.groups.processing_mode_for(group_id)
        registry = self.registry(group_id).skip_all_in_column_with_pairing(page_index, column, grid, pdf_mode)
        self._store_registry(group_id, registry)
        return registry

    def toggle_override(self, page_index: int, row: int, column: int, group_id: str = DEFAULT_GROUP_ID):
        registry = self.registry(group_id).toggle_override(page_index, row, column)
        self._store_registry(group_id, registry)
        return registry

    def clear_skips(self, group_id: str = DEFAULT_GROUP_ID):
        self._store_registry(group_id, self.registry(group_id).clear_skips())

    # Экспорт и импорт

    def export_settings(self) -> WorkflowSettings:
        return WorkflowSettings.build(
            self.pdf_mode,
            [page.to_dict() for page in self.page_model.pages],
            self.extraction,
            self.output,
            self.color
        )

    def import_settings(self, settings: WorkflowSettings) -> SettingsImportResult:
        """
        Применение документа настроек. Все разделы разбираются до изменения
        сессии: при ошибке сессия остается прежней.
        """
        result = plan_settings_import(settings, len(self.page_model.pages))
        try:
            extraction = ExtractionSettings.from_dict(
                deep_merge(self.extraction.to_dict(), settings.extraction_settings)
            )
            output = deep_merge(self.output, settings.output_settings)
            color = deep_merge(self.color, settings.color_settings) if settings.color_settings else self.color
            page_changes = []
            if result.apply_page_settings:
                page_changes = [self._page_setting_changes(data) for data in settings.page_settings]
        except (KeyError, ValueError, TypeError, AttributeError, ValidationError) as e:
            logger.warning(f"Settings import rejected: {e}")
            raise SettingsImportError(f"Invalid settings file: {e}") from e

        self.set_pdf_mode(settings.pdf_mode, reset_layout=False)
        self.extraction = extraction
        self.output = output
        self.color = color
        for page_index, changes in enumerate(page_changes):
            if changes:
                self.page_model.update_page(page_index, **changes)
        logger.info(f"Settings imported: applied {result.applied}, skipped {result.skipped}")
        return result

    @staticmethod
    def _page_setting_changes(data: Mapping[str, Any]) -> Dict[str, Any]:
        changes = {}
        if 'skip' in data:
            changes['skip'] = bool(data['skip'])
        if data.get('type') in (CardType.FRONT.value, CardType.BACK.value):
            changes['type'] = CardType(data['type'])
        if data.get('pageType') in [page_type.value for page_type in PageType]:
            changes['page_type'] = PageType(data['pageType'])
        if 'rotation' in data:
            changes['rotation'] = data['rotation']
        if 'scale' in data:
            changes['scale'] = data['scale']
        if data.get('customCrop'):
            changes['custom_crop'] = CropSettings.from_dict(data['customCrop'])
        return changes

    def statistics(self) -> Dict[str, Any]:
        stats = dict(self.page_model.statistics())
        stats.update(self.groups.statistics(len(self.page_model.pages)))
        identifier = self.card_identifier()
        stats['frontCards'] = identifier.count_cards(CardType.FRONT)
        stats['backCards'] = identifier.count_cards(CardType.BACK)
        return stats
