"""
Core module for Card Sheet Splitter
"""

from .models import (
    CardType, PageType, FileKind, FlipEdge, GutterOrientation, GroupKind,
    Simplex, Duplex, GutterFold, GridSettings, CropSettings, PageDimensions,
    SkippedCard, CardTypeOverride, ExtractionSettings, FileSource, DecodedFile,
    Page, PageGroup, PageRecord, CardInfo, CardEntry, ValidationResult
)
from .exceptions import (
    CardSplitterException, FileImportError, PageOrderError,
    GroupOperationError, SettingsImportError, ValidationError
)
from .file_repository import FileRepository
from .page_model import PageModel
from .extraction_grid import ExtractionGrid
from .card_skipping import SkipAndOverrideRegistry
from .card_identifier import CardIdentifier
from .page_groups import PageGroupManager
from .settings_hierarchy import SettingsHierarchyResolver
from .workflow_settings import WorkflowSettings

__all__ = [
    'CardType',
    'PageType',
    'FileKind',
    'FlipEdge',
    'GutterOrientation',
    'GroupKind',
    'Simplex',
    'Duplex',
    'GutterFold',
    'GridSettings',
    'CropSettings',
    'PageDimensions',
    'SkippedCard',
    'CardTypeOverride',
    'ExtractionSettings',
    'FileSource',
    'DecodedFile',
    'Page',
    'PageGroup',
    'PageRecord',
    'CardInfo',
    'CardEntry',
    'ValidationResult',
    'CardSplitterException',
    'FileImportError',
    'PageOrderError',
    'GroupOperationError',
    'SettingsImportError',
    'ValidationError',
    'FileRepository',
    'PageModel',
    'ExtractionGrid',
    'SkipAndOverrideRegistry',
    'CardIdentifier',
    'PageGroupManager',
    'SettingsHierarchyResolver',
    'WorkflowSettings'
]
