"""
Services for Card Sheet Splitter
"""

from .import_service import ImportService, BatchDecodeResult
from .settings_service import SettingsService
from .workflow_session import WorkflowSession

__all__ = [
    'ImportService',
    'BatchDecodeResult',
    'SettingsService',
    'WorkflowSession'
]
