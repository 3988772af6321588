"""
Вспомогательные функции для web-интерфейса
"""
import logging
from typing import Any, Dict, Optional

from flask import current_app
from werkzeug.utils import secure_filename

from card_splitter.core.models import CardType
from card_splitter.services.settings_service import SettingsService
from card_splitter.services.workflow_session import WorkflowSession

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'card_splitter'


def read_uploaded_file(file) -> Optional[tuple]:
    """Имя и содержимое загруженного файла; None если файл не выбран"""
    if not file or not file.filename:
        return None
    name = secure_filename(file.filename) or file.filename
    return name, file.read()


def get_session() -> WorkflowSession:
    return current_app.extensions[EXTENSION_KEY]


def get_settings_service() -> SettingsService:
    return SettingsService(current_app.config.get('SETTINGS_FOLDER', 'settings'))


def parse_card_type(value) -> Optional[CardType]:
    return CardType.parse(value) if value else None


def require_int(data: Dict[str, Any], key: str) -> int:
    if key not in data:
        raise KeyError(key)
    return int(data[key])
