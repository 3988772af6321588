# -*- coding: utf-8 -*-
# services/settings_service.py
import json
import logging
from pathlib import Path
from typing import Sequence, Union

from card_splitter.core.exceptions import SettingsImportError
from card_splitter.core.workflow_settings import WorkflowSettings, default_settings_filename
from card_splitter.utils.helpers import ensure_directory, sanitize_filename

logger = logging.getLogger(__name__)


class SettingsService:
    """Сохранение и загрузка файлов настроек в JSON"""

    def __init__(self, settings_dir: Union[str, Path] = "settings"):
        self.settings_dir = Path(settings_dir)

    def settings_path(self, file_names: Sequence[str], custom_name: str = None) -> Path:
        if custom_name:
            name = sanitize_filename(custom_name)
            if not name.lower().endswith('.json'):
                name += '.json'
        else:
            name = sanitize_filename(default_settings_filename(file_names))
        return self.settings_dir / name

    def save(self, settings: WorkflowSettings, path: Union[str, Path]) -> Path:
        path = Path(path)
        ensure_directory(str(path.parent))
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Настройки сохранены: {path}")
        return path

    def load(self, path: Union[str, Path]) -> WorkflowSettings:
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise SettingsImportError(f"Settings file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise SettingsImportError(f"Settings file is not valid JSON: {e}") from e

        settings = WorkflowSettings.from_dict(data)
        logger.info(f"Настройки загружены: {path}")
        return settings
