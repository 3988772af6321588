# utils/helpers.py
import logging
import re
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_SIZE_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def ensure_directory(directory: Union[str, Path]) -> Path:
    """Создание директории (вместе с родительскими) если не существует"""
    path = Path(directory)
    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created directory: {path}")
    return path


def sanitize_filename(filename: str) -> str:
    """
    Имя файла, безопасное для сохранения настроек: недопустимые и
    управляющие символы заменяются на '_', пустое имя становится 'unnamed'
    """
    cleaned = _INVALID_FILENAME_CHARS.sub('_', filename).strip().strip('.')
    return cleaned or 'unnamed'


def file_extension(filename: str) -> str:
    return Path(filename).suffix.lower()


def format_file_size(bytes_size: int) -> str:
    size = float(bytes_size)
    for unit in _SIZE_UNITS[:-1]:
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == 'B' else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {_SIZE_UNITS[-1]}"
