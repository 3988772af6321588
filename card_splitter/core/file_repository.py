# -*- coding: utf-8 -*-
# core/file_repository.py
"""
Хранилище импортированных файлов: метаданные и необработанные данные по имени файла
"""
import logging
from typing import Any, Dict, List, Optional

from .models import FileSource

logger = logging.getLogger(__name__)


class FileRepository:
    def __init__(self):
        self._sources: Dict[str, FileSource] = {}
        self._payloads: Dict[str, Any] = {}

    def create(self, source: FileSource, payload: Any = None) -> FileSource:
        if source.name in self._sources:
            raise KeyError(f"File already registered: {source.name}")
        self._sources[source.name] = source
        if payload is not None:
            self._payloads[source.name] = payload
        logger.debug(f"Registered file {source.name} ({source.original_page_count} pages)")
        return source

    def contains(self, name: str) -> bool:
        return name in self._sources

    def get(self, name: str) -> Optional[FileSource]:
        return self._sources.get(name)

    def names(self) -> List[str]:
        return list(self._sources)

    def sources(self) -> List[FileSource]:
        return list(self._sources.values())

    def dispose(self, name: str) -> bool:
        """Освобождение файла; закрывает данные, если у них есть close()"""
        if name not in self._sources:
            return False
        del self._sources[name]
        payload = self._payloads.pop(name, None)
        close = getattr(payload, 'close', None)
        if callable(close):
            close()
        logger.debug(f"Disposed file {name}")
        return True

    def dispose_all(self):
        for name in list(self._sources):
            self.dispose(name)

    def __len__(self):
        return len(self._sources)
