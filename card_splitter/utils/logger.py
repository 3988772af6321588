# -*- coding: utf-8 -*-
# utils/logger.py
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Библиотеки чтения файлов и web-сервер пишут слишком подробно
NOISY_LOGGERS = ('PIL', 'fitz', 'werkzeug')


def setup_logging(log_dir: Optional[Union[str, Path]] = "logs", level: int = logging.INFO) -> logging.Logger:
    """
    Логирование приложения: консоль и, если задан log_dir, дневной файл
    card_splitter_YYYYMMDD.log. Повторный вызов заменяет обработчики.
    """
    handlers = [logging.StreamHandler()]
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"card_splitter_{datetime.now():%Y%m%d}.log"
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger('card_splitter')
