# -*- coding: utf-8 -*-
# tests/test_utils.py
import logging
import unittest
import sys
import os
import tempfile
from pathlib import Path

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from card_splitter.core.config import AppConfig
from card_splitter.utils.helpers import ensure_directory, file_extension, format_file_size, sanitize_filename
from card_splitter.utils.logger import setup_logging


class TestHelpers(unittest.TestCase):

    def test_sanitize_filename(self):
        """Тест очистки имени файла"""
        cases = [
            ('deck/v2.json', 'deck_v2.json'),
            ('a<b>c?.json', 'a_b_c_.json'),
            ('  name  ', 'name'),
            ('', 'unnamed'),
            ('...', 'unnamed'),
        ]
        for filename, expected in cases:
            with self.subTest(filename=filename):
                self.assertEqual(sanitize_filename(filename), expected)

    def test_file_extension(self):
        """Тест расширения файла в нижнем регистре"""
        self.assertEqual(file_extension('Scan.JPEG'), '.jpeg')
        self.assertEqual(file_extension('noext'), '')

    def test_format_file_size(self):
        """Тест форматирования размера"""
        self.assertEqual(format_file_size(0), '0 B')
        self.assertEqual(format_file_size(512), '512 B')
        self.assertEqual(format_file_size(1536), '1.5 KB')
        self.assertEqual(format_file_size(100 * 1024 * 1024), '100.0 MB')

    def test_ensure_directory(self):
        """Тест создания вложенной директории"""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = ensure_directory(Path(temp_dir) / 'a' / 'b')
            self.assertTrue(path.is_dir())
            self.assertEqual(ensure_directory(path), path)


class TestLoggingAndConfig(unittest.TestCase):

    def tearDown(self):
        for handler in logging.getLogger().handlers[:]:
            handler.close()
            logging.getLogger().removeHandler(handler)

    def test_setup_logging_writes_file(self):
        """Тест записи лога в дневной файл"""
        with tempfile.TemporaryDirectory() as temp_dir:
            logger = setup_logging(temp_dir, logging.DEBUG)
            logger.info("hello")
            for handler in logging.getLogger().handlers:
                handler.flush()

            files = list(Path(temp_dir).glob('card_splitter_*.log'))
            self.assertEqual(len(files), 1)
            self.assertIn('hello', files[0].read_text(encoding='utf-8'))
            self.assertEqual(logging.getLogger('PIL').level, logging.WARNING)

    def test_config_from_env(self):
        """Тест чтения конфигурации из окружения"""
        saved = dict(os.environ)
        try:
            os.environ['CARD_SPLITTER_DEBUG'] = 'yes'
            os.environ['CARD_SPLITTER_MAX_UPLOAD_MB'] = '5'
            os.environ['CARD_SPLITTER_SETTINGS_FOLDER'] = 'saved'
            config = AppConfig.from_env()
            self.assertTrue(config.debug)
            self.assertEqual(config.max_upload_size, 5 * 1024 * 1024)
            self.assertEqual(config.settings_folder, 'saved')

            os.environ['CARD_SPLITTER_MAX_UPLOAD_MB'] = 'lots'
            self.assertEqual(AppConfig.from_env().max_upload_size, AppConfig().max_upload_size)
        finally:
            os.environ.clear()
            os.environ.update(saved)


if __name__ == '__main__':
    unittest.main()
