# -*- coding: utf-8 -*-
# tests/test_settings_service.py
import unittest
import sys
import os
import tempfile
from pathlib import Path

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from card_splitter.core.exceptions import SettingsImportError
from card_splitter.core.models import Simplex
from card_splitter.core.workflow_settings import WorkflowSettings
from card_splitter.services.settings_service import SettingsService


class TestSettingsService(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.service = SettingsService(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_settings_path(self):
        """Тест имени файла настроек"""
        self.assertEqual(self.service.settings_path(['game_cards.pdf']).name, 'game_cards_settings.json')
        self.assertEqual(self.service.settings_path([], 'deck/v2').name, 'deck_v2.json')

    def test_save_and_load(self):
        """Тест сохранения и загрузки"""
        settings = WorkflowSettings.defaults(Simplex())
        path = self.service.save(settings, self.service.settings_path(['deck.pdf']))
        self.assertTrue(path.exists())

        loaded = self.service.load(path)
        self.assertEqual(loaded.pdf_mode, Simplex())
        self.assertEqual(loaded.output_settings, settings.output_settings)

    def test_load_errors(self):
        """Тест ошибок загрузки"""
        broken = Path(self.temp_dir.name) / 'broken.json'
        broken.write_text('{not json', encoding='utf-8')
        incomplete = Path(self.temp_dir.name) / 'incomplete.json'
        incomplete.write_text('{"pdfMode": {"type": "simplex"}}', encoding='utf-8')

        for path in [broken, incomplete, Path(self.temp_dir.name) / 'missing.json']:
            with self.subTest(path=path.name):
                with self.assertRaises(SettingsImportError):
                    self.service.load(path)


if __name__ == '__main__':
    unittest.main()
