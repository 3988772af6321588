# -*- coding: utf-8 -*-
# tests/test_workflow_settings.py
import json
import unittest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from card_splitter.core.exceptions import SettingsImportError
from card_splitter.core.models import (
    CardType, Duplex, ExtractionSettings, FlipEdge, GridSettings, GutterFold,
    GutterOrientation, SkippedCard
)
from card_splitter.core.workflow_settings import (
    LABEL_PAGE_SETTINGS, WorkflowSettings, default_settings_filename, plan_settings_import
)


class TestWorkflowSettings(unittest.TestCase):

    def setUp(self):
        extraction = ExtractionSettings(
            grid=GridSettings(3, 3),
            skipped_cards=(SkippedCard(0, 1, 1, CardType.BACK),),
            gutter_width=12,
        )
        self.settings = WorkflowSettings.build(
            GutterFold(GutterOrientation.HORIZONTAL),
            [{'type': 'front', 'skip': False}, {'type': 'back', 'skip': True}],
            extraction,
            {'cardScalePercent': 90, 'unknownKey': 'dropped'},
            {'finalAdjustments': {'brightness': 5}},
        )

    def test_document_shape(self):
        """Тест структуры экспортируемого документа"""
        data = self.settings.to_dict()
        self.assertEqual(data['pdfMode'], {'type': 'gutter-fold', 'orientation': 'horizontal'})
        self.assertEqual(data['version'], '1.0')
        self.assertIn('savedAt', data)
        self.assertEqual(data['outputSettings'], {'cardScalePercent': 90})
        self.assertNotIn('pageDimensions', data['extractionSettings'])
        self.assertEqual(data['extractionSettings']['skippedCards'],
                         [{'pageIndex': 0, 'gridRow': 1, 'gridColumn': 1, 'cardType': 'back'}])

    def test_json_round_trip(self):
        """Тест экспорта и повторного импорта через JSON"""
        restored = WorkflowSettings.from_json(self.settings.to_json())
        self.assertEqual(restored.pdf_mode, GutterFold(GutterOrientation.HORIZONTAL))
        self.assertEqual(restored.extraction().grid, GridSettings(3, 3))
        self.assertEqual(restored.extraction().gutter_width, 12)
        self.assertEqual(restored.page_settings, self.settings.page_settings)

    def test_invalid_documents(self):
        """Тест: документы без обязательных разделов отклоняются"""
        valid = self.settings.to_dict()
        broken = []
        for key in ('pdfMode', 'extractionSettings', 'outputSettings'):
            data = dict(valid)
            del data[key]
            broken.append(json.dumps(data))
        broken.append(json.dumps(dict(valid, pdfMode={'type': 'triplex'})))
        broken.append('not json')
        broken.append('[]')

        for text in broken:
            with self.subTest(text=text[:40]):
                with self.assertRaises(SettingsImportError):
                    WorkflowSettings.from_json(text)

    def test_optional_fields(self):
        """Тест: версия, дата и настройки цвета необязательны"""
        data = {
            'pdfMode': {'type': 'duplex', 'flipEdge': 'long'},
            'extractionSettings': {'grid': {'rows': 2, 'columns': 2}},
            'outputSettings': {'cardScalePercent': 100},
        }
        settings = WorkflowSettings.from_dict(data)
        self.assertEqual(settings.pdf_mode, Duplex(FlipEdge.LONG))
        self.assertIsNone(settings.version)
        self.assertEqual(settings.page_settings, [])
        self.assertEqual(settings.color_settings, {})

    def test_defaults(self):
        """Тест настроек по умолчанию"""
        settings = WorkflowSettings.defaults(Duplex(FlipEdge.LONG))
        self.assertEqual(settings.output_settings['rotation'], {'front': 0, 'back': 180})
        self.assertEqual(settings.extraction().grid, GridSettings(2, 3))


class TestSettingsImportPlan(unittest.TestCase):

    def setUp(self):
        self.settings = WorkflowSettings.defaults()
        self.settings.page_settings = [{'skip': False}, {'skip': True}, {'skip': False}]

    def test_matching_page_count(self):
        """Тест: при совпадении числа страниц применяются настройки страниц"""
        result = plan_settings_import(self.settings, 3)
        self.assertTrue(result.apply_page_settings)
        self.assertIsNone(result.mismatch)
        self.assertEqual(result.skipped, [])

    def test_mismatched_page_count(self):
        """Тест: при расхождении применяется все, кроме настроек страниц"""
        with self.assertLogs('card_splitter.core.workflow_settings', level='WARNING'):
            result = plan_settings_import(self.settings, 5)
        self.assertFalse(result.apply_page_settings)
        self.assertEqual(result.skipped, [LABEL_PAGE_SETTINGS])
        self.assertEqual(result.to_dict()['mismatch'], {'currentPageCount': 5, 'importedPageCount': 3})
        self.assertEqual(len(result.applied), 4)


class TestSettingsFilename(unittest.TestCase):

    def test_filenames(self):
        """Тест имени файла настроек по умолчанию"""
        cases = [
            (['game_cards.pdf'], 'game_cards_settings.json'),
            (['Photo.JPEG'], 'Photo_settings.json'),
            (['a.pdf', 'b.png', 'c.jpg'], 'a_and_2_others_settings.json'),
            (['a_very_long_file_name_indeed.pdf', 'b.pdf'],
             'a_very_long_file_nam..._and_1_others_settings.json'),
            ([], 'workflow_settings.json'),
        ]
        for names, expected in cases:
            with self.subTest(names=names):
                self.assertEqual(default_settings_filename(names), expected)


if __name__ == '__main__':
    unittest.main()
