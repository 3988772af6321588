# -*- coding: utf-8 -*-
# tests/test_page_model.py
import unittest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from card_splitter.core.exceptions import PageOrderError
from card_splitter.core.models import (
    CardType, DecodedFile, Duplex, FileKind, FileSource, PageType, Simplex
)
from card_splitter.core.page_model import PageModel, move_page


class ClosablePayload:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def pdf(name, pages, timestamp=1.0, payload=None):
    return DecodedFile(
        FileSource(name, FileKind.PDF, pages, 1000 * pages, timestamp),
        tuple((612.0, 792.0) for _ in range(pages)),
        payload
    )


def image(name, timestamp=1.0):
    return DecodedFile(FileSource(name, FileKind.IMAGE, 1, 500, timestamp), ((800.0, 600.0),))


def identities(model):
    return [(page.source_file, page.original_page_index) for page in model.pages]


class TestPageModel(unittest.TestCase):

    def setUp(self):
        self.model = PageModel(Duplex())
        self.model.combine([pdf('cards.pdf', 4, 1.0), image('extra.png', 2.0)])

    def test_combine_assigns_default_types(self):
        """Тест: страницы PDF чередуются лицо/оборот, изображения лицевые"""
        types = [page.type for page in self.model.pages]
        self.assertEqual(types, [CardType.FRONT, CardType.BACK, CardType.FRONT, CardType.BACK, CardType.FRONT])
        self.assertEqual([page.display_order for page in self.model.pages], [0, 1, 2, 3, 4])
        self.assertEqual(self.model.pages[4].file_kind, FileKind.IMAGE)
        self.assertEqual(self.model.pages[4].dimensions.width, 800.0)

    def test_simplex_pdf_pages_are_front(self):
        """Тест: вне дуплекса все страницы PDF лицевые"""
        model = PageModel(Simplex())
        model.combine([pdf('cards.pdf', 3)])
        self.assertTrue(all(page.type == CardType.FRONT for page in model.pages))

    def test_combine_orders_by_import_timestamp(self):
        """Тест: файлы объединяются в порядке импорта"""
        model = PageModel(Duplex())
        model.combine([image('late.png', 5.0), pdf('early.pdf', 1, 1.0)])
        self.assertEqual(identities(model), [('early.pdf', 0), ('late.png', 0)])

    def test_add_files_rejects_duplicates_per_file(self):
        """Тест: дубликат имени отклоняется, остальные файлы добавляются"""
        result = self.model.add_files([pdf('cards.pdf', 2, 3.0), image('new.png', 4.0)])

        self.assertIn('cards.pdf', result.errors)
        self.assertEqual([source.name for source in result.files], ['new.png'])
        self.assertEqual(len(self.model.pages), 6)
        self.assertEqual(self.model.pages[5].display_order, 5)
        self.assertFalse(self.model.is_reordered())

    def test_remove_file(self):
        """Тест удаления файла и перенумерации"""
        payload = ClosablePayload()
        self.model.add_files([pdf('more.pdf', 2, 3.0, payload)])
        index_map = self.model.remove_file('cards.pdf')

        self.assertEqual(identities(self.model), [('extra.png', 0), ('more.pdf', 0), ('more.pdf', 1)])
        self.assertEqual([page.display_order for page in self.model.pages], [0, 1, 2])
        self.assertEqual(index_map[0], None)
        self.assertEqual(index_map[4], 0)
        self.assertFalse(self.model.repository.contains('cards.pdf'))

        self.model.remove_file('more.pdf')
        self.assertTrue(payload.closed)

    def test_remove_unknown_file(self):
        """Тест удаления отсутствующего файла"""
        with self.assertLogs('card_splitter.core.page_model', level='WARNING'):
            index_map = self.model.remove_file('missing.pdf')
        self.assertEqual(index_map, {i: i for i in range(5)})

    def test_reorder_and_reset(self):
        """Тест перестановки и возврата к порядку импорта"""
        self.model.update_page(1, skip=True)
        index_map = self.model.reorder(0, 3)

        self.assertEqual(identities(self.model)[:4],
                         [('cards.pdf', 1), ('cards.pdf', 2), ('cards.pdf', 3), ('cards.pdf', 0)])
        self.assertEqual(index_map[0], 3)
        self.assertEqual([page.display_order for page in self.model.pages], [0, 1, 2, 3, 4])
        self.assertTrue(self.model.is_reordered())

        self.model.reset_to_import_order()
        self.assertFalse(self.model.is_reordered())
        self.assertTrue(self.model.pages[1].skip)

    def test_reorder_back_is_not_reordered(self):
        """Тест: сравнение по идентичности страниц, а не по объектам"""
        self.model.reorder(0, 2)
        self.model.reorder(2, 0)
        self.assertFalse(self.model.is_reordered())

    def test_invalid_reorder(self):
        """Тест недопустимых индексов перестановки"""
        for from_index, to_index in [(-1, 0), (0, 5), (9, 1)]:
            with self.subTest(from_index=from_index, to_index=to_index):
                with self.assertRaises(PageOrderError):
                    self.model.reorder(from_index, to_index)

    def test_move_page_is_pure(self):
        """Тест: move_page не изменяет исходный кортеж"""
        pages = self.model.pages
        moved = move_page(pages, 4, 0)
        self.assertEqual(pages[0].source_file, 'cards.pdf')
        self.assertEqual(moved[0].source_file, 'extra.png')

    def test_soft_remove_and_restore(self):
        """Тест мягкого удаления страницы"""
        self.model.remove_page(0)
        self.assertEqual(len(self.model.active_pages()), 4)
        self.assertEqual(len(self.model.pages), 5)
        self.model.restore_page(0)
        self.assertEqual(self.model.active_page_indices(), [0, 1, 2, 3, 4])

    def test_page_type_skip_marks_page_skipped(self):
        """Тест: тип страницы skip исключает ее из обработки"""
        page = self.model.set_page_type(2, PageType.SKIP)
        self.assertTrue(page.skip)
        self.assertNotIn(page, self.model.active_pages())

    def test_set_page_card_type(self):
        """Тест смены стороны страницы"""
        self.assertEqual(self.model.set_page_card_type(0, CardType.BACK).type, CardType.BACK)
        with self.assertRaises(PageOrderError):
            self.model.set_page_card_type(0, CardType.UNKNOWN)
        with self.assertRaises(PageOrderError):
            self.model.update_page(10, skip=True)

    def test_statistics(self):
        """Тест статистики"""
        self.model.set_page_skip(0, True)
        stats = self.model.statistics()
        self.assertEqual(stats['totalFiles'], 2)
        self.assertEqual(stats['totalPages'], 5)
        self.assertEqual(stats['activePages'], 4)
        self.assertEqual(stats['skippedPages'], 1)
        self.assertEqual(stats['pdfFiles'], 1)
        self.assertEqual(stats['imageFiles'], 1)
        self.assertEqual(stats['totalSize'], 4500)

    def test_combine_replaces_previous_import(self):
        """Тест: полный импорт заменяет прежние файлы"""
        self.model.combine([pdf('other.pdf', 1)])
        self.assertEqual(identities(self.model), [('other.pdf', 0)])
        self.assertEqual(self.model.repository.names(), ['other.pdf'])


if __name__ == '__main__':
    unittest.main()
