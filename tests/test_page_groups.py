# -*- coding: utf-8 -*-
# tests/test_page_groups.py
import unittest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from card_splitter.core.config import DEFAULT_GROUP_ID, DEFAULT_GROUP_NAME
from card_splitter.core.exceptions import GroupOperationError
from card_splitter.core.models import (
    Duplex, FileKind, FlipEdge, GroupKind, GutterFold, Page, PageGroup, Simplex
)
from card_splitter.core.page_groups import PageGroupManager


class TestPageGroupManager(unittest.TestCase):

    def setUp(self):
        self.manager = PageGroupManager(pdf_mode=Duplex(FlipEdge.LONG))

    def test_default_group_is_synthesized(self):
        """Тест: группа по умолчанию существует без сохранения"""
        groups = self.manager.sorted_groups()
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].id, DEFAULT_GROUP_ID)
        self.assertEqual(groups[0].name, DEFAULT_GROUP_NAME)
        self.assertEqual(groups[0].order, 0)
        self.assertEqual(self.manager.groups, ())
        self.assertEqual(self.manager.group_page_indices(DEFAULT_GROUP_ID, 3), [0, 1, 2])

    def test_create_group(self):
        """Тест создания групп с уникальными именами и порядком"""
        first = self.manager.create_group()
        second = self.manager.create_group(page_indices=[1, 2])

        self.assertEqual((first.name, first.order), ('Group 1', 1))
        self.assertEqual((second.name, second.order), ('Group 2', 2))
        self.assertEqual(first.processing_mode, Duplex(FlipEdge.LONG))
        self.assertEqual(second.page_indices, (1, 2))
        self.assertTrue(first.id.startswith('group_'))
        self.assertEqual(self.manager.group_page_indices(DEFAULT_GROUP_ID, 4), [0, 3])

    def test_generated_name_skips_taken_names(self):
        """Тест: имя Group N выбирается среди свободных без учета регистра"""
        self.manager.create_group('group 1')
        self.assertEqual(self.manager.create_group().name, 'Group 2')

    def test_name_validation(self):
        """Тест проверки имен групп"""
        self.manager.create_group('Tokens')
        for name in ['   ', 'x' * 51, 'TOKENS']:
            with self.subTest(name=name):
                with self.assertRaises(GroupOperationError):
                    self.manager.create_group(name)

    def test_rename_group(self):
        """Тест переименования"""
        group = self.manager.create_group('Old')
        self.assertEqual(self.manager.rename_group(group.id, ' New ').name, 'New')
        with self.assertRaises(GroupOperationError):
            self.manager.rename_group(DEFAULT_GROUP_ID, 'Other')

    def test_move_up_materializes_default(self):
        """Тест: перемещение группы выше Default сохраняет Default с обменом порядка"""
        group = self.manager.create_group(page_indices=[2, 0])
        self.assertTrue(self.manager.move_up(group.id))

        persisted = {g.id: g for g in self.manager.groups}
        self.assertIn(DEFAULT_GROUP_ID, persisted)
        self.assertEqual(persisted[DEFAULT_GROUP_ID].order, 1)
        self.assertEqual(persisted[group.id].order, 0)
        self.assertEqual(persisted[group.id].page_indices, (2, 0))
        self.assertEqual(persisted[DEFAULT_GROUP_ID].page_indices, ())
        self.assertEqual([g.id for g in self.manager.sorted_groups()], [group.id, DEFAULT_GROUP_ID])

    def test_move_down_default(self):
        """Тест: перемещение Default вниз"""
        group = self.manager.create_group()
        self.assertTrue(self.manager.move_down(DEFAULT_GROUP_ID))
        self.assertEqual([g.id for g in self.manager.sorted_groups()], [group.id, DEFAULT_GROUP_ID])

    def test_move_at_edges(self):
        """Тест: крайние группы не сдвигаются дальше"""
        group = self.manager.create_group()
        self.assertFalse(self.manager.move_up(DEFAULT_GROUP_ID))
        self.assertFalse(self.manager.move_down(group.id))
        self.assertEqual(self.manager.groups, (group,))
        with self.assertRaises(GroupOperationError):
            self.manager.move_up('missing')

    def test_order_after_materialized_default(self):
        """Тест: новая группа получает порядок больше всех существующих"""
        first = self.manager.create_group()
        self.manager.move_up(first.id)
        self.assertEqual(self.manager.create_group().order, 2)

    def test_delete_group(self):
        """Тест: удаление группы возвращает страницы в Default"""
        group = self.manager.create_group(page_indices=[0, 1])
        self.manager.delete_group(group.id)
        self.assertEqual(self.manager.group_page_indices(DEFAULT_GROUP_ID, 3), [0, 1, 2])
        with self.assertRaises(GroupOperationError):
            self.manager.delete_group(DEFAULT_GROUP_ID)
        with self.assertRaises(GroupOperationError):
            self.manager.delete_group(group.id)

    def test_move_page(self):
        """Тест перемещения страницы между группами по локальному индексу"""
        target = self.manager.create_group()
        self.assertTrue(self.manager.move_page(1, DEFAULT_GROUP_ID, target.id, 4))
        self.assertEqual(self.manager.get_group(target.id).page_indices, (1,))

        self.assertTrue(self.manager.move_page(0, target.id, DEFAULT_GROUP_ID, 4))
        self.assertEqual(self.manager.get_group(target.id).page_indices, ())
        self.assertEqual(self.manager.group_page_indices(DEFAULT_GROUP_ID, 4), [0, 1, 2, 3])

        self.assertFalse(self.manager.move_page(7, DEFAULT_GROUP_ID, target.id, 4))

    def test_page_belongs_to_one_group(self):
        """Тест: страница состоит не более чем в одной явной группе"""
        first = self.manager.create_group(page_indices=[0, 1])
        second = self.manager.create_group(page_indices=[1])
        self.assertEqual(self.manager.get_group(first.id).page_indices, (0,))
        self.assertEqual(self.manager.group_for_page(1).id, second.id)
        self.assertEqual(self.manager.group_for_page(5).id, DEFAULT_GROUP_ID)

    def test_processing_mode(self):
        """Тест режима обработки групп"""
        group = self.manager.create_group()
        self.manager.set_processing_mode(group.id, GutterFold())
        self.assertEqual(self.manager.processing_mode_for(group.id), GutterFold())

        self.manager.set_processing_mode(DEFAULT_GROUP_ID, Simplex())
        self.assertEqual(self.manager.pdf_mode, Simplex())
        self.assertEqual(self.manager.default_group().processing_mode, Simplex())

    def test_remap_pages(self):
        """Тест перенумерации после удаления страниц"""
        group = self.manager.create_group(page_indices=[0, 2, 3])
        self.manager.remap_pages({0: None, 1: 0, 2: 1, 3: 2})
        self.assertEqual(self.manager.get_group(group.id).page_indices, (1, 2))

    def test_auto_group_by_file(self):
        """Тест автоматической группировки по файлам"""
        pages = [
            Page('a.pdf', 0, FileKind.PDF), Page('a.pdf', 1, FileKind.PDF),
            Page('b.png', 0, FileKind.IMAGE),
        ]
        groups = self.manager.auto_group_by_file(pages)
        self.assertEqual([g.name for g in groups], ['a.pdf', 'b.png'])
        self.assertEqual([g.page_indices for g in groups], [(0, 1), (2,)])
        self.assertTrue(all(g.kind == GroupKind.AUTO for g in groups))
        self.assertEqual(self.manager.statistics(3)['ungroupedPages'], 0)

    def test_group_round_trip(self):
        """Тест сериализации группы"""
        group = self.manager.create_group('Tokens', [3])
        self.assertEqual(PageGroup.from_dict(group.to_dict()), group)


if __name__ == '__main__':
    unittest.main()
