# -*- coding: utf-8 -*-
# core/exceptions.py
class CardSplitterException(Exception):
    """Базовое исключение приложения"""
    pass


class FileImportError(CardSplitterException):
    """Ошибка импорта файла"""

    def __init__(self, file_name: str, message: str):
        super().__init__(f"{file_name}: {message}")
        self.file_name = file_name
        self.message = message


class PageOrderError(CardSplitterException):
    """Ошибка изменения порядка страниц"""
    pass


class GroupOperationError(CardSplitterException):
    """Недопустимая операция с группой страниц"""
    pass


class SettingsImportError(CardSplitterException):
    """Ошибка импорта файла настроек"""
    pass


class ValidationError(CardSplitterException):
    """Ошибка валидации"""
    pass
