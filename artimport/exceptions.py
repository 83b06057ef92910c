"""Исключения процесса импорта статей."""

from typing import Optional


class ArticleImportError(Exception):
    """Базовая ошибка импорта: статья не была импортирована."""


class ConfigurationError(ArticleImportError):
    """Некорректные параметры задания импорта (журнал, пользователь, email, путь, группа)."""


class MalformedDocumentError(ArticleImportError):
    """Файл метаданных не читается или не является корректным XML."""


class UnsupportedDocTypeError(ArticleImportError):
    """DOCTYPE документа не поддерживается парсером."""


class AlreadyExistsError(ArticleImportError):
    """Статья с таким публичным идентификатором уже есть в журнале."""

    def __init__(self, pub_id_type: str, pub_id: str):
        self.pub_id_type = pub_id_type
        self.pub_id = pub_id
        super().__init__(f"Статья с идентификатором {pub_id_type}={pub_id} уже существует")


class BuildFailureError(ArticleImportError):
    """Ошибка при построении и сохранении публикации."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class RollbackError(BuildFailureError):
    """
    Откат после ошибки построения сам завершился ошибкой.

    Хранит обе ошибки: исходную (original) и ошибку отката (rollback_error).
    """

    def __init__(self, original: BaseException, rollback_error: BaseException):
        super().__init__(
            f"Ошибка импорта: {original}; откат не выполнен: {rollback_error}",
            original,
        )
        self.rollback_error = rollback_error
