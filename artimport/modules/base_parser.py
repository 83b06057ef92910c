"""
Базовый класс парсеров метаданных статей.

Конкретный парсер (по одному на каждый XML словарь) реализует построение
выпуска, раздела, статьи и публикации, а базовый класс обеспечивает общий
процесс импорта:

    START -> VALIDATED -> DEDUP_CHECKED -> BUILT -> COMMITTED

Ошибка до начала записи (некорректный XML, неподдерживаемый DOCTYPE,
дубликат) завершает импорт без отката. Ошибка при построении публикации
вызывает rollback() парсера, после чего ошибка передается вызывающему коду.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from lxml import etree

from artimport.exceptions import (
    AlreadyExistsError,
    ArticleImportError,
    BuildFailureError,
    RollbackError,
)
from artimport.models import Author, Issue, Publication, Section, Submission
from artimport.modules.article_entry import ArticleEntry
from artimport.modules.caches import ImportCaches
from artimport.modules.configuration import Configuration
from artimport.modules.locale_resolver import LocaleResolver
from artimport.modules.xml_toolkit import (
    DocType,
    XPathQuery,
    ensure_doc_type,
    fold_text,
    load_document,
)
from artimport.utils.logger import get_logger

logger = get_logger(__name__)


class ImportState(Enum):
    """Состояния импорта одной статьи."""

    START = "start"
    VALIDATED = "validated"
    DEDUP_CHECKED = "dedup_checked"
    BUILT = "built"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


@dataclass
class ImportResult:
    """Результат импорта статьи: публикация либо ошибка."""

    state: ImportState
    publication: Optional[Publication] = None
    error: Optional[ArticleImportError] = None
    failed_at: Optional[ImportState] = None
    rolled_back: bool = False

    @property
    def success(self) -> bool:
        return self.state is ImportState.COMMITTED


class BaseParser(ABC):
    """Контракт парсера и общий механизм проверки, извлечения, дедупликации и отката."""

    def __init__(
        self,
        configuration: Configuration,
        entry: ArticleEntry,
        caches: Optional[ImportCaches] = None,
    ):
        self._configuration = configuration
        self._entry = entry
        self._caches = caches or ImportCaches()
        context = configuration.context
        self._context_id: int = context.id
        self._locale: str = context.primary_locale
        self._locale_resolver = LocaleResolver(self._locale, context.supported_locales or ())
        self._document: Optional[etree._ElementTree] = None
        self._xpath: Optional[XPathQuery] = None
        self._public_files: List[str] = []
        self._state = ImportState.START

    # ---------------------------------------------------------------
    # Контракт конкретного парсера
    # ---------------------------------------------------------------

    @abstractmethod
    def get_doc_types(self) -> List[DocType]:
        """Поддерживаемые сигнатуры DOCTYPE."""

    @abstractmethod
    def get_public_ids(self) -> Dict[str, str]:
        """Публичные идентификаторы статьи: {тип: значение}."""

    @abstractmethod
    def get_publication(self) -> Publication:
        """Построить и сохранить публикацию (вместе с выпуском, разделом и статьей)."""

    @abstractmethod
    def get_issue(self) -> Issue:
        pass

    @abstractmethod
    def get_submission(self) -> Submission:
        pass

    @abstractmethod
    def get_section(self) -> Section:
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Отменить все записи, сделанные парсером."""

    # ---------------------------------------------------------------
    # Процесс импорта
    # ---------------------------------------------------------------

    @property
    def state(self) -> ImportState:
        return self._state

    def run(self) -> ImportResult:
        """
        Импортировать статью.

        Returns:
            ImportResult с публикацией при успехе или с ошибкой при неудаче
        """
        if self._state is not ImportState.START:
            raise RuntimeError(f"Парсер уже был запущен для статьи {self._entry}")

        try:
            self._ensure_metadata_is_valid_and_parse()
            self._state = ImportState.VALIDATED
            self._ensure_submission_does_not_exist()
            self._state = ImportState.DEDUP_CHECKED
        except Exception as e:
            # Записей еще не было, откат не нужен
            return self._fail(self._as_import_error(e, ArticleImportError), self._state, rolled_back=False)

        try:
            publication = self.get_publication()
            self._state = ImportState.BUILT
        except Exception as e:
            return self._rollback_and_fail(self._as_import_error(e, BuildFailureError))

        self._state = ImportState.COMMITTED
        logger.info(f"Статья {self._entry} импортирована (публикация {publication.id})")
        return ImportResult(ImportState.COMMITTED, publication=publication)

    def execute(self) -> Publication:
        """
        Импортировать статью.

        Returns:
            Сохраненная публикация

        Raises:
            ArticleImportError: Статья не импортирована
        """
        result = self.run()
        if result.error is not None:
            raise result.error
        return result.publication

    @staticmethod
    def _as_import_error(error: Exception, wrapper: type) -> ArticleImportError:
        if isinstance(error, ArticleImportError):
            return error
        if wrapper is BuildFailureError:
            wrapped = BuildFailureError(f"Ошибка построения публикации: {error}", error)
        else:
            wrapped = wrapper(f"Ошибка обработки статьи: {error}")
        wrapped.__cause__ = error
        return wrapped

    def _fail(self, error: ArticleImportError, failed_at: ImportState, rolled_back: bool) -> ImportResult:
        self._state = ImportState.FAILED
        logger.error(f"Статья {self._entry} не импортирована ({failed_at.value}): {error}")
        return ImportResult(
            ImportState.FAILED,
            error=error,
            failed_at=failed_at,
            rolled_back=rolled_back,
        )

    def _rollback_and_fail(self, error: ArticleImportError) -> ImportResult:
        failed_at = self._state
        logger.warning(f"Откат импорта статьи {self._entry}: {error}")
        try:
            self.rollback()
        except Exception as rollback_error:
            composite = RollbackError(error, rollback_error)
            composite.__cause__ = rollback_error
            return self._fail(composite, failed_at, rolled_back=False)
        self._state = ImportState.ROLLED_BACK
        return self._fail(error, failed_at, rolled_back=True)

    def _ensure_metadata_is_valid_and_parse(self) -> None:
        """Загрузить XML и проверить DOCTYPE."""
        self._document = load_document(self._entry.metadata_file)
        ensure_doc_type(self._document, self.get_doc_types())
        self._xpath = XPathQuery(self._document)

    def _ensure_submission_does_not_exist(self) -> None:
        """
        Проверить, что статьи с теми же публичными идентификаторами еще нет.

        Raises:
            AlreadyExistsError: Найдена статья с тем же идентификатором
        """
        repository = self.repository
        for pub_id_type, pub_id in self.get_public_ids().items():
            if repository.get_submission_by_pub_id(pub_id_type, pub_id, self._context_id):
                raise AlreadyExistsError(pub_id_type, pub_id)

    # ---------------------------------------------------------------
    # Извлечение данных из XML
    # ---------------------------------------------------------------

    @property
    def document(self) -> etree._ElementTree:
        if self._document is None:
            raise RuntimeError("XML документ еще не загружен")
        return self._document

    def evaluate(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> Any:
        return self._query.evaluate(path, context, **variables)

    def select(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> List[Any]:
        return self._query.select(path, context, **variables)

    def select_first(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> Optional[Any]:
        return self._query.select_first(path, context, **variables)

    def select_text(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> str:
        return self._query.select_text(path, context, **variables)

    def get_text_content(
        self,
        node: Optional[Any],
        callback: Callable[[etree._Element, str], str],
    ) -> Optional[str]:
        """Текст узла с преобразованием разметки через callback(элемент, текст потомков)."""
        return fold_text(node, callback)

    @property
    def _query(self) -> XPathQuery:
        if self._xpath is None:
            raise RuntimeError("XML документ еще не загружен")
        return self._xpath

    # ---------------------------------------------------------------
    # Общие операции
    # ---------------------------------------------------------------

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def article_entry(self) -> ArticleEntry:
        return self._entry

    @property
    def caches(self) -> ImportCaches:
        return self._caches

    @property
    def repository(self):
        return self._configuration.repository

    @property
    def context_id(self) -> int:
        return self._context_id

    def get_locale(self, locale: Optional[str] = None) -> str:
        """Локаль журнала для обозначения языка; основная локаль, если распознать не удалось."""
        return self._locale_resolver.resolve(locale)

    def include_section(self, section: Section) -> None:
        """Включить раздел в пользовательский порядок разделов выпуска."""
        self._caches.section_order.include(self.repository, self.get_issue().id, section.id)

    def set_issue_cover(self, issue_folder: Union[str, Path], issue: Issue) -> Optional[str]:
        """
        Найти обложку выпуска в папке и назначить ее выпуску.

        Расширения проверяются в порядке из конфигурации, берется первое найденное.
        Если обложки нет, ничего не делается.

        Returns:
            Имя файла обложки в публичном хранилище или None
        """
        configuration = self._configuration
        issue_cover = None
        for ext in configuration.image_extensions:
            candidate = Path(issue_folder) / f"{configuration.issue_cover_filename}.{ext}"
            if candidate.is_file():
                issue_cover = candidate
                break
        if issue_cover is None:
            return None

        locale = self.get_locale()
        file_name = f"cover_issue_{issue.id}_{locale}{issue_cover.suffix}"
        self.repository.copy_context_file(self._context_id, issue_cover, file_name)
        self._public_files.append(file_name)
        issue.set_cover_image(file_name, locale)
        self.repository.edit_issue(issue)
        logger.info(f"Обложка выпуска {issue.id}: {issue_cover.name}")
        return file_name

    def _remove_public_files(self) -> None:
        """Удалить скопированные парсером публичные файлы (для отката)."""
        while self._public_files:
            self.repository.delete_context_file(self._context_id, self._public_files.pop())

    def _get_genre_id(self, context_id: int, extension: str) -> int:
        return self._caches.genres.get_genre_id(
            self.repository,
            context_id,
            extension,
            self._configuration.image_extensions,
        )

    def _create_default_author(self, publication: Publication) -> Author:
        """Создать автора по умолчанию (название журнала) для статьи без авторов."""
        locale = self.get_locale()
        author = Author(
            publication_id=publication.id,
            given_name={locale: self._configuration.context.get_name(locale)},
            family_name={},
            affiliation={},
            seq=1,
            email=self._configuration.email,
            include_in_browse=True,
            primary_contact=True,
            user_group_id=self._configuration.author_group_id,
        )
        self.repository.add_author(author)
        return author
