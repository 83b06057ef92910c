"""Параметры задания импорта, проверяемые один раз при создании."""

from pathlib import Path
from typing import List, Optional, Sequence, Type, Union
import re

from werkzeug.utils import ImportStringError, import_string

from artimport.config.settings import get_settings
from artimport.exceptions import ConfigurationError
from artimport.models import Genre, Journal, User
from artimport.modules.article_entry import ArticleIterator
from artimport.models.journal import (
    GENRE_SUBMISSION,
    ROLE_ID_AUTHOR,
    ROLE_ID_MANAGER,
    WORKFLOW_STAGE_ID_PRODUCTION,
)
from artimport.utils.logger import get_logger

logger = get_logger(__name__)

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def _load_parser(parser: Union[str, type]) -> type:
    if not isinstance(parser, str):
        return parser
    try:
        return import_string(parser)
    except ImportStringError as e:
        raise ConfigurationError(f"Не удалось загрузить парсер {parser}: {e}") from e


class Configuration:
    """
    Параметры импорта и общие настройки для всех статей запуска.

    Все значения проверяются в конструкторе: при неизвестном журнале, пользователе,
    некорректном email, отсутствующей директории или группе редакторов
    возбуждается ConfigurationError и задание не запускается.
    """

    def __init__(
        self,
        repository,
        parsers: Sequence[Union[str, type]],
        context_path: str,
        username: str,
        editor_username: str,
        email: str,
        import_path: Union[str, Path],
        default_section_name: Optional[str] = None,
        image_extensions: Optional[List[str]] = None,
        issue_cover_filename: Optional[str] = None,
    ):
        """
        Инициализация конфигурации.

        Args:
            repository: Репозиторий для поиска журнала, пользователей, групп и жанров
            parsers: Классы парсеров (или их полные имена для импорта)
            context_path: Путь (код) журнала
            username: Пользователь, которому назначаются импортированные статьи
            editor_username: Редактор импортированных статей
            email: Email по умолчанию для авторов без email
            import_path: Директория со структурой "том/выпуск/статья"
            default_section_name: Название раздела по умолчанию
            image_extensions: Расширения файлов изображений (в порядке поиска обложки)
            issue_cover_filename: Имя файла обложки выпуска без расширения

        Raises:
            ConfigurationError: Если какой-либо параметр некорректен
        """
        settings = get_settings()
        self._repository = repository
        self._default_section_name = default_section_name or settings.default_section_name
        self._parsers: List[Type] = [_load_parser(parser) for parser in parsers]
        if not self._parsers:
            raise ConfigurationError("Не указан ни один парсер")

        journal = repository.get_journal_by_path(context_path)
        if journal is None:
            raise ConfigurationError(f"Журнал не найден: {context_path}")
        self._context: Journal = journal

        self._user: User = self._find_user(username)
        self._editor: User = self._find_user(editor_username)

        if not email or not _EMAIL_PATTERN.match(email):
            raise ConfigurationError(f"Некорректный email: {email}")
        self._email = email

        import_path = Path(import_path)
        if not import_path.is_dir():
            raise ConfigurationError(f"Директория не существует: {import_path}")
        self._import_path = import_path

        # Группа редакторов: группа менеджеров, назначенная на этап производства
        editor_group_id = None
        for group in repository.get_user_groups_by_role(ROLE_ID_MANAGER, journal.id):
            if group.has_stage(WORKFLOW_STAGE_ID_PRODUCTION):
                editor_group_id = group.id
                break
        if editor_group_id is None:
            raise ConfigurationError(f"В журнале {context_path} нет группы редакторов этапа производства")
        self._editor_group_id: int = editor_group_id

        author_groups = repository.get_user_groups_by_role(ROLE_ID_AUTHOR, journal.id)
        self._author_group_id: Optional[int] = author_groups[0].id if author_groups else None

        genre = repository.get_genre_by_key(GENRE_SUBMISSION, journal.id)
        if genre is None:
            raise ConfigurationError(f"В журнале {context_path} не настроен жанр {GENRE_SUBMISSION}")
        self._genre: Genre = genre

        self._image_extensions = tuple(
            ext.lower() for ext in (image_extensions or settings.image_extensions)
        )
        self._issue_cover_filename = issue_cover_filename or settings.issue_cover_filename

        logger.info(
            f"Конфигурация импорта: журнал {journal.path}, пользователь {self._user.get_full_name()}, "
            f"редактор {self._editor.get_full_name()}, директория {import_path}"
        )

    def _find_user(self, username: str) -> User:
        user = self._repository.get_user_by_username(username)
        if user is None:
            raise ConfigurationError(f"Пользователь не найден: {username}")
        return user

    @property
    def repository(self):
        return self._repository

    @property
    def context(self) -> Journal:
        return self._context

    @property
    def user(self) -> User:
        return self._user

    @property
    def editor(self) -> User:
        return self._editor

    @property
    def email(self) -> str:
        """Email, назначаемый авторам без email."""
        return self._email

    @property
    def import_path(self) -> Path:
        return self._import_path

    @property
    def editor_group_id(self) -> int:
        return self._editor_group_id

    @property
    def author_group_id(self) -> Optional[int]:
        return self._author_group_id

    @property
    def submission_genre(self) -> Genre:
        return self._genre

    @property
    def parsers(self) -> List[Type]:
        return list(self._parsers)

    @property
    def default_section_name(self) -> str:
        return self._default_section_name

    @property
    def image_extensions(self) -> tuple:
        return self._image_extensions

    @property
    def issue_cover_filename(self) -> str:
        return self._issue_cover_filename

    def get_article_iterator(self) -> ArticleIterator:
        """Итератор статей в директории импорта."""
        return ArticleIterator(self._import_path)
