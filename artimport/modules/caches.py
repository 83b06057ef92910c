"""Кэши одного запуска импорта: жанры файлов и порядок разделов в выпусках."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

from artimport.models.journal import GENRE_IMAGE, GENRE_MULTIMEDIA
from artimport.utils.logger import get_logger

logger = get_logger(__name__)


class GenreCache:
    """ID жанра по паре (журнал, расширение файла): изображение или мультимедиа."""

    def __init__(self):
        self._genres: Dict[Tuple[int, str], int] = {}

    def get_genre_id(self, repository, journal_id: int, extension: str, image_extensions: Iterable[str]) -> int:
        """
        Получить ID жанра для расширения файла.

        Args:
            repository: Репозиторий для поиска жанра
            journal_id: ID журнала
            extension: Расширение файла без точки
            image_extensions: Расширения, считающиеся изображениями

        Returns:
            ID жанра IMAGE или MULTIMEDIA

        Raises:
            LookupError: Если жанр не настроен в журнале
        """
        extension = extension.lower().lstrip(".")
        key = (journal_id, extension)
        if key in self._genres:
            return self._genres[key]

        genre_key = GENRE_IMAGE if extension in {e.lower() for e in image_extensions} else GENRE_MULTIMEDIA
        genre = repository.get_genre_by_key(genre_key, journal_id)
        if genre is None:
            raise LookupError(f"В журнале {journal_id} не найден жанр {genre_key}")
        self._genres[key] = genre.id
        return genre.id

    def __len__(self) -> int:
        return len(self._genres)


class SectionOrderRegistry:
    """
    Разделы, уже включенные в пользовательский порядок выпусков в этом запуске.

    Повторная пара (выпуск, раздел) не проверяется в репозитории заново.
    """

    def __init__(self):
        self._sections: Dict[int, Dict[int, bool]] = {}

    def include(self, repository, issue_id: int, section_id: int) -> bool:
        """
        Включить раздел в порядок разделов выпуска.

        Returns:
            True, если была добавлена новая запись о порядке
        """
        seen = self._sections.setdefault(issue_id, {})
        if section_id in seen:
            return False
        # Пара запоминается только после успешной записи в репозитории
        if repository.get_custom_section_order(issue_id, section_id) is not None:
            seen[section_id] = True
            return False
        seq = len(seen) + 1
        repository.upsert_custom_section_order(issue_id, section_id, seq)
        seen[section_id] = True
        logger.debug(f"Раздел {section_id} добавлен в выпуск {issue_id} под номером {seq}")
        return True

    def is_included(self, issue_id: int, section_id: int) -> bool:
        return section_id in self._sections.get(issue_id, {})


@dataclass
class ImportCaches:
    """Кэши, общие для всех статей одного запуска импорта."""

    genres: GenreCache = field(default_factory=GenreCache)
    section_order: SectionOrderRegistry = field(default_factory=SectionOrderRegistry)
