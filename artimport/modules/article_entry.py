"""Обход директории импорта со структурой "том/выпуск/статья"."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union
import re

from artimport.exceptions import MalformedDocumentError
from artimport.utils.logger import get_logger

logger = get_logger(__name__)

_NUMBER_PATTERN = re.compile(r"(\d+)")


def _natural_key(path: Path) -> Tuple:
    """Ключ сортировки, при котором "10" идет после "9"."""
    return tuple(
        int(part) if part.isdigit() else part.lower()
        for part in _NUMBER_PATTERN.split(path.name)
    )


@dataclass(frozen=True)
class ArticleEntry:
    """Набор файлов одной статьи: файл метаданных и сопутствующие файлы."""

    volume: str
    issue: str
    article: str
    path: Path
    files: Tuple[Path, ...]

    @classmethod
    def from_folder(cls, article_folder: Union[str, Path]) -> "ArticleEntry":
        folder = Path(article_folder)
        files = tuple(sorted((f for f in folder.iterdir() if f.is_file()), key=_natural_key))
        return cls(
            volume=folder.parent.parent.name,
            issue=folder.parent.name,
            article=folder.name,
            path=folder,
            files=files,
        )

    @property
    def issue_folder(self) -> Path:
        return self.path.parent

    def _files_with_extension(self, *extensions: str) -> List[Path]:
        return [f for f in self.files if f.suffix.lower().lstrip(".") in extensions]

    @property
    def metadata_file(self) -> Path:
        """
        Файл XML метаданных статьи.

        Raises:
            MalformedDocumentError: Если XML файла нет или их несколько
        """
        candidates = self._files_with_extension("xml")
        if len(candidates) != 1:
            raise MalformedDocumentError(
                f"В папке {self.path} должен быть ровно один XML файл, найдено: {len(candidates)}"
            )
        return candidates[0]

    @property
    def submission_file(self) -> Optional[Path]:
        """PDF статьи (если есть)."""
        candidates = self._files_with_extension("pdf")
        return candidates[0] if candidates else None

    @property
    def html_file(self) -> Optional[Path]:
        candidates = self._files_with_extension("html", "htm")
        return candidates[0] if candidates else None

    @property
    def asset_files(self) -> List[Path]:
        """Прочие файлы статьи (изображения, мультимедиа)."""
        main = {self.submission_file, self.html_file}
        return [
            f for f in self.files
            if f.suffix.lower() != ".xml" and f not in main
        ]

    def __str__(self) -> str:
        return f"{self.volume}/{self.issue}/{self.article}"


class ArticleIterator:
    """Итератор статей: import_path/<том>/<выпуск>/<статья>/."""

    def __init__(self, import_path: Union[str, Path]):
        self.import_path = Path(import_path)

    @staticmethod
    def _subfolders(folder: Path) -> List[Path]:
        return sorted((f for f in folder.iterdir() if f.is_dir()), key=_natural_key)

    def __iter__(self) -> Iterator[ArticleEntry]:
        for volume in self._subfolders(self.import_path):
            for issue in self._subfolders(volume):
                for article in self._subfolders(issue):
                    entry = ArticleEntry.from_folder(article)
                    if not entry.files:
                        logger.warning(f"Пустая папка статьи пропущена: {entry}")
                        continue
                    yield entry
