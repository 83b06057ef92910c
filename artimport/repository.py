"""Репозиторий: сохранение журналов, выпусков, разделов, статей, авторов и файлов."""

from pathlib import Path
from typing import List, Optional, Union
import shutil

from sqlalchemy import inspect
from werkzeug.utils import secure_filename

from artimport.config.settings import get_settings
from artimport.database import db
from artimport.models import (
    Author,
    Genre,
    Issue,
    Journal,
    Publication,
    PublicationId,
    Section,
    SectionOrder,
    Submission,
    SubmissionFile,
    User,
    UserGroup,
)
from artimport.utils.logger import get_logger

logger = get_logger(__name__)


def _unique_target(target_dir: Path, file_name: str) -> Path:
    """
    Безопасное имя файла в директории, не совпадающее с уже существующими.

    Расширение сохраняется, даже если имя состоит только из символов,
    которые secure_filename удаляет (например, кириллица).
    """
    source = Path(file_name)
    stem = secure_filename(source.stem) or "file"
    suffix = secure_filename(source.suffix.lstrip("."))
    suffix = f".{suffix}" if suffix else ""

    target = target_dir / f"{stem}{suffix}"
    counter = 1
    while target.exists():
        target = target_dir / f"{stem}-{counter}{suffix}"
        counter += 1
    return target


class PublicFileManager:
    """Публичное файловое хранилище журнала (обложки выпусков и т.п.)."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir else get_settings().public_files_dir

    def get_context_files_path(self, journal_id: int) -> Path:
        return self.base_dir / "journals" / str(journal_id)

    def copy_context_file(self, journal_id: int, source_path: Union[str, Path], dest_name: str) -> Path:
        """
        Скопировать файл в публичное хранилище журнала.

        Args:
            journal_id: ID журнала
            source_path: Исходный файл
            dest_name: Имя файла в хранилище

        Returns:
            Путь к скопированному файлу
        """
        target_dir = self.get_context_files_path(journal_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / secure_filename(dest_name)
        shutil.copyfile(str(source_path), str(target))
        logger.debug(f"Файл {source_path} скопирован в {target}")
        return target

    def delete_context_file(self, journal_id: int, file_name: str) -> bool:
        target = self.get_context_files_path(journal_id) / secure_filename(file_name)
        if target.exists():
            target.unlink()
            return True
        return False


class Repository:
    """
    Доступ к данным журнала через сессию Flask-SQLAlchemy.

    Каждая операция записи сразу фиксируется (commit); откат незавершенного
    импорта выполняет сам парсер, удаляя созданные им объекты.
    """

    def __init__(self, public_files: Optional[PublicFileManager] = None, files_dir: Optional[Path] = None):
        self.session = db.session
        self.public_files = public_files or PublicFileManager()
        self.files_dir = Path(files_dir) if files_dir else get_settings().files_dir

    # ---------------------------------------------------------------
    # Журнал, пользователи, группы, жанры
    # ---------------------------------------------------------------

    def get_journal_by_path(self, path: str) -> Optional[Journal]:
        return Journal.query.filter_by(path=path).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return User.query.filter_by(username=username).first()

    def get_user_groups_by_role(self, role_id: int, journal_id: int) -> List[UserGroup]:
        return (
            UserGroup.query
            .filter_by(role_id=role_id, journal_id=journal_id)
            .order_by(UserGroup.id)
            .all()
        )

    def get_genre_by_key(self, key: str, journal_id: int) -> Optional[Genre]:
        return Genre.query.filter_by(key=key, journal_id=journal_id).first()

    # ---------------------------------------------------------------
    # Статьи
    # ---------------------------------------------------------------

    def get_submission_by_pub_id(self, pub_id_type: str, pub_id: str, journal_id: int) -> Optional[Submission]:
        """Найти статью журнала по публичному идентификатору."""
        return (
            Submission.query
            .join(Publication, Publication.submission_id == Submission.id)
            .join(PublicationId, PublicationId.publication_id == Publication.id)
            .filter(
                Submission.journal_id == journal_id,
                PublicationId.type == pub_id_type,
                PublicationId.value == pub_id,
            )
            .first()
        )

    def add_submission(self, submission: Submission) -> Submission:
        return self._save(submission)

    def edit_submission(self, submission: Submission) -> Submission:
        return self._save(submission)

    def delete_submission(self, submission: Submission) -> None:
        """Удалить статью вместе с публикациями, авторами и файлами."""
        stored = [Path(f.path) for f in submission.files if f.path]
        self._delete(submission)
        for path in stored:
            if path.exists():
                path.unlink()

    def add_publication(self, publication: Publication) -> Publication:
        return self._save(publication)

    def edit_publication(self, publication: Publication) -> Publication:
        return self._save(publication)

    def add_author(self, author: Author) -> Author:
        return self._save(author)

    def add_submission_file(self, submission_file: SubmissionFile, source_path: Union[str, Path]) -> SubmissionFile:
        """
        Скопировать файл статьи в хранилище и зарегистрировать его.

        Args:
            submission_file: Новая запись о файле (submission_id уже задан)
            source_path: Исходный файл из папки статьи

        Returns:
            Сохраненная запись
        """
        submission = self.session.get(Submission, submission_file.submission_id)
        target_dir = (
            self.files_dir / "journals" / str(submission.journal_id)
            / "articles" / str(submission.id)
        )
        target_dir.mkdir(parents=True, exist_ok=True)
        target = _unique_target(target_dir, Path(source_path).name)
        shutil.copyfile(str(source_path), str(target))
        submission_file.path = str(target)
        try:
            return self._save(submission_file)
        except Exception:
            target.unlink()
            raise

    # ---------------------------------------------------------------
    # Выпуски и разделы
    # ---------------------------------------------------------------

    def find_issue(
        self,
        journal_id: int,
        volume: Optional[int],
        number: Optional[str],
        year: Optional[int],
    ) -> Optional[Issue]:
        return Issue.query.filter_by(
            journal_id=journal_id, volume=volume, number=number, year=year
        ).first()

    def add_issue(self, issue: Issue) -> Issue:
        return self._save(issue)

    def edit_issue(self, issue: Issue) -> Issue:
        return self._save(issue)

    def delete_issue(self, issue: Issue) -> None:
        SectionOrder.query.filter_by(issue_id=issue.id).delete()
        self._delete(issue)

    def find_section(self, journal_id: int, title: str, locale: str) -> Optional[Section]:
        for section in Section.query.filter_by(journal_id=journal_id).order_by(Section.id):
            if section.get_title(locale) == title:
                return section
        return None

    def add_section(self, section: Section) -> Section:
        return self._save(section)

    def delete_section(self, section: Section) -> None:
        SectionOrder.query.filter_by(section_id=section.id).delete()
        self._delete(section)

    def get_custom_section_order(self, issue_id: int, section_id: int) -> Optional[float]:
        order = self.session.get(SectionOrder, (issue_id, section_id))
        return order.seq if order else None

    def upsert_custom_section_order(self, issue_id: int, section_id: int, seq: float) -> None:
        order = self.session.get(SectionOrder, (issue_id, section_id))
        if order is None:
            order = SectionOrder(issue_id=issue_id, section_id=section_id, seq=seq)
        else:
            order.seq = seq
        self._save(order)

    # ---------------------------------------------------------------
    # Публичные файлы
    # ---------------------------------------------------------------

    def copy_context_file(self, journal_id: int, source_path: Union[str, Path], dest_name: str) -> Path:
        return self.public_files.copy_context_file(journal_id, source_path, dest_name)

    def delete_context_file(self, journal_id: int, file_name: str) -> bool:
        return self.public_files.delete_context_file(journal_id, file_name)

    # ---------------------------------------------------------------

    def is_persisted(self, entity) -> bool:
        """Сохранен ли объект в базе (и еще не удален)."""
        return entity is not None and inspect(entity).persistent

    def _save(self, entity):
        self.session.add(entity)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return entity

    def _delete(self, entity) -> None:
        self.session.delete(entity)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
