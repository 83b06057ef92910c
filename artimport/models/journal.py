"""Модели журнала (контекста), групп пользователей и жанров файлов."""

from typing import Optional
from artimport.database import db

# Идентификаторы ролей и этапов, совместимые с журнальной платформой
ROLE_ID_MANAGER = 16
ROLE_ID_AUTHOR = 65
WORKFLOW_STAGE_ID_SUBMISSION = 1
WORKFLOW_STAGE_ID_PRODUCTION = 5

GENRE_SUBMISSION = "SUBMISSION"
GENRE_IMAGE = "IMAGE"
GENRE_MULTIMEDIA = "MULTIMEDIA"


class Journal(db.Model):
    """Журнал, в который импортируются статьи."""

    __tablename__ = "journals"

    id = db.Column(db.Integer, primary_key=True)
    path = db.Column(db.String(64), unique=True, nullable=False, index=True)
    names = db.Column(db.JSON, nullable=False, default=dict)  # {локаль: название}
    primary_locale = db.Column(db.String(16), nullable=False, default="en")
    supported_locales = db.Column(db.JSON, nullable=False, default=list)

    def get_name(self, locale: Optional[str] = None) -> str:
        """
        Получить название журнала на указанной локали.

        Args:
            locale: Локаль (по умолчанию - основная локаль журнала)

        Returns:
            Название журнала или пустая строка
        """
        names = self.names or {}
        if locale and names.get(locale):
            return names[locale]
        return names.get(self.primary_locale) or ""

    def __repr__(self) -> str:
        return f"<Journal {self.path}>"


class UserGroup(db.Model):
    """Группа пользователей журнала (роль + этапы редакционного процесса)."""

    __tablename__ = "user_groups"

    id = db.Column(db.Integer, primary_key=True)
    journal_id = db.Column(db.Integer, db.ForeignKey("journals.id"), nullable=False, index=True)
    role_id = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    stage_ids = db.Column(db.JSON, nullable=False, default=list)

    def has_stage(self, stage_id: int) -> bool:
        """Проверить, назначена ли группа на этап."""
        return stage_id in (self.stage_ids or [])

    def __repr__(self) -> str:
        return f"<UserGroup {self.name} role={self.role_id}>"


class Genre(db.Model):
    """Жанр (категория содержимого) файлов статьи."""

    __tablename__ = "genres"

    id = db.Column(db.Integer, primary_key=True)
    journal_id = db.Column(db.Integer, db.ForeignKey("journals.id"), nullable=False, index=True)
    key = db.Column(db.String(30), nullable=False)

    __table_args__ = (db.UniqueConstraint("journal_id", "key"),)

    def __repr__(self) -> str:
        return f"<Genre {self.key}>"
