"""Модели выпуска, раздела, статьи (submission), публикации, авторов и файлов."""

from datetime import datetime
from typing import Dict, Optional
from artimport.database import db

STATUS_QUEUED = 1
STATUS_PUBLISHED = 3

SUBMISSION_FILE_SUBMISSION = 2
SUBMISSION_FILE_PROOF = 10
SUBMISSION_FILE_DEPENDENT = 17


class Issue(db.Model):
    """Выпуск журнала."""

    __tablename__ = "issues"

    id = db.Column(db.Integer, primary_key=True)
    journal_id = db.Column(db.Integer, db.ForeignKey("journals.id"), nullable=False, index=True)
    volume = db.Column(db.Integer, nullable=True)
    number = db.Column(db.String(40), nullable=True)
    year = db.Column(db.Integer, nullable=True)
    title = db.Column(db.JSON, nullable=False, default=dict)
    published = db.Column(db.Boolean, default=False, nullable=False)
    date_published = db.Column(db.Date, nullable=True)
    cover_image = db.Column(db.JSON, nullable=False, default=dict)  # {локаль: имя файла}
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def set_cover_image(self, file_name: str, locale: str) -> None:
        """Назначить обложку выпуска для локали."""
        # JSON колонка не отслеживает изменения на месте, поэтому присваиваем новый словарь
        covers = dict(self.cover_image or {})
        covers[locale] = file_name
        self.cover_image = covers

    def get_cover_image(self, locale: str) -> Optional[str]:
        return (self.cover_image or {}).get(locale)

    def __repr__(self) -> str:
        return f"<Issue vol={self.volume} no={self.number} year={self.year}>"


class Section(db.Model):
    """Раздел журнала."""

    __tablename__ = "sections"

    id = db.Column(db.Integer, primary_key=True)
    journal_id = db.Column(db.Integer, db.ForeignKey("journals.id"), nullable=False, index=True)
    title = db.Column(db.JSON, nullable=False, default=dict)
    abbrev = db.Column(db.JSON, nullable=False, default=dict)
    seq = db.Column(db.Float, default=0, nullable=False)

    def get_title(self, locale: str) -> Optional[str]:
        return (self.title or {}).get(locale)

    def __repr__(self) -> str:
        return f"<Section {self.title}>"


class SectionOrder(db.Model):
    """Пользовательский порядок разделов внутри выпуска."""

    __tablename__ = "custom_section_orders"

    issue_id = db.Column(db.Integer, db.ForeignKey("issues.id"), primary_key=True)
    section_id = db.Column(db.Integer, db.ForeignKey("sections.id"), primary_key=True)
    seq = db.Column(db.Float, nullable=False)


class Submission(db.Model):
    """Статья, поступившая в журнал."""

    __tablename__ = "submissions"

    id = db.Column(db.Integer, primary_key=True)
    journal_id = db.Column(db.Integer, db.ForeignKey("journals.id"), nullable=False, index=True)
    locale = db.Column(db.String(16), nullable=False)
    status = db.Column(db.Integer, default=STATUS_QUEUED, nullable=False)
    stage_id = db.Column(db.Integer, nullable=True)
    submitter_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    editor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    current_publication_id = db.Column(db.Integer, nullable=True)
    date_submitted = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    publications = db.relationship(
        "Publication",
        backref="submission",
        cascade="all, delete-orphan",
        order_by="Publication.id",
    )
    files = db.relationship(
        "SubmissionFile",
        backref="submission",
        cascade="all, delete-orphan",
        order_by="SubmissionFile.id",
    )

    def __repr__(self) -> str:
        return f"<Submission {self.id}>"


class Publication(db.Model):
    """Версия публикации статьи."""

    __tablename__ = "publications"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey("submissions.id"), nullable=False, index=True)
    issue_id = db.Column(db.Integer, db.ForeignKey("issues.id"), nullable=True)
    section_id = db.Column(db.Integer, db.ForeignKey("sections.id"), nullable=True)
    locale = db.Column(db.String(16), nullable=True)
    title = db.Column(db.JSON, nullable=False, default=dict)
    subtitle = db.Column(db.JSON, nullable=False, default=dict)
    abstract = db.Column(db.JSON, nullable=False, default=dict)
    keywords = db.Column(db.JSON, nullable=False, default=dict)  # {локаль: [слова]}
    pages = db.Column(db.String(40), nullable=True)
    date_published = db.Column(db.Date, nullable=True)
    status = db.Column(db.Integer, default=STATUS_QUEUED, nullable=False)
    seq = db.Column(db.Integer, default=0, nullable=False)
    primary_contact_id = db.Column(db.Integer, nullable=True)

    pub_ids = db.relationship(
        "PublicationId",
        backref="publication",
        cascade="all, delete-orphan",
    )
    authors = db.relationship(
        "Author",
        backref="publication",
        cascade="all, delete-orphan",
        order_by="Author.seq",
    )

    def get_pub_ids(self) -> Dict[str, str]:
        return {pub_id.type: pub_id.value for pub_id in self.pub_ids}

    def __repr__(self) -> str:
        return f"<Publication {self.id}>"


class PublicationId(db.Model):
    """Публичный идентификатор публикации (DOI, publisher-id и т.п.)."""

    __tablename__ = "publication_ids"

    id = db.Column(db.Integer, primary_key=True)
    publication_id = db.Column(db.Integer, db.ForeignKey("publications.id"), nullable=False, index=True)
    type = db.Column(db.String(32), nullable=False)
    value = db.Column(db.String(255), nullable=False)

    __table_args__ = (db.Index("ix_publication_ids_type_value", "type", "value"),)


class Author(db.Model):
    """Автор публикации."""

    __tablename__ = "authors"

    id = db.Column(db.Integer, primary_key=True)
    publication_id = db.Column(db.Integer, db.ForeignKey("publications.id"), nullable=False, index=True)
    given_name = db.Column(db.JSON, nullable=False, default=dict)
    family_name = db.Column(db.JSON, nullable=False, default=dict)
    affiliation = db.Column(db.JSON, nullable=False, default=dict)
    email = db.Column(db.String(120), nullable=False)
    seq = db.Column(db.Integer, default=1, nullable=False)
    include_in_browse = db.Column(db.Boolean, default=True, nullable=False)
    primary_contact = db.Column(db.Boolean, default=False, nullable=False)
    user_group_id = db.Column(db.Integer, db.ForeignKey("user_groups.id"), nullable=True)

    def get_full_name(self, locale: str) -> str:
        parts = [(self.given_name or {}).get(locale), (self.family_name or {}).get(locale)]
        return " ".join(part for part in parts if part)

    def __repr__(self) -> str:
        return f"<Author {self.email} seq={self.seq}>"


class SubmissionFile(db.Model):
    """Файл статьи (PDF, изображения, мультимедиа)."""

    __tablename__ = "submission_files"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey("submissions.id"), nullable=False, index=True)
    genre_id = db.Column(db.Integer, db.ForeignKey("genres.id"), nullable=False)
    file_stage = db.Column(db.Integer, default=SUBMISSION_FILE_SUBMISSION, nullable=False)
    name = db.Column(db.JSON, nullable=False, default=dict)
    original_file_name = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(1024), nullable=True)
    uploader_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def __repr__(self) -> str:
        return f"<SubmissionFile {self.original_file_name}>"
