"""Модели базы данных."""

from artimport.models.journal import Journal, UserGroup, Genre
from artimport.models.user import User
from artimport.models.publication import (
    Issue,
    Section,
    SectionOrder,
    Submission,
    Publication,
    PublicationId,
    Author,
    SubmissionFile,
)

__all__ = [
    "Journal",
    "UserGroup",
    "Genre",
    "User",
    "Issue",
    "Section",
    "SectionOrder",
    "Submission",
    "Publication",
    "PublicationId",
    "Author",
    "SubmissionFile",
]
