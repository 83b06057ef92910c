"""Модули процесса импорта статей."""

from artimport.modules.article_entry import ArticleEntry, ArticleIterator
from artimport.modules.base_parser import BaseParser, ImportResult, ImportState
from artimport.modules.caches import GenreCache, ImportCaches, SectionOrderRegistry
from artimport.modules.configuration import Configuration
from artimport.modules.importer import ArticleImporter, ImportSummary
from artimport.modules.locale_resolver import LocaleResolver

__all__ = [
    "ArticleEntry",
    "ArticleIterator",
    "BaseParser",
    "ImportResult",
    "ImportState",
    "GenreCache",
    "ImportCaches",
    "SectionOrderRegistry",
    "Configuration",
    "ArticleImporter",
    "ImportSummary",
    "LocaleResolver",
]
