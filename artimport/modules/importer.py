"""Пакетный импорт статей из директории."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from artimport.exceptions import UnsupportedDocTypeError
from artimport.modules.article_entry import ArticleEntry
from artimport.modules.base_parser import ImportResult
from artimport.modules.caches import ImportCaches
from artimport.modules.configuration import Configuration
from artimport.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ImportSummary:
    """Итоги запуска импорта."""

    imported: int = 0
    skipped: int = 0
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (статья, ошибка)

    @property
    def total(self) -> int:
        return self.imported + self.skipped + len(self.failed)


class ArticleImporter:
    """
    Импорт всех статей из директории задания.

    Для каждой статьи парсеры из конфигурации пробуются по порядку: при
    неподдерживаемом DOCTYPE берется следующий парсер, любая другая ошибка
    записывается в лог, и импорт переходит к следующей статье.
    """

    def __init__(self, configuration: Configuration, caches: Optional[ImportCaches] = None):
        self.configuration = configuration
        self.caches = caches or ImportCaches()
        self.logger = logger

    def import_entry(self, entry: ArticleEntry) -> ImportResult:
        """
        Импортировать одну статью первым подходящим парсером.

        Returns:
            Результат последнего примененного парсера
        """
        result = None
        for parser_class in self.configuration.parsers:
            parser = parser_class(self.configuration, entry, self.caches)
            result = parser.run()
            if result.success or not isinstance(result.error, UnsupportedDocTypeError):
                return result
            self.logger.debug(f"{parser_class.__name__} не поддерживает {entry}: {result.error}")
        return result

    def run(self, entries: Optional[Iterable[ArticleEntry]] = None) -> ImportSummary:
        """
        Импортировать статьи.

        Args:
            entries: Статьи для импорта (по умолчанию - все статьи из директории задания)

        Returns:
            Итоги импорта
        """
        if entries is None:
            entries = self.configuration.get_article_iterator()

        summary = ImportSummary()
        for entry in entries:
            self.logger.info(f"Импорт статьи {entry}")
            result = self.import_entry(entry)
            if result.success:
                summary.imported += 1
            elif isinstance(result.error, UnsupportedDocTypeError):
                self.logger.warning(f"Статья {entry} пропущена: ни один парсер не поддерживает документ")
                summary.skipped += 1
            else:
                summary.failed.append((str(entry), str(result.error)))

        self.logger.info(
            f"Импорт завершен: импортировано {summary.imported}, "
            f"пропущено {summary.skipped}, с ошибками {len(summary.failed)}"
        )
        return summary
