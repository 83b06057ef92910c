"""Тесты для пакетного импорта."""

from artimport.models import Submission
from artimport.modules.article_entry import ArticleEntry
from artimport.modules.configuration import Configuration
from artimport.modules.importer import ArticleImporter
from artimport.parsers.jats import JatsParser


class NothingParser(JatsParser):
    """Парсер, не поддерживающий ни одного DOCTYPE."""

    def get_doc_types(self):
        return []


def _configure(repository, import_dir, parsers):
    return Configuration(
        repository, parsers, "testjournal", "importer", "editor", "import@example.com", import_dir
    )


class TestArticleImporter:
    """Тесты для ArticleImporter."""

    def test_run_continues_after_failures(self, configuration, make_article, jats):
        """Тест: ошибка одной статьи не останавливает импорт остальных."""
        other = '<!DOCTYPE article PUBLIC "-//Other//DTD Article//EN" "article.dtd">'
        make_article(article="1")
        make_article(jats(publisher_id="art-2", doi="10.1234/test.2"), article="2")
        make_article(jats(publisher_id="art-1", doi=None), article="3")
        make_article(jats(publisher_id="art-4", doi=None, doctype=other), article="4")
        make_article("<article>", article="5")

        summary = ArticleImporter(configuration).run()

        assert summary.imported == 2
        assert summary.skipped == 1
        assert [article for article, _ in summary.failed] == ["1/2/3", "1/2/5"]
        assert summary.total == 5
        assert Submission.query.count() == 2

    def test_next_parser_on_unsupported_doctype(self, repository, import_dir, make_article):
        """Тест: при неподдерживаемом DOCTYPE пробуется следующий парсер."""
        make_article()
        configuration = _configure(repository, import_dir, [NothingParser, JatsParser])

        summary = ArticleImporter(configuration).run()
        assert summary.imported == 1

    def test_no_parser_supports_document(self, repository, import_dir, make_article):
        """Тест: статья пропускается, если ни один парсер не подошел."""
        folder = make_article()
        configuration = _configure(repository, import_dir, [NothingParser])

        importer = ArticleImporter(configuration)
        result = importer.import_entry(ArticleEntry.from_folder(folder))
        assert not result.success
        assert importer.run().skipped == 1
        assert repository.writes == 0

    def test_caches_shared_between_articles(self, configuration, make_article, jats):
        """Тест: кэш жанров общий для всех статей запуска."""
        make_article(files={"fig1.png": b"png"}, article="1")
        make_article(jats(publisher_id="art-2", doi=None), files={"fig2.png": b"png"}, article="2")

        importer = ArticleImporter(configuration)
        importer.run()
        assert len(importer.caches.genres) == 1
        assert importer.caches.section_order.is_included(1, 1)
