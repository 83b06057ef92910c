"""Тесты для процесса импорта статьи: проверка, дубликаты, откат."""

import pytest

from artimport.database import db
from artimport.exceptions import (
    AlreadyExistsError,
    BuildFailureError,
    MalformedDocumentError,
    RollbackError,
    UnsupportedDocTypeError,
)
from artimport.models import Author, Issue, Publication, Section, SectionOrder, Submission, SubmissionFile
from artimport.modules.article_entry import ArticleEntry
from artimport.modules.base_parser import ImportState
from artimport.modules.caches import ImportCaches
from artimport.parsers.jats import JatsParser


class CountingParser(JatsParser):
    """Парсер, считающий вызовы отката."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rollbacks = 0

    def rollback(self):
        self.rollbacks += 1
        super().rollback()


class BrokenRollbackParser(JatsParser):
    def rollback(self):
        raise OSError("хранилище недоступно")


def _entry(folder):
    return ArticleEntry.from_folder(folder)


class TestImportPipeline:
    """Тесты для BaseParser.run/execute."""

    def test_successful_import(self, configuration, make_article):
        """Тест: статья импортируется, состояние COMMITTED."""
        parser = JatsParser(configuration, _entry(make_article()))
        result = parser.run()

        assert result.success
        assert result.error is None
        assert parser.state is ImportState.COMMITTED
        assert result.publication.get_pub_ids() == {"publisher-id": "art-1", "doi": "10.1234/test.1"}

    def test_execute_returns_publication(self, configuration, make_article):
        """Тест: execute возвращает сохраненную публикацию."""
        publication = JatsParser(configuration, _entry(make_article())).execute()
        assert db.session.get(Publication, publication.id) is not None

    def test_parser_is_single_use(self, configuration, make_article):
        """Тест: повторный запуск парсера запрещен."""
        parser = JatsParser(configuration, _entry(make_article()))
        parser.execute()
        with pytest.raises(RuntimeError):
            parser.execute()

    def test_unsupported_doctype_makes_no_writes(self, configuration, repository, make_article, jats):
        """Тест: неподдерживаемый DOCTYPE не приводит ни к одной записи."""
        other = '<!DOCTYPE article PUBLIC "-//Other//DTD Article//EN" "article.dtd">'
        parser = CountingParser(configuration, _entry(make_article(jats(doctype=other))))
        result = parser.run()

        assert isinstance(result.error, UnsupportedDocTypeError)
        assert result.failed_at is ImportState.START
        assert result.rolled_back is False
        assert parser.rollbacks == 0
        assert repository.writes == 0

    def test_malformed_document(self, configuration, repository, make_article):
        """Тест: некорректный XML завершает импорт без записей."""
        parser = JatsParser(configuration, _entry(make_article("<article><front>")))
        with pytest.raises(MalformedDocumentError):
            parser.execute()
        assert repository.writes == 0

    def test_several_xml_files(self, configuration, repository, make_article, jats):
        """Тест: несколько XML файлов в папке статьи."""
        folder = make_article()
        (folder / "second.xml").write_text(jats(), encoding="utf-8")
        result = JatsParser(configuration, _entry(folder)).run()
        assert isinstance(result.error, MalformedDocumentError)
        assert repository.writes == 0

    def test_duplicate_detected_before_build(self, configuration, repository, make_article):
        """Тест: дубликат обнаруживается до построения публикации."""
        folder = make_article()
        JatsParser(configuration, _entry(folder)).execute()
        writes = repository.writes

        parser = CountingParser(configuration, _entry(folder))
        with pytest.raises(AlreadyExistsError) as exc_info:
            parser.execute()

        assert exc_info.value.pub_id_type == "publisher-id"
        assert exc_info.value.pub_id == "art-1"
        assert parser.rollbacks == 0
        assert repository.writes == writes
        assert Submission.query.count() == 1

    def test_duplicate_by_doi(self, configuration, make_article, jats):
        """Тест: дубликат находится по любому идентификатору."""
        JatsParser(configuration, _entry(make_article(article="1"))).execute()
        folder = make_article(jats(publisher_id="art-2"), article="2")
        with pytest.raises(AlreadyExistsError) as exc_info:
            JatsParser(configuration, _entry(folder)).execute()
        assert exc_info.value.pub_id_type == "doi"

    def test_build_failure_rolls_back_everything(
        self, configuration, repository, make_article, storage_dirs, monkeypatch
    ):
        """Тест: ошибка построения вызывает один откат и удаляет все созданное."""
        folder = make_article(files={"article.pdf": b"%PDF-1.4", "fig1.png": b"png"})
        (folder.parent / "cover.png").write_bytes(b"cover")

        def fail(author):
            raise RuntimeError("ошибка записи автора")

        monkeypatch.setattr(repository, "add_author", fail)
        parser = CountingParser(configuration, _entry(folder), ImportCaches())
        result = parser.run()

        assert isinstance(result.error, BuildFailureError)
        assert isinstance(result.error.original, RuntimeError)
        assert result.error.__cause__ is result.error.original
        assert result.failed_at is ImportState.DEDUP_CHECKED
        assert result.rolled_back is True
        assert parser.rollbacks == 1
        assert parser.state is ImportState.FAILED

        for model in (Submission, Publication, Author, Issue, Section, SectionOrder, SubmissionFile):
            assert model.query.count() == 0
        assert not any(storage_dirs["public"].rglob("*.*"))
        assert not any(storage_dirs["files"].rglob("*.*"))

    def test_existing_issue_survives_rollback(self, configuration, make_article, jats, monkeypatch):
        """Тест: откат не удаляет выпуск и раздел, созданные другой статьей."""
        JatsParser(configuration, _entry(make_article(article="1"))).execute()

        folder = make_article(jats(publisher_id="art-2", doi=None), article="2")
        parser = CountingParser(configuration, _entry(folder))
        monkeypatch.setattr(parser, "_process_files", lambda submission: 1 / 0)
        result = parser.run()

        assert isinstance(result.error.original, ZeroDivisionError)
        assert Submission.query.count() == 1
        assert Issue.query.count() == 1
        assert Section.query.count() == 1

    def test_rollback_failure(self, configuration, repository, make_article, monkeypatch):
        """Тест: ошибка отката возвращается вместе с исходной ошибкой."""
        monkeypatch.setattr(repository, "add_author", lambda author: 1 / 0)
        parser = BrokenRollbackParser(configuration, _entry(make_article()))
        result = parser.run()

        assert isinstance(result.error, RollbackError)
        assert isinstance(result.error.original, BuildFailureError)
        assert isinstance(result.error.rollback_error, OSError)
        assert result.rolled_back is False
        with pytest.raises(RuntimeError):
            parser.execute()
