"""Тесты для команды import-articles."""

from artimport.models import Submission


class TestImportCommand:
    """Тесты для команды Flask CLI."""

    def test_import_articles(self, app, journal, make_article, import_dir):
        """Тест: команда импортирует статьи и выводит итоги."""
        make_article()
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "import-articles", "testjournal", "importer", "editor", "import@example.com", str(import_dir),
            "--section", "Varia",
        ])

        assert result.exit_code == 0, result.output
        assert "Импортировано: 1" in result.output
        assert Submission.query.count() == 1

    def test_failed_article_sets_exit_code(self, app, journal, make_article, import_dir):
        """Тест: ошибка импорта статьи дает ненулевой код возврата."""
        make_article("<article>")
        result = app.test_cli_runner().invoke(args=[
            "import-articles", "testjournal", "importer", "editor", "import@example.com", str(import_dir),
        ])

        assert result.exit_code == 1
        assert "С ошибками: 1" in result.output

    def test_configuration_error(self, app, journal, import_dir):
        """Тест: некорректный журнал сообщается как ошибка команды."""
        result = app.test_cli_runner().invoke(args=[
            "import-articles", "unknown", "importer", "editor", "import@example.com", str(import_dir),
        ])

        assert result.exit_code == 1
        assert "unknown" in result.output

    def test_unknown_parser(self, app, journal, import_dir):
        """Тест: неизвестный парсер."""
        result = app.test_cli_runner().invoke(args=[
            "import-articles", "testjournal", "importer", "editor", "import@example.com", str(import_dir),
            "--parser", "artimport.parsers.missing.Parser",
        ])

        assert result.exit_code == 1
