"""Команда импорта статей для Flask CLI."""

import click
from flask import current_app
from flask.cli import with_appcontext

from artimport.exceptions import ConfigurationError
from artimport.modules.configuration import Configuration
from artimport.modules.importer import ArticleImporter
from artimport.parsers import DEFAULT_PARSERS
from artimport.repository import Repository


@click.command("import-articles")
@click.argument("journal")
@click.argument("username")
@click.argument("editor")
@click.argument("email")
@click.argument("import_path", type=click.Path(file_okay=False))
@click.option(
    "--parser",
    "parsers",
    multiple=True,
    help="Класс парсера (полное имя для импорта); можно указать несколько раз.",
)
@click.option("--section", default=None, help="Название раздела по умолчанию.")
@with_appcontext
def import_articles_command(journal, username, editor, email, import_path, parsers, section):
    """Импортировать статьи из IMPORT_PATH (том/выпуск/статья) в журнал JOURNAL."""
    try:
        configuration = Configuration(
            Repository(),
            list(parsers) or DEFAULT_PARSERS,
            journal,
            username,
            editor,
            email,
            import_path,
            default_section_name=section,
        )
    except ConfigurationError as e:
        current_app.logger.error(f"Ошибка конфигурации: {e}")
        raise click.ClickException(str(e))

    summary = ArticleImporter(configuration).run()

    click.echo(f"Импортировано: {summary.imported}")
    click.echo(f"Пропущено: {summary.skipped}")
    click.echo(f"С ошибками: {len(summary.failed)}")
    for article, error in summary.failed:
        click.echo(f"  {article}: {error}")

    if summary.failed:
        raise SystemExit(1)
