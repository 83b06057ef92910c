"""Общие фикстуры тестов: приложение с БД в памяти, журнал, статьи JATS."""

from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from artimport.app import create_app
from artimport.config.settings import get_settings
from artimport.database import db
from artimport.models import Genre, Journal, User, UserGroup
from artimport.models.journal import (
    GENRE_IMAGE,
    GENRE_MULTIMEDIA,
    GENRE_SUBMISSION,
    ROLE_ID_AUTHOR,
    ROLE_ID_MANAGER,
    WORKFLOW_STAGE_ID_PRODUCTION,
    WORKFLOW_STAGE_ID_SUBMISSION,
)
from artimport.modules.configuration import Configuration
from artimport.parsers.jats import JatsParser
from artimport.repository import PublicFileManager, Repository

JATS_DOCTYPE = (
    '<!DOCTYPE article PUBLIC "-//NLM//DTD JATS (Z39.96) Journal Publishing DTD v1.2 20190208//EN" '
    '"https://jats.nlm.nih.gov/publishing/1.2/JATS-journalpublishing1.dtd">'
)

DEFAULT_AUTHORS = [
    {"surname": "Tremblay", "given": "Marie", "email": "marie@example.com", "aff": "aff1"},
    {"surname": "Gagnon", "given": "Luc", "corresp": True, "aff": "aff1"},
]


def build_jats(
    publisher_id: str = "art-1",
    doi: Optional[str] = "10.1234/test.1",
    title: str = "Titre de l'article",
    lang: str = "fr",
    section: Optional[str] = "Recherche",
    volume: str = "3",
    issue: str = "2",
    year: str = "2021",
    authors: Optional[Iterable[Dict]] = None,
    doctype: str = JATS_DOCTYPE,
) -> str:
    """Собрать XML статьи JATS."""
    authors = DEFAULT_AUTHORS if authors is None else list(authors)
    contribs = []
    for author in authors:
        corresp = ' corresp="yes"' if author.get("corresp") else ""
        email = f"<email>{author['email']}</email>" if author.get("email") else ""
        xref = f'<xref ref-type="aff" rid="{author["aff"]}"/>' if author.get("aff") else ""
        contribs.append(
            f'<contrib contrib-type="author"{corresp}>'
            f"<name><surname>{author['surname']}</surname><given-names>{author['given']}</given-names></name>"
            f"{email}{xref}</contrib>"
        )
    contrib_group = f"<contrib-group>{''.join(contribs)}</contrib-group>" if contribs else ""
    categories = (
        f'<article-categories><subj-group subj-group-type="heading"><subject>{section}</subject>'
        f"</subj-group></article-categories>"
        if section else ""
    )
    doi_id = f'<article-id pub-id-type="doi">{doi}</article-id>' if doi else ""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
{doctype}
<article xmlns:xlink="http://www.w3.org/1999/xlink" article-type="research-article" xml:lang="{lang}">
  <front>
    <journal-meta><journal-title-group><journal-title>Revue de test</journal-title></journal-title-group></journal-meta>
    <article-meta>
      <article-id pub-id-type="publisher-id">{publisher_id}</article-id>
      {doi_id}
      {categories}
      <title-group>
        <article-title>{title}</article-title>
        <trans-title-group xml:lang="en"><trans-title>Article title</trans-title></trans-title-group>
      </title-group>
      {contrib_group}
      <aff id="aff1"><label>1</label><institution>Université de Montréal</institution></aff>
      <pub-date pub-type="epub"><day>15</day><month>03</month><year>{year}</year></pub-date>
      <volume>{volume}</volume>
      <issue>{issue}</issue>
      <fpage>10</fpage>
      <lpage>20</lpage>
      <abstract><title>Résumé</title><p>Un résumé <italic>important</italic> &amp; court.</p></abstract>
      <trans-abstract xml:lang="en"><title>Abstract</title><p>A short abstract.</p></trans-abstract>
      <kwd-group xml:lang="fr"><kwd>histoire</kwd><kwd>archives</kwd></kwd-group>
      <kwd-group xml:lang="en"><kwd>history</kwd></kwd-group>
    </article-meta>
  </front>
  <body><p>Texte.</p></body>
</article>
"""


@pytest.fixture
def jats():
    """Построитель XML статьи JATS."""
    return build_jats


@pytest.fixture(autouse=True)
def storage_dirs(tmp_path, monkeypatch):
    """Хранилища файлов во временной директории."""
    settings = get_settings()
    files_dir = tmp_path / "files"
    public_dir = tmp_path / "public"
    files_dir.mkdir()
    public_dir.mkdir()
    monkeypatch.setattr(settings, "files_dir", files_dir)
    monkeypatch.setattr(settings, "public_files_dir", public_dir)
    return {"files": files_dir, "public": public_dir}


@pytest.fixture
def app():
    """Приложение с базой данных в памяти и активным контекстом."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def journal(app):
    """Журнал с пользователями, группами и жанрами."""
    journal = Journal(
        path="testjournal",
        names={"fr_CA": "Revue de test", "en_US": "Test Journal"},
        primary_locale="fr_CA",
        supported_locales=["fr_CA", "en_US"],
    )
    db.session.add(journal)
    db.session.flush()

    db.session.add_all([
        User(username="importer", email="importer@example.com"),
        User(username="editor", email="editor@example.com"),
        UserGroup(journal_id=journal.id, role_id=ROLE_ID_MANAGER, name="Journal manager",
                  stage_ids=[WORKFLOW_STAGE_ID_SUBMISSION]),
        UserGroup(journal_id=journal.id, role_id=ROLE_ID_MANAGER, name="Production editor",
                  stage_ids=[WORKFLOW_STAGE_ID_PRODUCTION]),
        UserGroup(journal_id=journal.id, role_id=ROLE_ID_AUTHOR, name="Author", stage_ids=[]),
        Genre(journal_id=journal.id, key=GENRE_SUBMISSION),
        Genre(journal_id=journal.id, key=GENRE_IMAGE),
        Genre(journal_id=journal.id, key=GENRE_MULTIMEDIA),
    ])
    db.session.commit()
    return journal


class SpyRepository(Repository):
    """Репозиторий, считающий операции записи."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.writes = 0

    def _save(self, entity):
        self.writes += 1
        return super()._save(entity)

    def _delete(self, entity) -> None:
        self.writes += 1
        super()._delete(entity)

    def copy_context_file(self, journal_id, source_path, dest_name):
        self.writes += 1
        return super().copy_context_file(journal_id, source_path, dest_name)


@pytest.fixture
def repository(journal, storage_dirs):
    return SpyRepository(PublicFileManager(storage_dirs["public"]), storage_dirs["files"])


@pytest.fixture
def import_dir(tmp_path):
    path = tmp_path / "import"
    path.mkdir()
    return path


@pytest.fixture
def make_article(import_dir):
    """Создать папку статьи import/<том>/<выпуск>/<статья> с XML и файлами."""

    def _make(xml: Optional[str] = None, volume="1", issue="2", article="1",
              files: Optional[Dict[str, bytes]] = None, xml_name="article.xml") -> Path:
        folder = import_dir / volume / issue / article
        folder.mkdir(parents=True, exist_ok=True)
        (folder / xml_name).write_text(xml if xml is not None else build_jats(), encoding="utf-8")
        for name, content in (files or {}).items():
            (folder / name).write_bytes(content)
        return folder

    return _make


@pytest.fixture
def configuration(repository, import_dir):
    return Configuration(
        repository,
        [JatsParser],
        "testjournal",
        "importer",
        "editor",
        "import@example.com",
        import_dir,
    )
