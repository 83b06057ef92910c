"""Парсер метаданных статей в формате JATS (Journal Publishing)."""

from datetime import date, datetime
from typing import Dict, List, Optional
import re

from lxml import etree

from artimport.models import (
    Author,
    Issue,
    Publication,
    PublicationId,
    Section,
    Submission,
    SubmissionFile,
)
from artimport.models.journal import WORKFLOW_STAGE_ID_PRODUCTION
from artimport.models.publication import (
    STATUS_PUBLISHED,
    SUBMISSION_FILE_DEPENDENT,
    SUBMISSION_FILE_PROOF,
)
from artimport.modules.base_parser import BaseParser
from artimport.modules.xml_toolkit import DocType, local_name
from artimport.utils.logger import get_logger

logger = get_logger(__name__)

JATS_DOC_TYPES = [
    DocType(
        "article",
        "-//NLM//DTD JATS (Z39.96) Journal Publishing DTD v1.1 20151215//EN",
        "https://jats.nlm.nih.gov/publishing/1.1/JATS-journalpublishing1.dtd",
    ),
    DocType(
        "article",
        "-//NLM//DTD JATS (Z39.96) Journal Publishing DTD v1.2 20190208//EN",
        "https://jats.nlm.nih.gov/publishing/1.2/JATS-journalpublishing1.dtd",
    ),
    DocType(
        "article",
        "-//NLM//DTD JATS (Z39.96) Journal Publishing DTD v1.3 20210610//EN",
        "https://jats.nlm.nih.gov/publishing/1.3/JATS-journalpublishing1-3.dtd",
    ),
    DocType(
        "article",
        "-//NLM//DTD Journal Publishing DTD v3.0 20080202//EN",
        "http://dtd.nlm.nih.gov/publishing/3.0/journalpublishing3.dtd",
    ),
]

# Публичные идентификаторы, по которым проверяются дубликаты
PUB_ID_TYPES = ("publisher-id", "doi")

# Внутренняя разметка JATS -> HTML
_INLINE_TAGS = {
    "italic": "i",
    "bold": "b",
    "sup": "sup",
    "sub": "sub",
    "underline": "u",
    "p": "p",
}

_WHITESPACE = re.compile(r"\s+")


def _to_html(node: etree._Element, text: str) -> str:
    name = local_name(node)
    if name == "label":
        return ""
    parent = node.getparent()
    if name == "title" and parent is not None and local_name(parent) in ("abstract", "trans-abstract"):
        return ""
    tag = _INLINE_TAGS.get(name)
    if tag:
        return f"<{tag}>{text}</{tag}>"
    return text


def _normalize_spaces(text: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def _to_int(value: Optional[str]) -> Optional[int]:
    match = re.search(r"\d+", value or "")
    return int(match.group(0)) if match else None


class JatsParser(BaseParser):
    """Импорт статьи из JATS XML: выпуск, раздел, статья, публикация, авторы и файлы."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._issue: Optional[Issue] = None
        self._issue_created = False
        self._section: Optional[Section] = None
        self._section_created = False
        self._submission: Optional[Submission] = None
        self._publication: Optional[Publication] = None

    def get_doc_types(self) -> List[DocType]:
        return list(JATS_DOC_TYPES)

    def get_public_ids(self) -> Dict[str, str]:
        meta = self._article_meta()
        ids = {}
        for pub_id_type in PUB_ID_TYPES:
            value = self.select_text("article-id[@pub-id-type=$pub_id_type]", meta, pub_id_type=pub_id_type)
            if value:
                ids[pub_id_type] = value
        return ids

    # ---------------------------------------------------------------
    # Выпуск и раздел
    # ---------------------------------------------------------------

    def get_issue(self) -> Issue:
        if self._issue is not None:
            return self._issue

        meta = self._article_meta()
        entry = self.article_entry
        published = self._publication_date()
        volume = _to_int(self.select_text("volume", meta)) or _to_int(entry.volume)
        number = self.select_text("issue", meta) or entry.issue
        year = published.year if published else None

        repository = self.repository
        issue = repository.find_issue(self.context_id, volume, number, year)
        if issue is None:
            issue = Issue(
                journal_id=self.context_id,
                volume=volume,
                number=number,
                year=year,
                title={},
                published=True,
                date_published=published,
                cover_image={},
            )
            repository.add_issue(issue)
            self._issue, self._issue_created = issue, True
            logger.info(f"Создан выпуск {issue.id}: том {volume}, номер {number}, год {year}")
            self.set_issue_cover(entry.issue_folder, issue)
        self._issue = issue
        return issue

    def get_section(self) -> Section:
        if self._section is not None:
            return self._section

        meta = self._article_meta()
        locale = self.get_locale()
        title = (
            self.select_text("article-categories/subj-group[@subj-group-type='heading']/subject", meta)
            or self.configuration.default_section_name
        )
        repository = self.repository
        section = repository.find_section(self.context_id, title, locale)
        if section is None:
            abbrev = "".join(word[0] for word in title.split()).upper()
            section = Section(
                journal_id=self.context_id,
                title={locale: title},
                abbrev={locale: abbrev},
                seq=0,
            )
            repository.add_section(section)
            self._section_created = True
            logger.info(f"Создан раздел {section.id}: {title}")
        self._section = section
        return section

    # ---------------------------------------------------------------
    # Статья и публикация
    # ---------------------------------------------------------------

    def get_submission(self) -> Submission:
        if self._submission is not None:
            return self._submission

        configuration = self.configuration
        published = self._publication_date()
        submission = Submission(
            journal_id=self.context_id,
            locale=self._article_locale(),
            status=STATUS_PUBLISHED,
            stage_id=WORKFLOW_STAGE_ID_PRODUCTION,
            submitter_id=configuration.user.id,
            editor_id=configuration.editor.id,
            date_submitted=datetime.combine(published, datetime.min.time()) if published else datetime.utcnow(),
        )
        self.repository.add_submission(submission)
        self._submission = submission
        return submission

    def get_publication(self) -> Publication:
        if self._publication is not None:
            return self._publication

        issue = self.get_issue()
        section = self.get_section()
        submission = self.get_submission()
        meta = self._article_meta()
        repository = self.repository

        publication = Publication(
            submission_id=submission.id,
            issue_id=issue.id,
            section_id=section.id,
            locale=submission.locale,
            title=self._localized("title-group/article-title", "title-group/trans-title-group", "trans-title"),
            subtitle=self._localized("title-group/subtitle", "title-group/trans-title-group", "trans-subtitle"),
            abstract=self._abstracts(),
            keywords=self._keywords(),
            pages=self._pages(meta),
            date_published=self._publication_date(),
            status=STATUS_PUBLISHED,
            seq=_to_int(self.article_entry.article) or 0,
        )
        for pub_id_type, pub_id in self.get_public_ids().items():
            publication.pub_ids.append(PublicationId(type=pub_id_type, value=pub_id))
        repository.add_publication(publication)
        self._publication = publication

        authors = self._process_authors(publication)
        primary = next((author for author in authors if author.primary_contact), authors[0])
        publication.primary_contact_id = primary.id
        repository.edit_publication(publication)

        submission.current_publication_id = publication.id
        repository.edit_submission(submission)

        self._process_files(submission)
        # Порядок разделов - последняя запись, после нее ошибок построения уже нет
        self.include_section(section)
        return publication

    def rollback(self) -> None:
        """Удалить созданные статью, раздел, выпуск и скопированные файлы."""
        repository = self.repository
        if self._submission is not None and repository.is_persisted(self._submission):
            repository.delete_submission(self._submission)
        self._submission = None
        self._publication = None

        if self._section_created and repository.is_persisted(self._section):
            repository.delete_section(self._section)
        self._section = None
        self._section_created = False

        self._remove_public_files()
        if self._issue_created and repository.is_persisted(self._issue):
            repository.delete_issue(self._issue)
        self._issue = None
        self._issue_created = False
        logger.info(f"Откат статьи {self.article_entry} выполнен")

    # ---------------------------------------------------------------
    # Извлечение полей
    # ---------------------------------------------------------------

    def _article_meta(self) -> etree._Element:
        meta = self.select_first("/article/front/article-meta")
        if meta is None:
            raise ValueError("В документе нет элемента article-meta")
        return meta

    def _article_locale(self) -> str:
        return self.get_locale(self.evaluate("string(/article/@xml:lang)"))

    def _node_locale(self, node: etree._Element, default: Optional[str] = None) -> str:
        lang = self.evaluate("string(@xml:lang)", node)
        return self.get_locale(lang) if lang else (default or self._article_locale())

    def _html(self, node: Optional[etree._Element]) -> str:
        return _normalize_spaces(self.get_text_content(node, _to_html))

    def _localized(self, main_path: str, group_path: str, trans_name: str) -> Dict[str, str]:
        """Значения поля по локалям: основное на языке статьи, переводы из trans-групп."""
        meta = self._article_meta()
        values: Dict[str, str] = {}
        main = self.select_first(main_path, meta)
        if main is not None:
            text = self._html(main)
            if text:
                values[self._article_locale()] = text
        for group in self.select(group_path, meta):
            node = self.select_first(trans_name, group)
            if node is None:
                continue
            locale = self._node_locale(node, self._node_locale(group))
            text = self._html(node)
            if text and locale not in values:
                values[locale] = text
        return values

    def _abstracts(self) -> Dict[str, str]:
        meta = self._article_meta()
        values: Dict[str, str] = {}
        for node in self.select("abstract[not(@abstract-type)] | trans-abstract", meta):
            locale = self._node_locale(node)
            text = self._html(node)
            if text and locale not in values:
                values[locale] = text
        return values

    def _keywords(self) -> Dict[str, List[str]]:
        meta = self._article_meta()
        values: Dict[str, List[str]] = {}
        for group in self.select("kwd-group", meta):
            locale = self._node_locale(group)
            for node in self.select("kwd", group):
                text = _normalize_spaces(self.select_text(".", node))
                if text and text not in values.setdefault(locale, []):
                    values[locale].append(text)
        return values

    def _pages(self, meta: etree._Element) -> Optional[str]:
        first = self.select_text("fpage", meta)
        last = self.select_text("lpage", meta)
        if first and last and first != last:
            return f"{first}-{last}"
        return first or self.select_text("elocation-id", meta) or None

    def _publication_date(self) -> Optional[date]:
        meta = self._article_meta()
        nodes = self.select("pub-date", meta)
        if not nodes:
            return None
        preferred = [
            node for node in nodes
            if (node.get("pub-type") or node.get("date-type")) in ("epub", "ppub", "pub")
        ]
        node = (preferred or nodes)[0]
        year = _to_int(self.select_text("year", node))
        if year is None:
            return None
        month = _to_int(self.select_text("month", node)) or 1
        day = _to_int(self.select_text("day", node)) or 1
        try:
            return date(year, month, day)
        except ValueError:
            return date(year, 1, 1)

    # ---------------------------------------------------------------
    # Авторы и файлы
    # ---------------------------------------------------------------

    def _process_authors(self, publication: Publication) -> List[Author]:
        meta = self._article_meta()
        contribs = self.select("contrib-group/contrib[@contrib-type='author']", meta)
        if not contribs:
            logger.info(f"В статье {self.article_entry} нет авторов, создается автор по умолчанию")
            return [self._create_default_author(publication)]

        configuration = self.configuration
        locale = publication.locale or self.get_locale()
        corresponding = [i for i, c in enumerate(contribs) if c.get("corresp") == "yes"]
        primary_index = corresponding[0] if corresponding else 0

        authors = []
        for index, contrib in enumerate(contribs):
            surname = self.select_text("name/surname", contrib)
            given_names = self.select_text("name/given-names", contrib)
            if not surname and not given_names:
                given_names = self.select_text("string-name", contrib) or self.select_text("collab", contrib)
            if not given_names:
                given_names, surname = surname, ""
            author = Author(
                publication_id=publication.id,
                given_name={locale: given_names},
                family_name={locale: surname} if surname else {},
                affiliation=self._affiliation(contrib, locale),
                email=self.select_text("email", contrib) or configuration.email,
                seq=index + 1,
                include_in_browse=True,
                primary_contact=index == primary_index,
                user_group_id=configuration.author_group_id,
            )
            self.repository.add_author(author)
            logger.debug(f"Автор {author.seq} статьи {self.article_entry}: {author.get_full_name(locale)}")
            authors.append(author)
        return authors

    def _affiliation(self, contrib: etree._Element, locale: str) -> Dict[str, str]:
        names = []
        for rid in self.select("xref[@ref-type='aff']/@rid", contrib):
            for aff_id in str(rid).split():
                aff = self.select_first("//aff[@id=$aff_id]", aff_id=aff_id)
                if aff is None:
                    continue
                name = self.select_text("institution", aff) or _normalize_spaces(
                    "".join(aff.xpath("text() | *[not(self::label)]//text()"))
                )
                if name:
                    names.append(name)
        inline = self.select_text("aff", contrib)
        if inline:
            names.append(inline)
        return {locale: "; ".join(names)} if names else {}

    def _process_files(self, submission: Submission) -> None:
        entry = self.article_entry
        configuration = self.configuration
        locale = submission.locale
        galleys = [path for path in (entry.submission_file, entry.html_file) if path is not None]
        for path in galleys:
            self.repository.add_submission_file(
                SubmissionFile(
                    submission_id=submission.id,
                    genre_id=configuration.submission_genre.id,
                    file_stage=SUBMISSION_FILE_PROOF,
                    name={locale: path.name},
                    original_file_name=path.name,
                    uploader_id=configuration.user.id,
                ),
                path,
            )
        for path in entry.asset_files:
            self.repository.add_submission_file(
                SubmissionFile(
                    submission_id=submission.id,
                    genre_id=self._get_genre_id(self.context_id, path.suffix),
                    file_stage=SUBMISSION_FILE_DEPENDENT,
                    name={locale: path.name},
                    original_file_name=path.name,
                    uploader_id=configuration.user.id,
                ),
                path,
            )
