"""Загрузка XML метаданных статьи, проверка DOCTYPE и извлечение данных через XPath."""

from dataclasses import dataclass
from html import escape
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union
import re

from lxml import etree
from lxml.etree import XMLSyntaxError

from artimport.exceptions import MalformedDocumentError, UnsupportedDocTypeError
from artimport.utils.logger import get_logger

logger = get_logger(__name__)

XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

_TAG_PATTERN = re.compile(r"<[^>]*>")


def _create_strict_parser() -> etree.XMLParser:
    """
    Создает строгий парсер XML: без восстановления, без подстановки сущностей и сети.

    Returns:
        Настроенный XMLParser
    """
    return etree.XMLParser(
        recover=False,
        remove_blank_text=False,
        resolve_entities=False,
        load_dtd=False,
        no_network=True,
        huge_tree=True,
    )


@dataclass(frozen=True)
class DocType:
    """Сигнатура DOCTYPE: имя корневого элемента, публичный и системный идентификаторы."""

    name: Optional[str]
    public_id: Optional[str]
    system_id: Optional[str]

    @classmethod
    def from_tree(cls, tree: etree._ElementTree) -> "DocType":
        docinfo = tree.docinfo
        return cls(
            name=docinfo.root_name,
            public_id=docinfo.public_id,
            system_id=docinfo.system_url,
        )


def load_document(path: Union[str, Path]) -> etree._ElementTree:
    """
    Загрузить XML документ.

    Args:
        path: Путь к файлу метаданных

    Returns:
        Дерево документа

    Raises:
        MalformedDocumentError: Файл не читается или XML некорректен
    """
    path = Path(path)
    try:
        xml_bytes = path.read_bytes()
    except OSError as e:
        raise MalformedDocumentError(f"Не удалось открыть XML: {path}: {e}") from e
    try:
        return etree.parse(BytesIO(xml_bytes), _create_strict_parser())
    except XMLSyntaxError as e:
        raise MalformedDocumentError(f"Ошибка разбора XML {path.name}: {e}") from e


def ensure_doc_type(tree: etree._ElementTree, accepted: Iterable[DocType]) -> DocType:
    """
    Проверить, что DOCTYPE документа входит в список поддерживаемых.

    Raises:
        UnsupportedDocTypeError: Ни одна сигнатура не совпала по всем трем полям
    """
    doc_type = DocType.from_tree(tree)
    if doc_type not in list(accepted):
        raise UnsupportedDocTypeError(
            f"Неподдерживаемый DOCTYPE: {doc_type.name} "
            f"(public={doc_type.public_id!r}, system={doc_type.system_id!r})"
        )
    return doc_type


def strip_tags(text: str) -> str:
    """Удалить разметку из строки."""
    return _TAG_PATTERN.sub("", text)


class XPathQuery:
    """XPath запросы к загруженному документу с зарегистрированным пространством имен xlink."""

    def __init__(self, tree: etree._ElementTree, namespaces: Optional[dict] = None):
        self.tree = tree
        self.namespaces = {"xlink": XLINK_NAMESPACE}
        if namespaces:
            self.namespaces.update(namespaces)

    def evaluate(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> Any:
        """
        Выполнить XPath выражение (результат: строка, число, bool или список узлов).

        Значения из variables доступны в выражении как $имя.
        """
        node = context if context is not None else self.tree
        return node.xpath(path, namespaces=self.namespaces, **variables)

    def select(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> List[Any]:
        result = self.evaluate(path, context, **variables)
        if isinstance(result, list):
            return result
        raise ValueError(f"XPath выражение не возвращает набор узлов: {path}")

    def select_first(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> Optional[Any]:
        nodes = self.select(path, context, **variables)
        return nodes[0] if nodes else None

    def select_text(self, path: str, context: Optional[etree._Element] = None, **variables: Any) -> str:
        """Строковое значение выражения без разметки и пробелов по краям."""
        return strip_tags(str(self.evaluate(f"string({path})", context, **variables))).strip()


def fold_text(node: Any, transform: Callable[[etree._Element, str], str]) -> Optional[str]:
    """
    Собрать текст узла и его потомков снизу вверх.

    Текстовые фрагменты экранируются как HTML (&, <, >); для каждого элемента
    вызывается transform(элемент, уже собранный текст потомков). Комментарии и
    инструкции обработки пропускаются.

    Args:
        node: Элемент, текстовый результат XPath или None
        transform: Преобразование на границе элемента

    Returns:
        Собранный текст или None для None
    """
    if node is None:
        return None
    if isinstance(node, str):
        return escape(node, quote=False)
    if not isinstance(node.tag, str):
        return ""

    parts = [escape(node.text, quote=False) if node.text else ""]
    for child in node:
        parts.append(fold_text(child, transform))
        if child.tail:
            parts.append(escape(child.tail, quote=False))
    return transform(node, "".join(parts))


def local_name(node: etree._Element) -> str:
    return etree.QName(node).localname
