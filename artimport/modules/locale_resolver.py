"""Приведение произвольных обозначений языка к локалям журнала."""

from typing import Dict, Iterable, Optional

from iso639 import Lang
from iso639.exceptions import DeprecatedLanguageValue, InvalidLanguageValue

from artimport.utils.logger import get_logger

logger = get_logger(__name__)


def _iso3_from_iso1(code: str) -> Optional[str]:
    """Код ISO 639-3 по двухбуквенному коду (fr -> fra)."""
    try:
        return Lang(pt1=code).pt3 or None
    except (InvalidLanguageValue, DeprecatedLanguageValue):
        return None


def _iso3_from_locale(locale: str) -> Optional[str]:
    """Код ISO 639-3 по строке локали (fr_ca, fr-CA, fra -> fra)."""
    language = locale.replace("-", "_").split("_", 1)[0].split("@", 1)[0]
    if not language:
        return None
    try:
        return Lang(language).pt3 or None
    except (InvalidLanguageValue, DeprecatedLanguageValue):
        return None


def _locale_from_iso3(iso3: str) -> Optional[str]:
    """Локаль по коду ISO 639-3: двухбуквенный код, если он есть, иначе сам код."""
    try:
        lang = Lang(pt3=iso3)
    except (InvalidLanguageValue, DeprecatedLanguageValue):
        return None
    return lang.pt1 or lang.pt3 or None


class LocaleResolver:
    """
    Преобразует обозначения языка из метаданных в локаль журнала.

    Если язык совпадает с языком основной локали журнала, предпочтение отдается
    локали журнала: статья с fr_FR в журнале с fr_CA получит fr_CA. Другие языки
    приводятся к поддерживаемой локали журнала с тем же языком (en -> en_US), а если
    такой нет - к двухбуквенному коду языка.
    """

    def __init__(self, default_locale: str, recognized_locales: Iterable[str] = ()):
        recognized_locales = tuple(recognized_locales)
        self.default_locale = default_locale
        self.recognized_locales = frozenset(recognized_locales) | {default_locale}
        self._default_iso3 = _iso3_from_locale(default_locale.lower())
        # Первая локаль журнала для каждого языка (в порядке, заданном журналом)
        self._locales_by_iso3: Dict[str, str] = {}
        for candidate in recognized_locales:
            iso3 = _iso3_from_locale(candidate.lower())
            if iso3:
                self._locales_by_iso3.setdefault(iso3, candidate)

    def is_recognized(self, locale: str) -> bool:
        return locale in self.recognized_locales

    def resolve(self, locale: Optional[str] = None) -> str:
        """
        Получить локаль журнала для обозначения языка.

        Args:
            locale: Обозначение языка (fr, FR, fr_FR, fra) или None

        Returns:
            Локаль; при неудаче - основная локаль журнала
        """
        if not locale or not locale.strip():
            return self.default_locale
        locale = locale.strip()
        if self.is_recognized(locale):
            return locale

        lowered = locale.lower()
        iso3 = _iso3_from_iso1(lowered) or _iso3_from_locale(lowered)
        if not iso3:
            logger.debug(f"Не удалось распознать язык «{locale}», используется {self.default_locale}")
            return self.default_locale
        if iso3 == self._default_iso3:
            return self.default_locale
        if iso3 in self._locales_by_iso3:
            return self._locales_by_iso3[iso3]
        return _locale_from_iso3(iso3) or self.default_locale
