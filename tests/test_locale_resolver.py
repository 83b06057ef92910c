"""Тесты для приведения обозначений языка к локалям журнала."""

import pytest
from artimport.modules.locale_resolver import LocaleResolver


@pytest.fixture
def resolver():
    return LocaleResolver("fr_CA", ["fr_CA", "en_US"])


class TestLocaleResolver:
    """Тесты для LocaleResolver."""

    def test_empty_value_gives_default(self, resolver):
        """Тест: пустое значение дает основную локаль."""
        assert resolver.resolve(None) == "fr_CA"
        assert resolver.resolve("") == "fr_CA"
        assert resolver.resolve("   ") == "fr_CA"

    def test_recognized_locale_is_unchanged(self, resolver):
        """Тест: локаль журнала возвращается без изменений."""
        assert resolver.resolve("en_US") == "en_US"
        assert resolver.resolve("fr_CA") == "fr_CA"

    def test_same_language_prefers_default(self, resolver):
        """Тест: язык основной локали приводится к основной локали."""
        assert resolver.resolve("fr") == "fr_CA"
        assert resolver.resolve("FR") == "fr_CA"
        assert resolver.resolve("fr_FR") == "fr_CA"
        assert resolver.resolve("fr-FR") == "fr_CA"
        assert resolver.resolve("fra") == "fr_CA"

    def test_supported_locale_of_same_language(self, resolver):
        """Тест: язык приводится к поддерживаемой локали журнала с тем же языком."""
        assert resolver.resolve("en") == "en_US"
        assert resolver.resolve("EN") == "en_US"
        assert resolver.resolve("eng") == "en_US"
        assert resolver.resolve("en_GB") == "en_US"
        assert resolver.resolve("EN_US") == "en_US"

    def test_first_supported_locale_wins(self):
        """Тест: при нескольких локалях одного языка берется первая из журнала."""
        resolver = LocaleResolver("fr_CA", ["fr_CA", "en_GB", "en_US"])
        assert resolver.resolve("en") == "en_GB"
        assert resolver.resolve("en_US") == "en_US"

    def test_other_language_gives_two_letter_code(self, resolver):
        """Тест: язык без локали в журнале приводится к двухбуквенному коду."""
        assert resolver.resolve("de") == "de"
        assert resolver.resolve("deu") == "de"
        assert resolver.resolve("ru_RU") == "ru"

    def test_unknown_language_gives_default(self, resolver):
        """Тест: нераспознанный язык дает основную локаль."""
        assert resolver.resolve("xx") == "fr_CA"
        assert resolver.resolve("xx_YY") == "fr_CA"

    def test_default_locale_always_recognized(self):
        """Тест: основная локаль распознается даже без списка локалей."""
        resolver = LocaleResolver("en_US")
        assert resolver.is_recognized("en_US")
        assert resolver.resolve("en") == "en_US"
