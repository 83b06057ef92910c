"""Парсеры XML словарей метаданных."""

from artimport.parsers.jats import JatsParser

# Парсеры, используемые по умолчанию (в порядке проверки)
DEFAULT_PARSERS = ["artimport.parsers.jats.JatsParser"]

__all__ = ["JatsParser", "DEFAULT_PARSERS"]
