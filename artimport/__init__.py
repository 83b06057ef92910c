"""Article Import - импорт XML метаданных статей в журнальный репозиторий."""

__version__ = "0.1.0"
