"""Настройка логирования."""

import logging
import sys
from pathlib import Path
from typing import Optional
from artimport.config.settings import get_settings

# Обработчики есть только у корневого логгера пакета; логгеры модулей
# передают записи ему.
ROOT_LOGGER_NAME = "artimport"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_file: Optional[str] = None,
    log_level: str = "INFO"
) -> logging.Logger:
    """
    Настройка логгера: консоль и (опционально) файл.

    Повторный вызов заменяет обработчики, а не добавляет новые.

    Args:
        name: Имя логгера
        log_file: Путь к файлу лога (опционально)
        log_level: Уровень логирования

    Returns:
        Настроенный логгер
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Получить логгер модуля.

    Логгер модуля не имеет своих обработчиков: записи попадают в корневой
    логгер пакета, который настраивается из конфигурации при первом обращении.

    Args:
        name: Имя логгера (обычно __name__)

    Returns:
        Логгер внутри иерархии "artimport"
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        settings = get_settings()
        setup_logger(log_file=settings.log_file, log_level=settings.log_level)

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
