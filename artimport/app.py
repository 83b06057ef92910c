"""Создание Flask приложения."""

from typing import Any, Dict, Optional

from flask import Flask
from artimport.config.settings import get_settings
from artimport.database import db
from artimport.utils.logger import setup_logger


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Создание и настройка Flask приложения.

    Args:
        config: Дополнительные параметры конфигурации Flask (например, для тестов)

    Returns:
        Настроенное Flask приложение
    """
    app = Flask(__name__)
    settings = get_settings()

    # Конфигурация
    app.config["SQLALCHEMY_DATABASE_URI"] = settings.database_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if config:
        app.config.update(config)

    # Инициализация расширений
    db.init_app(app)

    # Настройка логирования
    logger = setup_logger(
        log_file=settings.log_file,
        log_level=settings.log_level
    )
    app.logger = logger

    # Регистрация команд
    from artimport.cli import import_articles_command
    app.cli.add_command(import_articles_command)

    # Инициализация базы данных
    from artimport.models.user import init_db
    init_db(app)

    return app
