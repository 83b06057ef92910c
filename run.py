"""Точка входа для запуска импорта статей из командной строки."""

import sys
from artimport.app import create_app
from artimport.cli import import_articles_command
from artimport.config.settings import get_settings
from artimport.utils.logger import setup_logger

# Создание Flask приложения (flask --app run import-articles ...)
app = create_app()


def main():
    """Точка входа в приложение (консольная команда artimport)."""
    # Инициализация настроек
    settings = get_settings()

    # Настройка логирования
    logger = setup_logger(
        log_file=settings.log_file,
        log_level=settings.log_level
    )

    logger.info("=" * 50)
    logger.info("Импорт статей журнала (artimport)")
    logger.info(f"Версия: {__import__('artimport').__version__}")
    logger.info("=" * 50)

    logger.info(f"Директория данных: {settings.data_dir}")
    logger.info(f"Директория логов: {settings.logs_dir}")
    logger.info(f"База данных: {settings.database_uri}")

    with app.app_context():
        import_articles_command.main(args=sys.argv[1:], prog_name="artimport")


if __name__ == "__main__":
    main()
