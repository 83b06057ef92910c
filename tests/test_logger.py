"""Тесты для настройки логирования."""

import pytest

from artimport.config.settings import get_settings
from artimport.utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logger


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "logs" / "test.log"
    yield path
    settings = get_settings()
    setup_logger(log_file=settings.log_file, log_level=settings.log_level)


class TestLogger:
    """Тесты для setup_logger/get_logger."""

    def test_module_logger_has_no_handlers(self):
        """Тест: логгер модуля передает записи корневому логгеру пакета."""
        logger = get_logger("artimport.modules.base_parser")
        assert logger.handlers == []
        assert logger.propagate is True

    def test_message_written_once(self, log_file, capsys):
        """Тест: одно сообщение пишется в консоль и файл ровно один раз."""
        setup_logger(log_file=str(log_file), log_level="INFO")
        get_logger("artimport.modules.base_parser").info("сообщение импорта")

        stdout = capsys.readouterr().out
        assert stdout.count("сообщение импорта") == 1
        assert log_file.read_text(encoding="utf-8").count("сообщение импорта") == 1

    def test_repeated_setup_does_not_duplicate(self, log_file, capsys):
        """Тест: повторная настройка не добавляет обработчики."""
        setup_logger(log_file=str(log_file))
        root = setup_logger(log_file=str(log_file))
        assert len(root.handlers) == 2

        get_logger("artimport.repository").warning("повтор")
        assert capsys.readouterr().out.count("повтор") == 1

    def test_foreign_name_is_placed_under_package(self):
        """Тест: имя вне пакета помещается в иерархию artimport."""
        assert get_logger("tests").name == f"{ROOT_LOGGER_NAME}.tests"
