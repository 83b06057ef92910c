"""Настройки приложения."""

from typing import List, Optional
from pathlib import Path
import os


# Расширения файлов, которые считаются изображениями (порядок важен для поиска обложки)
DEFAULT_IMAGE_EXTENSIONS = "tif,tiff,png,jpg,jpeg"


class Settings:
    """Класс для управления настройками приложения."""

    def __init__(self):
        """Инициализация настроек."""
        # Базовые пути
        self.base_dir: Path = Path(__file__).parent.parent.parent
        self.data_dir: Path = Path(os.getenv("DATA_DIR", str(self.base_dir / "data")))
        self.logs_dir: Path = self.base_dir / "logs"
        self.files_dir: Path = Path(os.getenv("FILES_DIR", str(self.data_dir / "files")))
        self.public_files_dir: Path = Path(
            os.getenv("PUBLIC_FILES_DIR", str(self.data_dir / "public"))
        )

        # Создание необходимых директорий
        self._create_directories()

        # Настройки логирования
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_file: Optional[str] = str(self.logs_dir / "artimport.log")

        # Настройки импорта
        self.image_extensions: List[str] = [
            ext.strip().lower()
            for ext in os.getenv("IMAGE_EXTENSIONS", DEFAULT_IMAGE_EXTENSIONS).split(",")
            if ext.strip()
        ]
        self.issue_cover_filename: str = os.getenv("ISSUE_COVER_FILENAME", "cover")
        self.default_section_name: str = os.getenv("DEFAULT_SECTION_NAME", "Articles")

        # Настройки базы данных
        self.database_uri: str = os.getenv(
            "DATABASE_URI",
            f"sqlite:///{self.base_dir / 'artimport.db'}"
        )

    def _create_directories(self) -> None:
        """Создание необходимых директорий, если они не существуют."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)
        self.files_dir.mkdir(parents=True, exist_ok=True)
        self.public_files_dir.mkdir(parents=True, exist_ok=True)


# Глобальный экземпляр настроек
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Получить экземпляр настроек (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
