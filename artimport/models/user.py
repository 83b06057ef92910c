"""Модель пользователя."""

from datetime import datetime
from artimport.database import db


class User(db.Model):
    """Пользователь журнала (импортирующий пользователь или редактор)."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=True)
    last_name = db.Column(db.String(100), nullable=True)  # Фамилия
    first_name = db.Column(db.String(100), nullable=True)  # Имя
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def get_full_name(self) -> str:
        """
        Получить полное ФИО пользователя.

        Returns:
            Полное имя в формате "Фамилия Имя" или логин, если ФИО не указано
        """
        parts = []
        if self.last_name:
            parts.append(self.last_name)
        if self.first_name:
            parts.append(self.first_name)

        if parts:
            return " ".join(parts)
        return self.username

    def __repr__(self) -> str:
        return f"<User {self.username}>"


def init_db(app):
    """
    Инициализация базы данных.

    Args:
        app: Flask приложение
    """
    # Импорт регистрирует все таблицы в метаданных
    import artimport.models  # noqa: F401

    with app.app_context():
        # Создаем таблицы, если их нет (не удаляем существующие!)
        db.create_all()
        app.logger.info("Таблицы базы данных проверены")
