"""Экземпляр Flask-SQLAlchemy, общий для моделей и репозитория."""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
