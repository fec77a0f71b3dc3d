"""
Подключение к MongoDB.

Один клиент на приложение, подключение при старте (lifespan в main),
получение БД/коллекции через функции. URI только из config (.env).
"""
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from resume_ats.core.config import settings

# Клиент создаётся при старте приложения (main.py lifespan), здесь только ссылка
_client: MongoClient | None = None


def get_client() -> MongoClient:
    """Вернуть клиент MongoDB. Вызывать после connect_to_mongo()."""
    if _client is None:
        raise RuntimeError("MongoDB not connected. Call connect_to_mongo() first.")
    return _client


def get_db() -> Database:
    """Вернуть экземпляр БД. Используй в роутерах/сервисах."""
    return get_client()[settings.MONGO_DB_NAME]


def get_users_collection() -> Collection:
    """Коллекция users: учётные записи и баланс кредитов (поле credits)."""
    return get_db()["users"]


def get_resumes_collection() -> Collection:
    """Коллекция resumes."""
    return get_db()["resumes"]


def get_transactions_collection() -> Collection:
    """Журнал изменений баланса: списания, возвраты, пополнения."""
    return get_db()["credit_transactions"]


def ensure_indexes() -> None:
    """Индексы. Идемпотентно, вызывается при старте."""
    get_users_collection().create_index([("email", ASCENDING)], unique=True)
    get_resumes_collection().create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    transactions = get_transactions_collection()
    transactions.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    # Одна сессия Stripe, одно пополнение
    transactions.create_index("stripe_session_id", unique=True, sparse=True)


def connect_to_mongo() -> None:
    """Подключиться к MongoDB. Вызывается в lifespan при старте."""
    global _client  # noqa: PLW0603
    _client = MongoClient(settings.MONGO_URI)
    # Проверка доступности
    _client.admin.command("ping")
    ensure_indexes()


def close_mongo_connection() -> None:
    """Закрыть соединение. Вызывается в lifespan при остановке."""
    global _client
    if _client:
        _client.close()
        _client = None
