"""
Общие помощники для тестов: in-memory MongoDB, пользователи, токены, ответы модели.
"""
import json
from datetime import datetime, timezone

import httpx
import mongomock

from resume_ats.core import database
from resume_ats.core.database import get_transactions_collection, get_users_collection
from resume_ats.core.security import create_access_token


def use_mongomock() -> mongomock.MongoClient:
    """Подменить клиент MongoDB на mongomock (новая пустая БД)."""
    database._client = mongomock.MongoClient()
    return database._client


def make_user(credits: int = 0, email: str | None = None) -> dict:
    now = datetime.now(timezone.utc)
    doc = {
        "email": email or f"user{get_users_collection().count_documents({}) + 1}@example.com",
        "password_hash": None,
        "full_name": "Test User",
        "credits": credits,
        "last_login": now,
        "created_at": now,
        "updated_at": now,
    }
    doc["_id"] = get_users_collection().insert_one(doc).inserted_id
    return doc


def balance_of(user: dict) -> int:
    return get_users_collection().find_one({"_id": user["_id"]})["credits"]


def ledger_of(user: dict) -> list[dict]:
    return list(get_transactions_collection().find({"user_id": user["_id"]}))


def auth_headers(user: dict) -> dict:
    token = create_access_token({"sub": str(user["_id"])})
    return {"Authorization": f"Bearer {token}"}


def chat_completion(content) -> dict:
    """Тело ответа chat/completions с одним сообщением."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def replying_transport(content=None, status_code: int = 200, body=None, calls: list | None = None):
    """MockTransport, который отвечает одним и тем же и записывает тела запросов в calls."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(json.loads(request.content))
        if body is not None:
            return httpx.Response(status_code, content=body)
        return httpx.Response(status_code, json=chat_completion(content))

    return httpx.MockTransport(handler)


def failing_transport(exc_type=httpx.ConnectError):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("connection refused", request=request)

    return httpx.MockTransport(handler)


SAMPLE_RESUME = {
    "personalInfo": {
        "prefix": "Mr.",
        "fullName": "John Doe",
        "phone": "+66 81 234 5678",
        "email": "john@example.com",
        "linkedin": "linkedin.com/in/johndoe",
        "address": "Bangkok",
        "birthDate": "15/03/1990",
    },
    "summary": "Backend engineer with 8 years of experience.",
    "skills": ["Python", "  ", "FastAPI", ""],
    "workExperience": [
        {
            "id": "w1",
            "position": "Senior Engineer",
            "company": "Acme",
            "location": "Bangkok",
            "startDate": "2019",
            "endDate": "Present",
            "description": ["", "  ", "Led X"],
        }
    ],
    "education": [
        {
            "id": "e1",
            "degree": "B.Sc. Computer Science",
            "institution": "Chulalongkorn University",
            "graduationYear": "2012",
            "gpa": "3.50",
            "projects": "Compiler project\n\nDistributed cache",
        }
    ],
    "certifications": ["AWS Solutions Architect"],
    "awards": ["", "   "],
}
