import unittest
from unittest.mock import patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from resume_ats.core.config import Settings, settings
from resume_ats.main import app
from resume_ats.middleware.rate_limit import FixedWindow, RateLimitMiddleware
from tests.support import auth_headers, make_user, use_mongomock


class RateLimitTests(unittest.TestCase):
    def make_client(self) -> TestClient:
        limited = FastAPI()
        limited.add_middleware(RateLimitMiddleware)

        @limited.get("/resumes")
        def resumes():
            return {"ok": True}

        @limited.post("/ai/enhance")
        def enhance():
            return {"ok": True}

        @limited.post("/payments/webhook")
        def webhook():
            return {"ok": True}

        return TestClient(limited)

    def test_fixed_window(self):
        window = FixedWindow(2, 60)
        self.assertTrue(window.hit("1.2.3.4", 0.0))
        self.assertTrue(window.hit("1.2.3.4", 1.0))
        self.assertFalse(window.hit("1.2.3.4", 2.0))
        self.assertTrue(window.hit("5.6.7.8", 2.0))
        self.assertTrue(window.hit("1.2.3.4", 61.0))

    def test_expired_keys_are_dropped(self):
        window = FixedWindow(1, 60)
        for i in range(100):
            window.hit(f"10.0.0.{i}", 0.0)
        self.assertEqual(len(window._storage), 100)

        self.assertTrue(window.hit("10.0.0.1", 60.0))
        self.assertEqual(list(window._storage), ["10.0.0.1"])
        self.assertFalse(window.hit("10.0.0.1", 61.0))

    def test_ai_window_is_separate_and_webhook_exempt(self):
        with patch.object(settings, "RATE_LIMIT", "5/minute"), patch.object(settings, "AI_RATE_LIMIT", "1/minute"):
            client = self.make_client()
            self.assertEqual(client.post("/ai/enhance").status_code, 200)
            response = client.post("/ai/enhance")
            self.assertEqual(response.status_code, 429)
            self.assertEqual(response.json()["error"], "rate_limit_exceeded")

            self.assertEqual(client.get("/resumes").status_code, 200)
            for _ in range(10):
                self.assertEqual(client.post("/payments/webhook").status_code, 200)

    def test_forwarded_for_is_the_key(self):
        with patch.object(settings, "RATE_LIMIT", "1/minute"):
            client = self.make_client()
            self.assertEqual(client.get("/resumes", headers={"X-Forwarded-For": "10.0.0.1"}).status_code, 200)
            self.assertEqual(client.get("/resumes", headers={"X-Forwarded-For": "10.0.0.1"}).status_code, 429)
            self.assertEqual(client.get("/resumes", headers={"X-Forwarded-For": "10.0.0.2, 10.0.0.1"}).status_code, 200)


class SettingsTests(unittest.TestCase):
    def test_rate_parsing(self):
        config = Settings(RATE_LIMIT="30/hour", AI_RATE_LIMIT="garbage", CORS_ORIGINS="https://a.test, ,https://b.test")
        self.assertEqual(config.rate_limit_parsed(), (30, 3600))
        self.assertEqual(config.ai_rate_limit_parsed(), (10, 60))
        self.assertEqual(config.cors_list(), ["https://a.test", "https://b.test"])


class HealthAndUploadsTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        use_mongomock()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "ok")
        self.assertIn(data["payments"], {"configured", "not_configured"})

    def test_upload_not_configured(self):
        user = make_user()
        with patch.object(settings, "S3_ACCESS_KEY", ""):
            response = self.client.post(
                "/uploads/presigned-url", json={"file_name": "me.png"}, headers=auth_headers(user)
            )
        self.assertEqual(response.status_code, 501)

    def test_upload_profile_image(self):
        user = make_user()
        with patch.object(settings, "S3_ACCESS_KEY", "key"), patch(
            "resume_ats.routers.uploads.generate_presigned_upload_url", return_value="https://s3.test/put"
        ) as presign:
            response = self.client.post(
                "/uploads/presigned-url",
                json={"file_name": "me.jpg", "content_type": "image/jpeg"},
                headers=auth_headers(user),
            )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["upload_url"], "https://s3.test/put")
        self.assertTrue(data["file_key"].startswith(f"profile-images/{user['_id']}/"))
        self.assertTrue(data["file_key"].endswith(".jpg"))
        self.assertEqual(presign.call_args.kwargs["content_type"], "image/jpeg")

    def test_upload_rejects_other_types(self):
        user = make_user()
        with patch.object(settings, "S3_ACCESS_KEY", "key"):
            response = self.client.post(
                "/uploads/presigned-url",
                json={"file_name": "cv.pdf", "content_type": "application/pdf"},
                headers=auth_headers(user),
            )
        self.assertEqual(response.status_code, 400)
