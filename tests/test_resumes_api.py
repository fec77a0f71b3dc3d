import unittest

from bson import ObjectId
from fastapi.testclient import TestClient

from resume_ats.main import app
from tests.support import SAMPLE_RESUME, auth_headers, make_user, use_mongomock


class ResumesApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        use_mongomock()
        self.owner = make_user()
        self.stranger = make_user()

    def create(self, **overrides) -> dict:
        payload = {"templateName": "Creative", "themeColor": "violet", "resumeData": SAMPLE_RESUME}
        payload.update(overrides)
        response = self.client.post("/resumes", json=payload, headers=auth_headers(self.owner))
        self.assertEqual(response.status_code, 201)
        return response.json()["data"]

    def test_create_and_get(self):
        created = self.create()
        self.assertEqual(created["templateName"], "Creative")
        self.assertFalse(created["isPublic"])
        self.assertEqual(created["resumeData"]["personalInfo"]["fullName"], "John Doe")

        response = self.client.get(f"/resumes/{created['id']}", headers=auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["id"], created["id"])

    def test_list_own_newest_first(self):
        first = self.create()
        second = self.create(templateName="Corporate")
        response = self.client.get("/resumes", headers=auth_headers(self.owner))
        ids = [r["id"] for r in response.json()["data"]]
        self.assertEqual(set(ids), {first["id"], second["id"]})

        response = self.client.get("/resumes", headers=auth_headers(self.stranger))
        self.assertEqual(response.json()["data"], [])

        response = self.client.get("/resumes?limit=1", headers=auth_headers(self.owner))
        self.assertEqual(len(response.json()["data"]), 1)

    def test_update(self):
        created = self.create()
        response = self.client.put(
            f"/resumes/{created['id']}",
            json={"isPublic": True, "resumeData": dict(SAMPLE_RESUME, summary="Updated")},
            headers=auth_headers(self.owner),
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertTrue(data["isPublic"])
        self.assertEqual(data["resumeData"]["summary"], "Updated")
        self.assertEqual(data["templateName"], "Creative")

    def test_stranger_cannot_modify(self):
        created = self.create(isPublic=True)
        response = self.client.put(
            f"/resumes/{created['id']}", json={"isPublic": False}, headers=auth_headers(self.stranger)
        )
        self.assertEqual(response.status_code, 404)
        response = self.client.delete(f"/resumes/{created['id']}", headers=auth_headers(self.stranger))
        self.assertEqual(response.status_code, 404)

    def test_delete(self):
        created = self.create()
        response = self.client.delete(f"/resumes/{created['id']}", headers=auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)
        response = self.client.get(f"/resumes/{created['id']}", headers=auth_headers(self.owner))
        self.assertEqual(response.status_code, 404)

    def test_public_view(self):
        private = self.create()
        public = self.create(isPublic=True)

        response = self.client.get(f"/resumes/public/{public['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["id"], public["id"])

        response = self.client.get(f"/resumes/public/{private['id']}")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "access_denied")

        for missing in (str(ObjectId()), "not-an-id"):
            response = self.client.get(f"/resumes/public/{missing}")
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json()["message"], "Resume not found")

    def test_preview(self):
        created = self.create()
        response = self.client.get(f"/resumes/{created['id']}/preview", headers=auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["rendered"]["layout"], "two-column")
        self.assertEqual(data["rendered"]["palette"]["accent"], "#7c3aed")
        self.assertIn('data-section="summary"', data["html"])

        response = self.client.get(f"/resumes/{created['id']}/preview?language=th", headers=auth_headers(self.owner))
        self.assertEqual(response.json()["data"]["rendered"]["language"], "th")

    def test_private_exports_need_owner(self):
        created = self.create()
        for suffix in ("preview", "export/print", "export/word", "qr"):
            with self.subTest(suffix=suffix):
                response = self.client.get(f"/resumes/{created['id']}/{suffix}")
                self.assertEqual(response.status_code, 403)
                response = self.client.get(f"/resumes/{created['id']}/{suffix}", headers=auth_headers(self.stranger))
                self.assertEqual(response.status_code, 403)
                response = self.client.get(f"/resumes/{created['id']}/{suffix}", headers=auth_headers(self.owner))
                self.assertEqual(response.status_code, 200)

    def test_export_print(self):
        created = self.create(isPublic=True, templateName="Corporate")
        response = self.client.get(f"/resumes/{created['id']}/export/print")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/html"))
        self.assertIn("header-rule", response.text)

    def test_export_word(self):
        created = self.create(isPublic=True)
        response = self.client.get(f"/resumes/{created['id']}/export/word")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("application/msword"))
        self.assertIn('filename="resume-john-doe.doc"', response.headers["content-disposition"])
        self.assertIn("<w:WordDocument>", response.text)

    def test_qr(self):
        created = self.create(isPublic=True)
        response = self.client.get(f"/resumes/{created['id']}/qr")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "image/svg+xml")
        self.assertTrue(response.headers["x-resume-url"].endswith(f"/resume/{created['id']}"))
        self.assertIn("<svg", response.text)

    def test_render_draft(self):
        response = self.client.post(
            "/resumes/render",
            json={"resumeData": SAMPLE_RESUME, "templateName": "Corporate", "themeColor": "#ff0000"},
        )
        self.assertEqual(response.status_code, 200)
        rendered = response.json()["data"]["rendered"]
        self.assertEqual(rendered["palette"]["header"], "#000000")
        self.assertEqual(rendered["sections"][2]["entries"][0]["bullets"], ["Led X"])

    def test_requires_auth(self):
        self.assertEqual(self.client.get("/resumes").status_code, 401)
        self.assertEqual(self.client.post("/resumes", json={}).status_code, 401)
