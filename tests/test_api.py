"""Tests for FastAPI endpoints."""

import uuid
import pytest
from httpx import ASGITransport, AsyncClient
from cvbuilder.main import app


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _user_id() -> str:
    return f"user_{uuid.uuid4().hex}"


def _cv_data(name: str = "Jane Doe") -> dict:
    return {
        "personalInfo": {"fullName": name, "email": "jane@x.com"},
        "summary": "Backend engineer.",
        "workExperience": [{"jobTitle": "Engineer", "company": "Acme", "startDate": "01/2020"}],
    }


@pytest.mark.asyncio
async def test_root_endpoint():
    """Test root endpoint."""
    async with _client() as client:
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "CV Builder API"


@pytest.mark.asyncio
async def test_health_endpoint():
    """Test health endpoint."""
    async with _client() as client:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_cv_crud_flow():
    """Test creating, reading, updating and deleting a CV."""
    user_id = _user_id()
    async with _client() as client:
        response = await client.post("/api/cvs", json={"userId": user_id, "cvData": _cv_data()})
        assert response.status_code == 201
        body = response.json()
        cv_id = body["cvId"]
        assert len(cv_id) == 24
        assert body["userId"] == user_id

        response = await client.get(f"/api/cvs/{cv_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["template"] == "classic"
        assert body["cvData"]["personalInfo"]["fullName"] == "Jane Doe"
        assert body["cvData"]["workExperience"][0]["company"] == "Acme"
        first_updated = body["updatedAt"]

        response = await client.put(
            f"/api/cvs/{cv_id}",
            json={"cvData": {"summary": "Staff engineer."}, "template": "modern"}
        )
        assert response.status_code == 200
        assert response.json()["updatedAt"] >= first_updated

        response = await client.get(f"/api/cvs/{cv_id}")
        body = response.json()
        assert body["cvData"]["summary"] == "Staff engineer."
        assert body["cvData"]["workExperience"][0]["company"] == "Acme"
        assert body["template"] == "modern"

        response = await client.delete(f"/api/cvs/{cv_id}")
        assert response.status_code == 200

        response = await client.get(f"/api/cvs/{cv_id}")
        assert response.status_code == 404
        assert response.json()["detail"] == "CV not found"


@pytest.mark.asyncio
async def test_create_cv_requires_user_id():
    """Test saving without a user id."""
    async with _client() as client:
        response = await client.post("/api/cvs", json={"cvData": _cv_data()})
        assert response.status_code == 400
        assert response.json()["detail"] == "userId is required"


@pytest.mark.asyncio
async def test_create_cv_requires_name_and_email():
    """Test saving without the required personal information."""
    async with _client() as client:
        response = await client.post(
            "/api/cvs",
            json={"userId": _user_id(), "cvData": {"personalInfo": {"fullName": "Jane Doe"}}}
        )
        assert response.status_code == 400
        assert "fullName and email" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_cv_validation_errors():
    """Test schema violations are reported with their location."""
    cv_data = _cv_data()
    cv_data["languages"] = [{"language": "French", "proficiency": "Godlike"}]
    async with _client() as client:
        response = await client.post("/api/cvs", json={"userId": _user_id(), "cvData": cv_data})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "Validation failed"
        assert any(error.startswith("languages.0.proficiency") for error in detail["errors"])


@pytest.mark.asyncio
async def test_update_cv_validation_errors():
    """Test an update that breaks the schema is rejected and nothing changes."""
    async with _client() as client:
        response = await client.post("/api/cvs", json={"userId": _user_id(), "cvData": _cv_data()})
        cv_id = response.json()["cvId"]

        response = await client.put(
            f"/api/cvs/{cv_id}",
            json={"cvData": {"personalInfo": {"fullName": "Jane", "email": "broken"}}}
        )
        assert response.status_code == 400

        response = await client.get(f"/api/cvs/{cv_id}")
        assert response.json()["cvData"]["personalInfo"]["email"] == "jane@x.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "delete"])
async def test_invalid_cv_id(method):
    """Test malformed ids are rejected before lookup."""
    async with _client() as client:
        response = await getattr(client, method)("/api/cvs/not-an-id")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid CV ID format"


@pytest.mark.asyncio
async def test_unknown_cv_id():
    """Test well-formed but unknown ids."""
    async with _client() as client:
        response = await client.get("/api/cvs/" + "0" * 24)
        assert response.status_code == 404

        response = await client.put("/api/cvs/" + "0" * 24, json={"cvData": {"summary": "x"}})
        assert response.status_code == 404

        response = await client.delete("/api/cvs/" + "0" * 24)
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_user_cvs_pagination():
    """Test a user's CVs are paged, newest first."""
    user_id = _user_id()
    async with _client() as client:
        for name in ("First", "Second", "Third"):
            await client.post("/api/cvs", json={"userId": user_id, "cvData": _cv_data(name)})

        response = await client.get(f"/api/users/{user_id}/cvs", params={"page": 1, "limit": 2})
        assert response.status_code == 200
        body = response.json()
        assert body["totalCVs"] == 3
        assert body["totalPages"] == 2
        assert body["currentPage"] == 1
        assert [cv["fullName"] for cv in body["cvs"]] == ["Third", "Second"]

        response = await client.get(f"/api/users/{user_id}/cvs", params={"page": 2, "limit": 2})
        assert [cv["fullName"] for cv in response.json()["cvs"]] == ["First"]


@pytest.mark.asyncio
async def test_list_user_cvs_empty():
    """Test listing for a user without CVs."""
    async with _client() as client:
        response = await client.get(f"/api/users/{_user_id()}/cvs")
        body = response.json()
        assert body["cvs"] == []
        assert body["totalCVs"] == 0
        assert body["totalPages"] == 0


@pytest.mark.asyncio
async def test_list_user_cvs_rejects_bad_paging():
    """Test paging parameters are bounded."""
    async with _client() as client:
        response = await client.get(f"/api/users/{_user_id()}/cvs", params={"page": 0})
        assert response.status_code == 422
        response = await client.get(f"/api/users/{_user_id()}/cvs", params={"limit": 500})
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_templates():
    """Test the template catalogue endpoints."""
    async with _client() as client:
        response = await client.get("/api/templates")
        assert response.status_code == 200
        ids = [template["id"] for template in response.json()]
        assert "classic" in ids

        response = await client.get("/api/templates/classic")
        assert response.status_code == 200
        assert response.json()["name"] == "Classic"

        response = await client.get("/api/templates/unknown")
        assert response.status_code == 404
        assert response.json()["detail"] == "Template not found"


@pytest.mark.asyncio
async def test_template_preview():
    """Test template previews carry sample data."""
    async with _client() as client:
        response = await client.get("/api/templates/modern/preview")
        assert response.status_code == 200
        body = response.json()
        assert body["templateId"] == "modern"
        assert body["sampleData"]["personalInfo"]["fullName"] == "John Doe"


@pytest.mark.asyncio
async def test_export_markdown(jane_cv):
    """Test Markdown export download."""
    async with _client() as client:
        response = await client.post("/api/v1/cv/export/markdown", json=jane_cv.model_dump(mode="json"))
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="Jane_Doe_CV_')
        assert '.md"; ' in disposition
        assert "filename*=UTF-8''Jane_Doe_CV_" in disposition
        assert "### Engineer at Acme" in response.text


@pytest.mark.asyncio
async def test_export_pdf(jane_cv, weasyprint_ready):
    """Test PDF export download."""
    async with _client() as client:
        response = await client.post("/api/v1/cv/export/pdf", json=jane_cv.model_dump(mode="json"))
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert ".pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_export_invalid_format(jane_cv):
    """Test export with an unsupported format."""
    async with _client() as client:
        response = await client.post("/api/v1/cv/export/docx", json=jane_cv.model_dump(mode="json"))
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_preview(jane_cv):
    """Test the HTML preview endpoint."""
    async with _client() as client:
        response = await client.post("/api/v1/cv/preview", json=jane_cv.model_dump(mode="json"))
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<h1>Jane Doe</h1>" in response.text


@pytest.mark.asyncio
async def test_progress(jane_cv):
    """Test the completion percentage endpoint."""
    async with _client() as client:
        response = await client.post("/api/v1/cv/progress", json=jane_cv.model_dump(mode="json"))
        assert response.status_code == 200
        assert response.json()["percentage"] == 25


@pytest.mark.asyncio
async def test_export_non_latin_name():
    """Test names outside Latin-1 still produce a valid download header."""
    document = {"personalInfo": {"fullName": "李雷", "email": "li@x.com"}}
    async with _client() as client:
        response = await client.post("/api/v1/cv/export/markdown", json=document)
        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith('attachment; filename="CV_')
        assert response.text.startswith("# 李雷")
