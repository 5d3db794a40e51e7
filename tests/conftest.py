"""Shared fixtures for the CV builder tests."""

import pytest
from cvbuilder.models.cv_models import CVDocument
from cvbuilder.services.cv_data_loader import CVDataLoader
from cvbuilder.services.local_storage import LocalStorage


def _weasyprint_available() -> bool:
    try:
        import weasyprint  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


@pytest.fixture
def weasyprint_ready():
    """Skip PDF rendering tests when WeasyPrint's native libraries are missing."""
    if not _weasyprint_available():
        pytest.skip("WeasyPrint (Pango/Cairo) is not available")


@pytest.fixture
def sample_cv() -> CVDocument:
    """The bundled sample CV."""
    return CVDataLoader().load_sample()


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    """Local storage rooted in a temporary directory."""
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def jane_cv() -> CVDocument:
    """Small CV with one ongoing job."""
    return CVDocument.model_validate({
        "personalInfo": {"fullName": "Jane Doe", "email": "jane@x.com"},
        "workExperience": [
            {"jobTitle": "Engineer", "company": "Acme", "startDate": "01/2020"}
        ],
    })
