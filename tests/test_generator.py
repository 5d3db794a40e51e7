"""Tests for CV data loading, HTML and PDF generation."""

import io
import pytest
from pypdf import PdfReader
from cvbuilder.errors import ExportError
from cvbuilder.models.cv_models import CVDocument
from cvbuilder.services.cv_data_loader import CVDataLoader
from cvbuilder.services.cv_generator import CVGenerator
from cvbuilder.services.pdf_generator import PDFGenerator


def test_load_sample_cv():
    """Test loading the bundled sample CV."""
    data = CVDataLoader().load_sample()

    assert data.personalInfo.fullName == "John Doe"
    assert data.personalInfo.email is not None
    assert len(data.workExperience) > 0
    assert len(data.education) > 0
    assert len(data.skills) > 0
    assert len(data.languages) > 0


def test_load_missing_file(tmp_path):
    """Test loading a file that doesn't exist."""
    with pytest.raises(FileNotFoundError):
        CVDataLoader(tmp_path).load("nope.yaml")


def test_load_invalid_yaml(tmp_path):
    """Test loading malformed YAML."""
    (tmp_path / "bad.yaml").write_text("personalInfo: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid format"):
        CVDataLoader(tmp_path).load("bad.yaml")


def test_load_invalid_structure(tmp_path):
    """Test loading YAML that doesn't match the CV schema."""
    (tmp_path / "bad.yaml").write_text("languages:\n  - language: French\n    proficiency: Godlike\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid CV data structure"):
        CVDataLoader(tmp_path).load("bad.yaml")


def test_load_json(tmp_path, sample_cv):
    """Test JSON files are accepted as well."""
    path = tmp_path / "cv.json"
    path.write_text(sample_cv.model_dump_json(), encoding="utf-8")
    assert CVDataLoader().load(path) == sample_cv


def test_generate_html(sample_cv):
    """Test HTML generation."""
    html = CVGenerator().generate_html(sample_cv)

    assert "<!DOCTYPE html>" in html
    assert "John Doe" in html
    assert "Professional Summary" in html
    assert "Senior Developer at Tech Corp" in html
    assert "Jan 2022 - Present" in html


def test_generate_html_fixed_order(sample_cv):
    """Test export HTML ignores the customized order."""
    reordered = sample_cv.model_copy(update={
        "customization": sample_cv.customization.model_copy(update={"sectionOrder": ["languages", "personal"]})
    })
    html = CVGenerator().generate_html(reordered)

    headings = [
        "<h1>John Doe</h1>",
        "<h3>Professional Summary</h3>",
        "<h3>Work Experience</h3>",
        "<h3>Internships</h3>",
        "<h3>Education</h3>",
        "<h3>Skills</h3>",
        "<h3>Certifications</h3>",
        "<h3>Projects</h3>",
        "<h3>Languages</h3>",
    ]
    positions = [html.index(h) for h in headings]
    assert positions == sorted(positions)


def test_preview_follows_section_order(sample_cv):
    """Test the preview uses the user's order and appends the rest."""
    reordered = sample_cv.model_copy(update={
        "customization": sample_cv.customization.model_copy(update={"sectionOrder": ["languages", "bogus", "skills"]})
    })
    html = CVGenerator().generate_preview_html(reordered)

    assert html.index("<h3>Languages</h3>") < html.index("<h3>Skills</h3>") < html.index("<h1>John Doe</h1>")


def test_empty_sections_are_omitted():
    """Test sections without data produce no heading."""
    doc = CVDocument.model_validate({"personalInfo": {"fullName": "Jane Doe", "email": "jane@x.com"}})
    html = CVGenerator().generate_html(doc)

    assert "Jane Doe" in html
    for heading in ("Professional Summary", "Work Experience", "Education", "Skills", "Projects", "Languages"):
        assert f"<h3>{heading}</h3>" not in html


def test_html_is_escaped():
    """Test user text cannot inject markup."""
    doc = CVDocument.model_validate({"summary": "<script>alert(1)</script>"})
    html = CVGenerator().generate_html(doc)

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_customization_applied(sample_cv):
    """Test colours and template class reach the markup."""
    custom = sample_cv.customization.model_copy(update={"primaryColor": "#123456", "template": "modern"})
    html = CVGenerator().generate_html(sample_cv.model_copy(update={"customization": custom}))

    assert "--primary: #123456" in html
    assert 'class="template-modern"' in html


def test_generate_pdf(sample_cv, weasyprint_ready):
    """Test PDF generation."""
    pdf_bytes = PDFGenerator().generate_pdf(sample_cv)

    assert len(pdf_bytes) > 0
    assert pdf_bytes.startswith(b"%PDF")  # PDF magic number
    text = "".join(page.extract_text() for page in PdfReader(io.BytesIO(pdf_bytes)).pages)
    assert "John Doe" in text


def test_pdf_paginates_without_loss_or_duplication(weasyprint_ready):
    """Test a long CV spans several pages and every entry appears exactly once."""
    entries = [
        {
            "jobTitle": f"Position{i:03d}",
            "company": "Acme",
            "startDate": "01/2020",
            "description": "Worked on many things. " * 8,
            "achievements": ["Shipped features", "Fixed bugs"],
        }
        for i in range(40)
    ]
    doc = CVDocument.model_validate({
        "personalInfo": {"fullName": "Jane Doe", "email": "jane@x.com"},
        "workExperience": entries,
    })

    reader = PdfReader(io.BytesIO(PDFGenerator().generate_pdf(doc)))
    text = "\n".join(page.extract_text() for page in reader.pages)

    assert len(reader.pages) > 1
    for i in range(40):
        assert text.count(f"Position{i:03d}") == 1


def test_pdf_failure_raises_export_error(sample_cv, weasyprint_ready):
    """Test rendering failures surface as a single ExportError."""
    class BrokenGenerator(CVGenerator):
        def generate_html(self, data, section_order=None):
            raise RuntimeError("template exploded")

    with pytest.raises(ExportError, match="template exploded"):
        PDFGenerator(BrokenGenerator()).generate_pdf(sample_cv)


def test_blank_summary_is_omitted():
    """Test a whitespace-only summary produces no heading."""
    doc = CVDocument.model_validate({"summary": "   "})
    assert "<h3>Professional Summary</h3>" not in CVGenerator().generate_html(doc)
