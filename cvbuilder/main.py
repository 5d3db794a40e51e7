"""FastAPI application for the CV Builder."""

from io import BytesIO
from urllib.parse import quote
from fastapi import FastAPI, HTTPException, Query, status
from fastapi.responses import HTMLResponse, StreamingResponse
from loguru import logger
from pydantic import ValidationError
from cvbuilder.config import get_settings
from cvbuilder.errors import ExportError, ExportTimeoutError
from cvbuilder.models.cv_models import CVDocument
from cvbuilder.models.request_models import CVCreateRequest, CVUpdateRequest
from cvbuilder.models.response_models import (
    CVCreatedResponse,
    CVDeletedResponse,
    CVListResponse,
    CVResponse,
    CVSummary,
    CVUpdatedResponse,
    ErrorResponse,
    HealthResponse,
    ProgressResponse,
    RootResponse,
    TemplatePreviewResponse,
)
from cvbuilder.services.cv_data_loader import get_data_loader
from cvbuilder.services.cv_generator import CVGenerator
from cvbuilder.services.cv_repository import get_repository, is_valid_cv_id
from cvbuilder.services.cv_store import progress_percentage
from cvbuilder.services.export_service import ExportFormat, ExportJob
from cvbuilder.services.pdf_generator import PDFGenerator
from cvbuilder.services.template_registry import get_template, list_templates
from cvbuilder.utils.logger import setup_logger

API_VERSION = "1.0.0"

settings = get_settings()
setup_logger(settings.log_level, settings.log_file)

app = FastAPI(
    title="CV Builder API",
    description="""API to store CV documents and export them to PDF or Markdown.

## Features

* **CV storage**: Create, read, update, delete and list CVs keyed by an anonymous user id
* **Templates**: ATS-friendly template catalogue with preview data
* **Export**: Paginated A4 PDF and Markdown downloads of a CV
* **Preview**: HTML preview honouring the user's section order and styling

## Usage

1. Generate a random user id on the client and keep it
2. Use `POST /api/cvs` to save a CV and `PUT /api/cvs/{cvId}` to update it
3. Use `POST /api/v1/cv/export/{format}` to download the CV""",
    version=API_VERSION,
    tags_metadata=[
        {
            "name": "health",
            "description": "Health check and status endpoints"
        },
        {
            "name": "cvs",
            "description": "CV storage endpoints"
        },
        {
            "name": "templates",
            "description": "Template catalogue endpoints"
        },
        {
            "name": "export",
            "description": "CV export and preview endpoints"
        }
    ]
)

# Initialize services
repository = get_repository()
data_loader = get_data_loader()
cv_generator = CVGenerator()
pdf_generator = PDFGenerator(cv_generator)


def _validation_detail(error: ValidationError) -> dict:
    messages = [
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" if e["loc"] else e["msg"]
        for e in error.errors()
    ]
    return {"message": "Validation failed", "errors": messages}


def _check_cv_id(cv_id: str) -> None:
    if not is_valid_cv_id(cv_id):
        raise HTTPException(status_code=400, detail="Invalid CV ID format")


@app.get(
    "/",
    response_model=RootResponse,
    status_code=status.HTTP_200_OK,
    summary="Root endpoint",
    description="Returns API information including name and version",
    tags=["health"]
)
async def root():
    """
    Root endpoint.

    Returns basic API information including name and version.
    """
    return RootResponse(message="CV Builder API", version=API_VERSION)


@app.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Checks if the API service is running and healthy",
    tags=["health"]
)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.post(
    "/api/cvs",
    response_model=CVCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a new CV",
    tags=["cvs"],
    responses={
        400: {
            "description": "Missing userId or personal information, or invalid CV data",
            "model": ErrorResponse
        }
    }
)
async def create_cv(request: CVCreateRequest):
    """
    Save a new CV.

    **Parameters:**
    - `userId`: Anonymous client id (required)
    - `cvData`: CV content; `personalInfo.fullName` and `personalInfo.email` are required
    - `template`: Template id (optional, defaults to `classic`)
    """
    if not request.userId:
        raise HTTPException(status_code=400, detail="userId is required")

    cv_data = request.cvData or {}
    personal_info = cv_data.get("personalInfo")
    if not isinstance(personal_info, dict) or not personal_info.get("fullName") or not personal_info.get("email"):
        raise HTTPException(
            status_code=400,
            detail="CV data with personal information (fullName and email) is required"
        )

    try:
        cv_id, stored = repository.create(request.userId, cv_data, request.template)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_detail(e))

    return CVCreatedResponse(
        cvId=cv_id,
        userId=stored.userId,
        message="CV created successfully",
        createdAt=stored.createdAt
    )


@app.get(
    "/api/cvs/{cv_id}",
    response_model=CVResponse,
    summary="Get a CV",
    tags=["cvs"],
    responses={
        400: {"description": "Invalid CV ID format", "model": ErrorResponse},
        404: {"description": "CV not found", "model": ErrorResponse}
    }
)
async def get_cv(cv_id: str):
    """Return a stored CV by id."""
    _check_cv_id(cv_id)
    stored = repository.get(cv_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="CV not found")

    return CVResponse(
        cvId=cv_id,
        userId=stored.userId,
        cvData=stored.content_dict(),
        template=stored.template,
        updatedAt=stored.updatedAt
    )


@app.put(
    "/api/cvs/{cv_id}",
    response_model=CVUpdatedResponse,
    summary="Update a CV",
    tags=["cvs"],
    responses={
        400: {"description": "Invalid CV ID format or invalid CV data", "model": ErrorResponse},
        404: {"description": "CV not found", "model": ErrorResponse}
    }
)
async def update_cv(cv_id: str, request: CVUpdateRequest):
    """
    Update a CV.

    Sections present in `cvData` replace the stored ones; the result is
    validated as a whole. Concurrent updates are last-write-wins.
    """
    _check_cv_id(cv_id)
    changes = dict(request.cvData)
    if request.template:
        changes["template"] = request.template

    try:
        updated = repository.update(cv_id, changes)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_detail(e))

    if updated is None:
        raise HTTPException(status_code=404, detail="CV not found")

    return CVUpdatedResponse(cvId=cv_id, message="CV updated successfully", updatedAt=updated.updatedAt)


@app.delete(
    "/api/cvs/{cv_id}",
    response_model=CVDeletedResponse,
    summary="Delete a CV",
    tags=["cvs"],
    responses={
        400: {"description": "Invalid CV ID format", "model": ErrorResponse},
        404: {"description": "CV not found", "model": ErrorResponse}
    }
)
async def delete_cv(cv_id: str):
    """Delete a CV by id."""
    _check_cv_id(cv_id)
    if not repository.delete(cv_id):
        raise HTTPException(status_code=404, detail="CV not found")
    return CVDeletedResponse(cvId=cv_id, message="CV deleted successfully")


@app.get(
    "/api/users/{user_id}/cvs",
    response_model=CVListResponse,
    summary="List a user's CVs",
    tags=["cvs"]
)
async def list_user_cvs(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100)
):
    """List the CVs of a user, most recently updated first."""
    items, total = repository.list_by_user(user_id, page, limit)
    return CVListResponse(
        cvs=[
            CVSummary(
                cvId=cv_id,
                template=cv.template,
                fullName=cv.personalInfo.fullName,
                createdAt=cv.createdAt,
                updatedAt=cv.updatedAt
            )
            for cv_id, cv in items
        ],
        totalPages=repository.total_pages(total, limit),
        currentPage=page,
        totalCVs=total
    )


@app.get(
    "/api/templates",
    summary="List templates",
    tags=["templates"]
)
async def templates():
    """Return all available templates."""
    return list_templates()


@app.get(
    "/api/templates/{template_id}",
    summary="Get a template",
    tags=["templates"],
    responses={404: {"description": "Template not found", "model": ErrorResponse}}
)
async def template_by_id(template_id: str):
    """Return one template's metadata."""
    template = get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@app.get(
    "/api/templates/{template_id}/preview",
    response_model=TemplatePreviewResponse,
    summary="Get template preview data",
    tags=["templates"],
    responses={404: {"description": "Template not found", "model": ErrorResponse}}
)
async def template_preview(template_id: str):
    """Return sample CV data to render a template preview with."""
    if get_template(template_id) is None:
        raise HTTPException(status_code=404, detail="Template not found")
    try:
        sample = data_loader.load_sample()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Sample CV unavailable: {e}")
        raise HTTPException(status_code=500, detail="Preview data is unavailable")
    return TemplatePreviewResponse(templateId=template_id, sampleData=sample.content_dict())


@app.post(
    "/api/v1/cv/export/{export_format}",
    response_class=StreamingResponse,
    summary="Export a CV",
    description="""
    Renders the CV to an A4 PDF or to Markdown and returns it as a download.

    Sections are laid out in a fixed order and empty sections are left out.
    The filename is built from the person's name and today's date.
    """,
    tags=["export"],
    responses={
        200: {
            "description": "Exported file",
            "content": {
                "application/pdf": {"schema": {"type": "string", "format": "binary"}},
                "text/markdown": {"schema": {"type": "string"}}
            }
        },
        500: {"description": "Rendering failed", "model": ErrorResponse},
        504: {"description": "Rendering timed out", "model": ErrorResponse}
    }
)
async def export_cv(export_format: ExportFormat, document: CVDocument):
    """Export a CV document to `pdf` or `markdown`."""
    job = ExportJob(pdf_generator=pdf_generator, timeout=settings.export_timeout)
    try:
        result = await job.run(document, export_format)
    except ExportTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    except ExportError as e:
        raise HTTPException(status_code=500, detail=f"Error exporting CV: {e}")

    return StreamingResponse(
        BytesIO(result.content),
        media_type=result.media_type,
        headers={
            "Content-Disposition": (
                f'attachment; filename="{result.filename}"; '
                f"filename*=UTF-8''{quote(result.filename)}"
            )
        }
    )


@app.post(
    "/api/v1/cv/preview",
    response_class=HTMLResponse,
    summary="Render the HTML preview",
    tags=["export"]
)
async def preview_cv(document: CVDocument):
    """Render the live preview of a CV, following its customization."""
    return HTMLResponse(cv_generator.generate_preview_html(document))


@app.post(
    "/api/v1/cv/progress",
    response_model=ProgressResponse,
    summary="Completion percentage",
    tags=["export"]
)
async def cv_progress(document: CVDocument):
    """Return how many of the tracked sections are filled in, as a percentage."""
    return ProgressResponse(percentage=progress_percentage(document))
