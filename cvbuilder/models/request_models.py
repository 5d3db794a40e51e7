"""Request models for API endpoints."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class CVCreateRequest(BaseModel):
    """Request model for saving a new CV."""
    
    userId: Optional[str] = Field(
        None,
        description="Anonymous client id generated and kept by the browser",
        example="user_3f2a9c4e8b1d4f0a9e7c6b5a4d3c2b1a"
    )
    cvData: Optional[Dict[str, Any]] = Field(
        None,
        description="CV content: personalInfo, summary, workExperience, internships, education, skills, certifications, projects, languages and customization",
        example={"personalInfo": {"fullName": "Jane Doe", "email": "jane@example.com"}}
    )
    template: Optional[str] = Field(
        None,
        description="Template id. Defaults to 'classic'",
        example="modern"
    )


class CVUpdateRequest(BaseModel):
    """Request model for updating a CV. Only the sections given are replaced."""
    
    cvData: Dict[str, Any] = Field(
        default_factory=dict,
        description="Top-level CV sections to replace",
        example={"summary": "Backend engineer focused on APIs."}
    )
    template: Optional[str] = Field(
        None,
        description="New template id",
        example="minimal"
    )
