"""Response models for API endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response model."""
    
    detail: Any = Field(
        ...,
        description="Error message, or an object with a message and a list of validation errors",
        example={"message": "Validation failed", "errors": ["personalInfo.email: value is not a valid email"]}
    )


class HealthResponse(BaseModel):
    """Health check response model."""
    
    status: str = Field(
        ...,
        description="Service status",
        example="ok"
    )


class RootResponse(BaseModel):
    """Root endpoint response model."""
    
    message: str = Field(
        ...,
        description="API name and version information",
        example="CV Builder API"
    )
    version: str = Field(
        ...,
        description="API version",
        example="1.0.0"
    )


class CVCreatedResponse(BaseModel):
    """Response for a newly saved CV."""
    
    cvId: str
    userId: str
    message: str
    createdAt: datetime


class CVResponse(BaseModel):
    """A stored CV."""
    
    cvId: str
    userId: str
    cvData: Dict[str, Any]
    template: str
    updatedAt: datetime


class CVUpdatedResponse(BaseModel):
    """Response for an updated CV."""
    
    cvId: str
    message: str
    updatedAt: datetime


class CVDeletedResponse(BaseModel):
    """Response for a deleted CV."""
    
    cvId: str
    message: str


class CVSummary(BaseModel):
    """One entry of a user's CV list."""
    
    cvId: str
    template: str
    fullName: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime


class CVListResponse(BaseModel):
    """A page of a user's CVs, most recently updated first."""
    
    cvs: List[CVSummary]
    totalPages: int
    currentPage: int
    totalCVs: int


class ProgressResponse(BaseModel):
    """Completion of a CV."""
    
    percentage: int = Field(
        ...,
        description="Share of the eight tracked sections that are filled in",
        example=75
    )


class TemplatePreviewResponse(BaseModel):
    """Template id with sample data to render it."""
    
    templateId: str
    sampleData: Dict[str, Any]
