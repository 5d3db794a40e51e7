"""Catalogue of the ATS-friendly CV templates."""

from typing import List, Optional
from pydantic import BaseModel


class CVTemplate(BaseModel):
    """Template metadata shown in the template picker."""

    id: str
    name: str
    description: str
    thumbnailUrl: str
    atsOptimized: bool = True
    features: List[str]


TEMPLATES: List[CVTemplate] = [
    CVTemplate(
        id="classic",
        name="Classic",
        description="Clean and traditional layout with professional formatting.",
        thumbnailUrl="/templates/classic.png",
        features=["Traditional layout", "ATS-friendly formatting", "Professional appearance"],
    ),
    CVTemplate(
        id="modern",
        name="Modern",
        description="Sleek design with emphasis on skills and achievements.",
        thumbnailUrl="/templates/modern.png",
        features=["Contemporary design", "Skills-focused layout", "Clean typography"],
    ),
    CVTemplate(
        id="minimal",
        name="Minimal",
        description="Simple and clean layout for maximum readability.",
        thumbnailUrl="/templates/minimal.png",
        features=["Minimal design", "Maximum readability", "ATS-optimized"],
    ),
    CVTemplate(
        id="professional",
        name="Professional",
        description="Corporate-style layout suitable for all industries.",
        thumbnailUrl="/templates/professional.png",
        features=["Corporate style", "Industry-agnostic", "Professional appearance"],
    ),
    CVTemplate(
        id="creative",
        name="Creative",
        description="Modern layout with subtle design elements for creative fields.",
        thumbnailUrl="/templates/creative.png",
        features=["Creative design", "Subtle styling", "ATS-compatible"],
    ),
]


def list_templates() -> List[CVTemplate]:
    return list(TEMPLATES)


def get_template(template_id: str) -> Optional[CVTemplate]:
    return next((t for t in TEMPLATES if t.id == template_id), None)
