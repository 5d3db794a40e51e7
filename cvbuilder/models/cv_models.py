"""Pydantic models for CV documents."""

import re
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


SECTION_IDS = (
    "personal",
    "summary",
    "work",
    "internships",
    "education",
    "skills",
    "certifications",
    "projects",
    "languages",
)

# Section id used in customization.sectionOrder -> CVDocument attribute
SECTION_FIELDS = {
    "personal": "personalInfo",
    "summary": "summary",
    "work": "workExperience",
    "internships": "internships",
    "education": "education",
    "skills": "skills",
    "certifications": "certifications",
    "projects": "projects",
    "languages": "languages",
}

DEFAULT_PRIMARY_COLOR = "#F25C1C"
DEFAULT_SECONDARY_COLOR = "#F47A2E"

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def validate_email(value: str) -> str:
    """Strip an email address and check that it looks like one (empty allowed)."""
    value = value.strip()
    if value and not EMAIL_PATTERN.match(value):
        raise ValueError(f"'{value}' is not a valid email address")
    return value


def resolve_section_order(order: Optional[List[str]]) -> List[str]:
    """
    Normalize a user-supplied section order.

    Unknown ids and repeated ids are dropped, then every known section
    missing from ``order`` is appended in canonical order.

    Args:
        order: Section ids as stored in customization.sectionOrder

    Returns:
        List[str]: A permutation of SECTION_IDS
    """
    resolved: List[str] = []
    for section_id in order or []:
        if section_id in SECTION_IDS and section_id not in resolved:
            resolved.append(section_id)
    resolved.extend(s for s in SECTION_IDS if s not in resolved)
    return resolved


def _lookup_enum(enum_cls, value: Any, aliases: Optional[Dict[str, str]] = None):
    """Case-insensitive enum lookup, used as ``_missing_``."""
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if aliases and key in aliases:
        key = aliases[key]
    for member in enum_cls:
        if member.value.lower() == key:
            return member
    return None


class LinkType(str, Enum):
    """Known professional link platforms."""

    LINKEDIN = "LinkedIn"
    GITHUB = "GitHub"
    PORTFOLIO = "Portfolio"
    BEHANCE = "Behance"
    DRIBBBLE = "Dribbble"
    MEDIUM = "Medium"
    TWITTER = "Twitter"

    @classmethod
    def _missing_(cls, value):
        return _lookup_enum(cls, value)


class DisplayLayout(str, Enum):
    """Presentation hint for a skill group."""

    BULLET = "bullet"
    ONE_LINE = "one-line"
    COLUMNS_2 = "columns-2"
    COLUMNS_3 = "columns-3"
    BADGES = "badges"

    @classmethod
    def _missing_(cls, value):
        # Names used by older front-end snapshots
        return _lookup_enum(
            cls, value, {"oneline": "one-line", "columns": "columns-2", "badge": "badges"}
        )


class SkillLevel(str, Enum):
    """Skill proficiency level."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"

    @classmethod
    def _missing_(cls, value):
        return _lookup_enum(cls, value)


class LanguageProficiency(str, Enum):
    """Spoken language proficiency."""

    NATIVE = "Native"
    FLUENT = "Fluent"
    INTERMEDIATE = "Intermediate"
    BASIC = "Basic"

    @classmethod
    def _missing_(cls, value):
        return _lookup_enum(cls, value)


class _DatedEntry(BaseModel):
    """Shared handling for entries with a start/end date."""

    @field_validator("startDate", "endDate", mode="before", check_fields=False)
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        # YAML and older snapshots may carry real dates
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value


class Link(BaseModel):
    """Professional link shown in the contact block."""

    type: LinkType
    url: str = Field(min_length=1)
    iconColor: str = DEFAULT_PRIMARY_COLOR


class PersonalInfo(BaseModel):
    """Personal information model."""

    fullName: str = ""
    email: str = ""
    jobTitle: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    links: List[Link] = Field(default_factory=list)
    maritalStatus: Optional[str] = None
    militaryStatus: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return validate_email(value)

    @property
    def is_complete(self) -> bool:
        """Whether the required name and email are filled in."""
        return bool(self.fullName.strip() and self.email.strip())


class PersonalInfoPatch(BaseModel):
    """Partial update of PersonalInfo; only explicitly set fields are merged."""

    fullName: Optional[str] = None
    email: Optional[str] = None
    jobTitle: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    links: Optional[List[Link]] = None
    maritalStatus: Optional[str] = None
    militaryStatus: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return validate_email(value)


class Engagement(_DatedEntry):
    """Work experience or internship entry."""

    id: str = Field(default_factory=new_id)
    jobTitle: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    isCurrent: bool = False
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)


WorkExperience = Engagement


class Education(_DatedEntry):
    """Education entry model."""

    id: str = Field(default_factory=new_id)
    degree: str = Field(min_length=1)
    institution: str = Field(min_length=1)
    location: Optional[str] = None
    startDate: str = Field(min_length=1)
    endDate: Optional[str] = None
    isCurrent: bool = False
    description: Optional[str] = None
    gpa: Optional[str] = None
    relevantCourses: List[str] = Field(default_factory=list)

    @field_validator("gpa", mode="before")
    @classmethod
    def _gpa_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value


class SkillProficiency(BaseModel):
    """Proficiency of a single skill."""

    skill: str
    level: SkillLevel
    percentage: Optional[int] = Field(default=None, ge=0, le=100)


class SkillGroup(BaseModel):
    """Named group of skills."""

    id: str = Field(default_factory=new_id)
    groupName: Optional[str] = None
    skills: List[str] = Field(min_length=1)
    displayLayout: DisplayLayout = DisplayLayout.BULLET
    proficiency: List[SkillProficiency] = Field(default_factory=list)


class Certification(_DatedEntry):
    """Certification entry model."""

    id: str = Field(default_factory=new_id)
    title: str = Field(min_length=1)
    issuer: str = Field(min_length=1)
    startDate: str = Field(min_length=1)
    endDate: Optional[str] = None
    isCurrent: bool = False
    description: Optional[str] = None
    certificateLink: Optional[str] = None


class Project(_DatedEntry):
    """Project entry model."""

    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    role: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    isCurrent: bool = False
    techStack: List[str] = Field(default_factory=list)
    liveDemoLink: Optional[str] = None
    githubLink: Optional[str] = None
    description: Optional[str] = None


class Language(BaseModel):
    """Language proficiency model."""

    id: str = Field(default_factory=new_id)
    language: str = Field(min_length=1)
    proficiency: LanguageProficiency


class Customization(BaseModel):
    """Cosmetic settings applied by the HTML/PDF renderer."""

    primaryColor: str = DEFAULT_PRIMARY_COLOR
    secondaryColor: Optional[str] = DEFAULT_SECONDARY_COLOR
    sectionOrder: List[str] = Field(default_factory=lambda: list(SECTION_IDS))
    iconColors: Dict[str, str] = Field(default_factory=dict)
    template: Optional[str] = "professional-classic"
    iconStyle: Optional[str] = "professional"
    spacing: Optional[str] = "standard"
    fontFamily: Optional[str] = "inter"
    borderStyle: Optional[str] = "subtle"


class CustomizationPatch(BaseModel):
    """Partial update of Customization."""

    primaryColor: Optional[str] = None
    secondaryColor: Optional[str] = None
    sectionOrder: Optional[List[str]] = None
    iconColors: Optional[Dict[str, str]] = None
    template: Optional[str] = None
    iconStyle: Optional[str] = None
    spacing: Optional[str] = None
    fontFamily: Optional[str] = None
    borderStyle: Optional[str] = None


# Collection attribute -> entry model
COLLECTION_MODELS = {
    "workExperience": Engagement,
    "internships": Engagement,
    "education": Education,
    "skills": SkillGroup,
    "certifications": Certification,
    "projects": Project,
    "languages": Language,
}


class CVContent(BaseModel):
    """The editable content of a CV, shared by local and stored documents."""

    personalInfo: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: Optional[str] = None
    workExperience: List[Engagement] = Field(default_factory=list)
    internships: List[Engagement] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    skills: List[SkillGroup] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)
    customization: Customization = Field(default_factory=Customization)

    @field_validator("createdAt", "updatedAt", check_fields=False)
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def content_dict(self) -> Dict[str, Any]:
        """JSON-ready dump of the content fields only."""
        return self.model_dump(mode="json", include=set(CVContent.model_fields))


class CVDocument(CVContent):
    """One resume: content, styling and bookkeeping."""

    id: str = Field(default_factory=new_id)
    createdAt: datetime = Field(default_factory=utcnow)
    updatedAt: datetime = Field(default_factory=utcnow)

    @classmethod
    def new(cls) -> "CVDocument":
        """Create an empty document with a fresh id and timestamps."""
        now = utcnow()
        return cls(createdAt=now, updatedAt=now)


class StoredCV(CVContent):
    """CV document as persisted by the remote API."""

    userId: str
    template: str = "classic"
    createdAt: datetime = Field(default_factory=utcnow)
    updatedAt: datetime = Field(default_factory=utcnow)
