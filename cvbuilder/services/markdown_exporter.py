"""Markdown export of a CV document."""

from typing import List

from cvbuilder.models.cv_models import CVDocument
from cvbuilder.utils.template_helpers import entry_date_range


def _contact(document: CVDocument) -> List[str]:
    info = document.personalInfo
    lines = ["## Contact Information", ""]
    if info.email:
        lines.append(f"- **Email:** {info.email}")
    if info.phone:
        lines.append(f"- **Phone:** {info.phone}")
    if info.location:
        lines.append(f"- **Location:** {info.location}")
    for link in info.links:
        lines.append(f"- **{link.type.value}:** [{link.url}]({link.url})")
    lines.append("")
    return lines


def _work_experience(document: CVDocument) -> List[str]:
    lines = ["## Work Experience", ""]
    for work in document.workExperience:
        lines.append(f"### {work.jobTitle} at {work.company}")
        if work.location:
            lines.append(f"*{work.location}*")
        lines.append(f"*{entry_date_range(work)}*")
        lines.append("")
        if work.description:
            lines.extend([work.description, ""])
        if work.achievements:
            lines.append("**Key Achievements:**")
            lines.extend(f"- {achievement}" for achievement in work.achievements)
            lines.append("")
    return lines


def _education(document: CVDocument) -> List[str]:
    lines = ["## Education", ""]
    for edu in document.education:
        lines.append(f"### {edu.degree}")
        lines.append(f"**{edu.institution}**")
        if edu.location:
            lines.append(f"*{edu.location}*")
        lines.append(f"*{entry_date_range(edu)}*")
        if edu.gpa:
            lines.append(f"**GPA:** {edu.gpa}")
        if edu.description:
            lines.append(edu.description)
        if edu.relevantCourses:
            lines.append(f"**Relevant Courses:** {', '.join(edu.relevantCourses)}")
        lines.append("")
    return lines


def _skills(document: CVDocument) -> List[str]:
    # displayLayout is a visual hint and has no Markdown rendering
    lines = ["## Skills", ""]
    for group in document.skills:
        if group.groupName:
            lines.append(f"### {group.groupName}")
        if group.skills:
            lines.append(", ".join(group.skills))
        for prof in group.proficiency:
            line = f"- {prof.skill}: {prof.level.value}"
            if prof.percentage is not None:
                line += f" ({prof.percentage}%)"
            lines.append(line)
        lines.append("")
    return lines


def _projects(document: CVDocument) -> List[str]:
    lines = ["## Projects", ""]
    for project in document.projects:
        lines.append(f"### {project.name}")
        if project.role:
            lines.append(f"**Role:** {project.role}")
        if project.startDate:
            lines.append(f"*{entry_date_range(project)}*")
        if project.techStack:
            lines.append(f"**Tech Stack:** {', '.join(project.techStack)}")
        if project.description:
            lines.append(project.description)
        links = []
        if project.liveDemoLink:
            links.append(f"[Live Demo]({project.liveDemoLink})")
        if project.githubLink:
            links.append(f"[GitHub]({project.githubLink})")
        if links:
            lines.append(f"**Links:** {' | '.join(links)}")
        lines.append("")
    return lines


def _certifications(document: CVDocument) -> List[str]:
    lines = ["## Certifications", ""]
    for cert in document.certifications:
        lines.append(f"### {cert.title}")
        lines.append(f"**Issuer:** {cert.issuer}")
        lines.append(f"*{entry_date_range(cert)}*")
        if cert.description:
            lines.append(cert.description)
        if cert.certificateLink:
            lines.append(f"[View Certificate]({cert.certificateLink})")
        lines.append("")
    return lines


def _languages(document: CVDocument) -> List[str]:
    lines = ["## Languages", ""]
    lines.extend(f"- {lang.language}: {lang.proficiency.value}" for lang in document.languages)
    lines.append("")
    return lines


def export_to_markdown(document: CVDocument) -> str:
    """
    Render a CV as Markdown.

    Sections without content are left out, except the contact block which
    is always present. Never raises for a valid CVDocument.

    Args:
        document: CV to export

    Returns:
        str: Markdown text
    """
    info = document.personalInfo
    lines = [f"# {info.fullName.strip() or 'CV'}", ""]
    if info.jobTitle:
        lines.extend([f"**{info.jobTitle}**", ""])

    lines.extend(_contact(document))

    if document.summary and document.summary.strip():
        lines.extend(["## Professional Summary", "", document.summary, ""])
    if document.workExperience:
        lines.extend(_work_experience(document))
    if document.education:
        lines.extend(_education(document))
    if document.skills:
        lines.extend(_skills(document))
    if document.projects:
        lines.extend(_projects(document))
    if document.certifications:
        lines.extend(_certifications(document))
    if document.languages:
        lines.extend(_languages(document))

    return "\n".join(lines)
