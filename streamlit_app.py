"""Streamlit form wizard for the CV Builder."""

import asyncio
import base64
from typing import List

import streamlit as st
import streamlit.components.v1 as components
from pydantic import ValidationError

from cvbuilder.config import get_settings
from cvbuilder.errors import ExportError, RemoteAPIError
from cvbuilder.models.cv_models import (
    SECTION_IDS,
    DisplayLayout,
    LanguageProficiency,
    LinkType,
    resolve_section_order,
)
from cvbuilder.services.cv_api_client import CVApiClient
from cvbuilder.services.cv_generator import FONT_STACKS, CVGenerator
from cvbuilder.services.cv_store import (
    CVStore,
    DeleteItem,
    ReorderSections,
    UpdateCustomization,
    UpdateSummary,
    parse_command,
)
from cvbuilder.services.export_service import ExportFormat, ExportJob, ExportStatus
from cvbuilder.services.template_registry import list_templates
from cvbuilder.utils.logger import setup_logger

SUMMARY_SOFT_LIMIT = 500

STEPS = [
    "Personal Info",
    "Summary",
    "Work Experience",
    "Internships",
    "Education",
    "Skills",
    "Certifications",
    "Projects",
    "Languages",
    "Customize",
]

# Page configuration
st.set_page_config(
    page_title="CV Builder",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="expanded"
)


def get_store() -> CVStore:
    """Create the session's store once and restore the last saved CV."""
    if "cv_store" not in st.session_state:
        settings = get_settings()
        setup_logger(settings.log_level, settings.log_file)
        store = CVStore()
        store.hydrate()
        st.session_state.cv_store = store
        st.session_state.export_job = ExportJob()
    return st.session_state.cv_store


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def split_commas(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def dispatch_form(store: CVStore, payload: dict) -> None:
    """Validate a raw form payload and apply it, showing field errors on failure."""
    try:
        store.dispatch(parse_command(payload))
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"][-2:])
            st.error(f"{field}: {error['msg']}")
        return
    st.success("Saved")


def entry_list(store: CVStore, section: str, label) -> None:
    """Show the entries of a collection with a delete button each."""
    for item in getattr(store.state, section):
        cols = st.columns([6, 1])
        cols[0].markdown(label(item))
        if cols[1].button("Delete", key=f"del-{section}-{item.id}"):
            store.dispatch(DeleteItem(section=section, itemId=item.id))
            st.rerun()


def personal_info_step(store: CVStore) -> None:
    info = store.state.personalInfo
    with st.form("personal_info"):
        full_name = st.text_input("Full name *", value=info.fullName)
        email = st.text_input("Email *", value=info.email)
        job_title = st.text_input("Job title", value=info.jobTitle or "")
        phone = st.text_input("Phone", value=info.phone or "")
        location = st.text_input("Location", value=info.location or "")
        marital_status = st.text_input("Marital status", value=info.maritalStatus or "")
        military_status = st.text_input("Military status", value=info.militaryStatus or "")

        st.markdown("**Links**")
        links = []
        for link_type in LinkType:
            current = next((l for l in info.links if l.type == link_type), None)
            url = st.text_input(link_type.value, value=current.url if current else "")
            if url.strip():
                links.append({
                    "type": link_type.value,
                    "url": url.strip(),
                    "iconColor": current.iconColor if current else store.state.customization.primaryColor,
                })

        if st.form_submit_button("Save", type="primary"):
            dispatch_form(store, {
                "type": "UpdatePersonalInfo",
                "data": {
                    "fullName": full_name,
                    "email": email,
                    "jobTitle": job_title or None,
                    "phone": phone or None,
                    "location": location or None,
                    "maritalStatus": marital_status or None,
                    "militaryStatus": military_status or None,
                    "links": links,
                },
            })


def summary_step(store: CVStore) -> None:
    with st.form("summary"):
        text = st.text_area("Professional summary", value=store.state.summary or "", height=200)
        st.caption(f"{len(text)}/{SUMMARY_SOFT_LIMIT} characters")
        if len(text) > SUMMARY_SOFT_LIMIT:
            st.warning("Summaries over 500 characters are usually skimmed.")
        if st.form_submit_button("Save", type="primary"):
            store.dispatch(UpdateSummary(text=text.strip() or None))
            st.success("Saved")


def engagement_step(store: CVStore, section: str) -> None:
    entry_list(store, section, lambda w: f"**{w.jobTitle}** at {w.company}")
    with st.form(f"add-{section}", clear_on_submit=True):
        job_title = st.text_input("Job title *")
        company = st.text_input("Company *")
        location = st.text_input("Location")
        cols = st.columns(3)
        start = cols[0].text_input("Start (MM/YYYY)")
        end = cols[1].text_input("End (MM/YYYY)")
        current = cols[2].checkbox("I currently work here")
        description = st.text_area("Description")
        achievements = st.text_area("Achievements (one per line)")
        if st.form_submit_button("Add", type="primary"):
            dispatch_form(store, {
                "type": "AddItem",
                "section": section,
                "item": {
                    "jobTitle": job_title,
                    "company": company,
                    "location": location or None,
                    "startDate": start or None,
                    "endDate": None if current else (end or None),
                    "isCurrent": current,
                    "description": description or None,
                    "achievements": split_lines(achievements),
                },
            })


def education_step(store: CVStore) -> None:
    entry_list(store, "education", lambda e: f"**{e.degree}**, {e.institution}")
    with st.form("add-education", clear_on_submit=True):
        degree = st.text_input("Degree *")
        institution = st.text_input("Institution *")
        location = st.text_input("Location")
        cols = st.columns(3)
        start = cols[0].text_input("Start (MM/YYYY) *")
        end = cols[1].text_input("End (MM/YYYY)")
        gpa = cols[2].text_input("GPA")
        description = st.text_area("Description")
        courses = st.text_input("Relevant courses (comma separated)")
        if st.form_submit_button("Add", type="primary"):
            dispatch_form(store, {
                "type": "AddItem",
                "section": "education",
                "item": {
                    "degree": degree,
                    "institution": institution,
                    "location": location or None,
                    "startDate": start,
                    "endDate": end or None,
                    "gpa": gpa or None,
                    "description": description or None,
                    "relevantCourses": split_commas(courses),
                },
            })


def skills_step(store: CVStore) -> None:
    entry_list(store, "skills", lambda g: f"**{g.groupName or 'Skills'}**: {', '.join(g.skills)}")
    with st.form("add-skills", clear_on_submit=True):
        group_name = st.text_input("Group name")
        skills = st.text_input("Skills (comma separated) *")
        layout = st.selectbox("Display", [l.value for l in DisplayLayout])
        if st.form_submit_button("Add", type="primary"):
            dispatch_form(store, {
                "type": "AddItem",
                "section": "skills",
                "item": {
                    "groupName": group_name or None,
                    "skills": split_commas(skills),
                    "displayLayout": layout,
                },
            })


def certifications_step(store: CVStore) -> None:
    entry_list(store, "certifications", lambda c: f"**{c.title}** by {c.issuer}")
    with st.form("add-certification", clear_on_submit=True):
        title = st.text_input("Title *")
        issuer = st.text_input("Issuer *")
        cols = st.columns(2)
        start = cols[0].text_input("Issued (MM/YYYY) *")
        end = cols[1].text_input("Expires (MM/YYYY)")
        link = st.text_input("Certificate link")
        description = st.text_area("Description")
        if st.form_submit_button("Add", type="primary"):
            dispatch_form(store, {
                "type": "AddItem",
                "section": "certifications",
                "item": {
                    "title": title,
                    "issuer": issuer,
                    "startDate": start,
                    "endDate": end or None,
                    "certificateLink": link or None,
                    "description": description or None,
                },
            })


def projects_step(store: CVStore) -> None:
    entry_list(store, "projects", lambda p: f"**{p.name}**")
    with st.form("add-project", clear_on_submit=True):
        name = st.text_input("Name *")
        role = st.text_input("Role")
        cols = st.columns(2)
        start = cols[0].text_input("Start (MM/YYYY)")
        end = cols[1].text_input("End (MM/YYYY)")
        tech = st.text_input("Tech stack (comma separated)")
        demo = st.text_input("Live demo link")
        github = st.text_input("GitHub link")
        description = st.text_area("Description")
        if st.form_submit_button("Add", type="primary"):
            dispatch_form(store, {
                "type": "AddItem",
                "section": "projects",
                "item": {
                    "name": name,
                    "role": role or None,
                    "startDate": start or None,
                    "endDate": end or None,
                    "techStack": split_commas(tech),
                    "liveDemoLink": demo or None,
                    "githubLink": github or None,
                    "description": description or None,
                },
            })


def languages_step(store: CVStore) -> None:
    entry_list(store, "languages", lambda l: f"**{l.language}**: {l.proficiency.value}")
    with st.form("add-language", clear_on_submit=True):
        language = st.text_input("Language *")
        proficiency = st.selectbox("Proficiency", [p.value for p in LanguageProficiency])
        if st.form_submit_button("Add", type="primary"):
            dispatch_form(store, {
                "type": "AddItem",
                "section": "languages",
                "item": {"language": language, "proficiency": proficiency},
            })


def customize_step(store: CVStore) -> None:
    custom = store.state.customization
    templates = list_templates()
    template_ids = [t.id for t in templates]
    with st.form("customize"):
        template = st.selectbox(
            "Template",
            template_ids,
            index=template_ids.index(custom.template) if custom.template in template_ids else 0,
            format_func=lambda tid: next(t.name for t in templates if t.id == tid),
        )
        cols = st.columns(2)
        primary = cols[0].color_picker("Primary colour", value=custom.primaryColor)
        secondary = cols[1].color_picker("Secondary colour", value=custom.secondaryColor or custom.primaryColor)
        fonts = list(FONT_STACKS)
        font = st.selectbox("Font", fonts, index=fonts.index(custom.fontFamily) if custom.fontFamily in fonts else 0)
        spacing = st.select_slider("Spacing", ["compact", "standard", "relaxed"], value=custom.spacing or "standard")
        order = st.multiselect(
            "Section order",
            list(SECTION_IDS),
            default=resolve_section_order(custom.sectionOrder),
            help="Sections left out are appended in the default order.",
        )
        if st.form_submit_button("Apply", type="primary"):
            store.dispatch(UpdateCustomization(data={
                "template": template,
                "primaryColor": primary,
                "secondaryColor": secondary,
                "fontFamily": font,
                "spacing": spacing,
            }))
            store.dispatch(ReorderSections(order=order))
            st.success("Applied")


STEP_VIEWS = {
    "Personal Info": personal_info_step,
    "Summary": summary_step,
    "Work Experience": lambda store: engagement_step(store, "workExperience"),
    "Internships": lambda store: engagement_step(store, "internships"),
    "Education": education_step,
    "Skills": skills_step,
    "Certifications": certifications_step,
    "Projects": projects_step,
    "Languages": languages_step,
    "Customize": customize_step,
}


def export_panel(store: CVStore) -> None:
    """Export buttons driven by the export job's state."""
    job: ExportJob = st.session_state.export_job
    cols = st.columns(2)
    fmt = None
    if cols[0].button("Export PDF", use_container_width=True, type="primary"):
        fmt = ExportFormat.PDF
    if cols[1].button("Export Markdown", use_container_width=True):
        fmt = ExportFormat.MARKDOWN

    if fmt is not None:
        if job.status != ExportStatus.IDLE:
            job.reset()
        with st.spinner("⏳ Rendering..."):
            try:
                asyncio.run(job.run(store.state, fmt))
            except ExportError:
                # shown below from the job state
                pass

    if job.status == ExportStatus.SUCCESS:
        result = job.result
        st.download_button(
            label=f"📥 Download {result.filename}",
            data=result.content,
            file_name=result.filename,
            mime=result.media_type,
            use_container_width=True,
        )
        if result.media_type == "application/pdf":
            encoded = base64.b64encode(result.content).decode("utf-8")
            st.markdown(
                f'<iframe src="data:application/pdf;base64,{encoded}" width="100%" height="600px"></iframe>',
                unsafe_allow_html=True,
            )
    elif job.status == ExportStatus.FAILURE:
        st.error(f"❌ {job.error}")
        if st.button("Retry"):
            job.reset()
            st.rerun()


def remote_panel(store: CVStore) -> None:
    """Save the CV to the remote API under this client's anonymous id."""
    client = CVApiClient()
    user_id = store.storage.get_or_create_user_id()
    cv_id = st.session_state.get("remote_cv_id")
    if st.button("☁️ Save online", use_container_width=True):
        try:
            if cv_id:
                asyncio.run(client.update_cv(cv_id, store.state, store.state.customization.template))
            else:
                st.session_state.remote_cv_id = asyncio.run(
                    client.create_cv(user_id, store.state, store.state.customization.template)
                )
            st.success("Saved online")
        except RemoteAPIError as e:
            st.error(e.message)


def main():
    """Main Streamlit app."""
    store = get_store()

    with st.sidebar:
        st.header("📄 CV Builder")
        st.progress(store.progress_percentage / 100, text=f"{store.progress_percentage}% complete")
        step = st.radio("Section", STEPS)
        st.divider()
        remote_panel(store)
        if st.button("Start over", use_container_width=True):
            store.reset()
            st.session_state.pop("remote_cv_id", None)
            st.rerun()

    form_col, preview_col = st.columns([1, 1])
    with form_col:
        st.header(step)
        STEP_VIEWS[step](store)
    with preview_col:
        st.header("Preview")
        components.html(CVGenerator().generate_preview_html(store.state), height=900, scrolling=True)
        export_panel(store)


if __name__ == "__main__":
    main()
