"""Service for generating CV HTML from templates."""

from pathlib import Path
from typing import Dict, List, Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
from cvbuilder.models.cv_models import CVDocument, SECTION_FIELDS, resolve_section_order
from cvbuilder.utils.template_helpers import register_jinja_filters

# Fixed linearization used for print exports
EXPORT_SECTION_ORDER = [
    "personal",
    "summary",
    "work",
    "internships",
    "education",
    "skills",
    "certifications",
    "projects",
    "languages",
]

FONT_STACKS = {
    "inter": "Inter, Arial, sans-serif",
    "roboto": "Roboto, Arial, sans-serif",
    "georgia": "Georgia, 'Times New Roman', serif",
    "times": "'Times New Roman', Times, serif",
    "arial": "Arial, Helvetica, sans-serif",
}

SPACING_SCALE = {
    "compact": 0.75,
    "standard": 1.0,
    "relaxed": 1.3,
}

BORDER_STYLES = {
    "none": "none",
    "subtle": "1px solid #d1d5db",
    "bold": "2px solid var(--primary)",
}


class CVGenerator:
    """Service to generate CV HTML from Jinja2 templates."""

    def __init__(self, template_dir: Path = None):
        """
        Initialize the CV generator.

        Args:
            template_dir: Directory containing Jinja2 templates. Defaults to cvbuilder/templates/
        """
        if template_dir is None:
            # Get the package directory (parent of services)
            package_dir = Path(__file__).parent.parent
            template_dir = package_dir / "templates"

        self.template_dir = template_dir
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(['html', 'xml']),
            trim_blocks=True,
            lstrip_blocks=True,
        )

        # Register custom filters
        register_jinja_filters(self.env)

    @staticmethod
    def visible_sections(data: CVDocument, order: List[str]) -> List[str]:
        """
        Section ids from ``order`` that have something to show.

        Args:
            data: CV document
            order: Section ids in display order

        Returns:
            List[str]: Ids of non-empty sections, in order
        """
        visible = []
        for section_id in order:
            value = getattr(data, SECTION_FIELDS[section_id])
            if isinstance(value, str):
                value = value.strip()
            if section_id == "personal" or value:
                visible.append(section_id)
        return visible

    def _theme(self, data: CVDocument) -> Dict[str, str]:
        custom = data.customization
        spacing = SPACING_SCALE.get(custom.spacing or "standard", 1.0)
        return {
            "primary": custom.primaryColor,
            "secondary": custom.secondaryColor or custom.primaryColor,
            "font": FONT_STACKS.get((custom.fontFamily or "").lower(), FONT_STACKS["inter"]),
            "spacing": f"{spacing:g}",
            "border": BORDER_STYLES.get(custom.borderStyle or "subtle", BORDER_STYLES["subtle"]),
            "template": custom.template or "classic",
            "icon_colors": custom.iconColors,
        }

    def generate_html(self, data: CVDocument, section_order: Optional[List[str]] = None) -> str:
        """
        Generate CV HTML from template.

        Args:
            data: CV document
            section_order: Display order of section ids. Defaults to the
                fixed export order; unknown ids are ignored.

        Returns:
            str: Rendered HTML string
        """
        order = resolve_section_order(section_order or EXPORT_SECTION_ORDER)

        template = self.env.get_template("cv_template.html")
        return template.render(
            data=data,
            sections=self.visible_sections(data, order),
            theme=self._theme(data),
        )

    def generate_preview_html(self, data: CVDocument) -> str:
        """Render the live preview, following the user's own section order."""
        return self.generate_html(data, data.customization.sectionOrder)
