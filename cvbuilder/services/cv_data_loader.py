"""Service for loading CV documents from YAML or JSON files."""

import json
import yaml
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from cvbuilder.models.cv_models import CVDocument


class CVDataLoader:
    """Service to load and validate CV documents from YAML/JSON files."""

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the CV data loader.

        Args:
            data_dir: Directory relative paths are resolved against. Defaults to cvbuilder/data/
        """
        if data_dir is None:
            # Get the package directory (parent of services)
            package_dir = Path(__file__).parent.parent
            data_dir = package_dir / "data"
        self.data_dir = data_dir

    def load(self, path: Path) -> CVDocument:
        """
        Load a CV document.

        Args:
            path: File path; relative paths are looked up in data_dir.
                ``.json`` files are parsed as JSON, anything else as YAML.

        Returns:
            CVDocument: Validated CV document

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file cannot be parsed or the data is invalid
        """
        filepath = Path(path)
        if not filepath.is_absolute():
            filepath = self.data_dir / filepath

        # Check if file exists
        if not filepath.exists():
            raise FileNotFoundError(
                f"CV data file not found: {filepath}. "
                f"Expected file at: {filepath.absolute()}"
            )

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                if filepath.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid format in {filepath}: {e}")
        except OSError as e:
            raise ValueError(f"Error reading file {filepath}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Invalid CV data structure in {filepath}: expected a mapping")

        # Validate and parse with Pydantic
        try:
            return CVDocument.model_validate(data)
        except ValidationError as e:
            raise ValueError(
                f"Invalid CV data structure in {filepath}. "
                f"Validation error: {e}"
            )

    def load_sample(self) -> CVDocument:
        """Load the bundled sample CV used for template previews."""
        return self.load(Path("sample_cv.yaml"))


# Singleton instance
_data_loader: Optional[CVDataLoader] = None


def get_data_loader(data_dir: Optional[Path] = None) -> CVDataLoader:
    """
    Get or create the CV data loader singleton.

    Args:
        data_dir: Optional directory for data files

    Returns:
        CVDataLoader: The data loader instance
    """
    global _data_loader
    if _data_loader is None:
        _data_loader = CVDataLoader(data_dir)
    return _data_loader
