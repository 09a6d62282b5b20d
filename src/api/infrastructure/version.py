"""Version management for the Booking Platform API.

Reads the version from installed package metadata, falling back to the
repository's pyproject.toml when running from a source checkout.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_DISTRIBUTION = "booking-platform-api"


def get_version() -> str:
    """Get the application version.

    Returns:
        Version string (e.g., "0.1.0"), or "0.0.0" when neither the package
        metadata nor pyproject.toml is available.
    """
    try:
        return version(_DISTRIBUTION)
    except PackageNotFoundError:
        # src/api/infrastructure/version.py -> repository root
        pyproject_path = Path(__file__).resolve().parents[3] / "pyproject.toml"
        if not pyproject_path.exists():
            return "0.0.0"

        with open(pyproject_path, "rb") as f:
            pyproject_data = tomllib.load(f)

        return pyproject_data["project"]["version"]


__version__ = get_version()
