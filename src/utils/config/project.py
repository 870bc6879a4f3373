"""Project configuration utilities.

Provides functions for finding the repository root and loading
project configuration from YAML files.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG = {
    "mlflow": {
        "tracking_dir": "mlruns",
        "experiment_name": "floyd-warshall",
    },
}


def get_repo_root() -> Path:
    """Find the project root directory (where pyproject.toml is).

    Returns
    -------
    Path
        Path to repository root.
    """
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    # Fallback: assume src/utils/config structure
    return current.parent.parent.parent.parent


def load_project_config(
    config_name: str = "project_config.yaml", root: Optional[Path] = None
) -> Dict[str, Any]:
    """Load project configuration from YAML.

    Parameters
    ----------
    config_name : str
        Name of the config file in repo root.
    root : Path, optional
        Directory to look in instead of the repo root.

    Returns
    -------
    dict
        Parsed configuration combined with defaults (sections merged per key).
    """
    config_path = (root or get_repo_root()) / config_name

    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}

    if config_path.exists():
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        for section, values in user_config.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values

    return config


def get_config_section(section: str, root: Optional[Path] = None) -> Dict[str, Any]:
    """Get a specific section from project config.

    Parameters
    ----------
    section : str
        Section name (e.g., "simulation", "mlflow").

    Returns
    -------
    dict
        Section contents, or empty dict if not found.
    """
    config = load_project_config(root=root)
    return config.get(section, {})
