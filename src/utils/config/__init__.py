"""Configuration utilities.

This package contains configuration utilities.
"""

from .project import get_repo_root, load_project_config, get_config_section, DEFAULT_CONFIG

__all__ = ["get_repo_root", "load_project_config", "get_config_section", "DEFAULT_CONFIG"]
