"""Utility modules for project configuration and experiment tracking.

Submodules:
- config: Repository root and YAML project configuration
- mlflow: MLflow run orchestration and metric logging

Import examples:
    from utils.config import get_repo_root, load_project_config
    from utils import mlflow as mlflow_utils
"""

import warnings

# Suppress MLflow FutureWarning about filesystem backend deprecation
warnings.filterwarnings("ignore", category=FutureWarning, module="mlflow")

from . import config  # noqa: E402

# Re-export common config functions for convenience
from .config import get_repo_root  # noqa: E402

__all__ = [
    "config",
    "get_repo_root",
]

