"""
Development shell projection and activation scripts.
"""

from devflake.shell.projector import (
    EnvironmentSpec,
    make_library_path,
    project_environment,
)
from devflake.shell.renderer import ActivationRenderer, RendererError

__all__ = [
    "EnvironmentSpec",
    "make_library_path",
    "project_environment",
    "ActivationRenderer",
    "RendererError",
]
