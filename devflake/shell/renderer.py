"""
Activation script renderer.

Renders an EnvironmentSpec as a script that, when sourced, puts the shell's
tools on PATH and exports its variables. Scripts are produced from Jinja2
templates shipped in ``devflake/shell/templates``.
"""

import logging
import re
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from devflake.core.exceptions import DevFlakeError
from devflake.shell.projector import EnvironmentSpec

logger = logging.getLogger(__name__)

_VARIABLE_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

TEMPLATES = {
    "sh": "activate.sh.j2",
    "ps1": "activate.ps1.j2",
}


class RendererError(DevFlakeError):
    """Raised when an activation script cannot be rendered."""

    pass


def _ps_quote(value: str) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def path_entries(spec: EnvironmentSpec) -> List[str]:
    """
    ``bin`` directories to prepend to PATH.

    nativeBuildInputs come first, then buildInputs; each directory is listed
    once, at its first occurrence.
    """
    entries: List[str] = []
    for package in (*spec.native_build_inputs, *spec.build_inputs):
        directory = f"{package.out}/bin"
        if directory not in entries:
            entries.append(directory)
    return entries


class ActivationRenderer:
    """
    Render activation scripts for environment specs.

    Attributes:
        template_dir: Directory holding the Jinja2 templates
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = (
            Path(template_dir) if template_dir else Path(__file__).parent / "templates"
        )
        self._jinja_env = self._init_jinja2()

    def _init_jinja2(self):
        """
        Initialize Jinja2 template environment.

        Raises:
            RendererError: If the template directory does not exist
        """
        from jinja2 import Environment, FileSystemLoader, StrictUndefined

        if not self.template_dir.exists():
            raise RendererError(f"Template directory not found: {self.template_dir}")

        jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        jinja_env.filters["sh_quote"] = lambda value: shlex.quote(str(value))
        jinja_env.filters["ps_quote"] = _ps_quote

        logger.debug(f"Jinja2 templates initialized from: {self.template_dir}")
        return jinja_env

    def render(self, spec: EnvironmentSpec, fmt: str = "sh") -> str:
        """
        Render the activation script of ``spec``.

        Args:
            spec: Environment to render
            fmt: Script format, 'sh' or 'ps1'

        Returns:
            Script text

        Raises:
            RendererError: If the format is unknown or a variable name is invalid
        """
        if fmt not in TEMPLATES:
            raise RendererError(
                f"Unknown script format: {fmt} (expected one of {sorted(TEMPLATES)})"
            )

        for key in spec.variables:
            if not _VARIABLE_NAME_RE.fullmatch(key):
                raise RendererError(f"Invalid environment variable name: {key!r}")

        template = self._jinja_env.get_template(TEMPLATES[fmt])
        context: Dict[str, object] = {
            "name": spec.name,
            "system": str(spec.platform),
            "path_entries": path_entries(spec),
            "path_separator": spec.platform.path_separator,
            "variables": sorted(spec.variables.items()),
        }
        return template.render(**context)
