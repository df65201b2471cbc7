"""
Settings for form tags, loaded from pyproject.toml [tool.formtags].

Usage:
    from formtags import config

    config.configure(Path("."))
    config.configure(error_class="is-invalid")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import tomlkit

logger = logging.getLogger(__name__)

TOOL_TABLE = "formtags"


@dataclass(frozen=True)
class TagSettings:
    """Loaded from pyproject.toml [tool.formtags]"""

    # request.state attribute holding the per-request value stack
    value_stack_attribute: str = "formtags_value_stack"
    # class used by tags that do not declare their own error_class
    error_class: str | None = None

    @classmethod
    def load(cls, project_root: Path) -> TagSettings:
        pyproject = project_root / "pyproject.toml"
        if not pyproject.exists():
            return cls()

        doc = tomlkit.parse(pyproject.read_text())
        tool_config = doc.get("tool", {}).get(TOOL_TABLE, {})
        error_class = tool_config.get("error_class")

        return cls(
            value_stack_attribute=str(
                tool_config.get("value_stack_attribute", cls.value_stack_attribute)
            ),
            error_class=str(error_class) if error_class is not None else None,
        )


settings = TagSettings()


def configure(project_root: Path | None = None, **overrides: Any) -> TagSettings:
    """Replace the active settings, optionally loading them from a project first."""
    global settings

    base = TagSettings.load(project_root) if project_root is not None else settings
    settings = replace(base, **overrides)
    logger.info(f"formtags configured: {settings}")
    return settings
