"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, chartfile.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
Format limits such as the maximum file size are constants of the file
format, not settings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- chartfile.toml sections ---


class SaveConfig(BaseModel):
    """[save] section."""

    model_config = {"frozen": True}

    pretty_print: bool = True
    indent: int = Field(default=2, ge=0, le=8)
    default_chart_name: str = "Untitled"


class UpgradeConfig(BaseModel):
    """[upgrade] section."""

    model_config = {"frozen": True}

    backup: bool = True
    backup_suffix: str = Field(default=".bak", min_length=1)


class ChartfileConfig(BaseModel):
    """Root config model: all sections with defaults."""

    model_config = {"frozen": True}

    save: SaveConfig = Field(default_factory=SaveConfig)
    upgrade: UpgradeConfig = Field(default_factory=UpgradeConfig)
