"""Tests for config models: defaults and sparse overrides."""

import pytest
from pydantic import ValidationError

from chartfile.config.models import ChartfileConfig, SaveConfig, UpgradeConfig


class TestChartfileConfig:
    def test_full_defaults(self) -> None:
        cfg = ChartfileConfig()
        assert cfg.save.pretty_print is True
        assert cfg.save.indent == 2
        assert cfg.save.default_chart_name == "Untitled"
        assert cfg.upgrade.backup is True
        assert cfg.upgrade.backup_suffix == ".bak"

    def test_sparse_section(self) -> None:
        cfg = ChartfileConfig.model_validate({"upgrade": {"backup": False}})
        assert cfg.upgrade.backup is False
        assert cfg.upgrade.backup_suffix == ".bak"
        assert cfg.save == SaveConfig()

    def test_frozen(self) -> None:
        cfg = ChartfileConfig()
        with pytest.raises(ValidationError):
            cfg.save = SaveConfig(indent=4)  # type: ignore[misc]


class TestSectionBounds:
    @pytest.mark.parametrize("indent", [-1, 9])
    def test_indent_range(self, indent: int) -> None:
        with pytest.raises(ValidationError):
            SaveConfig(indent=indent)

    def test_empty_backup_suffix(self) -> None:
        with pytest.raises(ValidationError):
            UpgradeConfig(backup_suffix="")
