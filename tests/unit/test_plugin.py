"""Tests for the pytest plugin in syndesis_qe/runner/plugin.py."""

from unittest.mock import MagicMock

import pytest

from syndesis_qe.runner.plugin import (
    UPGRADE_MARKER,
    pytest_collection_modifyitems,
    pytest_configure,
)


def _item(upgrade: bool) -> MagicMock:
    item = MagicMock()
    item.get_closest_marker.side_effect = lambda name: (
        MagicMock() if upgrade and name == UPGRADE_MARKER else None
    )
    return item


def test_registers_upgrade_marker() -> None:
    config = MagicMock()
    pytest_configure(config)
    name, value = config.addinivalue_line.call_args.args
    assert name == "markers"
    assert value.startswith(f"{UPGRADE_MARKER}:")


@pytest.mark.usefixtures("clean_env")
class TestUpgradeSkip:
    def test_product_build_skips_upgrade_scenarios(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SYNDESIS_VERSION", "1.8.0-redhat-00003")
        upgrade, regular = _item(upgrade=True), _item(upgrade=False)

        pytest_collection_modifyitems(MagicMock(), [upgrade, regular])

        upgrade.add_marker.assert_called_once()
        marker = upgrade.add_marker.call_args.args[0]
        assert marker.name == "skip"
        assert "1.8.0-redhat-00003" in marker.kwargs["reason"]
        regular.add_marker.assert_not_called()

    def test_community_build_runs_everything(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SYNDESIS_VERSION", "1.9-SNAPSHOT")
        upgrade = _item(upgrade=True)

        pytest_collection_modifyitems(MagicMock(), [upgrade])

        upgrade.add_marker.assert_not_called()
