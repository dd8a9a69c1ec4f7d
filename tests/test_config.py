import json

import pytest

from general_ledger.config import CONFIG_ENV_VAR, DEFAULT_CONFIG, load_config
from general_ledger.utils import LedgerError


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.json"))
    assert config == DEFAULT_CONFIG
    config["bank_notifier"]["enabled"] = False
    assert DEFAULT_CONFIG["bank_notifier"]["enabled"] is True


def test_file_overrides_defaults(tmp_path):
    path = tmp_path / "ledger_config.json"
    path.write_text(
        json.dumps({"balance_tolerance": "0.05", "bank_notifier": {"max_attempts": 0}}),
        encoding="utf-8",
    )
    config = load_config(str(path))
    assert config["balance_tolerance"] == 0.05
    assert config["bank_notifier"] == {"enabled": True, "max_attempts": 1}
    assert config["reversal_prefix"] == "CANC"


def test_env_var_points_at_config(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    path.write_text(json.dumps({"default_entry_type": "GJ"}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config()["default_entry_type"] == "GJ"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_invalid_config(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(LedgerError) as exc:
        load_config(str(path))
    assert exc.value.code == "CONFIG_INVALID"
