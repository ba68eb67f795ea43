from __future__ import annotations
from pathlib import Path
import pytest
from floorimport.config.loader import ConfigError, ImportSettings, load_config


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg == ImportSettings(
        snapshot_directory="./data",
        unparseable_numbers="warn",
        error_log_directory="./logs",
        progress="off",
    )


def test_load_config_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "import.yml"
    p.write_text("snapshot_directory: ./snapshots\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.unparseable_numbers == "warn"
    assert cfg.error_log_directory == "./logs"
    assert cfg.progress == "auto"


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "missing.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "import.yml"
    p.write_text("snapshot_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


@pytest.mark.parametrize(
    "body",
    [
        "unparseable_numbers: warn\n",  # required key missing
        "snapshot_directory: ./data\nunparseable_numbers: strict\n",
        "snapshot_directory: ./data\nprogress: always\n",
        "snapshot_directory: ./data\nunknown_key: 1\n",
        "- just\n- a list\n",
    ],
)
def test_load_config_validation_errors(temp_workdir: Path, body: str):
    p = temp_workdir / "config" / "import.yml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)
