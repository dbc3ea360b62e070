from __future__ import annotations

from pathlib import Path

import pytest

from remote_forensics.core import config
from remote_forensics.core.errors import ConfigurationError


def test_merge_dicts_nested_precedence() -> None:
    base = {"tools": {"psexec": "PsExec64.exe", "plink": "plink.exe"}, "log_level": "INFO"}
    override = {"tools": {"plink": "/opt/putty/plink"}, "log_level": "DEBUG", "extra": True}

    result = config.merge_dicts(base, override)

    assert result["tools"] == {"psexec": "PsExec64.exe", "plink": "/opt/putty/plink"}
    assert result["log_level"] == "DEBUG"
    assert result["extra"] is True


def test_coerce_env_value() -> None:
    assert config._coerce_env_value("TRUE") is True
    assert config._coerce_env_value("false") is False
    assert config._coerce_env_value("42") == 42
    assert config._coerce_env_value("not-a-number") == "not-a-number"


def test_load_env_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("REMOTE_FORENSICS_LOG_LEVEL", "debug")
    monkeypatch.setenv("REMOTE_FORENSICS_NLA", "TRUE")
    monkeypatch.setenv("REMOTE_FORENSICS_CONFIG_DIR", str(tmp_path))

    env_config = config._load_env_config()

    assert env_config == {"log_level": "debug", "nla": True}


def test_load_yaml_missing_file_is_empty(tmp_path: Path) -> None:
    assert config.load_yaml(tmp_path / "absent.yaml") == {}


def test_load_yaml_raises_for_non_mapping(tmp_path: Path) -> None:
    target = tmp_path / "framework.yaml"
    target.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(TypeError):
        config.load_yaml(target)


def test_defaults_without_configuration() -> None:
    cfg = config.get_config()

    assert cfg.wait_time == 15
    assert cfg.memory_timeout == 900
    assert cfg.store_directory == Path("evidence")
    assert cfg.tool("psexec") == "PsExec64.exe"
    assert cfg.catalog_path is None
    assert cfg.nla is False


def test_precedence_overrides_env_yaml(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "framework.yaml").write_text(
        "wait_time: 5\n"
        "wmi_output_wait: 2\n"
        "memory_tool: yaml-imager.exe\n"
        "tools:\n"
        "  plink: /opt/putty/plink\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("REMOTE_FORENSICS_WAIT_TIME", "30")
    monkeypatch.setenv("REMOTE_FORENSICS_MEMORY_TOOL", "env-imager.exe")

    cfg = config.get_config(
        config_root=tmp_path,
        overrides={"memory_tool": "cli-imager.exe", "wait_time": None},
    )

    assert cfg.memory_tool == "cli-imager.exe"
    assert cfg.wait_time == 30
    assert cfg.memory_timeout == 1800
    assert cfg.wmi_output_wait == 2.0
    assert cfg.tool("plink") == "/opt/putty/plink"
    assert cfg.tool("pscp") == "pscp.exe"


def test_config_root_may_be_a_file(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("remote_temp_directory: 'D:\\Temp'\nnla: true\n", encoding="utf-8")

    cfg = config.get_config(config_root=config_file)

    assert cfg.remote_temp_directory == "D:\\Temp"
    assert cfg.nla is True


def test_config_dir_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "framework.yaml").write_text("log_level: WARNING\n", encoding="utf-8")
    monkeypatch.setenv("REMOTE_FORENSICS_CONFIG_DIR", str(tmp_path))

    assert config.get_config().log_level == "WARNING"


def test_unknown_keys_are_kept_as_extra(tmp_path: Path) -> None:
    (tmp_path / "framework.yaml").write_text("case_number: 17\n", encoding="utf-8")

    cfg = config.get_config(config_root=tmp_path)

    assert cfg.extra == {"case_number": 17}
    assert cfg.as_dict()["case_number"] == 17


@pytest.mark.parametrize(
    "content",
    [
        "tools: [plink]\n",
        "wait_time: soon\n",
        "wait_time: 0\n",
        "- not\n- a mapping\n",
    ],
)
def test_invalid_configuration(tmp_path: Path, content: str) -> None:
    (tmp_path / "framework.yaml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        config.get_config(config_root=tmp_path)
