import json
from pathlib import Path

import pytest

from kv_storage import __main__ as cli
from kv_storage._version import version


pytestmark = pytest.mark.usefixtures("reset_logging")


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip() == version


def test_show_settings_prints_resolved_settings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_file = tmp_path / "settings.yaml"
    config_file.write_text("service:\n  name: cli-test\n  log_level: ERROR\nstorage:\n  port: 6390\n", encoding="utf-8")

    cli.main(["--config", str(config_file), "--show-settings"])

    printed = json.loads(capsys.readouterr().out)
    assert printed["service"] == {"name": "cli-test", "log_level": "ERROR"}
    assert printed["storage"]["port"] == 6390


def test_ping_reports_key_presence(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "settings.yaml"
    config_file.write_text("service:\n  log_level: 'OFF'\n", encoding="utf-8")
    checked: list[str] = []

    async def fake_ping(settings: object, key: str) -> bool:
        checked.append(key)
        return True

    monkeypatch.setattr(cli, "_ping", fake_ping)
    cli.main(["--config", str(config_file), "--ping", "health"])

    assert checked == ["health"]
    assert capsys.readouterr().out.strip() == "true"
