"""Tests for the config commands."""

import json
from pathlib import Path

import pytest

from namewatch.cli.commands.config import init, show, validate


class TestInit:
    def test_creates_file(self, tmp_path: Path):
        path = tmp_path / "namewatch.yaml"

        init(path)

        assert "NameOwnerChanged" in path.read_text()

    def test_refuses_to_overwrite(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        path = tmp_path / "namewatch.yaml"
        path.write_text("keep me")

        with pytest.raises(SystemExit):
            init(path)

        assert path.read_text() == "keep me"
        assert "exists" in capsys.readouterr().err

    def test_refuses_directory(self, tmp_path: Path):
        with pytest.raises(SystemExit):
            init(tmp_path)


class TestValidate:
    def test_template_is_valid(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        path = tmp_path / "namewatch.yaml"
        init(path)

        capsys.readouterr()

        validate(path)

        out = capsys.readouterr().out
        assert "valid" in out
        assert "invalid" not in out

    def test_invalid_file(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        path = tmp_path / "namewatch.yaml"
        path.write_text("watch:\n  interface: [1, 2]\n")

        with pytest.raises(SystemExit):
            validate(path)

        assert "invalid" in capsys.readouterr().err

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        with pytest.raises(SystemExit):
            validate(tmp_path / "missing.yaml")

        assert "found" in capsys.readouterr().err


class TestShow:
    def test_prints_json(self, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("NAMEWATCH_CONFIG_FILE", raising=False)
        monkeypatch.delenv("NAMEWATCH_WATCH__INTERFACE", raising=False)

        show()

        data = json.loads(capsys.readouterr().out)
        assert data["watch"]["interface"] == "org.freedesktop.DBus"
