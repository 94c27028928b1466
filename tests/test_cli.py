"""CLI integration tests using Click's test runner."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from envhide.cli import cli

CONTENT = '# database\nexport DB_PASS="secret123"\nTOKEN=abc\nEMPTY=\nPORT=5432\n'


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env_file(tmp_path):
    f = tmp_path / ".env"
    f.write_text(CONTENT)
    return f


@pytest.fixture
def no_config(tmp_path):
    return str(tmp_path / "missing.toml")


# ---------------------------------------------------------------------------
# view
# ---------------------------------------------------------------------------


class TestViewCommand:
    def test_view_masks_values(self, runner, env_file, no_config):
        result = runner.invoke(cli, ["view", str(env_file), "--config", no_config])
        assert result.exit_code == 0
        assert result.output == (
            '# database\nexport DB_PASS="*********"\nTOKEN=********\nEMPTY=\nPORT=********\n'
        )

    def test_view_never_writes(self, runner, env_file, no_config):
        runner.invoke(cli, ["view", str(env_file), "--config", no_config])
        assert env_file.read_text() == CONTENT

    def test_view_reveal(self, runner, env_file, no_config):
        result = runner.invoke(cli, ["view", str(env_file), "--config", no_config, "--reveal"])
        assert result.exit_code == 0
        assert 'export DB_PASS="secret123"' in result.output

    def test_view_custom_mask(self, runner, env_file, no_config):
        result = runner.invoke(
            cli,
            ["view", str(env_file), "--config", no_config, "--hide-char", "#", "--min-length", "2"],
        )
        assert result.exit_code == 0
        assert "TOKEN=###\n" in result.output
        assert "PORT=####\n" in result.output

    def test_view_json(self, runner, env_file, no_config):
        result = runner.invoke(
            cli, ["view", str(env_file), "--config", no_config, "--format", "json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["hidden"] is True
        assert data["summary"]["assignment"] == 4
        assert data["summary"]["comment"] == 1
        db_pass = data["lines"][1]
        assert db_pass["key"] == "DB_PASS"
        assert db_pass["value"] == "*********"
        assert db_pass["quote"] == '"'
        assert db_pass["export"] is True

    def test_view_table(self, runner, env_file, no_config):
        result = runner.invoke(
            cli, ["view", str(env_file), "--config", no_config, "--format", "table"]
        )
        assert result.exit_code == 0
        assert "DB_PASS" in result.output
        assert "secret123" not in result.output

    def test_view_rejects_other_files(self, runner, tmp_path, no_config):
        f = tmp_path / "settings.txt"
        f.write_text("KEY=value\n")
        result = runner.invoke(cli, ["view", str(f), "--config", no_config])
        assert result.exit_code == 1
        assert "KEY=value" not in result.output

    def test_view_force(self, runner, tmp_path, no_config):
        f = tmp_path / "settings.txt"
        f.write_text("KEY=value\n")
        result = runner.invoke(cli, ["view", str(f), "--config", no_config, "--force"])
        assert result.exit_code == 0
        assert result.output == "KEY=********\n"

    def test_view_uses_config_file(self, runner, env_file, tmp_path):
        cfg = tmp_path / ".envhide.toml"
        cfg.write_text('[envhide]\nhide_char = "x"\nmin_hide_length = 0\n')
        result = runner.invoke(cli, ["view", str(env_file), "--config", str(cfg)])
        assert result.exit_code == 0
        assert "TOKEN=xxx\n" in result.output

    def test_invalid_config_aborts(self, runner, env_file, no_config):
        result = runner.invoke(
            cli, ["view", str(env_file), "--config", no_config, "--hide-char", "ab"]
        )
        assert result.exit_code == 1

    def test_missing_file(self, runner, tmp_path, no_config):
        result = runner.invoke(cli, ["view", str(tmp_path / "nope.env"), "--config", no_config])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# check / keymaps
# ---------------------------------------------------------------------------


class TestCheckCommand:
    def test_check_env_file(self, runner, env_file, no_config):
        result = runner.invoke(cli, ["check", str(env_file), "--config", no_config])
        assert result.exit_code == 0
        assert "3 of 4 assignment(s) would be masked" in result.output

    def test_check_other_file(self, runner, tmp_path, no_config):
        f = tmp_path / "notes.md"
        f.write_text("hello\n")
        result = runner.invoke(cli, ["check", str(f), "--config", no_config])
        assert result.exit_code == 1


class TestKeymapsCommand:
    def test_lists_bindings(self, runner, no_config):
        result = runner.invoke(cli, ["keymaps", "--config", no_config])
        assert result.exit_code == 0
        assert "<leader>et" in result.output
        assert "EnvToggle" in result.output

    def test_disabled(self, runner, tmp_path):
        cfg = tmp_path / ".envhide.toml"
        cfg.write_text("[envhide]\nenable_keymaps = false\n")
        result = runner.invoke(cli, ["keymaps", "--config", str(cfg)])
        assert result.exit_code == 0
        assert "EnvToggle" not in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
