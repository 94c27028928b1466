"""Tests for envhide.config: loading, merging and validating settings."""

from __future__ import annotations

import pytest

from envhide.config import Config, Keymaps, load_config, merge_config, validate_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "ENVHIDE_AUTO_HIDE",
        "ENVHIDE_HIDE_CHAR",
        "ENVHIDE_MIN_HIDE_LENGTH",
        "ENVHIDE_PATTERNS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    cfg = load_config(tmp_path / "missing.toml")
    assert cfg.auto_hide is True
    assert cfg.patterns == ["*.env", ".env.*", "*.env.*"]
    assert cfg.hide_char == "*"
    assert cfg.min_hide_length == 8
    assert cfg.enable_keymaps is True
    assert cfg.keymaps == Keymaps("<leader>et", "<leader>eh", "<leader>es")
    assert validate_config(cfg) == []


def test_load_from_toml(tmp_path):
    f = tmp_path / ".envhide.toml"
    f.write_text(
        "[envhide]\n"
        "auto_hide = false\n"
        'hide_char = "#"\n'
        "min_hide_length = 4\n"
        'patterns = ["*.secrets"]\n\n'
        "[envhide.keymaps]\n"
        'toggle = "<F5>"\n'
    )
    cfg = load_config(f)
    assert cfg.auto_hide is False
    assert cfg.hide_char == "#"
    assert cfg.min_hide_length == 4
    assert cfg.patterns == ["*.secrets"]
    assert cfg.keymaps.toggle == "<F5>"
    assert cfg.keymaps.hide == "<leader>eh"


def test_env_overrides_toml(tmp_path, monkeypatch):
    f = tmp_path / ".envhide.toml"
    f.write_text('[envhide]\nhide_char = "#"\n')
    monkeypatch.setenv("ENVHIDE_HIDE_CHAR", "x")
    monkeypatch.setenv("ENVHIDE_MIN_HIDE_LENGTH", "12")
    monkeypatch.setenv("ENVHIDE_AUTO_HIDE", "off")
    monkeypatch.setenv("ENVHIDE_PATTERNS", "*.env, secrets.*")
    cfg = load_config(f)
    assert cfg.hide_char == "x"
    assert cfg.min_hide_length == 12
    assert cfg.auto_hide is False
    assert cfg.patterns == ["*.env", "secrets.*"]


def test_keyword_overrides_win(tmp_path, monkeypatch):
    monkeypatch.setenv("ENVHIDE_HIDE_CHAR", "x")
    cfg = load_config(tmp_path / "missing.toml", hide_char="-", min_hide_length=None)
    assert cfg.hide_char == "-"
    assert cfg.min_hide_length == 8


def test_bad_env_integer(tmp_path, monkeypatch):
    monkeypatch.setenv("ENVHIDE_MIN_HIDE_LENGTH", "lots")
    with pytest.raises(ValueError, match="ENVHIDE_MIN_HIDE_LENGTH"):
        load_config(tmp_path / "missing.toml")


def test_bad_env_boolean(tmp_path, monkeypatch):
    monkeypatch.setenv("ENVHIDE_AUTO_HIDE", "maybe")
    with pytest.raises(ValueError, match="ENVHIDE_AUTO_HIDE"):
        load_config(tmp_path / "missing.toml")


# ---------------------------------------------------------------------------
# merge_config
# ---------------------------------------------------------------------------


def test_merge_does_not_mutate_base():
    base = Config()
    merged = merge_config(base, {"keymaps": {"hide": "H"}, "patterns": ["a.*"]})
    assert merged.keymaps.hide == "H"
    assert base.keymaps.hide == "<leader>eh"
    assert base.patterns == ["*.env", ".env.*", "*.env.*"]


def test_merge_ignores_unknown_keys(caplog):
    merged = merge_config(Config(), {"colour": "red", "keymaps": {"explode": "X"}})
    assert merged == Config()
    assert "colour" in caplog.text
    assert "explode" in caplog.text


def test_merge_none_returns_copy():
    base = Config()
    merged = merge_config(base)
    assert merged == base
    assert merged is not base


# ---------------------------------------------------------------------------
# validate_config
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"hide_char": ""}, "hide_char"),
        ({"hide_char": "**"}, "hide_char"),
        ({"min_hide_length": -1}, "min_hide_length"),
        ({"min_hide_length": "8"}, "min_hide_length"),
        ({"patterns": []}, "patterns"),
        ({"patterns": ["*.env", ""]}, "patterns"),
        ({"auto_hide": "yes"}, "auto_hide"),
        ({"keymaps": {"hide": ""}}, "keymaps"),
        ({"keymaps": {"hide": "<leader>et"}}, "distinct"),
    ],
)
def test_validation_errors(overrides, fragment):
    cfg = merge_config(Config(), overrides)
    errors = validate_config(cfg)
    assert any(fragment in e for e in errors), errors


def test_zero_min_length_is_valid():
    assert validate_config(Config(min_hide_length=0)) == []


def test_keymaps_not_checked_when_disabled():
    cfg = merge_config(Config(), {"enable_keymaps": False, "keymaps": {"hide": ""}})
    assert validate_config(cfg) == []
