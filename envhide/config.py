"""Load envhide configuration from .envhide.toml and environment variables."""

from __future__ import annotations

import copy
import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .codec import DEFAULT_HIDE_CHAR, DEFAULT_MIN_HIDE_LENGTH

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".envhide.toml"
DEFAULT_PATTERNS = ("*.env", ".env.*", "*.env.*")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Keymaps:
    toggle: str = "<leader>et"
    hide: str = "<leader>eh"
    show: str = "<leader>es"


@dataclass
class Config:
    """Resolved envhide configuration."""

    auto_hide: bool = True
    patterns: list[str] = field(default_factory=lambda: list(DEFAULT_PATTERNS))
    hide_char: str = DEFAULT_HIDE_CHAR
    min_hide_length: int = DEFAULT_MIN_HIDE_LENGTH
    enable_keymaps: bool = True
    keymaps: Keymaps = field(default_factory=Keymaps)


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def merge_config(base: Config, user: Optional[dict[str, Any]] = None) -> Config:
    """Return a copy of *base* with *user* values deep-merged over it.

    Unknown keys are logged and ignored.  ``keymaps`` may be given
    partially; missing actions keep their current bindings.
    """
    cfg = copy.deepcopy(base)
    if not user:
        return cfg

    known = {f.name for f in fields(Config)}
    for key, value in user.items():
        if key not in known:
            logger.warning("Ignoring unknown config option: %r", key)
            continue
        if key == "keymaps":
            if isinstance(value, Keymaps):
                cfg.keymaps = copy.deepcopy(value)
                continue
            for action, keys in (value or {}).items():
                if action not in ("toggle", "hide", "show"):
                    logger.warning("Ignoring unknown keymap action: %r", action)
                    continue
                setattr(cfg.keymaps, action, keys)
        elif key == "patterns":
            cfg.patterns = [value] if isinstance(value, str) else list(value)
        else:
            setattr(cfg, key, value)
    return cfg


def load_config(
    config_path: Optional[str | Path] = None,
    **overrides: Any,
) -> Config:
    """Load configuration in priority order:

    1. Keyword overrides (CLI flags; ``None`` values are skipped)
    2. Environment variables (``ENVHIDE_*``)
    3. ``.envhide.toml`` file (``[envhide]`` table)
    4. Built-in defaults
    """
    cfg = Config()

    # --- Load from TOML file ---
    path = Path(config_path or DEFAULT_CONFIG_FILE)
    if path.exists():
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
        cfg = merge_config(cfg, raw.get("envhide", {}))

    # --- Environment variable overrides ---
    env: dict[str, Any] = {}
    if "ENVHIDE_AUTO_HIDE" in os.environ:
        env["auto_hide"] = _parse_bool("ENVHIDE_AUTO_HIDE", os.environ["ENVHIDE_AUTO_HIDE"])
    if "ENVHIDE_HIDE_CHAR" in os.environ:
        env["hide_char"] = os.environ["ENVHIDE_HIDE_CHAR"]
    if "ENVHIDE_MIN_HIDE_LENGTH" in os.environ:
        raw_len = os.environ["ENVHIDE_MIN_HIDE_LENGTH"]
        try:
            env["min_hide_length"] = int(raw_len)
        except ValueError:
            raise ValueError(
                f"ENVHIDE_MIN_HIDE_LENGTH must be an integer, got {raw_len!r}"
            ) from None
    if "ENVHIDE_PATTERNS" in os.environ:
        env["patterns"] = [
            p.strip() for p in os.environ["ENVHIDE_PATTERNS"].split(",") if p.strip()
        ]
    cfg = merge_config(cfg, env)

    return merge_config(cfg, {k: v for k, v in overrides.items() if v is not None})


def validate_config(cfg: Config) -> list[str]:
    """Return a list of validation error strings (empty = valid)."""
    errors: list[str] = []

    if not isinstance(cfg.hide_char, str) or len(cfg.hide_char) != 1:
        errors.append(f"hide_char must be a single character, got {cfg.hide_char!r}")

    if (
        not isinstance(cfg.min_hide_length, int)
        or isinstance(cfg.min_hide_length, bool)
        or cfg.min_hide_length < 0
    ):
        errors.append(
            f"min_hide_length must be a non-negative integer, got {cfg.min_hide_length!r}"
        )

    if not cfg.patterns:
        errors.append("patterns must contain at least one glob")
    elif any(not isinstance(p, str) or not p for p in cfg.patterns):
        errors.append("patterns must be non-empty strings")

    for name in ("auto_hide", "enable_keymaps"):
        if not isinstance(getattr(cfg, name), bool):
            errors.append(f"{name} must be true or false")

    if cfg.enable_keymaps:
        bindings = {
            "toggle": cfg.keymaps.toggle,
            "hide": cfg.keymaps.hide,
            "show": cfg.keymaps.show,
        }
        empty = sorted(action for action, keys in bindings.items() if not keys)
        if empty:
            errors.append(f"keymaps must not be empty: {', '.join(empty)}")
        elif len(set(bindings.values())) != len(bindings):
            errors.append("keymaps for toggle, hide and show must be distinct")

    return errors
