"""Project configuration loader for codesync.

Settings are read from ``codesync.toml`` (top-level keys) or from the
``[tool.codesync]`` table of ``pyproject.toml``, whichever is found first
while walking up from the working directory.  Every setting is optional::

    case_style = "snake"            # camel, pascal, snake, screaming_snake, kebab, train
    acronyms = ["HTTP", "ID"]       # uppercased in camel/Pascal suggestions
    word_aware_acronyms = false     # only uppercase whole words
    strict_whitespace = true        # flag "( label )"
    label_pattern = "[a-z][a-z0-9-]*"
    default_count = 2               # count assumed when omitted
    exclude = ["vendor/", "*.min.js"]
    respect_gitignore = true

Command-line options override file settings (:meth:`ProjectConfig.merged`).
"""

from __future__ import annotations

import dataclasses
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codesync.annotation import DEFAULT_COUNT, MAX_COUNT
from codesync.consistency import CheckOptions
from codesync.inflect import normalize_style

CONFIG_FILE = "codesync.toml"
PYPROJECT_FILE = "pyproject.toml"

_KNOWN_KEYS = {
    "case_style",
    "acronyms",
    "word_aware_acronyms",
    "strict_whitespace",
    "label_pattern",
    "default_count",
    "exclude",
    "respect_gitignore",
}


@dataclass
class ProjectConfig:
    """Parsed project configuration."""

    # Directory the config was found in (or cwd when there is none)
    root: Path = field(default_factory=Path.cwd)
    # File the settings came from, None when running on defaults
    source: Path | None = None

    case_style: str | None = None
    acronyms: list[str] = field(default_factory=list)
    word_aware_acronyms: bool = False
    strict_whitespace: bool = False
    label_pattern: str | None = None
    default_count: int = DEFAULT_COUNT
    exclude: list[str] = field(default_factory=list)
    respect_gitignore: bool = True

    def merged(self, **overrides: Any) -> ProjectConfig:
        """Return a copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        cfg = dataclasses.replace(self, **changes)
        _validate(cfg)
        return cfg

    def check_options(self) -> CheckOptions:
        return CheckOptions(
            case_style=self.case_style,
            acronyms=tuple(self.acronyms),
            word_aware_acronyms=self.word_aware_acronyms,
            strict_whitespace=self.strict_whitespace,
            label_pattern=re.compile(self.label_pattern) if self.label_pattern else None,
            default_count=self.default_count,
        )


def _validate(cfg: ProjectConfig) -> None:
    """Normalise and sanity-check values.  Raises ``ValueError``."""
    for name in ("case_style", "label_pattern"):
        value = getattr(cfg, name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{name} must be a string, got {value!r}")
    for name in ("word_aware_acronyms", "strict_whitespace", "respect_gitignore"):
        value = getattr(cfg, name)
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false, got {value!r}")
    if cfg.case_style is not None:
        cfg.case_style = normalize_style(cfg.case_style)
    if cfg.label_pattern is not None:
        try:
            re.compile(cfg.label_pattern)
        except re.error as exc:
            raise ValueError(f"Invalid label_pattern {cfg.label_pattern!r}: {exc}") from exc
    if isinstance(cfg.default_count, bool) or not isinstance(cfg.default_count, int):
        raise ValueError(f"default_count must be an integer, got {cfg.default_count!r}")
    if not 1 <= cfg.default_count <= MAX_COUNT:
        raise ValueError(f"default_count must be between 1 and {MAX_COUNT}")
    for name in ("acronyms", "exclude"):
        value = getattr(cfg, name)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"{name} must be a list of strings")


def _find_root(start: Path | None = None) -> Path:
    """Walk up from *start* (or cwd) to the first directory with a config.

    ``pyproject.toml`` only counts when it has a ``[tool.codesync]`` table.
    Raises ``FileNotFoundError`` when nothing is found.
    """
    candidate = (start or Path.cwd()).resolve()
    while True:
        if (candidate / CONFIG_FILE).exists():
            return candidate
        pyproject = candidate / PYPROJECT_FILE
        if pyproject.exists() and _read_pyproject_table(pyproject) is not None:
            return candidate
        if candidate == candidate.parent:
            break
        candidate = candidate.parent
    raise FileNotFoundError(
        f"Could not find {CONFIG_FILE} or a [tool.codesync] table in any parent directory"
    )


def _read_pyproject_table(path: Path) -> dict[str, Any] | None:
    with open(path, "rb") as f:
        raw = tomllib.load(f)
    table = raw.get("tool", {}).get("codesync")
    return table if isinstance(table, dict) else None


def load_config(root: Path | None = None) -> ProjectConfig:
    """Load settings for the project containing *root* (default: cwd).

    Raises ``FileNotFoundError`` when no config exists, ``KeyError`` for
    unknown keys and ``ValueError`` for bad values or malformed TOML.
    """
    root = _find_root(root)
    toml_path = root / CONFIG_FILE
    try:
        if toml_path.exists():
            with open(toml_path, "rb") as f:
                raw = tomllib.load(f)
        else:
            toml_path = root / PYPROJECT_FILE
            raw = _read_pyproject_table(toml_path) or {}
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"{toml_path}: {exc}") from exc

    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        raise KeyError(f"Unknown codesync setting(s) in {toml_path}: {', '.join(unknown)}")

    cfg = ProjectConfig(root=root, source=toml_path, **raw)
    _validate(cfg)
    return cfg
