"""Configuration loading for annote (.annote.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from pygments.styles import get_all_styles

from .models import RenderingConfig

CONFIG_FILENAME = ".annote.yml"
DEFAULT_MATCH = ("*.js",)


class ConfigError(RuntimeError):
    """Raised when the configuration file or a template cannot be used."""


@dataclass
class AnnoteConfig:
    """Effective settings for one annote run."""

    path: Path = Path(".")
    match: List[str] = field(default_factory=lambda: list(DEFAULT_MATCH))
    maxdepth: Optional[int] = None
    write_to: Path = Path("docs")
    markdown: bool = True
    highlight: bool = True
    highlight_style: str = "default"
    layout: Optional[Path] = None
    block: Optional[Path] = None
    verbose: bool = False
    jobs: int = 4
    fail_fast: bool = False
    exclude_paths: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None

    @property
    def rendering(self) -> RenderingConfig:
        return RenderingConfig(
            use_prose_markup=self.markdown,
            use_code_highlight=self.highlight,
            highlight_style=self.highlight_style,
        )

    def merged(self, **overrides: Any) -> "AnnoteConfig":
        """Return a copy with every non-None override applied and validated."""
        values = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(values) - set(self.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        for key in ("path", "write_to", "layout", "block", "log_file"):
            if key in values:
                values[key] = Path(values[key])
        if "match" in values:
            values["match"] = _as_str_list(values["match"])
        result = replace(self, **values)
        result.validate()
        return result

    def validate(self) -> None:
        if not self.match:
            raise ConfigError("At least one match pattern is required")
        if self.maxdepth is not None and self.maxdepth < 0:
            raise ConfigError("maxdepth must be zero or greater")
        if self.jobs < 1:
            raise ConfigError("jobs must be at least 1")
        if self.highlight_style not in set(get_all_styles()):
            raise ConfigError(f"Unknown highlight style: {self.highlight_style}")


def load_config(config_path: Path | None = None) -> AnnoteConfig:
    """Load configuration from disk, returning defaults when no file exists.

    Relative paths inside the file resolve against the file's directory.
    """
    if config_path is None:
        config_file = Path.cwd() / CONFIG_FILENAME
        required = False
    else:
        candidate = Path(config_path).expanduser()
        required = not candidate.is_dir()
        config_file = _resolve_config_path(candidate)

    if not config_file.exists():
        if required:
            raise ConfigError(f"Config file not found: {config_file}")
        return AnnoteConfig()

    root = config_file.parent.resolve()
    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = AnnoteConfig()
    path = _as_str(data.get("path"))
    if path:
        config.path = root / path
    match = _as_str_list(data.get("match"))
    if match:
        config.match = match
    maxdepth = _as_int(data.get("maxdepth"))
    if maxdepth is not None:
        config.maxdepth = maxdepth
    write_to = _as_str(data.get("write_to", data.get("write-to")))
    if write_to:
        config.write_to = root / write_to

    for key in ("markdown", "highlight", "verbose", "fail_fast"):
        flag = _as_bool(data.get(key))
        if flag is not None:
            setattr(config, key, flag)

    style = _as_str(data.get("highlight_style"))
    if style:
        config.highlight_style = style
    for key in ("layout", "block", "log_file"):
        value = _as_str(data.get(key))
        if value:
            setattr(config, key, root / value)
    jobs = _as_int(data.get("jobs"))
    if jobs is not None:
        config.jobs = jobs
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    config.validate()
    return config


def _resolve_config_path(config_path: Path) -> Path:
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["AnnoteConfig", "CONFIG_FILENAME", "ConfigError", "load_config"]
