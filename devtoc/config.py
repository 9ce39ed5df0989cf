"""Configuration loading for devtoc (.devtoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .toc import TocOptions

CONFIG_FILENAME = ".devtoc.yml"
DEFAULT_FILES = ("*.md",)
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; devtoc link checker)"
PROXY_ENV_KEYS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LinkCheckSettings:
    """Network settings for `devtoc checklinks`."""

    concurrency: int = 5
    timeout: float = 10.0
    retries: int = 1
    backoff: float = 0.5
    verify_tls: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    proxy: Optional[str] = None


@dataclass
class DevTocConfig:
    """Represents the settings defined in .devtoc.yml."""

    root: Path
    toc: TocOptions = field(default_factory=TocOptions)
    files: List[str] = field(default_factory=lambda: list(DEFAULT_FILES))
    workers: int = 4
    templates_dir: Optional[Path] = None
    organization: Optional[str] = None
    checklinks: LinkCheckSettings = field(default_factory=LinkCheckSettings)


def load_config(config_path: Path, environ: Mapping[str, str] | None = None) -> DevTocConfig:
    """Load configuration from disk.

    ``environ`` is the only source for proxy settings when the file does not
    set one; callers pass ``os.environ`` explicitly.
    """
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    toc = _load_toc_options(_as_section(data, "toc"))
    checklinks = _load_link_settings(_as_section(data, "checklinks"))
    if checklinks.proxy is None and environ is not None:
        checklinks.proxy = _proxy_from_env(environ)

    files = _as_str_list(data.get("files"), "files") or list(DEFAULT_FILES)
    workers = _as_int(data.get("workers"), "workers")
    if workers is not None and workers < 1:
        raise ConfigError("workers must be at least 1")
    templates_dir_str = _as_str(data.get("templates_dir"), "templates_dir")

    return DevTocConfig(
        root=root,
        toc=toc,
        files=files,
        workers=workers if workers is not None else 4,
        templates_dir=root / templates_dir_str if templates_dir_str else None,
        organization=_as_str(data.get("organization"), "organization"),
        checklinks=checklinks,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _load_toc_options(section: Dict[str, Any]) -> TocOptions:
    kwargs: Dict[str, Any] = {}
    indent_chars = _as_str(section.get("indent_chars"), "toc.indent_chars")
    if indent_chars is not None:
        kwargs["indent_chars"] = indent_chars
    indent_spaces = _as_int(section.get("indent_spaces"), "toc.indent_spaces")
    if indent_spaces is not None:
        kwargs["indent_spaces"] = indent_spaces
    max_level = _as_int(section.get("max_level"), "toc.max_level")
    if max_level is not None:
        kwargs["max_level"] = max_level
    trim = _as_bool(section.get("trim_toc_indent"), "toc.trim_toc_indent")
    if trim is not None:
        kwargs["trim_toc_indent"] = trim
    marker_style = _as_str(section.get("marker_style"), "toc.marker_style")
    if marker_style is not None:
        kwargs["marker_style"] = marker_style
    try:
        return TocOptions(**kwargs)
    except ValueError as exc:
        raise ConfigError(f"Invalid toc settings: {exc}") from exc


def _load_link_settings(section: Dict[str, Any]) -> LinkCheckSettings:
    settings = LinkCheckSettings()
    concurrency = _as_int(section.get("concurrency"), "checklinks.concurrency")
    if concurrency is not None:
        if concurrency < 1:
            raise ConfigError("checklinks.concurrency must be at least 1")
        settings.concurrency = concurrency
    timeout = _as_float(section.get("timeout"), "checklinks.timeout")
    if timeout is not None:
        if timeout <= 0:
            raise ConfigError("checklinks.timeout must be positive")
        settings.timeout = timeout
    retries = _as_int(section.get("retries"), "checklinks.retries")
    if retries is not None:
        if retries < 0:
            raise ConfigError("checklinks.retries must not be negative")
        settings.retries = retries
    backoff = _as_float(section.get("backoff"), "checklinks.backoff")
    if backoff is not None:
        settings.backoff = max(backoff, 0.0)
    verify_tls = _as_bool(section.get("verify_tls"), "checklinks.verify_tls")
    if verify_tls is not None:
        settings.verify_tls = verify_tls
    user_agent = _as_str(section.get("user_agent"), "checklinks.user_agent")
    if user_agent:
        settings.user_agent = user_agent
    settings.proxy = _as_str(section.get("proxy"), "checklinks.proxy") or None
    return settings


def _proxy_from_env(environ: Mapping[str, str]) -> Optional[str]:
    for key in PROXY_ENV_KEYS:
        value = environ.get(key)
        if value:
            return value
    return None


def _as_section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def _as_str(value: Any, key: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ConfigError(f"{key} must be a string")
    return str(value)


def _as_int(value: Any, key: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise ConfigError(f"{key} must be an integer")


def _as_float(value: Any, key: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ConfigError(f"{key} must be a number")


def _as_bool(value: Any, key: str) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ConfigError(f"{key} must be a boolean")


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    raise ConfigError(f"{key} must be a string or a list of strings")


__all__ = ["ConfigError", "DevTocConfig", "LinkCheckSettings", "load_config"]
