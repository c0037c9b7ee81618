"""Configuration loading for pagesdoctor (.pagesdoctor.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import PagesDoctorError

CONFIG_FILENAME = ".pagesdoctor.yml"
TOKEN_ENV_KEYS = ("PAGESDOCTOR_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


class ConfigError(PagesDoctorError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitHubConfig:
    """Connection settings for the GitHub REST API."""

    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    timeout: float = 10.0
    user_agent: str = "pagesdoctor"


@dataclass
class SiteConfig:
    """Settings for the published-site reachability probe."""

    timeout: float = 10.0


@dataclass
class ServiceConfig:
    """Bind address for `pagesdoctor serve`."""

    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class PagesDoctorConfig:
    """Represents the settings defined in .pagesdoctor.yml."""

    root: Path
    github: GitHubConfig = field(default_factory=GitHubConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)


def load_config(
    config_path: Path, *, env: Mapping[str, str] | None = None
) -> PagesDoctorConfig:
    """Load configuration from disk, filling the token from the environment."""
    environ = os.environ if env is None else env
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    github_data = _as_dict(data.get("github"))
    github = GitHubConfig()
    if github_data:
        github.api_url = (_as_str(github_data.get("api_url")) or github.api_url).rstrip("/")
        github.token = _as_str(github_data.get("token"))
        github.timeout = _as_float(github_data.get("timeout"), github.timeout)
        github.user_agent = _as_str(github_data.get("user_agent")) or github.user_agent
    if not github.token:
        github.token = _token_from_env(environ)

    site_data = _as_dict(data.get("site"))
    site = SiteConfig()
    if site_data:
        site.timeout = _as_float(site_data.get("timeout"), site.timeout)

    service_data = _as_dict(data.get("service"))
    service = ServiceConfig()
    if service_data:
        service.host = _as_str(service_data.get("host")) or service.host
        service.port = _as_int(service_data.get("port"), service.port)

    return PagesDoctorConfig(root=root, github=github, site=site, service=service)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
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


def _token_from_env(environ: Mapping[str, str]) -> Optional[str]:
    for key in TOKEN_ENV_KEYS:
        value = environ.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GitHubConfig",
    "PagesDoctorConfig",
    "ServiceConfig",
    "SiteConfig",
    "load_config",
]
