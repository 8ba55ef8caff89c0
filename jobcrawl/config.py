"""Application configuration loaded from per-environment YAML files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    """Database connection settings; ``url`` is a MySQL DSN."""

    user: str = ""
    password: str = ""
    url: str = ""


@dataclass(frozen=True)
class MailConfig:
    """SMTP settings for the notification mail."""

    smtp_host: str = ""
    smtp_port: str = ""
    sender: str = ""
    password: str = ""
    receiver: str = ""


@dataclass(frozen=True)
class Config:
    """The whole application configuration."""

    db: DBConfig = field(default_factory=DBConfig)
    mail: MailConfig = field(default_factory=MailConfig)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"config section {name!r} must be a mapping")
    return section


def _fields(section: Mapping[str, Any], names: tuple[str, ...]) -> dict[str, str]:
    return {name: _as_str(section.get(name)) for name in names}


def parse_config(data: str | bytes) -> Config:
    """Parse YAML text into a Config; missing keys become empty strings."""
    document = yaml.safe_load(data)
    if document is None:
        document = {}
    if not isinstance(document, Mapping):
        raise ValueError("config document must be a mapping")
    db = _fields(_section(document, "db"), ("user", "password", "url"))
    mail = _fields(
        _section(document, "mail"),
        ("smtp_host", "smtp_port", "sender", "password", "receiver"),
    )
    return Config(db=DBConfig(**db), mail=MailConfig(**mail))


def load_config(env: str, base_dir: str | os.PathLike[str] | None = None) -> Config:
    """Read ``<base_dir>/config/config.<env>.yml``; base_dir defaults to the cwd."""
    directory = os.fspath(base_dir) if base_dir is not None else os.getcwd()
    if directory.endswith("/"):
        directory = directory[:-1]
    path = Path(f"{directory}/config/config.{env}.yml")
    logger.info("Loading config from %s", path)
    return parse_config(path.read_bytes())