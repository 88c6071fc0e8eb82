"""Environment-backed settings for the translation and contact tools."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from dotenv import load_dotenv

from .endpoint import DEFAULT_ENDPOINT_TEMPLATE, DEFAULT_ORIGIN
from .errors import ConfigurationError
from .page_translator import CommitPolicy
from .parsers import TAG_SPEC
from .transport import DEFAULT_TRANSPORT_ORDER

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    target_language: str = "nl"
    endpoint_template: str = DEFAULT_ENDPOINT_TEMPLATE
    origin: str = DEFAULT_ORIGIN
    tags: Tuple[str, ...] = TAG_SPEC
    max_concurrency: int = 8
    timeout: float = 10.0
    commit_policy: CommitPolicy = CommitPolicy.LAST
    transports: Tuple[str, ...] = tuple(DEFAULT_TRANSPORT_ORDER)
    contact_recipient: Optional[str] = None
    contact_recipient_name: str = "Website"
    contact_subject: str = "Website contact form"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_starttls: bool = False
    smtp_timeout: float = 10.0

    def require_recipient(self) -> str:
        if not self.contact_recipient:
            raise ConfigurationError(
                "SITE_CONTACT_RECIPIENT must be set to forward contact messages"
            )
        return self.contact_recipient


def _split(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


def _as_int(env: Mapping[str, str], key: str, default: int, *, minimum: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}, got {value}")
    return value


def _as_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


def _as_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {raw!r}")


def _as_policy(env: Mapping[str, str], key: str) -> CommitPolicy:
    raw = (env.get(key) or CommitPolicy.LAST.value).strip().lower()
    try:
        return CommitPolicy(raw)
    except ValueError as exc:
        choices = ", ".join(p.value for p in CommitPolicy)
        raise ConfigurationError(f"{key} must be one of {choices}, got {raw!r}") from exc


def load_settings(
    env_file: Optional[Union[Path, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build settings from the environment.

    When ``environ`` is omitted, a ``.env`` file (``env_file`` or the one
    found from the working directory) is loaded first without overriding
    variables that are already set.
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file, override=False)
        environ = os.environ

    defaults = Settings()
    tags = _split(environ.get("SITE_TRANSLATE_TAGS", "")) or defaults.tags
    transports = _split(environ.get("SITE_TRANSPORTS", "")) or defaults.transports
    target_language = (environ.get("SITE_TARGET_LANGUAGE") or defaults.target_language).strip()

    endpoint_template = environ.get("SITE_TRANSLATE_ENDPOINT") or defaults.endpoint_template
    if "{text}" not in endpoint_template or "{lang}" not in endpoint_template:
        raise ConfigurationError(
            "SITE_TRANSLATE_ENDPOINT must contain both {text} and {lang} placeholders"
        )

    return Settings(
        target_language=target_language,
        endpoint_template=endpoint_template,
        origin=environ.get("SITE_ORIGIN") or defaults.origin,
        tags=tags,
        max_concurrency=_as_int(environ, "SITE_TRANSLATE_CONCURRENCY", defaults.max_concurrency, minimum=1),
        timeout=_as_float(environ, "SITE_TRANSLATE_TIMEOUT", defaults.timeout),
        commit_policy=_as_policy(environ, "SITE_COMMIT_POLICY"),
        transports=transports,
        contact_recipient=environ.get("SITE_CONTACT_RECIPIENT") or None,
        contact_recipient_name=environ.get("SITE_CONTACT_RECIPIENT_NAME") or defaults.contact_recipient_name,
        contact_subject=environ.get("SITE_CONTACT_SUBJECT") or defaults.contact_subject,
        smtp_host=environ.get("SMTP_HOST") or defaults.smtp_host,
        smtp_port=_as_int(environ, "SMTP_PORT", defaults.smtp_port, minimum=1),
        smtp_username=environ.get("SMTP_USERNAME") or None,
        smtp_password=environ.get("SMTP_PASSWORD") or None,
        smtp_starttls=_as_bool(environ, "SMTP_STARTTLS", defaults.smtp_starttls),
        smtp_timeout=_as_float(environ, "SMTP_TIMEOUT", defaults.smtp_timeout),
    )
