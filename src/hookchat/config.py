"""Configuration loader: YAML file, .env file and environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import yaml
from dotenv import find_dotenv, load_dotenv

_DEFAULT_TIMEOUT = 120.0
_DEFAULT_SPINNER_INTERVAL = 0.08
_DEFAULT_WIDTH = 100


@dataclass
class WebhookConfig:
    url: str
    timeout: float = _DEFAULT_TIMEOUT
    verify_ssl: bool = True
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class CliConfig:
    spinner_interval: float = _DEFAULT_SPINNER_INTERVAL
    close_unterminated_fences: bool = False
    width: int = _DEFAULT_WIDTH


@dataclass
class AppConfig:
    webhook: WebhookConfig
    models: list[str] = field(default_factory=list)
    cli: CliConfig = field(default_factory=CliConfig)


def _get_config_path(data_dir: Path | None = None) -> Path:
    if data_dir:
        return data_dir / "config.yaml"
    return Path.home() / ".hookchat" / "config.yaml"


def _as_bool(value: Any) -> bool:
    return str(value).strip().lower() not in ("false", "0", "no", "off")


def _parse_models(raw: Any) -> list[str]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, list):
        items = [str(item) for item in raw]
    else:
        raise ValueError(f"models must be a list or a comma-separated string, got {type(raw).__name__}")
    models: list[str] = []
    for item in items:
        name = item.strip()
        if name and name not in models:
            models.append(name)
    return models


def validate_url(url: str) -> str:
    """Reject webhook urls that httpx could not send to; returns the url unchanged."""
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"Webhook url must start with http:// or https://, got {url!r}")
    try:
        parsed = httpx.URL(url)
        port = parsed.port
    except (httpx.InvalidURL, ValueError) as e:
        raise ValueError(f"Webhook url {url!r} is not a valid URL: {e}") from None
    if not parsed.host:
        raise ValueError(f"Webhook url {url!r} has no host")
    if port is not None and not 0 < port <= 65535:
        raise ValueError(f"Webhook url {url!r} has an out-of-range port {port}")
    return url


def _section(raw: dict[str, Any], key: str, path: Path, prefix: str = "") -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{prefix}{key}' in {path} must be a mapping, got {type(value).__name__}")
    return value


def load_config(config_path: Path | None = None, *, dotenv_path: Path | None = None) -> AppConfig:
    # Real environment variables win over .env entries.
    load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True), override=False)

    raw: dict[str, Any] = {}
    path = config_path or _get_config_path()

    if path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")

    webhook_raw = _section(raw, "webhook", path)
    url = str(webhook_raw.get("url") or os.environ.get("WEBHOOK_URL", "")).strip()
    if not url:
        raise ValueError(
            f"Webhook url is required. Set 'webhook.url' in config.yaml ({path}) or the WEBHOOK_URL environment variable."
        )
    validate_url(url)

    timeout_raw = webhook_raw.get("timeout", os.environ.get("HOOKCHAT_TIMEOUT", _DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout_raw)
    except (TypeError, ValueError):
        raise ValueError(f"webhook.timeout must be a number of seconds, got {timeout_raw!r}") from None
    if timeout <= 0:
        raise ValueError("webhook.timeout must be positive")

    verify_ssl = _as_bool(webhook_raw.get("verify_ssl", os.environ.get("HOOKCHAT_VERIFY_SSL", "true")))

    headers: dict[str, str] = {}
    for k, v in _section(webhook_raw, "headers", path, prefix="webhook.").items():
        headers[str(k)] = os.path.expandvars(str(v))

    webhook = WebhookConfig(url=url, timeout=timeout, verify_ssl=verify_ssl, headers=headers)

    models_raw = raw.get("models")
    if models_raw is None:
        models_raw = os.environ.get("HOOKCHAT_MODELS", "")
    models = _parse_models(models_raw)

    cli_raw = _section(raw, "cli", path)
    cli_config = CliConfig(
        spinner_interval=float(cli_raw.get("spinner_interval", _DEFAULT_SPINNER_INTERVAL)),
        close_unterminated_fences=_as_bool(cli_raw.get("close_unterminated_fences", False)),
        width=int(cli_raw.get("width", _DEFAULT_WIDTH)),
    )
    if cli_config.spinner_interval <= 0:
        raise ValueError("cli.spinner_interval must be positive")

    return AppConfig(webhook=webhook, models=models, cli=cli_config)
