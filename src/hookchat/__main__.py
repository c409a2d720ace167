"""CLI entry point for hookchat."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import yaml

from . import __version__
from .config import AppConfig, _get_config_path, load_config

logger = logging.getLogger(__name__)


def _print_setup_guide(config_path: Path) -> None:
    print(
        f"\nTo get started, create {config_path} with:\n\n"
        "webhook:\n"
        '  url: "https://your-webhook-endpoint"\n'
        "models:\n"
        '  - "gpt-4o"\n'
        "\nOr set environment variables (a .env file in the working directory also works):\n"
        "  WEBHOOK_URL=https://your-webhook-endpoint\n"
        "  HOOKCHAT_MODELS=gpt-4o,gpt-4o-mini\n",
        file=sys.stderr,
    )


def _configure_logging(level_name: str | None) -> None:
    name = (level_name or os.environ.get("HOOKCHAT_LOG_LEVEL") or "WARNING").upper()
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        print(f"Unknown log level {name!r}, using WARNING", file=sys.stderr)
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO, including the full URL.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def _load_config_or_exit(config_path: Path | None) -> AppConfig:
    path = config_path or _get_config_path()
    try:
        return load_config(path)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        _print_setup_guide(path)
        sys.exit(1)
    except (OSError, yaml.YAMLError) as e:
        print(f"Could not read configuration {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _run_chat(config: AppConfig) -> int:
    from .cli.input_reader import InputClosedError, TurnReader
    from .cli.renderer import render_cancelled, render_error
    from .cli.session import ChatSession
    from .services.transport import WebhookTransport, redact_url

    with WebhookTransport.from_config(config.webhook) as transport:
        session = ChatSession(
            transport,
            TurnReader(on_cancel=render_cancelled),
            models=config.models,
            endpoint=redact_url(config.webhook.url),
            width=config.cli.width,
            close_unterminated=config.cli.close_unterminated_fences,
            spinner_interval=config.cli.spinner_interval,
        )
        try:
            return session.run()
        except InputClosedError as e:
            logger.debug("Input closed after %d turn(s)", session.turns)
            render_error(str(e))
            return 1
        except KeyboardInterrupt:
            render_error("Interrupted")
            return 130


def main() -> None:
    parser = argparse.ArgumentParser(prog="hookchat", description="hookchat - chat with a webhook-backed agent")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml (default: ~/.hookchat/config.yaml)")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        help="Logging level for stderr diagnostics (default: WARNING or HOOKCHAT_LOG_LEVEL)",
    )
    args = parser.parse_args()

    _configure_logging(args.log_level)
    config = _load_config_or_exit(args.config)
    sys.exit(_run_chat(config))


if __name__ == "__main__":
    main()
