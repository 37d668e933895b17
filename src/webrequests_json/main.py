"""CLI entrypoint for webrequests-json."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import requests
import typer
from dotenv import load_dotenv

from .config import WebRequestsJsonConfig, load_config
from .decoding import try_get_json_as
from .http import RequestsResponse, has_json

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    env_level = os.getenv("WEBREQUESTS_JSON_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, env_level, None)
    if not isinstance(level, int):
        level = logging.INFO
        logging.warning(
            "Unrecognized WEBREQUESTS_JSON_LOG_LEVEL '%s'; defaulting to INFO",
            env_level,
        )
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")


load_dotenv(Path.cwd() / ".env", override=False)
_configure_logging()

app = typer.Typer(help="Fetch web resources and decode their JSON responses")


def _load(config: Optional[Path], url: str) -> tuple[WebRequestsJsonConfig, str]:
    try:
        cfg = WebRequestsJsonConfig() if config is None else load_config(config)
        return cfg, cfg.resolve_url(url)
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


def _get(url: str, cfg: WebRequestsJsonConfig, timeout: Optional[float]) -> requests.Response:
    headers = {"Accept": cfg.client.accept, **cfg.client.headers}
    if timeout is None:
        timeout = cfg.client.timeout_s
    try:
        return requests.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Request to %s failed: %s", url, exc)
        typer.secho(f"Request to {url} failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


@app.command("fetch")
def fetch(
    url: str,
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, help="Path to config YAML"),
    timeout: Optional[float] = typer.Option(None, help="Request timeout in seconds"),
    strict: bool = typer.Option(False, "--strict", help="Disable type coercion while decoding"),
) -> None:
    """GET a URL and print its decoded JSON body."""

    cfg, target = _load(config, url)
    response = RequestsResponse(_get(target, cfg, timeout))

    settings = cfg.json_settings()
    if strict:
        settings = replace(settings, strict=True)

    result = try_get_json_as(response, Any, settings, preview_length=cfg.decode.preview_length)
    if not result.ok:
        typer.secho(str(result.error), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(result.value, indent=cfg.decode.indent))


@app.command("check")
def check(
    url: str,
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, help="Path to config YAML"),
    timeout: Optional[float] = typer.Option(None, help="Request timeout in seconds"),
) -> None:
    """GET a URL and report whether it returned JSON content."""

    cfg, target = _load(config, url)
    response = RequestsResponse(_get(target, cfg, timeout))

    typer.echo(
        json.dumps(
            {
                "url": response.url,
                "status": response.status_code,
                "content_type": response.content_type,
                "has_json": has_json(response),
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    app()
