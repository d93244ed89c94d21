"""Jippity CLI."""

from __future__ import annotations

import asyncio

import typer

from jippity.app.runtime import AppRuntime
from jippity.config import get_settings
from jippity.errors import ConfigurationError, DecodeError
from jippity.logging_utils import configure_logging
from jippity.protocol.codec import decode as decode_message

app = typer.Typer(name="jippity", help="Let a language model play games over the game API.", add_completion=False)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="WebSocket bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="WebSocket port"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name"),
    think_interval: float | None = typer.Option(None, "--think-interval", help="Seconds between unprompted thinking nudges"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Serve the game API until the session exits."""

    settings = get_settings(
        host=host,
        port=port,
        model=model,
        think_interval_seconds=think_interval,
        log_level=log_level,
    )
    configure_logging(settings.log_level, profile=settings.log_profile)
    try:
        runtime = AppRuntime(settings)
    except ConfigurationError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1) from exc

    try:
        reason = asyncio.run(runtime.run())
    except KeyboardInterrupt:
        typer.echo("interrupted", err=True)
        return
    typer.echo(f"session exited: {reason}", err=True)
    raise typer.Exit(1)


@app.command()
def decode(text: str = typer.Argument(..., help="One game API message as JSON")) -> None:
    """Decode a message and print it, or explain why it is rejected."""

    try:
        message = decode_message(text)
    except DecodeError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(message.model_dump_json(by_alias=True, exclude_none=True, indent=2))


if __name__ == "__main__":
    app()
