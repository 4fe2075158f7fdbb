"""farmassist CLI: ask the farming assistant from a terminal, inspect provider health, run the API.

Usage:
    farmassist ask "How often should I irrigate tomatoes?" --context farm.json
    farmassist health
    farmassist serve --port 8787
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="farmassist",
    help="farmassist: farming assistant replies grounded in your farm records.",
    no_args_is_help=True,
)


def _init_logging() -> None:
    from farmassist.logging_setup import get_logger

    get_logger()


def _load_context(path: Optional[Path]) -> object:
    if path is None:
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Could not read context file {path}: {e}", err=True)
        raise typer.Exit(code=2)


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="The farmer's question"),
    context: Optional[Path] = typer.Option(None, "--context", "-c", help="JSON file with the farm context"),
    no_weather: bool = typer.Option(False, "--no-weather", help="Skip the live weather lookup"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output reply and provider info as JSON"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Path to .env file (default: .env)"),
):
    """Answer one question using the configured provider."""
    from farmassist.env_config import load_dotenv_if_available
    from farmassist.errors import GenerationError
    from farmassist.health import build_health
    from farmassist.orchestrator import generate_reply
    from farmassist.sanitizer import sanitize_context, sanitize_prompt
    from farmassist.weather import enrich_with_weather

    load_dotenv_if_available(str(env_file) if env_file else None)
    _init_logging()

    question = sanitize_prompt(prompt)
    if not question:
        typer.echo("Prompt is required.", err=True)
        raise typer.Exit(code=2)

    farm_context = sanitize_context(_load_context(context))
    env = dict(os.environ)

    async def _run() -> str:
        enriched = farm_context if no_weather else await enrich_with_weather(farm_context)
        return await generate_reply(question, enriched, env)

    try:
        reply = asyncio.run(_run())
    except GenerationError as e:
        typer.echo(f"Assistant unavailable ({e.status_code or 'error'}): {e.message}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        health = build_health(env).model_dump(mode="json", by_alias=True)
        typer.echo(json.dumps({"reply": reply, "provider": health}, indent=2))
    else:
        typer.echo(reply)


@app.command()
def health(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Path to .env file (default: .env)"),
):
    """Show which provider and model would answer right now."""
    from farmassist.env_config import load_dotenv_if_available
    from farmassist.health import build_health

    load_dotenv_if_available(str(env_file) if env_file else None)
    typer.echo(json.dumps(build_health().model_dump(mode="json", by_alias=True), indent=2))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-H", help="Bind host"),
    port: int = typer.Option(8787, "--port", "-p", help="Bind port"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Path to .env file (default: .env)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes (dev mode)"),
):
    """Start the assistant API server."""
    import uvicorn
    from farmassist.health import build_health
    from farmassist.server import create_app

    create_app(dotenv_path=str(env_file) if env_file else None)
    _init_logging()

    report = build_health()
    typer.echo(f"\n\U0001f33e farmassist API Server")
    typer.echo(f"   http://{host}:{port}")
    typer.echo(f"   Provider: {report.provider.value} | Model: {report.model}")
    typer.echo(f"   Endpoints: /api/assistant, /api/health")
    typer.echo(f"{'='*60}\n")

    uvicorn.run(
        "farmassist.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level=os.getenv("FARMASSIST_LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    app()
