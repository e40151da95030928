from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime

import typer

from .config import AppConfig, RuntimeConfig
from .container import Container
from .cli_formatter import (
    catalog_to_dict,
    format_detection_result,
    format_source_list,
    result_to_dict,
)
from ..core.domain.exceptions import InvalidRequestError
from ..core.domain.models import DetectionRequest

try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _run_config(config: AppConfig, *, run_id: str, log_level: str, console: bool) -> AppConfig:
    """Copy of ``config`` carrying this invocation's run id and log settings."""
    return config.model_copy(
        update={
            "runtime": RuntimeConfig(run_id=run_id),
            "logging": config.logging.model_copy(
                update={"level": log_level.upper(), "console_output": console}
            ),
        }
    )


def _run_id(label: str) -> str:
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{label}"


def _configure_basic_logging(log_level: str) -> None:
    level = logging._nameToLevel.get(log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s', force=True)


@app.command()
def detect(
    url: str = typer.Argument(..., help="Website URL to look up, e.g. https://example.com/page"),
    source: str = typer.Option("common-crawl", "--source", "-s", help="Source id (see 'sources')"),
    year: str | None = typer.Option(None, "--year", "-y", help="Year partition for partitioned sources"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mirror structured logs to the console"),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Check whether a URL appears in one third-party data source."""
    _configure_basic_logging(log_level)

    config = _run_config(AppConfig(), run_id=_run_id(source), log_level=log_level, console=verbose)

    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()

    try:
        catalog = container.catalog()
        descriptor = catalog.get(source)
        # Partitioned sources default to their first option, like the web form did.
        if year is None and descriptor is not None:
            year = descriptor.default_sub_option

        uc = container.detect_uc()
        result = asyncio.run(uc.execute(DetectionRequest(url=url, source=source, year=year)))

        if json_output:
            typer.echo(json.dumps(result_to_dict(result), ensure_ascii=False, indent=2))
        else:
            typer.echo(format_detection_result(result))

    except InvalidRequestError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    finally:
        container.shutdown_resources()


@app.command()
def scan(
    url: str = typer.Argument(..., help="Website URL to look up"),
    year: str | None = typer.Option(None, "--year", "-y", help="Year partition for partitioned sources"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mirror structured logs to the console"),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Check a URL against every enabled source at once."""
    _configure_basic_logging(log_level)

    config = _run_config(AppConfig(), run_id=_run_id("scan"), log_level=log_level, console=verbose)

    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()

    try:
        uc = container.scan_uc()
        result = asyncio.run(uc.execute(url=url, year=year))

        if json_output:
            typer.echo(json.dumps(result_to_dict(result), ensure_ascii=False, indent=2))
        else:
            typer.echo(format_detection_result(result))

    except InvalidRequestError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    finally:
        container.shutdown_resources()


@app.command()
def sources(
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """List the available detection sources."""
    config = AppConfig()
    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()

    try:
        catalog = container.list_sources_uc().execute()
        if json_output:
            typer.echo(json.dumps(catalog_to_dict(catalog), ensure_ascii=False, indent=2))
        else:
            typer.echo(format_source_list(catalog))
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    app()
