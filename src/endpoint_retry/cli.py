"""CLI interface for endpoint-retry"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from endpoint_retry.domain.config import RetryConfig, retry_config_from_dict
from endpoint_retry.domain.eligibility import should_retry_request
from endpoint_retry.domain.models.request import RequestContext
from endpoint_retry.domain.strategy import RetryStrategy, calculate_delay
from endpoint_retry.infrastructure.config.config_manager import ConfigManager
from endpoint_retry.infrastructure.http_client import HttpError, requests_fetch

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _resolve_config(ctx: click.Context, overrides: Dict[str, Any]) -> RetryConfig:
    """Load the configured policy and apply CLI overrides on top of it."""
    verbose = ctx.obj.get("verbose", False)
    try:
        config = ConfigManager(config_path=ctx.obj.get("config_path")).get_retry_config()
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            config = retry_config_from_dict({**config.model_dump(), **overrides})
        return config
    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Invalid configuration: {e}", verbose=verbose, exc=e)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .endpoint-retry.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """endpoint-retry - inspect retry policies for API clients"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in RetryStrategy], case_sensitive=False),
    help="Backoff strategy. Overrides config.",
)
@click.option("--max-retries", type=int, help="Retry attempts after the first try. Overrides config.")
@click.option("--base-delay", type=int, help="Base delay in milliseconds. Overrides config.")
@click.option("--max-delay", type=int, help="Maximum delay in milliseconds. Overrides config.")
@click.pass_context
def schedule(ctx, strategy: str, max_retries: int, base_delay: int, max_delay: int):
    """Print the backoff delay before each retry."""
    config = _resolve_config(
        ctx,
        {
            "strategy": strategy,
            "max_retries": max_retries,
            "base_delay": base_delay,
            "max_delay": max_delay,
        },
    )

    click.echo(f"Strategy: {config.strategy} (max retries: {config.max_retries})")
    total = 0
    for attempt in range(1, config.max_retries + 1):
        delay = calculate_delay(attempt, config.base_delay, config.max_delay, config.strategy)
        total += delay
        click.echo(f"  retry {attempt}: {delay}ms")
    click.echo(f"Worst-case total wait: {total}ms")


@cli.command()
@click.option("--status", type=int, help="HTTP status of the failure (omit for network errors)")
@click.option("--method", type=str, default="GET", show_default=True, help="HTTP method")
@click.pass_context
def check(ctx, status: Optional[int], method: str):
    """Tell whether a failure would be retried under the configured policy.

    Exits with status 0 when the failure is retried, 1 otherwise.
    """
    config = _resolve_config(ctx, {})
    error = HttpError(status) if status else ConnectionError("network error")
    context = RequestContext(fetch=requests_fetch, method=method, path="/", base_url="")

    label = f"HTTP {status}" if status else "network error"
    if should_retry_request(error, config, context):
        click.echo(f"{method.upper()} {label}: retry")
        return
    click.echo(f"{method.upper()} {label}: no retry")
    sys.exit(1)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
