"""CLI entry point."""

from __future__ import annotations

import json
import os
import sys
from typing import IO, Any

import rich_click as click

from llmbridge.core.logging_config import configure_logging
from llmbridge.frontends.cli.output import error_exit, output_json, print_table
from llmbridge.gateway.config import ProviderConfig, config_path, load_config
from llmbridge.gateway.sse import iter_stream_units
from llmbridge.gateway.transforms.registry import TransformerRegistry, create_registry

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running '--help' for more information."
click.rich_click.ERRORS_EPILOGUE = ""
click.rich_click.MAX_WIDTH = 100


def _registry(ctx: click.Context) -> TransformerRegistry:
    ctx.ensure_object(dict)
    if "registry" not in ctx.obj:
        ctx.obj["registry"] = create_registry()
    return ctx.obj["registry"]


def _read_json(source: IO[str]) -> Any:
    try:
        return json.load(source)
    except ValueError as e:
        error_exit(f"Invalid JSON in {source.name}: {e}")


# =========================================================================
# Root CLI
# =========================================================================
@click.group()
@click.version_option(package_name="llmbridge")
@click.option("--log-level", default=None, help="Log level (default: LLMBRIDGE_LOG_LEVEL or WARNING)")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """llmbridge - canonical chat protocol adapters for upstream LLM providers.

    Inspect transformers, validate provider configuration and run
    individual transforms on captured payloads.

    **Commands:**

        llmbridge transformers    List registered transformers

        llmbridge defaults        Default provider config for a transformer

        llmbridge validate        Check every configured provider

        llmbridge transform       Run request/response/stream/error transforms
    """
    configure_logging(level=log_level or os.environ.get("LLMBRIDGE_LOG_LEVEL", "WARNING"))
    ctx.ensure_object(dict)


@cli.command()
@click.option("--json", "-j", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def transformers(ctx: click.Context, json_output: bool) -> None:
    """List registered transformer names."""
    names = _registry(ctx).list_names()
    if json_output:
        output_json(names)
        return
    for name in names:
        click.echo(name)


@cli.command()
@click.argument("name")
@click.pass_context
def defaults(ctx: click.Context, name: str) -> None:
    """Show the default provider config for transformer NAME.

    Unknown names fall back to the passthrough transformer.
    """
    output_json(_registry(ctx).resolve(name).get_default_config())


@cli.command()
@click.option("--config", "-c", "config_file", default=None, help="Config file path")
@click.option("--strict", is_flag=True, help="Exit non-zero when any provider has problems")
@click.option("--json", "-j", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def validate(ctx: click.Context, config_file: str | None, strict: bool, json_output: bool) -> None:
    """Validate every configured provider against its transformer.

    Diagnostics are advisory: the command exits 0 unless **--strict** is given.

    **Examples:**

        llmbridge validate

        llmbridge validate --config ./managed-mode-config.json --strict
    """
    registry = _registry(ctx)
    config = load_config(config_file)

    results: list[dict[str, Any]] = []
    for provider in config.providers:
        transformer = registry.resolve_for(provider)
        result = transformer.validate_config(provider)
        results.append(
            {
                "id": provider.id,
                "name": provider.name,
                "transformer": transformer.name,
                **result.to_dict(),
            }
        )

    if json_output:
        output_json(results)
    elif not results:
        click.echo(f"No providers configured in {config_path(config_file)}")
    else:
        rows = []
        for entry in results:
            status = "ok" if entry["valid"] else "; ".join(entry["errors"])
            rows.append([entry["id"], entry["transformer"], status])
        print_table(["ID", "TRANSFORMER", "STATUS"], rows)

    if strict and any(not entry["valid"] for entry in results):
        sys.exit(1)


# =========================================================================
# Transform commands
# =========================================================================
@cli.group()
@click.option("--transformer", "-t", "transformer_name", default=None, help="Transformer name")
@click.option("--provider", "-p", "provider_id", default=None, help="Provider id from config")
@click.option("--config", "-c", "config_file", default=None, help="Config file path")
@click.pass_context
def transform(
    ctx: click.Context,
    transformer_name: str | None,
    provider_id: str | None,
    config_file: str | None,
) -> None:
    """Run a single transform on a payload file (or stdin with -).

    Pick the adapter with **--transformer**, or with **--provider** to use a
    configured provider's transformer.
    """
    provider: ProviderConfig | None = None
    if provider_id:
        provider = load_config(config_file).provider(provider_id)
        if provider is None:
            error_exit(f"Provider not found: {provider_id}")
    if provider is None:
        provider = ProviderConfig(transformer=transformer_name)
    elif transformer_name:
        provider = provider.model_copy(update={"transformer": transformer_name})

    ctx.obj["provider"] = provider
    ctx.obj["transformer"] = _registry(ctx).resolve_for(provider)


@transform.command("request")
@click.argument("source", type=click.File("r"), default="-")
@click.pass_context
def transform_request(ctx: click.Context, source: IO[str]) -> None:
    """Canonical request -> provider request."""
    output_json(ctx.obj["transformer"].transform_request(_read_json(source), ctx.obj["provider"]))


@transform.command("response")
@click.argument("source", type=click.File("r"), default="-")
@click.pass_context
def transform_response(ctx: click.Context, source: IO[str]) -> None:
    """Provider response -> canonical response."""
    output_json(ctx.obj["transformer"].transform_response(_read_json(source), ctx.obj["provider"]))


@transform.command("stream")
@click.argument("source", type=click.File("r"), default="-")
@click.pass_context
def transform_stream(ctx: click.Context, source: IO[str]) -> None:
    """Provider stream units (one per line) -> canonical stream units."""
    transformer = ctx.obj["transformer"]
    for unit in iter_stream_units(source.read()):
        out = transformer.transform_stream_chunk(unit, ctx.obj["provider"])
        if out is not None:
            click.echo(out, nl=not out.endswith("\n"))


@transform.command("error")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--status", type=int, default=None, help="HTTP status of the failed call")
@click.pass_context
def transform_error(ctx: click.Context, source: IO[str], status: int | None) -> None:
    """Provider error body -> canonical error envelope.

    Non-JSON input is treated as a plain error message.
    """
    text = source.read()
    try:
        error: Any = json.loads(text)
    except ValueError:
        error = {"message": text.strip()}
    if status is not None and isinstance(error, dict):
        error = {**error, "status": status}
    output_json(ctx.obj["transformer"].transform_error(error, ctx.obj["provider"]))


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
