"""PromptMock CLI — promptmock command."""

from __future__ import annotations

import json
from typing import Any

import click

from prompt_mock.cli.client import MockControlClient
from prompt_mock.core.faults import CAPABILITIES


def _format_table(rows: list[dict], columns: list[str]) -> str:
    """Simple table formatter."""
    if not rows:
        return "No results."
    widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            widths[c] = max(widths[c], len(str(row.get(c, ""))))

    header = "  ".join(c.upper().ljust(widths[c]) for c in columns)
    separator = "  ".join("-" * widths[c] for c in columns)
    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(str(row.get(c, "")).ljust(widths[c]) for c in columns))
    return "\n".join(lines)


def _output(ctx: click.Context, data: Any, columns: list[str] | None = None) -> None:
    fmt = ctx.meta.get("output_format", "table")
    if fmt == "table" and isinstance(data, list) and columns:
        click.echo(_format_table(data, columns))
    else:
        click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option(
    "--api", default="http://127.0.0.1:8787", envvar="PROMPTMOCK_API", help="Mock server URL"
)
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def cli(ctx: click.Context, api: str, output_format: str) -> None:
    """PromptMock CLI — run and steer the mock prompt API."""
    ctx.obj = MockControlClient(base_url=api)
    ctx.meta["output_format"] = output_format


# --- Local commands ---


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
@click.option("--seed/--no-seed", default=None, help="Start from the default dataset")
@click.option("--prefix", "api_prefix", default=None, help="Path prefix stripped before matching")
@click.option("--failures", "failures_json", default=None, help="Initial failure budgets as JSON")
def serve(
    host: str | None,
    port: int | None,
    seed: bool | None,
    api_prefix: str | None,
    failures_json: str | None,
) -> None:
    """Serve the mock API over HTTP."""
    import uvicorn

    from prompt_mock.api.interceptor import RouteInterceptor, get_interceptor
    from prompt_mock.config import get_settings
    from prompt_mock.core.backend import MockBackend
    from prompt_mock.main import app

    settings = get_settings()
    try:
        failures = json.loads(failures_json) if failures_json else settings.failures
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--failures")

    backend = MockBackend(
        seed=settings.seed if seed is None else seed,
        failures=failures,
        default_actor=settings.default_actor,
        default_page_size=settings.default_page_size,
    )
    interceptor = RouteInterceptor(
        backend,
        api_prefix=settings.api_prefix if api_prefix is None else api_prefix,
        tenant_header=settings.tenant_header,
    )
    app.dependency_overrides[get_interceptor] = lambda: interceptor
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@cli.command("routes")
@click.option("--remote", is_flag=True, help="Ask the running server instead of the local table")
@click.pass_context
def list_routes(ctx: click.Context, remote: bool) -> None:
    """List the intercepted routes."""
    if remote:
        client: MockControlClient = ctx.obj
        routes = client.routes()
    else:
        from prompt_mock.api.interceptor import RouteInterceptor
        from prompt_mock.core.backend import MockBackend

        interceptor = RouteInterceptor(MockBackend(seed=False))
        routes = [
            {"method": r.method, "pattern": r.pattern, "capability": r.capability}
            for r in interceptor.routes
        ]
    rows = [{**r, "capability": r.get("capability") or ""} for r in routes]
    _output(ctx, rows, ["method", "pattern", "capability"])


@cli.command("seed")
def dump_seed() -> None:
    """Print the default dataset as JSON."""
    from prompt_mock.core.backend import MockBackend

    click.echo(json.dumps(MockBackend(seed=True).state(), indent=2))


# --- Server control commands ---


@cli.command()
@click.option("--seed/--no-seed", default=None, help="Reload the default dataset")
@click.pass_context
def reset(ctx: click.Context, seed: bool | None) -> None:
    """Reset a running server's state and failure budgets."""
    client: MockControlClient = ctx.obj
    result = client.reset(seed=seed)
    click.echo(f"Reset mock state ({result['tenants']} tenants)")


@cli.command()
@click.argument("capability", type=click.Choice(CAPABILITIES))
@click.argument("count", type=int)
@click.option("--tenant", "tenant_id", default=None, help="Only fail calls for this tenant")
@click.option("--key", "sub_key", default=None, help="Sub-key, e.g. analytics range")
@click.pass_context
def fail(
    ctx: click.Context, capability: str, count: int, tenant_id: str | None, sub_key: str | None
) -> None:
    """Force the next COUNT calls to CAPABILITY to fail with a 500."""
    client: MockControlClient = ctx.obj
    result = client.set_failure(capability, count, tenant_id=tenant_id, sub_key=sub_key)
    _output(ctx, result)


@cli.command()
@click.option("--clear", is_flag=True, help="Drop every configured budget")
@click.pass_context
def failures(ctx: click.Context, clear: bool) -> None:
    """Show (or clear) the remaining failure budgets."""
    client: MockControlClient = ctx.obj
    if clear:
        client.clear_failures()
        click.echo("Cleared failure budgets")
        return
    _output(ctx, client.failures())


@cli.command()
@click.pass_context
def state(ctx: click.Context) -> None:
    """Dump a running server's state."""
    client: MockControlClient = ctx.obj
    _output(ctx, client.state())


if __name__ == "__main__":
    cli()
