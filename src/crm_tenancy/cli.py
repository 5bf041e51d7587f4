"""Typer CLI for crm-tenancy."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="tenancy", help="crm-tenancy: tenant resolution and feature gating service")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the crm-tenancy API server."""
    import uvicorn
    from crm_tenancy.app import create_app

    console.print(f"[bold green]Starting crm-tenancy on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


async def _seed_default() -> tuple[str, str, str]:
    from crm_tenancy.common.config import get_settings
    from crm_tenancy.common.database import DatabaseManager
    from crm_tenancy.tenants.bootstrap import ensure_default_tenant

    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    try:
        await db.create_all()
        async with db.get_session() as session:
            tenant = await ensure_default_tenant(session, settings)
            return tenant.id, tenant.subdomain or "", tenant.status
    finally:
        await db.close()


@app.command("seed-default")
def seed_default():
    """Create or re-activate the default tenant the resolver falls back to."""
    try:
        tenant_id, subdomain, status = asyncio.run(_seed_default())
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(
        f"[bold green]Default tenant ready[/bold green] — id={tenant_id} "
        f"subdomain={subdomain} status={status}"
    )


async def _resolve(hints) -> tuple:
    from crm_tenancy.common.config import get_settings
    from crm_tenancy.common.database import DatabaseManager
    from crm_tenancy.tenants.resolver import TenantResolver
    from crm_tenancy.tenants.service import TenantService

    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    try:
        resolver = TenantResolver(
            TenantService(reserved_subdomains=settings.reserved_subdomains),
            default_tenant_id=settings.fallback_tenant_id,
            reserved_subdomains=settings.reserved_subdomains,
        )
        async with db.get_session() as session:
            resolution = await resolver.resolve(session, hints)
            tenant = resolution.tenant
            if tenant is None:
                return None
            return tenant.id, tenant.name, tenant.status, resolution.source, resolution.features
    finally:
        await db.close()


@app.command()
def resolve(
    host: str = typer.Option("", help="Host header, e.g. acme.example.com"),
    tenant_header: Optional[str] = typer.Option(None, "--header", help="X-Tenant-ID value"),
    tenant_query: Optional[str] = typer.Option(None, "--query", help="?tenant= value"),
):
    """Show which tenant a request with these hints would resolve to."""
    from crm_tenancy.tenants.resolver import RequestHints

    hints = RequestHints(host=host, tenant_header=tenant_header, tenant_query=tenant_query)
    result = asyncio.run(_resolve(hints))
    if result is None:
        console.print("[bold yellow]No tenant resolved[/bold yellow]")
        raise typer.Exit(1)

    tenant_id, name, status, source, features = result
    table = Table(title=f"{name} ({tenant_id})")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("status", status)
    table.add_row("resolved by", source or "")
    for feature, enabled in sorted((features or {}).items()):
        table.add_row(f"flag:{feature}", str(enabled))
    console.print(table)


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check crm-tenancy server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] — v{data['version']}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
