import httpx
from rich.console import Console

from mediarelay.config.settings import config
from mediarelay.core.state import state

console = Console()

def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=config.limits.image_fetch_timeout,
    )

async def init_http_client() -> None:
    """Create the shared keep-alive client"""
    state.http_client = create_http_client()
    console.print("[green]✓ HTTP client ready[/green]")

def get_http_client() -> httpx.AsyncClient:
    """Shared client, created lazily when startup hooks did not run"""
    if state.http_client is None:
        state.http_client = create_http_client()
    return state.http_client

async def close_http_client() -> None:
    if state.http_client:
        await state.http_client.aclose()
        state.http_client = None
        console.print("[dim]✓ HTTP client closed[/dim]")
