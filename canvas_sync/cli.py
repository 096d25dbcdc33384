"""CLI for canvas sync - run the server and inspect rooms.

Usage:
    canvas-sync serve
    canvas-sync rooms
    canvas-sync room ROOM_ID
    canvas-sync watch ROOM_ID
"""

import asyncio
import json
from datetime import datetime
from typing import Any

import httpx
import typer
import uvicorn
import websockets
from rich import box
from rich.console import Console
from rich.table import Table
from websockets.exceptions import WebSocketException

from canvas_sync.config import settings

app = typer.Typer(
    name="canvas-sync",
    help="CLI for canvas sync",
    add_completion=False,
)
console = Console()

DEFAULT_URL = f"http://localhost:{settings.port}"


def _ts() -> str:
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def _get_json(base_url: str, path: str) -> Any:
    resp = httpx.get(f"{base_url.rstrip('/')}{path}", timeout=5.0)
    resp.raise_for_status()
    return resp.json()


def format_event(msg: dict[str, Any]) -> str:
    """One rich-markup line for a server event."""
    msg_type = msg.get("type", "unknown")

    if msg_type == "state-sync":
        return (
            f"[green][{_ts()}] state-sync[/green] {len(msg.get('operations', []))} operations, "
            f"{len(msg.get('users', []))} users, seq={msg.get('sequenceNumber')}"
        )
    if msg_type in ("draw-start", "erase-start"):
        return f"[magenta][{_ts()}] {msg_type}[/magenta] {msg.get('id')} by {msg.get('userId')}"
    if msg_type in ("draw-move", "erase-move", "cursor-move"):
        return f"[dim][{_ts()}] {msg_type}[/dim] {json.dumps(msg.get('point'))}"
    if msg_type in ("undo", "redo", "clear-canvas"):
        return f"[yellow][{_ts()}] {msg_type}[/yellow] {json.dumps(msg)[:80]}"
    if msg_type in ("user-joined", "user-left", "users-update"):
        return f"[cyan][{_ts()}] {msg_type}[/cyan] {json.dumps(msg)[:80]}"
    return f"[dim][{_ts()}] {msg_type}[/dim] {json.dumps(msg)[:80]}"


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Bind address"),
    port: int = typer.Option(settings.port, help="Bind port"),
    reload: bool = typer.Option(settings.dev_mode, help="Reload on code changes"),
) -> None:
    """Run the server."""
    uvicorn.run("canvas_sync.main:app", host=host, port=port, reload=reload)


@app.command()
def rooms(
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="Server base URL"),
) -> None:
    """List rooms the server has seen."""
    try:
        data = _get_json(url, "/rooms")
    except httpx.HTTPError as e:
        console.print(f"[red]Failed to list rooms: {e}[/red]")
        raise typer.Exit(1) from e

    if not data:
        console.print("[yellow]No rooms yet[/yellow]")
        return

    table = Table(title="Rooms", box=box.ROUNDED)
    table.add_column("Room", style="cyan")
    table.add_column("Operations", justify="right")
    table.add_column("Participants", justify="right")
    table.add_column("Next seq", justify="right", style="dim")
    for room in data:
        table.add_row(
            room["roomId"],
            str(room["operationCount"]),
            str(room["participantCount"]),
            str(room["sequenceNumber"]),
        )
    console.print(table)


@app.command()
def room(
    room_id: str = typer.Argument(..., help="Room to inspect"),
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="Server base URL"),
) -> None:
    """Show one room's participants and operations."""
    try:
        data = _get_json(url, f"/rooms/{room_id}")
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            console.print(f"[yellow]Room {room_id} not found[/yellow]")
        else:
            console.print(f"[red]Failed to load room: {e}[/red]")
        raise typer.Exit(1) from e
    except httpx.HTTPError as e:
        console.print(f"[red]Failed to load room: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        f"[bold]{room_id}[/bold]: {len(data['operations'])} operations, "
        f"undo depth {data['undoDepth']}, next seq {data['sequenceNumber']}"
    )

    users = Table(title="Participants", box=box.SIMPLE)
    users.add_column("ID", style="dim")
    users.add_column("Name")
    users.add_column("Color")
    for user in data["users"]:
        users.add_row(user["id"], user["name"], f"[{user['color']}]{user['color']}[/]")
    console.print(users)

    ops = Table(title="Operations", box=box.SIMPLE)
    ops.add_column("Seq", justify="right")
    ops.add_column("ID", style="dim")
    ops.add_column("Kind")
    ops.add_column("Author", style="dim")
    ops.add_column("Points", justify="right")
    for op in data["operations"]:
        ops.add_row(
            str(op["sequenceNumber"]), op["id"], op["kind"], op["userId"], str(len(op["points"]))
        )
    console.print(ops)


async def _watch(ws_url: str, room_id: str, user_name: str) -> None:
    async with websockets.connect(ws_url) as ws:
        await ws.send(json.dumps({"type": "join", "roomId": room_id, "userName": user_name}))
        console.print(f"[green]Joined {room_id}. Watching events (Ctrl+C to stop)[/green]\n")
        async for raw in ws:
            console.print(format_event(json.loads(raw)))


@app.command()
def watch(
    room_id: str = typer.Argument(..., help="Room to join"),
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="Server base URL"),
    user_name: str = typer.Option("watcher", "--name", "-n", help="Display name"),
) -> None:
    """Join a room and print every event it receives."""
    ws_url = url.replace("http", "ws", 1).rstrip("/") + "/ws"
    try:
        asyncio.run(_watch(ws_url, room_id, user_name))
    except KeyboardInterrupt:
        console.print("\n[dim]Disconnected[/dim]")
    except (OSError, WebSocketException) as e:
        console.print(f"[red]Connection failed: {e}[/red]")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
