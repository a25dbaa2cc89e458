from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
import signal
import subprocess
import sys
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from mediaroll.bridge.server_http import run_http_server
from mediaroll.bridge.server_stdio import run_stdio_server
from mediaroll.config import default_config_path, load_config, write_default_config
from mediaroll.errors import MediaRollError
from mediaroll.service import MediaLibraryService
from mediaroll.util.logging import setup_logging, use_color

app = typer.Typer(help="mediaroll: browse and import device photos and videos")


@dataclass(slots=True)
class AppState:
    service: MediaLibraryService
    console: Console
    config_path: Path


def _print_banner(console: Console, show_banner: bool) -> None:
    if not show_banner:
        return
    console.print("[bold cyan]mediaroll[/bold cyan] [dim]photos • videos • albums[/dim]")


def _state(ctx: typer.Context) -> AppState:
    st = ctx.obj
    if not isinstance(st, AppState):
        raise RuntimeError("app state not initialized")
    return st


def _fail(console: Console, exc: MediaRollError) -> NoReturn:
    console.print(f"[red]{exc.code}[/red] {exc}")
    raise typer.Exit(1) from exc


def _emit_obj(console: Console, obj: dict[str, Any], json_out: bool) -> None:
    if json_out:
        typer.echo(json.dumps(obj, indent=2))
        return
    for k, v in obj.items():
        console.print(f"[bold]{k}[/bold]: {v}")


def _dimensions(asset: dict[str, Any]) -> str:
    width = asset.get("width", -1)
    height = asset.get("height", -1)
    if width < 0 or height < 0:
        return "?"
    return f"{int(width)}x{int(height)}"


def _emit_assets(console: Console, result: dict[str, Any]) -> None:
    assets = result.get("assets") or []
    info = result.get("page_info") or {}
    if not assets:
        console.print("[dim]no assets[/dim]")
    else:
        table = Table(title="assets")
        table.add_column("id")
        table.add_column("type")
        table.add_column("filename")
        table.add_column("size")
        table.add_column("modified")
        table.add_column("uri")
        for asset in assets:
            table.add_row(
                str(asset.get("id", "")),
                str(asset.get("mediaType", "")),
                str(asset.get("filename") or ""),
                _dimensions(asset),
                str(asset.get("creationDate", "")),
                str(asset.get("uri", "")),
            )
        console.print(table)
    if info.get("has_next_page"):
        console.print(f"[dim]more available: --after {info.get('end_cursor')}[/dim]")


def _emit_albums(console: Console, albums: list[dict[str, Any]]) -> None:
    if not albums:
        console.print("[dim]no albums[/dim]")
        return
    table = Table(title="albums")
    table.add_column("id")
    table.add_column("title")
    table.add_column("assets")
    table.add_column("preview")
    for album in albums:
        previews = album.get("previewAssets") or [{}]
        table.add_row(
            str(album.get("id", "")),
            str(album.get("title") or ""),
            str(album.get("assetCount", 0)),
            str(previews[0].get("uri", "")),
        )
    console.print(table)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", help="Config YAML path")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")] = False,
) -> None:
    setup_logging(verbose, quiet)
    cfg_path = config.expanduser() if config else default_config_path()
    if not cfg_path.exists():
        write_default_config(cfg_path)
    cfg = load_config(cfg_path)
    svc = MediaLibraryService(cfg)
    color_on = use_color()
    console = Console(color_system="auto" if color_on else None, force_terminal=color_on)
    _print_banner(Console(stderr=True), show_banner=cfg.ui.show_banner and not quiet)
    ctx.obj = AppState(service=svc, console=console, config_path=cfg_path)
    ctx.call_on_close(svc.close)


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    path: Annotated[Path | None, typer.Option("--path", help="Write config to this path")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    written = write_default_config(path.expanduser() if path else None)
    _emit_obj(st.console, {"config_path": str(written)}, json_out)


@app.command("photos")
def photos_cmd(
    ctx: typer.Context,
    first: Annotated[int, typer.Option("-n", "--first", help="Number of assets to return")] = 20,
    after: Annotated[str | None, typer.Option("--after", help="end_cursor from a previous page")] = None,
    album: Annotated[str | None, typer.Option("--album", help="Album (bucket) id")] = None,
    mime_types: Annotated[list[str] | None, typer.Option("--mime-type", help="Restrict to MIME type; repeatable")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    params: dict[str, Any] = {"first": first}
    if after:
        params["after"] = after
    if album:
        params["albumId"] = album
    if mime_types:
        params["mimeTypes"] = list(mime_types)
    try:
        result = st.service.get_photos(params)
    except MediaRollError as exc:
        _fail(st.console, exc)
    if json_out:
        typer.echo(json.dumps(result, indent=2))
        return
    _emit_assets(st.console, result)


@app.command("albums")
def albums_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    try:
        result = st.service.get_albums()
    except MediaRollError as exc:
        _fail(st.console, exc)
    if json_out:
        typer.echo(json.dumps(result, indent=2))
        return
    _emit_albums(st.console, result["albums"])


@app.command("default-album")
def default_album_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    try:
        album = st.service.get_default_album()
    except MediaRollError as exc:
        _fail(st.console, exc)
    if json_out:
        typer.echo(json.dumps(album, indent=2))
        return
    _emit_albums(st.console, [album] if album else [])


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="File path or file:// URI")],
    media_type: Annotated[str, typer.Option("--type", help="photo|video")] = "photo",
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    try:
        uri = st.service.save_to_library(source, media_type)
    except MediaRollError as exc:
        _fail(st.console, exc)
    if json_out:
        typer.echo(json.dumps({"uri": uri}, indent=2))
        return
    st.console.print(f"[green]imported:[/green] {uri}")


@app.command("scan")
def scan_cmd(
    ctx: typer.Context,
    paths: Annotated[list[str], typer.Argument(help="Files or directories to index")],
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    try:
        stats = st.service.scan(paths)
    except MediaRollError as exc:
        _fail(st.console, exc)
    _emit_obj(st.console, stats, json_out)


@app.command("status")
def status_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    _emit_obj(st.console, st.service.status(), json_out)


@app.command("bridge")
def bridge_cmd(
    ctx: typer.Context,
    action: Annotated[str, typer.Argument(help="start|stop")] = "start",
    http: Annotated[bool, typer.Option("--http", help="Use HTTP transport")] = False,
    daemon: Annotated[bool, typer.Option("--daemon", help="Run HTTP bridge as daemon")] = False,
    host: Annotated[str, typer.Option("--host")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port")] = 8282,
    serve_only: Annotated[bool, typer.Option("--serve-only", hidden=True)] = False,
) -> None:
    st = _state(ctx)
    pid_path = st.service.config.pid_path

    if action == "stop":
        if not pid_path.exists():
            typer.echo("not running")
            raise typer.Exit(0)
        pid = int(pid_path.read_text().strip())
        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
        pid_path.unlink(missing_ok=True)
        typer.echo(f"stopped pid {pid}")
        raise typer.Exit(0)

    if action != "start":
        raise typer.BadParameter("action must be start or stop")
    if daemon and not http:
        raise typer.BadParameter("--daemon currently requires --http")

    if daemon and not serve_only:
        cmd = [
            sys.executable,
            "-m",
            "mediaroll.cli",
            "--quiet",
            "--config",
            str(st.config_path),
            "bridge",
            "start",
            "--http",
            "--host",
            host,
            "--port",
            str(port),
            "--serve-only",
        ]
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
        pid_path.write_text(str(proc.pid))
        typer.echo(f"started daemon pid={proc.pid} http://{host}:{port}")
        raise typer.Exit(0)

    if http:
        code = run_http_server(st.service, host=host, port=port)
        raise typer.Exit(code)

    code = run_stdio_server(st.service)
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
