"""Command-line interface for Brandr."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from brandr.core.animation.formulas import EasingApproximation
from brandr.core.animation.models import (
    AnimationKind,
    AnimationSpec,
    OverlayRole,
    TimelineState,
    get_preset,
    list_presets,
)
from brandr.core.animation.timeline import sample
from brandr.core.assets import (
    AssetDownloader,
    DirectoryGallery,
    FileStorage,
    PillowCanvas,
    is_remote,
)
from brandr.core.config.loader import configure_logging, load_app_config
from brandr.core.config.models import AppConfig
from brandr.core.errors import BrandrError
from brandr.core.export import ExportOrchestrator, FfmpegEngine, OutcomeStatus
from brandr.core.expressions import ExpressionCompiler, OverlayGraphBuilder, engine_arguments
from brandr.core.preview import PreviewController

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_PRESET = "slide_up_crafto"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_spec(args: argparse.Namespace) -> AnimationSpec:
    """Preset named by ``--preset`` with any explicit overrides applied."""
    spec = get_preset(args.preset)
    overrides = {
        "kind": AnimationKind(args.kind) if args.kind else None,
        "duration_ms": args.duration_ms,
        "delay_ms": args.delay_ms,
        "photo_size": getattr(args, "photo_size", None),
        "display_name": getattr(args, "name", None),
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return spec.with_changes(**overrides) if overrides else spec


def cmd_presets(args: argparse.Namespace, config: AppConfig) -> int:
    table = Table(title="Animation presets")
    table.add_column("Preset")
    table.add_column("Kind")
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Delay (ms)", justify="right")
    table.add_column("Name")
    for name in list_presets():
        spec = get_preset(name)
        table.add_row(
            name, spec.kind.value, str(spec.duration_ms), str(spec.delay_ms), spec.display_name
        )
    console.print(table)
    return 0


def cmd_compile(args: argparse.Namespace, config: AppConfig) -> int:
    spec = build_spec(args)
    approximation = (
        EasingApproximation.EXACT if args.exact else config.export.easing_approximation
    )
    compiler = ExpressionCompiler(approximation)
    roles = [OverlayRole.NAME] if args.no_photo else [OverlayRole.PHOTO, OverlayRole.NAME]
    expressions = compiler.compile_roles(spec, roles)

    for role, exprs in expressions.items():
        table = Table(title=f"{role.value} overlay ({spec.kind.value}, {approximation.value})")
        table.add_column("Field")
        table.add_column("Expression", overflow="fold")
        table.add_row("x", exprs.x_expr)
        table.add_row("y", exprs.y_expr)
        table.add_row("opacity", exprs.opacity_expr)
        table.add_row("enable", exprs.enable_expr)
        if exprs.rotation_expr is not None:
            table.add_row("rotation", exprs.rotation_expr)
        console.print(table)

    graph = OverlayGraphBuilder().build(
        photo_asset=None if args.no_photo else Path("profile.png"),
        name_asset=Path("name.png"),
        expressions=expressions,
    )
    console.print("\n[bold]filter_complex[/bold]")
    console.print(graph.to_filter_complex(), soft_wrap=True, markup=False)
    if args.show_command:
        argv = engine_arguments(graph, Path("input.mp4"), Path("output.mp4"), config.export)
        console.print("\n[bold]command[/bold]")
        command = " ".join([config.export.ffmpeg_binary, *argv])
        console.print(command, soft_wrap=True, markup=False)
    return 0


def _state_row(elapsed_ms: float, state: TimelineState) -> tuple[str, ...]:
    return (
        f"{elapsed_ms:.0f}",
        f"{state.opacity:.3f}",
        f"{state.offset_dx:.3f}",
        f"{state.offset_dy:.3f}",
        f"{state.rotation_radians:.3f}",
    )


def _state_table(title: str) -> Table:
    table = Table(title=title)
    for column in ("t (ms)", "opacity", "dx", "dy", "rotation"):
        table.add_column(column, justify="right")
    return table


def cmd_preview(args: argparse.Namespace, config: AppConfig) -> int:
    spec = build_spec(args)
    fps = args.fps or config.preview.fps

    if not args.live:
        samples = sample(spec, fps=fps)
        table = _state_table(f"{spec.kind.value} @ {fps:g} fps")
        for i in range(len(samples)):
            state = TimelineState(
                opacity=float(samples.opacity[i]),
                offset_dx=float(samples.offset_dx[i]),
                offset_dy=float(samples.offset_dy[i]),
                rotation_radians=float(samples.rotation_radians[i]),
            )
            table.add_row(*_state_row(float(samples.elapsed_ms[i]), state))
        console.print(table)
        return 0

    async def _play() -> None:
        with Live(console=console, refresh_per_second=fps) as live:
            controller: PreviewController

            def render(state: TimelineState) -> None:
                table = _state_table(f"{spec.kind.value} (live)")
                table.add_row(*_state_row(controller.elapsed_ms(), state))
                live.update(table)

            controller = PreviewController(
                spec,
                sink=render,
                on_complete=lambda: console.print("[green]Animation complete[/green]"),
            )
            await controller.play(fps)

    asyncio.run(_play())
    return 0


async def _resolve_source(
    location: str | None, downloader: AssetDownloader, *, video: bool
) -> Path | None:
    if location is None:
        return None
    if not is_remote(location):
        return Path(location).resolve()
    console.print(f"[bold]Downloading[/bold] {location}")
    if video:
        return await downloader.download_video(location)
    return await downloader.download_image(location)


async def run_export_async(args: argparse.Namespace, config: AppConfig) -> int:
    spec = build_spec(args)
    storage = FileStorage(config.storage)
    downloader = AssetDownloader(storage, config.download)

    try:
        video = await _resolve_source(args.video, downloader, video=True)
        photo = await _resolve_source(args.photo, downloader, video=False)
    except BrandrError as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        return 1
    assert video is not None

    settings = config.export
    if args.exact:
        settings = settings.model_copy(update={"easing_approximation": EasingApproximation.EXACT})
    if args.no_gallery:
        settings = settings.model_copy(update={"save_to_gallery": False})

    orchestrator = ExportOrchestrator(
        FfmpegEngine(settings),
        PillowCanvas(),
        storage,
        gallery=DirectoryGallery(config.storage.album_dir),
        settings=settings,
    )

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, lambda: asyncio.ensure_future(orchestrator.cancel()))
    except NotImplementedError:
        logger.debug("Signal handlers unsupported on this platform; Ctrl-C will not cancel")

    with Progress(
        TextColumn("[bold]Exporting[/bold]"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("export", total=1.0)
        outcome = await orchestrator.export(
            spec,
            video,
            photo,
            on_progress=lambda value: progress.update(task, completed=value),
        )

    if outcome.status == OutcomeStatus.SUCCESS:
        console.print(f"[green]✅ Exported[/green] {outcome.path}")
        console.print(f"   Duration: {outcome.wall_clock_duration:.1f}s")
        if outcome.saved_to_gallery:
            console.print(f"   Saved to gallery: {config.storage.album_dir}")
        return 0
    if outcome.status == OutcomeStatus.CANCELLED:
        console.print("[yellow]Export cancelled[/yellow]")
        return 130

    reason = outcome.reason.value if outcome.reason else "unknown"
    console.print(f"[red]❌ Export failed ({reason}): {escape(outcome.message)}[/red]")
    if outcome.log_tail:
        console.print(outcome.log_tail, style="dim", markup=False)
    return 1


def cmd_export(args: argparse.Namespace, config: AppConfig) -> int:
    return asyncio.run(run_export_async(args, config))


def _add_spec_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--preset",
        default=DEFAULT_PRESET,
        choices=list_presets(),
        help=f"Base animation preset (default: {DEFAULT_PRESET})",
    )
    parser.add_argument(
        "--kind", choices=[k.value for k in AnimationKind], help="Override animation kind"
    )
    parser.add_argument("--duration-ms", type=int, help="Override animation duration")
    parser.add_argument("--delay-ms", type=int, help="Override start delay")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="brandr",
        description="Brandr - animated branding overlays for videos",
    )
    p.add_argument(
        "--config",
        default=str(AppConfig.default_path()),
        help="Path to app config (.json/.yaml, default: brandr.json)",
    )
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override configured log level",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("presets", help="List built-in animation presets")

    compile_ = sub.add_parser("compile", help="Print engine expressions for an animation")
    _add_spec_arguments(compile_)
    compile_.add_argument("--exact", action="store_true", help="Use exact easing formulas")
    compile_.add_argument("--no-photo", action="store_true", help="Name overlay only")
    compile_.add_argument(
        "--show-command", action="store_true", help="Also print the full engine command"
    )

    preview = sub.add_parser("preview", help="Show the live-preview timeline")
    _add_spec_arguments(preview)
    preview.add_argument("--fps", type=float, help="Frame rate (default: from config)")
    preview.add_argument("--live", action="store_true", help="Play in real time")

    export = sub.add_parser("export", help="Export a video with the overlay baked in")
    _add_spec_arguments(export)
    export.add_argument("--video", required=True, help="Source video path or URL")
    export.add_argument("--photo", help="Profile photo path or URL")
    export.add_argument("--name", help="Display name in the name pill")
    export.add_argument("--photo-size", type=float, help="Photo diameter in pixels")
    export.add_argument("--exact", action="store_true", help="Use exact easing formulas")
    export.add_argument("--no-gallery", action="store_true", help="Skip saving to the gallery")

    return p


COMMANDS = {
    "presets": cmd_presets,
    "compile": cmd_compile,
    "preview": cmd_preview,
    "export": cmd_export,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        config = load_app_config(Path(args.config))
    except BrandrError as e:
        console.print(f"[red]ERROR: Could not load config: {escape(str(e))}[/red]")
        sys.exit(1)
    if args.log_level:
        config = config.model_copy(
            update={"logging": config.logging.model_copy(update={"level": args.log_level})}
        )
    configure_logging(config)

    try:
        exit_code = COMMANDS[args.cmd](args, config)
    except BrandrError as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
