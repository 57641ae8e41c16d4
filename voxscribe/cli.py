"""
voxscribe.cli - Typer CLI entry point.

Provides one-shot transcription, an interactive session, and environment
checks.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from voxscribe import __version__
from voxscribe.config import CONFIG_FILENAME, VoxscribeConfig, load_config, write_config
from voxscribe.exceptions import VoxscribeError
from voxscribe.logging import configure_logging
from voxscribe.orchestrator import RequestState
from voxscribe.session import SessionView, TranscriberSession
from voxscribe.utils import format_size

app = typer.Typer(
    name="voxscribe",
    help="Transcribe a local audio file with whisper.cpp.",
    add_completion=False,
)
console = Console()

STATE_LABELS = {
    RequestState.IDLE: "[dim]Idle[/dim]",
    RequestState.REQUESTED: "[cyan]Transcribing...[/cyan]",
    RequestState.SUCCEEDED: "[green]✓ Done[/green]",
    RequestState.FAILED: "[red]✗ Failed[/red]",
}


class AppState:
    config_file: Path | None = None


state = AppState()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"voxscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help=f"Path to {CONFIG_FILENAME}"
    ),
) -> None:
    """Voxscribe - transcribe audio files with whisper.cpp."""
    configure_logging(verbose)
    state.config_file = config


def _load_config_or_exit(**overrides) -> VoxscribeConfig:
    try:
        return load_config(state.config_file, overrides)
    except (FileNotFoundError, VoxscribeError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def render_view(view: SessionView) -> None:
    """Print the session state."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    if view.display_name:
        table.add_row("File", view.display_name)
        table.add_row("Size", format_size(view.size_bytes))
    else:
        table.add_row("File", "[dim]none selected[/dim]")
    table.add_row("Status", STATE_LABELS[view.state])
    console.print(table)

    if view.warning:
        console.print(f"[yellow]⚠ {escape(view.warning)}[/yellow]")
    if view.error:
        console.print(f"[red]Error: {escape(view.error)}[/red]")
    if view.result_text is not None:
        console.print(Panel(Text(view.result_text), title="Transcript", border_style="green"))
    if view.notice:
        console.print(f"[yellow]{escape(view.notice)}[/yellow]")


@app.command("transcribe")
def transcribe(
    audio: Path = typer.Argument(..., help="Audio file (mp3, wav, ogg, m4a, webm, flac)"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Also write the transcript to this file"
    ),
    copy: bool = typer.Option(False, "--copy", help="Copy the transcript to the clipboard"),
    model: str | None = typer.Option(None, "--model", "-m", help="Whisper model (e.g. tiny)"),
    language: str | None = typer.Option(None, "--language", "-l", help="Language code"),
    threads: int | None = typer.Option(None, "--threads", "-t", help="CPU threads"),
) -> None:
    """Transcribe a single audio file and print the text."""
    from voxscribe.engine import WhisperCliEngine
    from voxscribe.pickers import PathPicker
    from voxscribe.validation import validate_audio_file

    config = _load_config_or_exit(model=model, language=language, threads=threads)

    try:
        validate_audio_file(audio)
        picker = PathPicker(audio)
    except VoxscribeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    session = TranscriberSession(picker, WhisperCliEngine(config))
    session.pick()

    size = format_size(session.view().size_bytes)
    console.print(
        f"[cyan]Transcribing {escape(audio.name)} ({size}, {config.model} model)...[/cyan]"
    )
    asyncio.run(session.transcribe())
    view = session.view()

    if view.state is not RequestState.SUCCEEDED:
        console.print(f"[red]Error: {escape(view.error or view.notice or '')}[/red]")
        raise typer.Exit(1)

    if view.warning:
        console.print(f"[yellow]⚠ {escape(view.warning)}[/yellow]")
    typer.echo(view.result_text)

    if output is not None:
        from voxscribe.io import save_transcript

        try:
            saved = save_transcript(output, view.result_text or "", audio)
        except OSError as e:
            console.print(f"[red]Error: could not save transcript: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓[/green] Saved transcript to {escape(str(saved))}")

    if copy:
        from voxscribe.clipboard import TkClipboard

        clipboard = TkClipboard()
        session.clipboard = clipboard
        try:
            session.copy_result()
            console.print("[green]✓[/green] Copied to clipboard")
        except Exception as e:
            console.print(f"[yellow]Could not copy to clipboard: {escape(str(e))}[/yellow]")
        finally:
            clipboard.close()


@app.command("interactive")
def interactive(
    dialog: bool = typer.Option(
        False, "--dialog", "-d", help="Use a native file dialog instead of a prompt"
    ),
) -> None:
    """Pick files and transcribe them in a menu loop."""
    from voxscribe.clipboard import TkClipboard
    from voxscribe.engine import WhisperCliEngine
    from voxscribe.pickers import DialogPicker, PromptPicker

    config = _load_config_or_exit()
    picker = DialogPicker() if dialog else PromptPicker(console)
    clipboard = TkClipboard()
    session = TranscriberSession(picker, WhisperCliEngine(config), clipboard)

    try:
        while True:
            console.rule("voxscribe")
            view = session.view()
            render_view(view)

            choices = ["p", "q"]
            hints = ["[cyan]p[/cyan]ick"]
            if view.can_transcribe:
                choices.append("t")
                hints.append("[cyan]t[/cyan]ranscribe")
            if view.can_copy:
                choices.append("y")
                hints.append("cop[cyan]y[/cyan]")
            if view.display_name:
                choices.append("c")
                hints.append("[cyan]c[/cyan]lear")
            hints.append("[cyan]q[/cyan]uit")

            console.print("  ".join(hints))
            action = Prompt.ask("Action", choices=choices, show_choices=False, console=console)

            if action == "q":
                break
            if action == "p":
                session.pick()
            elif action == "t":
                with console.status("Transcribing..."):
                    asyncio.run(session.transcribe())
            elif action == "y":
                try:
                    session.copy_result()
                except Exception as e:
                    session.notice = f"Could not copy to clipboard: {e}"
            elif action == "c":
                session.clear()
    finally:
        clipboard.close()


@app.command("doctor")
def run_doctor() -> None:
    """Check that whisper-cli and the model can be found."""
    from voxscribe.validation import run_preflight_checks

    config = _load_config_or_exit()
    console.print("[cyan]Running preflight checks...[/cyan]\n")

    results = run_preflight_checks(config)

    table = Table(title="Dependency Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")
    for check in results["checks"]:
        status = "✓ Found" if check["ok"] else "[red]✗ Missing[/red]"
        table.add_row(check["component"], status, check["details"])
    table.add_row("Language", config.language, f"{config.threads} threads")
    console.print(table)

    if results["passed"]:
        console.print("\n[green]✓ All checks passed[/green]")
    else:
        console.print("\n[yellow]⚠ Some checks failed[/yellow]")
        raise typer.Exit(1)


@app.command("init")
def init_config(
    path: Path = typer.Option(Path("."), "--path", "-d", help="Directory for the config"),
    resource_dir: Path | None = typer.Option(
        None, "--resource-dir", "-r", help="Directory holding whisper-cli and models/"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a starter voxscribe.yaml."""
    config_path = path / CONFIG_FILENAME
    if config_path.exists() and not force:
        console.print(f"[red]Error: {config_path} already exists[/red]")
        raise typer.Exit(1)

    defaults = VoxscribeConfig()
    data = {
        "resource_dir": str(resource_dir) if resource_dir else None,
        "model": defaults.model,
        "language": defaults.language,
        "threads": defaults.threads,
        "print_progress": defaults.print_progress,
    }
    write_config(data, config_path)
    console.print(f"[green]✓[/green] Wrote {config_path}")
    console.print("\nNext step: [cyan]voxscribe doctor[/cyan]")
