#!/usr/bin/env python3
"""
CV Generation CLI

Generates CV documents from person data directories and manages persons.

Commands:
    generate        - Render a CV (optionally re-rendering on every change)
    create          - Scaffold a new person directory
    list            - List persons with profile data
    list-templates  - List available template variants
    server          - Run the HTTP API

Examples:\n

    cvgen generate "Jane Doe"                             # English, default template

    cvgen generate jane-doe --lang fr --template keyteo   # French, Keyteo branding

    cvgen generate jane-doe --watch --keep-going          # Re-render on change, survive errors

    cvgen create "Jane Doe"                               # Scaffold data/jane-doe/
"""

import signal
import threading
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from cvgen.config import Settings, load_settings
from cvgen.contexts.generation.models import RenderOutcome, WatchPolicy
from cvgen.contexts.generation.pipeline import DocumentPipeline
from cvgen.contexts.intake.persons import list_persons
from cvgen.contexts.templating.scaffold import create_person
from cvgen.contexts.templating.template_registry import list_variants
from cvgen.exceptions import GenerationError
from cvgen.utils import now
from cvgen.utils.logger import setup_logger

app = typer.Typer(
    help="Generate CV documents from person data and templates",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def display_path(path: Path) -> str:
    """Return path relative to the working directory for cleaner display."""
    try:
        return str(Path(path).relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def _start_session(command: str, settings: Settings) -> Path:
    return setup_logger(
        context_name=f"{command}_{now()}",
        log_dir=settings.logs_root,
        extra_provenance={"Compiler": settings.compiler, "Data": settings.data_root},
    )


def _fail(error: GenerationError) -> None:
    typer.secho(f"Error: {error.kind}: {error.message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _install_stop_handlers(stop_event: threading.Event) -> None:
    def _handle(signum, frame):
        typer.echo("\nStopping watch...")
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, _handle)


def _report_render(outcome: RenderOutcome) -> None:
    if outcome.succeeded:
        result = outcome.result
        typer.secho(f"✓ Render {outcome.attempt}: {display_path(result.pdf_path)}", fg=typer.colors.GREEN)
    else:
        typer.secho(
            f"✗ Render {outcome.attempt} failed: {outcome.error.kind}: {outcome.error.message}",
            fg=typer.colors.RED,
        )


@app.command("generate")
def generate_command(
    person: Annotated[str, typer.Argument(help="Person name or identifier (e.g. 'Jane Doe')")],
    lang: Annotated[
        str, typer.Option("--lang", "-l", help="Language code (en, fr, es, de)")
    ] = "en",
    template: Annotated[
        str, typer.Option("--template", "-t", help="Template variant (see list-templates)")
    ] = "default",
    watch: Annotated[
        bool, typer.Option("--watch", "-w", help="Re-render whenever a source file changes")
    ] = False,
    keep_going: Annotated[
        bool,
        typer.Option("--keep-going", help="In watch mode, keep watching after a failed render"),
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Compiler timeout in seconds", min=1),
    ] = None,
):
    """
    Render a CV for a person.

    Writes {output_dir}/{person}_{template}_{lang}.pdf. With --watch, keeps
    re-rendering until interrupted (Ctrl+C).

    Examples:\n

        $ cvgen generate jane-doe --lang fr

        $ cvgen generate jane-doe --template keyteo_full --timeout 30
    """
    settings = load_settings()
    log_file = _start_session("generate", settings)
    pipeline = DocumentPipeline(settings)

    try:
        request = pipeline.request(person, lang=lang, template=template)
        typer.secho(
            f"\nGenerating: {request.person} ({request.template.value}, {request.lang})",
            fg=typer.colors.BLUE,
            bold=True,
        )

        if watch:
            stop_event = threading.Event()
            _install_stop_handlers(stop_event)
            summary = pipeline.watch(
                request,
                stop_event=stop_event,
                policy=WatchPolicy.CONTINUE if keep_going else WatchPolicy.STOP,
                timeout=timeout,
                on_render=_report_render,
            )
            typer.echo(f"\nWatch ended: {summary.renders} renders, {len(summary.failures)} failures")
        else:
            result = pipeline.generate(request, timeout=timeout)
            typer.secho("✓ Generation succeeded", fg=typer.colors.GREEN, bold=True)
            typer.echo(f"  PDF: {display_path(result.pdf_path)}")
            if result.page_count is not None:
                typer.echo(f"  Pages: {result.page_count}")
            for warning in result.warnings:
                typer.secho(f"  Warning: {warning}", fg=typer.colors.YELLOW)
    except GenerationError as e:
        typer.echo(f"  Log: {display_path(log_file)}", err=True)
        _fail(e)

    typer.echo(f"  Log: {display_path(log_file)}")


@app.command("create")
def create_command(
    person: Annotated[str, typer.Argument(help="Person name (e.g. 'Jane Doe')")],
):
    """
    Scaffold a new person directory with starter files.

    Examples:\n

        $ cvgen create "Jane Doe"     # Creates data/jane-doe/
    """
    settings = load_settings()
    try:
        directory = create_person(settings.data_root, settings.templates_root, person)
    except GenerationError as e:
        _fail(e)

    typer.secho(f"✓ Created {display_path(directory)}", fg=typer.colors.GREEN, bold=True)
    typer.echo("  Add profile.png, then edit cv_params.toml and experiences_*.typ")


@app.command("list")
def list_command():
    """List persons that have profile data."""
    settings = load_settings()
    persons = list_persons(settings.data_root)
    if not persons:
        typer.secho(f"No persons found in {display_path(settings.data_root)}", fg=typer.colors.YELLOW)
        return

    typer.secho(f"\n{len(persons)} person(s):", fg=typer.colors.BLUE, bold=True)
    for person in persons:
        typer.echo(f"  {person}")


@app.command("list-templates")
def list_templates_command():
    """List template variants available in the template root."""
    settings = load_settings()
    variants = list_variants(settings.templates_root)

    typer.secho("\nTemplates:", fg=typer.colors.BLUE, bold=True)
    for variant in variants:
        line = f"  {variant.name:<12} {variant.description}"
        if not variant.available:
            line += f" (missing {variant.template_file})"
        typer.echo(line)


@app.command("server")
def server_command(
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port to bind")] = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Interface to bind")] = None,
):
    """
    Run the HTTP API.

    Examples:\n

        $ cvgen server --port 4002
    """
    import uvicorn

    from cvgen.api.app import create_app

    settings = load_settings(port=port, host=host)
    _start_session("server", settings)
    typer.secho(f"\nServing on http://{settings.host}:{settings.port}", fg=typer.colors.BLUE, bold=True)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    app()
