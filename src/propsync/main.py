import json
import typer
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from propsync import __version__
from propsync.codegen.generator import CodeGenerator
from propsync.config import get_sync_config
from propsync.dom.nodes import LiveDocument
from propsync.exceptions import PropSyncError
from propsync.logging_config import logger, reset_logging, setup_logging
from propsync.patcher.writer import SourceWriter
from propsync.registry.registry import ElementRegistry
from propsync.registry.scanner import CustomElementScanner
from propsync.schemas import Snapshot, SnapshotNode
from propsync.snapshot.serializer import SnapshotSerializer
from propsync.sync.pipeline import SourceSynchronizer
from propsync.user_config import get_user_config

app = typer.Typer(help="Synchronize visual edits of html-props components back into source.")
console = Console()


@app.callback()
def global_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress console logging."),
):
    """
    propsync command line. Reads and writes component sources offline.
    """
    reset_logging()
    setup_logging(level="DEBUG" if verbose else "WARNING", suppress_console=quiet or None)


def _load_snapshot(path: Path) -> List[SnapshotNode]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"nodes": data}
    return Snapshot.model_validate(data).nodes


def _build_registry(config: dict, registry_dirs: Optional[List[Path]]) -> ElementRegistry:
    registry = ElementRegistry(config["shared_module"])
    directories = list(registry_dirs or [])
    if not directories:
        directories = [Path(d) for d in get_user_config().get("registry.directories", [])]
    scanner = CustomElementScanner(registry)
    for directory in directories:
        scanner.scan(directory)
    return registry


@app.command()
def version():
    """
    Prints the current version of propsync.
    """
    typer.echo(f"propsync v{__version__}")


@app.command()
def snapshot(
    markup_file: Path = typer.Argument(..., help="HTML file to snapshot.", exists=True, dir_okay=False, readable=True),
    component_tag: Optional[str] = typer.Option(
        None, "--component-tag", help="Custom element tag whose children are captured (the authored component)."
    ),
):
    """
    Captures the canonical snapshot of rendered markup as JSON.
    """
    config = get_sync_config()
    document = LiveDocument.from_markup(markup_file.read_text(encoding="utf-8"))
    serializer = SnapshotSerializer(config, transparent_tags=[component_tag] if component_tag else [])
    nodes = serializer.capture(document)
    typer.echo(Snapshot(nodes=nodes).model_dump_json(indent=2))


@app.command()
def generate(
    snapshot_file: Path = typer.Argument(..., help="Snapshot JSON file.", exists=True, dir_okay=False, readable=True),
    component: Optional[str] = typer.Option(None, "--component", "-c", help="Class name of the authored component."),
    authored: Optional[Path] = typer.Option(None, "--authored", help="File the code is meant for (relative imports)."),
    registry_dir: Optional[List[Path]] = typer.Option(
        None, "--registry-dir", "-r", help="Directory to scan for custom elements. Can be used multiple times."
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
):
    """
    Generates import statements and construction code from a snapshot.
    """
    config = get_sync_config()
    registry = _build_registry(config, registry_dir)
    generator = CodeGenerator(registry, config)
    code = generator.generate(
        _load_snapshot(snapshot_file),
        component_symbol=component,
        authored_path=str(authored) if authored else None,
    )

    if json_output:
        typer.echo(json.dumps(code.model_dump(), indent=2))
        return

    text = "\n".join(code.imports + ([""] if code.imports else []) + ["return ["] + [
        config["indent_unit"] + line for line in code.body_lines
    ] + ["];"])
    console.print(Syntax(text, "typescript", theme="ansi_dark"))
    for tag in code.unresolved:
        console.print(f"[yellow]Skipped unresolved <{tag}>[/yellow]")


@app.command()
def sync(
    source_file: Path = typer.Argument(..., help="Authored component source to update.", exists=True, dir_okay=False, readable=True),
    snapshot_file: Optional[Path] = typer.Option(None, "--snapshot", "-s", help="Snapshot JSON to write into the source."),
    markup_file: Optional[Path] = typer.Option(None, "--markup", "-m", help="Rendered HTML to snapshot and write into the source."),
    registry_dir: Optional[List[Path]] = typer.Option(
        None, "--registry-dir", "-r", help="Directory to scan for custom elements. Can be used multiple times."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the diff without writing."),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
):
    """
    Rewrites the generated imports and render body of a component source.
    """
    if (snapshot_file is None) == (markup_file is None):
        console.print("[red]Pass exactly one of --snapshot or --markup.[/red]")
        raise typer.Exit(code=2)

    config = get_sync_config(source_file.resolve().parent)
    registry = _build_registry(config, registry_dir)
    writer = SourceWriter()

    try:
        synchronizer = SourceSynchronizer(registry, config=config, authored_path=str(source_file.resolve()))
    except PropSyncError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    original = writer.read(source_file)
    if snapshot_file is not None:
        result = synchronizer.synchronize_snapshot(original, _load_snapshot(snapshot_file))
    else:
        document = LiveDocument.from_markup(markup_file.read_text(encoding="utf-8"))
        result = synchronizer.synchronize(original, document)

    diff = writer.unified_diff(str(source_file), original, result.source)
    written = False
    if result.success and not dry_run and result.source != original:
        written = writer.write(source_file, original, result.source)

    if json_output:
        payload = result.model_dump()
        payload.update({"diff": diff, "written": written})
        typer.echo(json.dumps(payload, indent=2))
    else:
        if result.success:
            console.print(Syntax(diff or "(no changes)", "diff", theme="ansi_dark"))
            if written:
                console.print(f"[green]Updated {source_file}[/green]")
        else:
            for error in result.errors:
                console.print(f"[red]{error}[/red]")

    if not result.success:
        logger.warning(f"{source_file} left unchanged")
        raise typer.Exit(code=1)


@app.command()
def scan(
    directory: Path = typer.Argument(
        ".", help="The directory to scan.", exists=True, file_okay=False, readable=True
    ),
    no_gitignore: bool = typer.Option(False, "--no-gitignore", help="Do not respect .gitignore files."),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
):
    """
    Lists the custom elements defined under a directory.
    """
    scanner = CustomElementScanner(respect_gitignore=not no_gitignore)
    registry = scanner.scan(directory)
    entries = registry.custom_entries()

    if json_output:
        typer.echo(json.dumps([e.model_dump() for e in entries], indent=2))
        return

    table = Table(title=f"Custom elements in '{directory}'")
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Symbol", style="green")
    table.add_column("Defined in", style="magenta")
    for entry in entries:
        table.add_row(entry.tag, entry.symbol, entry.origin_path or "")
    console.print(table)
    console.print(f"Found [bold blue]{len(entries)}[/bold blue] custom elements.")


if __name__ == "__main__":
    app()
