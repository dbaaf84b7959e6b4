"""Typer-based CLI for DocGraph documentation impact analysis."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from . import __version__, config
from .cli_groups import analyze_grp, config_grp, project_grp
from .config_manager import load_graph_config, save_graph_config
from .documents import FilesystemDocumentStore
from .engine import DocGraphEngine
from .graph_export import EXPORT_FORMATS, write_export
from .storage import ProjectManager, SQLiteSnapshotStore

console = Console()

app = typer.Typer(
    help="🧭 DocGraph CLI — documentation dependency graph & blast-radius analysis.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(project_grp, name="project")
app.add_typer(analyze_grp, name="analyze")
app.add_typer(config_grp, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"DocGraph CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """DocGraph CLI: find documentation affected by code changes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _project_name_from_path(project_path: Path) -> str:
    return project_path.resolve().name.replace(" ", "_")


def _engine_for(pm: ProjectManager, project: str) -> Tuple[DocGraphEngine, SQLiteSnapshotStore]:
    snapshots = SQLiteSnapshotStore(pm.snapshot_db_path(project))
    documents = FilesystemDocumentStore(pm.source_root)
    return DocGraphEngine(documents, snapshots), snapshots


def _open_current_engine(pm: ProjectManager) -> Tuple[str, DocGraphEngine, SQLiteSnapshotStore]:
    project = pm.get_current_project()
    if not project:
        raise typer.BadParameter("No project loaded. Use 'dg project load <name>' or run 'dg project index <path>'.")
    if not pm.project_dir(project).exists():
        raise typer.BadParameter(f"Loaded project '{project}' does not exist in memory.")
    engine, snapshots = _engine_for(pm, project)
    return project, engine, snapshots


# ===================================================================
# dg project ...
# ===================================================================

@project_grp.command("index")
def index_project(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Path to repository checkout."),
    project_name: Optional[str] = typer.Option(None, "--name", "-n", help="Explicit memory name for project."),
):
    """Register a repository and build its dependency graph."""
    pm = ProjectManager()
    resolved_path = project_path.resolve()
    name = project_name or _project_name_from_path(resolved_path)
    pm.create_or_get_project(name)
    pm.set_metadata(name, {
        **pm.get_metadata(name),
        "project_name": name,
        "source_path": str(resolved_path),
        "indexed_at": datetime.now(timezone.utc).isoformat(),
    })

    engine, snapshots = _engine_for(pm, name)
    graph = engine.build(name)
    snapshots.close()
    pm.set_current_project(name)

    typer.echo(f"Indexed '{resolved_path}' as project '{name}'.")
    typer.echo(f"Nodes: {graph.node_count} | Edges: {graph.edge_count}")


@project_grp.command("list")
def list_projects():
    """List all registered repositories."""
    pm = ProjectManager()
    projects = pm.list_projects()
    current = pm.get_current_project()

    if not projects:
        typer.echo("No projects indexed yet.")
        raise typer.Exit(code=0)

    for p in projects:
        marker = "*" if p == current else " "
        typer.echo(f"{marker} {p}")


@project_grp.command("load")
def load_project(project_name: str = typer.Argument(..., help="Name of project memory to load.")):
    """Switch active project."""
    pm = ProjectManager()
    if project_name not in pm.list_projects():
        raise typer.BadParameter(f"Project '{project_name}' not found.")
    pm.set_current_project(project_name)
    typer.echo(f"Loaded project '{project_name}'.")


@project_grp.command("unload")
def unload_project():
    """Unload active project without deleting data."""
    pm = ProjectManager()
    pm.unload_project()
    typer.echo("Unloaded active project.")


@project_grp.command("delete")
def delete_project(project_name: str = typer.Argument(..., help="Project memory to delete.")):
    """Delete a project and its cached graph snapshot."""
    pm = ProjectManager()
    deleted = pm.delete_project(project_name)
    if not deleted:
        raise typer.BadParameter(f"Project '{project_name}' not found.")
    if pm.get_current_project() == project_name:
        pm.unload_project()
    typer.echo(f"Deleted project '{project_name}'.")


@project_grp.command("current")
def current_project():
    """Print active project name."""
    pm = ProjectManager()
    current = pm.get_current_project()
    typer.echo(current or "No project loaded")


# ===================================================================
# dg analyze ...
# ===================================================================

@analyze_grp.command("build")
def build(
    as_json: bool = typer.Option(False, "--json", help="Print the full graph as JSON."),
):
    """Rebuild the dependency graph of the current project."""
    pm = ProjectManager()
    project, engine, snapshots = _open_current_engine(pm)
    graph = engine.build(project)
    snapshots.close()

    if as_json:
        typer.echo(json.dumps(graph.to_dict(), indent=2))
        return
    typer.echo(f"Built graph for '{project}'.")
    typer.echo(f"Nodes: {graph.node_count} | Edges: {graph.edge_count}")


@analyze_grp.command("impact")
def impact(
    changed_files: List[str] = typer.Argument(..., help="Repository-relative paths of changed files."),
    pr_number: Optional[int] = typer.Option(None, "--pr", help="Pull request number to tag the result with."),
    as_json: bool = typer.Option(False, "--json", help="Print the blast radius as JSON."),
):
    """Show documentation affected by changes to the given files."""
    pm = ProjectManager()
    project, engine, snapshots = _open_current_engine(pm)
    result = engine.compute_blast_radius(project, changed_files, pr_number=pr_number)
    snapshots.close()

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.affected_docs:
        typer.echo("Affected docs: none found")
    else:
        table = Table(title=f"Blast radius ({len(result.affected_docs)} docs)")
        table.add_column("Doc", style="cyan", overflow="fold")
        table.add_column("Impact")
        table.add_column("Confidence", justify="right")
        table.add_column("Reason", style="dim")
        for doc in result.affected_docs:
            color = "red" if doc.impact_type.value == "direct" else "yellow"
            table.add_row(
                doc.path,
                f"[{color}]{doc.impact_type.value}[/{color}]",
                f"{doc.confidence:.2f}",
                doc.reason,
            )
        console.print(table)
    typer.echo(f"Total impact: {result.total_impact:.2f}")


@analyze_grp.command("broken-refs")
def broken_refs(
    as_json: bool = typer.Option(False, "--json", help="Print findings as JSON."),
):
    """List relative links and imports that point at missing files."""
    pm = ProjectManager()
    project, engine, snapshots = _open_current_engine(pm)
    findings = engine.detect_broken_references(project)
    snapshots.close()

    if as_json:
        typer.echo(json.dumps([f.to_dict() for f in findings], indent=2))
    elif not findings:
        typer.echo("No broken references found.")
    else:
        table = Table(title=f"Broken references ({len(findings)})")
        table.add_column("Source", style="cyan", overflow="fold")
        table.add_column("Target", style="red", overflow="fold")
        table.add_column("Type")
        for finding in findings:
            table.add_row(finding.source, finding.target, finding.type)
        console.print(table)

    if findings:
        raise typer.Exit(code=1)


@analyze_grp.command("deps")
def deps(
    node_path: str = typer.Argument(..., help="Repository-relative path of the artifact."),
):
    """Show what an artifact depends on and what depends on it."""
    pm = ProjectManager()
    project, engine, snapshots = _open_current_engine(pm)
    result = engine.get_node_dependencies(project, node_path)
    snapshots.close()

    if not result.depends_on and not result.depended_by:
        typer.echo(f"No dependencies recorded for '{node_path}'.")
        return

    typer.echo(f"{node_path} depends on:")
    for node in result.depends_on:
        typer.echo(f"- {node.path} ({node.kind.value})")
    typer.echo(f"{node_path} is depended on by:")
    for node in result.depended_by:
        typer.echo(f"- {node.path} ({node.kind.value})")


@analyze_grp.command("export")
def export(
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Export format: dot, cytoscape or json."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path (stdout if omitted)."),
):
    """Export the dependency graph to DOT, Cytoscape JSON or raw JSON."""
    fmt = (fmt or config.EXPORT_FORMAT).lower()
    if fmt not in EXPORT_FORMATS:
        raise typer.BadParameter(f"Format must be one of: {', '.join(EXPORT_FORMATS)}")

    pm = ProjectManager()
    project, engine, snapshots = _open_current_engine(pm)
    result = engine.export(project, fmt)
    snapshots.close()

    if output is None:
        typer.echo(result.content)
        return
    write_export(result, output)
    typer.echo(f"Exported graph to {output} ({result.node_count} nodes, {result.edge_count} edges)")


@analyze_grp.command("snapshot")
def snapshot():
    """Show the cached graph snapshot of the current project."""
    pm = ProjectManager()
    project, _engine, snapshots = _open_current_engine(pm)
    stored = snapshots.get(project)
    snapshots.close()

    if stored is None:
        typer.echo(f"No snapshot stored for '{project}'. Run 'dg analyze build'.")
        raise typer.Exit(code=1)
    typer.echo(f"Project: {stored.repository_id}")
    typer.echo(f"Nodes: {stored.node_count} | Edges: {stored.edge_count}")
    typer.echo(f"Built at: {stored.built_at.isoformat()}")


# ===================================================================
# dg config ...
# ===================================================================

@config_grp.command("show")
def show_config():
    """Show graph settings."""
    settings = load_graph_config()
    table = Table(title="Graph settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    console.print(table)


@config_grp.command("set")
def set_config(
    max_file_bytes: Optional[int] = typer.Option(None, "--max-file-bytes", help="Skip files larger than this."),
    skip_dirs: Optional[List[str]] = typer.Option(None, "--skip-dir", help="Extra directory name to skip (repeatable)."),
    export_format: Optional[str] = typer.Option(None, "--export-format", help="Default export format."),
):
    """Update graph settings in config.toml."""
    if max_file_bytes is None and not skip_dirs and export_format is None:
        raise typer.BadParameter("Nothing to set. Pass at least one option.")
    try:
        saved = save_graph_config(
            max_file_bytes=max_file_bytes,
            extra_skip_dirs=skip_dirs or None,
            default_export_format=export_format,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    if not saved:
        typer.echo("❌ Failed to write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo("✅ Configuration saved.")


if __name__ == "__main__":
    app()
