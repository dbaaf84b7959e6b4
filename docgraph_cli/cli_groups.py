"""Command hierarchy groups for organized CLI experience.

Provides logical grouping of commands under:
  dg project  — Register, load, and manage repositories
  dg analyze  — Blast radius, broken references, dependencies, export
  dg config   — Graph settings
"""

from __future__ import annotations

import typer

# ── Project management group ─────────────────────────────────
project_grp = typer.Typer(
    help="📂 Projects — index, load, and manage repositories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Analysis group ───────────────────────────────────────────
analyze_grp = typer.Typer(
    help="🔍 Analysis — blast radius, broken references, dependencies, export.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Configuration group ──────────────────────────────────────
config_grp = typer.Typer(
    help="⚙️  Configuration — graph build and export settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
