"""Map repository paths to graph node kinds by file extension."""

from __future__ import annotations

from typing import Set

from .models import NodeKind

DOC_EXTENSIONS: Set[str] = {"md", "mdx", "rst", "txt", "adoc"}
CONFIG_EXTENSIONS: Set[str] = {"json", "yaml", "yml", "toml"}


def file_extension(path: str) -> str:
    """Lower-cased text after the last dot of the file name, or ``""``."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def classify(path: str) -> NodeKind:
    ext = file_extension(path)
    if ext in DOC_EXTENSIONS:
        return NodeKind.DOC
    if ext in CONFIG_EXTENSIONS:
        return NodeKind.CONFIG
    return NodeKind.CODE
