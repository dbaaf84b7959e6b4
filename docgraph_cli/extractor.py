"""Pattern-based reference extraction over raw artifact text.

No syntax tree is built. Imports, markdown links, ``@see``/``@link`` tags
and ``documents `path``` annotations are found with regular expressions, so
a miss only means fewer edges for that file. Nothing here raises on odd
input.

Fenced code blocks in markdown are scanned like any other text: an
illustrative ``import`` inside a fence counts as a real import.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

ES_IMPORT_RE = re.compile(r"""import\s+.*?\s+from\s+['"]([^'"]+)['"]""")
REQUIRE_RE = re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)""")
MARKDOWN_LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")
SEE_LINK_RE = re.compile(r"@(?:see|link)\s+(\S+)")
ANNOTATION_RE = re.compile(r"(?:documents|describes|covers)\s+`([^`]+)`", re.IGNORECASE)

# Module specifiers are usually written without their extension.
IMPORT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".json")


@dataclass
class ExtractedReferences:
    imports: List[str] = field(default_factory=list)
    doc_references: List[str] = field(default_factory=list)
    annotations: List[str] = field(default_factory=list)


def resolve_path(base: str, relative: str) -> str:
    """Resolve *relative* against *base* inside the repository namespace.

    The last segment of *base* is treated as a file name and dropped when it
    contains a dot. ``..`` above the root is ignored.
    """
    parts = [p for p in base.split("/") if p]
    if parts and "." in parts[-1]:
        parts.pop()
    for segment in relative.split("/"):
        if segment == "..":
            if parts:
                parts.pop()
        elif segment and segment != ".":
            parts.append(segment)
    return "/".join(parts)


def containing_dir(file_path: str) -> str:
    if "/" not in file_path:
        return ""
    return file_path.rsplit("/", 1)[0]


def parse_imports(content: Optional[str], file_path: str) -> List[str]:
    """Relative ES ``import``/``require`` targets resolved to repo paths."""
    if not content:
        return []
    base = containing_dir(file_path) + "/"
    imports: List[str] = []
    for pattern in (ES_IMPORT_RE, REQUIRE_RE):
        for match in pattern.finditer(content):
            spec = match.group(1)
            if spec and spec.startswith("."):
                imports.append(resolve_path(base, spec))
    return imports


def find_doc_references(content: Optional[str]) -> List[str]:
    """Markdown link targets and ``@see``/``@link`` tokens, de-duplicated."""
    if not content:
        return []
    refs: List[str] = []
    for match in MARKDOWN_LINK_RE.finditer(content):
        href = match.group(2).strip()
        if not href or href.startswith("http") or href.startswith("#"):
            continue
        href = href.split("#", 1)[0]
        if href:
            refs.append(href)
    for match in SEE_LINK_RE.finditer(content):
        refs.append(match.group(1))
    return _dedupe(refs)


def find_annotations(content: Optional[str]) -> List[str]:
    """Paths named by ``documents|describes|covers `path``` declarations."""
    if not content:
        return []
    return [m.group(1).strip() for m in ANNOTATION_RE.finditer(content) if m.group(1).strip()]


def extract_references(file_path: str, content: Optional[str]) -> ExtractedReferences:
    return ExtractedReferences(
        imports=parse_imports(content, file_path),
        doc_references=find_doc_references(content),
        annotations=find_annotations(content),
    )


def is_explicitly_relative(ref: str) -> bool:
    return ref.startswith("./") or ref.startswith("../")


def import_candidates(target: str) -> List[str]:
    """Paths an extension-less module specifier may refer to, best first."""
    candidates = [target]
    candidates.extend(target + ext for ext in IMPORT_EXTENSIONS)
    candidates.extend(f"{target}/index{ext}" for ext in IMPORT_EXTENSIONS)
    return candidates


def match_import(target: str, known_paths: Set[str]) -> Optional[str]:
    for candidate in import_candidates(target):
        if candidate in known_paths:
            return candidate
    return None


def match_reference(
    ref: str,
    source_path: str,
    known_paths: Set[str],
    ordered_paths: Iterable[str],
) -> Optional[str]:
    """Find the known path a doc reference points at.

    Explicitly relative references are resolved against *source_path* and
    must match exactly. Anything else is matched as a path suffix on a
    segment boundary, first known path in document order wins.
    """
    if is_explicitly_relative(ref):
        resolved = resolve_path(source_path, ref)
        return resolved if resolved in known_paths else None

    needle = ref.lstrip("/")
    if not needle:
        return None
    if needle in known_paths:
        return needle
    suffix = "/" + needle
    for path in ordered_paths:
        if path.endswith(suffix):
            return path
    return None


def _dedupe(items: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
