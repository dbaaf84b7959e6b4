"""Find cross-references that point at artifacts which no longer exist."""

from __future__ import annotations

import logging
from typing import Iterable, List, Set

from .extractor import (
    find_doc_references,
    is_explicitly_relative,
    match_import,
    parse_imports,
    resolve_path,
)
from .models import BrokenReference, SourceDocument

logger = logging.getLogger(__name__)

DOC_REFERENCE = "doc-reference"
IMPORT = "import"


def detect_broken_references(documents: Iterable[SourceDocument]) -> List[BrokenReference]:
    """Flag unresolvable relative doc links and relative imports.

    Only ``./`` and ``../`` doc references are judged. Bare names, anchors
    and URLs may point outside the repository and are left alone.
    """
    documents = list(documents)
    known_paths: Set[str] = {doc.path for doc in documents}
    broken: List[BrokenReference] = []

    for doc in documents:
        for ref in find_doc_references(doc.content):
            if not is_explicitly_relative(ref):
                continue
            if resolve_path(doc.path, ref) not in known_paths:
                broken.append(BrokenReference(source=doc.path, target=ref, type=DOC_REFERENCE))

        for target in parse_imports(doc.content, doc.path):
            if match_import(target, known_paths) is None:
                broken.append(BrokenReference(source=doc.path, target=target, type=IMPORT))

    logger.info("Broken reference scan: %d findings in %d documents", len(broken), len(documents))
    return broken
