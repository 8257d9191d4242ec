"""
ADR Reference Resolver
----------------------
Turns textual pointers such as "ADR-0005" or "Replaced by [ADR-0012](0012-x.md)"
into record ids within the owning repository.

References are always resolved against the *current* repository: a mention
of another repository's decision resolves to an id inside this one.
"""
from __future__ import annotations

import re
from typing import Optional

_REFERENCE_PATTERN = re.compile(r"ADR-(\d{4})")


def parse_adr_reference(reference: str, collection_name: str) -> Optional[str]:
    """Return ``"{collection_name}_{NNNN}"`` for the first ``ADR-NNNN`` mention, else None."""
    if not reference or not reference.strip():
        return None

    match = _REFERENCE_PATTERN.search(reference)
    if match is None:
        return None
    return f"{collection_name}_{match.group(1)}"
