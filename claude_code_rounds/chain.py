"""Parent-chain lookups over a session's entries.

Entries refer to their parent by uuid only. A parent may be missing from the
file (a dangling reference ends the chain) and nothing guarantees the links
are acyclic, so every walk keeps a visited set and a hop cap.
"""

from typing import Iterable, Optional

from .models import MessageType, RawEntry

MAX_CHAIN_HOPS = 100

# Roles that anchor a chain walk
ANCHOR_TYPES = (MessageType.ASSISTANT, MessageType.SYSTEM)


class ChainIndex:
    """uuid -> type and uuid -> parent maps for one entry sequence."""

    def __init__(self, entries: Iterable[RawEntry]):
        self.types: dict[str, str] = {}
        self.parents: dict[str, Optional[str]] = {}
        for entry in entries:
            if entry.uuid:
                self.types[entry.uuid] = entry.type
                self.parents[entry.uuid] = entry.parentUuid

    def __contains__(self, uuid: object) -> bool:
        return uuid in self.types

    def __len__(self) -> int:
        return len(self.types)

    def resolve_ultimate_role(self, start_parent_id: Optional[str]) -> Optional[str]:
        """Walk parent links to the nearest assistant or system ancestor.

        The walk starts at ``start_parent_id`` itself. Returns that
        ancestor's type, or None when the chain ends, revisits an entry, or
        exceeds MAX_CHAIN_HOPS.
        """
        current = start_parent_id
        visited: set[str] = set()
        hops = 0
        while current and hops < MAX_CHAIN_HOPS:
            if current in visited:
                return None
            visited.add(current)

            entry_type = self.types.get(current)
            if entry_type in ANCHOR_TYPES:
                return entry_type

            current = self.parents.get(current)
            hops += 1
        return None
