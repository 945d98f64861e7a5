"""
Caller-owned registry of reference names.

Holds the configured base names plus the names a user has typed or imported
during a session. The parser resolves exact matches to cell references and
the editor offers the same list for autocomplete. Each caller owns its
registry; nothing here is module-level state.
"""

import logging
from typing import Iterable, Iterator, List

logger = logging.getLogger(__name__)


class ReferenceRegistry:
    """Ordered, appendable set of reference names."""

    def __init__(self, base: Iterable[str] = ()):
        self._base: List[str] = []
        self._dynamic: List[str] = []
        self._seen = set()

        for name in base:
            if name and name not in self._seen:
                self._base.append(name)
                self._seen.add(name)

    def add(self, name: str) -> bool:
        """Append a name typed or imported by the user.

        Returns:
            bool: True if the name was new, False for blanks and duplicates.
        """
        if not name or not name.strip() or name in self._seen:
            return False

        self._dynamic.append(name)
        self._seen.add(name)
        logger.debug(f"Registered reference name: {name}")
        return True

    def names(self) -> List[str]:
        """Base names first, then dynamically added names, in insertion order."""
        return self._base + self._dynamic

    def dynamic_names(self) -> List[str]:
        return list(self._dynamic)

    def clear_dynamic(self) -> None:
        """Forget names added since construction; base names are kept."""
        for name in self._dynamic:
            self._seen.discard(name)
        self._dynamic = []

    def __contains__(self, name: object) -> bool:
        return name in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._base) + len(self._dynamic)

    def __repr__(self) -> str:
        return f"ReferenceRegistry(base={len(self._base)}, dynamic={len(self._dynamic)})"


__all__ = ["ReferenceRegistry"]
