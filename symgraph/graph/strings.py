"""String interning for node and symbol identity."""

from __future__ import annotations

from typing import Dict, List, Optional


class StringTable:
    """Bidirectional map between canonical names and integer ids.

    File names and symbol names share one table, so a file and a symbol that
    sanitize to the same string get the same id. Ids start at 0, are handed
    out in first-seen order and are never reused.
    """

    def __init__(self) -> None:
        self._ids: Dict[str, int] = {}
        self._strings: List[str] = []

    def intern(self, value: str) -> int:
        """Return the id of ``value``, allocating one on first sight.

        Args:
            value: Canonical string.

        Returns:
            int: Stable id for the string.
        """
        existing = self._ids.get(value)
        if existing is not None:
            return existing

        new_id = len(self._strings)
        self._strings.append(value)
        self._ids[value] = new_id
        return new_id

    def resolve(self, string_id: int) -> str:
        """Return the string interned under ``string_id``.

        Raises:
            KeyError: If the id was never returned by :meth:`intern`.
        """
        if 0 <= string_id < len(self._strings):
            return self._strings[string_id]
        raise KeyError(string_id)

    def get(self, value: str) -> Optional[int]:
        """Return the id of ``value`` without interning it."""
        return self._ids.get(value)

    def __contains__(self, value: object) -> bool:
        return value in self._ids

    def __len__(self) -> int:
        return len(self._strings)
