"""Name sanitization for graph identifiers.

Every file name and symbol name goes through :class:`NameSanitizer` before it
is interned. The sanitizer either returns a canonical identifier that is safe
to emit in DOT output or ``None`` when the name is known link-time noise and
must not produce any node or edge.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

# Link-time artifacts with no dependency meaning
IGNORED_NAMES: FrozenSet[str] = frozenset({"", "_GLOBAL_OFFSET_TABLE_"})

# .LC0, .LC1, ... are anonymous constant pool labels
IGNORED_PREFIXES = (".LC",)

OBJECT_SUFFIX = ".o"
PATH_SEPARATOR = "/"

DEFAULT_RESERVED_UNDERSCORES = 1

_TRANSLATION = str.maketrans({"-": "_", ".": "_"})


class NameSanitizer:
    """Map raw file or symbol names to canonical DOT identifiers.

    Rules are applied in order:

    1. Reject ``""``, ``"_GLOBAL_OFFSET_TABLE_"`` and any extra ignored name.
    2. Reject names starting with ``.LC``.
    3. Reject names starting with ``reserved_underscores`` underscores
       (compiler/linker reserved). ``0`` disables the rule.
    4. Drop a trailing ``.o``.
    5. Keep only the part after the last ``/``.
    6. Replace ``-`` and ``.`` with ``_``.

    The sanitizer holds no mutable state, so equal inputs always give equal
    outputs.
    """

    def __init__(
        self,
        reserved_underscores: int = DEFAULT_RESERVED_UNDERSCORES,
        extra_ignored_names: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize sanitizer.

        Args:
            reserved_underscores: Number of leading underscores marking a
                reserved name (1 or 2 in practice, 0 disables the rule).
            extra_ignored_names: Additional exact names to reject.

        Raises:
            ValueError: If ``reserved_underscores`` is negative.
        """
        if reserved_underscores < 0:
            raise ValueError(
                f"reserved_underscores must be >= 0, got {reserved_underscores}"
            )
        self.reserved_underscores = reserved_underscores
        self.reserved_prefix = "_" * reserved_underscores
        self.ignored_names = IGNORED_NAMES | frozenset(extra_ignored_names or ())

    def is_rejected(self, name: str) -> bool:
        """Return True when ``name`` is noise that must be skipped."""
        if name in self.ignored_names:
            return True
        if name.startswith(IGNORED_PREFIXES):
            return True
        if self.reserved_prefix and name.startswith(self.reserved_prefix):
            return True
        return False

    def sanitize(self, name: str) -> Optional[str]:
        """Return the canonical identifier for ``name`` or None if rejected.

        Args:
            name: Raw file path or symbol name.

        Returns:
            Optional[str]: Canonical identifier, or None when rejected.
        """
        if self.is_rejected(name):
            return None

        return to_identifier(name)

    def __repr__(self) -> str:
        return f"NameSanitizer(reserved_underscores={self.reserved_underscores})"


def to_identifier(name: str) -> str:
    """Apply the rewriting rules (suffix, basename, separators) without rejection."""
    if name.endswith(OBJECT_SUFFIX):
        name = name[: -len(OBJECT_SUFFIX)]

    name = name.rsplit(PATH_SEPARATOR, 1)[-1]

    return name.translate(_TRANSLATION)


def sanitize_name(
    name: str, reserved_underscores: int = DEFAULT_RESERVED_UNDERSCORES
) -> Optional[str]:
    """Sanitize a single name with default ignore rules."""
    return NameSanitizer(reserved_underscores).sanitize(name)
