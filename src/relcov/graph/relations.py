"""Relations - Relation identifiers.

A RelationKey names one declared relation as ``(type, relation)`` and is
the key of the catalog, the dependency graph, and the coverage map.
"""

from __future__ import annotations

from dataclasses import dataclass

KEY_SEPARATOR = "#"


@dataclass(frozen=True, order=True)
class RelationKey:
    """Composite (type, relation) identifier.

    Ordering is by type then relation, which gives reports a stable order.
    """

    type_name: str
    relation: str

    def __str__(self) -> str:
        """Canonical ``<type>#<relation>`` form."""
        return f"{self.type_name}{KEY_SEPARATOR}{self.relation}"

    @classmethod
    def parse(cls, text: str) -> RelationKey:
        """Parse the canonical ``<type>#<relation>`` form.

        Raises:
            ValueError: If the text has no separator.
        """
        type_name, sep, relation = text.partition(KEY_SEPARATOR)
        if not sep or not type_name or not relation:
            raise ValueError(f"Invalid relation key: {text!r}")
        return cls(type_name, relation)


__all__ = [
    "KEY_SEPARATOR",
    "RelationKey",
]
