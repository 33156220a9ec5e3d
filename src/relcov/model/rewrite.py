"""Rewrite - The relation rewrite expression algebra.

A relation's definition is a small closed algebra:
- This: direct assignment (``[user, group#member]``)
- ComputedUserset: same object, another relation (``viewer``)
- TupleToUserset: relation on a tuple-referenced object (``viewer from parent``)
- Union / Intersection: n-ary ``or`` / ``and``
- Difference: ``base but not subtract``

Expressions are immutable; they are built by the model loaders and only
traversed by the analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union as _Union


@dataclass(frozen=True)
class RelationReference:
    """A type restriction on a directly assignable relation.

    Attributes:
        type: Object type of the related user (e.g., "user", "group").
        relation: Userset relation, for ``group#member`` style references.
        wildcard: True for public access (``user:*``).
        condition: Name of a condition attached with ``with``.
    """

    type: str
    relation: str | None = None
    wildcard: bool = False
    condition: str | None = None

    def __str__(self) -> str:
        if self.wildcard:
            text = f"{self.type}:*"
        elif self.relation:
            text = f"{self.type}#{self.relation}"
        else:
            text = self.type
        if self.condition:
            text += f" with {self.condition}"
        return text


@dataclass(frozen=True)
class This:
    """Direct assignment: the relation is granted by a relationship tuple."""

    directly_related: tuple[RelationReference, ...] = ()


@dataclass(frozen=True)
class ComputedUserset:
    """Reference to another relation on the same object."""

    relation: str


@dataclass(frozen=True)
class TupleToUserset:
    """Reference to ``computed_relation`` on objects related via ``tupleset``."""

    tupleset: str
    computed_relation: str


@dataclass(frozen=True)
class Union:
    children: tuple[Rewrite, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Intersection:
    children: tuple[Rewrite, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Difference:
    base: Rewrite
    subtract: Rewrite


Rewrite = _Union[This, ComputedUserset, TupleToUserset, Union, Intersection, Difference]


def to_dsl(rewrite: Rewrite | None) -> str:
    """Render a rewrite expression back into DSL-like text.

    Used for display in graph output; nested operators are parenthesized.
    """
    if rewrite is None:
        return ""
    if isinstance(rewrite, This):
        return "[" + ", ".join(str(r) for r in rewrite.directly_related) + "]"
    if isinstance(rewrite, ComputedUserset):
        return rewrite.relation
    if isinstance(rewrite, TupleToUserset):
        return f"{rewrite.computed_relation} from {rewrite.tupleset}"
    if isinstance(rewrite, (Union, Intersection)):
        joiner = " or " if isinstance(rewrite, Union) else " and "
        return joiner.join(_nested(child) for child in rewrite.children)
    if isinstance(rewrite, Difference):
        return f"{_nested(rewrite.base)} but not {_nested(rewrite.subtract)}"
    raise TypeError(f"Unknown rewrite type: {type(rewrite).__name__}")


def _nested(rewrite: Rewrite) -> str:
    text = to_dsl(rewrite)
    if isinstance(rewrite, (Union, Intersection, Difference)):
        return f"({text})"
    return text


__all__ = [
    "RelationReference",
    "This",
    "ComputedUserset",
    "TupleToUserset",
    "Union",
    "Intersection",
    "Difference",
    "Rewrite",
    "to_dsl",
]
