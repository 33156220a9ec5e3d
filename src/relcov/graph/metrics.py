"""Coverage metrics data structures.

This module defines the per-relation coverage record:
- CoverageSource: How a relation came to be covered
- RelationCoverage: Coverage flags for one declared relation
- AssertionStats: Accounting of the assertions consumed by a run
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from relcov.graph.relations import RelationKey


class CoverageSource(Enum):
    """Source type for relation coverage.

    - DIRECT: An assertion names the relation
    - INDIRECT: Linked to a directly tested relation by delegation
    - NONE: Not exercised at all
    """

    DIRECT = "direct"
    INDIRECT = "indirect"
    NONE = "none"


@dataclass
class RelationCoverage:
    """Coverage record for one declared relation.

    Created with every flag False. Flags only move from False to True;
    the mark_* methods never clear them.

    Attributes:
        type_name: Object type declaring the relation.
        relation_name: The relation's name.
        tested_directly: An assertion names this relation.
        tested_indirectly: Delegates to, or is delegated to by, a directly
            tested relation.
        has_positive_test: Some direct assertion expects allow.
        has_negative_test: Some direct assertion expects deny.
    """

    type_name: str
    relation_name: str
    tested_directly: bool = False
    tested_indirectly: bool = False
    has_positive_test: bool = False
    has_negative_test: bool = False

    @property
    def key(self) -> RelationKey:
        return RelationKey(self.type_name, self.relation_name)

    @property
    def source(self) -> CoverageSource:
        if self.tested_directly:
            return CoverageSource.DIRECT
        if self.tested_indirectly:
            return CoverageSource.INDIRECT
        return CoverageSource.NONE

    def mark_direct(self, expectation: bool) -> None:
        """Record a direct assertion with the given expected outcome."""
        self.tested_directly = True
        if expectation:
            self.has_positive_test = True
        else:
            self.has_negative_test = True

    def mark_indirect(self) -> None:
        self.tested_indirectly = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "relation": self.relation_name,
            "tested_directly": self.tested_directly,
            "tested_indirectly": self.tested_indirectly,
            "has_positive_test": self.has_positive_test,
            "has_negative_test": self.has_negative_test,
        }


@dataclass
class AssertionStats:
    """How the assertions of a test file were accounted for.

    Attributes:
        checked: Check assertions seen.
        recorded: Check assertions matched to a declared relation.
        missing_tuple: Check assertions without a tuple.
        malformed: Object reference without a ``type:`` prefix.
        unknown: Type/relation not declared in the model.
        list_objects: ListObjects assertions present (not scored).
        list_users: ListUsers assertions present (not scored).
    """

    checked: int = 0
    recorded: int = 0
    missing_tuple: int = 0
    malformed: int = 0
    unknown: int = 0
    list_objects: int = 0
    list_users: int = 0

    @property
    def skipped(self) -> int:
        return self.missing_tuple + self.malformed + self.unknown

    def to_dict(self) -> dict[str, int]:
        return {
            "checked": self.checked,
            "recorded": self.recorded,
            "skipped": self.skipped,
            "missing_tuple": self.missing_tuple,
            "malformed": self.malformed,
            "unknown": self.unknown,
            "list_objects": self.list_objects,
            "list_users": self.list_users,
        }


__all__ = [
    "CoverageSource",
    "RelationCoverage",
    "AssertionStats",
]
