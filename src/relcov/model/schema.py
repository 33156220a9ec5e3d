"""Schema - Parsed authorization model structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from relcov.model.rewrite import Rewrite


class ModelParseError(ValueError):
    """Raised when a model file cannot be parsed.

    Attributes:
        line: 1-based line number of the offending input, if known.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


@dataclass
class TypeDefinition:
    """An object type and the relations it declares.

    Attributes:
        type: Type name (e.g., "document").
        relations: Mapping of relation name to its rewrite expression.
            A value of None means the relation has no rewrite.
    """

    type: str
    relations: dict[str, Rewrite | None] = field(default_factory=dict)


@dataclass
class AuthorizationModel:
    """A parsed authorization model."""

    type_definitions: list[TypeDefinition] = field(default_factory=list)
    schema_version: str = "1.1"

    def iter_relations(self) -> Iterator[tuple[str, str, Rewrite | None]]:
        """Iterate (type, relation, rewrite) over every declared relation."""
        for type_def in self.type_definitions:
            for relation_name, rewrite in type_def.relations.items():
                yield type_def.type, relation_name, rewrite

    def find_type(self, type_name: str) -> TypeDefinition | None:
        for type_def in self.type_definitions:
            if type_def.type == type_name:
                return type_def
        return None

    def relation_count(self) -> int:
        return sum(len(t.relations) for t in self.type_definitions)


__all__ = [
    "ModelParseError",
    "TypeDefinition",
    "AuthorizationModel",
]
