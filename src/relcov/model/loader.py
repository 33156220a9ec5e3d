"""
relcov.model.loader - Load authorization models from files.

JSON files use the OpenFGA authorization model shape (camelCase or
snake_case userset keys, optionally wrapped in ``authorization_model``).
Any other file is parsed as DSL.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from relcov.model.dsl import parse_dsl
from relcov.model.rewrite import (
    ComputedUserset,
    Difference,
    Intersection,
    RelationReference,
    Rewrite,
    This,
    TupleToUserset,
    Union,
)
from relcov.model.schema import AuthorizationModel, ModelParseError, TypeDefinition


def load_model(path: Path) -> AuthorizationModel:
    """Load a model file, choosing the format from the file suffix.

    Args:
        path: Path to a ``.json`` model or a DSL (``.fga``/``.openfga``) model.

    Returns:
        The parsed model.

    Raises:
        OSError: If the file cannot be read.
        ModelParseError: If the content is not a valid model.
    """
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return parse_json_model(content)
    return parse_dsl(content)


def parse_model_text(content: str) -> AuthorizationModel:
    """Parse model text whose format is not known from a file name."""
    if content.lstrip().startswith("{"):
        return parse_json_model(content)
    return parse_dsl(content)


def parse_json_model(content: str) -> AuthorizationModel:
    """Parse an OpenFGA JSON model."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ModelParseError(f"invalid JSON: {e.msg}", e.lineno) from e
    return model_from_dict(data)


def model_from_dict(data: dict[str, Any]) -> AuthorizationModel:
    """Build an AuthorizationModel from its JSON dictionary form."""
    if not isinstance(data, dict):
        raise ModelParseError("model must be a JSON object")
    if "authorization_model" in data:
        data = data["authorization_model"]

    type_defs = data.get("type_definitions", data.get("typeDefinitions"))
    if not isinstance(type_defs, list):
        raise ModelParseError("model has no 'type_definitions' list")

    model = AuthorizationModel(schema_version=str(data.get("schema_version", "1.1")))
    for raw_type in type_defs:
        if not isinstance(raw_type, dict) or not raw_type.get("type"):
            raise ModelParseError("type definition without a 'type' name")
        type_name = raw_type["type"]
        if model.find_type(type_name) is not None:
            raise ModelParseError(f"duplicate type '{type_name}'")

        metadata = (raw_type.get("metadata") or {}).get("relations") or {}
        type_def = TypeDefinition(type=type_name)
        for relation_name, userset in (raw_type.get("relations") or {}).items():
            related = _directly_related(metadata.get(relation_name) or {})
            type_def.relations[relation_name] = _userset_to_rewrite(
                userset, related, f"{type_name}#{relation_name}"
            )
        model.type_definitions.append(type_def)

    return model


def _directly_related(relation_metadata: dict[str, Any]) -> tuple[RelationReference, ...]:
    raw = relation_metadata.get(
        "directly_related_user_types", relation_metadata.get("directlyRelatedUserTypes", [])
    )
    references = []
    for entry in raw or []:
        references.append(
            RelationReference(
                type=entry.get("type", ""),
                relation=entry.get("relation") or None,
                wildcard="wildcard" in entry,
                condition=entry.get("condition") or None,
            )
        )
    return tuple(references)


def _get(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _userset_to_rewrite(
    userset: Any, related: tuple[RelationReference, ...], where: str
) -> Rewrite | None:
    if not userset:
        return None
    if not isinstance(userset, dict):
        raise ModelParseError(f"{where}: userset must be an object")

    if "this" in userset:
        return This(directly_related=related)

    computed = _get(userset, "computedUserset", "computed_userset")
    if computed is not None:
        relation = computed.get("relation")
        if not relation:
            raise ModelParseError(f"{where}: computedUserset without a relation")
        return ComputedUserset(relation=relation)

    ttu = _get(userset, "tupleToUserset", "tuple_to_userset")
    if ttu is not None:
        tupleset = (ttu.get("tupleset") or {}).get("relation")
        target = (_get(ttu, "computedUserset", "computed_userset") or {}).get("relation")
        if not tupleset or not target:
            raise ModelParseError(f"{where}: incomplete tupleToUserset")
        return TupleToUserset(tupleset=tupleset, computed_relation=target)

    for key, kind in (("union", Union), ("intersection", Intersection)):
        if key in userset:
            children = (userset[key] or {}).get("child") or []
            return kind(
                children=tuple(
                    child
                    for child in (_userset_to_rewrite(c, related, where) for c in children)
                    if child is not None
                )
            )

    if "difference" in userset:
        difference = userset["difference"] or {}
        base = _userset_to_rewrite(difference.get("base"), related, where)
        subtract = _userset_to_rewrite(difference.get("subtract"), related, where)
        if base is None or subtract is None:
            raise ModelParseError(f"{where}: difference requires base and subtract")
        return Difference(base=base, subtract=subtract)

    raise ModelParseError(f"{where}: unknown userset keys {sorted(userset)}")


__all__ = [
    "load_model",
    "parse_model_text",
    "parse_json_model",
    "model_from_dict",
]
