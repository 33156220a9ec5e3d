"""
relcov.model.dsl - Parser for the authorization model DSL.

Supports the single-file subset of the OpenFGA modeling language:

    model
      schema 1.1

    type user

    type document
      relations
        define owner: [user]
        define viewer: [user, user:*, group#member] or owner or viewer from parent
        define can_view: viewer but not blocked

    condition non_expired(ts: timestamp) {
      ts < request.now
    }

Condition bodies are skipped; modular models (``module``, ``extend type``)
are rejected.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

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

COMMENT_PATTERN = re.compile(r"(^|\s)#.*$")
DEFINE_PATTERN = re.compile(r"^define\s+([A-Za-z_][\w\-]*)\s*:\s*(.+)$")
TYPE_PATTERN = re.compile(r"^type\s+([A-Za-z_][\w\-]*)$")
SCHEMA_PATTERN = re.compile(r"^schema\s+(\S+)$")
TOKEN_PATTERN = re.compile(r"\s*(\[[^\]]*\]|\(|\)|[A-Za-z_][\w\-]*)")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][\w\-]*$")

KEYWORDS = {"or", "and", "but", "not", "from"}


def parse_dsl(text: str) -> AuthorizationModel:
    """Parse DSL text into an AuthorizationModel.

    Args:
        text: Model source in the DSL.

    Returns:
        The parsed model.

    Raises:
        ModelParseError: If the text is not a valid model.
    """
    model = AuthorizationModel()
    current: Optional[TypeDefinition] = None
    in_relations = False
    seen_model = False
    condition_depth = 0

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = COMMENT_PATTERN.sub("", raw_line).strip()

        # Condition bodies are CEL expressions; skip until braces balance
        if condition_depth > 0:
            condition_depth += line.count("{") - line.count("}")
            continue

        if not line:
            continue

        if line == "model":
            if seen_model:
                raise ModelParseError("duplicate 'model' header", line_number)
            seen_model = True
            continue

        schema_match = SCHEMA_PATTERN.match(line)
        if schema_match:
            model.schema_version = schema_match.group(1)
            continue

        type_match = TYPE_PATTERN.match(line)
        if type_match:
            type_name = type_match.group(1)
            if model.find_type(type_name) is not None:
                raise ModelParseError(f"duplicate type '{type_name}'", line_number)
            current = TypeDefinition(type=type_name)
            model.type_definitions.append(current)
            in_relations = False
            continue

        if line == "relations":
            if current is None:
                raise ModelParseError("'relations' outside of a type", line_number)
            in_relations = True
            continue

        define_match = DEFINE_PATTERN.match(line)
        if define_match:
            if current is None or not in_relations:
                raise ModelParseError("'define' outside of a relations block", line_number)
            relation_name, expression = define_match.groups()
            if relation_name in current.relations:
                raise ModelParseError(
                    f"duplicate relation '{relation_name}' on type '{current.type}'",
                    line_number,
                )
            current.relations[relation_name] = parse_expression(expression, line_number)
            continue

        if line.startswith("condition "):
            current = None
            in_relations = False
            condition_depth = line.count("{") - line.count("}")
            continue

        if line.startswith("module ") or line.startswith("extend "):
            raise ModelParseError("modular models are not supported", line_number)

        raise ModelParseError(f"unexpected input: {line!r}", line_number)

    if condition_depth > 0:
        raise ModelParseError("unterminated condition block")

    if not seen_model and not model.type_definitions:
        raise ModelParseError("no model definition found")

    return model


def parse_expression(expression: str, line_number: Optional[int] = None) -> Rewrite:
    """Parse a single relation definition expression.

    Args:
        expression: Text after ``define name:``.
        line_number: Line number for error reporting.

    Returns:
        The rewrite expression.

    Raises:
        ModelParseError: On malformed expressions.
    """
    tokens = _tokenize(expression, line_number)
    parser = _ExpressionParser(tokens, line_number)
    result = parser.parse_expression()
    if not parser.at_end():
        raise ModelParseError(f"unexpected token '{parser.peek()}'", line_number)
    return result


def _tokenize(expression: str, line_number: Optional[int]) -> List[str]:
    tokens: List[str] = []
    pos = 0
    stripped = expression.rstrip()
    while pos < len(stripped):
        match = TOKEN_PATTERN.match(stripped, pos)
        if not match:
            raise ModelParseError(
                f"invalid character in expression: {stripped[pos:].strip()!r}", line_number
            )
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


def parse_type_restrictions(text: str, line_number: Optional[int] = None) -> Tuple[RelationReference, ...]:
    """Parse the inside of ``[user, group#member, user:* with cond]``."""
    references = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            raise ModelParseError("empty type restriction", line_number)

        condition = None
        if " with " in part:
            part, condition = (p.strip() for p in part.split(" with ", 1))

        wildcard = False
        relation = None
        if part.endswith(":*"):
            type_name = part[:-2]
            wildcard = True
        elif "#" in part:
            type_name, relation = part.split("#", 1)
        else:
            type_name = part

        for name in (type_name, relation, condition):
            if name is not None and not IDENTIFIER_PATTERN.match(name):
                raise ModelParseError(f"invalid type restriction: {part!r}", line_number)

        references.append(
            RelationReference(
                type=type_name, relation=relation, wildcard=wildcard, condition=condition
            )
        )
    return tuple(references)


class _ExpressionParser:
    """Recursive descent over expression tokens.

    Operators at one nesting level must be homogeneous: ``a or b and c``
    requires parentheses. ``but not`` applies to everything before it and
    must come last.
    """

    def __init__(self, tokens: List[str], line_number: Optional[int]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._line = line_number

    def peek(self) -> Optional[str]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _next(self) -> str:
        token = self.peek()
        if token is None:
            raise ModelParseError("unexpected end of expression", self._line)
        self._pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token != expected:
            raise ModelParseError(f"expected '{expected}', found '{token}'", self._line)

    def parse_expression(self) -> Rewrite:
        children = [self._parse_term()]
        operator = None

        while self.peek() in ("or", "and"):
            keyword = self._next()
            if operator is not None and keyword != operator:
                raise ModelParseError(
                    "cannot mix 'or' and 'and' without parentheses", self._line
                )
            operator = keyword
            children.append(self._parse_term())

        result: Rewrite
        if operator == "or":
            result = Union(children=tuple(children))
        elif operator == "and":
            result = Intersection(children=tuple(children))
        else:
            result = children[0]

        if self.peek() == "but":
            self._next()
            self._expect("not")
            result = Difference(base=result, subtract=self._parse_term())
            if self.peek() in ("or", "and", "but"):
                raise ModelParseError(
                    "'but not' must be the last operator; use parentheses", self._line
                )

        return result

    def _parse_term(self) -> Rewrite:
        token = self._next()

        if token == "(":
            inner = self.parse_expression()
            self._expect(")")
            return inner

        if token.startswith("["):
            return This(directly_related=parse_type_restrictions(token[1:-1], self._line))

        if token in KEYWORDS or token == ")":
            raise ModelParseError(f"unexpected '{token}'", self._line)

        if self.peek() == "from":
            self._next()
            tupleset = self._next()
            if tupleset in KEYWORDS or not IDENTIFIER_PATTERN.match(tupleset):
                raise ModelParseError(f"invalid tupleset relation '{tupleset}'", self._line)
            return TupleToUserset(tupleset=tupleset, computed_relation=token)

        return ComputedUserset(relation=token)


__all__ = [
    "parse_dsl",
    "parse_expression",
    "parse_type_restrictions",
]
