"""
relcov.assertions - Test file loading.

Reads the YAML test file format used for authorization model tests:

    tests:
      - name: document-viewers
        stages:
          - model: |
              model
                schema 1.1
              ...
            tuples: [...]
            checkAssertions:
              - tuple:
                  object: document:1
                  relation: viewer
                  user: user:anne
                expectation: true
            listObjectsAssertions: [...]
            listUsersAssertions: [...]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, List, Optional

import yaml


class TestFileError(ValueError):
    """Raised when a test file cannot be deserialized."""

    __test__ = False  # Not a pytest test class


@dataclass
class AssertionTuple:
    """The (object, relation, user) triple a check assertion is about."""

    object: str
    relation: str
    user: str = ""


@dataclass
class CheckAssertion:
    """A single check assertion.

    Attributes:
        tuple: The checked tuple, or None when the entry omits it.
        expectation: True when the check is expected to be allowed.
        error_code: Expected error code for checks expected to fail.
        contextual_tuples: Raw contextual tuples (not interpreted).
        context: Raw condition context (not interpreted).
    """

    tuple: Optional[AssertionTuple]
    expectation: bool = False
    error_code: Optional[int] = None
    contextual_tuples: List[Any] = field(default_factory=list)
    context: dict = field(default_factory=dict)


@dataclass
class Stage:
    """One stage of a test: an optional model plus its assertions."""

    model: Optional[str] = None
    tuples: List[Any] = field(default_factory=list)
    check_assertions: List[CheckAssertion] = field(default_factory=list)
    list_objects_assertions: List[Any] = field(default_factory=list)
    list_users_assertions: List[Any] = field(default_factory=list)


@dataclass
class TestCase:
    __test__ = False

    name: str
    stages: List[Stage] = field(default_factory=list)


@dataclass
class TestFile:
    __test__ = False

    tests: List[TestCase] = field(default_factory=list)

    def iter_stages(self) -> Iterator[Stage]:
        for test in self.tests:
            yield from test.stages

    def iter_check_assertions(self) -> Iterator[CheckAssertion]:
        for stage in self.iter_stages():
            yield from stage.check_assertions

    def first_model(self) -> Optional[str]:
        """Return the first stage model text, if any stage declares one."""
        for stage in self.iter_stages():
            if stage.model:
                return stage.model
        return None


def load_test_file(path: Path) -> TestFile:
    """Load and deserialize a YAML test file.

    Raises:
        OSError: If the file cannot be read.
        TestFileError: If the content does not match the test file format.
    """
    return parse_test_file(path.read_text(encoding="utf-8"))


def parse_test_file(content: str) -> TestFile:
    """Deserialize test file YAML content."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise TestFileError(f"invalid YAML: {e}") from e

    if data is None:
        return TestFile()
    if not isinstance(data, dict):
        raise TestFileError("test file must be a mapping with a 'tests' key")

    return TestFile(
        tests=[_parse_test(raw, i) for i, raw in enumerate(_as_list(data.get("tests"), "tests"))]
    )


def _as_list(value: Any, where: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TestFileError(f"'{where}' must be a list")
    return value


def _parse_test(raw: Any, index: int) -> TestCase:
    if not isinstance(raw, dict):
        raise TestFileError(f"tests[{index}] must be a mapping")
    name = str(raw.get("name", f"test-{index}"))
    stages = [
        _parse_stage(stage, f"{name}.stages[{i}]")
        for i, stage in enumerate(_as_list(raw.get("stages"), f"{name}.stages"))
    ]
    return TestCase(name=name, stages=stages)


def _parse_stage(raw: Any, where: str) -> Stage:
    if not isinstance(raw, dict):
        raise TestFileError(f"{where} must be a mapping")
    return Stage(
        model=raw.get("model"),
        tuples=_as_list(raw.get("tuples"), f"{where}.tuples"),
        check_assertions=[
            _parse_check(check, f"{where}.checkAssertions[{i}]")
            for i, check in enumerate(
                _as_list(raw.get("checkAssertions"), f"{where}.checkAssertions")
            )
        ],
        list_objects_assertions=_as_list(
            raw.get("listObjectsAssertions"), f"{where}.listObjectsAssertions"
        ),
        list_users_assertions=_as_list(
            raw.get("listUsersAssertions"), f"{where}.listUsersAssertions"
        ),
    )


def _parse_check(raw: Any, where: str) -> CheckAssertion:
    if not isinstance(raw, dict):
        raise TestFileError(f"{where} must be a mapping")

    raw_tuple = raw.get("tuple")
    assertion_tuple = None
    if raw_tuple is not None:
        if not isinstance(raw_tuple, dict):
            raise TestFileError(f"{where}.tuple must be a mapping")
        assertion_tuple = AssertionTuple(
            object=str(raw_tuple.get("object", "")),
            relation=str(raw_tuple.get("relation", "")),
            user=str(raw_tuple.get("user", "")),
        )

    expectation = raw.get("expectation", False)
    if not isinstance(expectation, bool):
        raise TestFileError(f"{where}.expectation must be a boolean")

    return CheckAssertion(
        tuple=assertion_tuple,
        expectation=expectation,
        error_code=raw.get("errorCode"),
        contextual_tuples=_as_list(raw.get("contextualTuples"), f"{where}.contextualTuples"),
        context=raw.get("context") or {},
    )


__all__ = [
    "AssertionTuple",
    "CheckAssertion",
    "Stage",
    "TestCase",
    "TestFile",
    "TestFileError",
    "load_test_file",
    "parse_test_file",
]
