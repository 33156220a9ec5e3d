"""Tests for loading models from JSON and DSL files."""

import json

import pytest

from relcov.model.loader import load_model, model_from_dict, parse_json_model, parse_model_text
from relcov.model.rewrite import (
    ComputedUserset,
    Difference,
    Intersection,
    RelationReference,
    This,
    TupleToUserset,
    Union,
)
from relcov.model.schema import ModelParseError
from tests.core.graph_test_helpers import DOCUMENT_MODEL

JSON_MODEL = {
    "schema_version": "1.1",
    "type_definitions": [
        {"type": "user"},
        {
            "type": "document",
            "relations": {
                "parent": {"this": {}},
                "viewer": {
                    "union": {
                        "child": [
                            {"this": {}},
                            {"computedUserset": {"object": "", "relation": "editor"}},
                            {
                                "tupleToUserset": {
                                    "tupleset": {"object": "", "relation": "parent"},
                                    "computedUserset": {"object": "", "relation": "viewer"},
                                }
                            },
                        ]
                    }
                },
                "editor": {"this": {}},
                "blocked": {"this": {}},
                "can_view": {
                    "difference": {
                        "base": {"computedUserset": {"relation": "viewer"}},
                        "subtract": {"computedUserset": {"relation": "blocked"}},
                    }
                },
                "both": {
                    "intersection": {
                        "child": [
                            {"computed_userset": {"relation": "viewer"}},
                            {"computed_userset": {"relation": "editor"}},
                        ]
                    }
                },
            },
            "metadata": {
                "relations": {
                    "viewer": {
                        "directly_related_user_types": [
                            {"type": "user"},
                            {"type": "user", "wildcard": {}},
                            {"type": "group", "relation": "member"},
                        ]
                    }
                }
            },
        },
    ],
}


class TestJsonModel:
    def test_rewrites(self):
        model = model_from_dict(JSON_MODEL)
        relations = model.find_type("document").relations

        assert relations["editor"] == This()
        assert relations["can_view"] == Difference(
            base=ComputedUserset("viewer"), subtract=ComputedUserset("blocked")
        )
        assert relations["both"] == Intersection(
            children=(ComputedUserset("viewer"), ComputedUserset("editor"))
        )
        assert relations["viewer"] == Union(
            children=(
                This(
                    directly_related=(
                        RelationReference(type="user"),
                        RelationReference(type="user", wildcard=True),
                        RelationReference(type="group", relation="member"),
                    )
                ),
                ComputedUserset("editor"),
                TupleToUserset(tupleset="parent", computed_relation="viewer"),
            )
        )

    def test_type_without_relations(self):
        assert model_from_dict(JSON_MODEL).find_type("user").relations == {}

    def test_wrapped_response(self):
        model = model_from_dict({"authorization_model": JSON_MODEL})
        assert model.relation_count() == 6

    def test_empty_userset_is_no_rewrite(self):
        model = model_from_dict({"type_definitions": [{"type": "t", "relations": {"r": {}}}]})
        assert model.find_type("t").relations["r"] is None

    def test_invalid_json(self):
        with pytest.raises(ModelParseError, match="invalid JSON"):
            parse_json_model("{not json")

    @pytest.mark.parametrize(
        "data,message",
        [
            ([], "JSON object"),
            ({}, "type_definitions"),
            ({"type_definitions": [{}]}, "'type' name"),
            ({"type_definitions": [{"type": "a"}, {"type": "a"}]}, "duplicate type"),
            (
                {"type_definitions": [{"type": "a", "relations": {"r": {"bogus": {}}}}]},
                "unknown userset",
            ),
            (
                {"type_definitions": [{"type": "a", "relations": {"r": {"computedUserset": {}}}}]},
                "without a relation",
            ),
            (
                {
                    "type_definitions": [
                        {"type": "a", "relations": {"r": {"difference": {"base": {"this": {}}}}}}
                    ]
                },
                "base and subtract",
            ),
        ],
    )
    def test_malformed(self, data, message):
        with pytest.raises(ModelParseError, match=message):
            model_from_dict(data)


class TestLoadModel:
    def test_json_by_suffix(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(json.dumps(JSON_MODEL))
        assert load_model(path).find_type("document") is not None

    def test_dsl_otherwise(self, tmp_path):
        path = tmp_path / "model.fga"
        path.write_text(DOCUMENT_MODEL)
        assert list(load_model(path).find_type("document").relations) == ["viewer", "editor"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_model(tmp_path / "missing.fga")

    def test_parse_model_text_detects_json(self):
        assert parse_model_text(json.dumps(JSON_MODEL)).relation_count() == 6
        assert parse_model_text(DOCUMENT_MODEL).relation_count() == 2
