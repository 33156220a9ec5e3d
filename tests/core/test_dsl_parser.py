"""Tests for the model DSL parser."""

import pytest

from relcov.model.dsl import parse_dsl, parse_expression, parse_type_restrictions
from relcov.model.rewrite import (
    ComputedUserset,
    Difference,
    Intersection,
    RelationReference,
    This,
    TupleToUserset,
    Union,
    to_dsl,
)
from relcov.model.schema import ModelParseError
from tests.core.graph_test_helpers import make_model


class TestParseDsl:
    def test_full_model(self, folder_model):
        assert [t.type for t in folder_model.type_definitions] == ["user", "folder", "document"]
        assert folder_model.schema_version == "1.1"
        document = folder_model.find_type("document")
        assert list(document.relations) == ["parent", "owner", "blocked", "viewer", "can_share"]

    def test_type_without_relations(self, document_model):
        assert document_model.find_type("user").relations == {}

    def test_comments_are_ignored(self):
        model = make_model(
            """
            # leading comment
            model
              schema 1.1
            type doc  # trailing comment
              relations
                define viewer: [user, group#member] # members too
            """
        )
        viewer = model.find_type("doc").relations["viewer"]
        assert viewer == This(
            directly_related=(
                RelationReference(type="user"),
                RelationReference(type="group", relation="member"),
            )
        )

    def test_condition_blocks_are_skipped(self):
        model = make_model(
            """
            model
              schema 1.1
            type doc
              relations
                define viewer: [user with in_region]

            condition in_region(region: string, allowed: list<string>) {
              region in allowed
            }

            type folder
              relations
                define owner: [user]
            """
        )
        assert [t.type for t in model.type_definitions] == ["doc", "folder"]
        viewer = model.find_type("doc").relations["viewer"]
        assert viewer.directly_related[0].condition == "in_region"

    def test_define_outside_relations_block(self):
        with pytest.raises(ModelParseError, match="line 3"):
            make_model(
                """
                type doc
                  define viewer: [user]
                """
            )

    def test_duplicate_relation(self):
        with pytest.raises(ModelParseError, match="duplicate relation 'viewer'"):
            make_model(
                """
                model
                  schema 1.1
                type doc
                  relations
                    define viewer: [user]
                    define viewer: [user]
                """
            )

    def test_duplicate_type(self):
        with pytest.raises(ModelParseError, match="duplicate type"):
            make_model(
                """
                model
                  schema 1.1
                type doc
                type doc
                """
            )

    def test_modular_models_rejected(self):
        with pytest.raises(ModelParseError, match="modular"):
            make_model(
                """
                module core
                type doc
                """
            )

    def test_unexpected_line(self):
        with pytest.raises(ModelParseError, match="unexpected input"):
            make_model(
                """
                model
                  schema 1.1
                bogus line
                """
            )

    def test_empty_text(self):
        with pytest.raises(ModelParseError):
            parse_dsl("")


class TestParseExpression:
    def test_computed_userset(self):
        assert parse_expression("owner") == ComputedUserset("owner")

    def test_tuple_to_userset(self):
        assert parse_expression("viewer from parent") == TupleToUserset(
            tupleset="parent", computed_relation="viewer"
        )

    def test_union(self):
        assert parse_expression("[user] or owner or viewer from parent") == Union(
            children=(
                This(directly_related=(RelationReference(type="user"),)),
                ComputedUserset("owner"),
                TupleToUserset("parent", "viewer"),
            )
        )

    def test_intersection(self):
        assert parse_expression("owner and viewer") == Intersection(
            children=(ComputedUserset("owner"), ComputedUserset("viewer"))
        )

    def test_but_not_applies_to_preceding_union(self):
        assert parse_expression("owner or editor but not blocked") == Difference(
            base=Union(children=(ComputedUserset("owner"), ComputedUserset("editor"))),
            subtract=ComputedUserset("blocked"),
        )

    def test_parentheses(self):
        assert parse_expression("owner or (editor and member)") == Union(
            children=(
                ComputedUserset("owner"),
                Intersection(children=(ComputedUserset("editor"), ComputedUserset("member"))),
            )
        )

    def test_mixed_operators_require_parentheses(self):
        with pytest.raises(ModelParseError, match="cannot mix"):
            parse_expression("a or b and c")

    def test_operator_after_but_not(self):
        with pytest.raises(ModelParseError, match="but not"):
            parse_expression("a but not b or c")

    @pytest.mark.parametrize(
        "expression",
        ["a or", "(a or b", "a)", "or a", "a from", "a from or", "a but b", "a $ b"],
    )
    def test_malformed(self, expression):
        with pytest.raises(ModelParseError):
            parse_expression(expression)

    def test_to_dsl_round_trip(self):
        text = "([user] or owner or viewer from parent) but not blocked"
        assert to_dsl(parse_expression(text)) == text


class TestParseTypeRestrictions:
    def test_all_forms(self):
        refs = parse_type_restrictions("user, user:*, group#member, user with cond")
        assert refs == (
            RelationReference(type="user"),
            RelationReference(type="user", wildcard=True),
            RelationReference(type="group", relation="member"),
            RelationReference(type="user", condition="cond"),
        )
        assert [str(r) for r in refs] == ["user", "user:*", "group#member", "user with cond"]

    def test_empty_entry(self):
        with pytest.raises(ModelParseError):
            parse_type_restrictions("user,")
