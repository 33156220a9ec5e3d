"""Tests for the relation catalog and dependency graph builders."""

import pytest

from relcov.graph.builder import (
    RewriteDepthError,
    build_catalog,
    build_dependency_graph,
    extract_dependencies,
)
from relcov.graph.relations import RelationKey
from relcov.model.rewrite import (
    ComputedUserset,
    Difference,
    Intersection,
    This,
    TupleToUserset,
    Union,
)
from relcov.model.schema import AuthorizationModel, TypeDefinition
from tests.core.graph_test_helpers import key


class TestBuildCatalog:
    def test_one_record_per_declared_relation(self, folder_model):
        catalog = build_catalog(folder_model)

        assert sorted(str(k) for k in catalog) == [
            "document#blocked",
            "document#can_share",
            "document#owner",
            "document#parent",
            "document#viewer",
            "folder#owner",
            "folder#viewer",
        ]

    def test_records_start_with_all_flags_false(self, document_model):
        for k, record in build_catalog(document_model).items():
            assert record.key == k
            assert not record.tested_directly
            assert not record.tested_indirectly
            assert not record.has_positive_test
            assert not record.has_negative_test

    def test_types_without_relations_contribute_nothing(self, document_model):
        catalog = build_catalog(document_model)
        assert not any(k.type_name == "user" for k in catalog)

    def test_same_relation_name_on_two_types_is_two_records(self, folder_model):
        catalog = build_catalog(folder_model)
        assert key("folder#viewer") in catalog
        assert key("document#viewer") in catalog
        assert catalog[key("folder#viewer")] is not catalog[key("document#viewer")]


class TestExtractDependencies:
    def test_direct_assignment_has_no_dependencies(self):
        assert extract_dependencies("doc", This()) == []

    def test_missing_rewrite_has_no_dependencies(self):
        assert extract_dependencies("doc", None) == []

    def test_computed_userset_depends_on_same_type(self):
        assert extract_dependencies("doc", ComputedUserset("owner")) == [
            RelationKey("doc", "owner")
        ]

    def test_tuple_to_userset_resolves_against_declaring_type(self):
        deps = extract_dependencies("doc", TupleToUserset(tupleset="parent", computed_relation="viewer"))
        assert deps == [RelationKey("doc", "viewer")]

    def test_union_concatenates_children_in_order(self):
        rewrite = Union(children=(ComputedUserset("b"), This(), ComputedUserset("a")))
        assert extract_dependencies("t", rewrite) == [key("t#b"), key("t#a")]

    def test_intersection_keeps_duplicates(self):
        rewrite = Intersection(children=(ComputedUserset("a"), ComputedUserset("a")))
        assert extract_dependencies("t", rewrite) == [key("t#a"), key("t#a")]

    def test_difference_lists_base_then_subtract(self):
        rewrite = Difference(base=ComputedUserset("viewer"), subtract=ComputedUserset("blocked"))
        assert extract_dependencies("t", rewrite) == [key("t#viewer"), key("t#blocked")]

    def test_nested_expression(self):
        rewrite = Difference(
            base=Union(
                children=(
                    This(),
                    Intersection(children=(ComputedUserset("a"), ComputedUserset("b"))),
                    TupleToUserset("parent", "c"),
                )
            ),
            subtract=ComputedUserset("d"),
        )
        assert [str(d) for d in extract_dependencies("t", rewrite)] == [
            "t#a",
            "t#b",
            "t#c",
            "t#d",
        ]

    def test_depth_ceiling_fails_closed(self):
        rewrite = ComputedUserset("leaf")
        for _ in range(5):
            rewrite = Union(children=(rewrite,))

        with pytest.raises(RewriteDepthError):
            extract_dependencies("t", rewrite, max_depth=3)

        assert extract_dependencies("t", rewrite, max_depth=5) == [key("t#leaf")]

    def test_unknown_rewrite_type_raises(self):
        with pytest.raises(TypeError):
            extract_dependencies("t", object())


class TestBuildDependencyGraph:
    def test_every_relation_has_an_entry(self, folder_model):
        graph = build_dependency_graph(folder_model)
        assert len(graph) == 7
        assert graph.dependencies_of(key("document#parent")) == []

    def test_difference_with_tuple_to_userset(self, folder_model):
        graph = build_dependency_graph(folder_model)
        assert [str(d) for d in graph.dependencies_of(key("document#viewer"))] == [
            "document#owner",
            "document#viewer",
            "document#blocked",
        ]

    def test_self_reference_is_kept(self, cyclic_model):
        graph = build_dependency_graph(cyclic_model)
        assert graph.dependencies_of(key("group#nested")) == [key("group#nested")]

    def test_dependents_of(self, folder_model):
        graph = build_dependency_graph(folder_model)
        assert graph.dependents_of(key("document#owner")) == [
            key("document#can_share"),
            key("document#viewer"),
        ]

    def test_unknown_key_has_no_dependencies(self, document_model):
        graph = build_dependency_graph(document_model)
        assert graph.dependencies_of(key("nothing#here")) == []

    def test_depth_error_names_the_relation(self):
        rewrite = ComputedUserset("x")
        for _ in range(4):
            rewrite = Union(children=(rewrite,))
        model = AuthorizationModel(
            type_definitions=[TypeDefinition(type="doc", relations={"deep": rewrite})]
        )

        with pytest.raises(RewriteDepthError, match="doc#deep"):
            build_dependency_graph(model, max_depth=2)

    def test_to_dict_uses_canonical_keys(self, document_model):
        graph = build_dependency_graph(document_model)
        assert graph.to_dict() == {
            "document#editor": ["document#viewer"],
            "document#viewer": [],
        }

    def test_iter_edges_deduplicates(self):
        model = AuthorizationModel(
            type_definitions=[
                TypeDefinition(
                    type="t",
                    relations={
                        "a": Union(children=(ComputedUserset("b"), ComputedUserset("b"))),
                        "b": This(),
                    },
                )
            ]
        )
        graph = build_dependency_graph(model)
        assert list(graph.iter_edges()) == [(key("t#a"), key("t#b"))]
