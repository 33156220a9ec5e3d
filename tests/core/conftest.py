"""Pytest fixtures for core tests."""

import pytest


@pytest.fixture
def document_model():
    """document with viewer (direct) and editor (direct or viewer)."""
    from tests.core.graph_test_helpers import DOCUMENT_MODEL, make_model

    return make_model(DOCUMENT_MODEL)


@pytest.fixture
def folder_model():
    """folder/document model with tuple-to-userset and difference rewrites."""
    from tests.core.graph_test_helpers import make_model

    return make_model(
        """
        model
          schema 1.1

        type user

        type folder
          relations
            define owner: [user]
            define viewer: [user] or owner

        type document
          relations
            define parent: [folder]
            define owner: [user]
            define blocked: [user]
            define viewer: ([user] or owner or viewer from parent) but not blocked
            define can_share: owner and viewer
        """
    )


@pytest.fixture
def cyclic_model():
    """Relations that depend on each other and on themselves."""
    from tests.core.graph_test_helpers import make_model

    return make_model(
        """
        model
          schema 1.1

        type user

        type group
          relations
            define member: [user, group#member] or admin
            define admin: [user] or member
            define nested: nested from parent
            define parent: [group]
        """
    )
