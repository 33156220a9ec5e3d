"""Tests for the graph command."""

import json

import pytest

from relcov.cli import main
from relcov.commands.graph_cmd import generate_dot
from relcov.graph.builder import build_dependency_graph
from tests.core.graph_test_helpers import DOCUMENT_MODEL, make_model


@pytest.fixture
def model_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "model.fga"
    path.write_text(DOCUMENT_MODEL)
    return path


class TestGraphCommand:
    def test_text(self, model_file, capsys):
        assert main(["graph", "-m", str(model_file)]) == 0

        out = capsys.readouterr().out
        assert "document#editor: [user] or viewer" in out
        assert "depends on: document#viewer" in out
        assert "document#viewer: [user]" in out

    def test_json(self, model_file, capsys):
        assert main(["graph", "-m", str(model_file), "--format", "json"]) == 0

        assert json.loads(capsys.readouterr().out) == {
            "document#editor": ["document#viewer"],
            "document#viewer": [],
        }

    def test_dot(self, model_file, capsys):
        assert main(["graph", "-m", str(model_file), "--format", "dot"]) == 0
        assert '"document#editor" -> "document#viewer";' in capsys.readouterr().out

    def test_missing_model(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main(["graph", "-m", str(tmp_path / "missing.fga")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestGenerateDot:
    def test_nodes_without_edges_are_listed(self):
        dot = generate_dot(build_dependency_graph(make_model(DOCUMENT_MODEL)))
        lines = dot.splitlines()

        assert lines[0] == "digraph relations {"
        assert '  "document#viewer";' in lines
        assert lines[-1] == "}"
