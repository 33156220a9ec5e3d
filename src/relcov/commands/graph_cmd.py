"""
relcov.commands.graph_cmd - Show the relation dependency graph.
"""

from __future__ import annotations

import argparse
import json
import sys

from relcov.config import get_config
from relcov.graph.builder import DependencyGraph, build_dependency_graph
from relcov.graph.relations import RelationKey
from relcov.model import load_model
from relcov.model.rewrite import to_dsl


def run(args: argparse.Namespace) -> int:
    """Run the graph command."""
    try:
        config = get_config(getattr(args, "config", None))
        model = load_model(args.model_file)
        graph = build_dependency_graph(
            model, max_depth=config["analysis"]["max_rewrite_depth"]
        )
    except (OSError, ValueError) as e:
        # ModelParseError and RewriteDepthError are ValueErrors
        print(f"Error: {e}", file=sys.stderr)
        return 1

    fmt = getattr(args, "format", "text")
    if fmt == "json":
        print(json.dumps(graph.to_dict(), indent=2))
    elif fmt == "dot":
        print(generate_dot(graph))
    else:
        for type_name, relation_name, rewrite in model.iter_relations():
            deps = graph.dependencies_of(RelationKey(type_name, relation_name))
            dep_str = ", ".join(sorted({str(d) for d in deps})) if deps else "(none)"
            print(f"{type_name}#{relation_name}: {to_dsl(rewrite)}")
            print(f"    depends on: {dep_str}")

    return 0


def generate_dot(graph: DependencyGraph) -> str:
    """Render the graph in Graphviz DOT format."""
    lines = ["digraph relations {", "  rankdir=LR;"]
    for key in graph.iter_keys():
        lines.append(f'  "{key}";')
    for source, target in graph.iter_edges():
        lines.append(f'  "{source}" -> "{target}";')
    lines.append("}")
    return "\n".join(lines)
