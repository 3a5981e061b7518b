"""
State Graph Exporters - DOT and Mermaid text renderings

Mutual pairs are drawn once as a double-headed edge; one-way and self-loop
transitions keep their direction. The initial state is emphasized.

Node IDs are derived per graph and never collide; the state name is only
ever written as an escaped label.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import re
from typing import Dict, List, Set

from .state_graph import StateGraph, StateLink

# Mermaid keywords that cannot be used as node IDs
_RESERVED_IDS = {"end", "graph", "subgraph", "flowchart", "style", "class", "classdef", "click", "linkstyle"}


def _sanitize_id(name: str) -> str:
    """Convert a state name to a valid graph ID."""
    return re.sub(r"\W", "_", name) or "_"


def _node_ids(graph: StateGraph) -> Dict[str, str]:
    """Unique graph ID per state: sanitized name, suffixed on collision."""
    ids: Dict[str, str] = {}
    used: Set[str] = set()
    for node in graph.nodes:
        base = _sanitize_id(node.id)
        if base.lower() in _RESERVED_IDS:
            base = f"{base}_"
        candidate = base
        suffix = 2
        while candidate in used:
            candidate = f"{base}_{suffix}"
            suffix += 1
        used.add(candidate)
        ids[node.id] = candidate
    return ids


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _mermaid_escape(text: str) -> str:
    return text.replace('"', "#quot;")


def _edges(graph: StateGraph) -> List[StateLink]:
    """Links to draw: every link except the second half of a mutual pair."""
    drawn: Set[int] = set()
    edges = []
    for link in graph.links:
        if id(link) in drawn:
            continue
        drawn.add(id(link))
        if link.mutual is not None:
            drawn.add(id(link.mutual))
        edges.append(link)
    return edges


class DotRenderer:
    """Render a state graph to Graphviz DOT."""

    def __init__(self, name: str = "StateMachine"):
        self.name = name

    def render(self, graph: StateGraph) -> str:
        ids = _node_ids(graph)
        lines = [f'digraph "{_dot_escape(self.name)}" {{']
        lines.append("  rankdir=LR;")
        lines.append('  node [shape=box, style="rounded,filled", fontcolor=white];')
        lines.append("")

        for node in graph.nodes:
            penwidth = ", penwidth=3, color=yellow" if node.id == graph.initial_state else ""
            lines.append(
                f'  "{ids[node.id]}" [label="{_dot_escape(node.name)}", fillcolor="{node.color}"{penwidth}];'
            )
        lines.append("")

        for link in _edges(graph):
            src_id = ids[link.source]
            tgt_id = ids[link.target]
            if link.is_mutual:
                lines.append(f'  "{src_id}" -> "{tgt_id}" [dir=both, color="skyblue"];')
            else:
                lines.append(f'  "{src_id}" -> "{tgt_id}" [color="magenta"];')

        lines.append("}")
        return "\n".join(lines) + "\n"


class MermaidRenderer:
    """Render a state graph to a Mermaid flowchart."""

    def render(self, graph: StateGraph) -> str:
        ids = _node_ids(graph)
        lines = ["graph LR"]
        for node in graph.nodes:
            label = _mermaid_escape(node.name)
            if node.id == graph.initial_state:
                lines.append(f'    {ids[node.id]}(("{label}"))')
            else:
                lines.append(f'    {ids[node.id]}["{label}"]')

        for link in _edges(graph):
            arrow = "<-->" if link.is_mutual else "-->"
            lines.append(f"    {ids[link.source]} {arrow} {ids[link.target]}")
        return "\n".join(lines) + "\n"
