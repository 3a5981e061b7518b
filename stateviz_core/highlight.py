"""
Highlight - Hover/selection highlight sets and link/node styling

The graph model holds no UI state. Callers pass a SelectionContext and get
back the nodes and links to emphasize, plus the colors the viewer uses.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from dataclasses import dataclass, field
from typing import Optional, Set

from .state_graph import StateGraph, StateLink, StateNode

# Viewer palette
HOVER_COLOR = "yellow"
DIRECTED_COLOR = "magenta"
MUTUAL_COLOR = "skyblue"
MUTUAL_PARTICLE_COLOR = "slategrey"
DIMMED_COLOR = "rgba(255,255,255,0.2)"
DIMMED_NODE_COLOR = "gray"
OUTLINE_COLOR = "white"

ARROW_LENGTH = 30
PARTICLE_WIDTH = 10


def palette() -> dict:
    """Colors shared by these styling queries and the HTML viewer."""
    return {
        "hover": HOVER_COLOR,
        "directed": DIRECTED_COLOR,
        "mutual": MUTUAL_COLOR,
        "mutualParticle": MUTUAL_PARTICLE_COLOR,
        "dimmed": DIMMED_COLOR,
        "dimmedNode": DIMMED_NODE_COLOR,
        "outline": OUTLINE_COLOR,
    }


@dataclass
class SelectionContext:
    """Current UI selection, by state identity."""
    hover_node: Optional[str] = None
    selected_node: Optional[str] = None
    hover_link: Optional[StateLink] = None

    @property
    def focus(self) -> Optional[str]:
        """Node driving the highlight: hover wins over selection."""
        return self.hover_node or self.selected_node


@dataclass
class HighlightSet:
    """Nodes and links to emphasize. Membership is by object identity."""
    nodes: Set[int] = field(default_factory=set)
    links: Set[int] = field(default_factory=set)

    def add_node(self, node: StateNode) -> None:
        self.nodes.add(id(node))

    def add_link(self, link: StateLink) -> None:
        self.links.add(id(link))

    def has_node(self, node: StateNode) -> bool:
        return id(node) in self.nodes

    def has_link(self, link: StateLink) -> bool:
        return id(link) in self.links

    def is_empty(self) -> bool:
        return not self.nodes and not self.links


def compute_highlight(graph: StateGraph, context: SelectionContext) -> HighlightSet:
    """
    Highlight set for the current selection.

    A hovered link highlights itself and its two endpoints. Otherwise the
    hovered (or selected) node highlights itself, its neighbors and all its
    incident links.
    """
    result = HighlightSet()

    if context.hover_link is not None:
        link = context.hover_link
        result.add_link(link)
        for node in (link.source_node, link.target_node):
            if node is not None:
                result.add_node(node)
        return result

    focus = graph.get_node(context.focus) if context.focus else None
    if focus is None:
        return result

    result.add_node(focus)
    for neighbor in focus.get_neighbors():
        result.add_node(neighbor)
    for link in focus.get_all_links():
        result.add_link(link)
    return result


def _from_hover(link: StateLink, context: SelectionContext) -> bool:
    return context.hover_node is not None and link.source == context.hover_node


def link_color(link: StateLink, highlight: HighlightSet, context: SelectionContext) -> str:
    if not highlight.has_link(link):
        return DIMMED_COLOR
    if link.is_mutual:
        return MUTUAL_COLOR
    return HOVER_COLOR if _from_hover(link, context) else DIRECTED_COLOR


def link_particle_color(link: StateLink, highlight: HighlightSet, context: SelectionContext) -> str:
    if not highlight.has_link(link):
        return DIMMED_COLOR
    if link.is_mutual:
        return MUTUAL_PARTICLE_COLOR
    return HOVER_COLOR if _from_hover(link, context) else DIRECTED_COLOR


def link_arrow_length(link: StateLink, highlight: HighlightSet) -> int:
    """Arrows only on highlighted one-way links."""
    if highlight.has_link(link) and not link.is_mutual:
        return ARROW_LENGTH
    return 0


def link_particle_width(link: StateLink, highlight: HighlightSet) -> int:
    return PARTICLE_WIDTH if not highlight.links or highlight.has_link(link) else 0


def node_fill(node: StateNode, highlight: HighlightSet) -> str:
    if highlight.nodes and not highlight.has_node(node):
        return DIMMED_NODE_COLOR
    return node.color


def node_ring_color(node: StateNode, highlight: HighlightSet, context: SelectionContext) -> str:
    """
    Outline color of a node.

    For highlighted nodes around a hovered node: yellow for the hovered node
    itself, skyblue when the two share a mutual link, magenta when this node
    leads to the hovered node, yellow when it is reached from it.
    """
    if not highlight.has_node(node) or context.hover_node is None:
        return OUTLINE_COLOR

    hover = context.hover_node
    if node.id == hover:
        return HOVER_COLOR
    if any(hover in (link.source, link.target) for link in node.mutual_links):
        return MUTUAL_COLOR
    if any(link.target == hover for link in node.outgoing_links):
        return DIRECTED_COLOR
    return HOVER_COLOR
