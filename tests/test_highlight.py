"""
Tests for selection highlighting and viewer styling

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import pytest

from stateviz_core.highlight import (
    ARROW_LENGTH,
    DIMMED_COLOR,
    DIMMED_NODE_COLOR,
    DIRECTED_COLOR,
    HOVER_COLOR,
    MUTUAL_COLOR,
    MUTUAL_PARTICLE_COLOR,
    OUTLINE_COLOR,
    PARTICLE_WIDTH,
    SelectionContext,
    compute_highlight,
    link_arrow_length,
    link_color,
    link_particle_color,
    link_particle_width,
    node_fill,
    node_ring_color,
)
from stateviz_core.state_graph import GraphBuilder


@pytest.fixture
def graph(scenario_transitions):
    return GraphBuilder().build("Idle", scenario_transitions)


class TestSelectionContext:
    def test_hover_wins(self):
        ctx = SelectionContext(hover_node="Walk", selected_node="Jump")
        assert ctx.focus == "Walk"

    def test_selection_fallback(self):
        assert SelectionContext(selected_node="Jump").focus == "Jump"
        assert SelectionContext().focus is None


class TestComputeHighlight:
    def test_nothing_selected(self, graph):
        highlight = compute_highlight(graph, SelectionContext())
        assert highlight.is_empty()

    def test_hovered_node_neighborhood(self, graph):
        highlight = compute_highlight(graph, SelectionContext(hover_node="Walk"))
        assert all(highlight.has_node(node) for node in graph.nodes)
        assert all(highlight.has_link(link) for link in graph.links)

    def test_leaf_neighborhood(self, graph):
        highlight = compute_highlight(graph, SelectionContext(hover_node="Jump"))
        assert highlight.has_node(graph.get_node("Jump"))
        assert highlight.has_node(graph.get_node("Walk"))
        assert not highlight.has_node(graph.get_node("Idle"))
        assert highlight.has_link(graph.links[2])
        assert not highlight.has_link(graph.links[0])

    def test_hovered_link(self, graph):
        link = graph.links[2]
        highlight = compute_highlight(graph, SelectionContext(hover_node="Idle", hover_link=link))
        assert highlight.links == {id(link)}
        assert highlight.has_node(graph.get_node("Walk"))
        assert not highlight.has_node(graph.get_node("Idle"))

    def test_unknown_focus(self, graph):
        assert compute_highlight(graph, SelectionContext(selected_node="Nowhere")).is_empty()


class TestLinkStyling:
    def test_dimmed_without_highlight(self, graph):
        ctx = SelectionContext()
        highlight = compute_highlight(graph, ctx)
        assert all(link_color(l, highlight, ctx) == DIMMED_COLOR for l in graph.links)
        assert all(link_particle_width(l, highlight) == PARTICLE_WIDTH for l in graph.links)

    def test_hover_source_is_yellow(self, graph):
        ctx = SelectionContext(hover_node="Walk")
        highlight = compute_highlight(graph, ctx)
        walk_jump = graph.links[2]
        assert link_color(walk_jump, highlight, ctx) == HOVER_COLOR
        assert link_particle_color(walk_jump, highlight, ctx) == HOVER_COLOR

    def test_incoming_is_magenta(self, graph):
        ctx = SelectionContext(hover_node="Jump")
        highlight = compute_highlight(graph, ctx)
        walk_jump = graph.links[2]
        assert link_color(walk_jump, highlight, ctx) == DIRECTED_COLOR
        assert link_arrow_length(walk_jump, highlight) == ARROW_LENGTH

    def test_mutual_colors(self, graph):
        ctx = SelectionContext(hover_node="Idle")
        highlight = compute_highlight(graph, ctx)
        idle_walk = graph.links[0]
        assert link_color(idle_walk, highlight, ctx) == MUTUAL_COLOR
        assert link_particle_color(idle_walk, highlight, ctx) == MUTUAL_PARTICLE_COLOR
        assert link_arrow_length(idle_walk, highlight) == 0

    def test_particles_only_on_highlighted(self, graph):
        highlight = compute_highlight(graph, SelectionContext(hover_node="Jump"))
        assert link_particle_width(graph.links[2], highlight) == PARTICLE_WIDTH
        assert link_particle_width(graph.links[0], highlight) == 0


class TestNodeStyling:
    def test_fill_dims_outside_highlight(self, graph):
        highlight = compute_highlight(graph, SelectionContext(hover_node="Jump"))
        assert node_fill(graph.get_node("Idle"), highlight) == DIMMED_NODE_COLOR
        walk = graph.get_node("Walk")
        assert node_fill(walk, highlight) == walk.color

    def test_fill_without_highlight(self, graph):
        highlight = compute_highlight(graph, SelectionContext())
        idle = graph.get_node("Idle")
        assert node_fill(idle, highlight) == idle.color

    def test_ring_colors_around_leaf(self, graph):
        ctx = SelectionContext(hover_node="Jump")
        highlight = compute_highlight(graph, ctx)
        assert node_ring_color(graph.get_node("Jump"), highlight, ctx) == HOVER_COLOR
        assert node_ring_color(graph.get_node("Walk"), highlight, ctx) == DIRECTED_COLOR
        assert node_ring_color(graph.get_node("Idle"), highlight, ctx) == OUTLINE_COLOR

    def test_ring_colors_around_hub(self, graph):
        ctx = SelectionContext(hover_node="Walk")
        highlight = compute_highlight(graph, ctx)
        assert node_ring_color(graph.get_node("Idle"), highlight, ctx) == MUTUAL_COLOR
        assert node_ring_color(graph.get_node("Jump"), highlight, ctx) == HOVER_COLOR

    def test_selection_keeps_white_outline(self, graph):
        ctx = SelectionContext(selected_node="Walk")
        highlight = compute_highlight(graph, ctx)
        assert node_ring_color(graph.get_node("Idle"), highlight, ctx) == OUTLINE_COLOR
