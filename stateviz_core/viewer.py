"""
State Machine Viewer - Interactive HTML rendering of a state graph

Produces a self-contained d3.js page: nodes are pulled onto rings around the
initial state by the same radial force as stateviz_core.layout (the default
link/charge/collide forces are removed), hovering highlights a node's
neighborhood, clicking selects it, and a side panel shows the inspector
properties of the hovered or selected state.

The client-side styling functions (linkColor, particleColor, linkMarker,
nodeFill, nodeStroke) mirror stateviz_core.highlight, which defines the
rules; all colors and sizes come from client_config(), never from literals.

The page works standalone (payload and properties embedded) or against the
viewer server (api_base set), which lets it switch machines.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import html
import json
from typing import Any, Dict, List, Optional

from .config import LayoutConfig, ViewerConfig
from .highlight import ARROW_LENGTH, PARTICLE_WIDTH, palette
from .inspector import PropertyStore, render_properties_html
from .state_graph import StateGraph


class ViewerRenderer:
    """Render a StateGraph to an interactive HTML page."""

    def __init__(self, viewer: Optional[ViewerConfig] = None, layout: Optional[LayoutConfig] = None):
        self.viewer = viewer or ViewerConfig()
        self.layout = layout or LayoutConfig()

    def client_config(self) -> Dict[str, Any]:
        return {
            "ringSpacing": self.layout.ring_spacing,
            "strength": self.layout.strength,
            "cooldownTicks": self.layout.cooldown_ticks,
            "velocityDecay": self.layout.velocity_decay,
            "particleIntervalMs": self.viewer.particle_interval_ms,
            "nodeRelSize": self.viewer.node_rel_size,
            "arrowLength": ARROW_LENGTH,
            "particleWidth": PARTICLE_WIDTH,
            "colors": palette(),
        }

    @staticmethod
    def properties_html(graph: StateGraph, machine: str, store: Optional[PropertyStore]) -> Dict[str, str]:
        """Pre-rendered inspector panel for every state that has properties."""
        if store is None:
            return {}
        panels = {}
        for node in graph.nodes:
            props = store.lookup(machine, node.id)
            if props:
                panels[node.id] = render_properties_html(node.id, props)
        return panels

    def render(
        self,
        graph: StateGraph,
        machine: str,
        title: Optional[str] = None,
        properties: Optional[PropertyStore] = None,
        machine_names: Optional[List[str]] = None,
        api_base: Optional[str] = None,
    ) -> str:
        """
        Render the viewer page.

        Args:
            graph: Graph of the machine shown first
            machine: Its machine name
            title: Page title (defaults to the machine name)
            properties: Inspector property store (standalone mode)
            machine_names: Machines offered in the selector
            api_base: Base URL of the viewer API; None for a standalone page
        """
        return self._render_html(
            payload=graph.to_payload(),
            machine=machine,
            title=title or f"State Machine - {machine}",
            panels=self.properties_html(graph, machine, properties),
            machine_names=machine_names or [machine],
            api_base=api_base,
        )

    def _render_html(
        self,
        payload: Dict[str, Any],
        machine: str,
        title: str,
        panels: Dict[str, str],
        machine_names: List[str],
        api_base: Optional[str],
    ) -> str:
        background = self.viewer.background
        return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <script src="https://d3js.org/d3.v7.min.js"></script>
    <style>
        * {{ box-sizing: border-box; }}
        body {{
            margin: 0;
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Helvetica, Arial, sans-serif;
            background: {background};
            color: #fff;
            overflow: hidden;
        }}
        #graph {{ position: fixed; left: 0; top: 0; }}
        #browser {{
            position: fixed;
            top: 8px;
            left: 8px;
            z-index: 50;
            padding: 8px;
            display: flex;
            flex-direction: column;
            gap: 8px;
            background: #fde047;
            border: 1px solid #000;
            border-radius: 6px;
            font-weight: bold;
            color: #000;
        }}
        #browser select {{
            background: #fde047;
            padding: 6px;
            border: 1px solid #000;
            border-radius: 8px;
        }}
        #states {{
            display: flex;
            flex-direction: column;
            gap: 6px;
            padding: 10px;
            border-radius: 6px;
            background: #231438;
            overflow-y: auto;
            max-height: 50vh;
        }}
        .state-item {{ cursor: pointer; font-weight: normal; color: #fff; }}
        .state-item:hover, .state-item.active {{ color: magenta; }}
        #inspector {{
            position: fixed;
            right: 0;
            top: 0;
            width: 320px;
            height: 100vh;
            background: #1f2937;
            padding: 16px;
            overflow-y: auto;
        }}
        #inspector h2 {{ margin-top: 0; font-size: 20px; }}
        .prop {{ margin-bottom: 8px; }}
        .prop-name {{ font-weight: 600; }}
        .prop-value {{ background: #374151; border-radius: 4px; padding: 0 6px; }}
        .prop-items {{ margin-left: 16px; }}
        .prop pre {{ background: #374151; border-radius: 4px; padding: 8px; overflow-x: auto; }}
        .node-label {{ pointer-events: none; font-size: 10px; fill: #fff; }}
        .link {{ fill: none; }}
    </style>
</head>
<body>
    <svg id="graph"></svg>
    <div id="browser">
        <div>State Machine:</div>
        <select id="machine-select"></select>
        <div>States:</div>
        <div id="states"></div>
    </div>
    <div id="inspector">
        <h2>Inspector</h2>
        <div id="inspector-body"><p>No properties to display</p></div>
    </div>

    <script>
        const API_BASE = {json.dumps(api_base)};
        const config = {json.dumps(self.client_config())};
        const machineNames = {json.dumps(machine_names)};
        let machineName = {json.dumps(machine)};
        let payload = {json.dumps(payload)};
        let panels = {json.dumps(panels)};

        const svg = d3.select('#graph');
        const viewport = svg.append('g');
        const linkLayer = viewport.append('g');
        const particleLayer = viewport.append('g');
        const nodeLayer = viewport.append('g');
        const zoom = d3.zoom().on('zoom', e => viewport.attr('transform', e.transform));
        svg.call(zoom);

        svg.append('defs').selectAll('marker')
            .data(['directed', 'hover'])
            .join('marker')
            .attr('id', d => `arrow-${{d}}`)
            .attr('viewBox', '0 -5 10 10')
            .attr('refX', 10)
            .attr('markerWidth', config.arrowLength / 4)
            .attr('markerHeight', config.arrowLength / 4)
            .attr('orient', 'auto')
            .append('path')
            .attr('d', 'M0,-5L10,0L0,5')
            .attr('fill', d => d === 'hover' ? config.colors.hover : config.colors.directed);

        let nodes = [];
        let links = [];
        let simulation = null;
        let particleTimer = null;
        let tickCount = 0;
        let hoverNode = null;
        let hoverLink = null;
        let selectedNode = null;
        let highlightNodes = new Set();
        let highlightLinks = new Set();

        const width = () => window.innerWidth;
        const height = () => window.innerHeight;

        function buildGraph(data) {{
            const byId = new Map();
            nodes = data.nodes.map(n => {{
                const node = Object.assign({{}}, n, {{ incoming: [], outgoing: [], mutual: [] }});
                if (node.x === null || node.y === null) {{ delete node.x; delete node.y; }}
                byId.set(node.id, node);
                return node;
            }});
            links = data.links.map(l => ({{
                source: byId.get(l.source),
                target: byId.get(l.target),
                mutual: l.mutual,
                role: l.role,
            }}));
            links.forEach(l => {{
                if (l.mutual) {{
                    l.source.mutual.push(l);
                    l.target.mutual.push(l);
                }} else {{
                    l.source.outgoing.push(l);
                    l.target.incoming.push(l);
                }}
            }});
        }}

        function incidentLinks(node) {{
            return [...node.incoming, ...node.outgoing, ...node.mutual];
        }}

        function neighborsOf(node) {{
            const result = new Set();
            incidentLinks(node).forEach(l => result.add(l.source === node ? l.target : l.source));
            return result;
        }}

        // Ring slots around the initial state; replaces link/charge/collide
        function radialForce(alpha) {{
            const k = alpha * config.strength;
            const center = payload.initialState;
            const dist = payload.distances[center];
            if (!dist) return;
            const cx = width() / 2;
            const cy = height() / 2;
            const targets = new Map([[center, [cx, cy]]]);
            const finite = Object.values(dist).filter(d => d !== null);
            const maxHops = finite.length ? Math.max(...finite) : 0;
            for (let hops = 1; hops <= maxHops; hops++) {{
                const ring = nodes.filter(n => dist[n.id] === hops);
                const step = (2 * Math.PI) / (ring.length || 1);
                ring.forEach((n, i) => {{
                    targets.set(n.id, [
                        cx + Math.cos(i * step) * hops * config.ringSpacing,
                        cy + Math.sin(i * step) * hops * config.ringSpacing,
                    ]);
                }});
            }}
            nodes.forEach(n => {{
                const t = targets.get(n.id);
                if (!t) return;
                n.vx += (t[0] - n.x) * k;
                n.vy += (t[1] - n.y) * k;
            }});
        }}

        function updateHighlight() {{
            highlightNodes = new Set();
            highlightLinks = new Set();
            if (hoverLink) {{
                highlightLinks.add(hoverLink);
                highlightNodes.add(hoverLink.source);
                highlightNodes.add(hoverLink.target);
            }} else {{
                const focus = hoverNode || selectedNode;
                if (focus) {{
                    highlightNodes.add(focus);
                    neighborsOf(focus).forEach(n => highlightNodes.add(n));
                    incidentLinks(focus).forEach(l => highlightLinks.add(l));
                }}
            }}
            restyle();
            showInspector((hoverNode || selectedNode || {{}}).id);
            d3.selectAll('.state-item').classed('active', d => hoverNode && d === hoverNode.id);
        }}

        function fromHover(l) {{
            return hoverNode && l.source === hoverNode;
        }}

        function linkColor(l) {{
            if (!highlightLinks.has(l)) return config.colors.dimmed;
            if (l.mutual) return config.colors.mutual;
            return fromHover(l) ? config.colors.hover : config.colors.directed;
        }}

        function particleColor(l) {{
            if (!highlightLinks.has(l)) return config.colors.dimmed;
            if (l.mutual) return config.colors.mutualParticle;
            return fromHover(l) ? config.colors.hover : config.colors.directed;
        }}

        function linkMarker(l) {{
            if (!highlightLinks.has(l) || l.mutual) return null;
            return fromHover(l) ? 'url(#arrow-hover)' : 'url(#arrow-directed)';
        }}

        function nodeFill(n) {{
            return highlightNodes.size === 0 || highlightNodes.has(n) ? n.color : config.colors.dimmedNode;
        }}

        function nodeStroke(n) {{
            if (!highlightNodes.has(n)) return config.colors.outline;
            if (!hoverNode) return config.colors.outline;
            if (n === hoverNode) return config.colors.hover;
            if (n.mutual.some(l => l.source === hoverNode || l.target === hoverNode)) return config.colors.mutual;
            if (n.outgoing.some(l => l.target === hoverNode)) return config.colors.directed;
            return config.colors.hover;
        }}

        function render() {{
            linkLayer.selectAll('.link')
                .data(links)
                .join('line')
                .attr('class', 'link')
                .attr('stroke-width', 6)
                .on('mouseenter', (e, l) => {{ hoverLink = l; updateHighlight(); }})
                .on('mouseleave', () => {{ hoverLink = null; updateHighlight(); }});

            const node = nodeLayer.selectAll('.node')
                .data(nodes, d => d.id)
                .join(enter => {{
                    const g = enter.append('g').attr('class', 'node').style('cursor', 'pointer');
                    g.append('rect').attr('rx', 5).attr('ry', 5);
                    g.append('text').attr('class', 'node-label')
                        .attr('text-anchor', 'middle')
                        .attr('dominant-baseline', 'middle')
                        .text(d => d.name);
                    return g;
                }});
            node.on('mouseenter', (e, d) => {{ hoverNode = d; updateHighlight(); }})
                .on('mouseleave', () => {{ hoverNode = null; updateHighlight(); }})
                .on('click', (e, d) => {{ selectedNode = selectedNode === d ? null : d; updateHighlight(); }});
            node.append('title').text(d => d.name);
            restyle();
        }}

        function restyle() {{
            linkLayer.selectAll('.link')
                .attr('stroke', linkColor)
                .attr('stroke-opacity', l => highlightLinks.has(l) ? 1 : 0.6)
                .attr('marker-end', linkMarker);

            nodeLayer.selectAll('.node').each(function(d) {{
                const g = d3.select(this);
                const label = g.select('text');
                const textWidth = label.node().getComputedTextLength();
                const padding = highlightNodes.has(d) ? 15 : 5;
                const w = textWidth + 2 + padding * 2;
                const h = 12 + padding * 2;
                g.select('rect')
                    .attr('x', -w / 2)
                    .attr('y', -h / 2)
                    .attr('width', w)
                    .attr('height', h)
                    .attr('fill', nodeFill(d))
                    .attr('stroke', nodeStroke(d))
                    .attr('stroke-width', highlightNodes.has(d) ? 3 : 1);
            }});
        }}

        function ticked() {{
            linkLayer.selectAll('.link')
                .attr('x1', l => l.source.x)
                .attr('y1', l => l.source.y)
                .attr('x2', l => l.target.x)
                .attr('y2', l => l.target.y);
            nodeLayer.selectAll('.node').attr('transform', d => `translate(${{d.x}},${{d.y}})`);

            tickCount += 1;
            if (tickCount >= config.cooldownTicks) {{
                simulation.stop();
                zoomToFit(10);
            }}
        }}

        function zoomToFit(padding) {{
            if (!nodes.length) return;
            const xs = nodes.map(n => n.x);
            const ys = nodes.map(n => n.y);
            const [x0, x1, y0, y1] = [Math.min(...xs), Math.max(...xs), Math.min(...ys), Math.max(...ys)];
            const scale = Math.min(
                (width() - 2 * padding) / Math.max(x1 - x0 + 2 * config.nodeRelSize, 1),
                (height() - 2 * padding) / Math.max(y1 - y0 + 2 * config.nodeRelSize, 1),
                4
            );
            const transform = d3.zoomIdentity
                .translate(width() / 2, height() / 2)
                .scale(scale)
                .translate(-(x0 + x1) / 2, -(y0 + y1) / 2);
            svg.transition().duration(400).call(zoom.transform, transform);
        }}

        function emitParticle(l) {{
            particleLayer.append('circle')
                .attr('r', config.particleWidth / 2)
                .attr('fill', particleColor(l))
                .attr('cx', l.source.x)
                .attr('cy', l.source.y)
                .transition()
                .duration(800)
                .attr('cx', l.target.x)
                .attr('cy', l.target.y)
                .remove();
        }}

        function showInspector(state) {{
            const body = document.getElementById('inspector-body');
            if (!state) {{
                body.innerHTML = '<p>No properties to display</p>';
                return;
            }}
            if (API_BASE) {{
                fetch(`${{API_BASE}}/machines/${{encodeURIComponent(machineName)}}/states/${{encodeURIComponent(state)}}`)
                    .then(r => r.ok ? r.json() : null)
                    .then(info => {{ body.innerHTML = info ? info.html : '<p>No properties to display</p>'; }});
            }} else {{
                body.innerHTML = panels[state] || '<p>No properties to display</p>';
            }}
        }}

        function renderStateList() {{
            const states = Array.from(new Set(nodes.map(n => n.id))).sort();
            d3.select('#states').selectAll('.state-item')
                .data(states, d => d)
                .join('div')
                .attr('class', 'state-item')
                .text(d => d)
                .on('mouseenter', (e, d) => {{ hoverNode = nodes.find(n => n.id === d) || null; updateHighlight(); }})
                .on('mouseleave', () => {{ hoverNode = null; updateHighlight(); }});
        }}

        function install(data) {{
            // Old timers and simulation must not touch the new links
            if (particleTimer) clearInterval(particleTimer);
            if (simulation) simulation.stop();
            payload = data;
            hoverNode = hoverLink = selectedNode = null;
            highlightNodes = new Set();
            highlightLinks = new Set();
            tickCount = 0;
            particleLayer.selectAll('*').remove();
            nodeLayer.selectAll('.node').remove();

            buildGraph(payload);
            svg.attr('width', width()).attr('height', height());
            render();
            renderStateList();
            simulation = d3.forceSimulation(nodes)
                .velocityDecay(config.velocityDecay)
                .force('link', null)
                .force('charge', null)
                .force('collide', null)
                .force('radial', radialForce)
                .on('tick', ticked);
            particleTimer = setInterval(() => links.filter(l => highlightLinks.has(l)).forEach(emitParticle),
                                        config.particleIntervalMs);
            updateHighlight();
        }}

        const select = d3.select('#machine-select');
        select.selectAll('option')
            .data(machineNames)
            .join('option')
            .attr('value', d => d)
            .text(d => d);
        select.property('value', machineName);
        select.on('change', function() {{
            const name = this.value;
            if (!API_BASE) return;
            fetch(`${{API_BASE}}/machines/${{encodeURIComponent(name)}}`)
                .then(r => r.json())
                .then(data => {{ machineName = name; install(data); }});
        }});
        if (!API_BASE) select.property('disabled', machineNames.length <= 1);

        window.addEventListener('resize', () => svg.attr('width', width()).attr('height', height()));
        install(payload);
    </script>
</body>
</html>'''


def graph_to_html(
    graph: StateGraph,
    machine: str,
    properties: Optional[PropertyStore] = None,
    viewer: Optional[ViewerConfig] = None,
    layout: Optional[LayoutConfig] = None,
) -> str:
    """Standalone viewer page for one machine."""
    return ViewerRenderer(viewer, layout).render(graph, machine, properties=properties)
