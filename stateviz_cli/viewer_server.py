#!/usr/bin/env python3
"""
State Machine Viewer Server

A minimal FastAPI server for the interactive state machine viewer.
Run with: python -m stateviz_cli.viewer_server --machines machines.json

Graphs are rebuilt on every request: switching machines never reuses node
objects, positions or highlight state from a previous graph.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from stateviz_core.config import StateVizConfig, load_config
from stateviz_core.errors import DescriptorError, MachineNotFoundError
from stateviz_core.inspector import PropertyStore, describe_properties, render_properties_html
from stateviz_core.logging_utils import configure_logging
from stateviz_core.machines import MachineRegistry
from stateviz_core.state_graph import StateGraph
from stateviz_core.version import __version__ as STATEVIZ_VERSION
from stateviz_core.viewer import ViewerRenderer

logger = logging.getLogger(__name__)


def _hops(value: float) -> Optional[int]:
    return None if math.isinf(value) else int(value)


def create_app(
    registry: MachineRegistry,
    properties: Optional[PropertyStore] = None,
    config: Optional[StateVizConfig] = None,
) -> FastAPI:
    """
    Build the viewer application.

    Args:
        registry: Machines served by the API
        properties: Inspector properties (empty store if None)
        config: Layout and viewer settings (defaults if None)

    Returns:
        FastAPI application
    """
    config = config or StateVizConfig()
    properties = properties or PropertyStore(aliases=config.data.machine_aliases)
    renderer = ViewerRenderer(config.viewer, config.layout)

    app = FastAPI(
        title="State Machine Viewer",
        description="Radial visualization of state machine transition graphs",
        version=STATEVIZ_VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def build(name: str) -> StateGraph:
        try:
            return registry.build(name)
        except MachineNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    def require_state(graph: StateGraph, name: str, state: str) -> None:
        if state not in graph:
            raise HTTPException(status_code=404, detail=f"State not found in {name}: {state}")

    @app.get("/", response_class=HTMLResponse)
    async def root():
        """Viewer page, opened on the default machine."""
        name = registry.default_name(config.viewer.default_machine)
        if name is None:
            raise HTTPException(status_code=404, detail="No machines loaded")
        return renderer.render(
            build(name),
            name,
            title="State Machine Viewer",
            machine_names=registry.names(),
            api_base="/api",
        )

    @app.get("/api/machines")
    async def list_machines():
        return {
            "machines": registry.names(),
            "default": registry.default_name(config.viewer.default_machine),
        }

    @app.get("/api/machines/{name}")
    async def get_machine(name: str):
        """Rendering payload of a machine."""
        return build(name).to_payload()

    @app.get("/api/machines/{name}/states")
    async def get_states(name: str):
        try:
            states = registry.states(name)
        except MachineNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"machine": name, "states": states}

    @app.get("/api/machines/{name}/states/{state}")
    async def get_state(name: str, state: str):
        """Inspector data and graph neighborhood of one state."""
        graph = build(name)
        require_state(graph, name, state)
        node = graph.get_node(state)
        props = properties.lookup(name, state)
        return {
            "machine": name,
            "state": state,
            "properties": props,
            "views": [view.to_dict() for view in describe_properties(props or {})],
            "html": render_properties_html(state, props),
            "neighbors": [n.id for n in node.get_neighbors()],
            "degree": node.get_degree(),
            "distance": _hops(graph.distance_cache.get_distance(graph.initial_state, state)),
        }

    @app.get("/api/machines/{name}/distances/{state}")
    async def get_distances(name: str, state: str):
        graph = build(name)
        require_state(graph, name, state)
        distances: Dict[str, Any] = {
            other: _hops(d) for other, d in graph.distance_cache.all_distances(state).items()
        }
        return {"machine": name, "from": state, "distances": distances}

    return app


def load_sources(config: StateVizConfig, machines: Optional[str] = None,
                 properties: Optional[str] = None):
    """Registry and property store from explicit paths or the configuration."""
    machines_path = machines or config.data.machines_path
    if not machines_path:
        raise DescriptorError("No machines path given (--machines or data.machines_path)")
    registry = MachineRegistry.from_path(Path(machines_path).expanduser())

    properties_path = properties or config.data.properties_path
    if properties_path:
        store = PropertyStore.from_file(Path(properties_path).expanduser(), config.data.machine_aliases)
    else:
        store = PropertyStore(aliases=config.data.machine_aliases)
    return registry, store


def serve(config: StateVizConfig, machines: Optional[str] = None, properties: Optional[str] = None,
          host: Optional[str] = None, port: Optional[int] = None) -> int:
    """Load the data and run the server until interrupted."""
    try:
        registry, store = load_sources(config, machines, properties)
    except DescriptorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    host = host or config.viewer.host
    port = port or config.viewer.port

    print("State Machine Viewer")
    print("=" * 40)
    print(f"Machines: {len(registry)} ({', '.join(registry.names())})")
    print(f"Server:   http://{host}:{port}/")
    print("=" * 40)

    app = create_app(registry, store, config)
    uvicorn.run(app, host=host, port=port, log_level="warning")
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="State Machine Viewer Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m stateviz_cli.viewer_server --machines machines.json
  python -m stateviz_cli.viewer_server --machines ./machines/ --properties props.json --port 8888

Then open http://localhost:8080/ in your browser.
"""
    )
    parser.add_argument("--machines", "-m", help="Machine descriptors (file or directory)")
    parser.add_argument("--properties", help="Inspector property file (JSON)")
    parser.add_argument("--config", "-c", help="Path to stateviz.yaml")
    parser.add_argument("--port", type=int, help="Port to run server on (default: 8080)")
    parser.add_argument("--host", help="Host to bind to (default: 127.0.0.1)")

    args = parser.parse_args()
    config = load_config(Path(args.config) if args.config else None)
    configure_logging(config.logging.level)
    sys.exit(serve(config, args.machines, args.properties, args.host, args.port))


if __name__ == "__main__":
    main()
