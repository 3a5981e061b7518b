#!/usr/bin/env python3
"""
StateViz Command Line Interface
===============================

Unified CLI for state machine graphs and the offline extraction tools.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19

Usage:
    stateviz extract        Extract a class inheritance tree from sources
    stateviz index-props    Index machine/state attributes from a log dump
    stateviz graph          Export a machine graph (json, html, dot, mermaid)
    stateviz distances      Hop distances from a state
    stateviz layout         Run the radial layout and print positions
    stateviz serve          Start the viewer server
"""

import argparse
import json
import math
import sys
import time
from pathlib import Path
from typing import List, Optional

from stateviz_core.class_index import extract_inheritance
from stateviz_core.config import StateVizConfig, load_config
from stateviz_core.errors import DescriptorError, ExtractionError, MachineNotFoundError
from stateviz_core.export import DotRenderer, MermaidRenderer
from stateviz_core.inspector import PropertyStore
from stateviz_core.layout import run_radial_layout
from stateviz_core.log_index import index_log_file
from stateviz_core.logging_utils import LogLevel, RunLogger, configure_logging
from stateviz_core.machines import MachineRegistry
from stateviz_core.version import get_short_banner
from stateviz_core.viewer import ViewerRenderer

# =============================================================================
# ANSI Colors
# =============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    CYAN = '\033[0;36m'
    BOLD = '\033[1m'
    NC = '\033[0m'  # No Color

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        cls.RED = cls.GREEN = cls.YELLOW = cls.BLUE = ''
        cls.CYAN = cls.BOLD = cls.NC = ''


def print_ok(msg: str) -> None:
    print(f"{Colors.GREEN}✓{Colors.NC} {msg}")


def print_warn(msg: str) -> None:
    print(f"{Colors.YELLOW}⚠{Colors.NC} {msg}")


def print_error(msg: str) -> None:
    print(f"{Colors.RED}✗{Colors.NC} {msg}", file=sys.stderr)


def print_info(msg: str) -> None:
    print(f"{Colors.BLUE}ℹ{Colors.NC} {msg}")


def print_header(msg: str) -> None:
    print(f"\n{Colors.BOLD}{Colors.CYAN}{msg}{Colors.NC}")
    print("=" * len(msg))


# =============================================================================
# Helpers
# =============================================================================

def _load_registry(args: argparse.Namespace, config: StateVizConfig) -> MachineRegistry:
    path = getattr(args, "machines", None) or config.data.machines_path
    if not path:
        raise DescriptorError("No machines path given (--machines or data.machines_path)")
    return MachineRegistry.from_path(Path(path).expanduser())


def _load_properties(args: argparse.Namespace, config: StateVizConfig) -> Optional[PropertyStore]:
    path = getattr(args, "properties", None) or config.data.properties_path
    if not path:
        return None
    return PropertyStore.from_file(Path(path).expanduser(), config.data.machine_aliases)


def _format_hops(value: float) -> str:
    return "unreachable" if math.isinf(value) else str(int(value))


# =============================================================================
# Commands
# =============================================================================

def cmd_extract(args: argparse.Namespace) -> int:
    """Extract the inheritance tree below a base class."""
    config: StateVizConfig = args.config_obj
    extensions = args.ext or config.extract.extensions
    extensions = [ext if ext.startswith(".") else f".{ext}" for ext in extensions]

    try:
        tree, written = extract_inheritance(
            Path(args.root), args.base,
            Path(args.output) if args.output else None,
            extensions,
        )
    except ExtractionError as e:
        print_error(str(e))
        return 1

    print_header(f"Inheritance of {args.base}")
    print_info(f"{len(tree)} classes, {sum(len(c) for c in tree.values())} subclass links")
    for key, path in written.items():
        print_ok(f"{key}: {path}")
    args.run_outputs = {key: str(path) for key, path in written.items()}
    return 0


def cmd_index_props(args: argparse.Namespace) -> int:
    """Index machine/state attributes from a property dump log."""
    config: StateVizConfig = args.config_obj
    try:
        machines = index_log_file(Path(args.input), Path(args.output), args.prefix or config.log_index.prefix)
    except ExtractionError as e:
        print_error(str(e))
        return 1

    states = sum(len(s) for s in machines.values())
    print_ok(f"Indexed {len(machines)} machines, {states} states")
    print_ok(f"Processed data written to {args.output}")
    args.run_outputs = {"machines": len(machines), "states": states}
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    """Export a machine graph."""
    config: StateVizConfig = args.config_obj
    try:
        registry = _load_registry(args, config)
        graph = registry.build(args.machine)
        properties = _load_properties(args, config) if args.format == "html" else None
    except (DescriptorError, MachineNotFoundError) as e:
        print_error(str(e))
        return 1

    fmt = args.format.lower()
    if fmt == "json":
        output = json.dumps(graph.to_payload(), indent=2)
    elif fmt == "html":
        output = ViewerRenderer(config.viewer, config.layout).render(
            graph, args.machine, properties=properties, machine_names=registry.names(),
        )
    elif fmt == "dot":
        output = DotRenderer(args.machine).render(graph)
    else:
        output = MermaidRenderer().render(graph)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print_ok(f"Written {fmt} to {args.output}")
        args.run_outputs = {"file": args.output}
    else:
        print(output)
    return 0


def cmd_distances(args: argparse.Namespace) -> int:
    """Print hop distances from a state (initial state by default)."""
    config: StateVizConfig = args.config_obj
    try:
        graph = _load_registry(args, config).build(args.machine)
    except (DescriptorError, MachineNotFoundError) as e:
        print_error(str(e))
        return 1

    origin = args.source or graph.initial_state
    if origin not in graph:
        print_error(f"State not found in {args.machine}: {origin}")
        return 1

    distances = graph.distance_cache.all_distances(origin)
    if args.json:
        print(json.dumps({k: (None if math.isinf(v) else v) for k, v in distances.items()}, indent=2))
        return 0

    print_header(f"{args.machine}: distances from {origin}")
    for state, hops in sorted(distances.items(), key=lambda kv: (kv[1], kv[0])):
        print(f"  {state:<32} {_format_hops(hops)}")
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    """Run the radial layout and print node positions."""
    config: StateVizConfig = args.config_obj
    try:
        graph = _load_registry(args, config).build(args.machine)
    except (DescriptorError, MachineNotFoundError) as e:
        print_error(str(e))
        return 1

    lay = config.layout
    ticks = args.ticks if args.ticks is not None else lay.cooldown_ticks
    positions = run_radial_layout(
        graph,
        width=lay.width,
        height=lay.height,
        ring_spacing=lay.ring_spacing,
        strength=lay.strength,
        ticks=ticks,
        velocity_decay=lay.velocity_decay,
        alpha_min=lay.alpha_min,
    )

    if args.json:
        print(json.dumps({k: {"x": x, "y": y} for k, (x, y) in positions.items()}, indent=2))
        return 0

    print_header(f"{args.machine}: radial layout ({ticks} ticks)")
    for state, (x, y) in positions.items():
        hops = graph.distance_cache.get_distance(graph.initial_state, state)
        print(f"  {state:<32} x={x:9.2f}  y={y:9.2f}  hops={_format_hops(hops)}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the viewer server."""
    from stateviz_cli.viewer_server import serve

    return serve(args.config_obj, args.machines, args.properties, args.host, args.port)


# =============================================================================
# Main Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stateviz",
        description=get_short_banner(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stateviz extract ./Sources BaseState -o out/
  stateviz index-props dump.log props.json
  stateviz graph Player --machines machines.json --format html -o player.html
  stateviz distances Player --from Walk
  stateviz layout Player --ticks 50
  stateviz serve --machines machines.json --port 8888
        """
    )
    parser.add_argument("-c", "--config", help="Path to stateviz.yaml")
    parser.add_argument("--log-dir", help="Record runs (text + JSONL) in this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # extract
    sub = subparsers.add_parser("extract", help="Extract class inheritance tree")
    sub.add_argument("root", help="Source directory to scan")
    sub.add_argument("base", help="Base class name")
    sub.add_argument("-o", "--output", help="Output directory (default: cwd)")
    sub.add_argument("--ext", nargs="+", help="File extensions (default: .swift)")
    sub.set_defaults(func=cmd_extract)

    # index-props
    sub = subparsers.add_parser("index-props", help="Index state attributes from a log")
    sub.add_argument("input", help="Log file")
    sub.add_argument("output", help="JSON output file")
    sub.add_argument("--prefix", help="Line prefix (default: playerStateMachine)")
    sub.set_defaults(func=cmd_index_props)

    # graph
    sub = subparsers.add_parser("graph", help="Export a machine graph")
    sub.add_argument("machine", help="Machine name")
    sub.add_argument("-m", "--machines", help="Machine descriptors (file or directory)")
    sub.add_argument("--properties", help="Inspector property file (html format)")
    sub.add_argument("-f", "--format", choices=["json", "html", "dot", "mermaid"], default="json",
                     help="Output format (default: json)")
    sub.add_argument("-o", "--output", help="Output file (default: stdout)")
    sub.set_defaults(func=cmd_graph)

    # distances
    sub = subparsers.add_parser("distances", help="Hop distances from a state")
    sub.add_argument("machine", help="Machine name")
    sub.add_argument("-m", "--machines", help="Machine descriptors (file or directory)")
    sub.add_argument("--from", dest="source", help="Origin state (default: initial state)")
    sub.add_argument("--json", action="store_true", help="JSON output")
    sub.set_defaults(func=cmd_distances)

    # layout
    sub = subparsers.add_parser("layout", help="Run the radial layout")
    sub.add_argument("machine", help="Machine name")
    sub.add_argument("-m", "--machines", help="Machine descriptors (file or directory)")
    sub.add_argument("--ticks", type=int, help="Simulation ticks (default: cooldown_ticks)")
    sub.add_argument("--json", action="store_true", help="JSON output")
    sub.set_defaults(func=cmd_layout)

    # serve
    sub = subparsers.add_parser("serve", help="Start the viewer server")
    sub.add_argument("-m", "--machines", help="Machine descriptors (file or directory)")
    sub.add_argument("--properties", help="Inspector property file")
    sub.add_argument("--host", help="Host to bind to")
    sub.add_argument("-p", "--port", type=int, help="Port number")
    sub.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    # Disable colors if not TTY
    if not sys.stdout.isatty():
        Colors.disable()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    config = load_config(Path(args.config) if args.config else None)
    configure_logging("DEBUG" if args.verbose else config.logging.level)
    args.config_obj = config
    args.run_outputs = None

    start = time.perf_counter()
    returncode = args.func(args)
    duration_ms = (time.perf_counter() - start) * 1000

    if args.log_dir:
        # Runs are always recorded; the console level only filters stderr
        run_logger = RunLogger(Path(args.log_dir), LogLevel.INFO, config.logging.events_log)
        inputs = {k: v for k, v in vars(args).items()
                  if k not in ("func", "config_obj", "run_outputs", "log_dir")}
        run_logger.log_run(args.command, inputs, args.run_outputs, returncode, duration_ms)

    return returncode


if __name__ == "__main__":
    sys.exit(main())
