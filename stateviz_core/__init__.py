"""
StateViz Core - State machine transition graphs and radial layout

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from .version import __version__, get_short_banner

from .errors import (
    StateVizError,
    DescriptorError,
    MachineNotFoundError,
    ExtractionError,
)

from .distances import (
    DistanceCache,
    UNREACHABLE,
)

from .state_graph import (
    LinkRole,
    StateLink,
    StateNode,
    StateGraph,
    GraphBuilder,
    build_state_graph,
    state_color,
)

from .layout import (
    RadialLayoutForce,
    ForceSimulation,
    install_radial_layout,
    run_radial_layout,
)

from .highlight import (
    SelectionContext,
    HighlightSet,
    compute_highlight,
    link_color,
    link_particle_color,
    link_arrow_length,
    link_particle_width,
    node_fill,
    node_ring_color,
)

from .machines import MachineRegistry, validate_descriptor

from .inspector import (
    PropertyKind,
    PropertyView,
    PropertyStore,
    describe_property,
    render_properties_html,
)

from .export import DotRenderer, MermaidRenderer
from .viewer import ViewerRenderer, graph_to_html

from .class_index import (
    index_classes,
    build_inheritance_tree,
    extract_inheritance,
)

from .log_index import index_log_lines, index_log_file

from .config import (
    StateVizConfig,
    load_config,
    save_config,
)

from .logging_utils import LogLevel, RunLogger, configure_logging

__all__ = [
    "__version__",
    "get_short_banner",
    # Errors
    "StateVizError",
    "DescriptorError",
    "MachineNotFoundError",
    "ExtractionError",
    # Graph model
    "DistanceCache",
    "UNREACHABLE",
    "LinkRole",
    "StateLink",
    "StateNode",
    "StateGraph",
    "GraphBuilder",
    "build_state_graph",
    "state_color",
    # Layout
    "RadialLayoutForce",
    "ForceSimulation",
    "install_radial_layout",
    "run_radial_layout",
    # Highlighting
    "SelectionContext",
    "HighlightSet",
    "compute_highlight",
    "link_color",
    "link_particle_color",
    "link_arrow_length",
    "link_particle_width",
    "node_fill",
    "node_ring_color",
    # Machines and properties
    "MachineRegistry",
    "validate_descriptor",
    "PropertyKind",
    "PropertyView",
    "PropertyStore",
    "describe_property",
    "render_properties_html",
    # Rendering
    "DotRenderer",
    "MermaidRenderer",
    "ViewerRenderer",
    "graph_to_html",
    # Offline tooling
    "index_classes",
    "build_inheritance_tree",
    "extract_inheritance",
    "index_log_lines",
    "index_log_file",
    # Config and logging
    "StateVizConfig",
    "load_config",
    "save_config",
    "LogLevel",
    "RunLogger",
    "configure_logging",
]
