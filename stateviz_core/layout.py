"""
Radial Layout - Concentric ring force around the initial state

RadialLayoutForce pulls every reachable node toward a slot on a ring whose
radius is proportional to its hop distance from the initial state. It only
touches velocities; ForceSimulation integrates them into positions the way
the viewer's d3-force loop does, with the default forces removed.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Tuple

from .state_graph import StateGraph, StateNode

logger = logging.getLogger(__name__)

Force = Callable[[float], None]

# Default physical forces of the viewer; the radial force replaces them.
DEFAULT_FORCES = ("link", "charge", "collide")


class RadialLayoutForce:
    """
    Spring-like pull toward ring slots around the graph's initial state.

    Args:
        graph: Graph whose nodes are moved
        width, height: Viewport size; the center is (width/2, height/2)
        ring_spacing: Radius increment per hop
        strength: Multiplier applied with alpha to the position error
    """

    def __init__(
        self,
        graph: StateGraph,
        width: float,
        height: float,
        ring_spacing: float = 180.0,
        strength: float = 0.25,
    ):
        self.graph = graph
        self.width = width
        self.height = height
        self.ring_spacing = ring_spacing
        self.strength = strength

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    def target_positions(self) -> Dict[str, Tuple[float, float]]:
        """Ring slot for every node reachable from the initial state."""
        center_id = self.graph.initial_state
        if center_id not in self.graph:
            return {}

        cache = self.graph.distance_cache
        cx, cy = self.center
        targets: Dict[str, Tuple[float, float]] = {center_id: (cx, cy)}

        for hops in range(1, cache.max_finite_distance(center_id) + 1):
            ring = [n for n in self.graph.nodes if cache.get_distance(center_id, n.id) == hops]
            if not ring:
                continue
            step = 2 * math.pi / len(ring)
            radius = hops * self.ring_spacing
            for i, node in enumerate(ring):
                angle = i * step
                targets[node.id] = (
                    cx + math.cos(angle) * radius,
                    cy + math.sin(angle) * radius,
                )

        return targets

    def __call__(self, alpha: float) -> None:
        k = alpha * self.strength
        targets = self.target_positions()
        for node in self.graph.nodes:
            target = targets.get(node.id)
            if target is None or node.x is None or node.y is None:
                continue
            node.vx = (node.vx or 0.0) + (target[0] - node.x) * k
            node.vy = (node.vy or 0.0) + (target[1] - node.y) * k


class ForceSimulation:
    """
    Minimal d3-force style integrator.

    Only explicitly installed forces run; the radial layout installs its
    force and sets the default ones to None.
    """

    INITIAL_RADIUS = 10.0
    INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

    def __init__(
        self,
        nodes: List[StateNode],
        alpha_min: float = 0.001,
        velocity_decay: float = 0.4,
    ):
        self.nodes = nodes
        self.alpha = 1.0
        self.alpha_min = alpha_min
        self.alpha_target = 0.0
        self.alpha_decay = 1 - alpha_min ** (1 / 300)
        self.velocity_decay = velocity_decay
        self.tick_count = 0
        self._forces: Dict[str, Force] = {}
        self._initialize_nodes()

    def _initialize_nodes(self) -> None:
        """Phyllotaxis placement for nodes the caller has not positioned."""
        for i, node in enumerate(self.nodes):
            if node.x is None or node.y is None:
                radius = self.INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * self.INITIAL_ANGLE
                node.x = radius * math.cos(angle)
                node.y = radius * math.sin(angle)
            if node.vx is None:
                node.vx = 0.0
            if node.vy is None:
                node.vy = 0.0

    def set_force(self, name: str, force: Optional[Force]) -> "ForceSimulation":
        """Install a named force, or remove it with None."""
        if force is None:
            self._forces.pop(name, None)
        else:
            self._forces[name] = force
        return self

    def get_force(self, name: str) -> Optional[Force]:
        return self._forces.get(name)

    @property
    def force_names(self) -> List[str]:
        return list(self._forces)

    def is_cool(self) -> bool:
        return self.alpha < self.alpha_min

    def tick(self) -> None:
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
        for force in self._forces.values():
            force(self.alpha)

        keep = 1 - self.velocity_decay
        for node in self.nodes:
            node.vx *= keep
            node.vy *= keep
            node.x += node.vx
            node.y += node.vy
        self.tick_count += 1

    def run(self, ticks: int) -> int:
        """Advance up to `ticks` steps, stopping early once cool."""
        done = 0
        while done < ticks and not self.is_cool():
            self.tick()
            done += 1
        return done


def install_radial_layout(
    simulation: ForceSimulation,
    graph: StateGraph,
    width: float,
    height: float,
    ring_spacing: float = 180.0,
    strength: float = 0.25,
) -> RadialLayoutForce:
    """Replace the default forces with the radial force."""
    for name in DEFAULT_FORCES:
        simulation.set_force(name, None)
    force = RadialLayoutForce(graph, width, height, ring_spacing, strength)
    simulation.set_force("radial", force)
    return force


def run_radial_layout(
    graph: StateGraph,
    width: float = 1280.0,
    height: float = 800.0,
    ring_spacing: float = 180.0,
    strength: float = 0.25,
    ticks: int = 10,
    velocity_decay: float = 0.4,
    alpha_min: float = 0.001,
) -> Dict[str, Tuple[float, float]]:
    """
    Lay out a graph and return node positions.

    Args:
        graph: Graph to lay out (positions are written back to its nodes)
        ticks: Cooldown ticks, as in the viewer

    Returns:
        {state_id: (x, y)}
    """
    simulation = ForceSimulation(graph.nodes, alpha_min=alpha_min, velocity_decay=velocity_decay)
    install_radial_layout(simulation, graph, width, height, ring_spacing, strength)
    done = simulation.run(ticks)
    logger.debug(f"Radial layout ran {done} ticks (alpha={simulation.alpha:.4f})")
    return {node.id: (node.x, node.y) for node in graph.nodes}
