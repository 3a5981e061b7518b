"""
State Graph - Typed node/link model for state machine transition graphs

Builds StateNode and StateLink objects from a machine's raw transition list,
reconciles opposite-direction transitions into mutual pairs, and attaches an
all-pairs DistanceCache used by the radial layout.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import hashlib
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .distances import DistanceCache

logger = logging.getLogger(__name__)


class LinkRole(str, Enum):
    """Classification of a link, fixed by the reconciliation pass."""
    DIRECTED = "directed"    # One-way transition
    MUTUAL = "mutual"        # Paired with a literal reverse transition
    SELF_LOOP = "self_loop"  # source == target, never paired


def _hash_rand(seed: str, salt: str = "", mod: float = 1.0) -> float:
    """Deterministic value in [0, mod) derived from seed+salt."""
    h = hashlib.sha256((seed + salt).encode()).hexdigest()
    return (int(h[:8], 16) % 10_000_000) / 10_000_000.0 * mod


def state_color(state_id: str) -> str:
    """Dark rgb() color for a state, stable across rebuilds."""
    r, g, b = (int(_hash_rand(state_id, salt, 155)) for salt in ("r", "g", "b"))
    return f"rgb({r}, {g}, {b})"


@dataclass(eq=False)
class StateLink:
    """
    A directed transition between two states.

    Attributes:
        source: Identity of the source state
        target: Identity of the target state
        source_node: Resolved source StateNode
        target_node: Resolved target StateNode
        mutual: Reverse link when this link is part of a mutual pair
        role: Classification set during reconciliation
    """
    source: str
    target: str
    source_node: Optional["StateNode"] = None
    target_node: Optional["StateNode"] = None
    mutual: Optional["StateLink"] = None
    role: LinkRole = LinkRole.DIRECTED

    @property
    def is_mutual(self) -> bool:
        return self.mutual is not None

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def other_end(self, state_id: str) -> Optional["StateNode"]:
        """Node at the opposite end from state_id."""
        if self.source == state_id:
            return self.target_node
        if self.target == state_id:
            return self.source_node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "mutual": self.is_mutual,
            "role": self.role.value,
        }

    def __repr__(self) -> str:
        arrow = "<->" if self.is_mutual else "-->"
        return f"StateLink({self.source} {arrow} {self.target})"


@dataclass(eq=False)
class StateNode:
    """
    One state of a machine.

    Position and velocity belong to the layout; they stay None until the
    simulation (or the browser) places the node.
    """
    id: str
    name: str = ""
    color: str = ""
    x: Optional[float] = None
    y: Optional[float] = None
    vx: Optional[float] = None
    vy: Optional[float] = None
    incoming_links: List[StateLink] = field(default_factory=list)
    outgoing_links: List[StateLink] = field(default_factory=list)
    mutual_links: List[StateLink] = field(default_factory=list)

    def __post_init__(self):
        if not self.name:
            self.name = self.id
        if not self.color:
            self.color = state_color(self.id)

    def add_incoming_link(self, link: StateLink) -> None:
        self.incoming_links.append(link)

    def add_outgoing_link(self, link: StateLink) -> None:
        self.outgoing_links.append(link)

    def add_mutual_link(self, link: StateLink) -> None:
        self.mutual_links.append(link)

    # Queries used by the presentation layer

    def get_all_links(self) -> List[StateLink]:
        """All incident links: incoming, then outgoing, then mutual."""
        return [*self.incoming_links, *self.outgoing_links, *self.mutual_links]

    def get_neighbors(self) -> List["StateNode"]:
        """Distinct adjacent nodes, in first-seen order."""
        neighbors: Dict[str, StateNode] = {}
        for link in self.get_all_links():
            other = link.target_node if link.source == self.id else link.source_node
            if other is not None and other.id not in neighbors:
                neighbors[other.id] = other
        return list(neighbors.values())

    def is_connected_to(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.get_neighbors())

    def get_link_to(self, node_id: str) -> Optional[StateLink]:
        """First incident link joining this node and node_id, either direction."""
        for link in self.get_all_links():
            if (link.source == self.id and link.target == node_id) or \
                    (link.target == self.id and link.source == node_id):
                return link
        return None

    def get_degree(self) -> int:
        return len(self.incoming_links) + len(self.outgoing_links) + len(self.mutual_links)

    def is_isolated(self) -> bool:
        return self.get_degree() == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "x": self.x,
            "y": self.y,
        }

    def __repr__(self) -> str:
        return f"StateNode({self.id!r}, degree={self.get_degree()})"


@dataclass
class StateGraph:
    """
    Fully linked transition graph of one machine.

    Structure is fixed after construction; only node positions and
    velocities change afterwards.
    """
    initial_state: str
    nodes: List[StateNode] = field(default_factory=list)
    links: List[StateLink] = field(default_factory=list)
    distance_cache: DistanceCache = field(default_factory=DistanceCache)

    def __post_init__(self):
        self._by_id: Dict[str, StateNode] = {node.id: node for node in self.nodes}

    def get_node(self, state_id: str) -> Optional[StateNode]:
        return self._by_id.get(state_id)

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._by_id

    def __len__(self) -> int:
        return len(self.nodes)

    def get_mutual_pairs(self) -> List[Tuple[StateLink, StateLink]]:
        """Each mutual pair once, ordered by the first link's creation."""
        pairs = []
        seen = set()
        for link in self.links:
            if link.mutual is not None and id(link) not in seen:
                seen.add(id(link))
                seen.add(id(link.mutual))
                pairs.append((link, link.mutual))
        return pairs

    def to_payload(self) -> Dict[str, Any]:
        """
        Rendering payload for the force-directed viewer.

        Links reference nodes by identity here; the client resolves them to
        node objects the same way StateLink.source_node does in Python.
        """
        cache = self.distance_cache
        nodes = []
        for node in self.nodes:
            data = node.to_dict()
            dist = cache.get_distance(self.initial_state, node.id)
            data["distance"] = None if math.isinf(dist) else dist
            nodes.append(data)

        distances = {
            node.id: {
                other: (None if math.isinf(d) else d)
                for other, d in cache.all_distances(node.id).items()
            }
            for node in self.nodes
        }

        return {
            "initialState": self.initial_state,
            "nodes": nodes,
            "links": [link.to_dict() for link in self.links],
            "distances": distances,
            "stats": {
                "node_count": len(self.nodes),
                "link_count": len(self.links),
                "mutual_pairs": len(self.get_mutual_pairs()),
            },
        }

    def __repr__(self) -> str:
        return f"StateGraph({len(self.nodes)} states, {len(self.links)} links, initial={self.initial_state!r})"


Transition = Tuple[str, str]


def as_transition(item: Any) -> Optional[Transition]:
    """Accept ("A", "B") pairs or {"from": "A", "to": "B"} mappings."""
    if isinstance(item, Mapping):
        src, dst = item.get("from"), item.get("to")
    elif isinstance(item, (list, tuple)) and len(item) == 2:
        src, dst = item
    else:
        return None
    if not isinstance(src, str) or not isinstance(dst, str):
        return None
    return src, dst


class GraphBuilder:
    """
    Build a StateGraph from an initial state and a transition list.

    Duplicated transitions are kept: every pair produces its own link.
    Malformed entries are skipped with a warning.
    """

    def build(self, initial_state: str, transitions: Iterable[Any]) -> StateGraph:
        pairs: List[Transition] = []
        for item in transitions:
            pair = as_transition(item)
            if pair is None:
                logger.warning(f"Skipping malformed transition: {item!r}")
                continue
            pairs.append(pair)

        nodes = self._create_nodes(pairs)
        links = self._create_links(pairs, nodes)
        self._reconcile_mutual(links, nodes)

        node_list = list(nodes.values())
        cache = DistanceCache.compute(node_list, links)
        graph = StateGraph(
            initial_state=initial_state,
            nodes=node_list,
            links=links,
            distance_cache=cache,
        )
        if node_list and initial_state not in graph:
            logger.warning(f"Initial state {initial_state!r} has no transitions")
        logger.debug(f"Built {graph!r}")
        return graph

    @staticmethod
    def _create_nodes(pairs: List[Transition]) -> Dict[str, StateNode]:
        nodes: Dict[str, StateNode] = {}
        for src, dst in pairs:
            if src not in nodes:
                nodes[src] = StateNode(src)
            if dst not in nodes:
                nodes[dst] = StateNode(dst)
        return nodes

    @staticmethod
    def _create_links(pairs: List[Transition], nodes: Dict[str, StateNode]) -> List[StateLink]:
        links = []
        for src, dst in pairs:
            source_node, target_node = nodes[src], nodes[dst]
            link = StateLink(
                source=src,
                target=dst,
                source_node=source_node,
                target_node=target_node,
                role=LinkRole.SELF_LOOP if src == dst else LinkRole.DIRECTED,
            )
            source_node.add_outgoing_link(link)
            target_node.add_incoming_link(link)
            links.append(link)
        return links

    @staticmethod
    def _reconcile_mutual(links: List[StateLink], nodes: Dict[str, StateNode]) -> None:
        """Pair each link with the first unpaired reverse link, if any."""
        by_pair: Dict[Transition, List[StateLink]] = {}
        for link in links:
            by_pair.setdefault((link.source, link.target), []).append(link)

        for link in links:
            if link.mutual is not None or link.role == LinkRole.SELF_LOOP:
                continue

            reverse = next(
                (r for r in by_pair.get((link.target, link.source), []) if r.mutual is None),
                None,
            )
            if reverse is None:
                continue

            link.mutual = reverse
            reverse.mutual = link
            link.role = reverse.role = LinkRole.MUTUAL

            from_node, to_node = nodes[link.source], nodes[link.target]
            from_node.outgoing_links.remove(link)
            to_node.incoming_links.remove(link)
            to_node.outgoing_links.remove(reverse)
            from_node.incoming_links.remove(reverse)

            for node in (from_node, to_node):
                node.add_mutual_link(link)
                node.add_mutual_link(reverse)

            logger.debug(f"Mutual link between {link.source} and {link.target}")


def build_state_graph(descriptor: Mapping[str, Any]) -> StateGraph:
    """
    Build a graph from a machine descriptor.

    Args:
        descriptor: {"initialState": str, "transitions": [{"from", "to"}, ...]}

    Returns:
        StateGraph with its distance cache
    """
    return GraphBuilder().build(
        descriptor.get("initialState", ""),
        descriptor.get("transitions") or [],
    )
