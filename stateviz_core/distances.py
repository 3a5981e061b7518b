"""
Distance Cache - All-pairs hop distances over a state graph

Floyd-Warshall on a dense table. Links count as undirected unit-weight edges,
whatever their direction or mutual pairing. Built once per graph and read-only
afterwards.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import math
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Union

if TYPE_CHECKING:
    from .state_graph import StateLink, StateNode

Distance = Union[int, float]  # int hop count, or math.inf when unreachable

UNREACHABLE = math.inf


class DistanceCache:
    """Read-only table of hop distances between state identities."""

    def __init__(self, table: Optional[Dict[str, Dict[str, Distance]]] = None):
        self._cache: Dict[str, Dict[str, Distance]] = table or {}

    @classmethod
    def compute(cls, nodes: Iterable["StateNode"], links: Iterable["StateLink"]) -> "DistanceCache":
        ids = [node.id for node in nodes]
        return cls(cls._floyd_warshall(ids, [(l.source, l.target) for l in links]))

    @staticmethod
    def _floyd_warshall(ids: List[str], edges: List[tuple]) -> Dict[str, Dict[str, Distance]]:
        table: Dict[str, Dict[str, Distance]] = {
            i: {j: (0 if i == j else UNREACHABLE) for j in ids}
            for i in ids
        }

        for src, dst in edges:
            if src == dst or src not in table or dst not in table:
                continue
            table[src][dst] = 1
            table[dst][src] = 1

        for k in ids:
            row_k = table[k]
            for i in ids:
                d_ik = table[i][k]
                if d_ik == UNREACHABLE:
                    continue
                row_i = table[i]
                for j in ids:
                    candidate = d_ik + row_k[j]
                    if candidate < row_i[j]:
                        row_i[j] = candidate

        return table

    def get_distance(self, node_a: str, node_b: str) -> Distance:
        """Hop count between two states, math.inf if unknown or unreachable."""
        return self._cache.get(node_a, {}).get(node_b, UNREACHABLE)

    def has_path(self, node_a: str, node_b: str) -> bool:
        return self.get_distance(node_a, node_b) < UNREACHABLE

    def all_distances(self, node: str) -> Dict[str, Distance]:
        """Copy of the distance row for node (empty if unknown)."""
        return dict(self._cache.get(node, {}))

    def max_finite_distance(self, node: str) -> int:
        """Largest finite distance from node, 0 when nothing is reachable."""
        finite = [d for d in self._cache.get(node, {}).values() if d < UNREACHABLE]
        return int(max(finite)) if finite else 0

    def nodes_at_distance(self, node: str, hops: int) -> List[str]:
        """States exactly `hops` away from node, in table order."""
        return [other for other, d in self._cache.get(node, {}).items() if d == hops]

    def __contains__(self, node: object) -> bool:
        return node in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def __repr__(self) -> str:
        return f"DistanceCache({len(self._cache)} states)"
