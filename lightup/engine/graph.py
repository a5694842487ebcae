"""Visibility graph over blank cells and its centrality ranking.

Centrality here is the shortest-path multiplicity approximation of
betweenness: every BFS source adds, to each other reachable node, the number
of shortest paths reaching it. It only serves as a tie-break bonus in the DP
score, whose weights were tuned against this exact quantity.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Tuple

from ..core.constants import DEFAULT_WEIGHTS, ORTHOGONAL_STEPS, ScoreWeights
from ..core.models import GraphNode, Position
from .board import Board, LayoutKey
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


class VisibilityGraph:
    """Graph with one node per blank cell, linked to the nearest blank in each direction.

    A wall blocks the link, so on an open board this is the 4-neighbour grid.
    """

    def __init__(self, layout_key: LayoutKey) -> None:
        self.layout_key = layout_key
        self.nodes: List[GraphNode] = []
        self.node_at: Dict[Position, GraphNode] = {}
        self.ranked: List[GraphNode] = []
        self.rank_of: Dict[int, int] = {}

    @classmethod
    def build(cls, board: Board) -> "VisibilityGraph":
        """Build the graph, compute centrality and rank the nodes."""

        graph = cls(board.layout_key)
        for cell in board.blank_cells():
            node = GraphNode(id=len(graph.nodes), row=cell.row, col=cell.col)
            graph.nodes.append(node)
            graph.node_at[cell.position] = node

        for node in graph.nodes:
            for dr, dc in ORTHOGONAL_STEPS:
                nearest = next(board.ray(node.row, node.col, dr, dc), None)
                if nearest is not None:
                    node.neighbors.append(graph.node_at[nearest.position])

        graph.compute_centrality()
        graph.rank()
        LOGGER.debug("Visibility graph built: %d nodes", len(graph.nodes))
        return graph

    def compute_centrality(self) -> None:
        for node in self.nodes:
            node.centrality = 0.0

        for source in self.nodes:
            dist: Dict[int, int] = {source.id: 0}
            paths: Dict[int, int] = {source.id: 1}
            queue = deque([source])
            while queue:
                current = queue.popleft()
                current_dist = dist[current.id]
                for neighbor in current.neighbors:
                    if neighbor.id not in dist:
                        dist[neighbor.id] = current_dist + 1
                        paths[neighbor.id] = paths[current.id]
                        queue.append(neighbor)
                    elif dist[neighbor.id] == current_dist + 1:
                        paths[neighbor.id] += paths[current.id]

            for node in self.nodes:
                if node is not source:
                    node.centrality += paths.get(node.id, 0)

    def rank(self) -> List[GraphNode]:
        """Order nodes by descending centrality (stable) and index their rank."""

        self.ranked = merge_sort_by_centrality(self.nodes)
        self.rank_of = {node.id: index for index, node in enumerate(self.ranked)}
        return self.ranked

    def rank_at(self, row: int, col: int) -> Optional[int]:
        node = self.node_at.get((row, col))
        if node is None:
            return None
        return self.rank_of.get(node.id)

    def centrality_bonus(self, row: int, col: int, weights: ScoreWeights = DEFAULT_WEIGHTS) -> int:
        rank = self.rank_at(row, col)
        if rank is None:
            return 0
        if rank < 10:
            return weights.top10_centrality
        if rank < 20:
            return weights.top20_centrality
        return 0


def merge_sort_by_centrality(nodes: List[GraphNode]) -> List[GraphNode]:
    """Stable merge sort, highest centrality first; returns a new list."""

    if len(nodes) <= 1:
        return list(nodes)
    mid = len(nodes) // 2
    left = merge_sort_by_centrality(nodes[:mid])
    right = merge_sort_by_centrality(nodes[mid:])

    merged: List[GraphNode] = []
    i = j = 0
    while i < len(left) and j < len(right):
        # Taking from the left on ties keeps equal nodes in input order.
        if left[i].centrality >= right[j].centrality:
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


_GRAPH_CACHE: Dict[LayoutKey, VisibilityGraph] = {}
_GRAPH_CACHE_LIMIT = 32


def graph_for(board: Board) -> VisibilityGraph:
    """Return the graph for the board's layout, rebuilding when the layout changed."""

    key = board.layout_key
    graph = _GRAPH_CACHE.get(key)
    if graph is None:
        if len(_GRAPH_CACHE) >= _GRAPH_CACHE_LIMIT:
            _GRAPH_CACHE.clear()
        graph = VisibilityGraph.build(board)
        _GRAPH_CACHE[key] = graph
    return graph


def clear_graph_cache() -> None:
    _GRAPH_CACHE.clear()


def centrality_table(board: Board) -> Dict[Tuple[int, int], float]:
    """Centrality of every blank cell, keyed by position."""

    graph = graph_for(board)
    return {(node.row, node.col): node.centrality for node in graph.nodes}
