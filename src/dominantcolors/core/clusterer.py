"""Iterative agglomerative clustering of weighted colors.

The closest pair of clusters is merged until the palette is small enough.
Pairs are ranked by a total order so results are reproducible:

1. smaller pair distance under the configured formula
2. larger combined weight
3. lower RGB keys (smaller key of the pair first, then the larger one)
4. lower arena ids

A merged cluster takes the weight-proportional average of both LAB colors,
rounded back to RGB, so its LAB value is always that of a real RGB color.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import torch

from ..utils.color import ColorConverter
from .delta_e import LIGHTNESS_SCALE, pair_distance
from .options import DeltaEFormula
from .palette import Cluster, ColorSamples, color_keys

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 1.0
RADIUS_GROWTH = 1.5

# Upper bound on distance matrix elements evaluated per tensor call
BLOCK_ELEMENTS = 1 << 21
# Rows searched per block
CHUNK_ROWS = 128
# Lightness neighbours on each side that seed a search
SEED_NEIGHBOURS = 16


class ClusterArena:
    """Clusters stored in slots with stable ids and cached best partners.

    Slot ``i`` starts as the i-th input color. A merge keeps the lower id and
    retires the other slot, so iterating active slots yields clusters in
    order of discovery.

    Every active pair is ranked by the cached partner of at least one of its
    two slots, so the best cached pair is the best pair overall. A merge
    recomputes the merged slot and the rows whose partner disappeared; other
    rows keep their entry, since their pairs with the merged slot are covered
    by its fresh row.

    Searches only visit active slots whose lightness gap could beat the best
    distance found so far (see ``LIGHTNESS_SCALE``), using an index of the
    active slots sorted by lightness.
    """

    def __init__(
        self,
        colors: np.ndarray,
        weights: Sequence[int],
        formula: DeltaEFormula = DeltaEFormula.CIEDE2000,
        converter: Optional[ColorConverter] = None,
    ):
        """Initialize arena.

        Args:
            colors: (n, 3) RGB colors in [0, 255]
            weights: n positive weights
            formula: Distance formula
            converter: Color converter used for LAB math
        """
        self.formula = formula
        self.converter = converter or ColorConverter()
        self.colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 3).copy()
        self.weights = np.asarray(weights, dtype=np.int64).reshape(-1).copy()
        if len(self.colors) != len(self.weights):
            raise ValueError(
                f"Got {len(self.colors)} colors but {len(self.weights)} weights"
            )

        size = len(self.weights)
        self.keys = color_keys(self.colors)
        self.labs = self.converter.rgb_to_lab(self.colors)
        self.lightness = self.labs[:, 0].cpu().numpy().astype(np.float64)
        self.lightness_scale = LIGHTNESS_SCALE[formula]
        self.active = np.ones(size, dtype=bool)
        self.nearest = np.full(size, -1, dtype=np.int64)
        self.nearest_distance = np.full(size, np.inf)
        self.count = size

        # Active slots sorted by lightness
        self._order = np.lexsort((np.arange(size), self.lightness))
        self._order_lightness = self.lightness[self._order]
        self._prepared = False

    def __len__(self) -> int:
        return self.count

    def clusters(self) -> List[Cluster]:
        """Active clusters in order of discovery."""
        return [
            Cluster(color=tuple(int(c) for c in self.colors[i]), weight=int(self.weights[i]))
            for i in np.flatnonzero(self.active)
        ]

    def closest_pair(self) -> Tuple[int, int, float]:
        """Return ``(first_id, second_id, distance)`` of the best pair to merge."""
        if self.count < 2:
            raise ValueError("Need at least two clusters to pick a pair")
        self._prepare()

        candidates = np.flatnonzero(self.active & (self.nearest >= 0))
        distances = self.nearest_distance[candidates]
        distance = float(distances.min())
        tied = candidates[distances == distance]

        first = min(
            (int(i) for i in tied),
            key=lambda i: self._pair_order(i, int(self.nearest[i]), distance),
        )
        second = int(self.nearest[first])
        return (min(first, second), max(first, second), distance)

    def merge(self, first: int, second: int) -> int:
        """Merge two active clusters into the lower id and return that id."""
        keep, drop = min(first, second), max(first, second)
        if keep == drop or not (self.active[keep] and self.active[drop]):
            raise ValueError(f"Cannot merge clusters {first} and {second}")
        self._prepare()

        stale = self.active & ((self.nearest == keep) | (self.nearest == drop))
        stale[[keep, drop]] = False
        rows = np.append(np.flatnonzero(stale), keep)

        # Old partner distances of the touched rows seed the new search window
        previous = self.nearest_distance[np.append(rows, drop)]
        previous = previous[np.isfinite(previous)]
        hint = float(previous.max()) if len(previous) else 0.0

        total = int(self.weights[keep] + self.weights[drop])
        lab = (
            self.labs[keep] * float(self.weights[keep])
            + self.labs[drop] * float(self.weights[drop])
        ) / total
        rgb = self.converter.lab_to_rgb8(lab)

        self.colors[keep] = rgb
        self.labs[keep] = self.converter.rgb_to_lab(rgb)
        self.lightness[keep] = float(self.labs[keep, 0])
        self.keys[keep] = color_keys(rgb)[0]
        self.weights[keep] = total
        self.weights[drop] = 0
        self.active[drop] = False
        self.nearest[drop] = -1
        self.nearest_distance[drop] = np.inf
        self.count -= 1

        self._reindex(keep, drop)
        self._refresh(rows, hint)
        return keep

    def _prepare(self) -> None:
        if not self._prepared:
            self._refresh(np.flatnonzero(self.active))
            self._prepared = True

    def _pair_order(self, i: int, j: int, distance: float) -> Tuple:
        lo_key, hi_key = sorted((int(self.keys[i]), int(self.keys[j])))
        return (
            distance,
            -int(self.weights[i] + self.weights[j]),
            lo_key,
            hi_key,
            min(i, j),
            max(i, j),
        )

    def _reindex(self, keep: int, drop: int) -> None:
        """Remove ``drop`` from the lightness index and re-insert ``keep``."""
        retained = (self._order != keep) & (self._order != drop)
        order = self._order[retained]
        lightness = self._order_lightness[retained]
        at = int(np.searchsorted(lightness, self.lightness[keep], side="right"))
        self._order = np.insert(order, at, keep)
        self._order_lightness = np.insert(lightness, at, self.lightness[keep])

    def _span(self, lightness: np.ndarray, reach) -> Tuple[int, int]:
        """Index range of active slots within ``reach`` of any of ``lightness``."""
        slack = reach * self.lightness_scale * (1 + 1e-9) + 1e-9
        low = np.searchsorted(self._order_lightness, np.min(lightness - slack), side="left")
        high = np.searchsorted(self._order_lightness, np.max(lightness + slack), side="right")
        return int(low), int(high)

    def _distances(self, rows: np.ndarray, columns: np.ndarray) -> np.ndarray:
        """Pair distances from ``rows`` to ``columns``; a slot against itself is inf."""
        block = pair_distance(
            self.labs[torch.as_tensor(rows, dtype=torch.long)].unsqueeze(1),
            self.labs[torch.as_tensor(columns, dtype=torch.long)].unsqueeze(0),
            self.formula,
        )
        distances = block.cpu().numpy()
        distances[rows[:, None] == columns[None, :]] = np.inf
        return distances

    def _refresh(self, rows: np.ndarray, hint: float = 0.0) -> None:
        if len(rows) == 0:
            return
        # Neighbours in lightness share most of their candidates
        rows = rows[np.argsort(self.lightness[rows], kind="stable")]
        for start in range(0, len(rows), CHUNK_ROWS):
            self._search(rows[start : start + CHUNK_ROWS], hint)

    def _search(self, rows: np.ndarray, hint: float) -> None:
        """Find the best partner of each row among all active slots.

        ``rows`` must be sorted by lightness. The first block covers the
        rows' lightness neighbours (and ``hint`` around them); its best
        distances bound how far in lightness a better partner can lie.
        """
        lightness = self.lightness[rows]
        positions = np.searchsorted(self._order_lightness, lightness)
        start = max(int(positions[0]) - SEED_NEIGHBOURS, 0)
        stop = int(positions[-1]) + SEED_NEIGHBOURS + 1
        if hint > 0:
            low, high = self._span(lightness, hint)
            start, stop = min(start, low), max(stop, high)

        while True:
            if len(rows) > 1 and len(rows) * (stop - start) > BLOCK_ELEMENTS:
                half = len(rows) // 2
                self._search(rows[:half], hint)
                self._search(rows[half:], hint)
                return

            columns = self._order[start:stop]
            distances = self._distances(rows, columns)
            low, high = self._span(lightness, distances.min(axis=1))
            if low >= start and high <= stop:
                self._assign_nearest(rows, columns, distances)
                return
            start, stop = min(start, low), max(stop, high)

    def _assign_nearest(
        self, rows: np.ndarray, columns: np.ndarray, distances: np.ndarray
    ) -> None:
        best = distances.argmin(axis=1)
        best_distance = distances[np.arange(len(rows)), best]
        finite = np.isfinite(best_distance)
        partners = columns[best]

        ties = finite & ((distances == best_distance[:, None]).sum(axis=1) > 1)
        for r in np.flatnonzero(ties):
            i = int(rows[r])
            distance = float(best_distance[r])
            candidates = columns[distances[r] == distance]
            partners[r] = min(
                (int(j) for j in candidates),
                key=lambda j: self._pair_order(i, j, distance),
            )

        self.nearest[rows] = np.where(finite, partners, -1)
        self.nearest_distance[rows] = best_distance


class IterativeClusterer:
    """Reduce weighted color samples to at most ``max_count`` clusters.

    Merges happen in rounds bounded by a merge radius. When the closest pair
    lies outside the radius while too many clusters remain, the radius grows
    geometrically and a new round starts; since every distance is finite the
    loop always terminates with ``min(max_count, len(samples))`` clusters.

    Every merge takes the globally closest pair, so the radius only groups
    merges into rounds for the debug log. ``initial_radius`` and
    ``radius_growth`` never change which clusters are returned.

    Cost grows quadratically with the number of distinct colors; see
    ``Quality`` for typical timings.
    """

    def __init__(
        self,
        formula: DeltaEFormula = DeltaEFormula.CIEDE2000,
        initial_radius: float = INITIAL_RADIUS,
        radius_growth: float = RADIUS_GROWTH,
        converter: Optional[ColorConverter] = None,
    ):
        if initial_radius <= 0 or radius_growth <= 1:
            raise ValueError("initial_radius must be positive and radius_growth above 1")
        self.formula = formula
        self.initial_radius = initial_radius
        self.radius_growth = radius_growth
        self.converter = converter or ColorConverter()

    def cluster(self, samples: ColorSamples, max_count: int) -> List[Cluster]:
        """Cluster ``samples`` into at most ``max_count`` clusters."""
        if max_count <= 0:
            raise ValueError(f"max_count must be positive, got {max_count}")

        arena = ClusterArena(samples.colors, samples.counts, self.formula, self.converter)
        if len(arena) <= max_count:
            return arena.clusters()

        radius = self.initial_radius
        rounds = 1
        merges = 0
        while len(arena) > max_count:
            first, second, distance = arena.closest_pair()
            while distance >= radius:
                radius *= self.radius_growth
                rounds += 1
                logger.debug(
                    f"Round {rounds}: relaxed merge radius to {radius:.3f} "
                    f"with {len(arena)} clusters left"
                )
            arena.merge(first, second)
            merges += 1

        logger.debug(
            f"Clustered {len(samples)} colors into {len(arena)} clusters "
            f"({merges} merges, {rounds} rounds, {self.formula.value})"
        )
        return arena.clusters()
