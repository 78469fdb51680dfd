"""Final merge pass over near-duplicate palette colors."""

import logging
from typing import List, Optional, Sequence

from ..utils.color import ColorConverter
from .clusterer import ClusterArena
from .options import DeltaEFormula
from .palette import Cluster

logger = logging.getLogger(__name__)


def deduplicate(
    clusters: Sequence[Cluster],
    threshold: float,
    formula: DeltaEFormula = DeltaEFormula.CIEDE2000,
    converter: Optional[ColorConverter] = None,
) -> List[Cluster]:
    """Merge clusters closer than ``threshold`` until none remain.

    Pairs are merged closest first with the same ordering and weighted LAB
    averaging as the clusterer. Afterwards every pair is at least
    ``threshold`` apart, so a second pass leaves the result unchanged.
    A threshold of zero disables merging.
    """
    clusters = list(clusters)
    if threshold <= 0 or len(clusters) < 2:
        return clusters

    arena = ClusterArena(
        [cluster.color for cluster in clusters],
        [cluster.weight for cluster in clusters],
        formula,
        converter,
    )
    merges = 0
    while len(arena) > 1:
        first, second, distance = arena.closest_pair()
        if distance >= threshold:
            break
        arena.merge(first, second)
        merges += 1

    if merges:
        logger.debug(f"Merged {merges} near-duplicate colors (threshold {threshold})")
    return arena.clusters()
