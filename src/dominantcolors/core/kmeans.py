"""K-means alternative to the iterative clusterer."""

import logging
from typing import List, Optional

import numpy as np
from sklearn.cluster import KMeans

from ..utils.color import ColorConverter
from .palette import Cluster, ColorSamples

logger = logging.getLogger(__name__)


class KMeansClusterer:
    """Cluster distinct colors in LAB space with weighted k-means."""

    def __init__(
        self,
        random_state: int = 0,
        n_init: int = 4,
        max_iter: int = 300,
        converter: Optional[ColorConverter] = None,
    ):
        self.random_state = random_state
        self.n_init = n_init
        self.max_iter = max_iter
        self.converter = converter or ColorConverter()

    def cluster(self, samples: ColorSamples, max_count: int) -> List[Cluster]:
        """Cluster ``samples`` into at most ``max_count`` clusters.

        Each center is rounded to the nearest RGB color; clusters that end
        up with no members are dropped.
        """
        if max_count <= 0:
            raise ValueError(f"max_count must be positive, got {max_count}")
        if len(samples) == 0:
            return []
        if len(samples) <= max_count:
            return [
                Cluster(color=tuple(int(c) for c in color), weight=int(count))
                for color, count in zip(samples.colors, samples.counts)
            ]

        lab = self.converter.rgb_to_lab(samples.colors).cpu().numpy()
        kmeans = KMeans(
            n_clusters=max_count,
            random_state=self.random_state,
            n_init=self.n_init,
            max_iter=self.max_iter,
        )
        labels = kmeans.fit_predict(lab, sample_weight=samples.counts.astype(np.float64))
        weights = np.bincount(labels, weights=samples.counts, minlength=max_count)
        centers = self.converter.lab_to_rgb8(kmeans.cluster_centers_)

        clusters = [
            Cluster(color=tuple(int(c) for c in centers[k]), weight=int(weights[k]))
            for k in range(max_count)
            if weights[k] > 0
        ]
        logger.debug(
            f"K-means reduced {len(samples)} colors to {len(clusters)} clusters "
            f"in {kmeans.n_iter_} iterations"
        )
        return clusters
