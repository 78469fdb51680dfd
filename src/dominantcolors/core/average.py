"""Average colors of vertical image segments."""

from typing import List

import numpy as np

from ..image.buffer import ImageBuffer
from .palette import Cluster


def segment_average_colors(image: ImageBuffer, count: int) -> List[Cluster]:
    """Split ``image`` into ``count`` vertical strips and average each one.

    Fully transparent pixels are ignored; strips without any visible pixel
    are skipped. Each cluster is weighted by the number of pixels averaged.
    """
    clusters = []
    for columns in np.array_split(np.arange(image.width), count):
        if len(columns) == 0:
            continue
        strip = image.pixels[:, columns[0] : columns[-1] + 1].reshape(-1, image.pixels.shape[2])
        if image.has_alpha:
            strip = strip[strip[:, 3] > 0]
        if len(strip) == 0:
            continue
        mean = np.round(strip[:, :3].astype(np.float64).mean(axis=0))
        clusters.append(Cluster(color=tuple(int(c) for c in mean), weight=int(len(strip))))
    return clusters
