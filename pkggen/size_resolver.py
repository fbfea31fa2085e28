"""
Selection of the source resolution to scale from for a target bucket.
"""

from typing import Sequence

from .errors import ConfigurationError
from .size_set import SizeSet


def coverage(source: SizeSet, target: SizeSet) -> float:
    """
    How well a source covers a target under uniform scaling.

    This is the smaller of the two per-axis ratios source/target: 1.0 or more
    means the source dominates the target and only needs downscaling,
    below 1.0 is the factor the source falls short by.
    """
    ratios = []
    for src, dst in ((source.width, target.width), (source.height, target.height)):
        ratios.append(float('inf') if dst == 0 else src / dst)
    return min(ratios)


def select_best_size_set(source_sizes: Sequence[SizeSet], target: SizeSet) -> SizeSet:
    """
    Pick the source size to scale from when none is configured.

    Among sources that cover the target, the one with the smallest coverage
    wins (least waste). If none covers it, the one with the largest
    coverage wins (least upscaling). Ties go to the smaller area, then to
    the earlier entry.

    Raises:
        ConfigurationError: If source_sizes is empty
    """
    if not source_sizes:
        raise ConfigurationError(f"No source sizes to resolve target {target}")

    candidates = [(coverage(size, target), size.area, index, size)
                  for index, size in enumerate(source_sizes)]

    covering = [c for c in candidates if c[0] >= 1.0]
    if covering:
        return min(covering, key=lambda c: (c[0], c[1], c[2]))[3]

    return min(candidates, key=lambda c: (-c[0], c[1], c[2]))[3]
