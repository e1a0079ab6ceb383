"""
bankcore.apportion
Largest-remainder (Hamilton) apportionment.

Splits an integer total across weighted buckets so the parts always add up to
the total exactly.
"""

from __future__ import annotations

import math
from typing import List, Sequence


def apportion(total: int, weights: Sequence[float], fallback: int = -1) -> List[int]:
    """Distribute `total` units proportionally to `weights`.

    - negative weights count as zero
    - total <= 0 -> all zeros
    - all weights zero -> everything goes to index `fallback`
    - leftover units after flooring go to the largest fractional remainders;
      ties keep the input index order
    """
    n = len(weights)
    counts = [0] * n
    total = int(total)
    if n == 0 or total <= 0:
        return counts

    clean = [max(0.0, float(w)) for w in weights]
    weight_sum = sum(clean)
    if weight_sum <= 0:
        counts[fallback] = total
        return counts

    remainders: List[float] = []
    for i, w in enumerate(clean):
        exact = total * (w / weight_sum)
        floor = int(math.floor(exact))
        counts[i] = floor
        remainders.append(exact - floor)

    leftover = total - sum(counts)
    if leftover >= 0:
        # sorted() is stable, so equal remainders stay in index order
        order = sorted(range(n), key=lambda i: -remainders[i])
        rounds, extra = divmod(leftover, n)
        for rank, i in enumerate(order):
            counts[i] += rounds + (1 if rank < extra else 0)
        return counts

    # past 2**53 the float products can floor above `total`; hand the excess
    # back from the smallest remainders, last index first on ties
    order = sorted(range(n), key=lambda i: (remainders[i], -i))
    k = 0
    while leftover < 0:
        i = order[k % n]
        if counts[i] > 0:
            counts[i] -= 1
            leftover += 1
        k += 1
    return counts
