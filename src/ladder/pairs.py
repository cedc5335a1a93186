from __future__ import annotations

from ladder.types import Pair, PlayerId


def canonical_pair(first: PlayerId, second: PlayerId) -> Pair:
    """Return the two ids ordered by their string form.

    Teammates listed in either slot, on either side of a match, map to the
    same tuple.
    """
    if str(second) < str(first):
        return second, first
    return first, second
