'''Distance and preference primitives of the 2D preference plane.

Voters prefer candidates that are closer to them in the plane (Euclidean
distance). All functions here accept any objects with ``x`` and ``y``
attributes (voters, candidates, points) and are free of side effects.

Where several candidates are equally distant, the functions keep the first
one encountered in the candidate sequence unless a chooser (see
:mod:`spatialvote.evaluate.auxiliary`) is given to draw among them.
'''

import math
import itertools
from typing import Any, List, Optional, Sequence, Tuple


class Point:
    '''A bare point of the plane.'''
    def __init__(self, x: float, y: float):
        self.x = x
        self.y = y

    def __repr__(self):
        return f'Point({self.x!r}, {self.y!r})'


class Bounds:
    '''A rectangular extent of the plane, starting at the origin.

    :param width: Horizontal extent.
    :param height: Vertical extent.
    :param margin: Minimum distance from the edge that clamped display
        positions keep.
    '''
    def __init__(self, width: float = 600, height: float = 600,
                 margin: float = 2):
        if width <= 0 or height <= 0:
            raise ValueError(f'invalid plane extent {width}x{height}')
        if margin < 0 or 2 * margin >= min(width, height):
            raise ValueError(f'invalid plane margin {margin}')
        self.width = width
        self.height = height
        self.margin = margin

    @property
    def center(self) -> Tuple[float, float]:
        return (self.width / 2, self.height / 2)

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        '''Clamp a position into the bounds, keeping the margin.'''
        return (
            clamp(x, self.margin, self.width - self.margin),
            clamp(y, self.margin, self.height - self.margin),
        )

    def __eq__(self, other):
        return (
            isinstance(other, Bounds)
            and (self.width, self.height, self.margin)
            == (other.width, other.height, other.margin)
        )

    def __repr__(self):
        return f'Bounds({self.width!r}, {self.height!r}, {self.margin!r})'


DEFAULT_BOUNDS = Bounds()


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def distance(a: Any, b: Any) -> float:
    '''Euclidean distance of two points.'''
    return math.hypot(a.x - b.x, a.y - b.y)


def distance_squared(a: Any, b: Any) -> float:
    '''Squared Euclidean distance of two points.

    Orders points the same way as :func:`distance` without the square root.
    '''
    dx = a.x - b.x
    dy = a.y - b.y
    return dx * dx + dy * dy


def distances(voter: Any, candidates: Sequence[Any]) -> List[float]:
    '''Distances of the voter to all candidates, in candidate order.'''
    return [distance(voter, cand) for cand in candidates]


def nearest_candidates(voter: Any, candidates: Sequence[Any]) -> List[Any]:
    '''All candidates at the minimum distance from the voter.

    :raises ValueError: If there are no candidates.
    '''
    _require_candidates(candidates)
    best_dist = None
    nearest = []
    for cand in candidates:
        dist = distance_squared(voter, cand)
        if best_dist is None or dist < best_dist:
            best_dist = dist
            nearest = [cand]
        elif dist == best_dist:
            nearest.append(cand)
    return nearest


def nearest_candidate(voter: Any,
                      candidates: Sequence[Any],
                      chooser: Optional[Any] = None,
                      ) -> Any:
    '''The candidate closest to the voter.

    :param voter: The voter (any point).
    :param candidates: Candidates to choose from.
    :param chooser: Resolves ties among equally near candidates. If not
        given, the first such candidate in the sequence is returned.
    :raises ValueError: If there are no candidates.
    '''
    nearest = nearest_candidates(voter, candidates)
    if len(nearest) == 1 or chooser is None:
        return nearest[0]
    return chooser.choose(nearest)


def ranked_preferences(voter: Any,
                       candidates: Sequence[Any],
                       chooser: Optional[Any] = None,
                       ) -> List[int]:
    '''Candidate ids ordered from the closest to the furthest.

    The sort is stable: without a chooser, equally distant candidates keep
    their original order. With a chooser, each group of equally distant
    candidates is ordered by successive draws.

    :raises ValueError: If there are no candidates.
    '''
    _require_candidates(candidates)
    by_dist = sorted(
        ((distance_squared(voter, cand), cand) for cand in candidates),
        key=lambda item: item[0]
    )
    if chooser is None:
        return [cand.id for dist, cand in by_dist]
    ranking = []
    for dist, group in itertools.groupby(by_dist, key=lambda item: item[0]):
        remaining = [cand for _, cand in group]
        while len(remaining) > 1:
            chosen = chooser.choose(remaining)
            remaining.remove(chosen)
            ranking.append(chosen.id)
        ranking.append(remaining[0].id)
    return ranking


def _require_candidates(candidates: Sequence[Any]) -> None:
    if not candidates:
        raise ValueError('need at least one candidate')
