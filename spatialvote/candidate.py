'''Candidates and their default layouts in the plane.

Candidates are points in the 2D preference plane identified by a stable
0-based integer id. Their colour is opaque to the tabulation and is only
passed through to the voter display annotations.
'''

from __future__ import annotations

import math
from typing import Any, List, Optional, Tuple

from spatialvote.persist import simple_serialization


DEFAULT_COLORS: List[str] = [
    '#FF0000',
    '#0000FF',
    '#00FF00',
    '#FFFF00',
    '#00FFFF',
    '#FF00FF',
]
'''Default candidate colours, by candidate id.'''

DEFAULT_NAMES: List[str] = ['Red', 'Blue', 'Green', 'Yellow', 'Cyan', 'Magenta']

MIN_CANDIDATES = 2
MAX_CANDIDATES = len(DEFAULT_COLORS)

LAYOUT_RADIUS = 150


class CandidateError(Exception):
    '''A candidate is invalid in the given context.

    :param candidate: Candidate that was found to be invalid.
    :param expected: Definition of a candidate that was expected.
    '''
    def __init__(self, candidate: Any, expected: Any = None):
        self.candidate = candidate
        self.expected = expected
        message = f'invalid candidate: {candidate}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


@simple_serialization
class Candidate:
    '''A candidate standing at a point of the preference plane.

    Candidates may only be moved between elections; no evaluator modifies
    them.

    :param id: Stable candidate identifier, unique within an election.
    :param x: Horizontal plane coordinate.
    :param y: Vertical plane coordinate.
    :param color: Display colour as a ``#RRGGBB`` string. Defaults to the
        palette colour for the id.
    :param name: Display name. Defaults to the palette name for the id.
    '''
    def __init__(self,
                 id: int,
                 x: float,
                 y: float,
                 color: Optional[str] = None,
                 name: Optional[str] = None,
                 ):
        if not isinstance(id, int) or id < 0:
            raise CandidateError(id, 'a non-negative integer id')
        self.id = id
        self.x = x
        self.y = y
        if color is None:
            color = DEFAULT_COLORS[id % len(DEFAULT_COLORS)]
        self.color = color
        if name is None:
            if id < len(DEFAULT_NAMES):
                name = DEFAULT_NAMES[id]
            else:
                name = f'Candidate {id + 1}'
        self.name = name

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def __repr__(self):
        return f'<Candidate {self.id} ({self.name}) at ({self.x}, {self.y})>'

    def __eq__(self, other):
        return (
            isinstance(other, Candidate)
            and (self.id, self.x, self.y, self.color, self.name)
            == (other.id, other.x, other.y, other.color, other.name)
        )

    def __hash__(self):
        return hash(self.id)


def default_positions(count: int,
                      center: Tuple[float, float] = (300, 300),
                      radius: float = LAYOUT_RADIUS,
                      ) -> List[Tuple[float, float]]:
    '''Default geometric arrangement of candidate positions.

    The first two candidates are placed right and left of the center, the
    remaining ones on the other vertices of a hexagon around it.

    :param count: Number of candidates, at most :data:`MAX_CANDIDATES`.
    :param center: Center of the arrangement.
    :param radius: Distance of the candidates from the center.
    '''
    if count > MAX_CANDIDATES:
        raise ValueError(f'at most {MAX_CANDIDATES} default positions,'
                         f' got {count}')
    cx, cy = center
    half = radius / 2
    height = radius * math.sin(math.pi / 3)
    positions = [
        (cx + radius, cy),
        (cx - radius, cy),
        (cx - half, cy - height),
        (cx + half, cy + height),
        (cx - half, cy + height),
        (cx + half, cy - height),
    ]
    return positions[:count]


def default_candidates(count: int,
                       center: Tuple[float, float] = (300, 300),
                       radius: float = LAYOUT_RADIUS,
                       ) -> List[Candidate]:
    '''Create candidates in the default geometric arrangement.'''
    return [
        Candidate(i, x, y)
        for i, (x, y) in enumerate(default_positions(count, center, radius))
    ]
