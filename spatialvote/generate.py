"""Generate voters for spatial voting simulations.

Voters are sampled from Gaussian clouds (distributions) around a center
point of the preference plane. The sampler produces *offsets* from the
center rather than absolute positions; the offsets are kept with the
distribution so that moving its center only translates the voters, without
drawing new random numbers. This keeps voter identities stable while a
distribution is dragged around and makes the territory map sweep cheap
(see :mod:`spatialvote.crit.yee`).

The user-facing spread parameter is a *radius* that contains about 99.7 %
of the voters, i.e. three standard deviations of the underlying Gaussian.
"""

import math
import random
import logging
from typing import List, Optional, Tuple, Iterable

from spatialvote.color import VOTER_DEFAULT_COLOR
from spatialvote.geometry import Bounds, DEFAULT_BOUNDS


SIGMA_DIVISOR = 3
DEFAULT_VOTER_COUNT = 1000
DEFAULT_SPREAD_RADIUS = 300
MIN_VOTERS, MAX_VOTERS = 100, 3000
MIN_SPREAD_RADIUS, MAX_SPREAD_RADIUS = 50, 500

Offset = Tuple[float, float]

logger = logging.getLogger(__name__)


class Voter:
    """A voter at a point of the preference plane.

    Besides its position, the voter records its offset from the center of
    the distribution it was drawn from, and the display annotations applied
    after an election (see
    :meth:`spatialvote.evaluate.core.ElectionResult.annotate`).

    :param x: Horizontal display position.
    :param y: Vertical display position.
    :param offset_x: Unclamped horizontal offset from the distribution
        center.
    :param offset_y: Unclamped vertical offset from the distribution center.
    """
    def __init__(self,
                 x: float,
                 y: float,
                 offset_x: float = 0.,
                 offset_y: float = 0.,
                 ):
        self.x = x
        self.y = y
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.preferred_candidate: Optional[int] = None
        self.vote_color: str = VOTER_DEFAULT_COLOR
        self.approved_candidates: Optional[frozenset] = None

    def reset(self) -> None:
        """Clear the election annotations."""
        self.preferred_candidate = None
        self.vote_color = VOTER_DEFAULT_COLOR
        self.approved_candidates = None

    def __repr__(self):
        return f'<Voter at ({self.x:.1f}, {self.y:.1f})>'


class GaussianVoterSampler:
    """Sample voter offsets from a circular 2D Gaussian distribution.

    Uses the Box-Muller transform: each pair of uniform draws gives both
    coordinates of one offset.

    :param spread_radius: Radius containing about 99.7 % of the voters;
        the standard deviation is a third of it.
    :param random_state: Seed for the sampler's own random generator.
        The global random generator is never touched.
    """
    def __init__(self,
                 spread_radius: float = DEFAULT_SPREAD_RADIUS,
                 random_state: Optional[int] = None,
                 ):
        if spread_radius < 0:
            raise ValueError(f'invalid spread radius: {spread_radius}')
        self.spread_radius = spread_radius
        self.random_state = random_state
        self._random = random.Random(random_state)

    @property
    def sigma(self) -> float:
        return self.spread_radius / SIGMA_DIVISOR

    def sample(self, n: int) -> Iterable[Offset]:
        """A generator of n offsets."""
        sigma = self.sigma
        for i in range(n):
            u1 = self._random.random()
            while u1 == 0:
                u1 = self._random.random()
            u2 = self._random.random()
            magnitude = math.sqrt(-2 * math.log(u1))
            angle = 2 * math.pi * u2
            yield (
                magnitude * math.cos(angle) * sigma,
                magnitude * math.sin(angle) * sigma,
            )

    def sample_offsets(self, count: int) -> List[Offset]:
        """Draw count independent voter offsets."""
        if count < 0:
            raise ValueError(f'invalid voter count: {count}')
        return list(self.sample(count))


def materialize(center: Tuple[float, float],
                offsets: Iterable[Offset],
                bounds: Optional[Bounds] = DEFAULT_BOUNDS,
                ) -> List[Voter]:
    """Create voters at the given offsets from the center.

    The display positions are clamped into the bounds while the offsets are
    kept unclamped for later recentering.

    :param center: Center of the distribution.
    :param offsets: Offsets of the voters from the center.
    :param bounds: Plane bounds to clamp the positions to; None disables
        clamping.
    """
    cx, cy = center
    voters = []
    for off_x, off_y in offsets:
        x, y = cx + off_x, cy + off_y
        if bounds is not None:
            x, y = bounds.clamp(x, y)
        voters.append(Voter(x, y, off_x, off_y))
    return voters


def recenter(distribution: 'Distribution',
             new_center: Tuple[float, float],
             bounds: Optional[Bounds] = DEFAULT_BOUNDS,
             ) -> None:
    """Move the distribution center, translating its voters.

    The new center is clamped into the bounds. Every voter is placed at the
    new center plus its stored offset (again clamped for display); no new
    random numbers are drawn and the voter objects are kept.
    """
    cx, cy = new_center
    if bounds is not None:
        cx, cy = bounds.clamp(cx, cy)
    distribution.center = (cx, cy)
    for voter in distribution.voters:
        x, y = cx + voter.offset_x, cy + voter.offset_y
        if bounds is not None:
            x, y = bounds.clamp(x, y)
        voter.x, voter.y = x, y


class Distribution:
    """A Gaussian cloud of voters around a center.

    The voter offsets are sampled once and reused whenever the center
    moves. They are resampled only when the voter count or the spread
    radius changes.

    :param center: Center of the cloud.
    :param spread_radius: Radius containing about 99.7 % of the voters.
    :param voter_count: Number of voters.
    :param bounds: Plane bounds used to clamp display positions.
    :param random_state: Seed for the offset sampler.
    """
    def __init__(self,
                 center: Tuple[float, float],
                 spread_radius: float = DEFAULT_SPREAD_RADIUS,
                 voter_count: int = DEFAULT_VOTER_COUNT,
                 bounds: Optional[Bounds] = DEFAULT_BOUNDS,
                 random_state: Optional[int] = None,
                 ):
        if voter_count < 0:
            raise ValueError(f'invalid voter count: {voter_count}')
        self.center = tuple(center)
        self.spread_radius = spread_radius
        self.voter_count = voter_count
        self.bounds = bounds
        self.sampler = GaussianVoterSampler(spread_radius, random_state)
        self.offsets: Optional[List[Offset]] = None
        self.voters: List[Voter] = []

    @property
    def is_materialized(self) -> bool:
        return (
            self.offsets is not None
            and len(self.voters) == self.voter_count
        )

    def ensure_offsets(self) -> List[Offset]:
        """Return the offsets, sampling them if missing or stale."""
        if self.offsets is None or len(self.offsets) != self.voter_count:
            logger.debug('sampling %d offsets with spread radius %g',
                         self.voter_count, self.spread_radius)
            self.offsets = self.sampler.sample_offsets(self.voter_count)
        return self.offsets

    def generate(self) -> List[Voter]:
        """Materialize the voters at the current center."""
        self.voters = materialize(
            self.center, self.ensure_offsets(), self.bounds
        )
        return self.voters

    def move_to(self, x: float, y: float) -> None:
        """Move the center, keeping the voters and their offsets."""
        if not self.is_materialized:
            self.generate()
        recenter(self, (x, y), self.bounds)

    def update(self,
               spread_radius: Optional[float] = None,
               voter_count: Optional[int] = None,
               ) -> bool:
        """Change the spread radius or the voter count.

        Any actual change invalidates the offsets and regenerates the voters.

        :returns: Whether the voters were regenerated.
        """
        changed = False
        if spread_radius is not None and spread_radius != self.spread_radius:
            self.spread_radius = spread_radius
            self.sampler = GaussianVoterSampler(
                spread_radius, self.sampler.random_state
            )
            changed = True
        if voter_count is not None and voter_count != self.voter_count:
            if voter_count < 0:
                raise ValueError(f'invalid voter count: {voter_count}')
            self.voter_count = voter_count
            changed = True
        if changed:
            self.offsets = None
            self.generate()
        return changed

    def __repr__(self):
        return (f'<Distribution of {self.voter_count} voters at {self.center}'
                f' spread {self.spread_radius}>')


def default_centers(count: int,
                    center: Tuple[float, float] = (300, 300),
                    offset: float = 80,
                    ) -> List[Tuple[float, float]]:
    """Default arrangement of distribution centers around the plane center.

    :param count: Number of distributions, at most six.
    """
    cx, cy = center
    positions = [
        (cx, cy),
        (cx - offset, cy - offset),
        (cx + offset, cy - offset),
        (cx - offset, cy + offset),
        (cx + offset, cy + offset),
        (cx, cy - 1.5 * offset),
    ]
    if count > len(positions):
        raise ValueError(f'at most {len(positions)} default centers,'
                         f' got {count}')
    return positions[:count]


def combined_voters(distributions: Iterable[Distribution]) -> List[Voter]:
    """All voters of the distributions, materializing them if needed."""
    voters = []
    for distribution in distributions:
        if not distribution.is_materialized:
            distribution.generate()
        voters.extend(distribution.voters)
    return voters
