'''Approval voting with honest or strategic voters.

Every voter approves the candidates within the approval radius around it.
Strategic voters adjust this to avoid wasting their ballot: a voter with
nobody in range approves the nearest candidate, and a voter with everybody
in range drops the furthest one, since approving all candidates has no
effect on the outcome.
'''

import logging
from typing import Any, FrozenSet, Sequence

import spatialvote.util
import spatialvote.color
import spatialvote.geometry
from spatialvote.evaluate.core import (
    Evaluator, ElectionResult, VoterState,
    check_candidates, make_breakdown, select_best,
)
from spatialvote.persist import simple_serialization

logger = logging.getLogger(__name__)

HONEST = 'honest'
STRATEGIC = 'strategic'
STRATEGIES = (HONEST, STRATEGIC)
DEFAULT_RADIUS = 150


@simple_serialization
class Approval(Evaluator):
    '''Approval voting evaluator.

    :param radius: Maximum distance of an approved candidate from the
        voter (inclusive).
    :param strategy: ``'honest'`` voters approve exactly the candidates
        in range, possibly none or all of them; ``'strategic'`` voters
        approve the nearest candidate if none is in range and exclude the
        furthest one (drawn by the chooser among equally far ones) if all
        are in range.
    :param chooser: Tie-breaking source.
    '''
    method = 'approval'

    def __init__(self,
                 radius: float = DEFAULT_RADIUS,
                 strategy: str = STRATEGIC,
                 chooser=None,
                 ):
        super().__init__(chooser)
        if radius < 0:
            raise ValueError(f'invalid approval radius: {radius}')
        if strategy not in STRATEGIES:
            raise ValueError(f'invalid approval strategy: {strategy!r},'
                             f' must be one of {STRATEGIES}')
        self.radius = radius
        self.strategy = strategy

    def approved(self, voter: Any, candidates: Sequence[Any]) -> FrozenSet[int]:
        '''Determine the set of candidate ids the voter approves of.'''
        dists = spatialvote.geometry.distances(voter, candidates)
        in_range = [
            cand.id for cand, dist in zip(candidates, dists)
            if dist <= self.radius
        ]
        if self.strategy == HONEST:
            return frozenset(in_range)
        if not in_range:
            return frozenset([spatialvote.geometry.nearest_candidate(
                voter, candidates, self.chooser
            ).id])
        elif len(in_range) == len(candidates):
            max_dist = max(dists)
            furthest = [
                cand.id for cand, dist in zip(candidates, dists)
                if dist == max_dist
            ]
            excluded = (
                furthest[0] if len(furthest) == 1
                else self.chooser.choose(furthest)
            )
            return frozenset(cid for cid in in_range if cid != excluded)
        else:
            return frozenset(in_range)

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        '''Select the candidate with the most approvals.

        The breakdown lists the approvals and their percentage of all voters.
        '''
        check_candidates(candidates)
        tally = spatialvote.util.zero_tally(cand.id for cand in candidates)
        ballots = []
        for voter in voters:
            approved = self.approved(voter, candidates)
            for cand_id in approved:
                tally[cand_id] += 1
            ballots.append(approved)
        result = ElectionResult(
            self.method,
            None,
            len(voters),
            tally,
            strategy=self.strategy,
            approval_radius=self.radius,
        )
        if not skip_voter_states:
            result.voter_states = [
                approval_state(approved, candidates) for approved in ballots
            ]
            result.breakdown = make_breakdown(
                tally, candidates, label='approvals', total=len(voters)
            )
        if not voters:
            return result.mark_degenerate()
        result.winner = select_best(tally, 1, self.chooser)[0]
        logger.debug('approval tally: %s', tally)
        return result


def approval_color(approved: FrozenSet[int],
                   candidates: Sequence[Any],
                   ) -> str:
    '''Display colour of a voter with the given approvals.

    Approving nobody gives the no-preference colour, approving everybody
    the neutral colour, approving a single candidate that candidate's colour
    and approving several an equal blend of their colours.
    '''
    if not approved:
        return spatialvote.color.NO_PREFERENCE_COLOR
    elif len(approved) == len(candidates):
        return spatialvote.color.NEUTRAL_COLOR
    colors = [cand.color for cand in candidates if cand.id in approved]
    if len(colors) == 1:
        return colors[0]
    return spatialvote.color.blend_colors(colors)


def approval_state(approved: FrozenSet[int],
                   candidates: Sequence[Any],
                   ) -> VoterState:
    # a single approval is a definite preference, anything else is not
    preferred = next(iter(approved)) if len(approved) == 1 else None
    return VoterState(
        preferred,
        approval_color(approved, candidates),
        approved_candidates=approved,
    )
