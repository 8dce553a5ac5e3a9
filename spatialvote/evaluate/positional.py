'''Positional voting systems: points by rank.'''

import logging
from typing import Any, Sequence

import spatialvote.util
import spatialvote.geometry
from spatialvote.evaluate.core import (
    Evaluator, ElectionResult, check_candidates, make_breakdown,
    nearest_states, select_best,
)
from spatialvote.persist import simple_serialization

logger = logging.getLogger(__name__)


@simple_serialization
class Borda(Evaluator):
    '''Borda count.

    Every voter ranks the candidates by distance (equally distant ones are
    ordered by the chooser) and awards ``n - 1`` points to its nearest
    candidate, ``n - 2`` to the second nearest, down to zero for the
    furthest. The candidate with the most points wins.

    :param chooser: Tie-breaking source.
    '''
    method = 'borda'

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        check_candidates(candidates)
        n_cands = len(candidates)
        tally = spatialvote.util.zero_tally(cand.id for cand in candidates)
        firsts = []
        for voter in voters:
            ranking = spatialvote.geometry.ranked_preferences(
                voter, candidates, self.chooser
            )
            for position, cand_id in enumerate(ranking):
                tally[cand_id] += n_cands - 1 - position
            firsts.append(ranking[0])
        result = ElectionResult(self.method, None, len(voters), tally)
        if not skip_voter_states:
            result.voter_states = nearest_states(firsts, candidates)
            result.breakdown = make_breakdown(
                tally, candidates, label='points', n_voters=len(voters)
            )
        if not voters:
            return result.mark_degenerate()
        result.winner = select_best(tally, 1, self.chooser)[0]
        logger.debug('borda points: %s', tally)
        return result
