"""Cardinal voting systems - systems that use score votes.

Voters in the plane score every candidate by its distance: the nearer the
candidate, the higher the score, down to zero beyond the maximum distance.
Two systems are provided, plain score (range) voting with continuous scores
and STAR voting with scores discretized into star bands followed by an
automatic runoff between the two highest scorers.
"""
import abc
import logging
from typing import Any, List, Dict, Optional, Sequence
from numbers import Number

import spatialvote.util
import spatialvote.color
import spatialvote.geometry
from spatialvote.evaluate.core import (
    Evaluator, ElectionResult, Round, VoterState,
    check_candidates, make_breakdown, nearest_states, select_best,
)
from spatialvote.persist import simple_serialization

logger = logging.getLogger(__name__)

MAX_SCORE = 5
DEFAULT_MAX_DISTANCE = 300


def linear_score(distance: float, max_distance: float) -> float:
    '''Continuous score from 0 to 5, falling linearly with distance.'''
    return max(0., MAX_SCORE * (1 - distance / max_distance))


def star_score(distance: float, max_distance: float) -> int:
    '''Whole-star score from 0 to 5 by distance band.

    The bands are rings of a fifth of the maximum distance each; a candidate
    in the innermost ring gets five stars, one beyond the maximum distance
    none.
    '''
    ring = max_distance / MAX_SCORE
    for i in range(1, MAX_SCORE + 1):
        if distance <= ring * i:
            return MAX_SCORE + 1 - i
    return 0


class DistanceScorer(Evaluator):
    '''Base of the evaluators scoring candidates by distance.

    :param max_distance: Distance at which (and beyond which) candidates
        score zero.
    :param chooser: Tie-breaking source.
    '''
    def __init__(self,
                 max_distance: float = DEFAULT_MAX_DISTANCE,
                 chooser=None,
                 ):
        super().__init__(chooser)
        if max_distance <= 0:
            raise ValueError(f'invalid maximum distance: {max_distance}')
        self.max_distance = max_distance

    @abc.abstractmethod
    def score(self, distance: float) -> Number:
        '''Score given to a candidate at the given distance.'''
        raise NotImplementedError

    def scores(self,
               voter: Any,
               candidates: Sequence[Any],
               ) -> List[Number]:
        '''Scores given by the voter to the candidates, in candidate order.'''
        return [
            self.score(dist)
            for dist in spatialvote.geometry.distances(voter, candidates)
        ]

    def score_all(self,
                  voters: Sequence[Any],
                  candidates: Sequence[Any],
                  ) -> tuple:
        '''Score the candidates by all voters.

        :returns: A 2-tuple of the total scores by candidate id and the list
            of per-voter score lists.
        '''
        totals = spatialvote.util.zero_tally(cand.id for cand in candidates)
        ballots = []
        for voter in voters:
            voter_scores = self.scores(voter, candidates)
            for cand, value in zip(candidates, voter_scores):
                totals[cand.id] += value
            ballots.append(voter_scores)
        return totals, ballots


@simple_serialization
class Score(DistanceScorer):
    """Score (range) voting with continuous distance-based scores.

    Every voter scores every candidate ``max(0, 5 * (1 - d / max_distance))``
    where ``d`` is the distance to the candidate. The candidate with the
    highest score sum wins.
    """
    method = 'score'

    def score(self, distance: float) -> float:
        return linear_score(distance, self.max_distance)

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        """Select the candidate with the highest total score.

        The breakdown gives the total and average score of each candidate.
        Voters are coloured by a score-weighted blend of the candidate
        colours.
        """
        check_candidates(candidates)
        totals, ballots = self.score_all(voters, candidates)
        result = ElectionResult(
            self.method, None, len(voters), totals,
            max_distance=self.max_distance,
        )
        if not skip_voter_states:
            result.voter_states = [
                score_state(voter_scores, candidates)
                for voter_scores in ballots
            ]
            result.breakdown = make_breakdown(
                totals, candidates, label='total_score',
                n_voters=len(voters),
            )
        if not voters:
            return result.mark_degenerate()
        result.winner = select_best(totals, 1, self.chooser)[0]
        logger.debug('score totals: %s', totals)
        return result


def score_state(scores: List[Number],
                candidates: Sequence[Any],
                ) -> VoterState:
    colors = [cand.color for cand in candidates]
    best = max(scores)
    top = [cand.id for cand, value in zip(candidates, scores) if value == best]
    return VoterState(
        top[0] if len(top) == 1 and best > 0 else None,
        spatialvote.color.proportional_color(colors, scores),
        scores={cand.id: value for cand, value in zip(candidates, scores)},
    )


@simple_serialization
class STAR(DistanceScorer):
    """STAR (score then automatic runoff) voting.

    In the scoring round, voters give every candidate 0 to 5 stars by
    distance band (see :func:`star_score`). The two candidates with the
    highest star totals advance to the automatic runoff, where each voter
    supports the finalist it scored higher. Voters scoring both finalists
    equally are counted as tied and support neither.

    The cutoff between the second and third place of the scoring round is
    decided by the chooser if tied. A runoff tie goes to the finalist with
    the higher scoring round total and, if that is also tied, is decided by
    the chooser.
    """
    method = 'star'

    def score(self, distance: float) -> int:
        return star_score(distance, self.max_distance)

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        check_candidates(candidates)
        n_voters = len(voters)
        totals, ballots = self.score_all(voters, candidates)
        scoring = Round(1, 'Scoring Round', totals, [])
        if not skip_voter_states:
            scoring.breakdown = make_breakdown(
                totals, candidates, label='score', n_voters=n_voters
            )
            colors = [cand.color for cand in candidates]
            scoring.voter_states = [
                VoterState(
                    None,
                    spatialvote.color.blend_colors(colors, voter_scores),
                    scores={
                        cand.id: value
                        for cand, value in zip(candidates, voter_scores)
                    },
                )
                for voter_scores in ballots
            ]
        top_two = select_best(totals, 2, self.chooser)
        logger.info('STAR finalists: %s', top_two)
        first, second = top_two
        index = {cand.id: i for i, cand in enumerate(candidates)}
        runoff_tally = {first: 0, second: 0}
        tied_votes = 0
        preferences: List[Optional[int]] = []
        for voter_scores in ballots:
            score1 = voter_scores[index[first]]
            score2 = voter_scores[index[second]]
            if score1 > score2:
                preferred = first
            elif score2 > score1:
                preferred = second
            else:
                preferred = None
            if preferred is None:
                tied_votes += 1
            else:
                runoff_tally[preferred] += 1
            preferences.append(preferred)
        runoff = {
            'finalist1': first,
            'finalist2': second,
            'finalist1_votes': runoff_tally[first],
            'finalist2_votes': runoff_tally[second],
            'tied_votes': tied_votes,
        }
        runoff_round = Round(2, 'Automatic Runoff', runoff_tally, [],
                             tied=tied_votes)
        if not skip_voter_states:
            runoff_round.breakdown = make_breakdown(
                runoff_tally, candidates, total=n_voters
            )
            runoff_round.voter_states = nearest_states(
                preferences, candidates
            )
        result = ElectionResult(
            self.method, None, n_voters, runoff_tally,
            rounds=[scoring, runoff_round],
            voter_states=runoff_round.voter_states,
            top_two=top_two,
            runoff=runoff,
            scores=totals,
            max_distance=self.max_distance,
        )
        if not voters:
            return result.mark_degenerate()
        result.winner = self._runoff_winner(runoff_tally, totals, candidates)
        return result

    def _runoff_winner(self,
                       runoff_tally: Dict[int, int],
                       totals: Dict[int, Number],
                       candidates: Sequence[Any],
                       ) -> int:
        first, second = runoff_tally
        if runoff_tally[first] != runoff_tally[second]:
            return max(runoff_tally, key=runoff_tally.get)
        logger.info('STAR runoff tied at %d, deciding by scores',
                    runoff_tally[first])
        if totals[first] != totals[second]:
            return first if totals[first] > totals[second] else second
        logger.info('STAR runoff and scores tied, drawing the winner')
        return self.chooser.choose(
            [cand.id for cand in candidates if cand.id in runoff_tally]
        )

