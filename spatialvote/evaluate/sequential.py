'''Evaluators that proceed in rounds.

This hosts the two-round (runoff) system, where the two strongest
candidates of a plurality round face each other in a runoff, and the
instant-runoff vote (IRV), where the weakest candidate is eliminated round
by round and its voters pass to their next preference.

In both, voters prefer the nearer candidates in the plane; a voter's
ranking is computed once from the distances.
'''
import logging
from typing import Any, List, Dict, Optional, Sequence

import spatialvote.util
import spatialvote.geometry
from spatialvote.evaluate.core import (
    Evaluator, ElectionResult, Round,
    check_candidates, count_nearest, make_breakdown, nearest_states,
    select_best, select_worst,
)
from spatialvote.persist import simple_serialization

logger = logging.getLogger(__name__)


@simple_serialization
class TwoRound(Evaluator):
    '''Two-round (runoff) system.

    The first round is a plurality vote. If its leader obtains more than
    a half of the votes cast, they win outright. Otherwise, the two
    candidates with the most votes (with the chooser deciding a tie at the
    second place) proceed to the runoff, in which every voter supports the
    nearer of the two finalists. Voters exactly equidistant to both
    finalists are split by a coin flip each, and so is a tied runoff.

    :param chooser: Tie-breaking source, also used for the coin flips.
    '''
    method = 'two-round'

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        check_candidates(candidates)
        n_voters = len(voters)
        tally, choices = count_nearest(voters, candidates, self.chooser)
        first_round = Round(1, 'First Round', tally, [])
        if not skip_voter_states:
            first_round.breakdown = make_breakdown(
                tally, candidates, total=n_voters
            )
            first_round.voter_states = nearest_states(choices, candidates)
        leader = select_best(tally, 1, self.chooser)[0]
        if n_voters and tally[leader] > n_voters / 2:
            logger.info('candidate %s wins outright with %d votes',
                        leader, tally[leader])
            return ElectionResult(
                self.method, leader, n_voters, tally,
                rounds=[first_round],
                voter_states=first_round.voter_states,
                outright=True,
                top_two=None,
            )
        top_two = select_best(tally, 2, self.chooser)
        logger.info('runoff between %s', top_two)
        runoff_tally, preferences = self._runoff(voters, candidates, top_two)
        second_round = Round(2, 'Runoff', runoff_tally, [])
        if not skip_voter_states:
            second_round.breakdown = make_breakdown(
                runoff_tally, candidates, total=n_voters
            )
            second_round.voter_states = nearest_states(
                preferences, candidates
            )
        result = ElectionResult(
            self.method, None, n_voters, runoff_tally,
            rounds=[first_round, second_round],
            voter_states=second_round.voter_states,
            outright=False,
            top_two=top_two,
        )
        if not voters:
            return result.mark_degenerate()
        first, second = top_two
        if runoff_tally[first] != runoff_tally[second]:
            result.winner = max(runoff_tally, key=runoff_tally.get)
        else:
            logger.info('runoff tied at %d, flipping a coin',
                        runoff_tally[first])
            result.winner = self.chooser.choose(
                [cand.id for cand in candidates if cand.id in runoff_tally]
            )
        return result

    def _runoff(self,
                voters: Sequence[Any],
                candidates: Sequence[Any],
                finalists: List[int],
                ) -> tuple:
        by_id = {cand.id: cand for cand in candidates}
        first, second = [by_id[cand_id] for cand_id in finalists]
        tally = {first.id: 0, second.id: 0}
        preferences = []
        for voter in voters:
            dist1 = spatialvote.geometry.distance_squared(voter, first)
            dist2 = spatialvote.geometry.distance_squared(voter, second)
            if dist1 < dist2:
                preferred = first.id
            elif dist2 < dist1:
                preferred = second.id
            else:
                preferred = self.chooser.choose(sorted(
                    (first.id, second.id),
                    key=[cand.id for cand in candidates].index
                ))
            tally[preferred] += 1
            preferences.append(preferred)
        return tally, preferences


@simple_serialization
class InstantRunoff(Evaluator):
    '''Instant-runoff vote (IRV).

    Every voter ranks all candidates by distance once (equally distant
    candidates are ordered by the chooser). In each round, every voter
    supports its highest ranked candidate still in the count. A candidate
    supported by more than a half of all voters wins. When only two
    candidates remain, the one with more votes wins (the chooser decides
    a tie). Otherwise, the candidate with the fewest votes (drawn by the
    chooser among equally weak ones) is eliminated and another round
    follows.

    With N candidates, there are at most N - 1 rounds.

    :param chooser: Tie-breaking source.
    '''
    method = 'irv'

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        check_candidates(candidates)
        n_voters = len(voters)
        rankings = [
            spatialvote.geometry.ranked_preferences(
                voter, candidates, self.chooser
            )
            for voter in voters
        ]
        active = [cand.id for cand in candidates]
        rounds = []
        eliminations = []
        winner = None
        while winner is None:
            tally = spatialvote.util.zero_tally(active)
            choices = []
            for ranking in rankings:
                choice = next(cand for cand in ranking if cand in tally)
                tally[choice] += 1
                choices.append(choice)
            logger.debug('round %d tally: %s', len(rounds) + 1, tally)
            current = Round(len(rounds) + 1, f'Round {len(rounds) + 1}',
                            tally, [], active=list(active))
            rounds.append(current)
            if not skip_voter_states:
                current.breakdown = make_breakdown(
                    tally, candidates, total=n_voters, active=active
                )
                current.voter_states = nearest_states(choices, candidates)
            winner = self._round_winner(tally, n_voters, candidates)
            if winner is None:
                eliminated = select_worst(tally, self.chooser)
                logger.info('eliminating %s with %d votes',
                            eliminated, tally[eliminated])
                current.eliminated = eliminated
                eliminations.append({
                    'candidate_id': eliminated,
                    'round': current.number,
                    'votes': tally[eliminated],
                })
                active.remove(eliminated)
        result = ElectionResult(
            self.method, winner, n_voters, rounds[-1].tally,
            rounds=rounds,
            voter_states=rounds[-1].voter_states,
            eliminated=eliminations,
        )
        if not voters:
            return result.mark_degenerate()
        return result

    def _round_winner(self,
                      tally: Dict[int, int],
                      n_voters: int,
                      candidates: Sequence[Any],
                      ) -> Optional[int]:
        for cand_id, n_votes in tally.items():
            if n_votes > n_voters / 2:
                logger.info('candidate %s has a majority with %d votes',
                            cand_id, n_votes)
                return cand_id
        if len(tally) == 2:
            first, second = tally
            if tally[first] != tally[second]:
                return max(tally, key=tally.get)
            return self.chooser.choose(
                [cand.id for cand in candidates if cand.id in tally]
            )
        return None
