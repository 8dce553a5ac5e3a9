'''General election evaluator machinery and plurality voting.

Defines the error kinds, the tie handling shared by all evaluators, the
result structures (:class:`ElectionResult`, :class:`Round`,
:class:`BreakdownEntry`, :class:`VoterState`) and the
:class:`Evaluator` base class, together with the simplest evaluator,
:class:`Plurality`.
'''

from __future__ import annotations

import abc
import logging
from typing import Any, List, Dict, Union, Optional, Sequence
from numbers import Number

import spatialvote.util
import spatialvote.color
import spatialvote.geometry
from spatialvote.evaluate.auxiliary import Chooser, RandomChooser
from spatialvote.persist import simple_serialization

logger = logging.getLogger(__name__)


class ElectionError(Exception):
    '''An election cannot be evaluated as set up.'''
    kind: str = 'ElectionError'

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.kind, 'message': str(self)}


class InvalidCandidateCount(ElectionError):
    '''Fewer than two candidates stand in the election.'''
    kind = 'InvalidCandidateCount'

    def __init__(self, n_candidates: int):
        self.n_candidates = n_candidates
        super().__init__(
            f'need at least 2 candidates, got {n_candidates}'
        )


class InvalidCandidates(ElectionError):
    '''The candidate ids are not unique.'''
    kind = 'InvalidCandidates'

    def __init__(self, ids: Sequence[int]):
        self.ids = list(ids)
        super().__init__(f'candidate ids must be unique, got {self.ids}')


class InvalidParameters(ElectionError):
    '''The method parameters are out of their valid domain.'''
    kind = 'InvalidParameters'

    def __init__(self, method: Any, reason: str):
        self.method = method
        self.reason = reason
        super().__init__(f'invalid parameters for {method}: {reason}')


class UnknownMethod(ElectionError):
    '''The voting method tag is not recognized.'''
    kind = 'UnknownMethod'

    def __init__(self, method: Any, available: Sequence[str] = ()):
        self.method = method
        message = f'unknown voting method: {method!r}'
        if available:
            message += ', available: ' + ', '.join(available)
        super().__init__(message)


class EmptyVoterSet(ElectionError):
    '''There are no voters.

    This is not fatal: the tabulation proceeds and produces a degenerate
    result with zero tallies and no winner, which records this issue.
    '''
    kind = 'EmptyVoterSet'

    def __init__(self):
        super().__init__('no voters, the election has no winner')


class VotingSystemError(Exception):
    '''A voting system with a valid setup ended up in an unresolvable state.'''
    pass


class Tie(frozenset):
    '''Candidates tied for a place.

    Produced by :func:`get_n_best` when the cutoff falls among candidates
    with equal tallies. Resolved by :func:`resolve_ties` using a chooser.
    '''
    @staticmethod
    def any(result: List[Union[int, Tie]]) -> bool:
        '''Return True if there is any tie in the list, False otherwise.'''
        return any(isinstance(item, Tie) for item in result)


def get_n_best(votes: Dict[int, Number],
               n_seats: int,
               ) -> List[Union[int, Tie]]:
    '''Return n_seats candidates with the highest number of votes.

    Produces ties correctly so is useful as a component in all systems
    that use selection by maximum somewhere in their process.

    :param votes: Mapping of candidates to the number of votes obtained.
    :param n_seats: Number of places to be filled.
    :returns: A list of top n_seats candidates. If there is a tie, the last
        items will refer to a single Tie object containing the tied candidates.
    '''
    sorted_items = spatialvote.util.sorted_votes(votes)
    if len(sorted_items) > n_seats:
        # find if there is a tie between the last elected and first unelected
        threshold_votes = sorted_items[n_seats-1][1]
        if sorted_items[n_seats][1] == threshold_votes:
            tied = []
            n_untied = None
            for i, item in enumerate(sorted_items):
                cand, n_votes = item
                if n_votes == threshold_votes:
                    tied.append(cand)
                    if n_untied is None:
                        n_untied = i
            n_tie_places = n_seats - n_untied
            return (
                [item[0] for item in sorted_items[:n_untied]]
                + [Tie(tied)] * n_tie_places
            )
        else:
            return [cand for cand, n_votes in sorted_items[:n_seats]]
    else:
        return [cand for cand, n_votes in sorted_items]


def resolve_ties(ranking: List[Union[int, Tie]],
                 chooser: Chooser,
                 order: Sequence[int],
                 ) -> List[int]:
    '''Replace ties in a ranking by candidates drawn by the chooser.

    :param ranking: Output of :func:`get_n_best`.
    :param chooser: Draws among the tied candidates.
    :param order: Candidate ids in candidate order; tied candidates are
        presented to the chooser in this order.
    '''
    resolved = []
    remaining = {}
    for item in ranking:
        if isinstance(item, Tie):
            if item not in remaining:
                remaining[item] = [cand for cand in order if cand in item]
            chosen = chooser.choose(remaining[item])
            remaining[item].remove(chosen)
            resolved.append(chosen)
        else:
            resolved.append(item)
    return resolved


def select_best(tally: Dict[int, Number],
                n_seats: int,
                chooser: Chooser,
                ) -> List[int]:
    '''Top n_seats candidates by tally, ties broken by the chooser.'''
    return resolve_ties(get_n_best(tally, n_seats), chooser, list(tally))


def select_worst(tally: Dict[int, Number], chooser: Chooser) -> int:
    '''The candidate with the lowest tally, ties broken by the chooser.'''
    min_value = min(tally.values())
    worst = [cand for cand, value in tally.items() if value == min_value]
    if len(worst) == 1:
        return worst[0]
    return chooser.choose(worst)


def check_candidates(candidates: Sequence[Any]) -> None:
    '''Validate the candidate set before tabulation.

    :raises InvalidCandidateCount: If there are fewer than two candidates.
    :raises InvalidCandidates: If the candidate ids are not unique.
    '''
    if len(candidates) < 2:
        raise InvalidCandidateCount(len(candidates))
    ids = [cand.id for cand in candidates]
    if len(set(ids)) != len(ids):
        raise InvalidCandidates(ids)


class VoterState:
    '''Display annotations of one voter after (a round of) an election.

    :param preferred_candidate: Id of the candidate the voter supports,
        or None.
    :param vote_color: Display colour of the voter.
    :param approved_candidates: Ids approved by the voter (approval voting).
    :param scores: Scores the voter gave, by candidate id (score methods).
    '''
    def __init__(self,
                 preferred_candidate: Optional[int],
                 vote_color: str,
                 approved_candidates: Optional[frozenset] = None,
                 scores: Optional[Dict[int, Number]] = None,
                 ):
        self.preferred_candidate = preferred_candidate
        self.vote_color = vote_color
        self.approved_candidates = approved_candidates
        self.scores = scores

    def apply_to(self, voter: Any) -> None:
        voter.preferred_candidate = self.preferred_candidate
        voter.vote_color = self.vote_color
        voter.approved_candidates = self.approved_candidates

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'preferred_candidate': self.preferred_candidate,
            'vote_color': self.vote_color,
        }
        if self.approved_candidates is not None:
            out['approved_candidates'] = sorted(self.approved_candidates)
        if self.scores is not None:
            out['scores'] = {str(k): v for k, v in self.scores.items()}
        return out

    def __repr__(self):
        return (f'VoterState({self.preferred_candidate!r},'
                f' {self.vote_color!r})')


class BreakdownEntry:
    '''Result of one candidate in a tabulation (round).

    :param candidate_id: Id of the candidate.
    :param name: Display name of the candidate.
    :param value: The tallied quantity (votes, approvals, points).
    :param label: Name of the tallied quantity.
    :param percentage: Value as a percentage of the voters, where
        meaningful.
    :param average: Average score per voter, for score methods.
    :param active: Whether the candidate is still in the count, for
        elimination methods.
    '''
    def __init__(self,
                 candidate_id: int,
                 name: str,
                 value: Number,
                 label: str = 'votes',
                 percentage: Optional[float] = None,
                 average: Optional[float] = None,
                 active: Optional[bool] = None,
                 ):
        self.candidate_id = candidate_id
        self.name = name
        self.value = value
        self.label = label
        self.percentage = percentage
        self.average = average
        self.active = active

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'candidate_id': self.candidate_id,
            'name': self.name,
            self.label: self.value,
        }
        for key in ('percentage', 'average', 'active'):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out

    def __repr__(self):
        return (f'<BreakdownEntry {self.candidate_id}:'
                f' {self.value} {self.label}>')


def make_breakdown(tally: Dict[int, Number],
                   candidates: Sequence[Any],
                   label: str = 'votes',
                   total: Optional[Number] = None,
                   n_voters: Optional[int] = None,
                   active: Optional[Sequence[int]] = None,
                   ) -> List[BreakdownEntry]:
    '''Build breakdown entries from a tally, sorted descending by value.

    :param tally: Tallied values by candidate id.
    :param candidates: Candidates appearing in the tally.
    :param label: Name of the tallied quantity.
    :param total: If given, percentages of this total are computed.
    :param n_voters: If given, averages per voter are computed.
    :param active: If given, marks which candidates are still active.
    '''
    names = {cand.id: cand.name for cand in candidates}
    entries = []
    for cand_id, value in spatialvote.util.sorted_votes(tally):
        entries.append(BreakdownEntry(
            cand_id,
            names.get(cand_id, str(cand_id)),
            value,
            label=label,
            percentage=(
                None if total is None
                else spatialvote.util.percentage(value, total)
            ),
            average=(
                None if n_voters is None
                else (value / n_voters if n_voters else 0.0)
            ),
            active=None if active is None else (cand_id in active),
        ))
    return entries


class Round:
    '''One round of a multi-round tabulation.

    :param number: 1-indexed round number.
    :param name: Display name of the round.
    :param tally: Tallied values by candidate id.
    :param breakdown: Breakdown entries of the round.
    :param voter_states: Per-voter annotations for the round, or None if
        they were not computed.
    :param active: Ids of candidates still in the count in this round.
    :param eliminated: Id of the candidate eliminated in this round, if any.
    :param details: Any other round-specific information.
    '''
    def __init__(self,
                 number: int,
                 name: str,
                 tally: Dict[int, Number],
                 breakdown: List[BreakdownEntry],
                 voter_states: Optional[List[VoterState]] = None,
                 active: Optional[List[int]] = None,
                 eliminated: Optional[int] = None,
                 **details,
                 ):
        self.number = number
        self.name = name
        self.tally = tally
        self.breakdown = breakdown
        self.voter_states = voter_states
        self.active = active
        self.eliminated = eliminated
        self.details = details

    @property
    def eliminated_votes(self) -> Optional[Number]:
        if self.eliminated is None:
            return None
        return self.tally[self.eliminated]

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'number': self.number,
            'name': self.name,
            'tally': {str(k): v for k, v in self.tally.items()},
            'breakdown': [entry.to_dict() for entry in self.breakdown],
        }
        if self.active is not None:
            out['active'] = list(self.active)
        if self.eliminated is not None:
            out['eliminated'] = self.eliminated
        for key, value in self.details.items():
            out[key] = _plain(value)
        if self.voter_states is not None:
            out['voter_states'] = [
                state.to_dict() for state in self.voter_states
            ]
        return out

    def __repr__(self):
        return f'<Round {self.number} ({self.name}): {self.tally}>'


class ElectionResult:
    '''Outcome of an election under one voting method.

    Single-round methods fill the ``breakdown``, multi-round methods the
    ``rounds``; both always provide the final ``tally``. Method-specific
    information (such as the STAR finalists or the IRV eliminations) is
    kept in ``details`` and is also accessible as attributes.

    :param method: Tag of the voting method.
    :param winner: Id of the winning candidate; None if there is no winner.
    :param total_voters: Number of voters in the election.
    :param tally: Final tallied values by candidate id.
    :param breakdown: Breakdown entries, for single-round methods.
    :param rounds: Rounds, for multi-round methods.
    :param voter_states: Final per-voter annotations, or None if they were
        skipped.
    '''
    def __init__(self,
                 method: str,
                 winner: Optional[int],
                 total_voters: int,
                 tally: Dict[int, Number],
                 breakdown: Optional[List[BreakdownEntry]] = None,
                 rounds: Optional[List[Round]] = None,
                 voter_states: Optional[List[VoterState]] = None,
                 **details,
                 ):
        self.method = method
        self.winner = winner
        self.total_voters = total_voters
        self.tally = tally
        self.breakdown = breakdown if breakdown is not None else []
        self.rounds = rounds if rounds is not None else []
        self.voter_states = voter_states
        self.details = details
        self.issues: List[ElectionError] = []

    def __getattr__(self, name):
        details = self.__dict__.get('details', {})
        if name in details:
            return details[name]
        raise AttributeError(name)

    @property
    def degenerate(self) -> bool:
        '''Whether the election had no voters (and thus no winner).'''
        return any(isinstance(issue, EmptyVoterSet) for issue in self.issues)

    @property
    def is_multiround(self) -> bool:
        return bool(self.rounds)

    def mark_degenerate(self) -> ElectionResult:
        '''Flag the result as coming from an election without voters.'''
        logger.warning('%s election without voters, no winner', self.method)
        self.winner = None
        self.issues.append(EmptyVoterSet())
        return self

    def annotate(self,
                 voters: Sequence[Any],
                 round_index: Optional[int] = None,
                 ) -> None:
        '''Apply voter display annotations to the voters.

        Either all voters are annotated, or (if the states do not fit the
        voters) none is touched and an exception is raised.

        :param voters: The voters the election was evaluated for, in the
            same order.
        :param round_index: 0-based index of the round whose states to
            apply; the final states by default.
        :raises ValueError: If the states were skipped or do not match the
            voters.
        '''
        if round_index is None:
            states = self.voter_states
        else:
            states = self.rounds[round_index].voter_states
        if states is None:
            raise ValueError('voter states were not computed')
        if len(states) != len(voters):
            raise ValueError(f'{len(states)} voter states for'
                             f' {len(voters)} voters')
        for state, voter in zip(states, voters):
            state.apply_to(voter)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'method': self.method,
            'winner': self.winner,
            'total_voters': self.total_voters,
            'tally': {str(k): v for k, v in self.tally.items()},
        }
        if self.breakdown:
            out['breakdown'] = [entry.to_dict() for entry in self.breakdown]
        if self.rounds:
            out['rounds'] = [rnd.to_dict() for rnd in self.rounds]
        for key, value in self.details.items():
            out[key] = _plain(value)
        if self.voter_states is not None:
            out['voter_states'] = [
                state.to_dict() for state in self.voter_states
            ]
        if self.issues:
            out['issues'] = [issue.to_dict() for issue in self.issues]
        return out

    def __repr__(self):
        return f'<ElectionResult {self.method}: winner {self.winner}>'


def _plain(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, (frozenset, set)):
        return sorted(value)
    elif isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    elif isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    else:
        return value


class Evaluator(metaclass=abc.ABCMeta):
    '''Evaluate an election of candidates by voters in the plane.

    A root abstract base class for all evaluators. Evaluators do not modify
    the voters or candidates given to them; the per-voter display
    annotations are returned in the result.

    :param chooser: Source of tie-breaking decisions. Defaults to an
        unseeded :class:`RandomChooser`, which makes tie-breaking
        non-reproducible.
    '''
    method: str = NotImplemented

    def __init__(self, chooser: Optional[Chooser] = None):
        self.chooser = chooser if chooser is not None else RandomChooser()

    @abc.abstractmethod
    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        '''Evaluate the election.

        :param voters: Voters (objects with ``x`` and ``y``).
        :param candidates: Candidates (objects with ``id``, ``x``, ``y``,
            ``color`` and ``name``).
        :param skip_voter_states: Skip computing the per-voter annotations
            and the breakdowns; only the winner and tallies are needed.
        :raises InvalidCandidateCount: If there are fewer than 2 candidates.
        '''
        raise NotImplementedError


@simple_serialization
class Plurality(Evaluator):
    '''Plurality voting (first past the post).

    Each voter votes for the nearest candidate (equally near candidates are
    drawn among by the chooser). The candidate with the most votes wins
    (again, ties are resolved by the chooser).
    '''
    method = 'plurality'

    def evaluate(self,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 skip_voter_states: bool = False,
                 ) -> ElectionResult:
        '''Select the winner by plurality voting.

        The breakdown lists the votes and their percentage of all voters,
        sorted in descending order of votes.
        '''
        check_candidates(candidates)
        tally, choices = count_nearest(voters, candidates, self.chooser)
        result = ElectionResult(
            self.method,
            None,
            len(voters),
            tally,
            voter_states=(
                None if skip_voter_states
                else nearest_states(choices, candidates)
            ),
        )
        if not skip_voter_states:
            result.breakdown = make_breakdown(
                tally, candidates, total=len(voters)
            )
        if not voters:
            return result.mark_degenerate()
        result.winner = select_best(tally, 1, self.chooser)[0]
        logger.debug('plurality tally: %s', tally)
        return result


def count_nearest(voters: Sequence[Any],
                  candidates: Sequence[Any],
                  chooser: Chooser,
                  ) -> tuple:
    '''Tally each voter's nearest candidate.

    :returns: A 2-tuple of the tally (by candidate id, in candidate order)
        and the list of chosen candidate ids, one per voter.
    '''
    tally = spatialvote.util.zero_tally(cand.id for cand in candidates)
    choices = []
    for voter in voters:
        chosen = spatialvote.geometry.nearest_candidate(
            voter, candidates, chooser
        ).id
        tally[chosen] += 1
        choices.append(chosen)
    return tally, choices


def nearest_states(choices: Sequence[Optional[int]],
                   candidates: Sequence[Any],
                   ) -> List[VoterState]:
    '''Voter states of voters supporting a single candidate each.'''
    colors = {cand.id: cand.color for cand in candidates}
    return [
        VoterState(
            choice,
            spatialvote.color.NEUTRAL_COLOR if choice is None
            else colors[choice]
        )
        for choice in choices
    ]
