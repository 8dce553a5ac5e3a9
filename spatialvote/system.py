"""Named voting methods and the single entry point to run an election.

The methods are registered under their tags in :data:`METHODS`. An election
under any of them is run by :func:`run_election`, which takes the method
parameters as a :class:`MethodParams` bundle and reports the documented
election errors as returned values rather than raising them.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import spatialvote.evaluate
import spatialvote.evaluate.approval
import spatialvote.evaluate.cardinal
import spatialvote.evaluate.positional
import spatialvote.evaluate.sequential
from spatialvote.evaluate.auxiliary import Chooser, RandomChooser
from spatialvote.evaluate.core import (
    ElectionError, ElectionResult, InvalidParameters, UnknownMethod,
)
from spatialvote.persist import simple_serialization

logger = logging.getLogger(__name__)

MIN_APPROVAL_RADIUS, MAX_APPROVAL_RADIUS = 50, 300
MIN_MAX_DISTANCE, MAX_MAX_DISTANCE = 100, 600


@simple_serialization
class MethodParams:
    """Parameters of the voting methods.

    Each method only uses some of them (see :meth:`relevant_to`); changes
    to the others do not affect its results.

    :param approval_radius: Maximum distance of an approved candidate.
    :param approval_strategy: ``'strategic'`` or ``'honest'`` approval
        voters.
    :param star_max_distance: Distance beyond which STAR voters give zero
        stars.
    :param score_max_distance: Distance beyond which score voters give a
        zero score.
    """
    def __init__(self,
                 approval_radius: float = 150,
                 approval_strategy: str = 'strategic',
                 star_max_distance: float = 300,
                 score_max_distance: float = 300,
                 ):
        if approval_strategy not in spatialvote.evaluate.approval.STRATEGIES:
            raise ValueError(
                f'invalid approval strategy: {approval_strategy!r}'
            )
        if approval_radius < 0:
            raise ValueError(f'invalid approval radius: {approval_radius}')
        for name, value in (('star_max_distance', star_max_distance),
                            ('score_max_distance', score_max_distance)):
            if value <= 0:
                raise ValueError(f'invalid {name}: {value}')
        self.approval_radius = approval_radius
        self.approval_strategy = approval_strategy
        self.star_max_distance = star_max_distance
        self.score_max_distance = score_max_distance

    def relevant_to(self, method: str) -> Dict[str, Any]:
        """Return the parameters that affect the results of the method."""
        return {
            name: getattr(self, name)
            for name in _system(method).params
        }

    def __eq__(self, other):
        return isinstance(other, MethodParams) and vars(self) == vars(other)

    def __repr__(self):
        args = ', '.join(f'{key}={val!r}' for key, val in vars(self).items())
        return f'MethodParams({args})'


class VotingSystem:
    """A named voting method. Creates its evaluators.

    :param name: Display name of the method.
    :param evaluator_class: Class of the evaluator for the method.
    :param params: Mapping of the :class:`MethodParams` attribute names
        relevant to the method to the evaluator constructor arguments they
        are passed as.
    """
    def __init__(self,
                 name: str,
                 evaluator_class: type,
                 params: Optional[Dict[str, str]] = None,
                 ):
        self.name = name
        self.evaluator_class = evaluator_class
        self.params = params if params is not None else {}

    def create(self,
               params: Optional[MethodParams] = None,
               chooser: Optional[Chooser] = None,
               ) -> spatialvote.evaluate.Evaluator:
        """Construct an evaluator for the method with the given parameters.

        :raises InvalidParameters: If the evaluator rejects the parameters.
        """
        if params is None:
            params = MethodParams()
        try:
            return self.evaluator_class(
                **{
                    arg: getattr(params, attr)
                    for attr, arg in self.params.items()
                },
                chooser=chooser,
            )
        except ValueError as e:
            raise InvalidParameters(self.name, str(e)) from e

    def __repr__(self):
        return f'<VotingSystem {self.name}>'


METHODS: Dict[str, VotingSystem] = {
    'plurality': VotingSystem('Plurality', spatialvote.evaluate.Plurality),
    'approval': VotingSystem(
        'Approval',
        spatialvote.evaluate.approval.Approval,
        {'approval_radius': 'radius', 'approval_strategy': 'strategy'},
    ),
    'two-round': VotingSystem(
        'Two-Round Runoff', spatialvote.evaluate.sequential.TwoRound
    ),
    'score': VotingSystem(
        'Score',
        spatialvote.evaluate.cardinal.Score,
        {'score_max_distance': 'max_distance'},
    ),
    'irv': VotingSystem(
        'Instant-Runoff', spatialvote.evaluate.sequential.InstantRunoff
    ),
    'star': VotingSystem(
        'STAR',
        spatialvote.evaluate.cardinal.STAR,
        {'star_max_distance': 'max_distance'},
    ),
    'borda': VotingSystem('Borda', spatialvote.evaluate.positional.Borda),
}


def _system(method: str) -> VotingSystem:
    try:
        return METHODS[method]
    except (KeyError, TypeError) as e:
        raise UnknownMethod(method, list(METHODS)) from e


def available_methods() -> List[str]:
    return list(METHODS.keys())


def get_evaluator(method: str,
                  params: Optional[MethodParams] = None,
                  chooser: Optional[Chooser] = None,
                  ) -> spatialvote.evaluate.Evaluator:
    """Construct the evaluator for the given method tag.

    :raises UnknownMethod: If the method tag is not registered.
    :raises InvalidParameters: If the method rejects the parameters.
    """
    return _system(method).create(params, chooser)


def run_election(method: str,
                 voters: Sequence[Any],
                 candidates: Sequence[Any],
                 params: Optional[MethodParams] = None,
                 skip_voter_states: bool = False,
                 chooser: Optional[Chooser] = None,
                 seed: Optional[int] = None,
                 annotate: bool = False,
                 strict: bool = False,
                 ) -> Union[ElectionResult, ElectionError]:
    """Run an election under the given method.

    Errors of the election setup (an unknown method, parameters rejected by
    the method, too few candidates, duplicate candidate ids) are returned
    as :class:`ElectionError` instances instead of the result, so that
    callers can show "no winner" instead of failing. An election without
    voters is not an error: its result is flagged as degenerate and has no
    winner.

    :param method: Tag of the voting method (see :data:`METHODS`).
    :param voters: Voters, with ``x`` and ``y`` attributes.
    :param candidates: Candidates, with ``id``, ``x``, ``y``, ``color``
        and ``name`` attributes.
    :param params: Method parameters; defaults are used if not given.
    :param skip_voter_states: Only compute the winner and tallies, skipping
        the per-voter annotations and breakdowns.
    :param chooser: Tie-breaking source. Takes precedence over the seed.
    :param seed: Seed of a fresh random chooser for this election, making
        the result reproducible. If neither a chooser nor a seed is given,
        ties are broken non-reproducibly.
    :param annotate: Apply the final voter annotations to the voters after
        a successful evaluation.
    :param strict: Raise election errors instead of returning them.
    """
    if chooser is None:
        chooser = RandomChooser(seed)
    try:
        evaluator = get_evaluator(method, params, chooser)
        result = evaluator.evaluate(voters, candidates, skip_voter_states)
    except ElectionError as err:
        if strict:
            raise
        logger.warning('election not evaluated: %s', err)
        return err
    if annotate and result.voter_states is not None:
        result.annotate(voters)
    return result
