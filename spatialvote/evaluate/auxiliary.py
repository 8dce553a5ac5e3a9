'''Choosers: injectable sources of tie-breaking decisions.

Every evaluator resolves its ties (equally near candidates, equal tallies,
runoff coin flips) exclusively through a chooser object with a single
``choose(candidates)`` method that returns one of the items given to it.
This makes the tie-breaking the only non-deterministic part of the
tabulation and lets it be controlled:

-   :class:`RandomChooser` draws uniformly at random. Unseeded, it gives
    non-reproducible results; with a seed, the sequence of draws (and thus
    the election results) is reproducible.
-   :class:`InputOrderChooser` always takes the first item, i.e. breaks
    ties by candidate order. This is fully deterministic.
'''

import abc
import random
from typing import Any, Optional, Sequence

from spatialvote.persist import simple_serialization


class Chooser(metaclass=abc.ABCMeta):
    '''Select one item out of tied items.'''
    stable: bool = False

    @abc.abstractmethod
    def choose(self, candidates: Sequence[Any]) -> Any:
        '''Return one of the candidates.

        :param candidates: A non-empty sequence of tied items.
        '''
        raise NotImplementedError


@simple_serialization
class RandomChooser(Chooser):
    '''Choose uniformly at random among the tied items.

    The chooser owns its random generator so that the draws do not depend on
    (or disturb) any other use of the :mod:`random` module.

    :param seed: Seed for the random generator. If None, the draws are not
        reproducible.
    '''
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.stable = (self.seed is not None)
        self._random = random.Random(seed)

    def reset(self) -> None:
        '''Restart the sequence of draws from the seed.'''
        self._random.seed(self.seed)

    def choose(self, candidates: Sequence[Any]) -> Any:
        if not candidates:
            raise ValueError('nothing to choose from')
        return candidates[self._random.randrange(len(candidates))]


@simple_serialization
class InputOrderChooser(Chooser):
    '''Choose the first of the tied items.

    Since the evaluators always present tied candidates in candidate order,
    this breaks ties in favor of the candidate listed first.
    '''
    stable = True

    def choose(self, candidates: Sequence[Any]) -> Any:
        if not candidates:
            raise ValueError('nothing to choose from')
        return candidates[0]
