'''Various utility functions for other modules of spatialvote.

There should normally be no need to use these functions directly.
'''

import operator
from typing import Any, List, Tuple, Dict, Iterable
from numbers import Number


def zero_tally(candidate_ids: Iterable[int]) -> Dict[int, Number]:
    '''Return a tally with a zero count for each candidate, in input order.'''
    return {cand_id: 0 for cand_id in candidate_ids}


def sorted_votes(votes: Dict[Any, Number],
                 descending: bool = True,
                 ) -> List[Tuple[Any, Number]]:
    '''Return votes items sorted by value.

    The sort is stable so candidates with equal values keep their input
    order.
    '''
    return list(sorted(
        votes.items(),
        key=operator.itemgetter(1),
        reverse=descending
    ))


def percentage(part: Number, total: Number) -> float:
    '''Express part as a percentage of total; zero for an empty total.'''
    if not total:
        return 0.0
    return 100 * part / total
