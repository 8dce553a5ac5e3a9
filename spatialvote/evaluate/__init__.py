'''Evaluate spatial elections.

Every evaluator takes the voters and candidates placed in the preference
plane and returns an :class:`core.ElectionResult` with the winner, the
tallies, a per-candidate breakdown (or a list of rounds for the
multi-round methods) and the per-voter display annotations.

Evaluators never modify the voters or candidates. The annotations can be
applied to the voters afterwards by :meth:`core.ElectionResult.annotate`,
which either annotates all voters or none.

All tie-breaking (equally near candidates, equal tallies, runoff coin
flips) is delegated to a chooser from the :mod:`auxiliary` module. With
the default unseeded :class:`auxiliary.RandomChooser`, results involving
ties are not reproducible; pass a seeded one or an
:class:`auxiliary.InputOrderChooser` to make them so.

If there are no voters, the evaluators do not fail but return a degenerate
result with zero tallies and no winner, flagged by
:attr:`core.ElectionResult.degenerate`.
'''

from spatialvote.evaluate.core import *    # noqa
