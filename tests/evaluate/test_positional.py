import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
from spatialvote.candidate import Candidate
from spatialvote.evaluate.auxiliary import RandomChooser
from spatialvote.evaluate.positional import Borda
from spatialvote.generate import Voter


CANDIDATES = [
    Candidate(0, 100, 300),
    Candidate(1, 500, 300),
    Candidate(2, 300, 300),
]


def test_borda_points():
    voters = [Voter(90, 300)] * 4 + [Voter(510, 300)] * 3
    result = Borda().evaluate(voters, CANDIDATES)
    # left voters rank 0, 2, 1; right voters rank 1, 2, 0
    assert result.tally == {0: 8, 1: 6, 2: 7}
    assert result.winner == 0
    assert result.breakdown[0].to_dict()['points'] == 8
    assert [s.preferred_candidate for s in result.voter_states] == [0] * 4 + [1] * 3


def test_borda_compromise_wins():
    voters = [Voter(90, 300)] * 3 + [Voter(510, 300)] * 3 + [Voter(300, 290)]
    result = Borda().evaluate(voters, CANDIDATES)
    assert result.winner == 2


def test_borda_total_points():
    voters = [Voter(x, 200) for x in range(0, 600, 37)]
    result = Borda(RandomChooser(1)).evaluate(voters, CANDIDATES)
    assert sum(result.tally.values()) == len(voters) * 3


def test_borda_no_voters():
    result = Borda().evaluate([], CANDIDATES)
    assert result.degenerate
    assert result.winner is None
