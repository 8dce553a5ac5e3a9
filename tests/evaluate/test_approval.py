import sys
import os
import math
import random

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
from spatialvote.candidate import Candidate
from spatialvote.evaluate.approval import Approval
from spatialvote.evaluate.auxiliary import InputOrderChooser, RandomChooser
from spatialvote.generate import Voter


FOUR_CANDIDATES = [
    Candidate(0, 200, 300),
    Candidate(1, 400, 300),
    Candidate(2, 300, 200),
    Candidate(3, 300, 500),
]


def test_equidistant_three_of_four():
    # 100 from candidates 0, 1 and 2, 200 from candidate 3
    voter = Voter(300, 300)
    evaluator = Approval(150, 'strategic')
    assert evaluator.approved(voter, FOUR_CANDIDATES) == frozenset([0, 1, 2])
    result = evaluator.evaluate([voter], FOUR_CANDIDATES)
    assert result.tally == {0: 1, 1: 1, 2: 1, 3: 0}
    assert result.voter_states[0].approved_candidates == frozenset([0, 1, 2])


def test_strategic_all_in_range_excludes_furthest():
    voter = Voter(310, 310)
    evaluator = Approval(300, 'strategic')
    approved = evaluator.approved(voter, FOUR_CANDIDATES)
    assert len(approved) == 3
    assert 3 not in approved


def test_strategic_all_in_range_furthest_tie():
    cands = FOUR_CANDIDATES[:3]
    voter = Voter(300, 300)  # equidistant from all three
    excluded = set()
    for seed in range(30):
        approved = Approval(150, 'strategic', RandomChooser(seed)).approved(
            voter, cands
        )
        assert len(approved) == 2
        excluded |= {0, 1, 2} - approved
    assert excluded == {0, 1, 2}


def test_strategic_none_in_range_approves_nearest():
    voter = Voter(20, 300)
    approved = Approval(50, 'strategic').approved(voter, FOUR_CANDIDATES)
    assert approved == frozenset([0])


def test_honest_none_in_range():
    voter = Voter(20, 20)
    evaluator = Approval(50, 'honest')
    assert evaluator.approved(voter, FOUR_CANDIDATES) == frozenset()
    state = evaluator.evaluate([voter], FOUR_CANDIDATES).voter_states[0]
    assert state.vote_color == '#000000'
    assert state.preferred_candidate is None


def test_honest_all_in_range():
    voter = Voter(300, 300)
    evaluator = Approval(300, 'honest')
    assert evaluator.approved(voter, FOUR_CANDIDATES) == frozenset(range(4))
    state = evaluator.evaluate([voter], FOUR_CANDIDATES).voter_states[0]
    assert state.vote_color == '#808080'


def test_radius_inclusive():
    cands = [Candidate(0, 0, 0), Candidate(1, 600, 0)]
    assert Approval(100, 'honest').approved(Voter(100, 0), cands) == frozenset([0])


def test_colors():
    cands = FOUR_CANDIDATES
    evaluator = Approval(120, 'honest')
    voters = [Voter(200, 310), Voter(250, 250), Voter(5, 595)]
    states = evaluator.evaluate(voters, cands).voter_states
    assert states[0].vote_color == '#FF0000'
    assert states[0].preferred_candidate == 0
    # red and green blended
    assert states[1].approved_candidates == frozenset([0, 2])
    assert states[1].vote_color == '#808000'
    assert states[1].preferred_candidate is None
    assert states[2].vote_color == '#000000'


@pytest.mark.parametrize('seed', range(4))
def test_strategic_ballots_nonempty_subsets(seed):
    rng = random.Random(seed)
    voters = [Voter(rng.uniform(0, 600), rng.uniform(0, 600)) for i in range(300)]
    evaluator = Approval(rng.uniform(50, 300), 'strategic', RandomChooser(seed))
    result = evaluator.evaluate(voters, FOUR_CANDIDATES)
    ids = {cand.id for cand in FOUR_CANDIDATES}
    for state in result.voter_states:
        assert state.approved_candidates
        assert state.approved_candidates <= ids
        assert len(state.approved_candidates) < len(ids)
    assert sum(result.tally.values()) == sum(
        len(state.approved_candidates) for state in result.voter_states
    )
    assert result.tally[result.winner] == max(result.tally.values())


def test_breakdown():
    voters = [Voter(300, 300), Voter(200, 300)]
    result = Approval(150, 'strategic', InputOrderChooser()).evaluate(
        voters, FOUR_CANDIDATES
    )
    assert result.strategy == 'strategic'
    top = result.breakdown[0]
    assert top.candidate_id == 0
    assert top.value == 2
    assert top.percentage == 100
    assert top.to_dict()['approvals'] == 2


def test_no_voters():
    result = Approval().evaluate([], FOUR_CANDIDATES)
    assert result.degenerate
    assert result.winner is None
    assert set(result.tally.values()) == {0}


@pytest.mark.parametrize('args', [(-5, 'strategic'), (100, 'sincere')])
def test_invalid_params(args):
    with pytest.raises(ValueError):
        Approval(*args)
