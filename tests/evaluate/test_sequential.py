import sys
import os
import random

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
from spatialvote.candidate import Candidate
from spatialvote.evaluate.auxiliary import InputOrderChooser, RandomChooser
from spatialvote.evaluate.sequential import TwoRound, InstantRunoff
from spatialvote.generate import Voter


TWO_CANDIDATES = [Candidate(0, 100, 300), Candidate(1, 500, 300)]
THREE_CANDIDATES = [
    Candidate(0, 100, 300),
    Candidate(1, 500, 300),
    Candidate(2, 300, 100),
]
CENTER_SQUEEZE = [
    Candidate(0, 100, 300),
    Candidate(1, 500, 300),
    Candidate(2, 300, 300),
]


def voters_at(*groups):
    voters = []
    for (x, y), count in groups:
        voters.extend(Voter(x, y) for i in range(count))
    return voters


def random_voters(n, seed):
    rng = random.Random(seed)
    return [Voter(rng.uniform(0, 600), rng.uniform(0, 600)) for i in range(n)]


def test_two_round_outright():
    voters = voters_at(((110, 300), 6), ((490, 300), 3), ((300, 110), 1))
    result = TwoRound().evaluate(voters, THREE_CANDIDATES)
    assert result.winner == 0
    assert result.outright
    assert result.top_two is None
    assert len(result.rounds) == 1
    assert result.rounds[0].tally == {0: 6, 1: 3, 2: 1}


def test_two_round_runoff():
    voters = voters_at(((110, 300), 4), ((490, 300), 3), ((320, 110), 2))
    result = TwoRound().evaluate(voters, THREE_CANDIDATES)
    assert not result.outright
    assert result.top_two == [0, 1]
    assert result.rounds[0].tally == {0: 4, 1: 3, 2: 2}
    assert result.rounds[1].tally == {0: 4, 1: 5}
    assert result.winner == 1
    assert [rnd.name for rnd in result.rounds] == ['First Round', 'Runoff']
    runoff_states = result.rounds[1].voter_states
    assert [s.preferred_candidate for s in runoff_states[-2:]] == [1, 1]
    assert result.voter_states is runoff_states


def test_two_round_half_is_not_outright():
    voters = voters_at(((110, 300), 2), ((490, 300), 2))
    result = TwoRound(InputOrderChooser()).evaluate(voters, TWO_CANDIDATES)
    assert not result.outright
    assert len(result.rounds) == 2
    assert result.winner == 0


def test_two_round_runoff_tie_coin_flip():
    voters = voters_at(((110, 300), 1), ((490, 300), 1))
    winners = {
        TwoRound(RandomChooser(seed)).evaluate(voters, TWO_CANDIDATES).winner
        for seed in range(30)
    }
    assert winners == {0, 1}


def test_two_round_equidistant_voters_split():
    # all voters equidistant from both finalists
    voters = voters_at(((300, 300), 1000))
    result = TwoRound(RandomChooser(5)).evaluate(voters, TWO_CANDIDATES)
    runoff = result.rounds[-1].tally
    assert sum(runoff.values()) == 1000
    assert abs(runoff[0] - runoff[1]) < 150


def test_two_round_second_place_tie():
    voters = voters_at(((110, 300), 4), ((490, 300), 2), ((300, 110), 2))
    finalists = {
        TwoRound(RandomChooser(seed)).evaluate(
            voters, THREE_CANDIDATES
        ).top_two[1]
        for seed in range(30)
    }
    assert finalists == {1, 2}


def test_two_round_no_voters():
    result = TwoRound().evaluate([], THREE_CANDIDATES)
    assert result.degenerate
    assert result.winner is None


def test_irv_center_squeeze():
    voters = voters_at(((90, 300), 4), ((510, 300), 3), ((290, 310), 2))
    result = InstantRunoff().evaluate(voters, CENTER_SQUEEZE)
    assert len(result.rounds) == 2
    assert result.rounds[0].tally == {0: 4, 1: 3, 2: 2}
    assert result.rounds[0].eliminated == 2
    assert result.rounds[0].eliminated_votes == 2
    assert result.rounds[1].active == [0, 1]
    assert result.rounds[1].tally == {0: 6, 1: 3}
    assert result.rounds[1].eliminated is None
    assert result.winner == 0
    assert result.eliminated == [{'candidate_id': 2, 'round': 1, 'votes': 2}]


def test_irv_first_round_majority():
    voters = voters_at(((90, 300), 5), ((510, 300), 2), ((300, 110), 2))
    result = InstantRunoff().evaluate(voters, THREE_CANDIDATES)
    assert len(result.rounds) == 1
    assert result.winner == 0
    assert result.eliminated == []


def test_irv_elimination_tie():
    voters = voters_at(((90, 300), 4), ((510, 300), 2), ((300, 90), 2))
    eliminated = set()
    for seed in range(30):
        result = InstantRunoff(RandomChooser(seed)).evaluate(
            voters, THREE_CANDIDATES
        )
        eliminated.add(result.rounds[0].eliminated)
    assert eliminated == {1, 2}


def test_irv_breakdown_marks_active():
    voters = voters_at(((90, 300), 4), ((510, 300), 3), ((290, 310), 2))
    result = InstantRunoff().evaluate(voters, CENTER_SQUEEZE)
    second = result.rounds[1].breakdown
    assert {entry.candidate_id for entry in second} == {0, 1}
    assert all(entry.active for entry in second)


@pytest.mark.parametrize('seed', range(6))
def test_irv_properties(seed):
    rng = random.Random(seed)
    cands = [
        Candidate(i, rng.uniform(50, 550), rng.uniform(50, 550))
        for i in range(rng.randint(2, 6))
    ]
    voters = random_voters(300, seed)
    result = InstantRunoff(RandomChooser(seed)).evaluate(voters, cands)
    assert len(result.rounds) <= len(cands) - 1
    for rnd in result.rounds:
        assert sum(rnd.tally.values()) == len(voters)
    for record in result.eliminated:
        rnd = result.rounds[record['round'] - 1]
        assert rnd.eliminated == record['candidate_id']
        assert rnd.tally[record['candidate_id']] == record['votes']
    for rnd in result.rounds[:-1]:
        assert max(rnd.tally.values()) <= len(voters) / 2
    assert result.winner in result.rounds[-1].active


def test_irv_no_voters():
    result = InstantRunoff().evaluate([], THREE_CANDIDATES)
    assert result.degenerate
    assert result.winner is None
    assert len(result.rounds) == 2
    assert all(set(rnd.tally.values()) == {0} for rnd in result.rounds)
