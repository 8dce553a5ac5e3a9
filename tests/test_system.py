import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import spatialvote.candidate
import spatialvote.generate
import spatialvote.system
from spatialvote.candidate import Candidate
from spatialvote.evaluate.auxiliary import InputOrderChooser
from spatialvote.evaluate.core import (
    ElectionResult, InvalidCandidateCount, InvalidCandidates,
    InvalidParameters, UnknownMethod,
)
from spatialvote.system import MethodParams, run_election


METHODS = spatialvote.system.available_methods()


def make_voters(seed=1711, n=300):
    return spatialvote.generate.Distribution(
        (280, 320), 250, n, random_state=seed
    ).generate()


def test_methods_registered():
    assert set(METHODS) == {
        'plurality', 'approval', 'two-round', 'score', 'irv', 'star', 'borda'
    }


@pytest.mark.parametrize('method', METHODS)
def test_run_all_methods(method):
    candidates = spatialvote.candidate.default_candidates(4)
    voters = make_voters()
    result = run_election(method, voters, candidates, seed=3)
    assert isinstance(result, ElectionResult)
    assert result.method == method
    assert result.winner in {cand.id for cand in candidates}
    assert len(result.voter_states) == len(voters)
    assert result.breakdown or result.rounds


@pytest.mark.parametrize('method', METHODS)
def test_idempotent_with_seed(method):
    candidates = spatialvote.candidate.default_candidates(5)
    voters = make_voters()
    first = run_election(method, voters, candidates, seed=99)
    second = run_election(method, voters, candidates, seed=99)
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize('method', METHODS)
def test_skip_voter_states_same_winner(method):
    candidates = spatialvote.candidate.default_candidates(3)
    voters = make_voters()
    full = run_election(method, voters, candidates, seed=5)
    fast = run_election(method, voters, candidates, seed=5,
                        skip_voter_states=True)
    assert fast.voter_states is None
    assert fast.winner == full.winner
    assert fast.tally == full.tally


@pytest.mark.parametrize('method', METHODS)
def test_no_voters_degenerate(method):
    candidates = spatialvote.candidate.default_candidates(3)
    result = run_election(method, [], candidates, seed=1)
    assert isinstance(result, ElectionResult)
    assert result.degenerate
    assert result.winner is None
    assert set(result.tally.values()) == {0}


def test_unknown_method_returned():
    candidates = spatialvote.candidate.default_candidates(3)
    result = run_election('condorcet', make_voters(), candidates)
    assert isinstance(result, UnknownMethod)
    assert result.to_dict()['error'] == 'UnknownMethod'


def test_unknown_method_strict():
    candidates = spatialvote.candidate.default_candidates(3)
    with pytest.raises(UnknownMethod):
        run_election('condorcet', make_voters(), candidates, strict=True)


@pytest.mark.parametrize('candidates, error', [
    ([Candidate(0, 300, 300)], InvalidCandidateCount),
    ([Candidate(1, 300, 300), Candidate(1, 200, 200)], InvalidCandidates),
])
def test_invalid_candidates_returned(candidates, error):
    voters = make_voters()
    result = run_election('plurality', voters, candidates, annotate=True)
    assert isinstance(result, error)
    assert all(voter.preferred_candidate is None for voter in voters)


def test_annotate():
    candidates = spatialvote.candidate.default_candidates(3)
    voters = make_voters()
    result = run_election('plurality', voters, candidates, annotate=True)
    assert [voter.preferred_candidate for voter in voters] == [
        state.preferred_candidate for state in result.voter_states
    ]
    assert all(voter.vote_color in {c.color for c in candidates}
               for voter in voters)


def test_no_annotate_by_default():
    candidates = spatialvote.candidate.default_candidates(3)
    voters = make_voters()
    run_election('approval', voters, candidates)
    assert all(voter.approved_candidates is None for voter in voters)


def test_params_used():
    candidates = spatialvote.candidate.default_candidates(3)
    voters = make_voters()
    result = run_election(
        'approval', voters, candidates,
        MethodParams(approval_radius=60, approval_strategy='honest'),
        seed=1,
    )
    assert result.strategy == 'honest'
    assert result.approval_radius == 60
    star = run_election('star', voters, candidates,
                        MethodParams(star_max_distance=500), seed=1)
    assert star.max_distance == 500


def test_explicit_chooser():
    candidates = [Candidate(0, 100, 300), Candidate(1, 500, 300)]
    voters = [spatialvote.generate.Voter(300, 300) for i in range(10)]
    result = run_election('plurality', voters, candidates,
                          chooser=InputOrderChooser())
    assert result.tally == {0: 10, 1: 0}


@pytest.mark.parametrize('method, expected', [
    ('plurality', {}),
    ('two-round', {}),
    ('irv', {}),
    ('borda', {}),
    ('approval', {'approval_radius': 150, 'approval_strategy': 'strategic'}),
    ('star', {'star_max_distance': 300}),
    ('score', {'score_max_distance': 300}),
])
def test_relevant_params(method, expected):
    assert MethodParams().relevant_to(method) == expected


def test_relevant_params_unknown():
    with pytest.raises(UnknownMethod):
        MethodParams().relevant_to('nope')


def test_invalid_strategy():
    with pytest.raises(ValueError):
        MethodParams(approval_strategy='sincere')


def test_multi_distribution_election():
    dists = [
        spatialvote.generate.Distribution(center, 100, 150, random_state=i)
        for i, center in enumerate([(150, 300), (450, 300)])
    ]
    voters = spatialvote.generate.combined_voters(dists)
    candidates = [Candidate(0, 150, 300), Candidate(1, 450, 300),
                  Candidate(2, 300, 300)]
    result = run_election('irv', voters, candidates, seed=2)
    assert result.total_voters == 300
    assert result.rounds[0].tally[2] < result.rounds[0].tally[0]


@pytest.mark.parametrize('kwargs', [
    {'approval_radius': -5},
    {'star_max_distance': 0},
    {'score_max_distance': -100},
])
def test_invalid_params(kwargs):
    with pytest.raises(ValueError):
        MethodParams(**kwargs)


@pytest.mark.parametrize('method, attr, value', [
    ('approval', 'approval_radius', -5),
    ('star', 'star_max_distance', 0),
    ('score', 'score_max_distance', -100),
])
def test_invalid_params_returned(method, attr, value):
    params = MethodParams()
    setattr(params, attr, value)
    candidates = spatialvote.candidate.default_candidates(3)
    result = run_election(method, make_voters(n=20), candidates, params)
    assert isinstance(result, InvalidParameters)
    assert result.to_dict()['error'] == 'InvalidParameters'
    with pytest.raises(InvalidParameters):
        run_election(method, make_voters(n=20), candidates, params,
                     strict=True)


def test_irrelevant_invalid_param_ignored():
    params = MethodParams()
    params.star_max_distance = 0
    candidates = spatialvote.candidate.default_candidates(3)
    result = run_election('plurality', make_voters(n=20), candidates, params,
                          seed=1)
    assert isinstance(result, ElectionResult)
