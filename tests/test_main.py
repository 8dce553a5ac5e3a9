import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import spatialvote.__main__
import spatialvote.generate
from spatialvote.candidate import Candidate
from spatialvote.system import MethodParams


def parse(*argv):
    return spatialvote.__main__.argparser.parse_args(list(argv))


def make_distribution():
    return spatialvote.generate.Distribution(
        (300, 300), 100, 100, random_state=1
    )


@pytest.mark.parametrize('argv', [
    ['map', '-p', '100,100'],
    ['map'] + ['-p', '100,100'] * 7,
    ['election', '-c', '1'],
    ['election', '-n', '50'],
    ['map', '--approval-radius', '20'],
])
def test_out_of_range_rejected(argv):
    with pytest.raises(SystemExit):
        spatialvote.__main__.check_ranges(parse(*argv))


@pytest.mark.parametrize('argv', [
    ['map', '-p', '100,100', '-p', '500,500'],
    ['map', '-c', '6'],
    ['election', '-c', '1', '-p', '1,1', '-p', '2,2'],
])
def test_in_range_accepted(argv):
    spatialvote.__main__.check_ranges(parse(*argv))


def test_positions_make_candidates():
    cands = spatialvote.__main__.make_candidates(
        3, [(100, 100), (500, 500)]
    )
    assert [(c.id, c.x, c.y) for c in cands] == [(0, 100, 100), (1, 500, 500)]


def test_map_single_candidate_reported(capsys):
    spatialvote.__main__.generate_map(
        'plurality', make_distribution(), [Candidate(0, 100, 100)],
        MethodParams(), 200, seed=1,
    )
    assert 'Map generation failed' in capsys.readouterr().out


def test_map_printed(capsys):
    spatialvote.__main__.generate_map(
        'plurality', make_distribution(),
        [Candidate(0, 100, 300), Candidate(1, 500, 300)],
        MethodParams(), 200, seed=1,
    )
    lines = capsys.readouterr().out.splitlines()
    for line in lines[:3]:
        assert len(line) == 3
        assert line[0] == 'R'
        assert line[-1] == 'B'
    assert lines[-1].startswith('Voronoi conformity')
