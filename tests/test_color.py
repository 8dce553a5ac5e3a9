import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import spatialvote.color


def test_parse_hex():
    assert spatialvote.color.parse_hex('#FF8000') == (255, 128, 0)
    with pytest.raises(ValueError):
        spatialvote.color.parse_hex('#FFF')


def test_blend_equal():
    assert spatialvote.color.blend_colors(['#FF0000', '#0000FF']) == '#800080'


def test_blend_weighted():
    blended = spatialvote.color.blend_colors(['#FF0000', '#0000FF'], [3, 1])
    assert blended == '#bf0040'


def test_blend_ignores_zero_weights():
    blended = spatialvote.color.blend_colors(
        ['#FF0000', '#0000FF', '#00FF00'], [1, 0, 0]
    )
    assert blended == '#ff0000'


def test_blend_nothing():
    assert spatialvote.color.blend_colors([]) == spatialvote.color.NO_PREFERENCE_COLOR
    assert spatialvote.color.blend_colors(['#FF0000'], [0]) == '#000000'


def test_blend_length_mismatch():
    with pytest.raises(ValueError):
        spatialvote.color.blend_colors(['#FF0000'], [1, 2])


@pytest.mark.parametrize('weights', [[0, 0, 0], [2.5, 2.5, 2.5], []])
def test_proportional_neutral(weights):
    colors = ['#FF0000', '#0000FF', '#00FF00'][:len(weights)]
    assert spatialvote.color.proportional_color(colors, weights) == (
        spatialvote.color.NEUTRAL_COLOR
    )


def test_proportional_boosts_saturation():
    colors = ['#FF0000', '#0000FF', '#00FF00']
    plain = spatialvote.color.proportional_color(colors, [3, 1, 1], boost=1)
    boosted = spatialvote.color.proportional_color(colors, [3, 1, 1])
    assert plain == '#993333'
    r, g, b = spatialvote.color.parse_hex(boosted)
    assert g == b
    assert r > 153
    assert g < 51


def test_saturate_grey_unchanged():
    assert spatialvote.color.saturate('#808080') == '#808080'
