'''Voter display colours derived from election outcomes.

Colours are ``#RRGGBB`` strings. Voters are coloured after the candidate
they support; voters supporting several candidates get a weighted RGB blend
of their colours, and voters with no discriminating preference get one of
the neutral markers.
'''

import colorsys
from typing import List, Optional, Sequence, Tuple
from numbers import Number


VOTER_DEFAULT_COLOR = '#000000'
'''Colour of a voter before any election.'''

NO_PREFERENCE_COLOR = '#000000'
'''Colour of a voter that supports nobody.'''

NEUTRAL_COLOR = '#808080'
'''Colour of a voter that supports everyone equally, or is tied.'''

SATURATION_BOOST = 1.4


def parse_hex(color: str) -> Tuple[int, int, int]:
    '''Parse a ``#RRGGBB`` colour into an RGB triple.'''
    hexpart = color.lstrip('#')
    if len(hexpart) != 6:
        raise ValueError(f'invalid colour {color!r}, #RRGGBB expected')
    return tuple(int(hexpart[i:i+2], 16) for i in (0, 2, 4))


def to_hex(rgb: Sequence[Number]) -> str:
    '''Format an RGB triple as a ``#rrggbb`` colour, rounding components.'''
    return '#' + ''.join(
        f'{min(255, max(0, int(round(comp)))):02x}' for comp in rgb
    )


def blend_colors(colors: List[str],
                 weights: Optional[List[Number]] = None,
                 ) -> str:
    '''Blend colours by a weighted average of their RGB components.

    Colours with zero weight are disregarded. If nothing remains to be
    blended, the no-preference colour is returned.

    :param colors: Colours to blend.
    :param weights: Weights of the colours; equal weights if not given.
    '''
    if weights is None:
        weights = [1] * len(colors)
    elif len(weights) != len(colors):
        raise ValueError(f'{len(colors)} colours but {len(weights)} weights')
    total_weight = 0
    sums = [0, 0, 0]
    for color, weight in zip(colors, weights):
        if weight > 0:
            for i, comp in enumerate(parse_hex(color)):
                sums[i] += comp * weight
            total_weight += weight
    if not total_weight:
        return NO_PREFERENCE_COLOR
    return to_hex([comp / total_weight for comp in sums])


def saturate(color: str, factor: float = SATURATION_BOOST) -> str:
    '''Multiply the HSL saturation of the colour, capping at full.'''
    r, g, b = (comp / 255 for comp in parse_hex(color))
    hue, lightness, saturation = colorsys.rgb_to_hls(r, g, b)
    saturation = min(1.0, saturation * factor)
    return to_hex(
        comp * 255
        for comp in colorsys.hls_to_rgb(hue, lightness, saturation)
    )


def proportional_color(colors: List[str],
                       weights: List[Number],
                       boost: float = SATURATION_BOOST,
                       ) -> str:
    '''Colour of a voter weighting all candidates.

    If all weights are zero or all are equal, the voter has no
    discriminating preference and gets the neutral colour. Otherwise the
    colours are blended by weight and the saturation of the blend is boosted
    to keep mixtures distinguishable.

    :param colors: Colours of all candidates.
    :param weights: The voter's weights of the candidates, in the same order.
    :param boost: Saturation multiplier for the blended colour.
    '''
    if not weights or not sum(weights):
        return NEUTRAL_COLOR
    if all(weight == weights[0] for weight in weights):
        return NEUTRAL_COLOR
    blended = blend_colors(colors, weights)
    if boost != 1:
        blended = saturate(blended, boost)
    return blended
