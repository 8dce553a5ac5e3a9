"""A commandline tool for quick spatial voting simulations.

In the election mode, evaluates an election of a Gaussian voter
distribution and shows its result. In the map mode, generates the winner
territory map of the distribution moved over the whole plane and shows it
as a character grid (or plots it, if Matplotlib is installed).
"""

import argparse
import logging
from typing import Optional, List, Tuple

import spatialvote.system
import spatialvote.generate
import spatialvote.candidate
import spatialvote.crit.yee
from spatialvote.candidate import Candidate
from spatialvote.evaluate.auxiliary import RandomChooser
from spatialvote.evaluate.core import ElectionError, ElectionResult
from spatialvote.geometry import DEFAULT_BOUNDS
from spatialvote.system import MethodParams


def point(value: str) -> Tuple[float, float]:
    """Parse a point given as ``x,y``."""
    try:
        x, y = value.split(',')
        return float(x), float(y)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f'invalid point {value!r}, x,y expected'
        ) from e


argparser = argparse.ArgumentParser(
    prog='python -m spatialvote',
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    'mode',
    choices=['election', 'map'],
    help='evaluate a single election or generate a winner territory map',
)
argparser.add_argument(
    '-m', '--method',
    default='plurality',
    choices=spatialvote.system.available_methods(),
    help='voting method to use',
)
argparser.add_argument(
    '-c', '--n-candidates',
    type=int,
    default=3,
    help='number of candidates in the default arrangement',
)
argparser.add_argument(
    '-p', '--position',
    type=point,
    action='append',
    dest='positions',
    help='explicit candidate position as x,y; repeat for every candidate',
)
argparser.add_argument(
    '-n', '--n-voters',
    type=int,
    default=spatialvote.generate.DEFAULT_VOTER_COUNT,
    help='number of voters in the distribution',
)
argparser.add_argument(
    '-r', '--spread-radius',
    type=float,
    default=spatialvote.generate.DEFAULT_SPREAD_RADIUS,
    help='radius containing nearly all voters of the distribution',
)
argparser.add_argument(
    '--center',
    type=point,
    default=DEFAULT_BOUNDS.center,
    help='center of the voter distribution as x,y (election mode)',
)
argparser.add_argument(
    '--approval-radius',
    type=float,
    default=150,
    help='maximum distance of an approved candidate',
)
argparser.add_argument(
    '--approval-strategy',
    choices=['strategic', 'honest'],
    default='strategic',
    help='behavior of approval voters',
)
argparser.add_argument(
    '--star-max-distance',
    type=float,
    default=300,
    help='distance beyond which STAR voters give no stars',
)
argparser.add_argument(
    '--score-max-distance',
    type=float,
    default=300,
    help='distance beyond which score voters give a zero score',
)
argparser.add_argument(
    '-g', '--grid-size',
    type=float,
    default=spatialvote.crit.yee.DEFAULT_GRID_SIZE,
    help='cell size of the territory map grid',
)
argparser.add_argument(
    '-s', '--seed',
    type=int,
    help='seed for voter generation and tie breaking',
)
argparser.add_argument(
    '--plot',
    action='store_true',
    help='plot the territory map with Matplotlib instead of printing it',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all evaluator log messages and other info',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any evaluator log messages or other info',
)

RANGES = {
    'n_candidates': (
        spatialvote.candidate.MIN_CANDIDATES,
        spatialvote.candidate.MAX_CANDIDATES,
    ),
    'n_voters': (
        spatialvote.generate.MIN_VOTERS,
        spatialvote.generate.MAX_VOTERS,
    ),
    'spread_radius': (
        spatialvote.generate.MIN_SPREAD_RADIUS,
        spatialvote.generate.MAX_SPREAD_RADIUS,
    ),
    'approval_radius': (
        spatialvote.system.MIN_APPROVAL_RADIUS,
        spatialvote.system.MAX_APPROVAL_RADIUS,
    ),
    'star_max_distance': (
        spatialvote.system.MIN_MAX_DISTANCE,
        spatialvote.system.MAX_MAX_DISTANCE,
    ),
    'score_max_distance': (
        spatialvote.system.MIN_MAX_DISTANCE,
        spatialvote.system.MAX_MAX_DISTANCE,
    ),
}


def main(mode: str,
         method: str = 'plurality',
         n_candidates: int = 3,
         positions: Optional[List[Tuple[float, float]]] = None,
         n_voters: int = spatialvote.generate.DEFAULT_VOTER_COUNT,
         spread_radius: float = spatialvote.generate.DEFAULT_SPREAD_RADIUS,
         center: Tuple[float, float] = DEFAULT_BOUNDS.center,
         approval_radius: float = 150,
         approval_strategy: str = 'strategic',
         star_max_distance: float = 300,
         score_max_distance: float = 300,
         grid_size: float = spatialvote.crit.yee.DEFAULT_GRID_SIZE,
         seed: Optional[int] = None,
         plot: bool = False,
         verbose: bool = False,
         quiet: bool = False,
         ) -> None:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    candidates = make_candidates(n_candidates, positions)
    params = MethodParams(
        approval_radius=approval_radius,
        approval_strategy=approval_strategy,
        star_max_distance=star_max_distance,
        score_max_distance=score_max_distance,
    )
    distribution = spatialvote.generate.Distribution(
        center, spread_radius, n_voters, random_state=seed
    )
    if mode == 'election':
        run_one_election(method, distribution, candidates, params, seed)
    else:
        if not verbose:
            # one election per cell, keep their messages out of the way
            logging.getLogger('spatialvote.evaluate').setLevel(
                logging.WARNING
            )
        generate_map(method, distribution, candidates, params,
                     grid_size, seed, plot)


def make_candidates(n_candidates: int,
                    positions: Optional[List[Tuple[float, float]]] = None,
                    ) -> List[Candidate]:
    """Create the candidates at explicit or default positions."""
    if positions:
        return [Candidate(i, x, y) for i, (x, y) in enumerate(positions)]
    return spatialvote.candidate.default_candidates(n_candidates)


def show_candidates(candidates: List[Candidate]) -> None:
    for cand in candidates:
        print(f'  {cand.id}  {cand.name:<10} ({cand.x:.0f}, {cand.y:.0f})')


def show_breakdown(entries, indent: int = 2) -> None:
    """Show the breakdown entries as a table."""
    for entry in entries:
        line = f'{" " * indent}{entry.name:<10} {entry.value:>10.6g}'
        if entry.percentage is not None:
            line += f' {entry.percentage:6.1f} %'
        if entry.average is not None:
            line += f'   avg {entry.average:.2f}'
        if entry.active is False:
            line += '   (out)'
        print(line)


def show_result(result: ElectionResult,
                candidates: List[Candidate],
                ) -> None:
    """Show full results of a single election."""
    names = {cand.id: cand.name for cand in candidates}
    if result.is_multiround:
        for rnd in result.rounds:
            print(f'{rnd.name}:')
            show_breakdown(rnd.breakdown)
            if rnd.eliminated is not None:
                print(f'  eliminated: {names[rnd.eliminated]}')
            if 'tied' in rnd.details:
                print(f'  tied: {rnd.details["tied"]}')
    else:
        show_breakdown(result.breakdown)
    print()
    if result.winner is None:
        print('No winner')
    else:
        print('Elected', ' ', names[result.winner])


def run_one_election(method: str,
                     distribution: spatialvote.generate.Distribution,
                     candidates: List[Candidate],
                     params: MethodParams,
                     seed: Optional[int] = None,
                     ) -> None:
    voters = distribution.generate()
    system = spatialvote.system.METHODS[method]
    print()
    print(f'Running a {system.name} election')
    print(f'{len(voters)} voters around ({distribution.center[0]:.0f},'
          f' {distribution.center[1]:.0f}),'
          f' spread radius {distribution.spread_radius:g}')
    print(f'{len(candidates)} candidates:')
    show_candidates(candidates)
    print()
    result = spatialvote.system.run_election(
        method, voters, candidates, params, seed=seed
    )
    if isinstance(result, ElectionError):
        print(f'Election failed: {result}')
        return
    print('Election result:')
    show_result(result, candidates)


def generate_map(method: str,
                 distribution: spatialvote.generate.Distribution,
                 candidates: List[Candidate],
                 params: MethodParams,
                 grid_size: float,
                 seed: Optional[int] = None,
                 plot: bool = False,
                 ) -> None:
    generator = spatialvote.crit.yee.WinnerMapGenerator(
        grid_size=grid_size, chooser=RandomChooser(seed)
    )
    logger = logging.getLogger('spatialvote')
    try:
        cache = generator.generate(
            candidates, distribution, method, params,
            progress=lambda pct: logger.debug('map %.0f %% done', pct),
        )
    except ElectionError as err:
        print(f'Map generation failed: {err}')
        return
    conformity = spatialvote.crit.yee.voronoi_conformity(cache, candidates)
    if plot:
        plt = spatialvote.crit.yee.plt
        spatialvote.crit.yee.plot(cache, candidates)
        plt.title(f'{spatialvote.system.METHODS[method].name}'
                  f' ({conformity:.1%} Voronoi conformity)')
        plt.show()
        return
    letters = {cand.id: cand.name[0] for cand in candidates}
    for row in cache.grid:
        print(''.join(
            '.' if winner is None else letters[winner] for winner in row
        ))
    print()
    for cand in candidates:
        print(f'{letters[cand.id]}  {cand.name}')
    print(f'Voronoi conformity: {conformity:.1%}')


def check_ranges(args: argparse.Namespace) -> None:
    """Exit with a usage error if any numeric argument is out of range."""
    values = vars(args).copy()
    if args.positions:
        values['n_candidates'] = len(args.positions)
    for key, (low, high) in RANGES.items():
        value = values[key]
        if not low <= value <= high:
            argparser.error(f'{key.replace("_", " ")} must be between'
                            f' {low} and {high}, got {value}')


if __name__ == '__main__':
    args = argparser.parse_args()
    check_ranges(args)
    main(**vars(args))
