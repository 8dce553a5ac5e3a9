"""Create and plot winner territory maps (Yee diagrams).

A territory map covers the plane with a regular grid and evaluates
a selected voting method in each cell, with the whole voter distribution
moved so that its center lies at the cell midpoint. The winner of that
election is recorded for the cell. Use :class:`WinnerMapGenerator` to
produce this.

A good voting system's territory map should closely approximate a Voronoi
diagram over the candidates. (A Voronoi diagram would assign each point of
the plane to the closest candidate.) [#yee]_ This can be produced by calling
:func:`voronoi` and compared by :func:`voronoi_conformity`.

The Gaussian voter offsets are sampled only once and translated to every
cell, so the sweep only differs from cell to cell by the position of the
electorate. The generator keeps its last map together with a snapshot of the
candidate positions, the method and the method parameters it was made for,
and reuses it while they stay unchanged (see :func:`is_cache_valid`).

.. [#yee] Warren D. Smith. "Yee Pictures", Range Voting, 2007.
    https://rangevoting.org/IEVS/Pictures.html
"""

import math
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

try:
    import matplotlib.colors
    import matplotlib.patches
    import matplotlib.pyplot as plt
except ImportError:
    matplotlib = None
    plt = None

import spatialvote.system
import spatialvote.geometry
import spatialvote.generate
from spatialvote.evaluate.auxiliary import Chooser, RandomChooser
from spatialvote.evaluate.core import check_candidates
from spatialvote.geometry import Bounds, DEFAULT_BOUNDS
from spatialvote.system import MethodParams

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 10
PROGRESS_INTERVAL = 100

Grid = List[List[Optional[int]]]


class MapGenerationCancelled(Exception):
    '''The territory map generation was cancelled by the caller.'''
    pass


class MapSnapshot:
    '''The setup a territory map was generated for.

    :param candidates: ``(id, x, y)`` triples of all candidates.
    :param method: Voting method tag.
    :param params: The method parameters relevant to the method.
    '''
    def __init__(self,
                 candidates: Tuple[Tuple[int, float, float], ...],
                 method: str,
                 params: Dict[str, Any],
                 ):
        self.candidates = candidates
        self.method = method
        self.params = params

    @classmethod
    def take(cls,
             candidates: Sequence[Any],
             method: str,
             params: Optional[MethodParams] = None,
             ) -> 'MapSnapshot':
        '''Record the current candidate positions and method setup.'''
        if params is None:
            params = MethodParams()
        return cls(
            tuple((cand.id, cand.x, cand.y) for cand in candidates),
            method,
            params.relevant_to(method),
        )

    def __eq__(self, other):
        return (
            isinstance(other, MapSnapshot)
            and self.candidates == other.candidates
            and self.method == other.method
            and self.params == other.params
        )

    def __repr__(self):
        return (f'MapSnapshot({self.candidates!r}, {self.method!r},'
                f' {self.params!r})')


class WinnerMapCache:
    '''A territory map with the setup it was generated for.

    :param grid: Winner ids by row (from the top) and column (from the
        left). A cell has None if its election had no winner.
    :param grid_size: Side of a grid cell in plane units.
    :param rows: Number of grid rows.
    :param cols: Number of grid columns.
    :param snapshot: The setup of the map.
    :param distribution_key: Spread radius and voter count of the voter
        distribution used.
    '''
    def __init__(self,
                 grid: Grid,
                 grid_size: float,
                 rows: int,
                 cols: int,
                 snapshot: MapSnapshot,
                 distribution_key: Optional[Tuple[float, int]] = None,
                 ):
        self.grid = grid
        self.grid_size = grid_size
        self.rows = rows
        self.cols = cols
        self.snapshot = snapshot
        self.distribution_key = distribution_key

    def winner_at(self, x: float, y: float) -> Optional[int]:
        '''Winner of the cell containing the given point.

        Returns None for points outside the map.
        '''
        col = math.floor(x / self.grid_size)
        row = math.floor(y / self.grid_size)
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return self.grid[row][col]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'grid': self.grid,
            'grid_size': self.grid_size,
            'rows': self.rows,
            'cols': self.cols,
            'snapshot': {
                'candidates': [
                    list(cand) for cand in self.snapshot.candidates
                ],
                'method': self.snapshot.method,
                'params': self.snapshot.params,
            },
        }


def is_cache_valid(cache: Optional[WinnerMapCache],
                   candidates: Sequence[Any],
                   method: str,
                   params: Optional[MethodParams] = None,
                   ) -> bool:
    '''Determine whether the cached map still applies to the current setup.

    The map applies if the number of candidates is unchanged, every candidate
    has the same id and exactly the same position as in the snapshot, the
    method is the same and so are the parameters relevant to it.
    '''
    if cache is None or cache.snapshot is None:
        return False
    snapshot = cache.snapshot
    if len(candidates) != len(snapshot.candidates):
        return False
    for cand, (cand_id, x, y) in zip(candidates, snapshot.candidates):
        if cand.id != cand_id or cand.x != x or cand.y != y:
            return False
    if method != snapshot.method:
        return False
    if params is None:
        params = MethodParams()
    return params.relevant_to(method) == snapshot.params


def grid_shape(bounds: Bounds, grid_size: float) -> Tuple[int, int]:
    '''Number of rows and columns of a grid covering the bounds.'''
    return (
        math.ceil(bounds.height / grid_size),
        math.ceil(bounds.width / grid_size),
    )


def cell_centers(bounds: Bounds,
                 grid_size: float,
                 ) -> Tuple[List[float], List[float]]:
    '''Vertical and horizontal coordinates of the cell midpoints.'''
    rows, cols = grid_shape(bounds, grid_size)
    return (
        [(i + .5) * grid_size for i in range(rows)],
        [(i + .5) * grid_size for i in range(cols)],
    )


class WinnerMapGenerator:
    '''Generate territory maps, reusing the last one while it applies.

    :param bounds: The plane to cover.
    :param grid_size: Side of a grid cell in plane units.
    :param chooser: Tie-breaking source for all cell elections. Defaults
        to an unseeded random chooser, making the map non-reproducible
        where elections are tied.
    '''
    def __init__(self,
                 bounds: Bounds = DEFAULT_BOUNDS,
                 grid_size: float = DEFAULT_GRID_SIZE,
                 chooser: Optional[Chooser] = None,
                 ):
        if grid_size <= 0:
            raise ValueError(f'invalid grid size: {grid_size}')
        self.bounds = bounds
        self.grid_size = grid_size
        self.chooser = chooser if chooser is not None else RandomChooser()
        self.cache: Optional[WinnerMapCache] = None

    def generate(self,
                 candidates: Sequence[Any],
                 distribution: spatialvote.generate.Distribution,
                 method: str,
                 params: Optional[MethodParams] = None,
                 progress: Optional[Callable[[float], None]] = None,
                 should_cancel: Optional[Callable[[], bool]] = None,
                 ) -> WinnerMapCache:
        '''Generate the territory map, or return the cached one if valid.

        :param candidates: Candidates standing in every cell election.
        :param distribution: The voter distribution to move around. Its
            offsets are sampled if missing but otherwise left untouched,
            as is its center.
        :param method: Voting method tag.
        :param params: Method parameters.
        :param progress: Called with the percentage of cells done every
            100 cells and with 100 at the end.
        :param should_cancel: Checked before every grid row; if it returns
            True, the generation stops and the cache is left unchanged.
        :raises MapGenerationCancelled: If cancelled.
        :raises ElectionError: If the method or the candidates are invalid.
        '''
        distribution_key = (distribution.spread_radius,
                            distribution.voter_count)
        if (is_cache_valid(self.cache, candidates, method, params)
                and self.cache.distribution_key == distribution_key):
            logger.info('using cached winner map')
            if progress is not None:
                progress(100)
            return self.cache
        check_candidates(candidates)
        evaluator = spatialvote.system.get_evaluator(
            method, params, self.chooser
        )
        logger.info('generating %s winner map', method)
        offsets = distribution.ensure_offsets()
        rows, cols = grid_shape(self.bounds, self.grid_size)
        ys, xs = cell_centers(self.bounds, self.grid_size)
        n_cells = rows * cols
        done = 0
        grid = []
        for y in ys:
            if should_cancel is not None and should_cancel():
                logger.info('winner map generation cancelled')
                raise MapGenerationCancelled(
                    f'cancelled after {done} of {n_cells} cells'
                )
            row = []
            for x in xs:
                voters = spatialvote.generate.materialize(
                    (x, y), offsets, self.bounds
                )
                result = evaluator.evaluate(
                    voters, candidates, skip_voter_states=True
                )
                row.append(result.winner)
                done += 1
                if progress is not None and done % PROGRESS_INTERVAL == 0:
                    progress(done / n_cells * 100)
            grid.append(row)
        self.cache = WinnerMapCache(
            grid, self.grid_size, rows, cols,
            MapSnapshot.take(candidates, method, params),
            distribution_key,
        )
        if progress is not None:
            progress(100)
        return self.cache

    def winner_at(self, x: float, y: float) -> Optional[int]:
        '''Winner at the given point of the last generated map.'''
        if self.cache is None:
            return None
        return self.cache.winner_at(x, y)

    def needs_regeneration(self,
                           candidates: Sequence[Any],
                           method: str,
                           params: Optional[MethodParams] = None,
                           ) -> bool:
        return not is_cache_valid(self.cache, candidates, method, params)

    def clear_cache(self) -> None:
        self.cache = None


def generate_winner_map(candidates: Sequence[Any],
                        distribution: spatialvote.generate.Distribution,
                        method: str,
                        params: Optional[MethodParams] = None,
                        grid_size: float = DEFAULT_GRID_SIZE,
                        progress: Optional[Callable[[float], None]] = None,
                        bounds: Bounds = DEFAULT_BOUNDS,
                        chooser: Optional[Chooser] = None,
                        ) -> WinnerMapCache:
    '''Generate a territory map without keeping a generator around.'''
    return WinnerMapGenerator(bounds, grid_size, chooser).generate(
        candidates, distribution, method, params, progress=progress
    )


def voronoi(candidates: Sequence[Any],
            bounds: Bounds = DEFAULT_BOUNDS,
            grid_size: float = DEFAULT_GRID_SIZE,
            ) -> Grid:
    """Produce a Voronoi territory map for the given candidates.

    This gives the ideal map that good voting systems should be close to:
    each cell goes to the candidate nearest to its midpoint (the first one
    listed if several are equally near).
    """
    ys, xs = cell_centers(bounds, grid_size)
    return [
        [
            spatialvote.geometry.nearest_candidate(
                spatialvote.geometry.Point(x, y), candidates
            ).id
            for x in xs
        ]
        for y in ys
    ]


def voronoi_matches(grid: Grid,
                    candidates: Sequence[Any],
                    bounds: Bounds = DEFAULT_BOUNDS,
                    grid_size: float = DEFAULT_GRID_SIZE,
                    ) -> List[List[bool]]:
    """Give a 2D boolean mask how a territory map matches a Voronoi map."""
    voronoi_grid = voronoi(candidates, bounds, grid_size)
    return [
        [cell == ideal for cell, ideal in zip(row, ideal_row)]
        for row, ideal_row in zip(grid, voronoi_grid)
    ]


def voronoi_conformity(results,
                       candidates: Sequence[Any],
                       bounds: Bounds = DEFAULT_BOUNDS,
                       grid_size: Optional[float] = None,
                       ) -> float:
    """Calculate the share of cells where a territory map matches Voronoi.

    :param results: A :class:`WinnerMapCache` or a bare grid of winners.
    :param candidates: Candidates of the map.
    :param bounds: The plane covered by the map.
    :param grid_size: Cell size of a bare grid; taken from the cache if
        a cache is given.
    """
    if isinstance(results, WinnerMapCache):
        grid = results.grid
        grid_size = results.grid_size
    else:
        grid = results
        if grid_size is None:
            grid_size = DEFAULT_GRID_SIZE
    matches = voronoi_matches(grid, candidates, bounds, grid_size)
    n_cells = sum(len(row) for row in matches)
    if not n_cells:
        return 0.0
    return sum(m for row in matches for m in row) / n_cells


def plot(results: WinnerMapCache,
         candidates: Sequence[Any],
         bounds: Bounds = DEFAULT_BOUNDS,
         ax=None) -> None:
    """Plot the territory map.

    Requires Matplotlib. Plots the map cells in the candidate colours and
    the candidate positions on the current/chosen axes and adds a legend.
    You normally need to follow up on this with the ``show()`` call to show
    the figure. The vertical axis points down as in the plane coordinates.

    :param results: The territory map to plot.
    :param candidates: Candidates of the map.
    :param bounds: The plane covered by the map.
    :param ax: Axes to plot on.
    """
    if plt is None:
        raise ImportError('spatialvote.crit.yee.plot requires matplotlib')
    if ax is None:
        ax = plt.gca()
    cand_ids = [cand.id for cand in candidates]
    cmap = matplotlib.colors.ListedColormap(
        [cand.color for cand in candidates]
    )
    norm = matplotlib.colors.Normalize(vmin=0, vmax=max(len(cand_ids) - 1, 1))
    # Convert winner ids to candidate indices, masking cells without a winner.
    results_int = [
        [math.nan if cand is None else cand_ids.index(cand) for cand in row]
        for row in results.grid
    ]
    ax.imshow(
        results_int,
        cmap=cmap,
        extent=(0, results.cols * results.grid_size,
                results.rows * results.grid_size, 0),
        interpolation='none',
        resample=False,
        norm=norm,
        alpha=.5,
        origin='upper',
    )
    ax.scatter(
        [cand.x for cand in candidates],
        [cand.y for cand in candidates],
        c=range(len(cand_ids)),
        cmap=cmap,
        norm=norm,
        edgecolors='black',
    )
    ax.set_xlim(0, bounds.width)
    ax.set_ylim(bounds.height, 0)
    legend_handles = [
        matplotlib.patches.Patch(color=cand.color, label=cand.name)
        for cand in candidates
    ]
    ax.legend(handles=legend_handles)
