from typing import Optional, Sequence, Tuple

import numpy as np

from .basegenerator import BaseGenerator
from ..common.helpers import DimensionMismatchError, DomainError, InvalidArgumentError, is_bounds_valid, unit_bounds
from ..common.namedtuples import Bound

__all__ = ("MorrisGenerator",)


class MorrisGenerator(BaseGenerator):
    """ Produces Morris one-at-a-time trajectory designs.
    Each trajectory is a sequence of :math:`d+1` points starting at a random base point :math:`\\mathbf{x}^*`. Every
    subsequent point differs from its predecessor in exactly one factor, moved by one step :math:`\\Delta_p` up or down.
    The order in which factors are moved and the direction of each move are drawn at random for every trajectory. In
    matrix form, following `Morris (1991) <https://doi.org/10.1080/00401706.1991.10484804>`_:

    .. math::

       \\mathbf{B}^* = \\left(\\mathbf{J}\\mathbf{x}^* + \\frac{1}{2}\\left[(2\\mathbf{B} - \\mathbf{J})
                       \\mathbf{D}^* + \\mathbf{J}\\right]\\mathbf{\\Delta}\\right)\\mathbf{P}^*

    Here :math:`\\mathbf{B}` is the strictly lower triangular matrix of ones, :math:`\\mathbf{J}` a matrix of ones,
    :math:`\\mathbf{D}^*` a random diagonal matrix of :math:`\\pm 1` and :math:`\\mathbf{P}^*` a random permutation
    matrix. None of these matrices is built; each entry of :math:`\\mathbf{B}^*` is computed directly from the rank
    of its factor in the permutation.

    Base points are either drawn from a regular grid of `levels` or picked from a user supplied `base_sample`. The
    latter is usually a space-filling design such as a Latin Hypercube (see :class:`.LatinHypercubeGenerator`).

    Parameters
    ----------
    n_trajectories
        Number of trajectories, :math:`N`, in each design returned by :meth:`generate`.
    levels
        Number of grid levels for each factor, every entry must be at least 2. The step for factor :math:`p` is
        :math:`1 / (\\text{levels}_p - 1)` of its range. Mutually exclusive with `base_sample`.
    bounds
        Optional sequence of (min, max) pairs for each factor. Defaults to the unit hypercube.
    base_sample
        Optional :math:`n \\times d` sample from which base points are drawn with replacement. If `bounds` are given
        the sample must lie within them, otherwise it must lie in :math:`[0, 1]^d`. The step for every factor is
        :math:`0.5 / n` of its range. Mutually exclusive with `levels`.
    Inherited, rng
        See :class:`.BaseGenerator`.

    Raises
    ------
    InvalidArgumentError
        If a level is smaller than 2, the bounds are invalid, `n_trajectories` is not positive, or not exactly one of
        `levels` and `base_sample` is provided.
    DimensionMismatchError
        If the number of `levels` or columns of `base_sample` does not match the number of `bounds`.
    DomainError
        If `base_sample` has points outside the unit hypercube (or outside `bounds` if these are given).

    Notes
    -----
    When a point of `base_sample` lies within one step of the upper bound of a factor, it is moved down to
    :math:`1 - \\Delta_p` along that factor so that the whole trajectory stays inside the bounds. Grid base points
    never need this since they are only drawn from the lowest :math:`\\text{levels}_p - 1` levels.

    Examples
    --------
    >>> gen = MorrisGenerator(10, levels=[4, 4, 6], bounds=[(0, 1), (-5, 5), (100, 200)], rng=42)
    >>> design = gen.generate()
    >>> design.shape
    (40, 3)
    """

    def __init__(self,
                 n_trajectories: int,
                 levels: Optional[Sequence[int]] = None,
                 bounds: Optional[Sequence[Tuple[float, float]]] = None,
                 base_sample: Optional[np.ndarray] = None,
                 rng=None):
        super().__init__(rng)

        if (levels is None) == (base_sample is None):
            raise InvalidArgumentError("Exactly one of levels or base_sample must be provided.")

        if int(n_trajectories) != n_trajectories or n_trajectories < 1:
            raise InvalidArgumentError(f"Cannot parse n_trajectories = {n_trajectories}. Only positive integers are "
                                       f"allowed.")
        self.n_trajectories = int(n_trajectories)

        if levels is not None:
            self._levels = self._parse_levels(levels)
            self._base_sample = None
            dims = self._levels.size
        else:
            base_sample = np.atleast_2d(np.array(base_sample, dtype=float))
            if base_sample.ndim != 2 or base_sample.size == 0:
                raise InvalidArgumentError(f"Cannot parse base_sample with shape {base_sample.shape}, a non-empty "
                                           f"(n, d) array is expected.")
            self._levels = None
            dims = base_sample.shape[1]

        if bounds is not None:
            if len(bounds) != dims:
                raise DimensionMismatchError(f"{len(bounds)} bounds given for {dims} factors.")
            is_bounds_valid(bounds, raise_invalid=True)
            self._bounds = np.array(bounds, dtype=float)
        else:
            self._bounds = unit_bounds(dims)

        if base_sample is not None:
            self._base_sample = self._rescale_base_sample(base_sample, bounds is not None)
            self._steps = np.full(dims, 0.5 / base_sample.shape[0])
            self.logger.debug("MorrisGenerator using a base sample of %d points in %d dimensions.",
                              base_sample.shape[0], dims)
        else:
            self._steps = 1 / (self._levels - 1)
            self.logger.debug("MorrisGenerator using a %s level grid.", self._levels.tolist())

    @property
    def dims(self) -> int:
        return self._bounds.shape[0]

    @property
    def n_points(self) -> int:
        """ Number of rows in each design, :math:`N(d+1)`. """
        return self.n_trajectories * (self.dims + 1)

    @property
    def levels(self) -> Optional[np.ndarray]:
        """ Grid levels of each factor. :obj:`None` if base points are drawn from a base sample. """
        return None if self._levels is None else self._levels.copy()

    @property
    def steps(self) -> np.ndarray:
        """ Step of each factor as a fraction of its range. """
        return self._steps.copy()

    @property
    def bounds(self) -> Sequence[Bound]:
        """ Min and max bounds of each factor. """
        return [Bound(*bnd) for bnd in self._bounds.tolist()]

    @property
    def base_sample(self) -> Optional[np.ndarray]:
        """ The base sample rescaled to the unit hypercube. :obj:`None` if base points are drawn from the grid. """
        return None if self._base_sample is None else self._base_sample.copy()

    def generate(self) -> np.ndarray:
        """ Returns a new design of :attr:`n_trajectories` trajectories.

        Returns
        -------
        numpy.ndarray
            :math:`N(d+1) \\times d` array. Rows :math:`k(d+1)` to :math:`k(d+1)+d` (inclusive) hold trajectory
            :math:`k`.
        """
        d = self.dims
        lower = self._bounds[:, 0]
        delta = self._bounds[:, 1] - lower
        rows = np.arange(d + 1)[:, None]

        design = np.empty((self.n_points, d))
        for k in range(self.n_trajectories):
            x_base = self._draw_base_point()
            permutation = self.rng.permutation(d)
            directions = self.rng.choice([1., -1.], d)

            # Factor permutation[r] moves between rows r and r+1
            rank = np.argsort(permutation)
            orientation = np.where(rows <= rank, -1., 1.)

            traj = delta * ((orientation * directions + 1) * 0.5 * self._steps + x_base) + lower
            design[k * (d + 1):(k + 1) * (d + 1)] = traj

        self.logger.debug("Generated %d trajectories (%d points).", self.n_trajectories, self.n_points)
        return design

    def _draw_base_point(self) -> np.ndarray:
        """ Draws the starting point of a trajectory in the unit hypercube. """
        if self._base_sample is not None:
            x_base = self._base_sample[self.rng.integers(self._base_sample.shape[0])]
            return np.minimum(x_base, 1 - self._steps)

        return self._steps * self.rng.integers(0, self._levels - 1)

    @staticmethod
    def _parse_levels(levels: Sequence[int]) -> np.ndarray:
        levels = np.atleast_1d(np.array(levels))
        if levels.ndim != 1 or levels.size == 0:
            raise InvalidArgumentError(f"Cannot parse levels = {levels}, a non-empty sequence of integers is "
                                       f"expected.")

        if not np.all(np.mod(levels, 1) == 0):
            raise InvalidArgumentError(f"Cannot parse levels = {levels.tolist()}, only integers are allowed.")
        levels = levels.astype(int)

        for i, level in enumerate(levels):
            if level <= 1:
                raise InvalidArgumentError(f"Levels should be at least 2; levels[{i}] = {level}.")

        return levels

    def _rescale_base_sample(self, base_sample: np.ndarray, has_bounds: bool) -> np.ndarray:
        """ Returns `base_sample` mapped to the unit hypercube, checking that all of it is in the domain. """
        lower = self._bounds[:, 0]
        delta = self._bounds[:, 1] - lower

        unit = (base_sample - lower) / delta

        x_min = unit.min(0)
        x_max = unit.max(0)
        for p, (lo, hi) in enumerate(zip(x_min, x_max)):
            if lo < 0 or hi > 1:
                where = f"within the bounds {tuple(self._bounds[p])}" if has_bounds else "in [0, 1]^d"
                raise DomainError(f"Given base sample is not {where}. Rescaled min[{p}] = {lo}, max[{p}] = {hi}.")

        return unit
