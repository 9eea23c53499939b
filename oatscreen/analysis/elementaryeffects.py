import inspect
import logging
import warnings
from functools import wraps
from pathlib import Path
from typing import Callable, Optional, Union

import dask
import dask.array as da
import numpy as np
import psutil

from ..common.helpers import DimensionMismatchError, InvalidArgumentError

# Dask settings
dask.config.set(**{'array.slicing.split_large_chunks': False})

__all__ = ('MorrisEffects',)


def pass_or_compute(func) -> Callable[..., Union[da.Array, np.ndarray]]:
    """ Wraps most methods in MorrisEffects.
    Allows dask.arrays to be used internally amongst class methods but always return a numpy array to end users.
    """

    @wraps(func)
    def wrapper(*args, **kwargs) -> Union[da.Array, np.ndarray]:
        filename = inspect.stack()[1][1]
        call = func(*args, **kwargs)

        if filename == __file__:
            return call
        return call.compute()

    return wrapper


class MorrisEffects:
    """ Elementary effects statistics of a Morris one-at-a-time design.
    Consumes the points of :math:`r` trajectories (for example those produced by :class:`.MorrisGenerator`) and the
    model responses at those points. For trajectory :math:`j` and the step :math:`i` in which factor :math:`p` moved,
    the elementary effect is:

    .. math::

       EE_{j,p} = \\frac{y_{j,i+1} - y_{j,i}}{x_{j,i+1,p} - x_{j,i,p}}

    The denominator is the signed step in the original units of the factor. Thus :math:`EE_{j,p}` is the rate of
    change of the output per unit *increase* of factor :math:`p`, irrespective of the direction in which the trajectory
    moved. The statistics reported are the mean, :math:`\\mu`, and the sample standard deviation, :math:`\\sigma`, of
    the elementary effects of each factor over all trajectories.

    Parameters
    ----------
    input_sample
        :math:`r(k+1) \\times k` array of trajectory points, ordered trajectory by trajectory. Within each trajectory
        every pair of adjacent points must differ in exactly one factor and every factor must move exactly once.
    output_sample
        :math:`r(k+1)` or :math:`r(k+1) \\times h` array of model responses. Row :math:`i` must be the response at row
        :math:`i` of `input_sample`.

    Raises
    ------
    DimensionMismatchError
        If the samples are not two-dimensional, their number of rows differ, or the number of rows is not a multiple of
        :math:`k+1`.
    InvalidArgumentError
        If `input_sample` is not a one-at-a-time design.

    References
    ----------
    Morris, M. D. (1991). Factorial Sampling Plans for Preliminary Computational Experiments. *Technometrics*, 33(2),
    161–174. https://doi.org/10.1080/00401706.1991.10484804

    Saltelli, A., Ratto, M., Andres, T., Campolongo, F., Cariboni, J., Gatelli, D., Saisana, M., & Tarantola, S. (2007).
    Global Sensitivity Analysis. The Primer. *John Wiley & Sons, Ltd.* https://doi.org/10.1002/9780470725184

    Attributes
    ----------
    dims : int
        Number of input factors, :math:`k`.
    out_dims : int
        Number of model responses, :math:`h`.
    trajectories : dask.array.Array
        :math:`r \\times (k+1) \\times k` view of `input_sample`.
    outputs : dask.array.Array
        :math:`r \\times (k+1) \\times h` view of `output_sample`.
    """

    @classmethod
    def load(cls, path: Union[Path, str]) -> 'MorrisEffects':
        """ Constructs a new instance from the design and outputs saved in the HDF5 file at `path`.

        See Also
        --------
        :func:`.save_samples`
        """
        from ..core.storage import load_samples

        design, outputs, _ = load_samples(path)
        return cls(design, outputs)

    @property
    def r(self) -> int:
        """ The number of trajectories in the set. """
        return self.trajectories.shape[0]

    @property
    def k(self) -> int:
        """ Pseudonym for :attr:`dims` """
        return self.dims

    @property
    def h(self) -> int:
        """ Pseudonym for :attr:`out_dims` """
        return self.out_dims

    def __init__(self, input_sample: np.ndarray, output_sample: np.ndarray):
        self.logger = logging.getLogger('oatscreen.effects')

        x = np.array(input_sample, dtype=float)
        y = np.array(output_sample, dtype=float)

        if x.ndim != 2:
            raise DimensionMismatchError(f"Cannot parse input sample with shape {x.shape}, (n, k) expected.")
        if y.ndim not in (1, 2):
            raise DimensionMismatchError(f"Cannot parse output sample with shape {y.shape}, (n,) or (n, h) expected.")
        if x.shape[0] != y.shape[0]:
            raise DimensionMismatchError(f"Input sample has {x.shape[0]} rows but output sample has {y.shape[0]}.")

        k = x.shape[1]
        if k == 0:
            raise DimensionMismatchError("Input sample has no factor columns.")
        if x.shape[0] == 0 or x.shape[0] % (k + 1) != 0:
            raise DimensionMismatchError(f"Cannot split {x.shape[0]} rows into trajectories of {k + 1} points each.")

        if y.ndim == 1:
            y = y[:, None]
        if y.shape[1] == 0:
            raise DimensionMismatchError("Output sample has no columns.")

        self.dims: int = k
        self.out_dims: int = y.shape[1]

        x = x.reshape((-1, k + 1, k))
        y = y.reshape((-1, k + 1, self.out_dims))
        self._check_one_at_a_time(x)

        if not np.isfinite(y).all():
            self.logger.warning("Output sample contains non-finite values, the elementary effects of the affected "
                                "trajectories will not be finite.")

        self.trajectories = da.from_array(x)
        self.outputs = da.from_array(y)
        self._ee: Optional[np.ndarray] = None

        self.logger.debug("MorrisEffects built from %d trajectories of %d factors and %d outputs.",
                          self.r, self.k, self.h)

    @pass_or_compute
    def elementary_effects(self, out_index: int = 0) -> da.Array:
        """ Returns the raw elementary effects for output `out_index`.

        Returns
        -------
        numpy.ndarray
            :math:`r \\times k` array of elementary effects from which the statistics are calculated.
        """
        return self._calculate_ee()[:, :, self._parse_out_index(out_index)]

    @pass_or_compute
    def mean_effects(self, out_index: int = 0) -> da.Array:
        """ Returns :math:`\\mu`, the mean elementary effect of each factor on output `out_index`.

        Returns
        -------
        numpy.ndarray
            Array of length :math:`k`.
        """
        return da.mean(self.elementary_effects(out_index), axis=0)

    @pass_or_compute
    def standard_deviation_effects(self, out_index: int = 0) -> da.Array:
        """ Returns :math:`\\sigma`, the sample standard deviation (:math:`r-1` denominator) of the elementary effects of
        each factor on output `out_index`.

        Returns
        -------
        numpy.ndarray
            Array of length :math:`k`. Filled with NaN if there is only one trajectory.
        """
        ee = self.elementary_effects(out_index)
        if self.r > 1:
            return da.std(ee, axis=0, ddof=1)

        warnings.warn("Standard deviation of the elementary effects is undefined with a single trajectory.",
                      RuntimeWarning)
        return da.full(self.k, np.nan)

    @pass_or_compute
    def getMeanEffects(self, out_index: int = 0) -> da.Array:
        """ Pseudonym for :meth:`mean_effects` """
        return self.mean_effects(out_index)

    @pass_or_compute
    def getStandardDeviationEffects(self, out_index: int = 0) -> da.Array:
        """ Pseudonym for :meth:`standard_deviation_effects` """
        return self.standard_deviation_effects(out_index)

    def _calculate_ee(self) -> da.Array:
        """ Returns the :math:`r \\times k \\times h` array of elementary effects.
        The result is held in memory after the first full calculation. The samples cannot change after construction so
        it never needs to be invalidated.
        """
        if self._ee is not None:
            return da.from_array(self._ee)

        x_diffs = da.diff(self.trajectories, axis=1)  # r x k steps x k factors
        y_diffs = da.diff(self.outputs, axis=1)  # r x k steps x h

        # Exactly one non-zero entry per step
        steps = da.sum(x_diffs, axis=2)
        moved = x_diffs != 0

        slopes = y_diffs / steps[:, :, None]
        ee = da.sum(da.where(moved[:, :, :, None], slopes[:, :, None, :], 0), axis=1)

        if ee.nbytes < 0.3 * psutil.virtual_memory().available:
            self._ee = ee.compute()
            self.logger.debug("Elementary effects cached.")
            return da.from_array(self._ee)

        return ee

    def _parse_out_index(self, out_index: int) -> int:
        if not isinstance(out_index, (int, np.integer)) or not -self.h <= out_index < self.h:
            raise InvalidArgumentError(f"Cannot parse out_index = {out_index}, integer in [0, {self.h}) expected.")
        return int(out_index)

    @staticmethod
    def _check_one_at_a_time(trajectories: np.ndarray):
        """ Raises an error if any trajectory does not move exactly one factor per step and each factor once. """
        moved = np.diff(trajectories, axis=1) != 0

        n_per_step = moved.sum(2)
        if np.any(n_per_step != 1):
            traj, step = np.argwhere(n_per_step != 1)[0]
            raise InvalidArgumentError(f"Trajectory {traj} moves {n_per_step[traj, step]} factors between points "
                                       f"{step} and {step + 1}, exactly one expected.")

        n_per_factor = moved.sum(1)
        if np.any(n_per_factor != 1):
            traj, factor = np.argwhere(n_per_factor != 1)[0]
            raise InvalidArgumentError(f"Factor {factor} moves {n_per_factor[traj, factor]} times in trajectory "
                                       f"{traj}, exactly once expected.")
