import numpy as np

from .basegenerator import BaseGenerator
from ..common.helpers import InvalidArgumentError

__all__ = ("LatinHypercubeGenerator",)


class LatinHypercubeGenerator(BaseGenerator):
    """ Generates Latin Hypercube samples in the unit hypercube.
    Each axis of :math:`[0, 1]^d` is split into `size` equal strata and every stratum of every axis holds exactly one
    point. The result is a suitable `base_sample` for :class:`.MorrisGenerator`.

    Parameters
    ----------
    size
        Number of points in the sample.
    dims
        Number of factors.
    Inherited, rng
        See :class:`.BaseGenerator`.
    """

    def __init__(self, size: int, dims: int, rng=None):
        super().__init__(rng)
        if size < 1 or dims < 1:
            raise InvalidArgumentError(f"Cannot build a Latin Hypercube with size={size} and dims={dims}, both must "
                                       f"be positive.")
        self.size = int(size)
        self._dims = int(dims)

    @property
    def dims(self) -> int:
        return self._dims

    def generate(self) -> np.ndarray:
        lhs = np.tile(np.arange(self.size, dtype=float), (self.dims, 1))
        lhs = self.rng.permuted(lhs, axis=1)
        lhs += self.rng.random(lhs.shape)
        lhs /= self.size

        self.logger.debug("Latin Hypercube of %d points in %d dimensions generated.", self.size, self.dims)
        return lhs.T
