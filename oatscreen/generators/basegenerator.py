import logging
from abc import ABC, abstractmethod

import numpy as np

__all__ = ("BaseGenerator",)


class BaseGenerator(ABC):
    """ Base generator from which all design generators must inherit.
    A generator owns its own random stream so that its designs do not depend on draws made elsewhere in the process.

    Parameters
    ----------
    rng
        Seed for, or an existing instance of, :class:`numpy.random.Generator`. If :obj:`None` fresh entropy is pulled
        from the OS.
    """

    def __init__(self, rng=None):
        self.logger = logging.getLogger('oatscreen.generator')
        self.rng: np.random.Generator = np.random.default_rng(rng)

    @property
    @abstractmethod
    def dims(self) -> int:
        """ Number of factors in every point returned by :meth:`generate`. """

    @abstractmethod
    def generate(self) -> np.ndarray:
        """ Returns a two-dimensional array of points, one per row, in the domain of the generator.
        Successive calls consume new draws from :attr:`rng` and are independent of one another.
        """
