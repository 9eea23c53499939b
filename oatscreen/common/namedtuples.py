""" Named tuples used throughout the package to make code clearer. """

from typing import NamedTuple

import numpy as np

__all__ = ("Bound",
           "ScreeningResult")


class Bound(NamedTuple):
    """ Class of factor bounds. """
    min: float
    """ float: Lower factor bound. """
    max: float
    """ float: Upper factor bound. """


class ScreeningResult(NamedTuple):
    """ Final result delivered by :class:`.MorrisScreening`. """
    design: np.ndarray
    """ numpy.ndarray: :math:`N(d+1) \\times d` design on which the task was evaluated. """
    outputs: np.ndarray
    """ numpy.ndarray: Task evaluations, row-aligned with `design`. """
    mean: np.ndarray
    """ numpy.ndarray: Mean elementary effect of each factor. """
    std: np.ndarray
    """ numpy.ndarray: Sample standard deviation of the elementary effects of each factor. """
