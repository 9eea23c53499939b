""" Useful static functions and classes used throughout the oatscreen package. """
from typing import Sequence, Tuple

import numpy as np
import yaml

__all__ = ("is_bounds_valid",
           "unit_bounds",
           "FlowList",
           "BoundGroup",
           "flow_presenter",
           "numpy_dtype_presenter",
           "numpy_array_presenter",
           "bound_group_presenter",
           "register_presenters",
           "InvalidArgumentError",
           "DimensionMismatchError",
           "DomainError",
           )

""" Sundry Code Stubs """


def is_bounds_valid(bounds: Sequence[Tuple[float, float]], raise_invalid=True) -> bool:
    """ Checks if provided factor bounds are valid.
    'Valid' is defined as meaning that every lower bound is less than the upper bound and every bound is finite.

    Parameters
    ----------
    bounds
        Sequence of min/max pairs indicating the interval over which each factor is screened.
    raise_invalid
        If :obj:`True` raises an error if the bounds are invalid otherwise a bool is returned.

    Returns
    -------
    bool
        :obj:`True` if the bounds are all valid, :obj:`False` otherwise.

    Raises
    ------
    InvalidArgumentError
        If `raise_invalid` is :obj:`True` and bounds are invalid.

    Examples
    --------
    >>> is_bounds_valid([(0, 1), (-1, 0)])
    True

    >>> is_bounds_valid([(0, 0), (0, float('inf'))], False)
    False
    """

    for i, bnd in enumerate(bounds):
        if len(bnd) != 2:
            if raise_invalid:
                raise InvalidArgumentError(f"Cannot parse bound {bnd} at index {i}, (min, max) pair expected.")
            return False

        if not np.all(np.isfinite(bnd)):
            if raise_invalid:
                raise InvalidArgumentError(f"Non-finite bound found at index {i}: {tuple(bnd)}.")
            return False

        if bnd[0] >= bnd[1]:
            if raise_invalid:
                raise InvalidArgumentError(f"Invalid bound encountered at index {i}: {tuple(bnd)}. Min and max bounds "
                                           f"may not be equal nor may they be in the opposite order.")
            return False

    return True


def unit_bounds(dims: int) -> np.ndarray:
    """ Returns the :math:`d \\times 2` array of bounds describing the unit hypercube :math:`[0, 1]^d`.

    Examples
    --------
    >>> unit_bounds(2)
    array([[0., 1.],
           [0., 1.]])
    """
    return np.tile([0., 1.], (dims, 1))


class FlowList(list):
    """ Used to wrap lists which should appear in YAML flow style rather than default block style. """


class BoundGroup(list):
    """ Used to better represent the factor bounds in a human readable but reusable way in YAML. """


def flow_presenter(dumper, lst):
    """ YAML Presenter for a FlowList style list. """
    return dumper.represent_sequence('tag:yaml.org,2002:seq', lst, flow_style=True)


def numpy_dtype_presenter(dumper, numpy_type):
    """ Unique YAML constructor for :class:`numpy.dtype`. """
    value = numpy_type.item()
    try:
        return getattr(dumper, f'represent_{type(value).__name__}')(value)
    except AttributeError:
        return dumper.represent_scalar('tag:yaml.org,2002:str', str(value))


def numpy_array_presenter(dumper, numpy_arr):
    """ Unique YAML constructor for :class:`numpy.ndarray`. """
    value = numpy_arr.tolist()
    try:
        return dumper.represent_sequence('tag:yaml.org,2002:seq', value, flow_style=True)
    except TypeError:
        return dumper.represent_scalar('tag:yaml.org,2002:str', str(value))


def bound_group_presenter(dumper, bound_group):
    """ Unique YAML constructor for :class:`.Bound`. Factors sharing the same bounds are listed together. """
    grouped = {}
    for i, bound in enumerate(bound_group):
        grouped.setdefault(f"({bound.min}, {bound.max})", FlowList()).append(i)

    return dumper.represent_mapping('tag:yaml.org,2002:map', grouped)


def register_presenters(dumper: yaml.Dumper):
    """ Adds the numpy and bounds presenters above to `dumper` so that screening summaries are human readable. """
    yaml.add_representer(FlowList, flow_presenter, Dumper=dumper)
    yaml.add_representer(np.ndarray, numpy_array_presenter, Dumper=dumper)
    yaml.add_representer(BoundGroup, bound_group_presenter, Dumper=dumper)
    yaml.add_multi_representer(np.generic, numpy_dtype_presenter, Dumper=dumper)


""" Custom Errors """


class InvalidArgumentError(ValueError):
    """ Raised when an argument can never produce a valid design, for example a discretization level below two. """


class DimensionMismatchError(ValueError):
    """ Raised when the dimensions of two related objects (levels and bounds, inputs and outputs) disagree. """


class DomainError(ValueError):
    """ Raised when a point lies outside the domain it is meant to be sampled from. """
