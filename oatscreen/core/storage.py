""" HDF5 persistence of Morris designs and the model outputs evaluated on them. """
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import numpy as np
import tables as tb

from ..common.helpers import DimensionMismatchError

__all__ = ("save_samples",
           "load_samples")


def save_samples(path: Union[Path, str], input_sample: np.ndarray, output_sample: np.ndarray, **attrs):
    """ Writes a design and its outputs to a new HDF5 file at `path`.
    The design is saved to the :code:`/design` node and the outputs to :code:`/outputs`. Any `attrs` are saved as
    attributes of the root node and must be types which PyTables can store (numbers, strings, numpy arrays).

    Raises
    ------
    DimensionMismatchError
        If the samples do not have the same number of rows.
    """
    input_sample = np.asarray(input_sample, dtype=float)
    output_sample = np.asarray(output_sample, dtype=float)
    if input_sample.shape[0] != output_sample.shape[0]:
        raise DimensionMismatchError(f"Input sample has {input_sample.shape[0]} rows but output sample has "
                                     f"{output_sample.shape[0]}.")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tb.open_file(str(path), 'w', title="Morris Screening Samples") as file:
        file.create_array(where='/', name='design', obj=input_sample, title="Trajectory Design")
        file.create_array(where='/', name='outputs', obj=output_sample, title="Model Outputs")
        for key, val in attrs.items():
            file.root._v_attrs[key] = val


def load_samples(path: Union[Path, str]) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
    """ Reads a file written by :func:`save_samples`.

    Returns
    -------
    Tuple[numpy.ndarray, numpy.ndarray, Dict[str, Any]]
        The design, the outputs and the root attributes of the file.
    """
    with tb.open_file(str(path), 'r') as file:
        design = file.root.design.read()
        outputs = file.root.outputs.read()
        attrs = {key: file.root._v_attrs[key] for key in file.root._v_attrs._f_list('user')}

    return design, outputs, attrs
