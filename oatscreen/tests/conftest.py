import os
import tempfile
from pathlib import Path

import numpy as np
import pytest

from oatscreen.generators import MorrisGenerator


def linear_model(x):
    return 2 * x[0] + 3 * x[1]


@pytest.fixture(scope='function')
def work_in_tmp():
    """ Some test require moving into a temporary directory. This creates and moves to a temporary path and returns
        at the end of the test.
    """
    home_dir = Path.cwd()

    with tempfile.TemporaryDirectory() as tmp_dir:
        os.chdir(tmp_dir)
        yield tmp_dir

    os.chdir(home_dir)


@pytest.fixture(scope='function')
def linear():
    return linear_model


@pytest.fixture(scope='function')
def grid_generator():
    return MorrisGenerator(10, levels=[4, 4], bounds=[(0, 1), (-5, 5)], rng=1)


@pytest.fixture(scope='function')
def grid_design(grid_generator):
    design = grid_generator.generate()
    outputs = np.array([linear_model(x) for x in design])
    return design, outputs
