""" Contains oatscreen's main user interface class. """

import inspect
import logging
import sys
import warnings
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np
import yaml
from tqdm import tqdm

try:
    from yaml import CDumper as Dumper
except ImportError:
    from yaml import Dumper

from .storage import save_samples
from .._version import __version__
from ..analysis import MorrisEffects
from ..common.helpers import BoundGroup, FlowList, InvalidArgumentError, register_presenters
from ..common.namedtuples import Bound, ScreeningResult
from ..generators import LatinHypercubeGenerator, MorrisGenerator

__all__ = ("MorrisScreening",)


class MorrisScreening:
    """ Runs a complete Morris screening of a task.
    Builds a :class:`.MorrisGenerator` from the settings given to :meth:`setup` (or read from a YAML file by
    :meth:`from_yaml`), evaluates the task serially at every point of the design, and reduces the results with
    :class:`.MorrisEffects`.

    Attributes
    ----------
    effects : MorrisEffects
        Analysis of the most recent :meth:`run`. :obj:`None` before the first run.
    generator : MorrisGenerator
        Source of the trajectory designs.
    log_file : Optional[str]
        Name of the HDF5 file, within :attr:`working_dir`, into which the design and outputs are saved after a run.
        Nothing is saved if :obj:`None`.
    logger : logging.Logger
        Logs to :code:`'oatscreen.screening'`.
    result : ScreeningResult
        Result of the most recent :meth:`run`.
    seed : Optional[int]
        Seed of the random stream used by :attr:`generator`.
    summary_file : Optional[str]
        Name of the YAML file, within :attr:`working_dir`, into which the settings and statistics are written after a
        run. Nothing is written if :obj:`None`.
    working_dir : pathlib.Path
        Directory in which all output files are created. The current working directory is never changed.
    """

    @property
    def is_initialised(self) -> bool:
        """ Returns :obj:`True` if :meth:`setup` has been called successfully. """
        return self.generator is not None

    @classmethod
    def new_screening(cls, *args, **kwargs) -> 'MorrisScreening':
        """ Class method wrapper around :meth:`setup` to directly initialise a new screening instance. """
        screening = cls()
        screening.setup(*args, **kwargs)
        return screening

    @classmethod
    def from_yaml(cls, path: Union[Path, str]) -> 'MorrisScreening':
        """ Initialises a new screening instance from the settings in a YAML file.
        Keys match the arguments of :meth:`setup`. Unknown keys are ignored with a warning. For example:

        .. code-block:: yaml

           n_trajectories: 20
           levels: [4, 4, 4]
           bounds:
             - [0, 1]
             - [-5, 5]
             - [100, 200]
           seed: 1
           working_dir: screening_out
           log_file: samples.h5

        Raises
        ------
        InvalidArgumentError
            If the file does not contain a mapping of settings.
        """
        logger = logging.getLogger('oatscreen.screening')
        logger.info("Loading settings from %s", path)

        with Path(path).open('r') as file:
            settings = yaml.safe_load(file)

        if not isinstance(settings, dict):
            raise InvalidArgumentError(f"Cannot parse settings in {path}, a mapping of keywords is expected.")

        allowed = inspect.signature(cls.setup).parameters
        for key in [*settings]:
            if key not in allowed or key == 'self':
                warnings.warn(f"Cannot parse keyword argument '{key}'. Ignoring.", UserWarning)
                logger.warning("Cannot parse keyword argument '%s'. Ignoring.", key)
                del settings[key]

        return cls.new_screening(**settings)

    def __init__(self):
        self.logger = logging.getLogger('oatscreen.screening')
        register_presenters(Dumper)

        self.generator: MorrisGenerator = None
        self.seed: Optional[int] = None
        self.working_dir: Path = None
        self.summary_file: Optional[str] = None
        self.log_file: Optional[str] = None

        self.effects: Optional[MorrisEffects] = None
        self.result = ScreeningResult(None, None, None, None)
        self.dt_start: Optional[datetime] = None
        self.dt_end: Optional[datetime] = None

    def setup(self,
              n_trajectories: int,
              levels: Optional[Sequence[int]] = None,
              bounds: Optional[Sequence[Tuple[float, float]]] = None,
              base_sample: Union[None, int, Sequence[Sequence[float]], np.ndarray] = None,
              seed: Optional[int] = None,
              working_dir: Union[Path, str] = ".",
              summary_file: Optional[str] = "oatscreen_summary.yml",
              log_file: Optional[str] = None):
        """ Generates the trajectory design infrastructure.

        Parameters
        ----------
        n_trajectories
            Number of trajectories in the design.
        levels
            Grid levels per factor. See :class:`.MorrisGenerator`.
        bounds
            Optional sequence of (min, max) pairs per factor. Defaults to the unit hypercube.
        base_sample
            Sample from which base points are drawn (see :class:`.MorrisGenerator`). If an integer is given, a Latin
            Hypercube of that size is drawn over `bounds` (which are then required) with the same `seed`.
        seed
            Seed of the random stream. Two screenings with the same settings and seed evaluate identical designs.
        working_dir
            Directory in which the summary and log files are written. Created if it does not exist.
        summary_file
            Name of the YAML summary file written after each run. :obj:`None` to disable.
        log_file
            Name of the HDF5 file in which the design and outputs are saved after each run. :obj:`None` to disable.
        """
        if self.is_initialised:
            warnings.warn("Screening already initialised, cannot reinitialise. Aborting", UserWarning)
            self.logger.warning("Screening already initialised, cannot reinitialise. Aborting")
            return

        self.logger.info("Initializing Screening ... ")

        if not isinstance(working_dir, (Path, str)):
            warnings.warn(f"Cannot parse working_dir = {working_dir}. str or Path expected. Using current "
                          f"work directory.", UserWarning)
            working_dir = "."
        self.working_dir = Path(working_dir).resolve()
        self.summary_file = summary_file
        self.log_file = log_file
        self.seed = seed

        rng = np.random.default_rng(seed)
        if isinstance(base_sample, (int, np.integer)) and not isinstance(base_sample, bool):
            if bounds is None:
                raise InvalidArgumentError("bounds are required to draw a Latin Hypercube base sample.")
            bnds = np.array(bounds, dtype=float)
            lhs = LatinHypercubeGenerator(base_sample, len(bnds), rng).generate()
            base_sample = bnds[:, 0] + lhs * (bnds[:, 1] - bnds[:, 0])
            self.logger.info("Latin Hypercube base sample of %d points drawn.", len(lhs))

        self.generator = MorrisGenerator(n_trajectories, levels=levels, bounds=bounds, base_sample=base_sample,
                                         rng=rng)
        self.logger.info("Initialization Done")

    def run(self, task: Callable[[np.ndarray], Union[float, Sequence[float]]], verbose: bool = False) \
            -> ScreeningResult:
        """ Generates a new design, evaluates `task` at each of its points and analyzes the results.

        Parameters
        ----------
        task
            Function which accepts a :math:`k` length :class:`numpy.ndarray` and returns a float or a fixed length
            sequence of floats. Evaluated serially in the row order of the design.
        verbose
            If :obj:`True` a progress bar of the evaluations is printed to :obj:`sys.stdout`.

        Returns
        -------
        ScreeningResult
            The design, outputs and statistics. For a scalar task the statistics are :math:`k` length vectors,
            otherwise they are :math:`h \\times k` arrays with one row per task output.

        Raises
        ------
        RuntimeError
            If :meth:`setup` has not been called.
        TypeError
            If `task` is not callable.
        """
        if not self.is_initialised:
            self.logger.error("Cannot start screening, initialise screening first with setup or from_yaml")
            raise RuntimeError("Cannot start screening, initialise screening first with setup or from_yaml")

        if not callable(task):
            raise TypeError(f"{task} is not callable.")

        self.dt_start = datetime.now()
        design = self.generator.generate()
        self.logger.info("Evaluating %d points of %d trajectories.", len(design), self.generator.n_trajectories)

        outputs = []
        for x in tqdm(design, desc="Evaluating design", disable=not verbose, file=sys.stdout):
            outputs.append(task(x))
        outputs = np.array(outputs, dtype=float)
        self.dt_end = datetime.now()
        self.logger.info("Evaluations complete.")

        self.effects = MorrisEffects(design, outputs)
        mean = np.array([self.effects.mean_effects(i) for i in range(self.effects.h)])
        std = np.array([self.effects.standard_deviation_effects(i) for i in range(self.effects.h)])
        if self.effects.h == 1:
            mean, std = mean[0], std[0]

        self.result = ScreeningResult(design, outputs, mean, std)
        self._save_results(task)

        return self.result

    def _save_results(self, task: Callable):
        """ Writes the YAML summary and HDF5 log files if they have been requested. """
        if not self.summary_file and not self.log_file:
            return

        self.working_dir.mkdir(parents=True, exist_ok=True)

        if self.summary_file:
            data = self._summary_data(task)
            with (self.working_dir / self.summary_file).open("w") as file:
                self.logger.debug("Saving screening summary file.")
                yaml.dump(data, file, Dumper=Dumper, default_flow_style=False, sort_keys=False)

        if self.log_file:
            self.logger.debug("Saving design and outputs to HDF5 file.")
            attrs = {'oatscreen_version': __version__,
                     'n_trajectories': self.generator.n_trajectories,
                     'bounds': np.array(self.generator.bounds),
                     'steps': self.generator.steps}
            if self.seed is not None:
                attrs['seed'] = self.seed
            save_samples(self.working_dir / self.log_file, self.result.design, self.result.outputs, **attrs)

    def _summary_data(self, task: Callable) -> Dict[str, Any]:
        gen = self.generator
        levels = gen.levels
        base_sample = gen.base_sample

        return {
            "Assignment": {
                "oatscreen Version": __version__,
                "Task": getattr(task, '__name__', type(task).__name__),
                "Working Dir": str(self.working_dir),
                "Time": {"Start": str(self.dt_start),
                         "End": str(self.dt_end),
                         "Total": str(self.dt_end - self.dt_start)}},
            "Settings": {"Trajectories": gen.n_trajectories,
                         "Factors": gen.dims,
                         "Base Points": "grid" if levels is not None else "sample",
                         "Levels": FlowList(levels.tolist()) if levels is not None else None,
                         "Base Sample Size": len(base_sample) if base_sample is not None else None,
                         "Steps": gen.steps,
                         "Seed": self.seed,
                         "Bounds": BoundGroup([Bound(*bnd) for bnd in gen.bounds])},
            "Counters": {"Function Evaluations": len(self.result.design)},
            "Effects": {"mean": self.result.mean,
                        "std": self.result.std}}
