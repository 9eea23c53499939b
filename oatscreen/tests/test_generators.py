import numpy as np
import pytest

from oatscreen.common.helpers import DimensionMismatchError, DomainError, InvalidArgumentError
from oatscreen.common.namedtuples import Bound
from oatscreen.generators import LatinHypercubeGenerator, MorrisGenerator


def split_trajectories(design, dims):
    return design.reshape((-1, dims + 1, dims))


class TestMorris:

    @pytest.mark.parametrize("kwargs", [{'levels': [4, 4, 6]},
                                        {'levels': [4, 4, 6], 'bounds': [(198.5, 200), (0, 6), (-64.56, -54.54)]},
                                        {'base_sample': np.linspace(0, 1, 30).reshape((10, 3))},
                                        {'base_sample': np.linspace(0, 1, 30).reshape((10, 3)) * 10 - 5,
                                         'bounds': [(-5, 5), (-5, 5), (-5, 5)]},
                                        ])
    def test_shape_and_bounds(self, kwargs):
        gen = MorrisGenerator(7, rng=3, **kwargs)
        bounds = np.array(gen.bounds)

        for _ in range(5):
            design = gen.generate()
            assert design.shape == (7 * 4, 3)
            assert gen.n_points == 28
            assert np.all(design >= bounds[:, 0] - 1e-12)
            assert np.all(design <= bounds[:, 1] + 1e-12)

    @pytest.mark.parametrize("kwargs", [{'levels': [3, 5, 2, 11]},
                                        {'levels': [3, 5, 2, 11], 'bounds': [(0, 1), (-100, 100), (1e6, 2e6),
                                                                             (-1e-3, 1e-3)]},
                                        {'base_sample': LatinHypercubeGenerator(8, 4, 0).generate()},
                                        ])
    def test_one_at_a_time(self, kwargs):
        gen = MorrisGenerator(20, rng=5, **kwargs)
        bounds = np.array(gen.bounds)
        delta = bounds[:, 1] - bounds[:, 0]

        for traj in split_trajectories(gen.generate(), gen.dims):
            diffs = np.diff(traj, axis=0)
            moved = ~np.isclose(diffs, 0, rtol=0, atol=1e-9 * delta)

            assert np.all(moved.sum(1) == 1)
            assert np.all(moved.sum(0) == 1)

            rows, factors = np.nonzero(moved)
            assert np.allclose(np.abs(diffs[rows, factors]), gen.steps[factors] * delta[factors])

    def test_scenario_three_levels(self):
        gen = MorrisGenerator(1, levels=[3, 3])
        design = gen.generate()

        assert design.shape == (3, 2)
        assert np.allclose(gen.steps, 0.5)

        diffs = np.abs(np.diff(design, axis=0))
        for diff in diffs:
            assert np.count_nonzero(diff) == 1
            assert np.isclose(diff.max(), 0.5)

    def test_scenario_two_levels(self):
        gen = MorrisGenerator(5, levels=[2], rng=11)
        design = gen.generate()

        assert design.shape == (10, 1)
        assert set(design.ravel().tolist()) <= {0., 1.}
        for traj in split_trajectories(design, 1):
            assert np.isclose(abs(traj[1, 0] - traj[0, 0]), 1)

    def test_permutation_varies(self):
        gen = MorrisGenerator(50, levels=[4] * 5, rng=2)
        orders = set()
        for traj in split_trajectories(gen.generate(), 5):
            orders.add(tuple(np.nonzero(np.diff(traj, axis=0))[1]))
        assert len(orders) > 1

    def test_grid_points(self):
        gen = MorrisGenerator(30, levels=[5, 3], bounds=[(0, 8), (10, 12)], rng=4)
        design = gen.generate()

        assert set(np.round(design[:, 0], 10).tolist()) <= {0., 2., 4., 6., 8.}
        assert set(np.round(design[:, 1], 10).tolist()) <= {10., 11., 12.}

    def test_base_sample_points(self):
        base = np.array([[0.1, 0.2],
                         [0.3, 0.4]])
        gen = MorrisGenerator(10, base_sample=base, rng=8)
        assert np.allclose(gen.steps, 0.25)

        for traj in split_trajectories(gen.generate(), 2):
            assert any(np.allclose(np.min(traj, 0), row) for row in base)

    def test_base_sample_clamped(self):
        gen = MorrisGenerator(10, base_sample=[[0.95, 1.0], [0.1, 0.1]], rng=0)
        design = gen.generate()

        assert np.all(design <= 1)
        for traj in split_trajectories(design, 2):
            assert np.allclose(traj.min(0), [0.75, 0.75]) or np.allclose(traj.min(0), [0.1, 0.1])

    def test_base_sample_rescaled(self):
        gen = MorrisGenerator(3, base_sample=[[5, -1], [10, 1]], bounds=[(0, 10), (-1, 1)])
        assert np.allclose(gen.base_sample, [[0.5, 0.], [1., 1.]])

    def test_properties(self):
        gen = MorrisGenerator(3, levels=[3, 5], bounds=[(0, 1), (2, 4)])

        assert gen.dims == 2
        assert gen.n_trajectories == 3
        assert np.all(gen.levels == [3, 5])
        assert np.allclose(gen.steps, [0.5, 0.25])
        assert gen.bounds == [Bound(0, 1), Bound(2, 4)]
        assert gen.base_sample is None

        gen.steps[0] = 100
        assert gen.steps[0] == 0.5

    @pytest.mark.parametrize("levels", [[0], [1], [4, 1], [4, 0, 3], [2.5, 3], [-3]])
    def test_invalid_levels(self, levels):
        with pytest.raises(InvalidArgumentError):
            MorrisGenerator(5, levels=levels)

    @pytest.mark.parametrize("n_trajectories", [0, -1, 2.5])
    def test_invalid_trajectories(self, n_trajectories):
        with pytest.raises(InvalidArgumentError):
            MorrisGenerator(n_trajectories, levels=[4, 4])

    @pytest.mark.parametrize("kwargs", [{}, {'levels': [4], 'base_sample': [[0.5]]}])
    def test_exclusive_modes(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            MorrisGenerator(5, **kwargs)

    @pytest.mark.parametrize("bounds", [[(0, 1), (1, 0)],
                                        [(0, 1), (0, 0)],
                                        [(0, 1), (-np.inf, 0)]])
    def test_invalid_bounds(self, bounds):
        with pytest.raises(InvalidArgumentError):
            MorrisGenerator(5, levels=[4, 4], bounds=bounds)

    @pytest.mark.parametrize("kwargs", [{'levels': [4, 4], 'bounds': [(0, 1)]},
                                        {'levels': [4], 'bounds': [(0, 1), (0, 1)]},
                                        {'base_sample': [[0.5, 0.5]], 'bounds': [(0, 1)] * 3}])
    def test_dimension_mismatch(self, kwargs):
        with pytest.raises(DimensionMismatchError):
            MorrisGenerator(5, **kwargs)

    @pytest.mark.parametrize("base_sample", [[[0.5, 1.2]],
                                             [[-0.1, 0.5]],
                                             [[0.5, 0.5], [0.2, 1.0000001]]])
    def test_base_sample_outside_unit(self, base_sample):
        with pytest.raises(DomainError):
            MorrisGenerator(5, base_sample=base_sample)

    def test_base_sample_outside_bounds(self):
        with pytest.raises(DomainError, match="bounds"):
            MorrisGenerator(5, base_sample=[[0.5, 11]], bounds=[(0, 1), (0, 10)])

    @pytest.mark.parametrize("kwargs", [{'levels': [4, 3, 6]},
                                        {'base_sample': LatinHypercubeGenerator(5, 3, 7).generate()}])
    def test_determinism(self, kwargs):
        gen_a = MorrisGenerator(10, rng=42, **kwargs)
        gen_b = MorrisGenerator(10, rng=42, **kwargs)

        design_a = gen_a.generate()
        assert np.all(design_a == gen_b.generate())
        assert np.all(gen_a.generate() == gen_b.generate())

    def test_independent_draws(self):
        gen = MorrisGenerator(10, levels=[6, 6, 6], rng=42)
        assert np.any(gen.generate() != gen.generate())

    def test_shared_rng(self):
        rng = np.random.default_rng(9)
        gen = MorrisGenerator(4, levels=[4, 4], rng=rng)
        assert gen.rng is rng


class TestLatinHypercube:

    @pytest.mark.parametrize("size, dims", [(1, 1), (10, 3), (25, 7)])
    def test_stratified(self, size, dims):
        sample = LatinHypercubeGenerator(size, dims, rng=0).generate()

        assert sample.shape == (size, dims)
        assert np.all(sample >= 0)
        assert np.all(sample < 1)
        for col in sample.T:
            assert sorted(np.floor(col * size).astype(int).tolist()) == list(range(size))

    def test_determinism(self):
        assert np.all(LatinHypercubeGenerator(10, 3, 1).generate() == LatinHypercubeGenerator(10, 3, 1).generate())

    @pytest.mark.parametrize("size, dims", [(0, 3), (5, 0), (-1, 2)])
    def test_invalid(self, size, dims):
        with pytest.raises(InvalidArgumentError):
            LatinHypercubeGenerator(size, dims)
