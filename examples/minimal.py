import numpy as np

from oatscreen.core import MorrisScreening

if __name__ == '__main__':
    """ In this example oatscreen is used to screen the inputs of a toy model with six factors.

        Factors 0 and 1 have a linear influence, factors 2 and 3 interact with one another, factor 4 has a
        non-linear influence and factor 5 is not used at all.
    """

    def model(x):
        return 3 * x[0] - 2 * x[1] + 4 * x[2] * x[3] + np.sin(x[4])

    """ The screening is setup with the bounds of each factor and the number of levels into which each is
        discretized. Each of the 20 trajectories will evaluate the model 7 times, one more than the number of factors.
        Giving a seed makes the design (and hence the result) reproducible.
    """
    screening = MorrisScreening.new_screening(n_trajectories=20,
                                              levels=[4] * 6,
                                              bounds=[(0, 1), (0, 1), (-1, 1), (-1, 1), (0, 2 * np.pi), (0, 1)],
                                              seed=1,
                                              working_dir='screening_outputs',
                                              log_file='samples.h5')

    """ Running the screening evaluates the model at every point of the design and returns the statistics.
        A summary of the settings and results is also saved in the working directory.
    """
    result = screening.run(model, verbose=True)

    """ Linear factors have a non-zero mean and zero standard deviation. Interacting and non-linear factors have a
        large standard deviation. Unused factors are zero in both.
    """
    for i, (mu, sigma) in enumerate(zip(result.mean, result.std)):
        print(f"Factor {i}: mean = {mu:+.3f}, std = {sigma:.3f}")
