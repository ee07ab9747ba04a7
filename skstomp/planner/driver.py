from logging import getLogger

import numpy as np

from skstomp.planner.errors import NoSolutionError


logger = getLogger(__name__)


class OptimizationDriver(object):
    """Runs an optimizer on a built problem.

    The optimizer owns the cancellation flag; `cancel` only forwards
    to it, so it can be called from any thread while `run` is in
    progress.

    Parameters
    ----------
    optimizer : skstomp.optimizer.base.OptimizerBase or None
        optimizer shared with the planner.
    """

    def __init__(self, optimizer):
        self.optimizer = optimizer

    def run(self, problem):
        """Solve the problem.

        Returns
        -------
        parameters : numpy.ndarray(n_dof, n_timesteps)

        Raises
        ------
        NoSolutionError
            if there is no optimizer, or it fails or returns an empty
            result.
        """
        if self.optimizer is None:
            raise NoSolutionError('no optimizer is available')
        self.optimizer.set_config(problem.config)
        if problem.seeded:
            result = self.optimizer.solve_seeded(problem.seed)
        else:
            result = self.optimizer.solve(problem.start, problem.goal)

        if not result.success:
            raise NoSolutionError(
                'optimizer failed: {}'.format(result.message))
        parameters = np.asarray(result.parameters)
        if parameters.ndim != 2 or parameters.size == 0:
            raise NoSolutionError('optimizer returned an empty result')
        logger.debug('optimizer finished in %d iterations with cost %s',
                     result.iterations, result.cost)
        return parameters

    def cancel(self):
        if self.optimizer is None:
            return False
        return self.optimizer.cancel()

    def reset(self):
        if self.optimizer is not None:
            self.optimizer.clear()
