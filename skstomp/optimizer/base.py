"""Base interfaces of the stochastic trajectory optimizer."""

from abc import ABC
from abc import abstractmethod

import numpy as np


class OptimizationResult(object):
    """Result of trajectory optimization.

    Attributes
    ----------
    parameters : ndarray
        Optimized parameter matrix (n_dimensions, n_timesteps).
    success : bool
        Whether a valid trajectory was found.
    cost : float
        Final cost value.
    iterations : int
        Number of iterations.
    message : str
        Status message.
    info : dict
        Additional optimizer-specific information.
    """

    def __init__(
        self,
        parameters,
        success=True,
        cost=0.0,
        iterations=0,
        message='',
        info=None,
    ):
        self.parameters = np.asarray(parameters)
        self.success = success
        self.cost = cost
        self.iterations = iterations
        self.message = message
        self.info = info or {}

    def __repr__(self):
        return '<OptimizationResult success={} cost={:.4g} iterations={}>'.format(
            self.success, self.cost, self.iterations)


class Task(ABC):
    """Problem-specific part of the optimizer.

    A task evaluates costs and draws noisy rollouts for one planning
    request. It is bound to a request by `set_motion_plan_request`
    before every solve.
    """

    @abstractmethod
    def set_motion_plan_request(self, planning_scene, request, config):
        """Bind the task to a request.

        Parameters
        ----------
        planning_scene : skstomp.scene.PlanningScene
            scene the trajectory must avoid.
        request : skstomp.messages.MotionPlanRequest
            request being solved.
        config : skstomp.planner.config.PlanningConfiguration
            configuration of this solve.

        Returns
        -------
        success : bool
        """

    @abstractmethod
    def generate_noisy_parameters(self, parameters, iteration, rollout_number):
        """Draw one noisy rollout around `parameters`.

        Returns
        -------
        noisy_parameters : ndarray (n_dimensions, n_timesteps)
        noise : ndarray (n_dimensions, n_timesteps)
        """

    @abstractmethod
    def compute_costs(self, parameters, iteration=0):
        """Compute the state cost of each timestep.

        Returns
        -------
        costs : ndarray (n_timesteps,)
        valid : bool
            whether `parameters` is an acceptable solution.
        """

    def compute_noisy_costs(self, parameters, iteration, rollout_number):
        return self.compute_costs(parameters, iteration)

    def filter_noisy_parameters(self, parameters):
        return parameters

    def filter_parameter_updates(self, parameters, updates):
        return updates

    def done(self, success, total_iterations, final_cost, parameters):
        pass


class OptimizerBase(ABC):
    """Abstract base class for trajectory optimizers.

    Both solve methods run synchronously; `cancel` may be called from
    another thread while a solve is running.
    """

    @abstractmethod
    def set_config(self, config):
        """Replace the configuration used by the next solve."""

    @abstractmethod
    def solve(self, start, goal):
        """Solve a boundary-value problem.

        Parameters
        ----------
        start : ndarray (n_dimensions,)
        goal : ndarray (n_dimensions,)

        Returns
        -------
        OptimizationResult
        """

    @abstractmethod
    def solve_seeded(self, initial_parameters):
        """Refine a seed parameter matrix.

        Parameters
        ----------
        initial_parameters : ndarray (n_dimensions, n_timesteps)

        Returns
        -------
        OptimizationResult
        """

    @abstractmethod
    def cancel(self):
        """Request the running solve to stop.

        Returns
        -------
        success : bool
        """

    @abstractmethod
    def clear(self):
        """Reset iteration counters, rollout buffers and the cancel flag."""
