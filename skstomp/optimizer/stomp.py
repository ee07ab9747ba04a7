"""Stochastic Trajectory Optimization for Motion Planning (STOMP).

Kalakrishnan et al., "STOMP: Stochastic Trajectory Optimization for
Motion Planning", ICRA 2011.

Each iteration draws noisy rollouts around the current parameters,
weights their noise per timestep by the exponentiated, normalized
rollout costs, smooths the weighted noise and applies it as the
update. The first and last timesteps are never modified.
"""

from logging import getLogger
import threading

import numpy as np

from skstomp.optimizer.base import OptimizationResult
from skstomp.optimizer.base import OptimizerBase
from skstomp.optimizer.utils import construct_smoothing_mat
from skstomp.optimizer.utils import control_costs
from skstomp.optimizer.utils import initialize_parameters


logger = getLogger(__name__)


class Rollout(object):

    def __init__(self, parameters_noise, noise, state_costs, control_costs):
        self.parameters_noise = parameters_noise
        self.noise = noise
        self.state_costs = state_costs
        self.control_costs = control_costs
        self.total_costs = state_costs + control_costs
        self.total_cost = float(np.sum(self.total_costs))
        self.probabilities = None


class Stomp(OptimizerBase):
    """STOMP optimizer driven by a `Task`.

    Parameters
    ----------
    config : skstomp.planner.config.PlanningConfiguration
        optimization parameters.
    task : skstomp.optimizer.base.Task
        cost and noise model.
    """

    def __init__(self, config, task):
        self.task = task
        self._proceed = threading.Event()
        self._proceed.set()
        self.set_config(config)

    def set_config(self, config):
        if config.num_dimensions <= 0:
            raise ValueError('num_dimensions must be positive')
        if config.num_rollouts > config.max_rollouts:
            raise ValueError('num_rollouts must not exceed max_rollouts')
        self.config = config
        self._reset_state()

    def clear(self):
        self._reset_state()
        self._proceed.set()

    def _reset_state(self):
        self.current_iteration = 0
        self.valid_iterations = 0
        self.rollouts = []
        self.parameters_optimized = None
        self.parameters_total_cost = np.inf
        self.parameters_valid = False
        self.best_parameters = None
        self.best_cost = np.inf
        self.best_valid = False

    def cancel(self):
        logger.debug('STOMP cancel requested')
        self._proceed.clear()
        return True

    @property
    def cancelled(self):
        return not self._proceed.is_set()

    def solve(self, start, goal):
        start = np.asarray(start, dtype=np.float64)
        goal = np.asarray(goal, dtype=np.float64)
        n = self.config.num_dimensions
        if start.shape != (n,) or goal.shape != (n,):
            return OptimizationResult(
                np.zeros((n, 0)), success=False,
                message='start and goal must have {} dimensions'.format(n))
        initial = initialize_parameters(
            self.config.initialization_method, start, goal,
            self.config.num_timesteps)
        return self.solve_seeded(initial)

    def solve_seeded(self, initial_parameters):
        config = self.config
        initial_parameters = np.array(initial_parameters, dtype=np.float64)
        expected_shape = (config.num_dimensions, config.num_timesteps)
        if initial_parameters.shape != expected_shape:
            return OptimizationResult(
                np.zeros((config.num_dimensions, 0)), success=False,
                message='initial parameters shape {} does not match {}'
                .format(initial_parameters.shape, expected_shape))

        self._reset_state()
        self.parameters_optimized = initial_parameters
        self._compute_optimized_cost()

        while self.current_iteration < config.num_iterations:
            if self.cancelled:
                logger.info('STOMP was cancelled at iteration %d',
                            self.current_iteration)
                break
            self._run_single_iteration()
            self._compute_optimized_cost()
            logger.debug('STOMP iteration %d cost %.6g valid %s',
                         self.current_iteration, self.parameters_total_cost,
                         self.parameters_valid)
            self.current_iteration += 1
            if self.best_valid:
                if self.valid_iterations >= config.num_iterations_after_valid:
                    break
                self.valid_iterations += 1

        success = self.best_valid and not self.cancelled
        if self.cancelled:
            message = 'cancelled'
        elif success:
            message = 'found a valid solution'
        else:
            message = 'no valid solution after {} iterations'.format(
                self.current_iteration)
        self.task.done(success, self.current_iteration, self.best_cost,
                       self.best_parameters)
        return OptimizationResult(
            self.best_parameters.copy(), success=success,
            cost=self.best_cost, iterations=self.current_iteration,
            message=message)

    def _run_single_iteration(self):
        self._generate_noisy_rollouts()
        self._compute_probabilities()
        self._update_parameters()

    def _generate_noisy_rollouts(self):
        config = self.config
        num_reused = min(config.max_rollouts - config.num_rollouts,
                         len(self.rollouts))
        reused = sorted(self.rollouts, key=lambda r: r.total_cost)[
            :num_reused]
        # the noise of a reused rollout is relative to the new parameters
        for rollout in reused:
            rollout.noise = rollout.parameters_noise \
                - self.parameters_optimized

        rollouts = []
        for k in range(config.num_rollouts):
            noisy, _ = self.task.generate_noisy_parameters(
                self.parameters_optimized, self.current_iteration, k)
            noisy = np.array(
                self.task.filter_noisy_parameters(noisy), dtype=np.float64)
            noisy[:, 0] = self.parameters_optimized[:, 0]
            noisy[:, -1] = self.parameters_optimized[:, -1]
            noise = noisy - self.parameters_optimized
            state_costs, _ = self.task.compute_noisy_costs(
                noisy, self.current_iteration, k)
            rollouts.append(Rollout(
                noisy, noise, np.asarray(state_costs, dtype=np.float64),
                control_costs(noisy, config.control_cost_weight)))
        self.rollouts = reused + rollouts

    def _compute_probabilities(self):
        h = self.config.exponentiated_cost_sensitivity
        costs = np.array([r.total_costs for r in self.rollouts])
        min_costs = np.min(costs, axis=0)
        max_costs = np.max(costs, axis=0)
        denom = max_costs - min_costs
        denom[denom < 1e-8] = 1.0
        weights = np.exp(-h * (costs - min_costs[None, :]) / denom[None, :])
        probabilities = weights / np.sum(weights, axis=0)[None, :]
        for rollout, p in zip(self.rollouts, probabilities):
            rollout.probabilities = p

    def _update_parameters(self):
        updates = np.zeros_like(self.parameters_optimized)
        for rollout in self.rollouts:
            updates += rollout.noise * rollout.probabilities[None, :]
        M = construct_smoothing_mat(self.config.num_timesteps)
        updates = updates.dot(M.T)
        updates = self.task.filter_parameter_updates(
            self.parameters_optimized, updates)
        self.parameters_optimized = self.parameters_optimized + updates

    def _compute_optimized_cost(self):
        state_costs, valid = self.task.compute_costs(
            self.parameters_optimized, self.current_iteration)
        total = float(np.sum(state_costs) + np.sum(control_costs(
            self.parameters_optimized, self.config.control_cost_weight)))
        self.parameters_total_cost = total
        self.parameters_valid = bool(valid)
        if (self.best_parameters is None
                or (valid and not self.best_valid)
                or (valid == self.best_valid and total < self.best_cost)):
            self.best_parameters = self.parameters_optimized.copy()
            self.best_cost = total
            self.best_valid = bool(valid)
