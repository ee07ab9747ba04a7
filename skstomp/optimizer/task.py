from logging import getLogger
import numbers

import numpy as np

from skstomp.model import RobotState
from skstomp.optimizer.base import Task
from skstomp.optimizer.utils import construct_noise_cholesky


logger = getLogger(__name__)

_default_task_config = {
    'stddev': 0.05,
    'collision_checking': True,
    'collision_clearance': 0.02,
    'collision_penalty': 1.0,
    'joint_limit_penalty': 1.0,
    'random_seed': None,
}


def _is_number(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


class StompOptimizationTask(Task):
    """Default task: smooth gaussian noise, obstacle and joint-limit costs.

    The `task` block of a planner configuration accepts:

    - `stddev` (float or list of float): noise standard deviation of
      each joint [rad].
    - `collision_checking` (bool): if False, obstacles are ignored by
      the cost and the validity test.
    - `collision_clearance` (float): distance below which a collision
      sphere starts to be penalized [m].
    - `collision_penalty` (float): weight of the obstacle cost.
    - `joint_limit_penalty` (float): weight of the joint-limit cost.
    - `random_seed` (int or None): seed of the noise generator.

    Parameters
    ----------
    kinematic_model : skstomp.model.KinematicModel
        robot model.
    group_name : str
        planning group.
    task_config : dict or None
        the `task` block.
    """

    def __init__(self, kinematic_model, group_name, task_config=None):
        self.kinematic_model = kinematic_model
        self.group_name = group_name
        self.group = kinematic_model.get_joint_model_group(group_name)
        self._parse_config(task_config)
        self.random_state = np.random.RandomState(self.random_seed)

        self.planning_scene = None
        self.request = None
        self.config = None
        self._base_positions = {}

    def _parse_config(self, task_config):
        if task_config is None:
            task_config = {}
        if not isinstance(task_config, dict):
            raise ValueError('task configuration must be a mapping, '
                             'but {} given'.format(type(task_config)))
        config = dict(_default_task_config)
        for key, value in task_config.items():
            if key not in config:
                logger.warning('unknown task parameter %s is ignored', key)
                continue
            config[key] = value

        n = self.group.variable_count
        stddev = config['stddev']
        if _is_number(stddev):
            stddev = [stddev] * n
        if (not isinstance(stddev, (list, tuple)) or len(stddev) != n
                or not all(_is_number(s) and s >= 0 for s in stddev)):
            raise ValueError(
                'stddev must be a non-negative number or a list of {} '
                'non-negative numbers, but {} given'.format(n, stddev))
        self.stddev = np.array(stddev, dtype=np.float64)

        if not isinstance(config['collision_checking'], bool):
            raise ValueError('collision_checking must be a bool')
        self.collision_checking = config['collision_checking']
        for key in ['collision_clearance', 'collision_penalty',
                    'joint_limit_penalty']:
            if not _is_number(config[key]) or config[key] < 0:
                raise ValueError(
                    '{} must be a non-negative number'.format(key))
        self.collision_clearance = float(config['collision_clearance'])
        self.collision_penalty = float(config['collision_penalty'])
        self.joint_limit_penalty = float(config['joint_limit_penalty'])

        seed = config['random_seed']
        if seed is not None and (not isinstance(seed, int)
                                 or isinstance(seed, bool)):
            raise ValueError('random_seed must be an int or None')
        self.random_seed = seed

    def set_motion_plan_request(self, planning_scene, request, config):
        if request.group_name != self.group_name:
            logger.error('task for group %s cannot solve a request for %s',
                         self.group_name, request.group_name)
            return False
        if planning_scene is not None \
                and planning_scene.kinematic_model is not self.kinematic_model:
            logger.error('planning scene was built for a different robot '
                         'model than the task of group %s', self.group_name)
            return False
        if config.num_dimensions != self.group.variable_count:
            logger.error('configuration has %d dimensions but group %s has '
                         '%d active joints', config.num_dimensions,
                         self.group_name, self.group.variable_count)
            return False

        self.planning_scene = planning_scene
        self.request = request
        self.config = config
        start_state = RobotState.from_joint_state(
            self.kinematic_model, request.start_state)
        names = set(self.group.active_joint_names)
        self._base_positions = {
            k: v for k, v in start_state.as_dict().items() if k not in names}
        return True

    def generate_noisy_parameters(self, parameters, iteration, rollout_number):
        n_dim, n_wp = parameters.shape
        noise = np.zeros_like(parameters)
        L = construct_noise_cholesky(n_wp)
        if L.size > 0:
            eps = self.random_state.randn(n_dim, n_wp - 2)
            noise[:, 1:-1] = self.stddev[:, None] * eps.dot(L.T)
        return parameters + noise, noise

    def filter_noisy_parameters(self, parameters):
        return np.clip(parameters,
                       self.group.lower_limits[:, None],
                       self.group.upper_limits[:, None])

    def filter_parameter_updates(self, parameters, updates):
        updated = np.clip(parameters + updates,
                          self.group.lower_limits[:, None],
                          self.group.upper_limits[:, None])
        return updated - parameters

    def compute_costs(self, parameters, iteration=0):
        n_wp = parameters.shape[1]
        lower = self.group.lower_limits[:, None]
        upper = self.group.upper_limits[:, None]
        violation = np.maximum(lower - parameters, 0.0) \
            + np.maximum(parameters - upper, 0.0)
        costs = self.joint_limit_penalty * np.sum(violation, axis=0)
        valid = not np.any(violation > 0.0)

        if self.collision_checking and self.planning_scene is not None \
                and len(self.planning_scene.obstacles) > 0:
            for t in range(n_wp):
                clearances = self.planning_scene.group_clearances(
                    self.group_name, parameters[:, t], self._base_positions)
                if clearances.size == 0:
                    continue
                costs[t] += self.collision_penalty * np.sum(np.maximum(
                    self.collision_clearance - clearances, 0.0))
                if np.any(clearances < 0.0):
                    valid = False
        return costs, valid
