from logging import getLogger
import numbers
import os

import yaml

from skstomp.optimizer.utils import InitializationMethod
from skstomp.planner.errors import ConfigParseError
from skstomp.planner.errors import GroupNotFoundError
from skstomp.planner.errors import NoActiveJointsError


logger = getLogger(__name__)


DEFAULT_OPTIMIZATION_CONFIG = {
    'control_cost_weight': 0.0,
    'initialization_method': InitializationMethod.LINEAR_INTERPOLATION,
    'num_timesteps': 40,
    'delta_t': 1.0,
    'num_iterations': 50,
    'num_iterations_after_valid': 0,
    'max_rollouts': 100,
    'num_rollouts': 10,
    'exponentiated_cost_sensitivity': 10.0,
}

_int_fields = ('num_timesteps', 'num_iterations',
               'num_iterations_after_valid', 'max_rollouts', 'num_rollouts')
_float_fields = ('control_cost_weight', 'delta_t',
                 'exponentiated_cost_sensitivity')


class PlanningConfiguration(object):
    """Optimization parameters of one planning group.

    Parameters
    ----------
    num_dimensions : int
        number of active joints of the group.
    control_cost_weight : float
        weight of the acceleration cost.
    initialization_method : InitializationMethod or int
        how the initial trajectory is created in boundary-value mode.
    num_timesteps : int
        number of waypoints.
    delta_t : float
        time between waypoints [sec].
    num_iterations : int
        maximum number of iterations.
    num_iterations_after_valid : int
        iterations to keep optimizing after a valid solution is found.
    max_rollouts : int
        maximum number of rollouts kept across iterations.
    num_rollouts : int
        new rollouts drawn per iteration.
    exponentiated_cost_sensitivity : float
        sensitivity of the rollout weights to cost differences.
    """

    def __init__(self,
                 num_dimensions,
                 control_cost_weight=0.0,
                 initialization_method=InitializationMethod.LINEAR_INTERPOLATION,
                 num_timesteps=40,
                 delta_t=1.0,
                 num_iterations=50,
                 num_iterations_after_valid=0,
                 max_rollouts=100,
                 num_rollouts=10,
                 exponentiated_cost_sensitivity=10.0):
        if num_dimensions <= 0:
            raise ValueError('num_dimensions must be positive, '
                             'but {} given'.format(num_dimensions))
        if num_timesteps <= 0:
            raise ValueError('num_timesteps must be positive')
        if delta_t <= 0:
            raise ValueError('delta_t must be positive')
        if num_iterations <= 0:
            raise ValueError('num_iterations must be positive')
        if num_iterations_after_valid < 0:
            raise ValueError('num_iterations_after_valid must not be negative')
        if max_rollouts <= 0:
            raise ValueError('max_rollouts must be positive')
        if not 0 < num_rollouts <= max_rollouts:
            raise ValueError(
                'num_rollouts must be in (0, max_rollouts={}], '
                'but {} given'.format(max_rollouts, num_rollouts))
        if exponentiated_cost_sensitivity <= 0:
            raise ValueError('exponentiated_cost_sensitivity must be positive')

        self.num_dimensions = int(num_dimensions)
        self.control_cost_weight = float(control_cost_weight)
        self.initialization_method = InitializationMethod(
            initialization_method)
        self.num_timesteps = int(num_timesteps)
        self.delta_t = float(delta_t)
        self.num_iterations = int(num_iterations)
        self.num_iterations_after_valid = int(num_iterations_after_valid)
        self.max_rollouts = int(max_rollouts)
        self.num_rollouts = int(num_rollouts)
        self.exponentiated_cost_sensitivity = float(
            exponentiated_cost_sensitivity)

    def to_dict(self):
        return {
            'num_dimensions': self.num_dimensions,
            'control_cost_weight': self.control_cost_weight,
            'initialization_method': self.initialization_method,
            'num_timesteps': self.num_timesteps,
            'delta_t': self.delta_t,
            'num_iterations': self.num_iterations,
            'num_iterations_after_valid': self.num_iterations_after_valid,
            'max_rollouts': self.max_rollouts,
            'num_rollouts': self.num_rollouts,
            'exponentiated_cost_sensitivity':
            self.exponentiated_cost_sensitivity,
        }

    def copy(self, **overrides):
        """Return a working copy with some fields replaced.

        >>> config = PlanningConfiguration(6)
        >>> config.copy(num_timesteps=10).num_timesteps
        10
        >>> config.num_timesteps
        40
        """
        values = self.to_dict()
        for key in overrides:
            if key not in values:
                raise TypeError('unknown configuration field {}'.format(key))
        values.update(overrides)
        return PlanningConfiguration(**values)

    def __eq__(self, other):
        if not isinstance(other, PlanningConfiguration):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        return 'PlanningConfiguration({})'.format(
            ', '.join('{}={}'.format(k, v)
                      for k, v in sorted(self.to_dict().items())))


def _parse_initialization_method(group_name, value):
    if isinstance(value, str):
        try:
            return InitializationMethod[value.upper()]
        except KeyError:
            raise ConfigParseError(
                group_name,
                'unknown initialization_method {!r}'.format(value))
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigParseError(
            group_name, 'initialization_method must be an int or a name, '
            'but {!r} given'.format(value))
    try:
        return InitializationMethod(value)
    except ValueError:
        raise ConfigParseError(
            group_name, 'unknown initialization_method {}'.format(value))


def resolve_config(raw_config, joint_model_group):
    """Overlay user optimization parameters on the defaults.

    Parameters
    ----------
    raw_config : dict or None
        the `optimization` block of a group configuration.
    joint_model_group : skstomp.model.JointModelGroup
        group being planned for. Its active joint count becomes
        `num_dimensions`.

    Returns
    -------
    config : PlanningConfiguration

    Raises
    ------
    NoActiveJointsError
        if the group has no active joints.
    ConfigParseError
        if a field is malformed or out of range.
    """
    group_name = joint_model_group.name
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigParseError(
            group_name, 'optimization block must be a mapping, '
            'but {} given'.format(type(raw_config).__name__))

    num_dimensions = joint_model_group.variable_count
    if num_dimensions == 0:
        raise NoActiveJointsError(group_name)

    values = dict(DEFAULT_OPTIMIZATION_CONFIG)
    for key, value in raw_config.items():
        if key == 'num_dimensions':
            logger.warning(
                '[%s] num_dimensions is derived from the active joints (%d), '
                'ignoring %s', group_name, num_dimensions, value)
            continue
        if key not in values:
            logger.warning('[%s] unknown optimization parameter %s is '
                           'ignored', group_name, key)
            continue
        if key == 'initialization_method':
            values[key] = _parse_initialization_method(group_name, value)
        elif key in _int_fields:
            if isinstance(value, bool) \
                    or not isinstance(value, numbers.Integral):
                raise ConfigParseError(
                    group_name,
                    '{} must be an int, but {!r} given'.format(key, value))
            values[key] = int(value)
        elif key in _float_fields:
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigParseError(
                    group_name,
                    '{} must be a number, but {!r} given'.format(key, value))
            values[key] = float(value)

    try:
        return PlanningConfiguration(num_dimensions, **values)
    except ValueError as e:
        raise ConfigParseError(group_name, str(e))


def parse_group_config(group_name, group_config, kinematic_model):
    """Split a group record into a configuration and a task block.

    Parameters
    ----------
    group_name : str
        planning group.
    group_config : dict
        record with an `optimization` block and an optional `task`
        block.
    kinematic_model : skstomp.model.KinematicModel
        robot model that must contain the group.

    Returns
    -------
    config : PlanningConfiguration
    task_config : dict
    """
    if not kinematic_model.has_joint_model_group(group_name):
        raise GroupNotFoundError(group_name)
    if not isinstance(group_config, dict):
        raise ConfigParseError(
            group_name, 'group configuration must be a mapping')
    if 'optimization' not in group_config:
        raise ConfigParseError(group_name, 'optimization block is missing')
    group = kinematic_model.get_joint_model_group(group_name)
    config = resolve_config(group_config['optimization'], group)
    task_config = group_config.get('task')
    if task_config is None:
        task_config = {}
    if not isinstance(task_config, dict):
        raise ConfigParseError(group_name, 'task block must be a mapping')
    return config, task_config


def load_planner_configs(source, key='stomp'):
    """Load group records from a mapping or a YAML file.

    Parameters
    ----------
    source : dict, list or str
        a mapping (or a list of entries), or the path of a YAML file
        holding one. If the top level has `key`, its value is used.
    key : str
        optional top level key of the entries.

    Returns
    -------
    configs : dict[str, dict]
        group records keyed by group name.

    Examples
    --------
    >>> configs = load_planner_configs(
    ...     [{'group_name': 'manipulator', 'optimization': {}}])
    >>> list(configs.keys())
    ['manipulator']
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, 'r') as f:
            source = yaml.safe_load(f)
    if isinstance(source, dict) and key in source:
        source = source[key]
    if isinstance(source, dict):
        entries = []
        for name, entry in source.items():
            if not isinstance(entry, dict):
                raise ConfigParseError(
                    name, 'group configuration must be a mapping')
            entry = dict(entry)
            entry.setdefault('group_name', name)
            entries.append(entry)
    elif isinstance(source, list):
        entries = source
    else:
        raise ConfigParseError(
            '', 'planner configuration must be a mapping or a list, '
            'but {} given'.format(type(source).__name__))

    configs = {}
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or 'group_name' not in entry:
            raise ConfigParseError(
                '', 'entry {} has no group_name'.format(index))
        entry = dict(entry)
        group_name = entry.pop('group_name')
        if group_name in configs:
            logger.warning('group %s is configured twice, using the last '
                           'entry', group_name)
        configs[group_name] = entry
    return configs
