import enum
from logging import getLogger

import numpy as np

from skstomp.model import RobotState
from skstomp.planner.errors import IkFailureError
from skstomp.planner.errors import MissingGoalError
from skstomp.planner.errors import SeedShapeMismatchError
from skstomp.planner.errors import TaskBindingError


logger = getLogger(__name__)

IK_ATTEMPTS = 10
IK_TIMEOUT = 0.05


class ProblemMode(enum.Enum):
    BOUNDARY_VALUE = 'boundary_value'
    SEEDED = 'seeded'


class ProblemSpec(object):
    """Optimization problem built from one request.

    Attributes
    ----------
    mode : ProblemMode
        seeded or boundary-value.
    config : skstomp.planner.config.PlanningConfiguration
        working configuration of this solve.
    start : numpy.ndarray(n_dof,) or None
        start vector in boundary-value mode.
    goal : numpy.ndarray(n_dof,) or None
        goal vector in boundary-value mode.
    seed : numpy.ndarray(n_dof, n_timesteps) or None
        initial parameter matrix in seeded mode.
    """

    def __init__(self, mode, config, start=None, goal=None, seed=None):
        self.mode = mode
        self.config = config
        self.start = start
        self.goal = goal
        self.seed = seed

    @property
    def seeded(self):
        return self.mode == ProblemMode.SEEDED

    def __repr__(self):
        if self.seeded:
            return '<ProblemSpec seeded {}>'.format(self.seed.shape)
        return '<ProblemSpec boundary_value start={} goal={}>'.format(
            self.start, self.goal)


def extract_seed_trajectory(request, joint_model_group):
    """Convert the trajectory constraints of a request to a parameter matrix.

    Every trajectory constraint must hold one joint constraint per
    active joint, in the order of the group's active joints.

    Returns
    -------
    seed : numpy.ndarray(n_dof, n_waypoints)

    Raises
    ------
    SeedShapeMismatchError
        at the first constraint that does not match.
    """
    names = joint_model_group.active_joint_names
    n_dof = len(names)
    seed = np.zeros((n_dof, len(request.trajectory_constraints)))
    for index, constraints in enumerate(request.trajectory_constraints):
        joint_constraints = constraints.joint_constraints
        if len(joint_constraints) != n_dof:
            raise SeedShapeMismatchError(index, n_dof, len(joint_constraints))
        for j, (expected, jc) in enumerate(zip(names, joint_constraints)):
            if jc.joint_name != expected:
                raise SeedShapeMismatchError(
                    index, expected, jc.joint_name, joint_index=j)
            seed[j, index] = jc.position
    return seed


def get_start_and_goal(request, kinematic_model, group_name,
                       ik_attempts=IK_ATTEMPTS, ik_timeout=IK_TIMEOUT,
                       random_state=None):
    """Compute the start and goal vectors of a boundary-value request.

    The start vector is read from the request's start state. The goal
    is taken from the joint constraints of the single goal region, or
    solved by IK of the group's tip link from its position and
    orientation constraints; the link named in the constraints is not
    used. Both vectors are clipped into the joint limits.

    Returns
    -------
    start : numpy.ndarray(n_dof,)
    goal : numpy.ndarray(n_dof,)
    """
    group = kinematic_model.get_joint_model_group(group_name)
    state = RobotState.from_joint_state(kinematic_model, request.start_state)
    start = group.enforce_bounds(state.get_joint_group_positions(group_name))

    if len(request.goal_constraints) == 0:
        raise MissingGoalError('request has no goal constraints')
    if len(request.goal_constraints) > 1:
        logger.warning('request has %d goal regions, only the first is used',
                       len(request.goal_constraints))
    goal_constraints = request.goal_constraints[0]

    goal_state = state.copy()
    if len(goal_constraints.joint_constraints) > 0:
        for jc in goal_constraints.joint_constraints:
            if jc.joint_name not in group.active_joint_names:
                logger.warning('goal joint %s is not in group %s, ignored',
                               jc.joint_name, group_name)
                continue
            goal_state.set_variable_position(jc.joint_name, jc.position)
        goal = group.enforce_bounds(
            goal_state.get_joint_group_positions(group_name))
        return start, goal

    if len(goal_constraints.position_constraints) > 0:
        position_constraint = goal_constraints.position_constraints[0]
        orientation = None
        if len(goal_constraints.orientation_constraints) > 0:
            orientation = \
                goal_constraints.orientation_constraints[0].orientation
        tip_link = group.tip_link
        if not goal_state.set_from_ik(
                group_name, position_constraint.position, orientation,
                tip_link=tip_link, attempts=ik_attempts, timeout=ik_timeout,
                random_state=random_state):
            raise IkFailureError(
                'IK failed for link {} at {} after {} attempts'.format(
                    tip_link, position_constraint.position, ik_attempts))
        goal = group.enforce_bounds(
            goal_state.get_joint_group_positions(group_name))
        return start, goal

    raise MissingGoalError(
        'goal region has neither joint nor position constraints')


def build_problem(request, config, kinematic_model, task, planning_scene,
                  random_state=None):
    """Build the optimization problem of a request and bind the task.

    Parameters
    ----------
    request : skstomp.messages.MotionPlanRequest
        request to solve.
    config : skstomp.planner.config.PlanningConfiguration
        stored configuration of the planner. It is not modified.
    kinematic_model : skstomp.model.KinematicModel
        robot model.
    task : skstomp.optimizer.base.Task
        task bound to the request.
    planning_scene : skstomp.scene.PlanningScene or None
        scene handed to the task.

    Returns
    -------
    problem : ProblemSpec
    working_config : skstomp.planner.config.PlanningConfiguration

    Raises
    ------
    BuildError
    """
    group = kinematic_model.get_joint_model_group(request.group_name)
    if len(request.trajectory_constraints) > 0:
        seed = extract_seed_trajectory(request, group)
        working_config = config.copy(num_timesteps=seed.shape[1])
        problem = ProblemSpec(ProblemMode.SEEDED, working_config, seed=seed)
        logger.info('seeding trajectory of %d waypoints for group %s',
                    seed.shape[1], request.group_name)
    else:
        start, goal = get_start_and_goal(
            request, kinematic_model, request.group_name,
            random_state=random_state)
        working_config = config.copy()
        problem = ProblemSpec(ProblemMode.BOUNDARY_VALUE, working_config,
                              start=start, goal=goal)

    try:
        bound = task.set_motion_plan_request(
            planning_scene, request, working_config)
    except ValueError as e:
        raise TaskBindingError('task binding raised: {}'.format(e))
    if not bound:
        raise TaskBindingError('task rejected the request for group {}'
                               .format(request.group_name))
    return problem, working_config
