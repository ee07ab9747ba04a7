"""Request, trajectory and response messages exchanged with the planner."""

import enum

import numpy as np

from skstomp.model.robot_state import JointState


class MoveItErrorCode(enum.IntEnum):
    SUCCESS = 1
    FAILURE = 99999
    PLANNING_FAILED = -1
    INVALID_MOTION_PLAN = -2


class JointConstraint(object):

    def __init__(self, joint_name, position,
                 tolerance_above=0.0, tolerance_below=0.0, weight=1.0):
        self.joint_name = joint_name
        self.position = float(position)
        self.tolerance_above = tolerance_above
        self.tolerance_below = tolerance_below
        self.weight = weight

    def __repr__(self):
        return 'JointConstraint({!r}, {})'.format(
            self.joint_name, self.position)


class PositionConstraint(object):
    """Target position of a link in the world frame."""

    def __init__(self, link_name, position, weight=1.0):
        self.link_name = link_name
        self.position = np.asarray(position, dtype=np.float64)
        self.weight = weight


class OrientationConstraint(object):
    """Target orientation of a link as a quaternion [w, x, y, z]."""

    def __init__(self, link_name, orientation, weight=1.0):
        self.link_name = link_name
        self.orientation = np.asarray(orientation, dtype=np.float64)
        self.weight = weight


class Constraints(object):
    """A set of constraints that must hold together.

    One `Constraints` is one goal region when used as a goal, and one
    waypoint when used as a trajectory constraint.
    """

    def __init__(self, joint_constraints=None, position_constraints=None,
                 orientation_constraints=None, name=''):
        self.name = name
        self.joint_constraints = list(joint_constraints or [])
        self.position_constraints = list(position_constraints or [])
        self.orientation_constraints = list(orientation_constraints or [])

    @classmethod
    def from_joint_positions(cls, joint_names, positions):
        return cls(joint_constraints=[
            JointConstraint(name, value)
            for name, value in zip(joint_names, positions)])

    @classmethod
    def from_pose(cls, link_name, position, orientation):
        return cls(
            position_constraints=[PositionConstraint(link_name, position)],
            orientation_constraints=[
                OrientationConstraint(link_name, orientation)])

    def is_empty(self):
        return (len(self.joint_constraints) == 0
                and len(self.position_constraints) == 0
                and len(self.orientation_constraints) == 0)


class MotionPlanRequest(object):
    """A single motion planning query.

    Parameters
    ----------
    group_name : str
        planning group.
    start_state : skstomp.model.JointState
        start joint positions.
    goal_constraints : list[Constraints]
        goal regions. The planner handles exactly one.
    trajectory_constraints : list[Constraints] or None
        if not empty, joint-space waypoints used as the seed
        trajectory.
    max_velocity_scaling_factor : float
        scaling of joint velocity limits in (0, 1].
    max_acceleration_scaling_factor : float
        scaling of joint acceleration limits in (0, 1].
    """

    def __init__(self, group_name, start_state=None, goal_constraints=None,
                 trajectory_constraints=None,
                 max_velocity_scaling_factor=1.0,
                 max_acceleration_scaling_factor=1.0):
        self.group_name = group_name
        self.start_state = start_state or JointState()
        self.goal_constraints = list(goal_constraints or [])
        self.trajectory_constraints = list(trajectory_constraints or [])
        self.max_velocity_scaling_factor = max_velocity_scaling_factor
        self.max_acceleration_scaling_factor = max_acceleration_scaling_factor


class JointTrajectoryPoint(object):

    def __init__(self, positions, velocities=None, accelerations=None,
                 time_from_start=0.0):
        self.positions = np.asarray(positions, dtype=np.float64)
        n = len(self.positions)
        self.velocities = np.zeros(n) if velocities is None \
            else np.asarray(velocities, dtype=np.float64)
        self.accelerations = np.zeros(n) if accelerations is None \
            else np.asarray(accelerations, dtype=np.float64)
        self.time_from_start = float(time_from_start)

    def __repr__(self):
        return 'JointTrajectoryPoint(positions={}, time_from_start={})'.format(
            self.positions, self.time_from_start)


class JointTrajectory(object):

    def __init__(self, joint_names=None, points=None):
        self.joint_names = list(joint_names or [])
        self.points = list(points or [])

    def __len__(self):
        return len(self.points)

    def positions(self):
        """Return positions as an array of shape (n_points, n_joints)."""
        return np.array([p.positions for p in self.points]).reshape(
            len(self.points), len(self.joint_names))

    def times_from_start(self):
        return np.array([p.time_from_start for p in self.points])


class MotionPlanResponse(object):
    """Compact solve outcome: the final trajectory only."""

    def __init__(self, trajectory=None, planning_time=0.0,
                 error_code=MoveItErrorCode.SUCCESS):
        self.trajectory = trajectory
        self.planning_time = planning_time
        self.error_code = error_code

    @property
    def success(self):
        return self.error_code == MoveItErrorCode.SUCCESS

    def __repr__(self):
        return '<MotionPlanResponse {} ({:.3f} sec)>'.format(
            self.error_code.name, self.planning_time)


class MotionPlanDetailedResponse(object):
    """Solve outcome with one entry per planning stage."""

    def __init__(self):
        self.trajectory = []
        self.description = []
        self.processing_time = []
        self.error_code = MoveItErrorCode.SUCCESS

    @property
    def success(self):
        return self.error_code == MoveItErrorCode.SUCCESS

    def __repr__(self):
        return '<MotionPlanDetailedResponse {} stages: {}>'.format(
            self.error_code.name, self.description)
