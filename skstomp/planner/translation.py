from logging import getLogger

import numpy as np

from skstomp.messages import JointTrajectory
from skstomp.messages import JointTrajectoryPoint
from skstomp.model import RobotState
from skstomp.trajectory import RobotTrajectory


logger = getLogger(__name__)


def parameters_to_joint_trajectory(parameters, joint_names):
    """Convert a parameter matrix to a zero-timed joint trajectory.

    Each column becomes one point. Velocities, accelerations and
    `time_from_start` are all zero until the trajectory is re-timed.

    Parameters
    ----------
    parameters : numpy.ndarray(n_dof, n_timesteps)
    joint_names : list[str]
        names of the rows of `parameters`.

    Returns
    -------
    trajectory : skstomp.messages.JointTrajectory
    """
    parameters = np.asarray(parameters, dtype=np.float64)
    if parameters.ndim != 2 or parameters.shape[0] != len(joint_names):
        raise ValueError(
            'parameters of shape {} do not match {} joints'.format(
                parameters.shape, len(joint_names)))
    points = [JointTrajectoryPoint(parameters[:, t].copy())
              for t in range(parameters.shape[1])]
    return JointTrajectory(joint_names, points)


def joint_trajectory_to_parameters(trajectory):
    return trajectory.positions().T.copy()


def to_robot_trajectory(parameters, request, kinematic_model, group_name,
                        time_parameterizer):
    """Create a timed robot trajectory from a parameter matrix.

    The request's start state gives the positions of joints outside
    the group. If re-timing fails a warning is logged and the
    zero-timed trajectory is returned.

    Returns
    -------
    trajectory : skstomp.trajectory.RobotTrajectory
    """
    group = kinematic_model.get_joint_model_group(group_name)
    joint_trajectory = parameters_to_joint_trajectory(
        parameters, group.active_joint_names)
    reference_state = RobotState.from_joint_state(
        kinematic_model, request.start_state)
    trajectory = RobotTrajectory(kinematic_model, group_name)
    trajectory.set_robot_trajectory_msg(reference_state, joint_trajectory)

    if time_parameterizer is None:
        logger.warning('no time parameterizer, trajectory of group %s is '
                       'not timed', group_name)
    elif not time_parameterizer.compute_time_stamps(
            trajectory,
            request.max_velocity_scaling_factor,
            request.max_acceleration_scaling_factor):
        logger.warning('failed to compute time stamps of the trajectory of '
                       'group %s, keeping zero timing', group_name)
    return trajectory


def validate_trajectory(trajectory, planning_scene, group_name,
                        verbose=True):
    if planning_scene is None:
        return True
    return planning_scene.is_path_valid(trajectory, group_name, verbose)
