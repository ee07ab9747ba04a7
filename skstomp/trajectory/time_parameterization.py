from abc import ABC
from abc import abstractmethod
from logging import getLogger

import numpy as np


logger = getLogger(__name__)


class TimeParameterizationBase(ABC):
    """Assigns timing to the waypoints of a `RobotTrajectory` in place."""

    @abstractmethod
    def compute_time_stamps(self, trajectory,
                            max_velocity_scaling_factor=1.0,
                            max_acceleration_scaling_factor=1.0):
        """Compute waypoint durations, velocities and accelerations.

        Returns
        -------
        success : bool
            False if the trajectory could not be timed. Never raises
            for a malformed trajectory.
        """


def _verify_scaling_factor(value, name):
    if not 0.0 < value <= 1.0:
        logger.warning(
            'invalid %s %s specified, using 1.0 instead', name, value)
        return 1.0
    return value


class IterativeParabolicTimeParameterization(TimeParameterizationBase):
    """Velocity and acceleration limited timing of a joint path.

    Segment durations are first set so that no joint exceeds its
    scaled velocity limit, then stretched iteratively around every
    waypoint whose finite-difference acceleration exceeds the scaled
    acceleration limit. The trajectory starts and ends at rest.

    Parameters
    ----------
    max_iterations : int
        maximum number of acceleration passes.
    min_segment_duration : float
        duration given to segments without motion [sec].
    """

    def __init__(self, max_iterations=100, min_segment_duration=1e-3):
        self.max_iterations = max_iterations
        self.min_segment_duration = min_segment_duration

    def compute_time_stamps(self, trajectory,
                            max_velocity_scaling_factor=1.0,
                            max_acceleration_scaling_factor=1.0):
        if trajectory.empty():
            logger.error('cannot time an empty trajectory')
            return False
        velocity_scale = _verify_scaling_factor(
            max_velocity_scaling_factor, 'max_velocity_scaling_factor')
        acceleration_scale = _verify_scaling_factor(
            max_acceleration_scaling_factor,
            'max_acceleration_scaling_factor')

        group = trajectory.group
        vmax = np.array([j.max_velocity for j in group.active_joints]) \
            * velocity_scale
        amax = np.array([j.max_acceleration for j in group.active_joints]) \
            * acceleration_scale
        if np.any(vmax <= 0.0) or np.any(amax <= 0.0):
            logger.error('group %s has non-positive velocity or '
                         'acceleration limits', group.name)
            return False

        positions = trajectory.positions()
        if not np.all(np.isfinite(positions)):
            logger.error('trajectory contains non-finite positions')
            return False

        n_wp = len(positions)
        trajectory.set_waypoint_duration_from_previous(0, 0.0)
        if n_wp == 1:
            trajectory.set_waypoint_velocities(0, np.zeros_like(vmax))
            trajectory.set_waypoint_accelerations(0, np.zeros_like(amax))
            return True

        deltas = np.diff(positions, axis=0)
        durations = np.max(np.abs(deltas) / vmax[None, :], axis=1)
        durations = np.maximum(durations, self.min_segment_duration)
        durations = self._apply_acceleration_constraints(
            deltas, durations, amax)

        velocities, accelerations = self._waypoint_derivatives(
            deltas, durations)
        for i in range(n_wp):
            if i > 0:
                trajectory.set_waypoint_duration_from_previous(
                    i, durations[i - 1])
            trajectory.set_waypoint_velocities(i, velocities[i])
            trajectory.set_waypoint_accelerations(i, accelerations[i])
        return True

    def _point_accelerations(self, deltas, durations):
        """Finite-difference acceleration at every waypoint.

        The first and last waypoints accelerate from and to rest.
        """
        seg_vel = deltas / durations[:, None]
        zeros = np.zeros((1, deltas.shape[1]))
        vel = np.vstack((zeros, seg_vel, zeros))
        dur = np.hstack((durations[:1], durations, durations[-1:]))
        return 2.0 * (vel[1:] - vel[:-1]) / (dur[1:] + dur[:-1])[:, None]

    def _apply_acceleration_constraints(self, deltas, durations, amax):
        durations = durations.copy()
        n_seg = len(durations)
        for _ in range(self.max_iterations):
            acc = self._point_accelerations(deltas, durations)
            ratio = np.max(np.abs(acc) / amax[None, :], axis=1)
            violated = np.where(ratio > 1.0 + 1e-9)[0]
            if len(violated) == 0:
                break
            for i in violated:
                factor = np.sqrt(ratio[i])
                # waypoint i touches segments i - 1 and i
                for seg in (i - 1, i):
                    if 0 <= seg < n_seg:
                        durations[seg] *= factor
        else:
            logger.debug('acceleration constraints not met after %d '
                         'iterations', self.max_iterations)
        return durations

    def _waypoint_derivatives(self, deltas, durations):
        n_wp = len(durations) + 1
        n_dof = deltas.shape[1]
        velocities = np.zeros((n_wp, n_dof))
        for i in range(1, n_wp - 1):
            velocities[i] = (deltas[i - 1] + deltas[i]) \
                / (durations[i - 1] + durations[i])
        accelerations = np.zeros((n_wp, n_dof))
        accelerations[0] = (velocities[1] - velocities[0]) / durations[0]
        accelerations[-1] = (velocities[-1] - velocities[-2]) / durations[-1]
        for i in range(1, n_wp - 1):
            accelerations[i] = (velocities[i + 1] - velocities[i - 1]) \
                / (durations[i - 1] + durations[i])
        return velocities, accelerations
