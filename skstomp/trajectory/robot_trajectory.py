import numpy as np

from skstomp.messages import JointTrajectory
from skstomp.messages import JointTrajectoryPoint


class RobotTrajectory(object):
    """Sequence of robot states with timing for one planning group.

    Each waypoint stores a full `RobotState`, the duration since the
    previous waypoint, and the group's joint velocities and
    accelerations.

    Parameters
    ----------
    kinematic_model : skstomp.model.KinematicModel
        robot model.
    group_name : str
        planning group.
    """

    def __init__(self, kinematic_model, group_name):
        self.kinematic_model = kinematic_model
        self.group_name = group_name
        self.group = kinematic_model.get_joint_model_group(group_name)
        self.clear()

    def clear(self):
        self._waypoints = []
        self._durations = []
        self._velocities = []
        self._accelerations = []

    @property
    def waypoint_count(self):
        return len(self._waypoints)

    def empty(self):
        return len(self._waypoints) == 0

    def add_suffix_waypoint(self, state, duration=0.0):
        n = self.group.variable_count
        self._waypoints.append(state)
        self._durations.append(float(duration))
        self._velocities.append(np.zeros(n))
        self._accelerations.append(np.zeros(n))

    def get_waypoint(self, index):
        return self._waypoints[index]

    def get_first_waypoint(self):
        return self._waypoints[0]

    def get_last_waypoint(self):
        return self._waypoints[-1]

    def get_waypoint_duration_from_previous(self, index):
        return self._durations[index]

    def set_waypoint_duration_from_previous(self, index, duration):
        self._durations[index] = float(duration)

    def get_waypoint_durations_from_start(self):
        return np.cumsum(self._durations) if self._durations \
            else np.zeros(0)

    def get_duration(self):
        return float(np.sum(self._durations))

    def set_waypoint_velocities(self, index, velocities):
        self._velocities[index] = np.asarray(velocities, dtype=np.float64)

    def set_waypoint_accelerations(self, index, accelerations):
        self._accelerations[index] = np.asarray(
            accelerations, dtype=np.float64)

    def positions(self):
        """Group positions as an array of shape (n_waypoints, n_dof)."""
        n = self.group.variable_count
        return np.array([
            s.get_joint_group_positions(self.group_name)
            for s in self._waypoints]).reshape(len(self._waypoints), n)

    def set_robot_trajectory_msg(self, reference_state, trajectory):
        """Fill the waypoints from a joint trajectory.

        Joints not listed in `trajectory.joint_names` keep their value
        in `reference_state`.

        Parameters
        ----------
        reference_state : skstomp.model.RobotState
            state giving the positions of the other joints.
        trajectory : skstomp.messages.JointTrajectory
            trajectory to copy.
        """
        self.clear()
        index = {name: i for i, name in enumerate(trajectory.joint_names)}
        group_index = [index.get(name)
                       for name in self.group.active_joint_names]
        previous_time = 0.0
        for point in trajectory.points:
            state = reference_state.copy()
            for name, value in zip(trajectory.joint_names, point.positions):
                state.set_variable_position(name, value)
            self.add_suffix_waypoint(
                state, point.time_from_start - previous_time)
            previous_time = point.time_from_start
            i = self.waypoint_count - 1
            self._velocities[i] = self._select(point.velocities, group_index)
            self._accelerations[i] = self._select(
                point.accelerations, group_index)
        return self

    @staticmethod
    def _select(values, group_index):
        values = np.asarray(values, dtype=np.float64)
        return np.array([
            values[i] if i is not None and i < len(values) else 0.0
            for i in group_index])

    def get_robot_trajectory_msg(self):
        """Export the group's joints as a `JointTrajectory`."""
        times = self.get_waypoint_durations_from_start()
        points = [
            JointTrajectoryPoint(
                state.get_joint_group_positions(self.group_name),
                velocities=self._velocities[i].copy(),
                accelerations=self._accelerations[i].copy(),
                time_from_start=times[i])
            for i, state in enumerate(self._waypoints)]
        return JointTrajectory(self.group.active_joint_names, points)

    def __repr__(self):
        return '<RobotTrajectory {} ({} waypoints, {:.3f} sec)>'.format(
            self.group_name, self.waypoint_count, self.get_duration())
