import unittest

import numpy as np
from numpy import testing

from skstomp.messages import JointTrajectory
from skstomp.messages import JointTrajectoryPoint
from skstomp.model import RobotState
from skstomp.models import SampleArm
from skstomp.trajectory import IterativeParabolicTimeParameterization
from skstomp.trajectory import RobotTrajectory


def make_trajectory(robot, positions, times=None):
    group = robot.get_joint_model_group('manipulator')
    if times is None:
        times = np.zeros(len(positions))
    points = [JointTrajectoryPoint(p, time_from_start=t)
              for p, t in zip(positions, times)]
    trajectory = RobotTrajectory(robot, 'manipulator')
    trajectory.set_robot_trajectory_msg(
        RobotState(robot), JointTrajectory(group.active_joint_names, points))
    return trajectory


class TestRobotTrajectory(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()

    def test_msg_conversion(self):
        positions = np.linspace(0.0, 0.5, 5)[:, None] * np.ones((5, 6))
        trajectory = make_trajectory(
            self.robot, positions, times=[0.0, 0.5, 1.0, 2.0, 2.5])
        self.assertEqual(trajectory.waypoint_count, 5)
        self.assertFalse(trajectory.empty())
        testing.assert_almost_equal(trajectory.positions(), positions)
        self.assertAlmostEqual(
            trajectory.get_waypoint_duration_from_previous(3), 1.0)
        self.assertAlmostEqual(trajectory.get_duration(), 2.5)

        msg = trajectory.get_robot_trajectory_msg()
        testing.assert_almost_equal(msg.positions(), positions)
        testing.assert_almost_equal(
            msg.times_from_start(), [0.0, 0.5, 1.0, 2.0, 2.5])

    def test_other_joints_keep_reference(self):
        reference = RobotState(self.robot, {'joint_6': 0.7})
        points = [JointTrajectoryPoint([0.1, 0.2]),
                  JointTrajectoryPoint([0.3, 0.4])]
        trajectory = RobotTrajectory(self.robot, 'manipulator')
        trajectory.set_robot_trajectory_msg(
            reference, JointTrajectory(['joint_1', 'joint_2'], points))
        last = trajectory.get_last_waypoint()
        self.assertAlmostEqual(last.get_variable_position('joint_1'), 0.3)
        self.assertAlmostEqual(last.get_variable_position('joint_6'), 0.7)
        self.assertAlmostEqual(
            reference.get_variable_position('joint_1'), 0.0)


class TestIterativeParabolicTimeParameterization(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()
        cls.group = cls.robot.get_joint_model_group('manipulator')

    def _check_limits(self, trajectory, velocity_scale=1.0):
        times = trajectory.get_waypoint_durations_from_start()
        self.assertTrue(np.all(np.diff(times) > 0.0))
        positions = trajectory.positions()
        vmax = np.array([j.max_velocity for j in self.group.active_joints])
        segment_velocities = np.diff(positions, axis=0) \
            / np.diff(times)[:, None]
        self.assertTrue(np.all(
            np.abs(segment_velocities) <= vmax * velocity_scale + 1e-9))

    def test_compute_time_stamps(self):
        start = self.robot.reset_manip_pose()
        positions = start + np.linspace(0.0, 0.3, 40)[:, None]
        trajectory = make_trajectory(self.robot, positions)
        self.assertAlmostEqual(trajectory.get_duration(), 0.0)

        parameterizer = IterativeParabolicTimeParameterization()
        self.assertTrue(parameterizer.compute_time_stamps(trajectory))
        self._check_limits(trajectory)
        msg = trajectory.get_robot_trajectory_msg()
        self.assertEqual(msg.times_from_start()[0], 0.0)
        testing.assert_almost_equal(msg.points[0].velocities, np.zeros(6))
        testing.assert_almost_equal(msg.points[-1].velocities, np.zeros(6))
        # positions are not modified
        testing.assert_almost_equal(trajectory.positions(), positions)

    def test_velocity_scaling(self):
        positions = np.linspace(0.0, 1.0, 10)[:, None] * np.ones((10, 6))
        parameterizer = IterativeParabolicTimeParameterization()

        fast = make_trajectory(self.robot, positions)
        self.assertTrue(parameterizer.compute_time_stamps(fast, 1.0, 1.0))
        slow = make_trajectory(self.robot, positions)
        self.assertTrue(parameterizer.compute_time_stamps(slow, 0.5, 0.5))
        self._check_limits(slow, velocity_scale=0.5)
        self.assertGreater(slow.get_duration(), fast.get_duration())

        # an invalid scaling factor falls back to 1.0
        invalid = make_trajectory(self.robot, positions)
        self.assertTrue(parameterizer.compute_time_stamps(invalid, 0.0, 2.0))
        self.assertAlmostEqual(invalid.get_duration(), fast.get_duration())

    def test_failure(self):
        parameterizer = IterativeParabolicTimeParameterization()
        empty = RobotTrajectory(self.robot, 'manipulator')
        self.assertFalse(parameterizer.compute_time_stamps(empty))

        positions = np.zeros((3, 6))
        positions[1, 0] = np.nan
        trajectory = make_trajectory(self.robot, positions)
        self.assertFalse(parameterizer.compute_time_stamps(trajectory))
