import unittest

import numpy as np
from numpy import testing

from skstomp.messages import MotionPlanRequest
from skstomp.model import JointState
from skstomp.models import SampleArm
from skstomp.planner.translation import joint_trajectory_to_parameters
from skstomp.planner.translation import parameters_to_joint_trajectory
from skstomp.planner.translation import to_robot_trajectory
from skstomp.planner.translation import validate_trajectory
from skstomp.scene import PlanningScene
from skstomp.scene import SphereObstacle
from skstomp.trajectory import IterativeParabolicTimeParameterization
from skstomp.trajectory import TimeParameterizationBase


class FailingTimeParameterization(TimeParameterizationBase):

    def __init__(self):
        self.called_with = None

    def compute_time_stamps(self, trajectory,
                            max_velocity_scaling_factor=1.0,
                            max_acceleration_scaling_factor=1.0):
        self.called_with = (max_velocity_scaling_factor,
                            max_acceleration_scaling_factor)
        return False


class TestTranslation(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()
        cls.names = cls.robot.get_joint_model_group(
            'manipulator').active_joint_names

    def test_parameters_round_trip(self):
        parameters = np.random.RandomState(0).randn(6, 12)
        trajectory = parameters_to_joint_trajectory(parameters, self.names)
        self.assertEqual(len(trajectory), 12)
        self.assertEqual(trajectory.joint_names, self.names)
        for point in trajectory.points:
            self.assertEqual(point.time_from_start, 0.0)
            testing.assert_equal(point.velocities, np.zeros(6))
            testing.assert_equal(point.accelerations, np.zeros(6))
        testing.assert_equal(
            joint_trajectory_to_parameters(trajectory), parameters)

        with self.assertRaises(ValueError):
            parameters_to_joint_trajectory(parameters, self.names[:3])

    def test_to_robot_trajectory(self):
        start = self.robot.reset_manip_pose()
        parameters = np.linspace(start, start + 0.3, 20).T
        request = MotionPlanRequest(
            'manipulator', start_state=JointState(self.names, start),
            max_velocity_scaling_factor=0.5)
        trajectory = to_robot_trajectory(
            parameters, request, self.robot, 'manipulator',
            IterativeParabolicTimeParameterization())
        self.assertEqual(trajectory.waypoint_count, 20)
        testing.assert_almost_equal(trajectory.positions(), parameters.T)
        times = trajectory.get_waypoint_durations_from_start()
        self.assertEqual(times[0], 0.0)
        self.assertTrue(np.all(np.diff(times) > 0.0))

    def test_retiming_failure_keeps_trajectory(self):
        start = self.robot.reset_manip_pose()
        parameters = np.linspace(start, start + 0.3, 20).T
        request = MotionPlanRequest(
            'manipulator', start_state=JointState(self.names, start),
            max_velocity_scaling_factor=0.3,
            max_acceleration_scaling_factor=0.2)
        parameterizer = FailingTimeParameterization()
        trajectory = to_robot_trajectory(
            parameters, request, self.robot, 'manipulator', parameterizer)
        self.assertEqual(parameterizer.called_with, (0.3, 0.2))
        self.assertEqual(trajectory.waypoint_count, 20)
        self.assertEqual(trajectory.get_duration(), 0.0)

    def test_validate_trajectory(self):
        parameters = np.zeros((6, 5))
        parameters[1] = np.linspace(1.5, -1.5, 5)
        trajectory = to_robot_trajectory(
            parameters, MotionPlanRequest('manipulator'), self.robot,
            'manipulator', IterativeParabolicTimeParameterization())
        scene = PlanningScene(self.robot)
        self.assertTrue(validate_trajectory(trajectory, scene, 'manipulator'))
        self.assertTrue(validate_trajectory(trajectory, None, 'manipulator'))

        scene.add_obstacle(
            SphereObstacle('ball', 0.1, position=[0.0, 0.0, 0.8]))
        self.assertFalse(
            validate_trajectory(trajectory, scene, 'manipulator'))
