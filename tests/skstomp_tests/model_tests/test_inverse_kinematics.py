import copy
import unittest

import numpy as np
from numpy import testing
from trimesh.transformations import quaternion_from_matrix

from skstomp.model import RobotState
from skstomp.model.inverse_kinematics import group_pose_and_jacobian
from skstomp.model.inverse_kinematics import solve_ik
from skstomp.models import SampleArm


def jacobian_test_util(func, x0, decimal=5):
    f0, jac = func(x0)
    n_dim = len(x0)

    eps = 1e-7
    jac_numerical = np.zeros(jac.shape)
    for idx in range(n_dim):
        x1 = copy.copy(x0)
        x1[idx] += eps
        f1, _ = func(x1)
        jac_numerical[:, idx] = (f1 - f0) / eps

    testing.assert_almost_equal(jac, jac_numerical, decimal=decimal)


class TestInverseKinematics(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()
        cls.group = cls.robot.get_joint_model_group('manipulator')

    def test_jacobian(self):
        av0 = self.robot.reset_manip_pose() + 0.1

        def fk(av):
            return group_pose_and_jacobian(
                self.robot, self.group, av, 'tool0')
        jacobian_test_util(fk, av0)

    def test_solve_ik_pose(self):
        av_target = self.robot.reset_manip_pose() + 0.1
        tf = self.robot.forward_kinematics('manipulator', av_target)
        pos = tf[:3, 3]
        quat = quaternion_from_matrix(tf)

        av = solve_ik(self.robot, self.group, pos, quat,
                      av_init=self.robot.reset_manip_pose(),
                      random_state=np.random.RandomState(0))
        self.assertIsNotNone(av)
        tf_solved = self.robot.forward_kinematics('manipulator', av)
        testing.assert_almost_equal(tf_solved[:3, 3], pos, decimal=3)
        testing.assert_almost_equal(tf_solved[:3, :3], tf[:3, :3], decimal=2)

    def test_solve_ik_unreachable(self):
        av = solve_ik(self.robot, self.group, [5.0, 0.0, 0.0],
                      attempts=3, timeout=0.01,
                      random_state=np.random.RandomState(0))
        self.assertIsNone(av)

    def test_set_from_ik(self):
        av_target = self.robot.reset_manip_pose() - 0.1
        pos = self.robot.forward_kinematics('manipulator', av_target)[:3, 3]

        state = RobotState(self.robot)
        state.set_joint_group_positions(
            'manipulator', self.robot.reset_manip_pose())
        self.assertTrue(state.set_from_ik(
            'manipulator', pos, random_state=np.random.RandomState(0)))
        testing.assert_almost_equal(
            state.get_global_link_transform('tool0')[:3, 3], pos, decimal=3)
        self.assertTrue(state.satisfies_bounds('manipulator'))

        before = state.get_joint_group_positions('manipulator')
        self.assertFalse(state.set_from_ik(
            'manipulator', [5.0, 0.0, 0.0], attempts=2, timeout=0.01,
            random_state=np.random.RandomState(0)))
        testing.assert_equal(
            state.get_joint_group_positions('manipulator'), before)
