import os
import tempfile
import unittest

import numpy as np
from numpy import testing
import yaml

from skstomp.model import FixedJoint
from skstomp.model import JointState
from skstomp.model import KinematicModel
from skstomp.model import make_joint
from skstomp.model import RevoluteJoint
from skstomp.model import RobotState
from skstomp.models import SampleArm
from skstomp.models.sample_arm import sample_arm_description


class TestJoint(unittest.TestCase):

    def test_make_joint(self):
        joint = make_joint('revolute', 'j', 'a', 'b', axis=[0, 0, 2],
                           min_position=-1.0, max_position=1.0)
        self.assertIsInstance(joint, RevoluteJoint)
        testing.assert_almost_equal(joint.axis, [0, 0, 1])
        self.assertTrue(joint.is_active)

        joint = make_joint('continuous', 'j', 'a', 'b')
        self.assertEqual(joint.min_position, -np.inf)
        self.assertEqual(joint.max_position, np.inf)

        joint = make_joint('fixed', 'j', 'a', 'b', axis=[1, 0, 0])
        self.assertIsInstance(joint, FixedJoint)
        self.assertFalse(joint.is_active)

        with self.assertRaises(ValueError):
            make_joint('planar', 'j', 'a', 'b')

    def test_bounds(self):
        joint = make_joint('revolute', 'j', 'a', 'b',
                           min_position=0.5, max_position=1.0)
        self.assertEqual(joint.default_position, 0.5)
        self.assertEqual(joint.enforce_bounds(2.0), 1.0)
        self.assertTrue(joint.satisfies_bounds(1.0))
        self.assertFalse(joint.satisfies_bounds(1.1))
        self.assertTrue(joint.satisfies_bounds(1.1, margin=0.2))

        with self.assertRaises(ValueError):
            make_joint('revolute', 'j', 'a', 'b',
                       min_position=1.0, max_position=0.0)

    def test_revolute_transform(self):
        joint = make_joint('revolute', 'j', 'a', 'b', xyz=[0, 0, 1],
                           axis=[0, 0, 1])
        tf = joint.transform(np.pi / 2)
        testing.assert_almost_equal(tf[:3, 3], [0, 0, 1])
        testing.assert_almost_equal(tf[:3, :3].dot([1, 0, 0]), [0, 1, 0])

    def test_prismatic_transform(self):
        joint = make_joint('prismatic', 'j', 'a', 'b', axis=[1, 0, 0],
                           min_position=0.0, max_position=1.0)
        testing.assert_almost_equal(joint.transform(0.3)[:3, 3],
                                    [0.3, 0, 0])


class TestKinematicModel(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()

    def test_group(self):
        group = self.robot.get_joint_model_group('manipulator')
        self.assertEqual(group.variable_count, 6)
        self.assertEqual(group.active_joint_names,
                         ['joint_{}'.format(i) for i in range(1, 7)])
        self.assertEqual(len(group.joint_names), 7)
        self.assertEqual(group.tip_link, 'tool0')
        self.assertTrue(self.robot.has_joint_model_group('manipulator'))
        self.assertFalse(self.robot.has_joint_model_group('gripper'))
        with self.assertRaises(KeyError):
            self.robot.get_joint_model_group('gripper')

    def test_group_enforce_bounds(self):
        group = self.robot.get_joint_model_group('manipulator')
        clipped = group.enforce_bounds([4.0, 3.0, -3.0, 0.0, 0.0, 0.0])
        testing.assert_almost_equal(
            clipped, [np.pi, 2.5, -2.5, 0.0, 0.0, 0.0])
        self.assertTrue(group.satisfies_bounds(clipped))
        self.assertFalse(group.satisfies_bounds(
            [4.0, 0.0, 0.0, 0.0, 0.0, 0.0]))
        with self.assertRaises(ValueError):
            group.enforce_bounds([0.0, 0.0])

    def test_forward_kinematics(self):
        # the arm stands straight up at the zero pose
        tf = self.robot.forward_kinematics('manipulator', np.zeros(6))
        testing.assert_almost_equal(tf[:3, 3], [0, 0, 1.3])
        testing.assert_almost_equal(tf[:3, :3], np.eye(3))

        av = np.zeros(6)
        av[1] = np.pi / 2
        tf = self.robot.forward_kinematics('manipulator', av)
        testing.assert_almost_equal(tf[:3, 3], [1.0, 0, 0.3])

        tf = self.robot.forward_kinematics(
            'manipulator', np.zeros(6), link_name='link_2')
        testing.assert_almost_equal(tf[:3, 3], [0, 0, 0.3])

    def test_invalid_chain(self):
        description = sample_arm_description()
        description['joints'][1]['parent_link'] = 'unknown_link'
        with self.assertRaises(ValueError):
            KinematicModel.from_dict(description)

        description = sample_arm_description()
        description['groups'][0]['joints'].append('unknown_joint')
        with self.assertRaises(ValueError):
            KinematicModel.from_dict(description)

    def test_from_yaml(self):
        description = sample_arm_description()
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'arm.yaml')
            with open(path, 'w') as f:
                yaml.safe_dump(description, f)
            model = KinematicModel.from_yaml(path)
        self.assertEqual(model.variable_names, self.robot.variable_names)
        av = self.robot.reset_manip_pose()
        testing.assert_almost_equal(
            model.forward_kinematics('manipulator', av),
            self.robot.forward_kinematics('manipulator', av))


class TestRobotState(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()

    def test_from_joint_state(self):
        group = self.robot.get_joint_model_group('manipulator')
        names = list(reversed(group.active_joint_names))
        positions = [0.1 * (i + 1) for i in range(6)]
        original = RobotState.from_joint_state(
            self.robot,
            JointState(names + ['unknown'], positions + [1.0]))
        for name, value in zip(names, positions):
            self.assertAlmostEqual(original.get_variable_position(name), value)

        state = original.copy()
        state.set_variable_position('joint_1', 0.0)
        self.assertAlmostEqual(original.get_variable_position('joint_1'), 0.6)

        with self.assertRaises(KeyError):
            state.set_variable_position('unknown', 0.0)

    def test_group_positions_and_bounds(self):
        state = RobotState(self.robot)
        testing.assert_almost_equal(
            state.get_joint_group_positions('manipulator'), np.zeros(6))
        state.set_joint_group_positions(
            'manipulator', [0.0, 3.0, 0.0, 0.0, 0.0, 0.0])
        self.assertFalse(state.satisfies_bounds('manipulator'))
        state.enforce_bounds('manipulator')
        self.assertTrue(state.satisfies_bounds())
        self.assertAlmostEqual(state.get_variable_position('joint_2'), 2.5)
        with self.assertRaises(ValueError):
            state.set_joint_group_positions('manipulator', [0.0])

    def test_to_joint_state(self):
        state = RobotState(self.robot, {'joint_3': 0.5})
        js = state.to_joint_state()
        self.assertEqual(js.name, self.robot.variable_names)
        self.assertEqual(js.as_dict()['joint_3'], 0.5)