import unittest

from skstomp.messages import Constraints
from skstomp.messages import JointConstraint
from skstomp.messages import MotionPlanRequest
from skstomp.planner import check_request


class TestCheckRequest(unittest.TestCase):

    def setUp(self):
        self.joint_goal = Constraints(
            joint_constraints=[JointConstraint('joint_1', 0.5)])

    def test_serviceable(self):
        request = MotionPlanRequest(
            'manipulator', goal_constraints=[self.joint_goal])
        self.assertEqual(check_request(request, 'manipulator'), (True, ''))

    def test_group_mismatch(self):
        request = MotionPlanRequest(
            'left_arm', goal_constraints=[self.joint_goal])
        serviceable, reason = check_request(request, 'manipulator')
        self.assertFalse(serviceable)
        self.assertIn('left_arm', reason)

    def test_goal_count(self):
        for goals in [[], [self.joint_goal, self.joint_goal]]:
            request = MotionPlanRequest('manipulator', goal_constraints=goals)
            serviceable, reason = check_request(request, 'manipulator')
            self.assertFalse(serviceable)
            self.assertIn('exactly one goal', reason)

    def test_goal_without_joint_constraints(self):
        request = MotionPlanRequest(
            'manipulator', goal_constraints=[Constraints.from_pose(
                'tool0', [0.5, 0.0, 0.5], [1.0, 0.0, 0.0, 0.0])])
        serviceable, reason = check_request(request, 'manipulator')
        self.assertFalse(serviceable)
        self.assertIn('no joint constraints', reason)
