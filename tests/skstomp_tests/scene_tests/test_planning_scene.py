import unittest

import numpy as np
from numpy import testing

from skstomp.messages import JointTrajectory
from skstomp.messages import JointTrajectoryPoint
from skstomp.model import RobotState
from skstomp.models import SampleArm
from skstomp.scene import BoxObstacle
from skstomp.scene import CylinderObstacle
from skstomp.scene import obstacle_from_dict
from skstomp.scene import PlanningScene
from skstomp.scene import SphereObstacle
from skstomp.trajectory import RobotTrajectory


class TestObstacle(unittest.TestCase):

    def test_box(self):
        box = BoxObstacle('box', [1.0, 1.0, 1.0], position=[1.0, 0, 0])
        sd = box(np.array([[1.0, 0, 0], [2.0, 0, 0], [1.0, 0, 1.0]]))
        testing.assert_almost_equal(sd, [-0.5, 0.5, 0.5])

    def test_rotated_box(self):
        # rotate 90 deg about z, quaternion [w, x, y, z]
        c = np.cos(np.pi / 4)
        box = BoxObstacle('box', [2.0, 1.0, 1.0], orientation=[c, 0, 0, c])
        sd = box(np.array([[0.0, 1.0, 0.0], [1.0, 0.0, 0.0]]))
        testing.assert_almost_equal(sd, [0.0, 0.5])

    def test_sphere(self):
        sphere = SphereObstacle('ball', 0.5, position=[0, 0, 1.0])
        sd = sphere(np.array([[0, 0, 1.0], [0, 0, 2.0]]))
        testing.assert_almost_equal(sd, [-0.5, 0.5])

    def test_cylinder(self):
        cylinder = CylinderObstacle('pole', 0.5, 2.0)
        sd = cylinder(np.array([[0, 0, 0], [1.0, 0, 0], [0, 0, 2.0]]))
        testing.assert_almost_equal(sd, [-0.5, 0.5, 1.0])

    def test_obstacle_from_dict(self):
        obstacle = obstacle_from_dict(
            {'type': 'box', 'name': 'table', 'extents': [1, 1, 0.1]})
        self.assertIsInstance(obstacle, BoxObstacle)
        with self.assertRaises(ValueError):
            obstacle_from_dict({'type': 'mesh', 'name': 'mesh'})


class TestPlanningScene(unittest.TestCase):

    @classmethod
    def setup_class(cls):
        cls.robot = SampleArm()

    def test_obstacle_management(self):
        scene = PlanningScene(self.robot)
        self.assertEqual(len(scene.obstacles), 0)
        self.assertGreater(scene.n_collision_spheres, 0)
        self.assertTrue(np.all(np.isinf(scene.clearances({}))))

        scene.add_obstacle({'type': 'sphere', 'name': 'ball', 'radius': 0.1,
                            'position': [1.0, 0, 0]})
        self.assertEqual(len(scene.obstacles), 1)
        scene.remove_obstacle('ball')
        self.assertEqual(len(scene.obstacles), 0)
        scene.add_obstacle(SphereObstacle('ball', 0.1))
        scene.clear_obstacles()
        self.assertEqual(len(scene.obstacles), 0)

    def test_state_collision(self):
        # the arm stands along the z axis at the zero pose
        scene = PlanningScene(self.robot, obstacles=[
            SphereObstacle('ball', 0.1, position=[0.0, 0.0, 0.8])])
        state = RobotState(self.robot)
        self.assertTrue(scene.is_state_colliding(state))
        self.assertFalse(scene.is_state_valid(state, 'manipulator'))

        state.set_variable_position('joint_2', np.pi / 2)
        self.assertFalse(scene.is_state_colliding(state))
        self.assertTrue(scene.is_state_valid(state, 'manipulator'))
        self.assertFalse(scene.is_state_colliding(state.as_dict()))

    def test_path_validity(self):
        group = self.robot.get_joint_model_group('manipulator')
        names = group.active_joint_names
        reference = RobotState(self.robot)

        # joint_2 swings the arm from +x to -x through the upright pose
        points = [JointTrajectoryPoint([0.0, q, 0.0, 0.0, 0.0, 0.0])
                  for q in [1.5, -1.5]]
        trajectory = RobotTrajectory(self.robot, 'manipulator')
        trajectory.set_robot_trajectory_msg(
            reference, JointTrajectory(names, points))

        scene = PlanningScene(self.robot)
        self.assertTrue(scene.is_path_valid(trajectory))

        scene.add_obstacle(
            SphereObstacle('ball', 0.1, position=[0.0, 0.0, 0.8]))
        # both waypoints are collision free, the motion between them is not
        self.assertFalse(scene.is_state_colliding(trajectory.get_waypoint(0)))
        self.assertFalse(scene.is_state_colliding(trajectory.get_waypoint(1)))
        self.assertFalse(scene.is_path_valid(trajectory, 'manipulator'))
