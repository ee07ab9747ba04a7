#!/usr/bin/env python

import argparse
import logging
import os.path as osp
import threading
import time

import numpy as np

from skstomp.messages import Constraints
from skstomp.messages import MotionPlanRequest
from skstomp.model import JointState
from skstomp.models import SampleArm
from skstomp.planner import create_planners
from skstomp.scene import SphereObstacle


parser = argparse.ArgumentParser(
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
parser.add_argument(
    '--config', type=str,
    default=osp.join(osp.dirname(osp.abspath(__file__)), 'stomp_config.yaml'),
    help='planner configuration file.')
parser.add_argument(
    '--timeout', type=float, default=None,
    help='terminate the solve after this many seconds.')
parser.add_argument(
    '--verbose', action='store_true',
    help='print optimizer logs.')
args = parser.parse_args()

logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

robot_model = SampleArm()
planners = create_planners(args.config, robot_model)
planner = planners['manipulator']

# a ball right on the straight line path between start and goal
planner.planning_scene.add_obstacle(
    SphereObstacle('ball', 0.06, position=[0.371, 0.056, 0.585]))

group = robot_model.get_joint_model_group('manipulator')
av_start = robot_model.reset_manip_pose()
av_goal = av_start + 0.3
request = MotionPlanRequest(
    'manipulator',
    start_state=JointState(group.active_joint_names, av_start),
    goal_constraints=[
        Constraints.from_joint_positions(group.active_joint_names, av_goal)],
    max_velocity_scaling_factor=0.5)

if not planner.can_service_request(request):
    raise RuntimeError('request cannot be serviced')

timer = None
if args.timeout is not None:
    timer = threading.Timer(args.timeout, planner.terminate)
    timer.start()

ts = time.time()
response = planner.solve(request)
print("solving time : {0} sec".format(time.time() - ts))
if timer is not None:
    timer.cancel()

print("error code : {}".format(response.error_code.name))
if response.trajectory is not None:
    trajectory = response.trajectory
    print("duration : {0:.3f} sec, {1} waypoints".format(
        trajectory.get_duration(), trajectory.waypoint_count))
    msg = trajectory.get_robot_trajectory_msg()
    for point in msg.points[::5]:
        tip = robot_model.forward_kinematics('manipulator', point.positions)
        print("t = {0:.3f}  tool0 = {1}".format(
            point.time_from_start, np.round(tip[:3, 3], 3)))
