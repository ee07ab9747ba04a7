# flake8: noqa

from skstomp.trajectory.robot_trajectory import RobotTrajectory

from skstomp.trajectory.time_parameterization import IterativeParabolicTimeParameterization
from skstomp.trajectory.time_parameterization import TimeParameterizationBase
