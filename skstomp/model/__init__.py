# flake8: noqa

from skstomp.model.joint import FixedJoint
from skstomp.model.joint import Joint
from skstomp.model.joint import Link
from skstomp.model.joint import PrismaticJoint
from skstomp.model.joint import RevoluteJoint
from skstomp.model.joint import make_joint

from skstomp.model.kinematic_model import JointModelGroup
from skstomp.model.kinematic_model import KinematicModel

from skstomp.model.robot_state import JointState
from skstomp.model.robot_state import RobotState
