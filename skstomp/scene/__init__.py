# flake8: noqa

from skstomp.scene.obstacle import BoxObstacle
from skstomp.scene.obstacle import CylinderObstacle
from skstomp.scene.obstacle import Obstacle
from skstomp.scene.obstacle import SphereObstacle
from skstomp.scene.obstacle import obstacle_from_dict

from skstomp.scene.planning_scene import PlanningScene
