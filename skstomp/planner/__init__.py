# flake8: noqa

from skstomp.planner.config import PlanningConfiguration
from skstomp.planner.config import load_planner_configs
from skstomp.planner.config import parse_group_config
from skstomp.planner.config import resolve_config
from skstomp.planner.driver import OptimizationDriver
from skstomp.planner.eligibility import check_request
from skstomp.planner.errors import BuildError
from skstomp.planner.errors import ConfigError
from skstomp.planner.errors import ConfigParseError
from skstomp.planner.errors import GroupNotFoundError
from skstomp.planner.errors import IkFailureError
from skstomp.planner.errors import MissingGoalError
from skstomp.planner.errors import NoActiveJointsError
from skstomp.planner.errors import NoSolutionError
from skstomp.planner.errors import SeedShapeMismatchError
from skstomp.planner.errors import TaskBindingError
from skstomp.planner.problem_builder import ProblemMode
from skstomp.planner.problem_builder import ProblemSpec
from skstomp.planner.problem_builder import build_problem
from skstomp.planner.stomp_planner import PlannerSetupResult
from skstomp.planner.stomp_planner import StompPlanner
from skstomp.planner.stomp_planner import create_planner
from skstomp.planner.stomp_planner import create_planners
