from logging import getLogger
import time

from skstomp.messages import MotionPlanDetailedResponse
from skstomp.messages import MotionPlanResponse
from skstomp.messages import MoveItErrorCode
from skstomp.optimizer import Stomp
from skstomp.optimizer import StompOptimizationTask
from skstomp.planner.config import load_planner_configs
from skstomp.planner.config import parse_group_config
from skstomp.planner.driver import OptimizationDriver
from skstomp.planner.eligibility import check_request
from skstomp.planner.errors import BuildError
from skstomp.planner.errors import ConfigError
from skstomp.planner.errors import ConfigParseError
from skstomp.planner.errors import NoSolutionError
from skstomp.planner.errors import TaskBindingError
from skstomp.planner.problem_builder import build_problem
from skstomp.planner.translation import to_robot_trajectory
from skstomp.planner.translation import validate_trajectory
from skstomp.scene import PlanningScene
from skstomp.trajectory import IterativeParabolicTimeParameterization


logger = getLogger(__name__)


class StompPlanner(object):
    """STOMP motion planner of one planning group.

    Parameters
    ----------
    group : str
        planning group.
    config : dict
        group record with an `optimization` block and an optional
        `task` block.
    kinematic_model : skstomp.model.KinematicModel
        robot model.
    optimizer : skstomp.optimizer.base.OptimizerBase or None
        optimizer to drive. If None, a `Stomp` optimizer with a
        `StompOptimizationTask` built from the `task` block is used.
    time_parameterizer : skstomp.trajectory.TimeParameterizationBase or None
        re-timing of the solutions. Defaults to
        `IterativeParabolicTimeParameterization`.

    Raises
    ------
    ConfigError
        if the configuration of the group cannot be resolved.

    Examples
    --------
    >>> from skstomp.models import SampleArm
    >>> from skstomp.planner import StompPlanner
    >>> robot = SampleArm()
    >>> planner = StompPlanner('manipulator', {'optimization': {}}, robot)
    >>> planner.config.num_dimensions
    6
    """

    description = 'STOMP'

    def __init__(self, group, config, kinematic_model, optimizer=None,
                 time_parameterizer=None):
        self._group_name = group
        self.kinematic_model = kinematic_model
        self._config, task_config = parse_group_config(
            group, config, kinematic_model)

        self.task = getattr(optimizer, 'task', None)
        if self.task is None:
            try:
                self.task = StompOptimizationTask(
                    kinematic_model, group, task_config)
            except ValueError as e:
                raise ConfigParseError(group, str(e))
        if optimizer is None:
            optimizer = Stomp(self._config, self.task)
        self.optimizer = optimizer
        self.driver = OptimizationDriver(optimizer)

        if time_parameterizer is None:
            time_parameterizer = IterativeParabolicTimeParameterization()
        self.time_parameterizer = time_parameterizer
        self.planning_scene = PlanningScene(kinematic_model)
        self._request = None

    @property
    def group_name(self):
        return self._group_name

    @property
    def config(self):
        return self._config

    def set_planning_scene(self, planning_scene):
        self.planning_scene = planning_scene

    def set_motion_plan_request(self, request):
        self._request = request

    def get_motion_plan_request(self):
        return self._request

    def can_service_request(self, request):
        serviceable, reason = check_request(request, self._group_name)
        if not serviceable:
            logger.error('STOMP planner of group %s cannot service the '
                         'request: %s', self._group_name, reason)
        return serviceable

    def solve_detailed(self, request=None):
        """Solve a request and report the planning stage.

        Parameters
        ----------
        request : skstomp.messages.MotionPlanRequest or None
            request to solve. If None, the request set by
            `set_motion_plan_request` is used.

        Returns
        -------
        response : skstomp.messages.MotionPlanDetailedResponse
            one stage named `plan`. A trajectory that fails scene
            validation is still attached.
        """
        start_time = time.time()
        response = MotionPlanDetailedResponse()
        trajectory, error_code = self._plan(request)
        response.trajectory.append(trajectory)
        response.description.append('plan')
        response.processing_time.append(time.time() - start_time)
        response.error_code = error_code
        if error_code == MoveItErrorCode.SUCCESS:
            logger.info('STOMP found a solution for group %s in %.3f sec',
                        self._group_name, response.processing_time[-1])
        return response

    def solve(self, request=None):
        """Solve a request and return only the final trajectory.

        Returns
        -------
        response : skstomp.messages.MotionPlanResponse
        """
        detailed = self.solve_detailed(request)
        return MotionPlanResponse(
            trajectory=detailed.trajectory[-1],
            planning_time=sum(detailed.processing_time),
            error_code=detailed.error_code)

    def _plan(self, request):
        # a terminate() from here on cancels this solve
        self.driver.reset()
        if request is None:
            request = self._request
        if request is None:
            logger.error('no motion plan request to solve')
            return None, MoveItErrorCode.INVALID_MOTION_PLAN
        if request.group_name != self._group_name:
            logger.error('request for group %s sent to the STOMP planner '
                         'of group %s', request.group_name, self._group_name)
            return None, MoveItErrorCode.INVALID_MOTION_PLAN

        try:
            problem, _ = build_problem(
                request, self._config, self.kinematic_model, self.task,
                self.planning_scene)
        except TaskBindingError as e:
            logger.error('failed to bind the optimization task: %s', e)
            return None, MoveItErrorCode.FAILURE
        except BuildError as e:
            logger.error('failed to set up the problem: %s', e)
            return None, MoveItErrorCode.INVALID_MOTION_PLAN

        try:
            parameters = self.driver.run(problem)
        except NoSolutionError as e:
            logger.error('STOMP failed to find a solution: %s', e)
            return None, MoveItErrorCode.PLANNING_FAILED

        trajectory = to_robot_trajectory(
            parameters, request, self.kinematic_model, self._group_name,
            self.time_parameterizer)
        if not validate_trajectory(trajectory, self.planning_scene,
                                   self._group_name, verbose=True):
            logger.error('STOMP trajectory of group %s is in collision',
                         self._group_name)
            return trajectory, MoveItErrorCode.PLANNING_FAILED
        return trajectory, MoveItErrorCode.SUCCESS

    def terminate(self):
        """Cancel the running solve.

        Returns
        -------
        success : bool
            False if there is no optimizer to cancel.
        """
        if not self.driver.cancel():
            logger.error('failed to interrupt the STOMP optimizer of '
                         'group %s', self._group_name)
            return False
        return True

    def clear(self):
        self.driver.reset()

    def __repr__(self):
        return '<StompPlanner {}>'.format(self._group_name)


class PlannerSetupResult(object):
    """Outcome of `create_planner`: a planner or the error that prevented it.

    Attributes
    ----------
    planner : StompPlanner or None
    error : skstomp.planner.errors.ConfigError or None
    """

    def __init__(self, planner=None, error=None):
        self.planner = planner
        self.error = error

    @property
    def success(self):
        return self.planner is not None

    def __bool__(self):
        return self.success

    def __repr__(self):
        if self.success:
            return '<PlannerSetupResult {}>'.format(self.planner)
        return '<PlannerSetupResult error={}>'.format(self.error)


def create_planner(group, config, kinematic_model, optimizer=None,
                   time_parameterizer=None):
    """Create a planner without raising configuration errors.

    Returns
    -------
    result : PlannerSetupResult
    """
    try:
        planner = StompPlanner(group, config, kinematic_model,
                               optimizer=optimizer,
                               time_parameterizer=time_parameterizer)
    except ConfigError as e:
        logger.error('failed to create the STOMP planner: %s', e)
        return PlannerSetupResult(error=e)
    return PlannerSetupResult(planner=planner)


def create_planners(configs, kinematic_model):
    """Create one planner per configured group.

    Parameters
    ----------
    configs : dict, list or str
        group records, or the path of a YAML file, as accepted by
        `load_planner_configs`.
    kinematic_model : skstomp.model.KinematicModel
        robot model.

    Returns
    -------
    planners : dict[str, StompPlanner]
        planners of the groups whose configuration is valid.
    """
    planners = {}
    for group_name, group_config in load_planner_configs(configs).items():
        result = create_planner(group_name, group_config, kinematic_model)
        if not result.success:
            logger.error('skipping group %s', group_name)
            continue
        planners[group_name] = result.planner
        logger.info('STOMP planner of group %s is ready', group_name)
    return planners
