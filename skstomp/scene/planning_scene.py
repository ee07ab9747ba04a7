from logging import getLogger

import numpy as np

from skstomp.model import RobotState
from skstomp.scene.obstacle import obstacle_from_dict


logger = getLogger(__name__)


class PlanningScene(object):
    """World obstacles around a robot, with collision queries.

    Every link with a positive `collision_radius` is approximated by
    spheres placed along its local z axis from the link origin to
    `link.length`. Only robot-vs-world collisions are checked.

    Parameters
    ----------
    kinematic_model : skstomp.model.KinematicModel
        robot model.
    obstacles : list[skstomp.scene.obstacle.Obstacle] or None
        initial obstacles.
    path_resolution : float
        maximum joint displacement [rad] between two checked states
        when validating a path.
    """

    def __init__(self, kinematic_model, obstacles=None, path_resolution=0.05):
        self.kinematic_model = kinematic_model
        self.path_resolution = path_resolution
        self._obstacles = {}
        for obstacle in obstacles or []:
            self.add_obstacle(obstacle)
        self._sphere_links, self._sphere_offsets, self._sphere_radii = \
            self._build_collision_spheres()

    def _build_collision_spheres(self):
        links, offsets, radii = [], [], []
        for link in self.kinematic_model.link_list:
            if link.collision_radius <= 0.0:
                continue
            n = max(2, int(np.ceil(link.length / link.collision_radius)) + 1)
            for z in np.linspace(0.0, link.length, n):
                links.append(link.name)
                offsets.append([0.0, 0.0, z])
                radii.append(link.collision_radius)
        return links, np.array(offsets).reshape(-1, 3), np.array(radii)

    @property
    def obstacles(self):
        return list(self._obstacles.values())

    @property
    def n_collision_spheres(self):
        return len(self._sphere_links)

    def add_obstacle(self, obstacle):
        if isinstance(obstacle, dict):
            obstacle = obstacle_from_dict(obstacle)
        if obstacle.name in self._obstacles:
            logger.warning('obstacle %s is replaced', obstacle.name)
        self._obstacles[obstacle.name] = obstacle
        return obstacle

    def remove_obstacle(self, name):
        return self._obstacles.pop(name)

    def clear_obstacles(self):
        self._obstacles = {}

    def collision_spheres(self, positions):
        """Return world centers and radii of the robot collision spheres.

        Parameters
        ----------
        positions : dict[str, float]
            joint positions.

        Returns
        -------
        centers : numpy.ndarray(n_sphere, 3)
        radii : numpy.ndarray(n_sphere,)
        """
        transforms = self.kinematic_model.link_transforms(positions)
        centers = np.zeros((self.n_collision_spheres, 3))
        for i, (name, offset) in enumerate(
                zip(self._sphere_links, self._sphere_offsets)):
            tf = transforms[name]
            centers[i] = tf[:3, :3].dot(offset) + tf[:3, 3]
        return centers, self._sphere_radii

    def clearances(self, positions):
        """Signed distance of each collision sphere to the nearest obstacle.

        Returns an array filled with `numpy.inf` if the scene has no
        obstacle.
        """
        if self.n_collision_spheres == 0:
            return np.zeros(0)
        if len(self._obstacles) == 0:
            return np.full(self.n_collision_spheres, np.inf)
        centers, radii = self.collision_spheres(positions)
        sd_vals = np.min(
            np.array([obstacle(centers) for obstacle in self.obstacles]),
            axis=0)
        return sd_vals - radii

    def group_clearances(self, group_name, group_positions,
                         base_positions=None):
        values = dict(base_positions or {})
        group = self.kinematic_model.get_joint_model_group(group_name)
        values.update(zip(group.active_joint_names, group_positions))
        return self.clearances(values)

    def is_state_colliding(self, state, group_name=None, verbose=False):
        """Check whether a robot state collides with the world.

        Parameters
        ----------
        state : skstomp.model.RobotState or dict[str, float]
        group_name : str or None
            unused, kept for interface symmetry with `is_path_valid`.
        verbose : bool
            log the colliding obstacles.
        """
        positions = state.as_dict() if isinstance(state, RobotState) \
            else state
        clearances = self.clearances(positions)
        colliding = bool(np.any(clearances < 0.0))
        if colliding and verbose:
            logger.info('state is in collision (min clearance %.4f)',
                        np.min(clearances))
        return colliding

    def is_state_valid(self, state, group_name=None, verbose=False):
        if not state.satisfies_bounds(group_name):
            if verbose:
                logger.info('state violates joint limits')
            return False
        return not self.is_state_colliding(state, group_name, verbose)

    def is_path_valid(self, trajectory, group_name=None, verbose=False):
        """Check every waypoint of a trajectory and the motion between them.

        Parameters
        ----------
        trajectory : skstomp.trajectory.RobotTrajectory
            trajectory to validate.
        group_name : str or None
            group whose limits are checked; defaults to the
            trajectory's group.
        verbose : bool
            log the first invalid waypoint.

        Returns
        -------
        valid : bool
        """
        group_name = group_name or trajectory.group_name
        previous = None
        for index in range(trajectory.waypoint_count):
            state = trajectory.get_waypoint(index)
            if not self.is_state_valid(state, group_name, verbose):
                if verbose:
                    logger.info('waypoint %d of %d is invalid',
                                index, trajectory.waypoint_count)
                return False
            if previous is not None and not self._is_motion_valid(
                    previous, state, group_name):
                if verbose:
                    logger.info('motion between waypoints %d and %d is '
                                'in collision', index - 1, index)
                return False
            previous = state
        return True

    def _is_motion_valid(self, state_from, state_to, group_name):
        q_from = state_from.get_joint_group_positions(group_name)
        q_to = state_to.get_joint_group_positions(group_name)
        max_step = np.max(np.abs(q_to - q_from)) if q_from.size else 0.0
        n_steps = int(np.ceil(max_step / self.path_resolution))
        for t in np.linspace(0.0, 1.0, n_steps + 1)[1:-1]:
            state = state_from.copy()
            state.set_joint_group_positions(
                group_name, q_from + t * (q_to - q_from))
            if self.is_state_colliding(state):
                return False
        return True
