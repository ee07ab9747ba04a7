import numpy as np
from trimesh.transformations import quaternion_matrix


class Obstacle(object):
    """A base class for signed distance obstacles.

    A point's signed distance is its distance from the obstacle
    surface, negative inside the obstacle. Each obstacle is placed in
    the world by a position and a quaternion [w, x, y, z]; points are
    transformed into the obstacle frame before evaluation.
    """

    def __init__(self, name, position=None, orientation=None):
        self.name = name
        self.position = np.zeros(3) if position is None \
            else np.asarray(position, dtype=np.float64)
        orientation = [1, 0, 0, 0] if orientation is None else orientation
        self.rotation = quaternion_matrix(orientation)[:3, :3]

    def _transform_pts_world_to_obstacle(self, points_world):
        return (points_world - self.position[None, :]).dot(self.rotation)

    def __call__(self, points_world):
        """Compute signed distances of points.

        Parameters
        ----------
        points_world : numpy.ndarray(n_point, 3)
            points in the world frame.

        Returns
        -------
        sd_vals : numpy.ndarray(n_point,)
            signed distance of each point.
        """
        points_world = np.atleast_2d(points_world)
        return self._signed_distance(
            self._transform_pts_world_to_obstacle(points_world))

    def _signed_distance(self, points):
        raise NotImplementedError

    def __repr__(self):
        return '<{} {}>'.format(self.__class__.__name__, self.name)


class BoxObstacle(Obstacle):
    """Box specified by its full `extents`."""

    def __init__(self, name, extents, position=None, orientation=None):
        super(BoxObstacle, self).__init__(name, position, orientation)
        self.extents = np.asarray(extents, dtype=np.float64)

    def _signed_distance(self, points):
        half_extent = self.extents * 0.5
        sd_vals_each_axis = np.abs(points) - half_extent[None, :]

        positive_dists_each_axis = np.maximum(sd_vals_each_axis, 0.0)
        positive_dists = np.sqrt(np.sum(positive_dists_each_axis**2, axis=1))

        negative_dists_each_axis = np.max(sd_vals_each_axis, axis=1)
        negative_dists = np.minimum(negative_dists_each_axis, 0.0)

        return positive_dists + negative_dists


class SphereObstacle(Obstacle):
    """Sphere specified by `radius`."""

    def __init__(self, name, radius, position=None, orientation=None):
        super(SphereObstacle, self).__init__(name, position, orientation)
        self.radius = float(radius)

    def _signed_distance(self, points):
        return np.sqrt(np.sum(points**2, axis=1)) - self.radius


class CylinderObstacle(Obstacle):
    """Cylinder along the local z axis."""

    def __init__(self, name, radius, height, position=None,
                 orientation=None):
        super(CylinderObstacle, self).__init__(name, position, orientation)
        self.radius = float(radius)
        self.height = float(height)

    def _signed_distance(self, points):
        sd_radial = np.sqrt(points[:, 0]**2 + points[:, 1]**2) - self.radius
        sd_height = np.abs(points[:, 2]) - self.height * 0.5
        d = np.stack((sd_radial, sd_height), axis=1)
        outside = np.sqrt(np.sum(np.maximum(d, 0.0)**2, axis=1))
        inside = np.minimum(np.max(d, axis=1), 0.0)
        return outside + inside


_obstacle_classes = {
    'box': BoxObstacle,
    'sphere': SphereObstacle,
    'cylinder': CylinderObstacle,
}


def obstacle_from_dict(description):
    """Create an obstacle from a mapping with a `type` key.

    >>> obstacle_from_dict({'type': 'sphere', 'name': 'ball',
    ...                     'radius': 0.1, 'position': [0.5, 0, 0.5]})
    <SphereObstacle ball>
    """
    description = dict(description)
    obstacle_type = description.pop('type')
    if obstacle_type not in _obstacle_classes:
        raise ValueError(
            'obstacle type {} is not supported'.format(obstacle_type))
    return _obstacle_classes[obstacle_type](**description)
