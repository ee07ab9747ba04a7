from logging import getLogger

import numpy as np
from trimesh.transformations import euler_matrix
from trimesh.transformations import rotation_matrix
from trimesh.transformations import translation_matrix


logger = getLogger(__name__)

_default_max_joint_velocity = 1.0
_default_max_joint_acceleration = 1.0


class Link(object):
    """Rigid body of a serial chain.

    Parameters
    ----------
    name : str
        link name.
    length : float
        distance from the link origin to the next joint along the
        local z axis. Used to place collision spheres.
    collision_radius : float
        radius of the collision spheres approximating this link.
        If 0, the link is ignored in collision checking.
    """

    def __init__(self, name, length=0.0, collision_radius=0.0):
        self.name = name
        self.length = float(length)
        self.collision_radius = float(collision_radius)

    def __repr__(self):
        return '<{} {}>'.format(self.__class__.__name__, self.name)


class Joint(object):
    """Joint connecting a parent link to a child link.

    The transform from the parent link frame to the child link frame is
    `origin * motion(position)`, where `origin` is a fixed offset given
    by `xyz` and `rpy` and `motion` is a rotation (revolute) or a
    translation (prismatic) about `axis`.
    """

    joint_type = None

    def __init__(self, name, parent_link, child_link,
                 xyz=None, rpy=None, axis=None,
                 min_position=-np.pi, max_position=np.pi,
                 max_velocity=None, max_acceleration=None):
        self.name = name
        self.parent_link = parent_link
        self.child_link = child_link
        xyz = np.zeros(3) if xyz is None else np.asarray(xyz, dtype=np.float64)
        rpy = np.zeros(3) if rpy is None else np.asarray(rpy, dtype=np.float64)
        self.origin = translation_matrix(xyz).dot(
            euler_matrix(rpy[0], rpy[1], rpy[2], axes='sxyz'))
        axis = [0, 0, 1] if axis is None else axis
        axis = np.asarray(axis, dtype=np.float64)
        norm = np.linalg.norm(axis)
        if norm == 0:
            raise ValueError('joint {} has a zero axis'.format(name))
        self.axis = axis / norm
        if min_position > max_position:
            raise ValueError(
                'joint {}: min_position {} is greater than max_position {}'
                .format(name, min_position, max_position))
        self.min_position = float(min_position)
        self.max_position = float(max_position)
        if max_velocity is None:
            max_velocity = _default_max_joint_velocity
        if max_acceleration is None:
            max_acceleration = _default_max_joint_acceleration
        self.max_velocity = float(max_velocity)
        self.max_acceleration = float(max_acceleration)

    @property
    def is_active(self):
        return True

    @property
    def default_position(self):
        """Zero clipped into the joint limits."""
        return self.enforce_bounds(0.0)

    def enforce_bounds(self, position):
        return float(np.clip(position, self.min_position, self.max_position))

    def satisfies_bounds(self, position, margin=0.0):
        return (self.min_position - margin <= position
                <= self.max_position + margin)

    def transform(self, position):
        """Return 4x4 transform of child link w.r.t. parent link."""
        raise NotImplementedError

    def __repr__(self):
        return '<{} {}>'.format(self.__class__.__name__, self.name)


class RevoluteJoint(Joint):

    joint_type = 'revolute'

    def transform(self, position):
        return self.origin.dot(rotation_matrix(position, self.axis))


class PrismaticJoint(Joint):

    joint_type = 'prismatic'

    def transform(self, position):
        return self.origin.dot(translation_matrix(position * self.axis))


class FixedJoint(Joint):

    joint_type = 'fixed'

    def __init__(self, name, parent_link, child_link, xyz=None, rpy=None):
        super(FixedJoint, self).__init__(
            name, parent_link, child_link, xyz=xyz, rpy=rpy,
            min_position=0.0, max_position=0.0)

    @property
    def is_active(self):
        return False

    def transform(self, position=0.0):
        return self.origin


_joint_classes = {
    'revolute': RevoluteJoint,
    'continuous': RevoluteJoint,
    'prismatic': PrismaticJoint,
    'fixed': FixedJoint,
}


def make_joint(joint_type, *args, **kwargs):
    """Create a joint from its type name.

    Parameters
    ----------
    joint_type : str
        one of 'revolute', 'continuous', 'prismatic' or 'fixed'.

    Returns
    -------
    joint : Joint
        created joint.
    """
    if joint_type not in _joint_classes:
        raise ValueError('joint type {} is not supported'.format(joint_type))
    if joint_type == 'continuous':
        kwargs.setdefault('min_position', -np.inf)
        kwargs.setdefault('max_position', np.inf)
    if joint_type == 'fixed':
        for key in ['axis', 'min_position', 'max_position',
                    'max_velocity', 'max_acceleration']:
            if kwargs.pop(key, None) is not None:
                logger.warning(
                    'fixed joint ignores %s', key)
    return _joint_classes[joint_type](*args, **kwargs)
