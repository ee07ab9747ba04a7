from logging import getLogger

from cached_property import cached_property
import numpy as np
import yaml

from skstomp.model.joint import Link
from skstomp.model.joint import make_joint


logger = getLogger(__name__)


class JointModelGroup(object):
    """Named subset of the joints of a kinematic model.

    Parameters
    ----------
    name : str
        group name.
    joints : list[skstomp.model.joint.Joint]
        joints of the group in chain order.
    tip_link : str or None
        name of the link used as end effector for IK. If None, the
        child link of the last joint is used.
    """

    def __init__(self, name, joints, tip_link=None):
        self.name = name
        self.joints = list(joints)
        if tip_link is None and len(self.joints) > 0:
            tip_link = self.joints[-1].child_link
        self.tip_link = tip_link

    @cached_property
    def active_joints(self):
        return [j for j in self.joints if j.is_active]

    @cached_property
    def active_joint_names(self):
        return [j.name for j in self.active_joints]

    @property
    def joint_names(self):
        return [j.name for j in self.joints]

    @property
    def link_names(self):
        return [j.child_link for j in self.joints]

    @property
    def variable_count(self):
        return len(self.active_joints)

    @property
    def lower_limits(self):
        return np.array([j.min_position for j in self.active_joints])

    @property
    def upper_limits(self):
        return np.array([j.max_position for j in self.active_joints])

    def enforce_bounds(self, positions):
        """Clip a group vector into the joint limits.

        Parameters
        ----------
        positions : numpy.ndarray(n_dof,)
            joint positions ordered as `active_joint_names`.

        Returns
        -------
        clipped : numpy.ndarray(n_dof,)
        """
        positions = np.asarray(positions, dtype=np.float64)
        if positions.shape != (self.variable_count,):
            raise ValueError(
                'group {} expects {} positions, but {} given'.format(
                    self.name, self.variable_count, positions.shape))
        return np.clip(positions, self.lower_limits, self.upper_limits)

    def satisfies_bounds(self, positions, margin=0.0):
        positions = np.asarray(positions, dtype=np.float64)
        return bool(np.all(positions >= self.lower_limits - margin)
                    and np.all(positions <= self.upper_limits + margin))

    def __repr__(self):
        return '<JointModelGroup {} ({} dof)>'.format(
            self.name, self.variable_count)


class KinematicModel(object):
    """Serial-chain robot model.

    Joints are stored in chain order from the root link; each joint's
    parent link must be the root link or the child link of a preceding
    joint.

    Parameters
    ----------
    name : str
        robot name.
    root_link : skstomp.model.joint.Link
        root link fixed to the world frame.
    links : list[skstomp.model.joint.Link]
        every link except the root link.
    joints : list[skstomp.model.joint.Joint]
        joints in chain order.
    """

    def __init__(self, name, root_link, links, joints):
        self.name = name
        self.root_link = root_link
        self._links = {root_link.name: root_link}
        for link in links:
            if link.name in self._links:
                raise ValueError('duplicated link name {}'.format(link.name))
            self._links[link.name] = link

        placed = {root_link.name}
        self.joints = []
        self._joints = {}
        for joint in joints:
            if joint.parent_link not in placed:
                raise ValueError(
                    'joint {}: parent link {} is not reachable from {}'
                    .format(joint.name, joint.parent_link, root_link.name))
            if joint.child_link not in self._links:
                raise ValueError(
                    'joint {}: unknown child link {}'.format(
                        joint.name, joint.child_link))
            if joint.name in self._joints:
                raise ValueError('duplicated joint name {}'.format(joint.name))
            placed.add(joint.child_link)
            self.joints.append(joint)
            self._joints[joint.name] = joint
        self._groups = {}

    @property
    def link_list(self):
        return list(self._links.values())

    @property
    def active_joints(self):
        return [j for j in self.joints if j.is_active]

    @property
    def variable_names(self):
        return [j.name for j in self.active_joints]

    def link(self, name):
        return self._links[name]

    def joint(self, name):
        return self._joints[name]

    def has_joint(self, name):
        return name in self._joints

    def add_joint_model_group(self, name, joint_names, tip_link=None):
        """Register a planning group.

        Parameters
        ----------
        name : str
            group name.
        joint_names : list[str]
            names of the joints in the group. They are reordered to
            chain order.
        tip_link : str or None
            end-effector link of the group.

        Returns
        -------
        group : JointModelGroup
            registered group.
        """
        unknown = [n for n in joint_names if n not in self._joints]
        if len(unknown) > 0:
            raise ValueError(
                'group {} has unknown joints {}'.format(name, unknown))
        if tip_link is not None and tip_link not in self._links:
            raise ValueError(
                'group {} has unknown tip link {}'.format(name, tip_link))
        names = set(joint_names)
        joints = [j for j in self.joints if j.name in names]
        group = JointModelGroup(name, joints, tip_link=tip_link)
        self._groups[name] = group
        return group

    def has_joint_model_group(self, name):
        return name in self._groups

    def get_joint_model_group(self, name):
        if name not in self._groups:
            raise KeyError(
                'robot {} has no group named {}'.format(self.name, name))
        return self._groups[name]

    @property
    def joint_model_group_names(self):
        return list(self._groups.keys())

    def default_positions(self):
        return {j.name: j.default_position for j in self.active_joints}

    def link_transforms(self, positions):
        """Compute world transforms of every link.

        Parameters
        ----------
        positions : dict[str, float]
            position of each active joint. Missing joints take their
            default position.

        Returns
        -------
        transforms : dict[str, numpy.ndarray(4, 4)]
            homogeneous transform of each link w.r.t. the world frame.
        """
        transforms = {self.root_link.name: np.eye(4)}
        for joint in self.joints:
            q = positions.get(joint.name, joint.default_position)
            transforms[joint.child_link] = transforms[joint.parent_link].dot(
                joint.transform(q))
        return transforms

    def joint_frames(self, positions):
        """Return world transform of each joint frame before its motion."""
        frames = {}
        transforms = {self.root_link.name: np.eye(4)}
        for joint in self.joints:
            q = positions.get(joint.name, joint.default_position)
            frames[joint.name] = transforms[joint.parent_link].dot(
                joint.origin)
            transforms[joint.child_link] = transforms[joint.parent_link].dot(
                joint.transform(q))
        return frames, transforms

    def forward_kinematics(self, group_name, positions, link_name=None,
                           base_positions=None):
        """Forward kinematics of a group vector.

        Parameters
        ----------
        group_name : str
            planning group.
        positions : numpy.ndarray(n_dof,)
            positions ordered as the group's active joint names.
        link_name : str or None
            link to evaluate. Defaults to the group's tip link.
        base_positions : dict[str, float] or None
            positions of joints outside the group.

        Returns
        -------
        transform : numpy.ndarray(4, 4)
            world transform of the link.
        """
        group = self.get_joint_model_group(group_name)
        values = dict(base_positions or {})
        values.update(zip(group.active_joint_names, positions))
        link_name = link_name or group.tip_link
        return self.link_transforms(values)[link_name]

    @classmethod
    def from_dict(cls, description):
        """Build a model from a mapping.

        The mapping has the keys `name`, `root_link`, `links`, `joints`
        and optionally `groups`. See `skstomp.models.sample_arm` for an
        example.
        """
        root = description['root_link']
        if isinstance(root, dict):
            root_link = Link(**root)
        else:
            root_link = Link(root)
        links = [Link(**link) for link in description.get('links', [])]
        joints = []
        for joint in description.get('joints', []):
            joint = dict(joint)
            joint_type = joint.pop('type', 'revolute')
            joints.append(make_joint(joint_type, **joint))
        model = cls(description.get('name', 'robot'), root_link, links, joints)
        for group in description.get('groups', []):
            model.add_joint_model_group(
                group['name'], group['joints'],
                tip_link=group.get('tip_link'))
        return model

    @classmethod
    def from_yaml(cls, path):
        with open(path, 'r') as f:
            description = yaml.safe_load(f)
        return cls.from_dict(description)

    def __repr__(self):
        return '<KinematicModel {} ({} joints, groups: {})>'.format(
            self.name, len(self.joints), self.joint_model_group_names)
