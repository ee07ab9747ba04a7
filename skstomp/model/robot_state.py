from logging import getLogger

import numpy as np

from skstomp.model.inverse_kinematics import solve_ik


logger = getLogger(__name__)


class JointState(object):
    """Named joint positions, e.g. the start state of a request.

    Parameters
    ----------
    name : list[str]
        joint names.
    position : list[float]
        joint positions, same length as `name`.
    """

    def __init__(self, name=None, position=None):
        self.name = [] if name is None else list(name)
        self.position = [] if position is None else \
            [float(p) for p in position]
        if len(self.name) != len(self.position):
            raise ValueError(
                'JointState has {} names but {} positions'.format(
                    len(self.name), len(self.position)))

    def as_dict(self):
        return dict(zip(self.name, self.position))

    def __repr__(self):
        return 'JointState(name={}, position={})'.format(
            self.name, self.position)


class RobotState(object):
    """Joint positions of every active joint of a kinematic model.

    Parameters
    ----------
    kinematic_model : skstomp.model.KinematicModel
        robot model.
    positions : dict[str, float] or None
        initial positions. Missing joints take their default
        position.
    """

    def __init__(self, kinematic_model, positions=None):
        self.kinematic_model = kinematic_model
        self._positions = kinematic_model.default_positions()
        if positions is not None:
            for name, value in positions.items():
                self.set_variable_position(name, value)

    @classmethod
    def from_joint_state(cls, kinematic_model, joint_state):
        """Create a state from a `JointState`.

        Joints unknown to the model are ignored with a warning.
        """
        state = cls(kinematic_model)
        for name, value in zip(joint_state.name, joint_state.position):
            if name not in state._positions:
                logger.warning(
                    'joint %s of the joint state is not an active joint of %s',
                    name, kinematic_model.name)
                continue
            state.set_variable_position(name, value)
        return state

    def copy(self):
        return RobotState(self.kinematic_model, dict(self._positions))

    @property
    def variable_names(self):
        return list(self._positions.keys())

    def set_variable_position(self, name, value):
        if name not in self._positions:
            raise KeyError('{} is not an active joint of {}'.format(
                name, self.kinematic_model.name))
        self._positions[name] = float(value)

    def get_variable_position(self, name):
        return self._positions[name]

    def set_joint_group_positions(self, group_name, positions):
        group = self.kinematic_model.get_joint_model_group(group_name)
        positions = np.asarray(positions, dtype=np.float64)
        if positions.shape != (group.variable_count,):
            raise ValueError(
                'group {} expects {} positions, but {} given'.format(
                    group_name, group.variable_count, positions.shape))
        for name, value in zip(group.active_joint_names, positions):
            self._positions[name] = float(value)

    def get_joint_group_positions(self, group_name):
        group = self.kinematic_model.get_joint_model_group(group_name)
        return np.array([self._positions[n] for n in group.active_joint_names])

    def enforce_bounds(self, group_name=None):
        """Clip positions into the joint limits.

        Parameters
        ----------
        group_name : str or None
            If given, only the joints of this group are clipped.
        """
        if group_name is None:
            joints = self.kinematic_model.active_joints
        else:
            joints = self.kinematic_model.get_joint_model_group(
                group_name).active_joints
        for joint in joints:
            self._positions[joint.name] = joint.enforce_bounds(
                self._positions[joint.name])

    def satisfies_bounds(self, group_name=None, margin=0.0):
        if group_name is None:
            joints = self.kinematic_model.active_joints
        else:
            joints = self.kinematic_model.get_joint_model_group(
                group_name).active_joints
        return all(j.satisfies_bounds(self._positions[j.name], margin)
                   for j in joints)

    def link_transforms(self):
        return self.kinematic_model.link_transforms(self._positions)

    def get_global_link_transform(self, link_name):
        return self.link_transforms()[link_name]

    def set_from_ik(self, group_name, position, orientation=None,
                    tip_link=None, attempts=10, timeout=0.05,
                    random_state=None):
        """Set the group's joints from an IK solution.

        The current group positions are used as the first initial
        guess. On failure the state is left unchanged.

        Parameters
        ----------
        group_name : str
            planning group.
        position : numpy.ndarray(3,)
            target position of the tip link.
        orientation : numpy.ndarray(4,) or None
            target quaternion [w, x, y, z] of the tip link.
        tip_link : str or None
            end-effector link; defaults to the group's tip link.
        attempts : int
            number of IK attempts.
        timeout : float
            time budget per attempt [sec].

        Returns
        -------
        success : bool
        """
        group = self.kinematic_model.get_joint_model_group(group_name)
        names = set(group.active_joint_names)
        base_positions = {k: v for k, v in self._positions.items()
                          if k not in names}
        av = solve_ik(
            self.kinematic_model, group, position, orientation,
            tip_link=tip_link,
            av_init=self.get_joint_group_positions(group_name),
            base_positions=base_positions,
            attempts=attempts, timeout=timeout,
            random_state=random_state)
        if av is None:
            return False
        self.set_joint_group_positions(group_name, av)
        return True

    def as_dict(self):
        return dict(self._positions)

    def to_joint_state(self):
        names = self.variable_names
        return JointState(names, [self._positions[n] for n in names])

    def __repr__(self):
        return '<RobotState {}>'.format(self._positions)
