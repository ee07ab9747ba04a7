"""Exceptions raised while setting up a planner or building a problem.

`StompPlanner` catches the solve-time ones and turns them into
`MoveItErrorCode` values.
"""


class ConfigError(ValueError):
    """Planner configuration could not be resolved."""

    def __init__(self, group_name, message):
        self.group_name = group_name
        super(ConfigError, self).__init__(
            '[{}] {}'.format(group_name, message))


class ConfigParseError(ConfigError):
    pass


class NoActiveJointsError(ConfigError):

    def __init__(self, group_name):
        super(NoActiveJointsError, self).__init__(
            group_name, 'group has no active joints')


class GroupNotFoundError(ConfigError):

    def __init__(self, group_name):
        super(GroupNotFoundError, self).__init__(
            group_name, 'group does not exist in the kinematic model')


class BuildError(ValueError):
    """Request could not be turned into an optimization problem."""


class SeedShapeMismatchError(BuildError):
    """A trajectory constraint does not match the group's active joints.

    Attributes
    ----------
    index : int
        index of the first offending trajectory constraint.
    expected : object
        expected joint count or joint name.
    actual : object
        actual joint count or joint name.
    joint_index : int or None
        position of the offending joint inside the constraint, None
        when the joint count itself is wrong.
    """

    def __init__(self, index, expected, actual, joint_index=None):
        self.index = index
        self.expected = expected
        self.actual = actual
        self.joint_index = joint_index
        if joint_index is None:
            message = ('trajectory constraint {} has {} joint constraints, '
                       'expected {}'.format(index, actual, expected))
        else:
            message = ('trajectory constraint {} has joint {!r} at position '
                       '{}, expected {!r}'.format(
                           index, actual, joint_index, expected))
        super(SeedShapeMismatchError, self).__init__(message)


class MissingGoalError(BuildError):
    pass


class IkFailureError(BuildError):
    pass


class TaskBindingError(BuildError):
    pass


class NoSolutionError(RuntimeError):
    """The optimizer did not return a usable solution."""
