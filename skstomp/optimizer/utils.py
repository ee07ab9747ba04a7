import enum
from functools import lru_cache

import numpy as np


class InitializationMethod(enum.IntEnum):
    LINEAR_INTERPOLATION = 1
    CUBIC_POLYNOMIAL_INTERPOLATION = 2
    MINIMUM_CONTROL_COST = 3


def interpolate_trajectory(start_angles, end_angles, n_waypoints):
    """Create linear interpolation between start and end configurations.

    Parameters
    ----------
    start_angles : array-like
        Starting joint angles (n_joints,).
    end_angles : array-like
        Ending joint angles (n_joints,).
    n_waypoints : int
        Number of waypoints including start and end.

    Returns
    -------
    numpy.ndarray
        Interpolated trajectory (n_waypoints, n_joints).
    """
    start = np.array(start_angles, dtype=np.float64)
    end = np.array(end_angles, dtype=np.float64)
    t = np.linspace(0, 1, n_waypoints)[:, np.newaxis]
    return start + t * (end - start)


@lru_cache(maxsize=100)
def construct_smoothcost_mat(n_wp):
    """Finite-difference acceleration cost matrix A (n_wp, n_wp).

    `x.dot(A).dot(x)` is the squared sum of the accelerations of the
    sequence `x`. Compare with A of eq. (17) of CHOMP (IJRR 2013),
    where velocities are used instead.
    """
    acc_block = np.array([[1, -2, 1], [-2, 4, -2], [1, -2, 1]],
                         dtype=np.float64)
    A_ = np.zeros((n_wp, n_wp))
    for i in [1 + i for i in range(n_wp - 2)]:
        A_[i - 1:i + 2, i - 1:i + 2] += acc_block
    A_.setflags(write=False)
    return A_


@lru_cache(maxsize=100)
def construct_smoothing_mat(n_wp):
    """Projection smoothing the updates of the interior waypoints.

    The inverse of the interior block of the cost matrix is scaled so
    that each column peaks at `1 / n_wp`. The first and last rows and
    columns are zero, which keeps the endpoints fixed.
    """
    M = np.zeros((n_wp, n_wp))
    if n_wp > 2:
        A_ = construct_smoothcost_mat(n_wp)
        inv = np.linalg.inv(A_[1:-1, 1:-1])
        inv = inv / np.max(inv, axis=0)[None, :]
        M[1:-1, 1:-1] = inv / n_wp
    M.setflags(write=False)
    return M


@lru_cache(maxsize=100)
def construct_noise_cholesky(n_wp):
    """Cholesky factor of the smooth noise covariance of interior waypoints.

    Returns a (n_wp - 2, n_wp - 2) lower triangular matrix `L` such
    that `L.dot(eps)` with `eps ~ N(0, I)` is a smooth sequence whose
    largest variance is 1.
    """
    if n_wp <= 2:
        return np.zeros((0, 0))
    A_ = construct_smoothcost_mat(n_wp)
    cov = np.linalg.inv(A_[1:-1, 1:-1])
    cov = cov / np.max(cov)
    L = np.linalg.cholesky(cov)
    L.setflags(write=False)
    return L


def control_costs(parameters, control_cost_weight):
    """Acceleration cost of each timestep.

    Parameters
    ----------
    parameters : numpy.ndarray(n_dimensions, n_timesteps)
    control_cost_weight : float

    Returns
    -------
    costs : numpy.ndarray(n_timesteps,)
    """
    n_wp = parameters.shape[1]
    if control_cost_weight == 0.0:
        return np.zeros(n_wp)
    A_ = construct_smoothcost_mat(n_wp)
    return 0.5 * control_cost_weight * np.sum(
        parameters * parameters.dot(A_), axis=0)


def initialize_parameters(method, start, goal, num_timesteps):
    """Create an initial parameter matrix between start and goal.

    Parameters
    ----------
    method : InitializationMethod or int
    start : numpy.ndarray(n_dimensions,)
    goal : numpy.ndarray(n_dimensions,)
    num_timesteps : int

    Returns
    -------
    parameters : numpy.ndarray(n_dimensions, num_timesteps)
    """
    method = InitializationMethod(method)
    start = np.asarray(start, dtype=np.float64)
    goal = np.asarray(goal, dtype=np.float64)
    if method == InitializationMethod.LINEAR_INTERPOLATION:
        return interpolate_trajectory(start, goal, num_timesteps).T
    if method == InitializationMethod.CUBIC_POLYNOMIAL_INTERPOLATION:
        t = np.linspace(0.0, 1.0, num_timesteps)
        s = 3 * t ** 2 - 2 * t ** 3
        return (start[:, None] + s[None, :] * (goal - start)[:, None])
    # minimum control cost with fixed endpoints
    parameters = interpolate_trajectory(start, goal, num_timesteps).T
    if num_timesteps > 2:
        A_ = construct_smoothcost_mat(num_timesteps)
        A_int = A_[1:-1, 1:-1]
        A_end = A_[1:-1][:, [0, -1]]
        ends = parameters[:, [0, -1]]
        parameters[:, 1:-1] = np.linalg.solve(
            A_int, -A_end.dot(ends.T)).T
    return parameters
