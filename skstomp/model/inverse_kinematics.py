import time

import numpy as np
import scipy.optimize
from trimesh.transformations import quaternion_from_matrix


def scipinize(fun):
    """Scipinize a function returning both f and jac

    For the detail this issue may help:
    https://github.com/scipy/scipy/issues/12692

    Parameters
    ----------
    fun: function
        function maps numpy.ndarray(n_dim,) to tuple[numpy.ndarray(m_dim,),
        numpy.ndarray(m_dim, n_dim)], where the returned tuples is
        composed of function value(vector) and the corresponding jacobian.
    Returns
    -------
    fun_scipinized : function
        function maps numpy.ndarray(n_dim,) to a value numpy.ndarray(m_dim,).
    fun_scipinized_jac : function
        function maps numpy.ndarray(n_dim,) to
        jacobian numpy.ndarray(m_dim, n_dim).
    """

    closure_member = {'jac_cache': None}

    def fun_scipinized(x):
        f, jac = fun(x)
        closure_member['jac_cache'] = jac
        return f

    def fun_scipinized_jac(x):
        return closure_member['jac_cache']
    return fun_scipinized, fun_scipinized_jac


def quaternion_kinematic_matrix(q):
    # dq/dt = 0.5 * mat * omega
    q1, q2, q3, q4 = q
    mat = np.array([
        [-q2, -q3, -q4],
        [q1, q4, -q3],
        [-q4, q1, q2],
        [q3, -q2, q1]])
    return mat * 0.5


def group_pose_and_jacobian(kinematic_model, group, av, tip_link,
                            base_positions=None):
    """Compute tip pose and jacobian w.r.t. the group's active joints.

    Parameters
    ----------
    kinematic_model : skstomp.model.KinematicModel
    group : skstomp.model.JointModelGroup
    av : numpy.ndarray(n_dof,)
        angle vector ordered as `group.active_joint_names`.
    tip_link : str
        link whose pose is computed.
    base_positions : dict[str, float] or None
        positions of the joints outside the group.

    Returns
    -------
    pose : numpy.ndarray(7,)
        position and quaternion [w, x, y, z] of the tip link.
    jac : numpy.ndarray(7, n_dof)
        jacobian of `pose`.
    """
    values = dict(base_positions or {})
    values.update(zip(group.active_joint_names, av))
    frames, transforms = kinematic_model.joint_frames(values)

    tip = transforms[tip_link]
    tip_pos = tip[:3, 3]
    tip_quat = quaternion_from_matrix(tip)

    n_dof = len(av)
    jac_pos = np.zeros((3, n_dof))
    jac_rot = np.zeros((3, n_dof))
    for i, joint in enumerate(group.active_joints):
        frame = frames[joint.name]
        axis_world = frame[:3, :3].dot(joint.axis)
        if joint.joint_type == 'prismatic':
            jac_pos[:, i] = axis_world
        else:
            jac_pos[:, i] = np.cross(axis_world, tip_pos - frame[:3, 3])
            jac_rot[:, i] = axis_world
    jac_quat = quaternion_kinematic_matrix(tip_quat).dot(jac_rot)
    return np.hstack((tip_pos, tip_quat)), np.vstack((jac_pos, jac_quat))


def inverse_kinematics_slsqp_common(av_init,
                                    endeffector_fk,
                                    joint_limits,
                                    pos_target,
                                    quat_target=None,
                                    ftol=1e-12,
                                    maxiter=200):

    def fun_objective(av):
        pose, jac = endeffector_fk(av)
        position, rot = pose[:3], pose[3:]
        pos_diff = position - pos_target
        cost = np.linalg.norm(pos_diff) ** 2
        cost_grad = 2 * pos_diff.dot(jac[:3, :])
        if quat_target is not None:
            # see below for distance metric for quaternion
            # https://math.stackexchange.com/questions/90081/quaternion-distance
            inpro = np.sum(rot * quat_target)
            cost += 1 - inpro ** 2
            cost_grad = cost_grad - 2 * inpro * quat_target.dot(jac[3:, :])
        return cost, cost_grad

    f, jac = scipinize(fun_objective)
    return scipy.optimize.minimize(
        f, av_init, method='SLSQP', jac=jac, bounds=joint_limits,
        options={'ftol': ftol, 'disp': False, 'maxiter': maxiter})


def pose_error(pose, pos_target, quat_target=None):
    """Return position error [m] and rotation error [rad]."""
    pos_err = np.linalg.norm(pose[:3] - pos_target)
    if quat_target is None:
        return pos_err, 0.0
    inpro = np.clip(abs(np.sum(pose[3:] * quat_target)), 0.0, 1.0)
    return pos_err, 2.0 * np.arccos(inpro)


def solve_ik(kinematic_model,
             group,
             pos_target,
             quat_target=None,
             tip_link=None,
             av_init=None,
             base_positions=None,
             attempts=10,
             timeout=0.05,
             position_tolerance=1e-4,
             rotation_tolerance=1e-3,
             random_state=None):
    """Solve inverse kinematics of a group with random restarts.

    The first attempt starts from `av_init`; the following attempts
    start from a configuration sampled uniformly in the joint limits.
    No attempt is started once `attempts * timeout` seconds have
    elapsed.

    Parameters
    ----------
    kinematic_model : skstomp.model.KinematicModel
    group : skstomp.model.JointModelGroup
    pos_target : numpy.ndarray(3,)
        target position in the world frame.
    quat_target : numpy.ndarray(4,) or None
        target orientation [w, x, y, z]. If None, only the position
        is solved.
    tip_link : str or None
        end-effector link. Defaults to `group.tip_link`.
    av_init : numpy.ndarray(n_dof,) or None
        initial guess.
    attempts : int
        maximum number of restarts.
    timeout : float
        time budget per attempt [sec].

    Returns
    -------
    av : numpy.ndarray(n_dof,) or None
        solution, or None if no attempt reached the tolerances.
    """
    tip_link = tip_link or group.tip_link
    pos_target = np.asarray(pos_target, dtype=np.float64)
    if quat_target is not None:
        quat_target = np.asarray(quat_target, dtype=np.float64)
        quat_target = quat_target / np.linalg.norm(quat_target)
    if random_state is None:
        random_state = np.random.RandomState()

    lower, upper = group.lower_limits, group.upper_limits
    joint_limits = [
        (lo if np.isfinite(lo) else None, up if np.isfinite(up) else None)
        for lo, up in zip(lower, upper)]
    sample_lower = np.where(np.isfinite(lower), lower, -np.pi)
    sample_upper = np.where(np.isfinite(upper), upper, np.pi)
    if av_init is None:
        av_init = np.array([j.default_position for j in group.active_joints])

    def endeffector_fk(av):
        return group_pose_and_jacobian(
            kinematic_model, group, av, tip_link, base_positions)

    deadline = time.time() + attempts * timeout
    for attempt in range(attempts):
        if attempt > 0:
            if time.time() > deadline:
                break
            av_init = random_state.uniform(sample_lower, sample_upper)
        res = inverse_kinematics_slsqp_common(
            np.asarray(av_init, dtype=np.float64), endeffector_fk,
            joint_limits, pos_target, quat_target)
        av = group.enforce_bounds(res.x)
        pose, _ = endeffector_fk(av)
        pos_err, rot_err = pose_error(pose, pos_target, quat_target)
        if pos_err < position_tolerance and rot_err < rotation_tolerance:
            return av
    return None
