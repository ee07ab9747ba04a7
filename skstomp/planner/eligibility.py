def check_request(request, group_name):
    """Check whether a planner bound to `group_name` can serve a request.

    Parameters
    ----------
    request : skstomp.messages.MotionPlanRequest
    group_name : str

    Returns
    -------
    serviceable : bool
    reason : str
        why the request is rejected, empty if it is serviceable.
    """
    if request.group_name != group_name:
        return False, ('request group {} does not match planner group {}'
                       .format(request.group_name, group_name))
    n_goals = len(request.goal_constraints)
    if n_goals != 1:
        return False, ('request must have exactly one goal region, '
                       'but {} given'.format(n_goals))
    if len(request.goal_constraints[0].joint_constraints) == 0:
        return False, 'goal region has no joint constraints'
    return True, ''
