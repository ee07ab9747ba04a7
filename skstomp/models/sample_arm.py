import numpy as np

from skstomp.model import KinematicModel


def sample_arm_description(radius=0.04):
    joint_limits = [
        (-np.pi, np.pi), (-2.5, 2.5), (-2.5, 2.5),
        (-np.pi, np.pi), (-2.0, 2.0), (-np.pi, np.pi)]
    axes = [[0, 0, 1], [0, 1, 0], [0, 1, 0],
            [0, 0, 1], [0, 1, 0], [0, 0, 1]]
    # distance from each joint to the next one along the local z axis
    lengths = [0.2, 0.4, 0.35, 0.1, 0.1, 0.05]

    links = []
    joints = []
    parent = 'base_link'
    offset = 0.1
    for i, (length, axis, (lower, upper)) in enumerate(
            zip(lengths, axes, joint_limits)):
        child = 'link_{}'.format(i + 1)
        links.append({'name': child, 'length': length,
                      'collision_radius': radius})
        joints.append({
            'type': 'revolute',
            'name': 'joint_{}'.format(i + 1),
            'parent_link': parent,
            'child_link': child,
            'xyz': [0.0, 0.0, offset],
            'axis': axis,
            'min_position': lower,
            'max_position': upper,
            'max_velocity': 2.0,
            'max_acceleration': 4.0,
        })
        parent = child
        offset = length
    links.append({'name': 'tool0'})
    joints.append({
        'type': 'fixed',
        'name': 'tool0_joint',
        'parent_link': parent,
        'child_link': 'tool0',
        'xyz': [0.0, 0.0, offset],
    })
    return {
        'name': 'sample_arm',
        'root_link': 'base_link',
        'links': links,
        'joints': joints,
        'groups': [{
            'name': 'manipulator',
            'joints': [j['name'] for j in joints],
            'tip_link': 'tool0',
        }],
    }


class SampleArm(KinematicModel):
    """Six-axis serial arm with a `manipulator` planning group.

    The arm stands along the world z axis when every joint is zero.
    Each link is approximated by spheres of radius `radius` for
    collision checking.
    """

    def __init__(self, radius=0.04):
        model = KinematicModel.from_dict(sample_arm_description(radius))
        super(SampleArm, self).__init__(
            model.name, model.root_link,
            [link for link in model.link_list
             if link is not model.root_link],
            model.joints)
        for name in model.joint_model_group_names:
            group = model.get_joint_model_group(name)
            self.add_joint_model_group(
                name, group.joint_names, tip_link=group.tip_link)

    def reset_manip_pose(self):
        return np.array([0.0, 0.4, 1.2, 0.0, 0.8, 0.0])
