# flake8: noqa

from skstomp.models.sample_arm import SampleArm
