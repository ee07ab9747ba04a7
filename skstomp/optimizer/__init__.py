# flake8: noqa

from skstomp.optimizer.base import OptimizationResult
from skstomp.optimizer.base import OptimizerBase
from skstomp.optimizer.base import Task

from skstomp.optimizer.stomp import Stomp
from skstomp.optimizer.task import StompOptimizationTask
from skstomp.optimizer.utils import InitializationMethod
