import unittest

import numpy as np
from numpy import testing

from skstomp.optimizer import OptimizationResult
from skstomp.optimizer import OptimizerBase
from skstomp.planner import NoSolutionError
from skstomp.planner import OptimizationDriver
from skstomp.planner import PlanningConfiguration
from skstomp.planner import ProblemMode
from skstomp.planner import ProblemSpec


class RecordingOptimizer(OptimizerBase):

    def __init__(self, result):
        self.result = result
        self.calls = []

    def set_config(self, config):
        self.calls.append(('set_config', config))

    def solve(self, start, goal):
        self.calls.append(('solve', start, goal))
        return self.result

    def solve_seeded(self, initial_parameters):
        self.calls.append(('solve_seeded', initial_parameters))
        return self.result

    def cancel(self):
        self.calls.append(('cancel',))
        return True

    def clear(self):
        self.calls.append(('clear',))


class TestOptimizationDriver(unittest.TestCase):

    def setUp(self):
        self.config = PlanningConfiguration(2, num_timesteps=3)
        self.parameters = np.arange(6, dtype=np.float64).reshape(2, 3)

    def test_boundary_value(self):
        optimizer = RecordingOptimizer(OptimizationResult(self.parameters))
        driver = OptimizationDriver(optimizer)
        problem = ProblemSpec(ProblemMode.BOUNDARY_VALUE, self.config,
                              start=np.zeros(2), goal=np.ones(2))
        testing.assert_equal(driver.run(problem), self.parameters)
        self.assertEqual(optimizer.calls[0], ('set_config', self.config))
        self.assertEqual(optimizer.calls[1][0], 'solve')

    def test_seeded(self):
        optimizer = RecordingOptimizer(OptimizationResult(self.parameters))
        driver = OptimizationDriver(optimizer)
        problem = ProblemSpec(ProblemMode.SEEDED, self.config,
                              seed=self.parameters)
        driver.run(problem)
        self.assertEqual(optimizer.calls[1][0], 'solve_seeded')

    def test_no_solution(self):
        problem = ProblemSpec(ProblemMode.BOUNDARY_VALUE, self.config,
                              start=np.zeros(2), goal=np.ones(2))
        failed = OptimizationResult(self.parameters, success=False)
        with self.assertRaises(NoSolutionError):
            OptimizationDriver(RecordingOptimizer(failed)).run(problem)

        empty = OptimizationResult(np.zeros((2, 0)))
        with self.assertRaises(NoSolutionError):
            OptimizationDriver(RecordingOptimizer(empty)).run(problem)

        with self.assertRaises(NoSolutionError):
            OptimizationDriver(None).run(problem)

    def test_cancel_and_reset(self):
        optimizer = RecordingOptimizer(OptimizationResult(self.parameters))
        driver = OptimizationDriver(optimizer)
        self.assertTrue(driver.cancel())
        driver.reset()
        self.assertEqual(optimizer.calls, [('cancel',), ('clear',)])

        driver = OptimizationDriver(None)
        self.assertFalse(driver.cancel())
        driver.reset()
