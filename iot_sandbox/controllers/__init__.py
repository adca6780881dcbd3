from iot_sandbox.controllers.sandbox_controller import SandboxController
from iot_sandbox.controllers.simulation_scheduler import SimulationScheduler

__all__ = [
    'SandboxController',
    'SimulationScheduler',
]
