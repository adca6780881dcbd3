from iot_sandbox.simulators.flask_simulator import (
    DispatchResult,
    HttpRequest,
    HttpResponse,
    dispatch,
)
from iot_sandbox.simulators.microbit_simulator import (
    ExecutionResult,
    sensor_readings,
    simulate_execution,
)
from iot_sandbox.simulators.sensor_simulators import SensorFluctuator, fluctuate
from iot_sandbox.simulators.timers import ManualTimerSource, ThreadingTimerSource

__all__ = [
    'DispatchResult',
    'HttpRequest',
    'HttpResponse',
    'dispatch',
    'ExecutionResult',
    'sensor_readings',
    'simulate_execution',
    'SensorFluctuator',
    'fluctuate',
    'ManualTimerSource',
    'ThreadingTimerSource',
]
