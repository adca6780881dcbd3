from iot_sandbox.circuit.power import SystemReport, evaluate_system, network_reachable
from iot_sandbox.circuit.validator import ValidationResult, validate_connection

__all__ = [
    'SystemReport',
    'evaluate_system',
    'network_reachable',
    'ValidationResult',
    'validate_connection',
]
