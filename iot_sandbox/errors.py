"""Exceptions raised by the sandbox controller and scheduler"""


class SandboxError(Exception):
    """Base class for sandbox errors."""


class UnknownComponentError(SandboxError, KeyError):
    """Definition id not in the catalog, or instance id not placed."""

    def __init__(self, component_id):
        super().__init__(component_id)
        self.component_id = component_id

    def __str__(self):
        return f"Unknown component: {self.component_id}"


class SimulationNotReady(SandboxError):
    """Raised by start() while readiness issues remain. Carries the issue list."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__("Simulation cannot start: " + "; ".join(self.issues))
