from .orchestrator import Failed, Idle, Orchestrator, OrchestratorState, Running, Succeeded, Validating

__all__ = [
    "Failed",
    "Idle",
    "Orchestrator",
    "OrchestratorState",
    "Running",
    "Succeeded",
    "Validating",
]
