# Infrastructure (Meshy client, Rate gate, Retry policy, Task poller)

from model_synth.infra.meshy_errors import (
    ErrorKind,
    MeshyError,
    MeshyErrorHandler,
)
from model_synth.infra.retry_policy import RetryPolicy, RetryEvent
from model_synth.infra.rate_gate import RateGate
from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.task_poller import TaskPoller

__all__ = [
    "ErrorKind",
    "MeshyError",
    "MeshyErrorHandler",
    "RetryPolicy",
    "RetryEvent",
    "RateGate",
    "MeshyClient",
    "TaskPoller",
]
