from .context import (
    TaskContext,
    current_context,
    environment_overlay,
    with_directory,
    with_env,
    working_directory,
)
from .models import (
    AggregateResult,
    CheckoutContext,
    CheckoutRef,
    Outcome,
    PipelineReport,
    PipelineState,
    TaskResult,
)
from .exceptions import (
    PipelineFailure,
    StageAggregateFailure,
    StageRunnerError,
    TaskExecutionFailure,
)

__all__ = [
    "TaskContext",
    "current_context",
    "environment_overlay",
    "with_directory",
    "with_env",
    "working_directory",
    "AggregateResult",
    "CheckoutContext",
    "CheckoutRef",
    "Outcome",
    "PipelineReport",
    "PipelineState",
    "TaskResult",
    "PipelineFailure",
    "StageAggregateFailure",
    "StageRunnerError",
    "TaskExecutionFailure",
]
