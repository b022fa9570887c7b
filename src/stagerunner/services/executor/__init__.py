from .task_group import run_all
from .pipeline import PipelineRun

__all__ = [
    "run_all",
    "PipelineRun",
]
