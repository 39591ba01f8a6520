from .pipeline import LabfilePipeline, DefaultLabfilePipeline
from .models import PipelineConfig, PipelineResult

__all__ = [
    "LabfilePipeline",
    "DefaultLabfilePipeline",
    "PipelineConfig",
    "PipelineResult",
]
