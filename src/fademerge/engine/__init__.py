"""External audio engine integration and admission control."""

from .admission_queue import AdmissionQueue
from .engine_base import EngineAdapter, EngineRunResult
from .ffmpeg_engine import FFmpegEngine
from .filter_graph import FilterGraphSpec
from .merge_engine import MergeEngine

__all__ = [
    "AdmissionQueue",
    "EngineAdapter",
    "EngineRunResult",
    "FFmpegEngine",
    "FilterGraphSpec",
    "MergeEngine",
]
