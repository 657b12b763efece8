"""
Core module containing data models, signal processing, and the screening engine.

Uses lazy imports for modules with heavy dependencies (librosa, soundfile).
"""

# Models are lightweight - import directly
from coughscan.core.models import (
    N_COEFFICIENTS,
    UNKNOWN_CONDITION,
    Waveform,
    AnalysisRecord,
    ConditionScore,
    ClassificationResult,
    ScreeningResult,
    validate_analysis_record,
    validate_confidence_band,
)

__all__ = [
    # Models (always available)
    "N_COEFFICIENTS",
    "UNKNOWN_CONDITION",
    "Waveform",
    "AnalysisRecord",
    "ConditionScore",
    "ClassificationResult",
    "ScreeningResult",
    "validate_analysis_record",
    "validate_confidence_band",
    # Signal processing
    "FeatureExtractor",
    "AudioAnalysisPipeline",
    # Heavy modules (lazy loaded)
    "AudioLoader",
    "create_audio_loader",
    "ScreeningEngine",
    "create_screening_engine",
    # Batch processing
    "BatchProcessor",
    "BatchResult",
    "ResultWriter",
    "TextResultWriter",
    "JSONResultWriter",
    "create_result_writer",
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    if name == "FeatureExtractor":
        from coughscan.core.features import FeatureExtractor
        return FeatureExtractor
    elif name == "AudioAnalysisPipeline":
        from coughscan.core.pipeline import AudioAnalysisPipeline
        return AudioAnalysisPipeline
    elif name in ("AudioLoader", "create_audio_loader"):
        from coughscan.core import loader
        return getattr(loader, name)
    elif name in ("ScreeningEngine", "create_screening_engine"):
        from coughscan.core import engine
        return getattr(engine, name)
    elif name in ("BatchProcessor", "BatchResult"):
        from coughscan.core import batch_processor
        return getattr(batch_processor, name)
    elif name in ("ResultWriter", "TextResultWriter", "JSONResultWriter", "create_result_writer"):
        from coughscan.core import result_writer
        return getattr(result_writer, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
