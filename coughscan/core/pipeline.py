"""
Audio analysis pipeline for CoughScan.

Combines whole-signal statistics and the MFCC feature set into one
AnalysisRecord per recording.
"""

from datetime import datetime

from coughscan.core.analyzer_base import BaseAnalyzer
from coughscan.core.features import FeatureExtractor
from coughscan.core.models import AnalysisRecord, Waveform
from coughscan.core.statistics import rms, spectral_centroid, zero_crossing_rate
from coughscan.utils.errors import InvalidInputError


class AudioAnalysisPipeline(BaseAnalyzer[AnalysisRecord]):
    """
    Waveform -> AnalysisRecord.

    Stateless apart from its name; safe to share between threads.
    """

    def __init__(self) -> None:
        super().__init__("audio_pipeline", "1.0.0")

    def _analyze_impl(self, waveform: Waveform) -> AnalysisRecord:
        if not isinstance(waveform, Waveform):
            raise InvalidInputError(
                f"Expected Waveform, got {type(waveform).__name__}",
                field="waveform"
            )
        if waveform.is_empty:
            raise InvalidInputError("Waveform is empty", field="samples")

        samples = waveform.samples
        record = AnalysisRecord(
            duration=waveform.duration,
            rms=rms(samples),
            zero_crossing_rate=zero_crossing_rate(samples),
            spectral_centroid=spectral_centroid(samples, waveform.sample_rate),
            mfcc_features=FeatureExtractor.extract_mfcc(samples),
            timestamp=datetime.now(),
        )

        self.logger.info(
            f"Analyzed {waveform.duration:.2f}s @ {waveform.sample_rate} Hz: "
            f"rms={record.rms:.4f} zcr={record.zero_crossing_rate:.4f} "
            f"centroid={record.spectral_centroid:.1f} Hz frames={record.num_frames}"
        )
        return record
