"""Cost calculation for transcoding, video detection and transcription."""

from dataclasses import dataclass
from typing import Optional, Sequence

from mediacost.config import Settings
from mediacost.db.models import Conversion, ConversionStatus
from mediacost.services.pricing import (
    DetectionFeature,
    PricingSchedule,
    ResolutionTier,
    classify_height,
)
from mediacost.services.presets import PresetDescriptor


@dataclass(frozen=True)
class EnrichmentSelection:
    """Which billable analysis passes run on a media file."""

    face_detection: bool = False
    content_moderation: bool = False
    label_detection: bool = False
    person_tracking: bool = False
    transcription: bool = False

    @classmethod
    def from_conversion(cls, conversion: Conversion) -> "EnrichmentSelection":
        """Passes that finished for a conversion; pending and failed ones count as off."""

        def finished(code: Optional[int]) -> bool:
            return code is not None and int(code) == ConversionStatus.FINISHED

        return cls(
            face_detection=finished(conversion.rekog_face_status),
            content_moderation=finished(conversion.rekog_moderation_status),
            label_detection=finished(conversion.rekog_label_status),
            person_tracking=finished(conversion.rekog_person_status),
            transcription=finished(conversion.transcribe_status),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "EnrichmentSelection":
        """Default passes applied to media that has not been converted yet."""
        return cls(
            face_detection=settings.detect_faces,
            content_moderation=settings.detect_moderation,
            label_detection=settings.detect_labels,
            person_tracking=settings.detect_people,
            transcription=settings.transcribe,
        )

    def detection_features(self) -> list[DetectionFeature]:
        enabled = {
            DetectionFeature.FACE_DETECTION: self.face_detection,
            DetectionFeature.CONTENT_MODERATION: self.content_moderation,
            DetectionFeature.LABEL_DETECTION: self.label_detection,
            DetectionFeature.PERSON_TRACKING: self.person_tracking,
        }
        return [feature for feature, on in enabled.items() if on]


def _minutes(duration: Optional[float]) -> float:
    return max(0.0, float(duration or 0.0)) / 60.0


class CostCalculator:
    """
    Prices media processing with a fixed pricing schedule and selection.

    All costs are USD at full float precision; callers round for display.
    A transcode cost of None means it cannot be calculated because no
    presets are configured, which is distinct from a cost of zero.
    """

    def __init__(
        self,
        pricing: PricingSchedule,
        presets: Sequence[PresetDescriptor],
        enrichment: EnrichmentSelection,
        hd_min_height: int,
    ):
        self.pricing = pricing
        self.presets = tuple(presets)
        self.enrichment = enrichment
        self.hd_min_height = hd_min_height

    def has_presets(self) -> bool:
        return len(self.presets) > 0

    def _tier_rates(self, source_tier: ResolutionTier, audio_streams: int) -> dict[ResolutionTier, float]:
        """Per-minute rate for each distinct output tier the presets produce."""
        rates: dict[ResolutionTier, float] = {}
        for preset in self.presets:
            preset_tier = preset.tier(self.hd_min_height)
            # Output never exceeds the source resolution
            tier = min(preset_tier, source_tier, key=lambda t: t.rank)
            if tier == ResolutionTier.AUDIO and audio_streams == 0:
                continue
            # Configured rates price the preset's own output only
            rate = preset.rate_per_minute if tier == preset_tier else None
            if rate is None:
                rate = self.pricing.transcode[tier]
            rates[tier] = max(rate, rates.get(tier, 0.0))
        return rates

    def transcode_cost(
        self,
        height: Optional[int],
        duration: Optional[float],
        video_streams: int = 1,
        audio_streams: int = 1,
    ) -> Optional[float]:
        """
        Cost to transcode a file with every configured preset.

        Args:
            height: Source video height in pixels, 0 or None for audio
            duration: Duration in seconds
            video_streams: Number of video streams in the source
            audio_streams: Number of audio streams in the source

        Returns:
            Cost in USD, or None when there are no presets to price with
        """
        if not self.has_presets():
            return None
        if not video_streams:
            return 0.0

        source_tier = classify_height(height, self.hd_min_height)
        rates = self._tier_rates(source_tier, audio_streams or 0)
        return _minutes(duration) * sum(rates.values())

    def detection_cost(self, duration: Optional[float]) -> float:
        """Cost of every enabled video detection pass."""
        minutes = _minutes(duration)
        return sum(
            minutes * self.pricing.detection[feature]
            for feature in self.enrichment.detection_features()
        )

    def transcription_cost(self, duration: Optional[float]) -> float:
        if not self.enrichment.transcription:
            return 0.0
        return _minutes(duration) * self.pricing.transcription

    def total_cost(
        self,
        height: Optional[int],
        duration: Optional[float],
        video_streams: int = 1,
        audio_streams: int = 1,
    ) -> Optional[float]:
        """Transcode, detection and transcription cost together, None if transcode is None."""
        transcode = self.transcode_cost(height, duration, video_streams, audio_streams)
        if transcode is None:
            return None
        return transcode + self.detection_cost(duration) + self.transcription_cost(duration)
