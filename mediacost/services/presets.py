"""MediaConvert preset catalog."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from mediacost.config import Settings
from mediacost.services.pricing import ResolutionTier, classify_height

logger = logging.getLogger(__name__)


class PresetUnavailableError(Exception):
    """A configured preset could not be read."""


@dataclass(frozen=True)
class PresetDescriptor:
    """The parts of a transcoding preset that affect its price."""

    preset_id: str
    name: str
    container: str
    has_video: bool
    height: Optional[int] = None  # None means the output follows the source
    rate_per_minute: Optional[float] = None

    def tier(self, hd_min_height: int) -> ResolutionTier:
        """Pricing tier of this preset's output."""
        if not self.has_video:
            return ResolutionTier.AUDIO
        if self.height is None:
            return ResolutionTier.HD
        return classify_height(self.height, hd_min_height)

    @classmethod
    def from_preset(cls, preset: dict, rate_per_minute: Optional[float] = None) -> "PresetDescriptor":
        """Build from a MediaConvert ``Preset`` structure."""
        settings = preset.get("Settings") or {}
        video = settings.get("VideoDescription")
        return cls(
            preset_id=preset["Name"],
            name=preset.get("Description") or preset["Name"],
            container=(settings.get("ContainerSettings") or {}).get("Container", ""),
            has_video=video is not None,
            height=video.get("Height") if video else None,
            rate_per_minute=rate_per_minute,
        )


class PresetCatalog:
    """Configured transcoding presets, read from MediaConvert by name."""

    def __init__(
        self,
        preset_ids: Iterable[str],
        client=None,
        rate_overrides: Optional[dict[str, float]] = None,
    ):
        self._preset_ids = list(dict.fromkeys(preset_ids))
        self._client = client
        self._rate_overrides = rate_overrides or {}
        self._cache: dict[str, PresetDescriptor] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "PresetCatalog":
        client = boto3.client(
            "mediaconvert",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_api_key,
            aws_secret_access_key=settings.aws_api_secret,
        )
        return cls(settings.transcode_presets, client, settings.preset_rates)

    @property
    def preset_ids(self) -> list[str]:
        return list(self._preset_ids)

    def _read(self, preset_id: str) -> PresetDescriptor:
        if preset_id not in self._cache:
            try:
                response = self._client.get_preset(Name=preset_id)
            except (BotoCoreError, ClientError) as e:
                raise PresetUnavailableError(f"Could not read preset {preset_id}: {e}") from e
            self._cache[preset_id] = PresetDescriptor.from_preset(
                response["Preset"], self._rate_overrides.get(preset_id)
            )
        return self._cache[preset_id]

    def list_presets(self, ids: Optional[Iterable[str]] = None) -> list[PresetDescriptor]:
        """
        Get preset descriptors.

        Args:
            ids: Preset names to read; the whole configured catalog when None

        Returns:
            One descriptor per distinct name, in request order
        """
        wanted = self._preset_ids if ids is None else list(dict.fromkeys(ids))
        presets = [self._read(preset_id) for preset_id in wanted]
        logger.debug(f"Resolved {len(presets)} presets")
        return presets
