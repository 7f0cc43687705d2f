"""AWS unit pricing lookup for transcoding, detection and transcription."""

import enum
import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from mediacost.config import Settings

logger = logging.getLogger(__name__)


class PricingUnavailableError(Exception):
    """Unit prices could not be obtained for a region."""


class ResolutionTier(str, enum.Enum):
    """Pricing tiers for transcoded output, ordered audio < sd < hd."""

    AUDIO = "audio"
    SD = "sd"
    HD = "hd"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {ResolutionTier.AUDIO: 0, ResolutionTier.SD: 1, ResolutionTier.HD: 2}


def classify_height(height: Optional[int], hd_min_height: int) -> ResolutionTier:
    """Map a video height in pixels to its pricing tier."""
    if not height:
        return ResolutionTier.AUDIO
    if height >= hd_min_height:
        return ResolutionTier.HD
    return ResolutionTier.SD


class DetectionFeature(str, enum.Enum):
    """Video analysis features billed per minute."""

    FACE_DETECTION = "face_detection"
    CONTENT_MODERATION = "content_moderation"
    LABEL_DETECTION = "label_detection"
    PERSON_TRACKING = "person_tracking"


@dataclass(frozen=True)
class PricingSchedule:
    """USD per-minute prices for one region."""

    region: str
    transcode: Mapping[ResolutionTier, float]
    detection: Mapping[DetectionFeature, float]
    transcription: float

    def __post_init__(self):
        # Freeze the nested tables as well
        object.__setattr__(self, "transcode", MappingProxyType(dict(self.transcode)))
        object.__setattr__(self, "detection", MappingProxyType(dict(self.detection)))


# Price List API filters on location names rather than region codes
REGION_LOCATIONS = {
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-1": "US West (N. California)",
    "us-west-2": "US West (Oregon)",
    "ca-central-1": "Canada (Central)",
    "eu-west-1": "EU (Ireland)",
    "eu-west-2": "EU (London)",
    "eu-west-3": "EU (Paris)",
    "eu-central-1": "EU (Frankfurt)",
    "eu-north-1": "EU (Stockholm)",
    "ap-south-1": "Asia Pacific (Mumbai)",
    "ap-northeast-1": "Asia Pacific (Tokyo)",
    "ap-northeast-2": "Asia Pacific (Seoul)",
    "ap-southeast-1": "Asia Pacific (Singapore)",
    "ap-southeast-2": "Asia Pacific (Sydney)",
    "sa-east-1": "South America (Sao Paulo)",
}

TRANSCODE_SERVICE_CODE = "AWSElementalMediaConvert"
DETECTION_SERVICE_CODE = "AmazonRekognition"
TRANSCRIPTION_SERVICE_CODE = "transcribe"

# Usage type tokens, e.g. "APS2-MediaConvert-Basic-HD-Minutes"
TRANSCODE_USAGE_TIERS = {
    "hd": ResolutionTier.HD,
    "sd": ResolutionTier.SD,
    "audio": ResolutionTier.AUDIO,
    "audioonly": ResolutionTier.AUDIO,
}

# Usage type fragments, e.g. "APS2-Video-FaceDetection-Minutes"
DETECTION_USAGE_FEATURES = {
    "facedetection": DetectionFeature.FACE_DETECTION,
    "contentmoderation": DetectionFeature.CONTENT_MODERATION,
    "labeldetection": DetectionFeature.LABEL_DETECTION,
    "persontracking": DetectionFeature.PERSON_TRACKING,
}

TRANSCRIPTION_USAGE = "transcribeaudio"


def _unit_price(product: dict) -> Optional[float]:
    """Return the first non-zero USD price of an on-demand product, preferring the first tier."""
    prices = []
    for term in product.get("terms", {}).get("OnDemand", {}).values():
        for dimension in term.get("priceDimensions", {}).values():
            usd = float(dimension.get("pricePerUnit", {}).get("USD", 0) or 0)
            if usd > 0:
                prices.append((dimension.get("beginRange", "0") != "0", usd))
    if not prices:
        return None
    return sorted(prices, key=lambda p: p[0])[0][1]


def _usage_type(product: dict) -> str:
    return product.get("product", {}).get("attributes", {}).get("usagetype", "")


class PricingClient:
    """Reads unit prices from the AWS Price List API."""

    def __init__(self, client=None):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "PricingClient":
        return cls(
            boto3.client(
                "pricing",
                region_name=settings.pricing_api_region,
                aws_access_key_id=settings.aws_api_key,
                aws_secret_access_key=settings.aws_api_secret,
            )
        )

    def _products(self, service_code: str, location: str) -> Iterable[dict]:
        """Yield decoded price list products for a service in a location."""
        paginator = self._client.get_paginator("get_products")
        pages = paginator.paginate(
            ServiceCode=service_code,
            Filters=[{"Type": "TERM_MATCH", "Field": "location", "Value": location}],
            FormatVersion="aws_v1",
        )
        for page in pages:
            for item in page.get("PriceList", []):
                yield json.loads(item) if isinstance(item, str) else item

    def _transcode_prices(self, location: str) -> dict[ResolutionTier, float]:
        prices = {}
        for product in self._products(TRANSCODE_SERVICE_CODE, location):
            tokens = {t.lower() for t in _usage_type(product).split("-")}
            for token, tier in TRANSCODE_USAGE_TIERS.items():
                if token in tokens and tier not in prices:
                    price = _unit_price(product)
                    if price is not None:
                        prices[tier] = price
        return prices

    def _detection_prices(self, location: str) -> dict[DetectionFeature, float]:
        prices = {}
        for product in self._products(DETECTION_SERVICE_CODE, location):
            usage = _usage_type(product).lower().replace("-", "")
            if "video" not in usage:
                continue
            for fragment, feature in DETECTION_USAGE_FEATURES.items():
                if fragment in usage and feature not in prices:
                    price = _unit_price(product)
                    if price is not None:
                        prices[feature] = price
        return prices

    def _transcription_price(self, location: str) -> Optional[float]:
        for product in self._products(TRANSCRIPTION_SERVICE_CODE, location):
            usage = _usage_type(product).lower().replace("-", "")
            if usage.endswith(TRANSCRIPTION_USAGE):
                price = _unit_price(product)
                if price is not None:
                    return price
        return None

    def fetch_pricing(self, region: str) -> PricingSchedule:
        """
        Fetch the pricing schedule for a region.

        Raises:
            PricingUnavailableError: region unknown, prices missing or the API failed
        """
        location = REGION_LOCATIONS.get(region)
        if location is None:
            raise PricingUnavailableError(f"No pricing location known for region {region}")

        try:
            transcode = self._transcode_prices(location)
            detection = self._detection_prices(location)
            transcription = self._transcription_price(location)
        except (BotoCoreError, ClientError) as e:
            raise PricingUnavailableError(f"Pricing lookup failed for {region}: {e}") from e

        missing_tiers = set(ResolutionTier) - set(transcode)
        if missing_tiers:
            raise PricingUnavailableError(
                f"Missing transcode prices in {region}: {sorted(t.value for t in missing_tiers)}"
            )
        missing_features = set(DetectionFeature) - set(detection)
        if missing_features:
            raise PricingUnavailableError(
                f"Missing detection prices in {region}: {sorted(f.value for f in missing_features)}"
            )
        if transcription is None:
            raise PricingUnavailableError(f"Missing transcription price in {region}")

        logger.info(f"Fetched pricing for {region} ({location})")
        return PricingSchedule(
            region=region,
            transcode=transcode,
            detection=detection,
            transcription=transcription,
        )
