"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mediacost.config import Settings
from mediacost.db.models import (
    Base,
    Conversion,
    ConversionPreset,
    ConversionStatus,
    MediaMetadata,
    StoredFile,
)
from mediacost.db.session import get_db
from mediacost.main import app
from mediacost.services.presets import PresetCatalog
from mediacost.services.pricing import DetectionFeature, PricingSchedule, ResolutionTier
from mediacost.services.report_service import ReportService
from mediacost.services.report_store import ReportStore


HD_PRESET_ID = "System-Generic_Hd_Mp4_Avc_Aac_16x9_1920x1080p_24Hz_6Mbps"
SD_PRESET_ID = "System-Generic_Sd_Mp4_Avc_Aac_16x9_854x480p_24Hz_1.5Mbps"
AUDIO_PRESET_ID = "System-Generic_Audio_Only_Mp3_128Kbps"

MEDIACONVERT_PRESETS = {
    HD_PRESET_ID: {
        "Name": HD_PRESET_ID,
        "Description": "Generic 1080p MP4",
        "Category": "GENERIC",
        "Type": "SYSTEM",
        "Settings": {
            "ContainerSettings": {"Container": "MP4"},
            "VideoDescription": {"Width": 1920, "Height": 1080},
            "AudioDescriptions": [{"CodecSettings": {"Codec": "AAC"}}],
        },
    },
    SD_PRESET_ID: {
        "Name": SD_PRESET_ID,
        "Description": "Generic 480p MP4",
        "Category": "GENERIC",
        "Type": "SYSTEM",
        "Settings": {
            "ContainerSettings": {"Container": "MP4"},
            "VideoDescription": {"Width": 854, "Height": 480},
            "AudioDescriptions": [{"CodecSettings": {"Codec": "AAC"}}],
        },
    },
    AUDIO_PRESET_ID: {
        "Name": AUDIO_PRESET_ID,
        "Description": "Audio only MP3 128k",
        "Category": "GENERIC",
        "Type": "SYSTEM",
        "Settings": {
            "ContainerSettings": {"Container": "RAW"},
            "AudioDescriptions": [{"CodecSettings": {"Codec": "MP3"}}],
        },
    },
}


class FakeMediaConvertClient:
    """Stands in for the mediaconvert boto3 client."""

    def __init__(self, presets=None):
        self.presets = presets if presets is not None else MEDIACONVERT_PRESETS
        self.calls = []

    def get_preset(self, Name):
        self.calls.append(Name)
        return {"Preset": self.presets[Name]}


class FakePricingClient:
    """Returns a fixed schedule and counts lookups."""

    def __init__(self, schedule: PricingSchedule):
        self.schedule = schedule
        self.calls = []

    def fetch_pricing(self, region: str) -> PricingSchedule:
        self.calls.append(region)
        return self.schedule


@pytest.fixture
def pricing() -> PricingSchedule:
    """Unit prices used throughout the tests (USD per minute)."""
    return PricingSchedule(
        region="ap-southeast-2",
        transcode={
            ResolutionTier.HD: 0.034,
            ResolutionTier.SD: 0.017,
            ResolutionTier.AUDIO: 0.0045,
        },
        detection={
            DetectionFeature.FACE_DETECTION: 0.01,
            DetectionFeature.CONTENT_MODERATION: 0.01,
            DetectionFeature.LABEL_DETECTION: 0.01,
            DetectionFeature.PERSON_TRACKING: 0.01,
        },
        transcription=0.024,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        aws_api_key="AKIATEST",
        aws_api_secret="secret",
        aws_region="ap-southeast-2",
        transcode_presets=[HD_PRESET_ID],
        proactive_conversion=True,
        convert_from=86400,
        detect_faces=True,
        transcribe=True,
    )


@pytest.fixture
def pricing_client(pricing) -> FakePricingClient:
    return FakePricingClient(pricing)


@pytest.fixture
def mediaconvert_client() -> FakeMediaConvertClient:
    return FakeMediaConvertClient()


@pytest.fixture
def report_service(settings, pricing_client, mediaconvert_client) -> ReportService:
    catalog = PresetCatalog(settings.transcode_presets, mediaconvert_client)
    return ReportService(settings, pricing_client, catalog, ReportStore())


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a fresh test database engine per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ============== Data helpers ==============


def hours_ago(hours: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=hours)


async def add_media(
    db: AsyncSession,
    contenthash: str,
    duration: float,
    height: Optional[int] = 1080,
    width: Optional[int] = 1920,
    videostreams: int = 1,
    audiostreams: int = 1,
    size: int = 1024,
    formatname: str = "mov,mp4,m4a,3gp,3g2,mj2",
) -> MediaMetadata:
    record = MediaMetadata(
        contenthash=contenthash,
        duration=duration,
        width=width,
        height=height,
        videostreams=videostreams,
        audiostreams=audiostreams,
        size=size,
        metadata_={"formatname": formatname},
    )
    db.add(record)
    await db.flush()
    return record


async def add_conversion(
    db: AsyncSession,
    contenthash: str,
    status: int = ConversionStatus.FINISHED,
    presets: tuple = (HD_PRESET_ID,),
    enrichment_status: int = ConversionStatus.FINISHED,
    transcribe_status: Optional[int] = None,
) -> Conversion:
    conversion = Conversion(
        pathnamehash=f"path-{contenthash}",
        contenthash=contenthash,
        status=status,
        transcoder_status=status,
        rekog_face_status=enrichment_status,
        rekog_moderation_status=enrichment_status,
        rekog_label_status=enrichment_status,
        rekog_person_status=enrichment_status,
        transcribe_status=enrichment_status if transcribe_status is None else transcribe_status,
        timecreated=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
        timecompleted=datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
    )
    db.add(conversion)
    await db.flush()
    for preset in presets:
        db.add(ConversionPreset(convid=conversion.id, preset=preset))
    await db.flush()
    return conversion


async def add_file(
    db: AsyncSession,
    contenthash: str,
    mimetype: Optional[str] = "video/mp4",
    filearea: str = "content",
    filename: str = "lecture.mp4",
    component: str = "mod_resource",
    timecreated: Optional[datetime] = None,
) -> StoredFile:
    stored = StoredFile(
        contenthash=contenthash,
        pathnamehash=f"{contenthash}-{filearea}-{filename}",
        component=component,
        filearea=filearea,
        filename=filename,
        mimetype=mimetype,
        filesize=1024,
        timecreated=timecreated or hours_ago(1),
    )
    db.add(stored)
    await db.flush()
    return stored
