"""Report aggregation: per-file overview, conversion cost estimate and usage counters."""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediacost.config import Settings
from mediacost.db.models import (
    Conversion,
    ConversionPreset,
    ConversionStatus,
    MediaMetadata,
    StoredFile,
)
from mediacost.schemas.schemas import OverviewRow
from mediacost.services.cost_calculator import CostCalculator, EnrichmentSelection
from mediacost.services.presets import PresetCatalog
from mediacost.services.pricing import PricingClient, PricingSchedule
from mediacost.services.report_store import ReportStore, ReportScalar

logger = logging.getLogger(__name__)

DRAFT_AREA = "draft"
DIRECTORY_FILENAME = "."


class MediaIntegrityError(Exception):
    """A media record with neither audio nor video reached classification."""


class MediaType(str, enum.Enum):
    VIDEO = "Video"
    AUDIO = "Audio"


def get_file_type(record: MediaMetadata) -> MediaType:
    """
    Classify a metadata record as video or audio.

    Raises:
        MediaIntegrityError: the record has no audio or video stream
    """
    if record.videostreams:
        return MediaType.VIDEO
    if record.audiostreams:
        return MediaType.AUDIO
    raise MediaIntegrityError(f"No audio or video stream in media metadata contenthash {record.contenthash}")


def file_status_label(code: Optional[int]) -> str:
    """Human readable label for a conversion status code."""
    if code == ConversionStatus.FINISHED:
        return "Finished"
    if code in (ConversionStatus.PENDING, ConversionStatus.IN_PROGRESS):
        return "In Progress"
    if code == ConversionStatus.FILE_MISSING:
        return "File Missing"
    return "Error"


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 3)


@dataclass
class ReportRun:
    """State scoped to a single report run; pricing is fetched at most once."""

    settings: Settings
    pricing: Optional[PricingSchedule] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def get_pricing(self, client: PricingClient) -> PricingSchedule:
        if self.pricing is None:
            self.pricing = client.fetch_pricing(self.settings.aws_region)
        return self.pricing


class ReportService:
    """Builds and stores every report value for the dashboards."""

    def __init__(
        self,
        settings: Settings,
        pricing_client: PricingClient,
        preset_catalog: PresetCatalog,
        store: ReportStore,
    ):
        self.settings = settings
        self.pricing_client = pricing_client
        self.preset_catalog = preset_catalog
        self.store = store

    # ============== File counts ==============

    def _counted_files(self):
        """Conditions for file rows that count as user files."""
        return and_(
            StoredFile.filearea != DRAFT_AREA,
            StoredFile.filename != DIRECTORY_FILENAME,
            StoredFile.component != self.settings.report_component,
        )

    async def get_all_file_count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(StoredFile).where(self._counted_files()))
        return result.scalar() or 0

    async def get_audio_file_count(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(StoredFile)
            .where(self._counted_files(), StoredFile.mimetype.in_(self.settings.audio_mime_types))
        )
        return result.scalar() or 0

    async def get_video_file_count(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(StoredFile)
            .where(self._counted_files(), StoredFile.mimetype.in_(self.settings.video_mime_types))
        )
        return result.scalar() or 0

    async def get_unique_multimedia_objects(self, db: AsyncSession) -> int:
        """Count distinct content hashes among audio and video files."""
        mimetypes = self.settings.audio_mime_types + self.settings.video_mime_types
        result = await db.execute(
            select(func.count(func.distinct(StoredFile.contenthash))).where(
                self._counted_files(), StoredFile.mimetype.in_(mimetypes)
            )
        )
        return result.scalar() or 0

    async def get_metadata_processed_files(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(MediaMetadata))
        return result.scalar() or 0

    async def get_file_count(self, db: AsyncSession, contenthash: str) -> int:
        """Number of file instances with this content, ignoring drafts and directories."""
        result = await db.execute(
            select(func.count())
            .select_from(StoredFile)
            .where(
                StoredFile.contenthash == contenthash,
                StoredFile.filearea != DRAFT_AREA,
                StoredFile.filename != DIRECTORY_FILENAME,
            )
        )
        return result.scalar() or 0

    # ============== Overview ==============

    async def get_conversion_presets(self, db: AsyncSession, convid: int) -> list[str]:
        result = await db.execute(
            select(ConversionPreset.preset)
            .where(ConversionPreset.convid == convid)
            .order_by(ConversionPreset.id)
        )
        return list(result.scalars().all())

    async def get_file_cost(
        self,
        db: AsyncSession,
        run: ReportRun,
        record: MediaMetadata,
        conversion: Conversion,
    ) -> Optional[float]:
        """Actual cost of a conversion: its presets and the passes that finished."""
        preset_ids = await self.get_conversion_presets(db, conversion.id)
        calculator = CostCalculator(
            run.get_pricing(self.pricing_client),
            self.preset_catalog.list_presets(preset_ids),
            EnrichmentSelection.from_conversion(conversion),
            self.settings.hd_min_height,
        )
        return calculator.total_cost(
            record.height, record.duration, record.videostreams, record.audiostreams
        )

    async def build_overview_rows(self, db: AsyncSession, run: ReportRun) -> list[OverviewRow]:
        """One row per content hash that has both metadata and a conversion."""
        result = await db.execute(
            select(MediaMetadata, Conversion)
            .join(Conversion, Conversion.contenthash == MediaMetadata.contenthash)
            .where(or_(MediaMetadata.videostreams > 0, MediaMetadata.audiostreams > 0))
            .order_by(MediaMetadata.contenthash, Conversion.id.desc())
        )

        rows = []
        seen = set()
        for record, conversion in result.all():
            # Newest conversion wins when a file was converted more than once
            if record.contenthash in seen:
                continue
            seen.add(record.contenthash)

            metadata = record.metadata_ or {}
            cost = await self.get_file_cost(db, run, record, conversion)
            rows.append(
                OverviewRow(
                    contenthash=record.contenthash,
                    type=get_file_type(record).value,
                    format=metadata.get("formatname"),
                    resolution=f"{record.width or 0} X {record.height or 0}",
                    duration=round(record.duration or 0.0, 3),
                    filesize=record.size or 0,
                    cost=_round(cost),
                    status=file_status_label(conversion.status),
                    files=await self.get_file_count(db, record.contenthash),
                    timecreated=conversion.timecreated,
                    timecompleted=conversion.timecompleted,
                )
            )
        return rows

    # ============== Conversion estimate ==============

    async def _unconverted_duration(self, db: AsyncSession, cutoff: datetime, *conditions) -> float:
        """Sum the duration of unconverted media whose newest file is newer than the cutoff."""
        latest = (
            select(
                StoredFile.contenthash.label("contenthash"),
                func.max(StoredFile.timecreated).label("timecreated"),
            )
            .where(StoredFile.filearea != DRAFT_AREA)
            .group_by(StoredFile.contenthash)
            .subquery()
        )
        query = (
            select(func.coalesce(func.sum(MediaMetadata.duration), 0.0))
            .select_from(MediaMetadata)
            .join(latest, latest.c.contenthash == MediaMetadata.contenthash)
            .outerjoin(Conversion, Conversion.contenthash == MediaMetadata.contenthash)
            .where(Conversion.id.is_(None), latest.c.timecreated > cutoff, *conditions)
        )
        result = await db.execute(query)
        return float(result.scalar() or 0.0)

    async def get_unconverted_durations(self, db: AsyncSession, cutoff: datetime) -> dict[str, float]:
        """Duration in seconds of unconverted HD video, SD video and audio."""
        hd_min_height = self.settings.hd_min_height
        return {
            "hd": await self._unconverted_duration(
                db, cutoff, MediaMetadata.height >= hd_min_height, MediaMetadata.videostreams > 0
            ),
            "sd": await self._unconverted_duration(
                db,
                cutoff,
                MediaMetadata.height < hd_min_height,
                MediaMetadata.height > 0,
                MediaMetadata.videostreams > 0,
            ),
            "audio": await self._unconverted_duration(
                db,
                cutoff,
                or_(MediaMetadata.height == 0, MediaMetadata.height.is_(None)),
                MediaMetadata.audiostreams > 0,
            ),
        }

    async def calculate_total_conversion_cost(self, db: AsyncSession, run: ReportRun) -> Optional[float]:
        """
        Estimate the cost of converting media that has no conversion yet.

        Returns:
            0 when background conversion is off, None when no presets are
            configured, otherwise the cost in USD
        """
        if not self.settings.proactive_conversion:
            return 0.0

        presets = self.preset_catalog.list_presets()
        if not presets:
            return None
        calculator = CostCalculator(
            run.get_pricing(self.pricing_client),
            presets,
            EnrichmentSelection.from_settings(self.settings),
            self.settings.hd_min_height,
        )

        cutoff = run.started_at - timedelta(seconds=self.settings.convert_from)
        durations = await self.get_unconverted_durations(db, cutoff)

        hd_cost = calculator.transcode_cost(self.settings.hd_min_height, durations["hd"])
        sd_cost = calculator.transcode_cost(self.settings.sd_min_height, durations["sd"])
        audio_cost = calculator.transcode_cost(self.settings.audio_height, durations["audio"])

        # Detection runs on video only
        hd_cost += calculator.detection_cost(durations["hd"])
        sd_cost += calculator.detection_cost(durations["sd"])

        hd_cost += calculator.transcription_cost(durations["hd"])
        sd_cost += calculator.transcription_cost(durations["sd"])
        audio_cost += calculator.transcription_cost(durations["audio"])

        return hd_cost + sd_cost + audio_cost

    # ============== Run ==============

    async def run(self, db: AsyncSession) -> Optional[dict[str, ReportScalar]]:
        """
        Build and store every report value.

        Everything that needs pricing or presets is computed before the first
        write, so a failed lookup leaves the previous report untouched.

        Returns:
            The stored scalar values, or None when no AWS credentials are configured
        """
        logger.info("Processing data for overview report")
        if not self.settings.aws_api_key:
            logger.info("AWS API key is not set. Exiting early.")
            return None

        run = ReportRun(self.settings)
        rows = await self.build_overview_rows(db, run)

        logger.info("Calculating cost to convert media")
        total = _round(await self.calculate_total_conversion_cost(db, run))

        await self.store.replace_overview(db, rows)

        values: dict[str, ReportScalar] = {}

        async def record(name: str, compute: Callable):
            values[name] = await compute(db)
            await self.store.upsert_value(db, name, values[name])

        logger.info("Processing media file data")
        await record("totalfiles", self.get_all_file_count)
        await record("audiofiles", self.get_audio_file_count)
        await record("videofiles", self.get_video_file_count)

        logger.info("Identifying unique media files")
        await record("uniquemultimediaobjects", self.get_unique_multimedia_objects)

        logger.info("Discovering media metadata")
        await record("metadataprocessedfiles", self.get_metadata_processed_files)

        logger.info("Discovering transcoded files")
        await record("transcodedfiles", self.store.count_finished)

        logger.info("Calculating total cost of converted media")
        await record("convertedcost", self.store.sum_overview_cost)

        values["totalcost"] = total
        logger.info("Writing report data")
        await self.store.upsert_value(db, "totalcost", values["totalcost"])
        return values
