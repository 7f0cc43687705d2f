"""Database models for the media cost report service."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediacost.db.session import Base


class ConversionStatus(enum.IntEnum):
    """Status codes written by the conversion pipeline."""

    FILE_MISSING = 3
    FINISHED = 200
    PENDING = 201
    IN_PROGRESS = 202
    NOT_FOUND = 404
    ERROR = 500


class MediaMetadata(Base):
    """Metadata extracted from a media file, one row per content hash."""

    __tablename__ = "media_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contenthash: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    duration: Mapped[float] = mapped_column(Float, default=0.0)  # Seconds
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    videostreams: Mapped[int] = mapped_column(Integer, default=0)
    audiostreams: Mapped[int] = mapped_column(Integer, default=0)
    size: Mapped[int] = mapped_column(Integer, default=0)  # Bytes
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Conversion(Base):
    """A conversion of one media file and the status of each of its processes."""

    __tablename__ = "conversions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pathnamehash: Mapped[str] = mapped_column(String(40))
    contenthash: Mapped[str] = mapped_column(String(40), index=True)
    status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)

    # Per-process status codes
    transcoder_status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)
    rekog_face_status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)
    rekog_moderation_status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)
    rekog_label_status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)
    rekog_person_status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)
    transcribe_status: Mapped[int] = mapped_column(Integer, default=ConversionStatus.PENDING)

    # Timestamps
    timecreated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    timecompleted: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    presets: Mapped[list["ConversionPreset"]] = relationship(
        "ConversionPreset", back_populates="conversion", cascade="all, delete-orphan"
    )


class ConversionPreset(Base):
    """A transcoding preset chosen for a conversion."""

    __tablename__ = "conversion_presets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    convid: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversions.id", ondelete="CASCADE"), index=True
    )
    preset: Mapped[str] = mapped_column(String(255))

    # Relationships
    conversion: Mapped["Conversion"] = relationship("Conversion", back_populates="presets")


class StoredFile(Base):
    """A file instance; many rows may share one content hash."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contenthash: Mapped[str] = mapped_column(String(40), index=True)
    pathnamehash: Mapped[str] = mapped_column(String(40))
    component: Mapped[str] = mapped_column(String(100))
    filearea: Mapped[str] = mapped_column(String(50))  # "draft" rows are uploads in progress
    filename: Mapped[str] = mapped_column(String(255))  # "." marks a directory
    mimetype: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    filesize: Mapped[int] = mapped_column(Integer, default=0)
    timecreated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class ReportValue(Base):
    """A named scalar report value."""

    __tablename__ = "report_values"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ReportOverview(Base):
    """One row of the per-file overview report."""

    __tablename__ = "report_overview"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contenthash: Mapped[str] = mapped_column(String(40), index=True)
    type: Mapped[str] = mapped_column(String(10))
    format: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    resolution: Mapped[str] = mapped_column(String(50))
    duration: Mapped[float] = mapped_column(Float)
    filesize: Mapped[int] = mapped_column(Integer)
    cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # NULL when cannot calculate
    status: Mapped[str] = mapped_column(String(20), index=True)
    files: Mapped[int] = mapped_column(Integer)
    timecreated: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    timecompleted: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
