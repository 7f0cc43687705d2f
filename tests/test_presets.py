"""Tests for the preset catalog."""

import boto3
import pytest
from botocore.stub import Stubber

from conftest import (
    AUDIO_PRESET_ID,
    HD_PRESET_ID,
    MEDIACONVERT_PRESETS,
    SD_PRESET_ID,
    FakeMediaConvertClient,
)
from mediacost.config import Settings
from mediacost.services.presets import PresetCatalog, PresetUnavailableError


@pytest.fixture
def boto_mediaconvert():
    client = boto3.client(
        "mediaconvert",
        region_name="ap-southeast-2",
        aws_access_key_id="AKIATEST",
        aws_secret_access_key="secret",
    )
    with Stubber(client) as stubber:
        yield client, stubber


def test_list_presets_with_stubbed_client(boto_mediaconvert):
    """Test presets are read from MediaConvert."""
    client, stubber = boto_mediaconvert
    for preset_id in (HD_PRESET_ID, AUDIO_PRESET_ID):
        stubber.add_response(
            "get_preset",
            {"Preset": MEDIACONVERT_PRESETS[preset_id]},
            {"Name": preset_id},
        )

    catalog = PresetCatalog([HD_PRESET_ID, AUDIO_PRESET_ID], client)
    presets = catalog.list_presets()

    stubber.assert_no_pending_responses()
    assert [p.preset_id for p in presets] == [HD_PRESET_ID, AUDIO_PRESET_ID]
    assert presets[0].has_video is True
    assert presets[0].height == 1080
    assert presets[0].container == "MP4"
    assert presets[1].has_video is False
    assert presets[1].container == "RAW"


def test_unreadable_preset(boto_mediaconvert):
    """Test MediaConvert errors surface as preset unavailable."""
    client, stubber = boto_mediaconvert
    stubber.add_client_error("get_preset", service_error_code="NotFoundException", http_status_code=404)

    with pytest.raises(PresetUnavailableError):
        PresetCatalog(["System-Missing"], client).list_presets()


def test_from_settings_builds_mediaconvert_client():
    """Test the configured catalog talks to MediaConvert in the configured region."""
    settings = Settings(
        _env_file=None,
        aws_api_key="AKIATEST",
        aws_api_secret="secret",
        aws_region="ap-southeast-2",
        transcode_presets=[HD_PRESET_ID, HD_PRESET_ID, SD_PRESET_ID],
        preset_rates={SD_PRESET_ID: 0.02},
    )

    catalog = PresetCatalog.from_settings(settings)

    assert catalog.preset_ids == [HD_PRESET_ID, SD_PRESET_ID]
    assert catalog._client.meta.service_model.service_name == "mediaconvert"
    assert catalog._client.meta.region_name == "ap-southeast-2"

    with Stubber(catalog._client) as stubber:
        stubber.add_response("get_preset", {"Preset": MEDIACONVERT_PRESETS[SD_PRESET_ID]}, {"Name": SD_PRESET_ID})
        (sd,) = catalog.list_presets([SD_PRESET_ID])

    assert sd.height == 480
    assert sd.rate_per_minute == 0.02


def test_filtered_list_and_dedupe():
    """Test filtering by ids reads each preset once."""
    client = FakeMediaConvertClient()
    catalog = PresetCatalog([HD_PRESET_ID, SD_PRESET_ID, HD_PRESET_ID], client)

    assert catalog.preset_ids == [HD_PRESET_ID, SD_PRESET_ID]
    presets = catalog.list_presets([SD_PRESET_ID, SD_PRESET_ID])
    assert [p.preset_id for p in presets] == [SD_PRESET_ID]

    catalog.list_presets()
    assert client.calls == [SD_PRESET_ID, HD_PRESET_ID]


def test_empty_catalog():
    """Test no configured presets gives an empty list."""
    catalog = PresetCatalog([], FakeMediaConvertClient())
    assert catalog.list_presets() == []
    assert catalog.list_presets([]) == []


def test_rate_overrides():
    """Test configured rates are attached to descriptors."""
    catalog = PresetCatalog([HD_PRESET_ID], FakeMediaConvertClient(), {HD_PRESET_ID: 0.05})
    assert catalog.list_presets()[0].rate_per_minute == 0.05
