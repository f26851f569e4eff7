from __future__ import annotations

import math
from datetime import UTC, datetime

import pytest

from pydashcluster.ingestion.normalize import normalize_timestamp_seconds, safe_float
from pydashcluster.models.location import AuthorizationChange, AuthorizationStatus, RawLocationFix
from pydashcluster.models.motion import MotionSample


@pytest.mark.parametrize("value", [None, "", "--", True, "abc", math.nan, math.inf, object()])
def test_safe_float_rejects_unusable_values(value: object) -> None:
    assert safe_float(value) is None


def test_safe_float_parses_numbers() -> None:
    assert safe_float("12.5") == 12.5
    assert safe_float(3) == 3.0


def test_timestamp_seconds_unchanged() -> None:
    assert normalize_timestamp_seconds(1_770_928_447.25) == 1_770_928_447.25


def test_timestamp_milliseconds_to_seconds() -> None:
    assert normalize_timestamp_seconds(1_770_928_447_000) == 1_770_928_447.0


def test_timestamp_datetime_to_seconds() -> None:
    moment = datetime.fromtimestamp(1_770_928_447, tz=UTC)

    assert normalize_timestamp_seconds(moment) == 1_770_928_447.0


@pytest.mark.parametrize("value", [None, "", -1.0, "--"])
def test_timestamp_unusable(value: object) -> None:
    assert normalize_timestamp_seconds(value) is None


def test_motion_sample_accepts_camel_case_keys() -> None:
    sample = MotionSample.model_validate(
        {
            "accelerationX": -0.2,
            "accelerationY": 0.1,
            "attitudeRoll": 0.05,
            "attitudePitch": "--",
            "timestamp": 12_000_000_000_000,
        }
    )

    assert sample.longitudinal == -0.2
    assert sample.lateral == 0.1
    assert sample.attitude_roll == 0.05
    assert sample.attitude_pitch == 0.0
    assert sample.timestamp == 12_000_000_000.0


def test_location_fix_placeholders_fall_back_to_invalid_markers() -> None:
    raw = RawLocationFix.model_validate(
        {"lat": 51.5, "lng": -0.12, "speed": "", "accuracy": None, "timestamp": "1.5"},
    )

    assert raw.speed == -1.0
    assert raw.horizontal_accuracy == -1.0
    assert raw.timestamp == 1.5
    assert raw.coordinate.latitude == 51.5


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("authorizedAlways", AuthorizationStatus.AUTHORIZED_ALWAYS),
        (2, AuthorizationStatus.DENIED),
        ("4", AuthorizationStatus.AUTHORIZED_WHEN_IN_USE),
        ("something-new", AuthorizationStatus.UNKNOWN),
    ],
)
def test_authorization_change_coerces_status(value: object, expected: AuthorizationStatus) -> None:
    assert AuthorizationChange(status=value).status == expected
