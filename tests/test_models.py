"""Tests for sample, power-state and display models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pybattmon.models.device_info import DeviceInfo
from pybattmon.models.notification import NotificationKind, charger_connected, high_temperature
from pybattmon.models.power_state import BatteryState, PowerStateEvent
from pybattmon.models.sample import DeviceSample, EstimatedSample, EstimatorVariant
from pybattmon.models.uptime import UptimeRecord

_GB = 1024 * 1024 * 1024


class TestDeviceSample:
    def test_camel_case_payload(self) -> None:
        sample = DeviceSample.model_validate(
            {
                "timestampMs": "1717228800000",
                "batteryFraction": 0.84,
                "charging": "true",
                "usedMemoryBytes": 2 * _GB,
                "totalMemoryBytes": 8 * _GB,
                "deviceName": "  Pixel  ",
            }
        )

        assert sample.timestamp_ms == 1717228800000
        assert sample.charging is True
        assert sample.battery_pct == pytest.approx(84.0)
        assert sample.memory_load_pct == pytest.approx(25.0)
        assert sample.device_name == "Pixel"

    def test_unreadable_fields_fall_back(self) -> None:
        sample = DeviceSample.model_validate(
            {"timestamp_ms": 1, "battery_fraction": "??", "charging": None, "free_disk_bytes": -1, "device_name": ""}
        )

        assert sample.battery_fraction == 0.0
        assert sample.charging is False
        assert sample.free_disk_bytes == 0
        assert sample.device_name == "Unknown"
        assert sample.memory_load_pct is None
        assert sample.effective_cpu_load_pct is None

    def test_timestamp_is_required(self) -> None:
        with pytest.raises(ValidationError):
            DeviceSample.model_validate({"battery_fraction": 0.5})


class TestPowerStateEvent:
    def test_charging_event(self) -> None:
        event = PowerStateEvent.model_validate({"batteryState": "Charging", "batteryLevel": 0.82, "lowPowerMode": False})

        assert event.battery_state == BatteryState.CHARGING
        assert event.is_actionable
        assert event.charging
        assert event.battery_level == pytest.approx(0.82)

    def test_full_is_not_charging(self) -> None:
        event = PowerStateEvent.model_validate({"batteryState": "full"})
        assert event.is_actionable
        assert not event.charging

    def test_unrecognized_state_is_unknown(self) -> None:
        event = PowerStateEvent.model_validate({"batteryState": "exploding", "batteryLevel": 7})

        assert event.battery_state == BatteryState.UNKNOWN
        assert not event.is_actionable
        assert event.battery_level is None


class TestNotifications:
    def test_texts(self) -> None:
        connected = charger_connected(31.04)
        hot = high_temperature(46.5)

        assert connected.kind == NotificationKind.CHARGER_CONNECTED
        assert connected.title == "🔌 Charger Connected"
        assert connected.body == "Your device is now charging. Current approx temp: 31.0°C"
        assert hot.title == "⚠️ High Temperature"
        assert hot.body == "Device temperature is 46.5°C while charging!"


class TestDeviceInfo:
    def test_from_sample(self) -> None:
        sample = DeviceSample(
            timestamp_ms=0,
            battery_fraction=0.5,
            charging=True,
            used_memory_bytes=1024 * 1024 * 512,
            total_memory_bytes=1024 * 1024 * 2048,
            free_disk_bytes=30 * _GB,
            total_disk_bytes=120 * _GB,
            carrier="ExampleTel",
        )
        estimated = EstimatedSample(
            timestamp_ms=0,
            battery_pct=50.0,
            temperature_c=35.0,
            cpu_load_pct=25.0,
            variant=EstimatorVariant.FULL,
        )

        info = DeviceInfo.from_sample(sample, estimated, uptime_hours=3.5, ip_address="DEVICE_IP")

        assert info.memory_usage_mb == pytest.approx(512.0)
        assert info.memory_usage_pct == pytest.approx(25.0)
        assert info.storage_used_gb == pytest.approx(90.0)
        assert info.storage_used_pct == pytest.approx(75.0)
        assert info.cpu_usage == 25.0
        assert info.uptime_display == "3 hrs 30 min"
        assert info.ip_address == "DEVICE_IP"


class TestUptimeRecord:
    def test_negative_hours_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UptimeRecord(last_date="2024-06-01", last_timestamp_ms=0, accumulated_hours=-1)
