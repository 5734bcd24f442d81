"""Unit tests for the toll configuration store."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from decimal import Decimal
from tollgate.services.config_store import (
    ConfigStore, TollConfig, VehicleClass, DEFAULT_FALLBACK_RATE, parse_config_lines,
)


class TestConfigDefaults:
    def test_missing_file_returns_defaults(self, tmp_path):
        config = ConfigStore(str(tmp_path / "config" / "config.txt")).load()
        assert config.toll_rates == {
            VehicleClass.CAR: Decimal("50.0"),
            VehicleClass.TRUCK: Decimal("100.0"),
            VehicleClass.BUS: Decimal("75.0"),
        }
        assert (config.camera_resolution_width, config.camera_resolution_height, config.camera_fps) == (1920, 1080, 30)
        assert config.from_defaults is True

    def test_missing_file_is_persisted(self, tmp_path):
        path = tmp_path / "config" / "config.txt"
        ConfigStore(str(path)).load()
        text = path.read_text()
        assert "toll_rate_car=50.0" in text
        assert "toll_rate_truck=100.0" in text
        assert "toll_rate_bus=75.0" in text
        assert "camera_fps=30" in text

    def test_persisted_defaults_reload_identically(self, tmp_path):
        path = str(tmp_path / "config.txt")
        first = ConfigStore(path).load()
        second = ConfigStore(path).load()
        assert second.from_defaults is False
        assert second.toll_rates == first.toll_rates
        assert second.camera_fps == first.camera_fps

    def test_defaults_usable_when_directory_unwritable(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        config = ConfigStore(str(blocker / "config.txt")).load()
        assert config.rate_for(VehicleClass.CAR) == (Decimal("50.0"), False)


class TestConfigParsing:
    def test_recognized_keys(self):
        config = parse_config_lines([
            "# Toll Rates",
            "toll_rate_car=40.5",
            "toll_rate_truck=120",
            "toll_rate_bus=80.25",
            "",
            "camera_resolution_width=1280",
            "camera_resolution_height=720",
            "camera_fps=25",
        ])
        assert config.toll_rates[VehicleClass.CAR] == Decimal("40.5")
        assert config.toll_rates[VehicleClass.TRUCK] == Decimal("120")
        assert config.toll_rates[VehicleClass.BUS] == Decimal("80.25")
        assert (config.camera_resolution_width, config.camera_resolution_height, config.camera_fps) == (1280, 720, 25)

    def test_unknown_keys_ignored(self):
        config = parse_config_lines(["toll_rate_motorbike=10", "colour=blue", "toll_rate_car=60"])
        assert config.toll_rates[VehicleClass.CAR] == Decimal("60")
        assert VehicleClass.UNKNOWN not in config.toll_rates

    def test_malformed_value_skips_only_that_line(self):
        config = parse_config_lines([
            "toll_rate_car=abc",
            "toll_rate_truck=-5",
            "camera_fps=thirty",
            "toll_rate_bus=90",
            "no equals sign here",
        ])
        assert config.toll_rates[VehicleClass.CAR] == Decimal("50.0")
        assert config.toll_rates[VehicleClass.TRUCK] == Decimal("100.0")
        assert config.camera_fps == 30
        assert config.toll_rates[VehicleClass.BUS] == Decimal("90")

    def test_whitespace_around_key_and_value(self):
        config = parse_config_lines(["  toll_rate_car = 55.5  "])
        assert config.toll_rates[VehicleClass.CAR] == Decimal("55.5")

    def test_fallback_rate_override(self):
        config = parse_config_lines(["toll_rate_default=30"])
        assert config.rate_for(VehicleClass.UNKNOWN) == (Decimal("30"), True)

    def test_same_source_twice_is_identical(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("toll_rate_car=45\ncamera_fps=15\n")
        store = ConfigStore(str(path))
        assert store.load() == store.load()


class TestRateResolution:
    def test_configured_class(self):
        assert TollConfig().rate_for(VehicleClass.BUS) == (Decimal("75.0"), False)

    def test_unknown_class_uses_fallback(self):
        rate, fallback = TollConfig().rate_for(VehicleClass.UNKNOWN)
        assert rate == DEFAULT_FALLBACK_RATE == Decimal("100.0")
        assert fallback is True

    def test_save_round_trip(self, tmp_path):
        store = ConfigStore(str(tmp_path / "config.txt"))
        original = parse_config_lines(["toll_rate_car=12.5", "camera_fps=60", "toll_rate_default=33"])
        assert store.save(original)
        assert store.load() == original


class TestConfigFileOnDisk:
    def test_undecodable_comment_keeps_operator_rates(self, tmp_path):
        path = tmp_path / "config.txt"
        original = b"# caf\xe9 plaza\ntoll_rate_car=12.5\ntoll_rate_truck=140\n"
        path.write_bytes(original)

        config = ConfigStore(str(path)).load()

        assert config.from_defaults is False
        assert config.toll_rates[VehicleClass.CAR] == Decimal("12.5")
        assert config.toll_rates[VehicleClass.TRUCK] == Decimal("140")
        assert path.read_bytes() == original

    def test_undecodable_value_skips_only_that_line(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_bytes(b"toll_rate_car=4\xff0\ntoll_rate_bus=60\n")

        config = ConfigStore(str(path)).load()

        assert config.toll_rates[VehicleClass.CAR] == Decimal("50.0")
        assert config.toll_rates[VehicleClass.BUS] == Decimal("60")

    def test_unreadable_path_is_not_overwritten(self, tmp_path):
        path = tmp_path / "config.txt"
        path.mkdir()

        config = ConfigStore(str(path)).load()

        assert config.from_defaults is True
        assert path.is_dir()
        assert list(path.iterdir()) == []
