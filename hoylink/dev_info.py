"""Decoding of the device information reported by the inverters."""

from __future__ import annotations

import time
from dataclasses import dataclass

from hoylink.parser import Parser

DEV_INFO_SIZE = 20

_ANY = 0xFF
_MONTHS_PER_YEAR = 12
_CUMULATIVE_DAYS = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)


@dataclass(frozen=True)
class DeviceInfo:
    """Model data belonging to a hardware part number prefix."""

    hw_part: tuple[int, int, int, int]
    max_power: int
    model_name: str


DEVICES: tuple[DeviceInfo, ...] = (
    DeviceInfo((0x10, 0x10, 0x10, _ANY), 300, "HM-300-1T"),
    DeviceInfo((0x10, 0x10, 0x20, _ANY), 350, "HM-350-1T"),
    DeviceInfo((0x10, 0x10, 0x30, _ANY), 400, "HM-400-1T"),
    DeviceInfo((0x10, 0x10, 0x40, _ANY), 400, "HM-400-1T"),
    DeviceInfo((0x10, 0x11, 0x10, _ANY), 600, "HM-600-2T"),
    DeviceInfo((0x10, 0x11, 0x20, _ANY), 700, "HM-700-2T"),
    DeviceInfo((0x10, 0x11, 0x30, _ANY), 800, "HM-800-2T"),
    DeviceInfo((0x10, 0x11, 0x40, _ANY), 800, "HM-800-2T"),
    DeviceInfo((0x10, 0x12, 0x10, _ANY), 1200, "HM-1200-4T"),
    DeviceInfo((0x10, 0x02, 0x30, _ANY), 1500, "MI-1500-4T Gen3"),
    DeviceInfo((0x10, 0x12, 0x30, _ANY), 1500, "HM-1500-4T"),
    # HM-300 limited to 70 % by the factory
    DeviceInfo((0x10, 0x10, 0x10, 0x15), int(300 * 0.7), "HM-300-1T"),

    DeviceInfo((0x10, 0x20, 0x21, _ANY), 350, "HMS-350-1T"),
    DeviceInfo((0x10, 0x20, 0x41, _ANY), 400, "HMS-400-1T"),
    DeviceInfo((0x10, 0x10, 0x51, _ANY), 450, "HMS-450-1T"),
    DeviceInfo((0x10, 0x10, 0x71, _ANY), 500, "HMS-500-1T"),
    DeviceInfo((0x10, 0x20, 0x71, _ANY), 500, "HMS-500-1T v2"),
    DeviceInfo((0x10, 0x21, 0x11, _ANY), 600, "HMS-600-2T"),
    DeviceInfo((0x10, 0x21, 0x41, _ANY), 800, "HMS-800-2T"),
    DeviceInfo((0x10, 0x11, 0x51, _ANY), 900, "HMS-900-2T"),
    DeviceInfo((0x10, 0x21, 0x51, _ANY), 900, "HMS-900-2T"),
    DeviceInfo((0x10, 0x21, 0x71, _ANY), 1000, "HMS-1000-2T"),
    DeviceInfo((0x10, 0x11, 0x71, _ANY), 1000, "HMS-1000-2T"),
    DeviceInfo((0x10, 0x22, 0x41, _ANY), 1600, "HMS-1600-4T"),
    DeviceInfo((0x10, 0x12, 0x51, _ANY), 1800, "HMS-1800-4T"),
    DeviceInfo((0x10, 0x22, 0x51, _ANY), 1800, "HMS-1800-4T"),
    DeviceInfo((0x10, 0x12, 0x71, _ANY), 2000, "HMS-2000-4T"),
    DeviceInfo((0x10, 0x22, 0x71, _ANY), 2000, "HMS-2000-4T"),

    DeviceInfo((0x10, 0x32, 0x41, _ANY), 1600, "HMT-1600-4T"),
    DeviceInfo((0x10, 0x32, 0x51, _ANY), 1800, "HMT-1800-4T"),

    DeviceInfo((0x10, 0x33, 0x11, _ANY), 1800, "HMT-1800-6T"),
    DeviceInfo((0x10, 0x33, 0x31, _ANY), 2250, "HMT-2250-6T"),
)


def timegm(year: int, month: int, day: int, hour: int, minute: int,
           second: int, isdst: int) -> int:
    """Seconds since the Unix epoch of a UTC calendar time.

    ``month`` counts from 1; months outside 1..12 roll over into the
    neighbouring years. When ``isdst`` is 1 an hour is taken off.
    """
    mon = month - 1
    year += mon // _MONTHS_PER_YEAR
    mon %= _MONTHS_PER_YEAR

    result = (year - 1970) * 365 + _CUMULATIVE_DAYS[mon]
    result += (year - 1968) // 4
    result -= (year - 1900) // 100
    result += (year - 1600) // 400
    is_leap = year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)
    if is_leap and mon < 2:
        result -= 1
    result += day - 1
    result = result * 24 + hour
    result = result * 60 + minute
    result = result * 60 + second
    if isdst == 1:
        result -= 3600
    return result


def _word(data: bytes | bytearray, pos: int) -> int:
    return (data[pos] << 8) | data[pos + 1]


class DevInfoParser(Parser):
    """Holds the "all" and "simple" device info payloads and decodes them."""

    def __init__(self) -> None:
        super().__init__()
        self._payload_all = bytearray(DEV_INFO_SIZE)
        self._all_length = 0
        self._payload_simple = bytearray(DEV_INFO_SIZE)
        self._simple_length = 0
        self.last_update_all = 0
        self.last_update_simple = 0

    @staticmethod
    def _check_fits(offset: int, payload: bytes, what: str) -> int:
        end = offset + len(payload)
        if end > DEV_INFO_SIZE:
            raise ValueError(
                f"dev info {what} packet too large for buffer ({end} > {DEV_INFO_SIZE})"
            )
        return end

    def clear_buffer_all(self) -> None:
        """Zero the "all" payload."""
        self._payload_all = bytearray(DEV_INFO_SIZE)
        self._all_length = 0

    def append_fragment_all(self, offset: int, payload: bytes) -> None:
        """Copy a fragment of the "all" response into place at ``offset``."""
        end = self._check_fits(offset, payload, "all")
        self._payload_all[offset:end] = payload
        self._all_length += len(payload)

    def clear_buffer_simple(self) -> None:
        """Zero the "simple" payload."""
        self._payload_simple = bytearray(DEV_INFO_SIZE)
        self._simple_length = 0

    def append_fragment_simple(self, offset: int, payload: bytes) -> None:
        """Copy a fragment of the "simple" response into place at ``offset``."""
        end = self._check_fits(offset, payload, "simple")
        self._payload_simple[offset:end] = payload
        self._simple_length += len(payload)

    def set_last_update_all(self, last_update: int) -> None:
        self.last_update_all = last_update
        self.set_last_update(last_update)

    def set_last_update_simple(self, last_update: int) -> None:
        self.last_update_simple = last_update
        self.set_last_update(last_update)

    def fw_build_version(self) -> int:
        with self._lock:
            return _word(self._payload_all, 0)

    def fw_build_datetime(self) -> int:
        """Firmware build time as seconds since the Unix epoch."""
        with self._lock:
            year = _word(self._payload_all, 2)
            month_day = _word(self._payload_all, 4)
            hour_minute = _word(self._payload_all, 6)
        return timegm(
            year,
            month_day // 100,
            month_day % 100,
            hour_minute // 100,
            hour_minute % 100,
            0,
            0,
        )

    def fw_bootloader_version(self) -> int:
        with self._lock:
            return _word(self._payload_all, 8)

    def hw_part_number(self) -> int:
        with self._lock:
            return (_word(self._payload_simple, 2) << 16) | _word(self._payload_simple, 4)

    def hw_version(self) -> str:
        with self._lock:
            major, minor = self._payload_simple[6], self._payload_simple[7]
        return f"{major:02d}.{minor:02d}"

    def _device(self) -> DeviceInfo | None:
        with self._lock:
            part = tuple(self._payload_simple[2:6])
        for device in DEVICES:
            if device.hw_part == part:
                return device
        for device in DEVICES:
            if device.hw_part[:3] == part[:3]:
                return device
        return None

    def max_power(self) -> int:
        """Rated power of the model, or 0 if the model is unknown."""
        device = self._device()
        return device.max_power if device else 0

    def hw_model_name(self) -> str:
        """Model name, or an empty string if the model is unknown."""
        device = self._device()
        return device.model_name if device else ""

    def contains_valid_data(self) -> bool:
        """True if the firmware build date lies after 2016."""
        try:
            return time.localtime(self.fw_build_datetime()).tm_year > 2016
        except (OverflowError, OSError, ValueError):
            return False