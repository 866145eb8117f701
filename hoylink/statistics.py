"""Decoding of real-time run data reported by the inverters."""

from __future__ import annotations

import enum
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Iterable

from hoylink.parser import Parser

logger = logging.getLogger(__name__)

STATISTIC_PACKET_SIZE = 7 * 16
CMD_CALC = 0xFFFF


class Unit(enum.IntEnum):
    """Physical unit of a field."""

    V = 0
    A = 1
    W = 2
    WH = 3
    KWH = 4
    HZ = 5
    C = 6
    PCT = 7
    VAR = 8
    NONE = 9

    @property
    def symbol(self) -> str:
        return _UNIT_SYMBOLS[self]


_UNIT_SYMBOLS = ("V", "A", "W", "Wh", "kWh", "Hz", "°C", "%", "var", "")


class FieldId(enum.IntEnum):
    """Identifier of a measured or calculated field."""

    UDC = 0
    IDC = 1
    PDC = 2
    YD = 3
    YT = 4
    UAC = 5
    IAC = 6
    PAC = 7
    F = 8
    T = 9
    PF = 10
    EFF = 11
    IRR = 12
    Q = 13
    EVT_LOG = 14
    UAC_1N = 15
    UAC_2N = 16
    UAC_3N = 17
    UAC_12 = 18
    UAC_23 = 19
    UAC_31 = 20
    IAC_1 = 21
    IAC_2 = 22
    IAC_3 = 23

    @property
    def label(self) -> str:
        return _FIELD_LABELS[self]


_FIELD_LABELS = (
    "Voltage", "Current", "Power", "YieldDay", "YieldTotal",
    "Voltage", "Current", "Power", "Frequency", "Temperature", "PowerFactor",
    "Efficiency", "Irradiation", "ReactivePower", "EventLogCount",
    "Voltage Ph1-N", "Voltage Ph2-N", "Voltage Ph3-N", "Voltage Ph1-Ph2",
    "Voltage Ph2-Ph3", "Voltage Ph3-Ph1", "Current Ph1", "Current Ph2", "Current Ph3",
)


class ChannelNum(enum.IntEnum):
    """Channel number; CH0 also carries the AC and inverter values."""

    CH0 = 0
    CH1 = 1
    CH2 = 2
    CH3 = 3
    CH4 = 4
    CH5 = 5


CHANNEL_COUNT = len(ChannelNum)


class ChannelType(enum.IntEnum):
    """Kind of channel a field belongs to."""

    AC = 0
    DC = 1
    INV = 2

    @property
    def label(self) -> str:
        return self.name


class CalcFunction(enum.IntEnum):
    """Calculations available for fields whose divisor is ``CMD_CALC``."""

    YT_CH0 = 0
    YD_CH0 = 1
    UDC_CH = 2
    PDC_CH0 = 3
    EFF_CH0 = 4
    IRR_CH = 5


@dataclass(frozen=True)
class ByteAssign:
    """Where a field lives in the payload and how to scale it.

    For calculated fields ``div`` is ``CMD_CALC``, ``start`` names the
    calculation and ``num`` is its argument.
    """

    type: ChannelType
    channel: ChannelNum
    field: FieldId
    unit: Unit
    start: int
    num: int
    div: int
    is_signed: bool
    digits: int

    @property
    def is_calculated(self) -> bool:
        return self.div == CMD_CALC


_RUNTIME_FIELDS = (
    FieldId.UDC, FieldId.IDC, FieldId.PDC, FieldId.UAC, FieldId.IAC,
    FieldId.PAC, FieldId.F, FieldId.T, FieldId.PF, FieldId.Q,
    FieldId.UAC_1N, FieldId.UAC_2N, FieldId.UAC_3N, FieldId.UAC_12,
    FieldId.UAC_23, FieldId.UAC_31, FieldId.IAC_1, FieldId.IAC_2, FieldId.IAC_3,
)

_DAILY_PRODUCTION_FIELDS = (FieldId.YD,)


def _millis() -> int:
    return time.monotonic_ns() // 1_000_000


class StatisticsParser(Parser):
    """Holds the raw statistics payload and decodes fields from it."""

    def __init__(self) -> None:
        super().__init__()
        self._payload = bytearray(STATISTIC_PACKET_SIZE)
        self._statistic_length = 0
        self._string_max_power = [0] * CHANNEL_COUNT
        self._assignments: tuple[ByteAssign, ...] = ()
        self.expected_byte_count = 0
        self._offsets: dict[tuple[ChannelType, ChannelNum, FieldId], float] = {}
        self.rx_failure_count = 0
        self.last_update_from_internal = 0
        self.yield_day_correction = False
        self._last_yield_day = [0.0] * CHANNEL_COUNT
        self._calculations = {
            CalcFunction.YT_CH0: self._calc_yield_total,
            CalcFunction.YD_CH0: self._calc_yield_day,
            CalcFunction.UDC_CH: self._calc_udc,
            CalcFunction.PDC_CH0: self._calc_power_dc,
            CalcFunction.EFF_CH0: self._calc_efficiency,
            CalcFunction.IRR_CH: self._calc_irradiation,
        }

    @staticmethod
    def _key(type_, channel, field) -> tuple[ChannelType, ChannelNum, FieldId]:
        return ChannelType(type_), ChannelNum(channel), FieldId(field)

    def clear_buffer(self) -> None:
        """Zero the payload and forget how many bytes were received."""
        self._payload = bytearray(STATISTIC_PACKET_SIZE)
        self._statistic_length = 0

    def append_fragment(self, offset: int, payload: bytes) -> None:
        """Copy a received fragment into the payload at ``offset``."""
        end = offset + len(payload)
        if end > STATISTIC_PACKET_SIZE:
            raise ValueError(
                f"stats packet too large for buffer ({end} > {STATISTIC_PACKET_SIZE})"
            )
        self._payload[offset:end] = payload
        self._statistic_length += len(payload)

    def end_append_fragment(self) -> None:
        """Release the lock and apply the yield-day correction."""
        super().end_append_fragment()

        if not self.yield_day_correction:
            self.reset_yield_day_correction()
            return

        for channel in self.channels_by_type(ChannelType.DC):
            value = self.get_value(ChannelType.DC, channel, FieldId.YD)
            last = self._last_yield_day[channel]
            if value < last:
                logger.info("Yield Day reset detected!")
                self.set_offset(ChannelType.DC, channel, FieldId.YD, last)
                self._last_yield_day[channel] = 0.0
            else:
                self._last_yield_day[channel] = value

    def set_byte_assignment(self, assignments: Iterable[ByteAssign]) -> None:
        """Install the field layout of an inverter model."""
        self._assignments = tuple(assignments)
        for assign in self._assignments:
            if assign.is_calculated:
                continue
            self.expected_byte_count = max(
                self.expected_byte_count, assign.start + assign.num
            )

    def get_assignment(self, type_, channel, field) -> ByteAssign | None:
        """Return the layout entry of a field, or None if the model lacks it."""
        for assign in self._assignments:
            if assign.type == type_ and assign.channel == channel and assign.field == field:
                return assign
        return None

    def _require_assignment(self, type_, channel, field) -> ByteAssign:
        assign = self.get_assignment(type_, channel, field)
        if assign is None:
            raise KeyError(f"no field {field!r} on channel {channel!r} of type {type_!r}")
        return assign

    def get_value(self, type_, channel, field) -> float:
        """Decode a field; unknown fields read as 0."""
        assign = self.get_assignment(type_, channel, field)
        if assign is None:
            return 0.0

        if assign.is_calculated:
            return self._calculations[CalcFunction(assign.start)](assign.num)

        with self._lock:
            raw = bytes(self._payload[assign.start:assign.start + assign.num])
        signed = assign.is_signed and assign.num in (2, 4)
        result = int.from_bytes(raw, "big", signed=signed) / assign.div

        offset = self._offsets.get(self._key(type_, channel, field))
        if offset is not None and self._statistic_length > 0:
            result += offset
        return result

    def set_value(self, type_, channel, field, value: float) -> bool:
        """Encode ``value`` into the payload; False for unknown or calculated fields."""
        assign = self.get_assignment(type_, channel, field)
        if assign is None or assign.is_calculated:
            return False

        offset = self._offsets.get(self._key(type_, channel, field))
        if offset is not None:
            value -= offset
        raw = int(value * assign.div) & 0xFFFFFFFF
        mask = (1 << (8 * assign.num)) - 1

        with self._lock:
            self._payload[assign.start:assign.start + assign.num] = (raw & mask).to_bytes(
                assign.num, "big"
            )
        return True

    def get_value_string(self, type_, channel, field) -> str:
        """Format a field with the number of digits its layout specifies."""
        digits = self.get_digits(type_, channel, field)
        return f"{self.get_value(type_, channel, field):.{digits}f}"

    def has_value(self, type_, channel, field) -> bool:
        return self.get_assignment(type_, channel, field) is not None

    def get_unit(self, type_, channel, field) -> str:
        return self._require_assignment(type_, channel, field).unit.symbol

    def get_name(self, type_, channel, field) -> str:
        return self._require_assignment(type_, channel, field).field.label

    def get_digits(self, type_, channel, field) -> int:
        return self._require_assignment(type_, channel, field).digits

    def get_offset(self, type_, channel, field) -> float:
        return self._offsets.get(self._key(type_, channel, field), 0.0)

    def set_offset(self, type_, channel, field, offset: float) -> None:
        self._offsets[self._key(type_, channel, field)] = offset

    def channel_types(self) -> list[ChannelType]:
        return [ChannelType.AC, ChannelType.DC, ChannelType.INV]

    def channel_type_name(self, type_) -> str:
        return ChannelType(type_).label

    def channels_by_type(self, type_) -> list[ChannelNum]:
        """Channels of a type in layout order, with adjacent repeats merged."""
        matching = (a.channel for a in self._assignments if a.type == type_)
        return [channel for channel, _ in itertools.groupby(matching)]

    def get_string_max_power(self, channel: int) -> int:
        return self._string_max_power[channel]

    def set_string_max_power(self, channel: int, power: int) -> None:
        """Set the installed panel power of a channel; out-of-range channels are ignored."""
        if 0 <= channel < CHANNEL_COUNT:
            self._string_max_power[channel] = power

    def reset_rx_failure_count(self) -> None:
        self.rx_failure_count = 0

    def increment_rx_failure_count(self) -> None:
        self.rx_failure_count += 1

    def zero_runtime_data(self) -> None:
        """Zero all instantaneous measurements."""
        self._zero_fields(_RUNTIME_FIELDS)

    def zero_daily_data(self) -> None:
        """Zero the daily production counters."""
        self._zero_fields(_DAILY_PRODUCTION_FIELDS)

    def set_last_update(self, last_update: int) -> None:
        """Record when new data arrived from the inverter."""
        super().set_last_update(last_update)
        self.last_update_from_internal = last_update

    def reset_yield_day_correction(self) -> None:
        """Drop the yield-day offsets, as at the start of a new day."""
        for channel in self.channels_by_type(ChannelType.DC):
            self.set_offset(ChannelType.DC, channel, FieldId.YD, 0.0)
            self._last_yield_day[channel] = 0.0

    def _zero_fields(self, fields: Iterable[FieldId]) -> None:
        fields = tuple(fields)
        for type_ in self.channel_types():
            for channel in self.channels_by_type(type_):
                for field in fields:
                    if self.has_value(type_, channel, field):
                        self.set_value(type_, channel, field, 0)
        self.last_update_from_internal = _millis()

    def _sum_dc(self, field: FieldId) -> float:
        return sum(
            self.get_value(ChannelType.DC, channel, field)
            for channel in self.channels_by_type(ChannelType.DC)
        )

    def _calc_yield_total(self, arg: int) -> float:
        return self._sum_dc(FieldId.YT)

    def _calc_yield_day(self, arg: int) -> float:
        return self._sum_dc(FieldId.YD)

    def _calc_udc(self, arg: int) -> float:
        return self.get_value(ChannelType.DC, ChannelNum(arg), FieldId.UDC)

    def _calc_power_dc(self, arg: int) -> float:
        return self._sum_dc(FieldId.PDC)

    def _calc_efficiency(self, arg: int) -> float:
        ac_power = sum(
            self.get_value(ChannelType.AC, channel, FieldId.PAC)
            for channel in self.channels_by_type(ChannelType.AC)
        )
        dc_power = self._sum_dc(FieldId.PDC)
        if dc_power > 0:
            return ac_power / dc_power * 100.0
        return 0.0

    def _calc_irradiation(self, arg: int) -> float:
        max_power = self.get_string_max_power(arg)
        if max_power > 0:
            return self.get_value(ChannelType.DC, ChannelNum(arg), FieldId.PDC) / max_power * 100.0
        return 0.0