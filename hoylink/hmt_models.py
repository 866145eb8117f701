"""HMT series three-phase inverters with four and six inputs."""

from __future__ import annotations

from hoylink.alarm_log import AlarmMessageType
from hoylink.inverter import InverterAbstract
from hoylink.statistics import (
    CMD_CALC,
    ByteAssign,
    CalcFunction,
    ChannelNum,
    ChannelType,
    FieldId,
    Unit,
)

_DC, _AC, _INV = ChannelType.DC, ChannelType.AC, ChannelType.INV
CH0 = ChannelNum.CH0


def _f(type_, ch, field, unit, start, num, div, is_signed, digits) -> ByteAssign:
    return ByteAssign(type_, ch, field, unit, start, num, div, is_signed, digits)


def _c(type_, ch, field, unit, func: CalcFunction, arg, digits) -> ByteAssign:
    return ByteAssign(type_, ch, field, unit, int(func), int(arg), CMD_CALC, False, digits)


def _dc_channel(ch, *, udc, idc, pdc, yt, yd) -> list[ByteAssign]:
    return [
        _f(_DC, ch, FieldId.UDC, Unit.V, udc, 2, 10, False, 1),
        _f(_DC, ch, FieldId.IDC, Unit.A, idc, 2, 100, False, 2),
        _f(_DC, ch, FieldId.PDC, Unit.W, pdc, 2, 10, False, 1),
        _f(_DC, ch, FieldId.YT, Unit.KWH, yt, 4, 1000, False, 3),
        _f(_DC, ch, FieldId.YD, Unit.WH, yd, 2, 1, False, 0),
        _c(_DC, ch, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, ch, 3),
    ]


# Pairs of inputs share one voltage measurement.
_DC_FIRST_FOUR = (
    _dc_channel(ChannelNum.CH0, udc=2, idc=4, pdc=8, yt=12, yd=20)
    + _dc_channel(ChannelNum.CH1, udc=2, idc=6, pdc=10, yt=16, yd=22)
    + _dc_channel(ChannelNum.CH2, udc=24, idc=26, pdc=30, yt=34, yd=42)
    + _dc_channel(ChannelNum.CH3, udc=24, idc=28, pdc=32, yt=38, yd=44)
)

_DC_LAST_TWO = (
    _dc_channel(ChannelNum.CH4, udc=46, idc=48, pdc=52, yt=56, yd=64)
    + _dc_channel(ChannelNum.CH5, udc=46, idc=50, pdc=54, yt=60, yd=66)
)

_AC_INV = [
    # UAC and IAC repeat phase values so single-phase consumers find them.
    _f(_AC, CH0, FieldId.UAC, Unit.V, 74, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.UAC_1N, Unit.V, 68, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.UAC_2N, Unit.V, 70, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.UAC_3N, Unit.V, 72, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.UAC_12, Unit.V, 74, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.UAC_23, Unit.V, 76, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.UAC_31, Unit.V, 78, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.F, Unit.HZ, 80, 2, 100, False, 2),
    _f(_AC, CH0, FieldId.PAC, Unit.W, 82, 2, 10, False, 1),
    _f(_AC, CH0, FieldId.Q, Unit.VAR, 84, 2, 10, True, 1),
    _f(_AC, CH0, FieldId.IAC, Unit.A, 86, 2, 100, False, 2),
    _f(_AC, CH0, FieldId.IAC_1, Unit.A, 86, 2, 100, False, 2),
    _f(_AC, CH0, FieldId.IAC_2, Unit.A, 88, 2, 100, False, 2),
    _f(_AC, CH0, FieldId.IAC_3, Unit.A, 90, 2, 100, False, 2),
    _f(_AC, CH0, FieldId.PF, Unit.NONE, 92, 2, 1000, False, 3),
    _f(_INV, CH0, FieldId.T, Unit.C, 94, 2, 10, True, 1),
    _f(_INV, CH0, FieldId.EVT_LOG, Unit.NONE, 96, 2, 1, False, 0),
    _c(_AC, CH0, FieldId.YD, Unit.WH, CalcFunction.YD_CH0, 0, 0),
    _c(_AC, CH0, FieldId.YT, Unit.KWH, CalcFunction.YT_CH0, 0, 3),
    _c(_AC, CH0, FieldId.PDC, Unit.W, CalcFunction.PDC_CH0, 0, 1),
    _c(_AC, CH0, FieldId.EFF, Unit.PCT, CalcFunction.EFF_CH0, 0, 3),
]

HMT_4CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(_DC_FIRST_FOUR + _AC_INV)
HMT_6CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(_DC_FIRST_FOUR + _DC_LAST_TWO + _AC_INV)


class HmtInverter(InverterAbstract):
    """Three-phase inverter; its alarm log uses the HMT message texts."""

    def __init__(self, radio, serial: int) -> None:
        super().__init__(radio, serial)
        self.event_log.message_type = AlarmMessageType.HMT


class Hmt4Ch(HmtInverter):
    """HMT-1600/1800/2000 with four inputs."""

    type_name = "HMT-1600/1800/2000-4T"
    byte_assignment = HMT_4CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return (serial >> 32) & 0xFFFF == 0x1361


class Hmt6Ch(HmtInverter):
    """HMT-1800/2250 with six inputs."""

    type_name = "HMT-1800/2250-6T"
    byte_assignment = HMT_6CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return (serial >> 32) & 0xFFFF == 0x1382