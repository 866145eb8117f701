"""HMS series inverters with one, two and four inputs."""

from __future__ import annotations

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
CH0, CH1, CH2, CH3 = ChannelNum.CH0, ChannelNum.CH1, ChannelNum.CH2, ChannelNum.CH3


def _f(type_, ch, field, unit, start, num, div, is_signed, digits) -> ByteAssign:
    return ByteAssign(type_, ch, field, unit, start, num, div, is_signed, digits)


def _c(type_, ch, field, unit, func: CalcFunction, arg, digits) -> ByteAssign:
    return ByteAssign(type_, ch, field, unit, int(func), int(arg), CMD_CALC, False, digits)


def _dc_channel(ch, *, udc, idc, pdc, yd, yt, total_first=False) -> list[ByteAssign]:
    day = _f(_DC, ch, FieldId.YD, Unit.WH, yd, 2, 1, False, 0)
    total = _f(_DC, ch, FieldId.YT, Unit.KWH, yt, 4, 1000, False, 3)
    yields = [total, day] if total_first else [day, total]
    return [
        _f(_DC, ch, FieldId.UDC, Unit.V, udc, 2, 10, False, 1),
        _f(_DC, ch, FieldId.IDC, Unit.A, idc, 2, 100, False, 2),
        _f(_DC, ch, FieldId.PDC, Unit.W, pdc, 2, 10, False, 1),
        *yields,
        _c(_DC, ch, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, ch, 3),
    ]


def _ac_inv(*, uac, iac, pac, q, f, pf, t, evt, q_signed=False) -> list[ByteAssign]:
    return [
        _f(_AC, CH0, FieldId.UAC, Unit.V, uac, 2, 10, False, 1),
        _f(_AC, CH0, FieldId.IAC, Unit.A, iac, 2, 100, False, 2),
        _f(_AC, CH0, FieldId.PAC, Unit.W, pac, 2, 10, False, 1),
        _f(_AC, CH0, FieldId.Q, Unit.VAR, q, 2, 10, q_signed, 1),
        _f(_AC, CH0, FieldId.F, Unit.HZ, f, 2, 100, False, 2),
        _f(_AC, CH0, FieldId.PF, Unit.NONE, pf, 2, 1000, False, 3),
        _f(_INV, CH0, FieldId.T, Unit.C, t, 2, 10, True, 1),
        _f(_INV, CH0, FieldId.EVT_LOG, Unit.NONE, evt, 2, 1, False, 0),
    ]


_CALC_TAIL = [
    _c(_AC, CH0, FieldId.YD, Unit.WH, CalcFunction.YD_CH0, 0, 0),
    _c(_AC, CH0, FieldId.YT, Unit.KWH, CalcFunction.YT_CH0, 0, 3),
    _c(_AC, CH0, FieldId.PDC, Unit.W, CalcFunction.PDC_CH0, 0, 1),
    _c(_AC, CH0, FieldId.EFF, Unit.PCT, CalcFunction.EFF_CH0, 0, 3),
]

HMS_1CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=4, pdc=6, yd=12, yt=8)
    + _ac_inv(uac=14, iac=22, pac=18, q=20, f=16, pf=24, t=26, evt=28)
    + _CALC_TAIL
)

HMS_1CHV2_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=6, pdc=10, yd=22, yt=14)
    + _ac_inv(uac=26, iac=34, pac=30, q=20, f=28, pf=36, t=38, evt=18)
    + _CALC_TAIL
)

HMS_2CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=6, pdc=10, yd=22, yt=14, total_first=True)
    + _dc_channel(CH1, udc=4, idc=8, pdc=12, yd=24, yt=18, total_first=True)
    + _ac_inv(uac=26, iac=34, pac=30, q=32, f=28, pf=36, t=38, evt=40)
    + _CALC_TAIL
)

HMS_4CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=6, pdc=10, yd=22, yt=14)
    + _dc_channel(CH1, udc=4, idc=8, pdc=12, yd=24, yt=18)
    + _dc_channel(CH2, udc=26, idc=30, pdc=34, yd=46, yt=38)
    + _dc_channel(CH3, udc=28, idc=32, pdc=36, yd=48, yt=42)
    + _ac_inv(uac=50, iac=58, pac=54, q=56, f=52, pf=60, t=62, evt=64, q_signed=True)
    + _CALC_TAIL
)


def _serial_prefix(serial: int) -> int:
    return (serial >> 32) & 0xFFFF


class Hms1Ch(InverterAbstract):
    """HMS-300/350/400/450/500 with one input."""

    type_name = "HMS-300/350/400/450/500-1T"
    byte_assignment = HMS_1CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _serial_prefix(serial) == 0x1124


class Hms1ChV2(InverterAbstract):
    """Second revision of the HMS-500 with one input."""

    type_name = "HMS-500-1T v2"
    byte_assignment = HMS_1CHV2_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _serial_prefix(serial) == 0x1125


class Hms2Ch(InverterAbstract):
    """HMS-600/700/800/900/1000 with two inputs."""

    type_name = "HMS-600/700/800/900/1000-2T"
    byte_assignment = HMS_2CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _serial_prefix(serial) == 0x1144


class Hms4Ch(InverterAbstract):
    """HMS-1600/1800/2000 with four inputs."""

    type_name = "HMS-1600/1800/2000-4T"
    byte_assignment = HMS_4CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _serial_prefix(serial) == 0x1164