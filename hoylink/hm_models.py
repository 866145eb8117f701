"""HM series inverters with one, two and four inputs."""

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


def _dc_channel(ch, *, udc, idc, pdc, yd, yt, udc_from=None) -> list[ByteAssign]:
    if udc_from is None:
        voltage = _f(_DC, ch, FieldId.UDC, Unit.V, udc, 2, 10, False, 1)
    else:
        voltage = _c(_DC, ch, FieldId.UDC, Unit.V, CalcFunction.UDC_CH, udc_from, 1)
    return [
        voltage,
        _f(_DC, ch, FieldId.IDC, Unit.A, idc, 2, 100, False, 2),
        _f(_DC, ch, FieldId.PDC, Unit.W, pdc, 2, 10, False, 1),
        _f(_DC, ch, FieldId.YD, Unit.WH, yd, 2, 1, False, 0),
        _f(_DC, ch, FieldId.YT, Unit.KWH, yt, 4, 1000, False, 3),
        _c(_DC, ch, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, ch, 3),
    ]


def _ac_inv(*, uac, iac, pac, q, f, pf, t, evt) -> list[ByteAssign]:
    return [
        _f(_AC, CH0, FieldId.UAC, Unit.V, uac, 2, 10, False, 1),
        _f(_AC, CH0, FieldId.IAC, Unit.A, iac, 2, 100, False, 2),
        _f(_AC, CH0, FieldId.PAC, Unit.W, pac, 2, 10, False, 1),
        _f(_AC, CH0, FieldId.Q, Unit.VAR, q, 2, 10, False, 1),
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

HM_1CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=4, pdc=6, yd=12, yt=8)
    + _ac_inv(uac=14, iac=22, pac=18, q=20, f=16, pf=24, t=26, evt=28)
    + _CALC_TAIL
)

HM_2CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=4, pdc=6, yd=22, yt=14)
    + _dc_channel(CH1, udc=8, idc=10, pdc=12, yd=24, yt=18)
    + _ac_inv(uac=26, iac=34, pac=30, q=32, f=28, pf=36, t=38, evt=40)
    + _CALC_TAIL
)

HM_4CH_ASSIGNMENT: tuple[ByteAssign, ...] = tuple(
    _dc_channel(CH0, udc=2, idc=4, pdc=8, yd=20, yt=12)
    + _dc_channel(CH1, udc=None, udc_from=CH0, idc=6, pdc=10, yd=22, yt=16)
    + _dc_channel(CH2, udc=24, idc=26, pdc=30, yd=42, yt=34)
    + _dc_channel(CH3, udc=None, udc_from=CH2, idc=28, pdc=32, yd=44, yt=38)
    + _ac_inv(uac=46, iac=54, pac=50, q=52, f=48, pf=56, t=58, evt=60)
    + _CALC_TAIL
)


def _is_valid_hm_serial(serial: int, code: int, nibbles: tuple[int, int],
                        legacy: tuple[int, int]) -> bool:
    pre0 = (serial >> 40) & 0xFF
    pre1 = (serial >> 32) & 0xFF

    if (((pre0 << 8) | pre1) >> 4) & 0xFF == code:
        return True

    return (pre1 & 0xF0) in nibbles and (
        (pre0 == 0x10 and pre1 == legacy[0]) or (pre0 == 0x11 and pre1 == legacy[1])
    )


class Hm1Ch(InverterAbstract):
    """HM-300/350/400 with one input."""

    type_name = "HM-300/350/400-1T"
    byte_assignment = HM_1CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _is_valid_hm_serial(serial, 0x12, (0x10, 0x20), (0x22, 0x21))


class Hm2Ch(InverterAbstract):
    """HM-600/700/800 with two inputs."""

    type_name = "HM-600/700/800-2T"
    byte_assignment = HM_2CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _is_valid_hm_serial(serial, 0x14, (0x30, 0x40), (0x42, 0x41))


class Hm4Ch(InverterAbstract):
    """HM-1000/1200/1500 with four inputs."""

    type_name = "HM-1000/1200/1500-4T"
    byte_assignment = HM_4CH_ASSIGNMENT

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _is_valid_hm_serial(serial, 0x16, (0x50, 0x60), (0x62, 0x61))