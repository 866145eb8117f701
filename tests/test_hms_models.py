import pytest

from hoylink.hms_models import Hms1Ch, Hms1ChV2, Hms2Ch, Hms4Ch
from hoylink.statistics import ChannelNum, ChannelType, FieldId

SERIAL_1CH = 0x112400000001
SERIAL_1CH_V2 = 0x112500000001
SERIAL_2CH = 0x114400000001
SERIAL_4CH = 0x116400000001
ALL_SERIALS = (SERIAL_1CH, SERIAL_1CH_V2, SERIAL_2CH, SERIAL_4CH)

MODELS = [
    (Hms1Ch, SERIAL_1CH, 1),
    (Hms1ChV2, SERIAL_1CH_V2, 1),
    (Hms2Ch, SERIAL_2CH, 2),
    (Hms4Ch, SERIAL_4CH, 4),
]


def test_type_name():
    assert Hms1Ch(None, SERIAL_1CH).type_name == "HMS-300/350/400/450/500-1T"
    assert Hms1ChV2(None, SERIAL_1CH_V2).type_name == "HMS-500-1T v2"
    assert Hms2Ch(None, SERIAL_2CH).type_name == "HMS-600/700/800/900/1000-2T"
    assert Hms4Ch(None, SERIAL_4CH).type_name == "HMS-1600/1800/2000-4T"


def test_own_serial_is_valid():
    assert Hms1Ch.is_valid_serial(SERIAL_1CH) is True
    assert Hms1ChV2.is_valid_serial(SERIAL_1CH_V2) is True
    assert Hms2Ch.is_valid_serial(SERIAL_2CH) is True
    assert Hms4Ch.is_valid_serial(SERIAL_4CH) is True


def test_other_models_reject_serial():
    assert [Hms1Ch.is_valid_serial(s) for s in ALL_SERIALS] == [True, False, False, False]
    assert [Hms1ChV2.is_valid_serial(s) for s in ALL_SERIALS] == [False, True, False, False]
    assert [Hms2Ch.is_valid_serial(s) for s in ALL_SERIALS] == [False, False, True, False]
    assert [Hms4Ch.is_valid_serial(s) for s in ALL_SERIALS] == [False, False, False, True]


def test_serial_prefix_outside_range_rejected():
    assert Hms1Ch.is_valid_serial(0x112100000001) is False
    assert Hms4Ch.is_valid_serial(0x0) is False


@pytest.mark.parametrize("cls,serial,count", MODELS)
def test_dc_channel_count(cls, serial, count):
    inv = cls(None, serial)
    channels = list(inv.statistics.channels_by_type(ChannelType.DC))
    assert channels == [ChannelNum(i) for i in range(count)]
    assert list(inv.statistics.channels_by_type(ChannelType.AC)) == [ChannelNum.CH0]


def test_voltage_round_trip():
    inverters = [
        Hms1Ch(None, SERIAL_1CH),
        Hms1ChV2(None, SERIAL_1CH_V2),
        Hms2Ch(None, SERIAL_2CH),
        Hms4Ch(None, SERIAL_4CH),
    ]
    for inv in inverters:
        stats = inv.statistics
        assert stats.set_value(ChannelType.DC, ChannelNum.CH0, FieldId.UDC, 30.5)
        assert stats.get_value(ChannelType.DC, ChannelNum.CH0, FieldId.UDC) == pytest.approx(30.5)


def test_hms4ch_reactive_power_is_signed():
    inv = Hms4Ch(None, 0x116400000002)
    inv.statistics.set_value(ChannelType.AC, ChannelNum.CH0, FieldId.Q, -12.5)
    assert inv.statistics.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.Q) == pytest.approx(-12.5)


def test_yield_total_sums_dc_channels():
    inv = Hms2Ch(None, 0x114400000002)
    stats = inv.statistics
    stats.set_value(ChannelType.DC, ChannelNum.CH0, FieldId.YT, 1.25)
    stats.set_value(ChannelType.DC, ChannelNum.CH1, FieldId.YT, 2.5)
    total = stats.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.YT)
    parts = sum(stats.get_value(ChannelType.DC, c, FieldId.YT) for c in (ChannelNum.CH0, ChannelNum.CH1))
    assert total == pytest.approx(parts)


def test_is_producing_follows_ac_power():
    inv = Hms1Ch(None, 0x112400000002)
    assert inv.is_producing() is False
    inv.statistics.set_value(ChannelType.AC, ChannelNum.CH0, FieldId.PAC, 100.0)
    assert inv.is_producing() is True
    inv.enable_polling = False
    assert inv.is_producing() is False


def test_hms_has_no_phase_fields():
    inv = Hms4Ch(None, 0x116400000003)
    assert inv.statistics.has_value(ChannelType.AC, ChannelNum.CH0, FieldId.UAC_1N) is False
    assert inv.statistics.has_value(ChannelType.AC, ChannelNum.CH0, FieldId.UAC) is True