import pytest

from hoylink.alarm_log import AlarmMessageType
from hoylink.hmt_models import Hmt4Ch, Hmt6Ch
from hoylink.statistics import ChannelNum, ChannelType, FieldId

SERIAL_4CH = 0x136100000001
SERIAL_6CH = 0x138200000001


def test_type_names():
    assert Hmt4Ch(None, SERIAL_4CH).type_name == "HMT-1600/1800/2000-4T"
    assert Hmt6Ch(None, SERIAL_6CH).type_name == "HMT-1800/2250-6T"


def test_serial_validation():
    assert Hmt4Ch.is_valid_serial(SERIAL_4CH) is True
    assert Hmt6Ch.is_valid_serial(SERIAL_6CH) is True
    assert Hmt4Ch.is_valid_serial(SERIAL_6CH) is False
    assert Hmt6Ch.is_valid_serial(SERIAL_4CH) is False


@pytest.mark.parametrize("cls,serial", [(Hmt4Ch, SERIAL_4CH), (Hmt6Ch, SERIAL_6CH)])
def test_event_log_uses_hmt_messages(cls, serial):
    inv = cls(None, serial)
    assert inv.event_log.message_type == AlarmMessageType.HMT


def test_hmt_specific_alarm_text():
    inv = Hmt4Ch(None, SERIAL_4CH)
    entry = bytes([0x00, 215]) + bytes(10)
    inv.event_log.append_fragment(0, bytes(2) + entry)
    assert inv.event_log.get_log_entry(0).message == "MPPT-C: Input overvoltage"


@pytest.mark.parametrize("cls,serial,count", [(Hmt4Ch, SERIAL_4CH, 4), (Hmt6Ch, SERIAL_6CH, 6)])
def test_dc_channels(cls, serial, count):
    inv = cls(None, serial)
    channels = list(inv.statistics.channels_by_type(ChannelType.DC))
    assert channels == [ChannelNum(i) for i in range(count)]


def test_paired_inputs_share_voltage():
    inv = Hmt6Ch(None, SERIAL_6CH)
    stats = inv.statistics
    stats.set_value(ChannelType.DC, ChannelNum.CH4, FieldId.UDC, 41.5)
    assert stats.get_value(ChannelType.DC, ChannelNum.CH5, FieldId.UDC) == pytest.approx(41.5)
    stats.set_value(ChannelType.DC, ChannelNum.CH0, FieldId.UDC, 33.0)
    assert stats.get_value(ChannelType.DC, ChannelNum.CH1, FieldId.UDC) == pytest.approx(33.0)


def test_ac_voltage_mirrors_phase_to_phase():
    inv = Hmt4Ch(None, SERIAL_4CH)
    stats = inv.statistics
    stats.set_value(ChannelType.AC, ChannelNum.CH0, FieldId.UAC_12, 400.2)
    assert stats.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.UAC) == pytest.approx(
        stats.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.UAC_12)
    )


def test_ac_current_mirrors_phase_one():
    inv = Hmt4Ch(None, SERIAL_4CH)
    stats = inv.statistics
    stats.set_value(ChannelType.AC, ChannelNum.CH0, FieldId.IAC_1, 1.5)
    assert stats.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.IAC) == pytest.approx(1.5)


def test_signed_temperature_and_reactive_power():
    inv = Hmt6Ch(None, SERIAL_6CH)
    stats = inv.statistics
    stats.set_value(ChannelType.INV, ChannelNum.CH0, FieldId.T, -5.5)
    stats.set_value(ChannelType.AC, ChannelNum.CH0, FieldId.Q, -20.0)
    assert stats.get_value(ChannelType.INV, ChannelNum.CH0, FieldId.T) == pytest.approx(-5.5)
    assert stats.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.Q) == pytest.approx(-20.0)


def test_dc_power_sum_matches_channels():
    inv = Hmt6Ch(None, SERIAL_6CH)
    stats = inv.statistics
    for i, power in enumerate([10.0, 20.0, 30.5, 40.0, 50.0, 60.5]):
        stats.set_value(ChannelType.DC, ChannelNum(i), FieldId.PDC, power)
    parts = sum(stats.get_value(ChannelType.DC, ChannelNum(i), FieldId.PDC) for i in range(6))
    assert stats.get_value(ChannelType.AC, ChannelNum.CH0, FieldId.PDC) == pytest.approx(parts)


def test_change_channel_request_refused_by_default():
    inv = Hmt4Ch(None, SERIAL_4CH)
    assert inv.send_change_channel_request() is False