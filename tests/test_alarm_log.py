import pytest

from hoylink.alarm_log import (
    ALARM_LOG_ENTRY_SIZE,
    ALARM_LOG_PAYLOAD_SIZE,
    AlarmLogParser,
    AlarmMessageLocale,
    AlarmMessageType,
    timezone_offset,
)
from hoylink.parser import LastCommandSuccess


def _entry(flags: int, message_id: int, start: int, end: int) -> bytes:
    return bytes([flags, message_id, 0, 0]) + start.to_bytes(2, "big") + end.to_bytes(2, "big") + bytes(4)


def _parser_with(*entries: bytes) -> AlarmLogParser:
    parser = AlarmLogParser()
    parser.append_fragment(0, bytes(2) + b"".join(entries))
    return parser


def test_entry_count_follows_received_length():
    parser = _parser_with(_entry(0, 1, 0, 0), _entry(0, 2, 0, 0), _entry(0, 3, 0, 0))
    assert parser.entry_count() == 3
    parser.clear_buffer()
    assert parser.entry_count() == 0


def test_entry_count_short_payload_is_zero():
    parser = AlarmLogParser()
    parser.append_fragment(0, b"\x00")
    assert parser.entry_count() == 0


def test_append_too_large_raises():
    parser = AlarmLogParser()
    with pytest.raises(ValueError):
        parser.append_fragment(ALARM_LOG_PAYLOAD_SIZE - 1, b"\x00\x00")


def test_decode_basic_entry():
    parser = _parser_with(_entry(0, 1, 256, 512))
    tz = timezone_offset()
    entry = parser.get_log_entry(0)
    assert entry.message_id == 1
    assert entry.message == "Inverter start"
    assert entry.start_time == 256 + tz
    assert entry.end_time == 512 + tz


def test_half_day_flags_shift_times():
    parser = _parser_with(_entry(0x30, 1, 256, 512))
    tz = timezone_offset()
    entry = parser.get_log_entry(0)
    assert entry.start_time == 256 + 12 * 60 * 60 + tz
    assert entry.end_time == 512 + 12 * 60 * 60 + tz


def test_zero_end_time_stays_zero():
    parser = _parser_with(_entry(0x10, 1, 256, 0))
    assert parser.get_log_entry(0).end_time == 0


def test_second_entry_is_read_from_its_offset():
    parser = _parser_with(_entry(0, 1, 0, 0), _entry(0, 4, 0, 0))
    assert parser.get_log_entry(1).message == "Offline"


def test_locales():
    parser = _parser_with(_entry(0, 1, 0, 0))
    assert parser.get_log_entry(0, AlarmMessageLocale.DE).message == "Wechselrichter gestartet"
    assert parser.get_log_entry(0, AlarmMessageLocale.FR).message == "L'onduleur a démarré"


def test_missing_translation_falls_back_to_english():
    parser = _parser_with(_entry(0, 2, 0, 0))
    assert parser.get_log_entry(0, AlarmMessageLocale.DE).message == "Time calibration"
    assert parser.get_log_entry(0, AlarmMessageLocale.FR).message == "Time calibration"


@pytest.mark.parametrize(
    "locale, text",
    [
        (AlarmMessageLocale.EN, "Unknown"),
        (AlarmMessageLocale.DE, "Unbekannt"),
        (AlarmMessageLocale.FR, "Inconnu"),
    ],
)
def test_unknown_message(locale, text):
    parser = _parser_with(_entry(0, 5, 0, 0))
    assert parser.get_log_entry(0, locale).message == text


def test_hmt_specific_messages_override_generic():
    parser = _parser_with(_entry(0, 215, 0, 0))
    assert parser.get_log_entry(0).message == "PV-1: Input overvoltage"
    parser.message_type = AlarmMessageType.HMT
    assert parser.get_log_entry(0).message == "MPPT-C: Input overvoltage"


def test_hmt_only_message_unknown_for_other_inverters():
    parser = _parser_with(_entry(0, 171, 0, 0))
    assert parser.get_log_entry(0).message == "Unknown"
    parser.message_type = AlarmMessageType.HMT
    assert parser.get_log_entry(0).message == "Grid: Abnormal phase difference between phase to phase"


def test_entry_out_of_range_raises():
    parser = AlarmLogParser()
    with pytest.raises(IndexError):
        parser.get_log_entry(ALARM_LOG_PAYLOAD_SIZE // ALARM_LOG_ENTRY_SIZE)


def test_alarm_request_defaults_to_nok():
    assert AlarmLogParser().last_alarm_request_success == LastCommandSuccess.NOK