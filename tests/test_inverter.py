import pytest

from hoylink.hm_models import Hm1Ch
from hoylink.inverter import (
    MAX_NAME_LENGTH,
    MAX_RF_FRAGMENT_COUNT,
    Fragment,
    FragmentStatus,
)
from hoylink.statistics import ChannelNum, ChannelType, FieldId

SERIAL = 0x112233445566


class _Command:
    def __init__(self, send_count=1, max_resend_count=2, max_retransmit_count=5,
                 handled=True):
        self.send_count = send_count
        self.max_resend_count = max_resend_count
        self.max_retransmit_count = max_retransmit_count
        self.handled = handled
        self.timeouts = 0
        self.responses = []

    def got_timeout(self, inverter):
        self.timeouts += 1

    def handle_response(self, inverter, fragments, max_fragment_id):
        self.responses.append((fragments, max_fragment_id))
        return self.handled


def _frag(count, payload=b"\x01\x02", cmd=0x95):
    return bytes([cmd]) + bytes(8) + bytes([count]) + payload + b"\x00"


@pytest.fixture
def inverter():
    return Hm1Ch(None, SERIAL)


def test_serial_and_string():
    inv = Hm1Ch(None, SERIAL)
    assert inv.serial == SERIAL
    assert inv.serial_string == "112233445566"


def test_serial_string_pads_low_word_only():
    inv = Hm1Ch(None, 0x12345678)
    assert inv.serial_string == "012345678"


def test_name_is_truncated():
    inv = Hm1Ch(None, SERIAL)
    inv.name = "x" * 40
    assert inv.name == "x" * (MAX_NAME_LENGTH - 1)
    inv.name = "roof"
    assert inv.name == "roof"


def test_statistics_layout_installed():
    inv = Hm1Ch(None, SERIAL)
    assert inv.statistics.has_value(ChannelType.AC, ChannelNum.CH0, FieldId.PAC)
    assert inv.statistics.expected_byte_count == 30


def test_is_producing_depends_on_power_and_polling():
    inv = Hm1Ch(None, SERIAL)
    assert inv.is_producing() is False
    inv.statistics.set_value(ChannelType.AC, ChannelNum.CH0, FieldId.PAC, 123.4)
    assert inv.is_producing() is True
    inv.enable_polling = False
    assert inv.is_producing() is False


def test_is_reachable_uses_threshold():
    inv = Hm1Ch(None, SERIAL)
    assert inv.is_reachable() is True
    for _ in range(inv.reachable_threshold):
        inv.statistics.increment_rx_failure_count()
    assert inv.is_reachable() is True
    inv.statistics.increment_rx_failure_count()
    assert inv.is_reachable() is False
    inv.statistics.reset_rx_failure_count()
    inv.enable_polling = False
    assert inv.is_reachable() is False


def test_change_channel_request_refused():
    inv = Hm1Ch(None, SERIAL)
    assert inv.send_change_channel_request() is False


def test_add_fragment_stores_payload(inverter):
    inverter.add_rx_fragment(_frag(0x81, b"\xaa\xbb\xcc"))
    stored = inverter.rx_fragments[0]
    assert stored == Fragment(b"\xaa\xbb\xcc", 0x95, True)
    assert stored.length == 3
    assert len(inverter.rx_fragments) == MAX_RF_FRAGMENT_COUNT


@pytest.mark.parametrize("packet", [
    b"\x00" * 10,
    _frag(0x80),
    _frag(MAX_RF_FRAGMENT_COUNT),
    _frag(1, bytes(40)),
])
def test_add_fragment_rejects_bad_packets(packet):
    inv = Hm1Ch(None, SERIAL)
    with pytest.raises(ValueError):
        inv.add_rx_fragment(packet)


def test_clear_buffer_forgets_fragments(inverter):
    inverter.add_rx_fragment(_frag(0x81))
    inverter.clear_rx_fragment_buffer()
    assert all(not f.was_received for f in inverter.rx_fragments)
    assert inverter.verify_all_fragments(_Command()) == FragmentStatus.ALL_MISSING_RESEND


def test_verify_all_missing_timeout(inverter):
    cmd = _Command(send_count=3, max_resend_count=2)
    assert inverter.verify_all_fragments(cmd) == FragmentStatus.ALL_MISSING_TIMEOUT
    assert cmd.timeouts == 1


def test_verify_complete_response(inverter):
    inverter.add_rx_fragment(_frag(0x01))
    inverter.add_rx_fragment(_frag(0x82))
    cmd = _Command()
    assert inverter.verify_all_fragments(cmd) == FragmentStatus.OK
    fragments, max_id = cmd.responses[0]
    assert max_id == 2
    assert fragments[0].was_received and fragments[1].was_received


def test_verify_last_missing_requests_next(inverter):
    inverter.add_rx_fragment(_frag(0x01))
    assert inverter.verify_all_fragments(_Command()) == 2


def test_verify_middle_missing_requests_gap(inverter):
    inverter.add_rx_fragment(_frag(0x83))
    inverter.add_rx_fragment(_frag(0x01))
    assert inverter.verify_all_fragments(_Command()) == 2


def test_verify_retransmit_exhausted(inverter):
    inverter.add_rx_fragment(_frag(0x01))
    cmd = _Command(max_retransmit_count=1)
    assert inverter.verify_all_fragments(cmd) == 2
    assert inverter.verify_all_fragments(cmd) == FragmentStatus.RETRANSMIT_TIMEOUT
    assert cmd.timeouts == 1


def test_verify_handle_error(inverter):
    inverter.add_rx_fragment(_frag(0x81))
    cmd = _Command(handled=False)
    assert inverter.verify_all_fragments(cmd) == FragmentStatus.HANDLE_ERROR
    assert cmd.timeouts == 1