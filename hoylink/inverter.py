"""Common behaviour of all inverter models: identity, state and fragment buffer."""

from __future__ import annotations

import abc
import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from hoylink.alarm_log import AlarmLogParser
from hoylink.dev_info import DevInfoParser
from hoylink.grid_profile import GridProfileParser
from hoylink.power_command import PowerCommandParser
from hoylink.statistics import ByteAssign, ChannelType, FieldId, StatisticsParser
from hoylink.system_config import SystemConfigParaParser

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 32
MAX_RF_FRAGMENT_COUNT = 13
MAX_RF_PAYLOAD_SIZE = 32

# main command byte + 4 bytes target + 4 bytes source + fragment counter
_FRAGMENT_HEADER_SIZE = 10
# header plus the trailing checksum byte
_FRAGMENT_OVERHEAD = _FRAGMENT_HEADER_SIZE + 1
_LAST_FRAGMENT_FLAG = 0x80
_FRAGMENT_ID_MASK = 0x7F


class FragmentStatus(enum.IntEnum):
    """Result codes of ``verify_all_fragments`` besides a fragment id to resend."""

    OK = 0
    HANDLE_ERROR = 252
    RETRANSMIT_TIMEOUT = 253
    ALL_MISSING_TIMEOUT = 254
    ALL_MISSING_RESEND = 255


@dataclass(frozen=True)
class Fragment:
    """Payload of one received radio fragment."""

    data: bytes = b""
    main_cmd: int = 0
    was_received: bool = False

    @property
    def length(self) -> int:
        return len(self.data)


class Command(Protocol):
    """What ``verify_all_fragments`` needs from the command being answered."""

    send_count: int
    max_resend_count: int
    max_retransmit_count: int

    def got_timeout(self, inverter: "InverterAbstract") -> None: ...

    def handle_response(
        self,
        inverter: "InverterAbstract",
        fragments: Sequence[Fragment],
        max_fragment_id: int,
    ) -> bool: ...


class InverterAbstract(abc.ABC):
    """An inverter identified by its serial, with its parsers and settings."""

    def __init__(self, radio: Any, serial: int) -> None:
        self.radio = radio
        self._serial = serial & 0xFFFFFFFFFFFFFFFF
        self._serial_string = (
            f"{(self._serial >> 32) & 0xFFFFFFFF:x}{self._serial & 0xFFFFFFFF:08x}"
        )
        self._name = ""

        self.enable_polling = True
        self.enable_commands = True
        self.reachable_threshold = 3
        self.zero_values_if_unreachable = False
        self.zero_yield_day_on_midnight = False

        self.event_log = AlarmLogParser()
        self.dev_info = DevInfoParser()
        self.grid_profile = GridProfileParser()
        self.power_command = PowerCommandParser()
        self.statistics = StatisticsParser()
        self.system_config_para = SystemConfigParaParser()
        self.statistics.set_byte_assignment(self.byte_assignment)

        self._rx_fragments: list[Fragment] = []
        self._rx_max_packet_id = 0
        self._rx_last_packet_id = 0
        self._rx_retransmit_count = 0
        self.clear_rx_fragment_buffer()

    @property
    @abc.abstractmethod
    def type_name(self) -> str:
        """Human readable name of the model family."""

    @property
    @abc.abstractmethod
    def byte_assignment(self) -> Sequence[ByteAssign]:
        """Layout of the statistics payload of this model."""

    @property
    def serial(self) -> int:
        return self._serial

    @property
    def serial_string(self) -> str:
        """The serial in hexadecimal, as printed on the device."""
        return self._serial_string

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value[:MAX_NAME_LENGTH - 1]

    def is_producing(self) -> bool:
        """True if polling is enabled and the AC power is above zero."""
        stats = self.statistics
        total_ac = sum(
            stats.get_value(ChannelType.AC, channel, FieldId.PAC)
            for channel in stats.channels_by_type(ChannelType.AC)
            if stats.has_value(ChannelType.AC, channel, FieldId.PAC)
        )
        return self.enable_polling and total_ac > 0

    def is_reachable(self) -> bool:
        """True if polling is enabled and failures stay within the threshold."""
        return (
            self.enable_polling
            and self.statistics.rx_failure_count <= self.reachable_threshold
        )

    def send_change_channel_request(self) -> bool:
        """Models without a channel change command refuse the request."""
        return False

    @property
    def rx_fragments(self) -> tuple[Fragment, ...]:
        """The fragment buffer, indexed by fragment id minus one."""
        return tuple(self._rx_fragments)

    def clear_rx_fragment_buffer(self) -> None:
        """Forget all received fragments and the retransmit counter."""
        self._rx_fragments = [Fragment() for _ in range(MAX_RF_FRAGMENT_COUNT)]
        self._rx_max_packet_id = 0
        self._rx_last_packet_id = 0
        self._rx_retransmit_count = 0

    def add_rx_fragment(self, fragment: bytes) -> None:
        """Store a received radio packet in the fragment buffer.

        Raises ValueError for packets that are too short or too long and
        for fragment ids that are zero or do not fit the buffer.
        """
        fragment = bytes(fragment)
        if len(fragment) < _FRAGMENT_OVERHEAD:
            raise ValueError("fragment too short")
        payload_len = len(fragment) - _FRAGMENT_OVERHEAD
        if payload_len > MAX_RF_PAYLOAD_SIZE:
            raise ValueError("fragment too large")

        fragment_count = fragment[_FRAGMENT_HEADER_SIZE - 1]
        fragment_id = fragment_count & _FRAGMENT_ID_MASK
        if fragment_id == 0:
            raise ValueError("fragment id zero received")
        if fragment_id >= MAX_RF_FRAGMENT_COUNT:
            raise ValueError(f"fragment id {fragment_id} is too large for buffer")

        self._rx_fragments[fragment_id - 1] = Fragment(
            data=fragment[_FRAGMENT_HEADER_SIZE:_FRAGMENT_HEADER_SIZE + payload_len],
            main_cmd=fragment[0],
            was_received=True,
        )
        self._rx_last_packet_id = max(self._rx_last_packet_id, fragment_id)
        if fragment_count & _LAST_FRAGMENT_FLAG:
            self._rx_max_packet_id = fragment_id

    def verify_all_fragments(self, cmd: Command) -> int:
        """Check the received fragments against ``cmd``.

        Returns ``FragmentStatus.OK`` when the response was handled, the
        id of a fragment to request again, or another ``FragmentStatus``.
        """
        if self._rx_last_packet_id == 0:
            logger.debug("All missing")
            if cmd.send_count <= cmd.max_resend_count:
                return FragmentStatus.ALL_MISSING_RESEND
            cmd.got_timeout(self)
            return FragmentStatus.ALL_MISSING_TIMEOUT

        if self._rx_max_packet_id == 0:
            logger.debug("Last missing")
            if self._take_retransmit(cmd):
                return self._rx_last_packet_id + 1
            cmd.got_timeout(self)
            return FragmentStatus.RETRANSMIT_TIMEOUT

        for index, frag in enumerate(self._rx_fragments[:self._rx_max_packet_id - 1]):
            if not frag.was_received:
                logger.debug("Middle missing")
                if self._take_retransmit(cmd):
                    return index + 1
                cmd.got_timeout(self)
                return FragmentStatus.RETRANSMIT_TIMEOUT

        if not cmd.handle_response(self, self.rx_fragments, self._rx_max_packet_id):
            cmd.got_timeout(self)
            return FragmentStatus.HANDLE_ERROR

        return FragmentStatus.OK

    def _take_retransmit(self, cmd: Command) -> bool:
        allowed = self._rx_retransmit_count < cmd.max_retransmit_count
        self._rx_retransmit_count += 1
        return allowed