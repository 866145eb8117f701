"""Decoding of the grid profile (grid code settings) stored in the inverters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from hoylink.parser import Parser

GRID_PROFILE_SIZE = 141

_HEADER_SIZE = 4


class ProfileType(NamedTuple):
    """Name of a grid profile identified by its first two payload bytes."""

    l_idx: int
    h_idx: int
    name: str


PROFILE_TYPES: tuple[ProfileType, ...] = (
    ProfileType(0x02, 0x00, "US - NA_IEEE1547_240V"),
    ProfileType(0x03, 0x00, "DE - DE_VDE4105_2018"),
    ProfileType(0x03, 0x01, "XX - unknown"),
    ProfileType(0x0A, 0x00, "XX - EN 50549-1:2019"),
    ProfileType(0x0C, 0x00, "AT - AT_TOR_Erzeuger_default"),
    ProfileType(0x0D, 0x04, "FR -"),
    ProfileType(0x10, 0x00, "ES - ES_RD1699"),
    ProfileType(0x12, 0x00, "PL - EU_EN50438"),
    ProfileType(0x29, 0x00, "NL - NL_NEN-EN50549-1_2019"),
    ProfileType(0x37, 0x00, "CH - CH_NA EEA-NE7-CH2020"),
)

PROFILE_SECTIONS: dict[int, str] = {
    0x00: "Voltage (H/LVRT)",
    0x10: "Frequency (H/LFRT)",
    0x20: "Island Detection (ID)",
    0x30: "Reconnection (RT)",
    0x40: "Ramp Rates (RR)",
    0x50: "Frequency Watt (FW)",
    0x60: "Volt Watt (VW)",
    0x70: "Active Power Control (APC)",
    0x80: "Volt Var (VV)",
    0x90: "Specified Power Factor (SPF)",
    0xA0: "Reactive Power Control (RPC)",
    0xB0: "Watt Power Factor (WPF)",
}


class ItemDefinition(NamedTuple):
    """Name, unit and divisor of one grid profile value."""

    name: str
    unit: str
    divider: int


ITEM_DEFINITIONS: dict[int, ItemDefinition] = {
    0x01: ItemDefinition("Nominale Voltage (NV)", "V", 10),
    0x02: ItemDefinition("Low Voltage 1 (LV1)", "V", 10),
    0x03: ItemDefinition("LV1 Maximum Trip Time (MTT)", "s", 10),
    0x04: ItemDefinition("High Voltage 1 (HV1)", "V", 10),
    0x05: ItemDefinition("HV1 Maximum Trip Time (MTT)", "s", 10),
    0x06: ItemDefinition("Low Voltage 2 (LV2)", "V", 10),
    0x07: ItemDefinition("LV2 Maximum Trip Time (MTT)", "s", 100),
    0x08: ItemDefinition("High Voltage 2 (HV2)", "V", 10),
    0x09: ItemDefinition("HV2 Maximum Trip Time (MTT)", "s", 100),
    0x0A: ItemDefinition("10mins Average High Voltage (AHV)", "V", 10),
    0x0B: ItemDefinition("High Voltage 3 (HV3)", "V", 10),
    0x0C: ItemDefinition("HV3 Maximum Trip Time (MTT)", "s", 100),
    0x0D: ItemDefinition("Nominal Frequency", "Hz", 100),
    0x0E: ItemDefinition("Low Frequency 1 (LF1)", "Hz", 100),
    0x0F: ItemDefinition("LF1 Maximum Trip Time (MTT)", "s", 10),
    0x10: ItemDefinition("High Frequency 1 (HF1)", "Hz", 100),
    0x11: ItemDefinition("HF1 Maximum Trip time (MTT)", "s", 10),
    0x12: ItemDefinition("Low Frequency 2 (LF2)", "Hz", 100),
    0x13: ItemDefinition("LF2 Maximum Trip Time (MTT)", "s", 10),
    0x14: ItemDefinition("High Frequency 2 (HF2)", "Hz", 100),
    0x15: ItemDefinition("HF2 Maximum Trip time (MTT)", "s", 10),
    0x16: ItemDefinition("ID Function Activated", "bool", 1),
    0x17: ItemDefinition("Reconnect Time (RT)", "s", 10),
    0x18: ItemDefinition("Reconnect High Voltage (RHV)", "V", 10),
    0x19: ItemDefinition("Reconnect Low Voltage (RLV)", "V", 10),
    0x1A: ItemDefinition("Reconnect High Frequency (RHF)", "Hz", 100),
    0x1B: ItemDefinition("Reconnect Low Frequency (RLF)", "Hz", 100),
    0x1C: ItemDefinition("Normal Ramp up Rate(RUR_NM)", "Rated%/s", 100),
    0x1D: ItemDefinition("Soft Start Ramp up Rate (RUR_SS)", "Rated%/s", 100),
    0x1E: ItemDefinition("FW Function Activated", "bool", 1),
    0x1F: ItemDefinition("Start of Frequency Watt Droop (Fstart)", "Hz", 100),
    0x20: ItemDefinition("FW Droop Slope (Kpower_Freq)", "Pn%/Hz", 10),
    0x21: ItemDefinition("Recovery Ramp Rate (RRR)", "Pn%/s", 100),
    0x22: ItemDefinition("Recovery High Frequency (RVHF)", "Hz", 100),
    0x23: ItemDefinition("Recovery Low Frequency (RVLF)", "Hz", 100),
    0x24: ItemDefinition("VW Function Activated", "bool", 1),
    0x25: ItemDefinition("Start of Voltage Watt Droop (Vstart)", "V", 10),
    0x26: ItemDefinition("End of Voltage Watt Droop (Vend)", "V", 10),
    0x27: ItemDefinition("Droop Slope (Kpower_Volt)", "Pn%/V", 100),
    0x28: ItemDefinition("APC Function Activated", "bool", 1),
    0x29: ItemDefinition("Power Ramp Rate (PRR)", "Pn%/s", 100),
    0x2A: ItemDefinition("VV Function Activated", "bool", 1),
    0x2B: ItemDefinition("Voltage Set Point V1", "V", 10),
    0x2C: ItemDefinition("Reactive Set Point Q1", "%Pn", 10),
    0x2D: ItemDefinition("Voltage Set Point V2", "V", 10),
    0x2E: ItemDefinition("Voltage Set Point V3", "V", 10),
    0x2F: ItemDefinition("Voltage Set Point V4", "V", 10),
    0x30: ItemDefinition("Reactive Set Point Q4", "%Pn", 10),
    0x31: ItemDefinition("VV Setting Time (Tr)", "s", 10),
    0x32: ItemDefinition("SPF Function Activated", "bool", 1),
    0x33: ItemDefinition("Power Factor (PF)", "", 100),
    0x34: ItemDefinition("RPC Function Activated", "bool", 1),
    0x35: ItemDefinition("Reactive Power (VAR)", "%Sn", 1),
    0x36: ItemDefinition("WPF Function Activated", "bool", 1),
    0x37: ItemDefinition("Start of Power of WPF (Pstart)", "%Pn", 10),
    0x38: ItemDefinition("Power Factor ar Rated Power (PFRP)", "", 100),
    0x39: ItemDefinition("Low Voltage 3 (LV3)", "V", 10),
    0x3A: ItemDefinition("LV3 Maximum Trip Time (MTT)", "s", 100),
    0x3B: ItemDefinition("Momentary Cessition Low Voltage", "V", 10),
    0x3C: ItemDefinition("Momentary Cessition High Voltage", "V", 10),
    0x3D: ItemDefinition("FW Settling Time (Tr)", "s", 10),
    0x3E: ItemDefinition("LF2 Maximum Trip Time (MTT)", "s", 100),
    0x3F: ItemDefinition("HF2 Maximum Trip time (MTT)", "s", 100),
    0x40: ItemDefinition("Short Interruption Reconnect Time (SRT)", "s", 10),
    0x41: ItemDefinition("Short Interruption Time (SIT)", "s", 10),
    0xFF: ItemDefinition("Unkown Value", "", 1),
}

# Items carried by each (section, version), in payload order.
PROFILE_VALUES: dict[tuple[int, int], tuple[int, ...]] = {
    # Voltage (H/LVRT)
    (0x00, 0x00): (0x01, 0x02, 0x03, 0x04, 0x05),
    (0x00, 0x01): (0x01, 0x02, 0x03, 0x04, 0x05, 0x08, 0x09),
    (0x00, 0x02): (0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07),
    (0x00, 0x03): (0x01, 0x02, 0x03, 0x05, 0x06, 0x07, 0x08, 0x09),
    (0x00, 0x08): (0x01, 0x02, 0x03, 0x04, 0x05, 0xFF),
    (0x00, 0x0A): (0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x0A),
    (0x00, 0x0B): (0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08, 0x09, 0x0A),
    (0x00, 0x0C): (0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08, 0x09, 0x0B, 0x0C, 0x0A),
    (0x00, 0x35): (0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08, 0x09,
                   0x39, 0x3A, 0x3B, 0x3C),
    # Frequency (H/LFRT)
    (0x10, 0x00): (0x0D, 0x0E, 0x0F, 0x10, 0x11),
    (0x10, 0x03): (0x0D, 0x0E, 0x0F, 0x10, 0x11, 0x12, 0x3E, 0x14, 0x3F),
    # Island Detection (ID)
    (0x20, 0x00): (0x16,),
    # Reconnection (RT)
    (0x30, 0x03): (0x17, 0x18, 0x19, 0x1A, 0x1B),
    (0x30, 0x07): (0x17, 0x18, 0x19, 0x1A, 0x1B, 0x40, 0x41),
    # Ramp Rates (RR)
    (0x40, 0x00): (0x1C, 0x1D),
    # Frequency Watt (FW)
    (0x50, 0x00): (0x1E, 0x1F, 0x20, 0x21),
    (0x50, 0x01): (0x1E, 0x1F, 0x20, 0x21, 0x22),
    (0x50, 0x08): (0x1E, 0x1F, 0x20, 0x21, 0x22, 0x23),
    (0x50, 0x11): (0x1E, 0x1F, 0x20, 0x21, 0x3D),
    # Volt Watt (VW)
    (0x60, 0x00): (0x24, 0x25, 0x26, 0x27),
    (0x60, 0x04): (0x24, 0x25, 0x26, 0x27),
    # Active Power Control (APC)
    (0x70, 0x00): (0x28,),
    (0x70, 0x02): (0x28, 0x29),
    # Volt Var (VV)
    (0x80, 0x00): (0x2A, 0x2B, 0x2C, 0x2D, 0x2E, 0x2F, 0x30),
    (0x80, 0x01): (0x2A, 0x2B, 0x2C, 0x2D, 0x2E, 0x2F, 0x30, 0x31),
    # Specified Power Factor (SPF)
    (0x90, 0x00): (0x32, 0x33),
    # Reactive Power Control (RPC)
    (0xA0, 0x02): (0x34, 0x35),
    # Watt Power Factor (WPF)
    (0xB0, 0x00): (0x36, 0x37, 0x38),
}


@dataclass
class GridProfileItem:
    """One decoded value of a grid profile section."""

    name: str
    unit: str
    value: float


@dataclass
class GridProfileSection:
    """A decoded grid profile section with its values."""

    name: str
    items: list[GridProfileItem] = field(default_factory=list)


class GridProfileParser(Parser):
    """Holds the raw grid profile payload and decodes it."""

    def __init__(self) -> None:
        super().__init__()
        self._payload = bytearray(GRID_PROFILE_SIZE)
        self._grid_profile_length = 0

    def clear_buffer(self) -> None:
        """Zero the payload and forget how many bytes were received."""
        self._payload = bytearray(GRID_PROFILE_SIZE)
        self._grid_profile_length = 0

    def append_fragment(self, offset: int, payload: bytes) -> None:
        """Copy a received fragment into the payload at ``offset``."""
        end = offset + len(payload)
        if end > GRID_PROFILE_SIZE:
            raise ValueError(
                f"grid profile packet too large for buffer ({end} > {GRID_PROFILE_SIZE})"
            )
        self._payload[offset:end] = payload
        self._grid_profile_length += len(payload)

    def profile_name(self) -> str:
        """Name of the profile, or "Unknown"."""
        with self._lock:
            l_idx, h_idx = self._payload[0], self._payload[1]
        for ptype in PROFILE_TYPES:
            if ptype.l_idx == l_idx and ptype.h_idx == h_idx:
                return ptype.name
        return "Unknown"

    def profile_version(self) -> str:
        """Profile version as "major.minor.patch"."""
        with self._lock:
            version, patch = self._payload[2], self._payload[3]
        return f"{(version >> 4) & 0x0F}.{version & 0x0F}.{patch}"

    def raw_data(self) -> bytes:
        """A copy of the whole payload buffer."""
        with self._lock:
            return bytes(self._payload)

    def _byte(self, data: bytes, pos: int) -> int:
        return data[pos] if pos < len(data) else 0

    def profile(self) -> list[GridProfileSection]:
        """Decode the sections that follow the header.

        Decoding stops at the first unknown section id; a known section
        with an unknown version yields a section without items.
        """
        sections: list[GridProfileSection] = []
        length = self._grid_profile_length
        if length <= _HEADER_SIZE:
            return sections

        data = self.raw_data()
        pos = _HEADER_SIZE
        while True:
            section_id = self._byte(data, pos)
            section_version = self._byte(data, pos + 1)
            pos += 2

            name = PROFILE_SECTIONS.get(section_id)
            if name is None:
                break

            section = GridProfileSection(name)
            for item_id in PROFILE_VALUES.get((section_id, section_version), ()):
                definition = ITEM_DEFINITIONS[item_id]
                raw = (self._byte(data, pos) << 8) | self._byte(data, pos + 1)
                if raw & 0x8000:
                    raw -= 0x10000
                section.items.append(
                    GridProfileItem(definition.name, definition.unit, raw / definition.divider)
                )
                pos += 2
            sections.append(section)

            if pos >= length:
                break
        return sections