"""Decoding of the alarm (event) log reported by the inverters."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass

from hoylink.parser import LastCommandSuccess, Parser

ALARM_LOG_ENTRY_COUNT = 15
ALARM_LOG_ENTRY_SIZE = 12
ALARM_LOG_PAYLOAD_SIZE = ALARM_LOG_ENTRY_COUNT * ALARM_LOG_ENTRY_SIZE + 4

_HALF_DAY = 12 * 60 * 60


class AlarmMessageType(enum.IntEnum):
    """Inverter family an alarm text applies to."""

    ALL = 0
    HMT = 1


class AlarmMessageLocale(enum.IntEnum):
    """Language of the alarm texts."""

    EN = 0
    DE = 1
    FR = 2


@dataclass(frozen=True)
class AlarmMessage:
    """Text of one alarm code in all supported languages."""

    inverter_type: AlarmMessageType
    message_id: int
    message_en: str
    message_de: str = ""
    message_fr: str = ""

    def text(self, locale: AlarmMessageLocale) -> str:
        """Return the text in ``locale``, falling back to English."""
        if locale == AlarmMessageLocale.DE:
            return self.message_de or self.message_en
        if locale == AlarmMessageLocale.FR:
            return self.message_fr or self.message_en
        return self.message_en


@dataclass
class AlarmLogEntry:
    """One decoded entry of the alarm log."""

    message_id: int
    message: str
    start_time: int
    end_time: int


def _all(message_id: int, en: str, de: str = "", fr: str = "") -> AlarmMessage:
    return AlarmMessage(AlarmMessageType.ALL, message_id, en, de, fr)


def _hmt(message_id: int, en: str, de: str = "", fr: str = "") -> AlarmMessage:
    return AlarmMessage(AlarmMessageType.HMT, message_id, en, de, fr)


ALARM_MESSAGES: tuple[AlarmMessage, ...] = (
    _all(1, "Inverter start", "Wechselrichter gestartet", "L'onduleur a démarré"),
    _all(2, "Time calibration"),
    _all(3, "EEPROM reading and writing error during operation"),
    _all(4, "Offline", "Offline", "Non connecté"),

    _all(11, "Grid voltage surge"),
    _all(12, "Grid voltage sharp drop"),
    _all(13, "Grid frequency mutation"),
    _all(14, "Grid phase mutation"),
    _all(15, "Grid transient fluctuation"),

    _all(36, "INV overvoltage or overcurrent"),

    _all(46, "FB overvoltage", "FB Überspannung"),
    _all(47, "FB overcurrent", "FB Überstrom"),
    _all(48, "FB clamp overvoltage"),
    _all(49, "FB clamp overvoltage"),

    _all(61, "Calibration parameter error"),
    _all(62, "System configuration parameter error"),
    _all(63, "Abnormal power generation data"),

    _all(71, "Grid overvoltage load reduction (VW) function enable"),
    _all(72, "Power grid over-frequency load reduction (FW) function enable"),
    _all(73, "Over-temperature load reduction (TW) function enable"),

    _all(95, "PV-1: Module in suspected shadow"),
    _all(96, "PV-2: Module in suspected shadow"),
    _all(97, "PV-3: Module in suspected shadow"),
    _all(98, "PV-4: Module in suspected shadow"),

    _all(121, "Over temperature protection", "Übertemperaturschutz", "Protection antisurchauffe"),
    _all(122, "Microinverter is suspected of being stolen"),
    _all(123, "Locked by remote control"),
    _all(124, "Shut down by remote control", "Durch Fernsteuerung abgeschaltet", "Arrêt par télécommande"),
    _all(125, "Grid configuration parameter error",
         "Parameterfehler bei der Konfiguration des Elektrizitätsnetzes",
         "Erreur de paramètre de configuration du réseau"),
    _all(126, "Software error code 126"),
    _all(127, "Firmware error", "Firmwarefehler", "Erreur du micrologiciel"),
    _all(128, "Hardware configuration error"),
    _all(129, "Abnormal bias", "Abnormaler Trend", "Polarisation anormale"),
    _all(130, "Offline", "Offline", "Non connecté"),

    _all(141, "Grid: Grid overvoltage", "Netz: Netzüberspannung", "Réseau: Surtension du réseau"),
    _all(142, "Grid: 10 min value grid overvoltage",
         "Netz: 10 Minuten-Mittelwert der Netzüberspannung",
         "Réseau: Valeur de surtension du réseau pendant 10 min"),
    _all(143, "Grid: Grid undervoltage", "Netz: Netzunterspannung", "Réseau: Sous-tension du réseau"),
    _all(144, "Grid: Grid overfrequency", "Netz: Netzüberfrequenz", "Réseau: Surfréquence du réseau"),
    _all(145, "Grid: Grid underfrequency", "Netz: Netzunterfrequenz", "Réseau: Sous-fréquence du réseau"),
    _all(146, "Grid: Rapid grid frequency change rate",
         "Netz: Schnelle Wechselrate der Netzfrequenz",
         "Réseau: Taux de fluctuation rapide de la fréquence du réseau"),
    _all(147, "Grid: Power grid outage", "Netz: Eletrizitätsnetzausfall", "Réseau: Panne du réseau électrique"),
    _all(148, "Grid: Grid disconnection", "Netz: Netztrennung", "Réseau: Déconnexion du réseau"),
    _all(149, "Grid: Island detected", "Netz: Inselbetrieb festgestellt", "Réseau: Détection d’îlots"),

    _all(150, "DCI exceeded"),
    _hmt(171, "Grid: Abnormal phase difference between phase to phase"),
    _all(181, "Abnormal insulation impedance"),
    _all(182, "Abnormal grounding"),

    _all(205, "MPPT-A: Input overvoltage", "MPPT-A: Eingangsüberspannung", "MPPT-A: Surtension d’entrée"),
    _all(206, "MPPT-B: Input overvoltage", "MPPT-B: Eingangsüberspannung", "MPPT-B: Surtension d’entrée"),
    _all(207, "MPPT-A: Input undervoltage", "MPPT-A: Eingangsunterspannung", "MPPT-A: Sous-tension d’entrée"),
    _all(208, "MPPT-B: Input undervoltage", "MPPT-B: Eingangsunterspannung", "MPPT-B: Sous-tension d’entrée"),

    _all(209, "PV-1: No input", "PV-1: Kein Eingang", "PV-1: Aucune entrée"),
    _all(210, "PV-2: No input", "PV-2: Kein Eingang", "PV-2: Aucune entrée"),
    _all(211, "PV-3: No input", "PV-3: Kein Eingang", "PV-3: Aucune entrée"),
    _all(212, "PV-4: No input", "PV-4: Kein Eingang", "PV-4: Aucune entrée"),

    _all(213, "MPPT-A: PV-1 & PV-2 abnormal wiring",
         "MPPT-A: Verdrahtungsfehler bei PV-1 und PV-2",
         "MPPT-A: Câblages photovoltaïques 1 et 2 anormaux"),
    _all(214, "MPPT-B: PV-3 & PV-4 abnormal wiring",
         "MPPT-B: Verdrahtungsfehler bei PV-3 und PV-4",
         "MPPT-B: Câblages photovoltaïques 3 et 4 anormaux"),

    _all(215, "PV-1: Input overvoltage", "PV-1: Eingangsüberspannung", "PV-1: Surtension d’entrée"),
    _hmt(215, "MPPT-C: Input overvoltage", "MPPT-C: Eingangsüberspannung", "MPPT-C: Surtension d’entrée"),
    _all(216, "PV-1: Input undervoltage", "PV-1: Eingangsunterspannung", "PV-1: Sous-tension d’entrée"),
    _hmt(216, "MPPT-C: Input undervoltage", "MPPT-C: Eingangsunterspannung", "MPPT-C: Sous-tension d’entrée"),
    _all(217, "PV-2: Input overvoltage", "PV-2: Eingangsüberspannung", "PV-2: Surtension d’entrée"),
    _hmt(217, "PV-5: No input", "PV-5: Kein  Eingang", "PV-5: Aucune entrée"),
    _all(218, "PV-2: Input undervoltage", "PV-2: Eingangsunterspannung", "PV-2: Sous-tension d’entrée"),
    _hmt(218, "PV-6: No input", "PV-6: Kein Eingang", "PV-6: Aucune entrée"),
    _all(219, "PV-3: Input overvoltage", "PV-3: Eingangsüberspannung", "PV-3: Surtension d’entrée"),
    _hmt(219, "MPPT-C: PV-5 & PV-6 abnormal wiring"),
    _all(220, "PV-3: Input undervoltage", "PV-3: Eingangsunterspannung", "PV-3: Sous-tension d’entrée"),
    _all(221, "PV-4: Input overvoltage", "PV-4: Eingangsüberspannung", "PV-4: Surtension d’entrée"),
    _hmt(221, "Abnormal wiring of grid neutral line"),
    _all(222, "PV-4: Input undervoltage", "PV-4: Eingangsunterspannung", "PV-4: Sous-tension d’entrée"),

    _all(301, "FB-A: internal short circuit failure"),
    _all(302, "FB-B: internal short circuit failure"),

    _all(303, "FB-A: overcurrent protection failure"),
    _all(304, "FB-B: overcurrent protection failure"),

    _all(305, "FB-A: clamp circuit failure"),
    _all(306, "FB-B: clamp circuit failure"),

    _all(307, "INV power device failure"),
    _all(308, "INV overcurrent or overvoltage protection failure"),

    _all(309, "Hardware error code 309", "Hardwarefehlercode 309"),
    _all(310, "Hardware error code 310", "Hardwarefehlercode 310"),
    _all(311, "Hardware error code 311", "Hardwarefehlercode 311"),
    _all(312, "Hardware error code 312", "Hardwarefehlercode 312"),
    _all(313, "Hardware error code 313", "Hardwarefehlercode 313"),
    _all(314, "Hardware error code 314", "Hardwarefehlercode 314"),

    _all(1111, "Repeater"),

    _all(2000, "Standby"),
    _all(2001, "Standby"),
    _all(2002, "Standby"),
    _all(2003, "Standby"),
    _all(2004, "Standby"),

    _all(3001, "Reset"),
    _all(3002, "Reset"),
    _all(3003, "Reset"),
    _all(3004, "Reset"),

    _all(5011, "PV-1: MOSFET overcurrent (II)", "PV-1: MOSFET Überstrom (II)"),
    _all(5012, "PV-2: MOSFET overcurrent (II)", "PV-2: MOSFET Überstrom (II)"),
    _all(5013, "PV-3: MOSFET overcurrent (II)", "PV-3: MOSFET Überstrom (II)"),
    _all(5014, "PV-4: MOSFET overcurrent (II)", "PV-4: MOSFET Überstrom (II)"),
    _all(5020, "H-bridge MOSFET overcurrent or H-bridge overvoltage",
         "H-Brücken-MOSFET-Überstrom oder H-Brücken-Überspannung"),

    _all(5041, "PV-1: current overcurrent (II)"),
    _all(5042, "PV-2: current overcurrent (II)"),
    _all(5043, "PV-3: current overcurrent (II)"),
    _all(5044, "PV-4: current overcurrent (II)"),

    _all(5051, "PV-1: Overvoltage/Undervoltage"),
    _all(5052, "PV-2: Overvoltage/Undervoltage"),
    _all(5053, "PV-3: Overvoltage/Undervoltage"),
    _all(5054, "PV-4: Overvoltage/Undervoltage"),

    _all(5060, "Abnormal bias", "Abnormaler Trend", "Polarisation anormale"),
    _all(5070, "Over temperature protection", "Übertemperaturschutz", "Protection antisurchauffe"),
    _all(5080, "Grid Overvoltage/Undervoltage"),
    _all(5090, "Grid Overfrequency/Underfrequency"),
    _all(5100, "Island detected", "Inselbetrieb festgestellt", "Détection d’îlots"),
    _all(5110, "GFDI failure"),
    _all(5120, "EEPROM reading and writing error"),

    _all(5141, "FB clamp overvoltage"),
    _all(5142, "FB clamp overvoltage"),
    _all(5143, "FB clamp overvoltage"),
    _all(5144, "FB clamp overvoltage"),

    _all(5150, "10 min value grid overvoltage",
         "10 Minuten-Mittelwert der Netzüberspannung",
         "Valeur de surtension du réseau pendant 10 min"),
    _all(5160, "Grid transient fluctuation"),

    _all(5200, "Firmware error", "Firmwarefehler", "Erreur du micrologiciel"),

    _all(5511, "PV-1: MOSFET overcurrent-H", "PV-1: MOSFET Überstrom-H"),
    _all(5512, "PV-2: MOSFET overcurrent-H", "PV-2: MOSFET Überstrom-H"),
    _all(5513, "PV-3: MOSFET overcurrent-H", "PV-3: MOSFET Überstrom-H"),
    _all(5514, "PV-4: MOSFET overcurrent-H", "PV-4: MOSFET Überstrom-H"),
    _all(5520, "H-bridge MOSFET overcurrent or H-bridge overvoltage",
         "H-Brücken-MOSFET-Überstrom oder H-Brücken-Überspannung"),

    _all(8310, "Shut down by remote control", "Durch Fernsteuerung abgeschaltet", "Arrêt par télécommande"),
    _all(8320, "Locked by remote control"),
    _all(9000, "Microinverter is suspected of being stolen"),
)

_UNKNOWN_MESSAGE = {
    AlarmMessageLocale.EN: "Unknown",
    AlarmMessageLocale.DE: "Unbekannt",
    AlarmMessageLocale.FR: "Inconnu",
}


def timezone_offset() -> int:
    """Seconds the local time zone is ahead of UTC at this moment."""
    now = int(time.time())
    utc = time.gmtime(now)
    as_local = time.mktime(tuple(utc[:8]) + (-1,))
    return int(now - as_local)


class AlarmLogParser(Parser):
    """Holds the raw alarm log payload and decodes its entries."""

    def __init__(self) -> None:
        super().__init__()
        self._payload = bytearray(ALARM_LOG_PAYLOAD_SIZE)
        self._alarm_log_length = 0
        self.last_alarm_request_success = LastCommandSuccess.NOK
        self.message_type = AlarmMessageType.ALL

    def clear_buffer(self) -> None:
        """Zero the payload and forget how many bytes were received."""
        self._payload = bytearray(ALARM_LOG_PAYLOAD_SIZE)
        self._alarm_log_length = 0

    def append_fragment(self, offset: int, payload: bytes) -> None:
        """Copy a received fragment into the payload at ``offset``."""
        end = offset + len(payload)
        if end > ALARM_LOG_PAYLOAD_SIZE:
            raise ValueError(
                f"alarm log packet too large for buffer ({end} > {ALARM_LOG_PAYLOAD_SIZE})"
            )
        self._payload[offset:end] = payload
        self._alarm_log_length += len(payload)

    def entry_count(self) -> int:
        """Number of complete entries received."""
        if self._alarm_log_length < 2:
            return 0
        return (self._alarm_log_length - 2) // ALARM_LOG_ENTRY_SIZE

    def get_log_entry(
        self, entry_id: int, locale: AlarmMessageLocale = AlarmMessageLocale.EN
    ) -> AlarmLogEntry:
        """Decode entry ``entry_id`` with its message in ``locale``."""
        start = 2 + entry_id * ALARM_LOG_ENTRY_SIZE
        if entry_id < 0 or start + 8 > ALARM_LOG_PAYLOAD_SIZE:
            raise IndexError(f"alarm log entry {entry_id} out of range")

        tz_offset = timezone_offset()

        with self._lock:
            raw = bytes(self._payload[start:start + 8])

        wcode = (raw[0] << 8) | raw[1]
        start_time_offset = _HALF_DAY if (wcode >> 13) & 0x01 else 0
        end_time_offset = _HALF_DAY if (wcode >> 12) & 0x01 else 0

        message_id = raw[1]
        start_time = ((raw[4] << 8) | raw[5]) + start_time_offset + tz_offset
        end_time = (raw[6] << 8) | raw[7]
        if end_time > 0:
            end_time += end_time_offset + tz_offset

        locale = AlarmMessageLocale(locale)
        message = _UNKNOWN_MESSAGE[locale]
        for msg in ALARM_MESSAGES:
            if msg.message_id != message_id:
                continue
            if msg.inverter_type == self.message_type:
                message = msg.text(locale)
                break
            if msg.inverter_type == AlarmMessageType.ALL:
                message = msg.text(locale)

        return AlarmLogEntry(message_id, message, start_time, end_time)