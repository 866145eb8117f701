"""State of the power on/off/restart commands sent to an inverter."""

from __future__ import annotations

from hoylink.parser import LastCommandSuccess, Parser


class PowerCommandParser(Parser):
    """Tracks the outcome and time of the last power command."""

    def __init__(self) -> None:
        super().__init__()
        # Nothing is assumed to be pending at startup.
        self.last_power_command_success = LastCommandSuccess.OK
        self.last_update_command = 0

    def set_last_update_command(self, last_update: int) -> None:
        self.last_update_command = last_update
        self.set_last_update(last_update)