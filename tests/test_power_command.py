from hoylink.parser import LastCommandSuccess
from hoylink.power_command import PowerCommandParser


def test_default_state():
    parser = PowerCommandParser()
    assert parser.last_power_command_success == LastCommandSuccess.OK
    assert parser.last_update_command == 0


def test_set_last_update_command_updates_both():
    parser = PowerCommandParser()
    parser.set_last_update_command(1234)
    assert parser.last_update_command == 1234
    assert parser.last_update == 1234


def test_status_can_be_changed():
    parser = PowerCommandParser()
    parser.last_power_command_success = LastCommandSuccess.PENDING
    assert parser.last_power_command_success == LastCommandSuccess.PENDING