# hoylink

A pure-Python library for decoding the payloads that microinverters report
over their radio link, and for modelling the inverters themselves. It has no
runtime dependencies.

## Modules

- `hoylink.parser` – `Parser`, the base of all payload parsers: a lock taken
  by `begin_append_fragment` / `end_append_fragment` (or by using the parser
  as a context manager) and a `last_update` timestamp. `LastCommandSuccess`
  holds the states `OK`, `NOK` and `PENDING`.
- `hoylink.statistics` – `StatisticsParser` decodes real-time run data into
  per-channel values, addressed by `ChannelType`, `ChannelNum` and `FieldId`,
  following a layout of `ByteAssign` entries installed with
  `set_byte_assignment`. Besides raw fields it calculates total and daily
  yield, DC power, efficiency and irradiation (`CalcFunction`), applies
  per-field offsets, can correct a daily yield that resets
  (`yield_day_correction`), and can zero runtime or daily values.
- `hoylink.alarm_log` – `AlarmLogParser` decodes event log entries into
  `AlarmLogEntry` records with messages in English, German or French
  (`AlarmMessageLocale`). Times are shifted by the local `timezone_offset()`.
- `hoylink.dev_info` – `DevInfoParser` reads the firmware build version,
  build time and bootloader version, the hardware part number and version,
  and looks up the model name and rated power. `timegm` converts a UTC
  calendar time to epoch seconds.
- `hoylink.system_config` – `SystemConfigParaParser` reads and writes the
  power limit (`limit_percent`) and tracks the limit command and request
  state.
- `hoylink.power_command` – `PowerCommandParser` tracks the state of power
  commands.
- `hoylink.grid_profile` – `GridProfileParser` reports the profile name and
  version and decodes the payload into `GridProfileSection`s of
  `GridProfileItem` values.
- `hoylink.mqtt_subscribe` – `topic_matches_sub` matches an MQTT topic
  against a subscription with `+` and `#` wildcards, raising `ValueError` for
  malformed input. `SubscribeParser` passes each message to the callbacks
  whose pattern matches.
- `hoylink.inverter` – `InverterAbstract`, the common base of the models:
  serial number and name, polling and command switches, reachability and
  production state, the six parsers, and reassembly of received radio
  fragments (`add_rx_fragment`, `verify_all_fragments`, `FragmentStatus`).
- `hoylink.hm_models`, `hoylink.hms_models`, `hoylink.hmt_models` – the
  models `Hm1Ch`, `Hm2Ch`, `Hm4Ch`, `Hms1Ch`, `Hms1ChV2`, `Hms2Ch`, `Hms4Ch`,
  `Hmt4Ch` and `Hmt6Ch`, each with its type name, statistics layout and an
  `is_valid_serial` check. `HmtInverter` models use the three-phase alarm
  texts.
- `hoylink.timeout` – `TimeoutHelper`, a millisecond timeout with an optional
  injectable clock.

Payload that does not fit a parser's buffer, and radio fragments that are too
short, too long or carry an invalid fragment id, raise `ValueError`.

## Example

```python
from hoylink.hm_models import Hm1Ch
from hoylink.mqtt_subscribe import topic_matches_sub
from hoylink.statistics import ChannelNum, ChannelType, FieldId

print(Hm1Ch.is_valid_serial(0x112100000001))                   # True
print(topic_matches_sub("solar/+/power", "solar/inv1/power"))  # True

inverter = Hm1Ch(radio=None, serial=0x112100000001)
stats = inverter.statistics
stats.append_fragment(0, bytes(30))
print(stats.get_value_string(ChannelType.AC, ChannelNum.CH0, FieldId.PAC))  # 0.0
```

## What it does not do

The package only decodes and models. It does not talk to a radio: the
`radio` an inverter is created with is stored and never used, no requests or
commands are built or sent, and there is no polling loop, MQTT client, web
interface or configuration storage.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```