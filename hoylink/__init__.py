"""Payload parsers, inverter models and MQTT topic matching for microinverters."""

__version__ = "0.1.0"