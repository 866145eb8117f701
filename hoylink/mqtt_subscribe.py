"""Dispatch of MQTT messages to callbacks by subscription pattern."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

MessageCallback = Callable[[Any, str, bytes, int, int], None]

_WILDCARDS = ("+", "#")


def topic_matches_sub(sub: str, topic: str) -> bool:
    """Whether ``topic`` matches the subscription pattern ``sub``.

    Raises ValueError for an empty or malformed subscription and for a
    topic that contains wildcards.
    """
    if not sub or not topic:
        raise ValueError("subscription and topic must not be empty")

    if (sub[0] == "$") != (topic[0] == "$"):
        return False

    def s(i: int) -> str:
        return sub[i] if i < len(sub) else ""

    def t(i: int) -> str:
        return topic[i] if i < len(topic) else ""

    def invalid() -> ValueError:
        return ValueError(f"invalid subscription {sub!r} or topic {topic!r}")

    si = ti = 0
    while s(si):
        tc = t(ti)
        if tc in _WILDCARDS:
            raise invalid()
        if s(si) != tc or not tc:
            if s(si) == "+":
                if si > 0 and sub[si - 1] != "/":
                    raise invalid()
                if s(si + 1) not in ("", "/"):
                    raise invalid()
                si += 1
                while t(ti) not in ("", "/"):
                    if t(ti) in _WILDCARDS:
                        raise invalid()
                    ti += 1
                if not t(ti) and not s(si):
                    return True
            elif s(si) == "#":
                if si > 0 and sub[si - 1] != "/":
                    raise invalid()
                if s(si + 1):
                    raise invalid()
                while t(ti):
                    if t(ti) in _WILDCARDS:
                        raise invalid()
                    ti += 1
                return True
            else:
                # e.g. foo/bar matching foo/+/#
                if (not tc and si > 0 and sub[si - 1] == "+"
                        and s(si) == "/" and s(si + 1) == "#"):
                    return True
                while s(si):
                    if s(si) == "#" and s(si + 1):
                        raise invalid()
                    si += 1
                return False
        else:
            if not t(ti + 1):
                # e.g. foo matching foo/#
                if s(si + 1) == "/" and s(si + 2) == "#" and not s(si + 3):
                    return True
            si += 1
            ti += 1
            if not s(si) and not t(ti):
                return True
            if not t(ti) and s(si) == "+" and not s(si + 1):
                if si > 0 and sub[si - 1] != "/":
                    raise invalid()
                return True

    while t(ti):
        if t(ti) in _WILDCARDS:
            raise invalid()
        ti += 1
    return False


@dataclass
class CallbackFilter:
    """A subscription pattern with its QoS and callback."""

    topic: str
    qos: int
    callback: MessageCallback


class SubscribeParser:
    """Keeps registered callbacks and hands each message to those that match."""

    def __init__(self) -> None:
        self._callbacks: list[CallbackFilter] = []

    def register_callback(self, topic: str, qos: int, callback: MessageCallback) -> None:
        """Call ``callback`` for messages whose topic matches ``topic``."""
        self._callbacks.append(CallbackFilter(topic, qos, callback))

    def unregister_callback(self, topic: str) -> None:
        """Remove every callback registered for exactly ``topic``."""
        self._callbacks = [cb for cb in self._callbacks if cb.topic != topic]

    def handle_message(self, properties: Any, topic: str, payload: bytes,
                       index: int, total: int) -> None:
        """Pass a message to each callback whose pattern matches its topic.

        Patterns that cannot be matched against the topic are skipped.
        """
        for cb in list(self._callbacks):
            try:
                matched = topic_matches_sub(cb.topic, topic)
            except ValueError:
                continue
            if matched:
                cb.callback(properties, topic, payload, index, total)

    def callbacks(self) -> list[CallbackFilter]:
        """A copy of the registered callbacks, in registration order."""
        return list(self._callbacks)