"""Turning received parameter values into metric lines, and housekeeping time."""

from __future__ import annotations

import logging
import struct
import time
from collections.abc import Callable
from typing import IO, Any

import msgpack

from cshell.params import Param, ParamType

_log = logging.getLogger(__name__)

_UNSIGNED32 = {
    ParamType.UINT8, ParamType.XINT8,
    ParamType.UINT16, ParamType.XINT16,
    ParamType.UINT32, ParamType.XINT32,
}
_UNSIGNED64 = {ParamType.UINT64, ParamType.XINT64}
_SIGNED32 = {ParamType.INT8, ParamType.INT16, ParamType.INT32}


class EpochError(ValueError):
    """A housekeeping timestamp cannot be placed in absolute time."""


def format_metric(param: Param, idx: int, value: Any, time_ms: int) -> str:
    """Render one value as an exposition line."""
    if param.type in (ParamType.FLOAT, ParamType.DOUBLE):
        text = f"{value:e}"
    else:
        text = str(int(value))
    return f'{param.name}{{node="{param.node}", idx="{idx}"}} {text} {time_ms}\n'


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _expect(param_type: ParamType, value: Any) -> Any:
    """Check a decoded value against the parameter type; raise ValueError if it does not fit."""
    if param_type in _UNSIGNED32:
        if _is_int(value) and 0 <= value <= 0xFFFFFFFF:
            return value
    elif param_type in _UNSIGNED64:
        if _is_int(value) and 0 <= value < 1 << 64:
            return value
    elif param_type in _SIGNED32:
        if _is_int(value) and -(1 << 31) <= value < 1 << 31:
            return value
    elif param_type is ParamType.INT64:
        if _is_int(value) and -(1 << 63) <= value < 1 << 63:
            return value
    elif param_type is ParamType.FLOAT:
        if _is_int(value) or isinstance(value, float):
            return struct.unpack("<f", struct.pack("<f", float(value)))[0]
    elif param_type is ParamType.DOUBLE:
        if _is_int(value) or isinstance(value, float):
            return float(value)
    raise ValueError(f"value {value!r} does not fit {param_type.name}")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ParamSniffer:
    """Writes each sniffed parameter value to a log file and to registered sinks."""

    def __init__(self, logfile: IO[str] | None = None) -> None:
        self.logfile = logfile
        self._sinks: list[Callable[[str], None]] = []

    def add_sink(self, sink: Callable[[str], None]) -> None:
        self._sinks.append(sink)

    def _emit(self, line: str) -> None:
        for sink in self._sinks:
            sink(line)
        if self.logfile is not None:
            self.logfile.write(line)
            self.logfile.flush()

    def log(self, param: Param, payload: Any, offset: int = -1, timestamp: int = 0) -> list[str]:
        """Read one encoded value (or array of values) and emit a line per element.

        payload is either the encoded bytes or a msgpack Unpacker positioned at
        the value. Reading stops at the first element that does not fit the type.
        """
        if isinstance(payload, (bytes, bytearray, memoryview)):
            unpacker = msgpack.Unpacker(raw=False)
            unpacker.feed(bytes(payload))
        else:
            unpacker = payload

        try:
            value = next(unpacker)
        except (StopIteration, ValueError, msgpack.UnpackException):
            return []

        offset = max(offset, 0)
        values = value if isinstance(value, (list, tuple)) else [value]
        time_ms = timestamp * 1000 if timestamp > 0 else _now_ms()

        lines: list[str] = []
        if param.type in (ParamType.STRING, ParamType.DATA):
            return lines
        for idx, element in enumerate(values, start=offset):
            try:
                checked = _expect(param.type, element)
            except ValueError:
                _log.debug("stopped reading %s at index %d", param.name, idx)
                break
            line = format_metric(param, idx, checked, time_ms)
            self._emit(line)
            lines.append(line)
        return lines


class HousekeepingClock:
    """Maps satellite-relative housekeeping timestamps onto Unix time."""

    def __init__(self, epoch: int = 0) -> None:
        self.epoch = epoch

    def set_epoch(self, epoch: int) -> None:
        self.epoch = epoch
        _log.info("Setting satellite EPOCH to %s", time.ctime(epoch))

    def absolute(self, timestamp: int) -> int:
        """Return timestamp plus epoch; raise EpochError if either is missing."""
        if timestamp == 0 or self.epoch == 0:
            raise EpochError(
                f"EPOCH or param timestamp is missing ({timestamp} {self.epoch})"
            )
        return timestamp + self.epoch