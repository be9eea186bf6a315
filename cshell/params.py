"""Parameter identifiers, parameter descriptions and the default parameter table."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum, IntFlag, auto
from typing import Any

PARAMID_SERIAL0 = 31
PARAMID_CSP_RTABLE = 12

PARAMID_CSP_DBG_BUFFER_OUT = 51
PARAMID_CSP_DBG_CONN_OUT = 52
PARAMID_CSP_DBG_CONN_OVF = 53
PARAMID_CSP_DBG_CONN_NOROUTE = 54
PARAMID_CSP_DBG_INVAL_REPLY = 55
PARAMID_CSP_DBG_ERRNO = 56
PARAMID_CSP_DBG_CAN_ERRNO = 57
PARAMID_CSP_DBG_RDP_PRINT = 58
PARAMID_CSP_DBG_PACKET_PRINT = 59

PARAMID_COLLECTOR_CNFSTR = 200
PARAMID_COLLECTOR_RUN = 201
PARAMID_COLLECTOR_VERBOSE = 202

PARAMID_CRYPTO_KEY_PUBLIC = 150
PARAMID_CRYPTO_KEY_SECRET = 151
PARAMID_CRYPTO_KEY_REMOTE = 152
PARAMID_CRYPTO_NONCE_RX = 153
PARAMID_CRYPTO_NONCE_TX = 154
PARAMID_CRYPTO_FAIL_AUTH_COUNT = 156
PARAMID_CRYPTO_FAIL_NONCE_COUNT = 157

PARAMID_CORTEX_DEBUG = 500
PARAMID_CORTEX_FWD = 501
PARAMID_CORTEX_PARSER_EN = 502
PARAMID_CORTEX_IP_UL_S = 503
PARAMID_CORTEX_IP_DL_S = 504
PARAMID_CORTEX_IP_DL_X = 505
PARAMID_CORTEX_PORT_UL_S = 506
PARAMID_CORTEX_PORT_DL_S = 507
PARAMID_CORTEX_PORT_DL_X = 508


class ParamType(Enum):
    """Storage type of a parameter."""

    UINT8 = auto()
    UINT16 = auto()
    UINT32 = auto()
    UINT64 = auto()
    INT8 = auto()
    INT16 = auto()
    INT32 = auto()
    INT64 = auto()
    XINT8 = auto()
    XINT16 = auto()
    XINT32 = auto()
    XINT64 = auto()
    FLOAT = auto()
    DOUBLE = auto()
    STRING = auto()
    DATA = auto()


class ParamMode(IntFlag):
    """Access and classification flags of a parameter."""

    NONE = 0
    READONLY = auto()
    CONF = auto()
    SYSCONF = auto()
    HWREG = auto()
    ERRCNT = auto()
    DEBUG = auto()


@dataclass
class Param:
    """A named, typed value addressed by node and identifier."""

    id: int
    name: str
    type: ParamType
    array_size: int = 0
    array_step: int = 0
    mode: ParamMode = ParamMode.NONE
    unit: str = ""
    docstr: str = ""
    node: int = 0
    vmem: str | None = None
    vaddr: int | None = None
    callback: Callable[[Param, int], None] | None = field(default=None, repr=False)
    value: Any = None
    timestamp: int = 0

    def __post_init__(self) -> None:
        if self.value is None:
            if self.type is ParamType.DATA:
                self.value = bytes(max(self.array_size, 0))
            elif self.type is ParamType.STRING:
                self.value = ""
            elif self.type in (ParamType.FLOAT, ParamType.DOUBLE):
                self.value = 0.0
            else:
                self.value = 0


class ParamRegistry:
    """Parameters indexed by (node, id)."""

    def __init__(self) -> None:
        self._params: dict[tuple[int, int], Param] = {}

    def add(self, param: Param) -> Param:
        key = (param.node, param.id)
        if key in self._params:
            raise ValueError(f"parameter {param.node}:{param.id} already registered")
        self._params[key] = param
        return param

    def find_id(self, node: int, param_id: int) -> Param | None:
        return self._params.get((node, param_id))

    def find_name(self, node: int, name: str) -> Param | None:
        return next(
            (p for p in self._params.values() if p.node == node and p.name == name),
            None,
        )

    def __iter__(self) -> Iterator[Param]:
        return iter(list(self._params.values()))

    def __len__(self) -> int:
        return len(self._params)


_CSP_DEBUG = [
    (PARAMID_CSP_DBG_BUFFER_OUT, "csp_buf_out", True, "Number of buffer overruns"),
    (PARAMID_CSP_DBG_CONN_OUT, "csp_conn_out", True, "Number of connection overruns"),
    (PARAMID_CSP_DBG_CONN_OVF, "csp_conn_ovf", True, "Number of rx-queue overflows"),
    (PARAMID_CSP_DBG_CONN_NOROUTE, "csp_conn_noroute", True,
     "Numfer of packets dropped due to no-route"),
    (PARAMID_CSP_DBG_INVAL_REPLY, "csp_inval_reply", True,
     "Number of invalid replies from csp_transaction"),
    (PARAMID_CSP_DBG_ERRNO, "csp_errno", False, "Global CSP errno, enum in csp_debug.h"),
    (PARAMID_CSP_DBG_CAN_ERRNO, "csp_can_errno", False,
     "CAN driver specific errno, enum in csp_debug.h"),
    (PARAMID_CSP_DBG_RDP_PRINT, "csp_print_rdp", False, "Turn on csp_print of rdp information"),
    (PARAMID_CSP_DBG_PACKET_PRINT, "csp_print_packet", False,
     "Turn on csp_print of packet information"),
]


def default_registry() -> ParamRegistry:
    """Build a registry holding the shell's own local parameters."""
    registry = ParamRegistry()

    for param_id, name, errcnt, doc in _CSP_DEBUG:
        mode = ParamMode.DEBUG | (ParamMode.ERRCNT if errcnt else ParamMode.NONE)
        registry.add(Param(param_id, name, ParamType.UINT8, 0, 0, mode, docstr=doc))

    registry.add(Param(PARAMID_CSP_RTABLE, "csp_rtable", ParamType.STRING, 64, 0,
                       ParamMode.SYSCONF, vmem="csp", vaddr=0))

    registry.add(Param(PARAMID_SERIAL0, "serial0", ParamType.INT32, -1, 0,
                       ParamMode.HWREG, value=_serial.value))

    registry.add(Param(PARAMID_CRYPTO_NONCE_RX, "crypto_nonce_rx", ParamType.UINT64, 1, 8,
                       ParamMode.READONLY))
    registry.add(Param(PARAMID_CRYPTO_NONCE_TX, "crypto_nonce_tx", ParamType.UINT64, 1, 8,
                       ParamMode.READONLY))
    registry.add(Param(PARAMID_CRYPTO_FAIL_AUTH_COUNT, "crypto_fail_auth_count",
                       ParamType.UINT16, 1, 2, ParamMode.READONLY))
    registry.add(Param(PARAMID_CRYPTO_FAIL_NONCE_COUNT, "crypto_fail_nonce_count",
                       ParamType.UINT16, 1, 2, ParamMode.READONLY))

    registry.add(Param(PARAMID_CRYPTO_KEY_PUBLIC, "crypto_key_public", ParamType.DATA, 32, 1,
                       ParamMode.READONLY, vmem="crypto", vaddr=100))
    registry.add(Param(PARAMID_CRYPTO_KEY_SECRET, "crypto_key_secret", ParamType.DATA, 32, 1,
                       ParamMode.READONLY, vmem="crypto", vaddr=200))
    registry.add(Param(PARAMID_CRYPTO_KEY_REMOTE, "crypto_key_remote", ParamType.DATA, 32, 1,
                       ParamMode.CONF, vmem="crypto", vaddr=300))
    return registry


class _Serial:
    value = 0


_serial = _Serial()


def serial_init() -> int:
    """Pick a new pseudo-random serial number and return it."""
    _serial.value = random.getrandbits(31)
    return _serial.value


def serial_get() -> int:
    """Return the current serial number."""
    return _serial.value