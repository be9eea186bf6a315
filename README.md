# cshell

A command shell and toolkit for working with nodes on a CubeSat Space
Protocol (CSP) network. It bundles the pieces a ground-station operator
needs around the shell itself:

- `cshell.params` – parameter definitions (`Param`, `ParamType`,
  `ParamMode`) and a `ParamRegistry` with lookup by node and id or name.
- `cshell.base16` – hex encoding and decoding with `encode` / `decode`,
  raising `Base16Error` on malformed input.
- `cshell.known_hosts` – a small `KnownHosts` table mapping node
  addresses to host names, which can be saved as a replayable script.
- `cshell.locks` – `CommandLock` and `LockPool` for timed command locks.
- `cshell.crypto` – `TunnelCrypto`, authenticated encryption of tunnel
  frames with a monotonically increasing nonce; replayed or forged frames
  raise `ReplayError` or `AuthenticationError`.
- `cshell.sniffer` – `ParamSniffer` turns parameter telemetry into
  Prometheus-style metric lines; `HousekeepingClock` converts
  housekeeping timestamps to absolute time.
- `cshell.prometheus` – `MetricsBuffer` and a `PrometheusExporter` that
  serves collected lines on `GET /metrics`.
- `cshell.resbuf` – `extract_ring` unpacks a node's result ring buffer.
- `cshell.apm` – `ApmRegistry` finds add-on modules (`libcsh_*.so`) on a
  search path.

## Installation

```
pip install .
```

## Running the shell

```
csh
```

starts an interactive session. On start-up the shell replays
`~/csh_hosts` (written by `node save`) and then the init file
`~/init.csh`. Use `-i` to name a different init file:

```
csh -i myinit.csh
```

Any words after the options are run as a single command, after which the
shell exits with that command's result:

```
csh -i myinit.csh node list
```

`csh -h` prints usage.

## Library use

```python
from cshell.base16 import encode, decode
from cshell.known_hosts import KnownHosts

assert decode(encode(b"\x01\xff")) == b"\x01\xff"

hosts = KnownHosts()
hosts.add(12, "obc")
assert hosts.get_node("obc") == 12
```

## Tests

```
pip install .[test]
pytest
```