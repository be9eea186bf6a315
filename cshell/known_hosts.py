"""Fixed-size table of node addresses and host names."""

from __future__ import annotations

import os
from dataclasses import dataclass

MAX_HOSTS = 100
MAX_NAMELEN = 50


@dataclass
class _Slot:
    node: int = 0
    name: str = ""


class KnownHosts:
    """Naive table mapping node addresses to host names; node 0 marks a free slot."""

    def __init__(self, capacity: int = MAX_HOSTS) -> None:
        self._slots = [_Slot() for _ in range(capacity)]

    def remove(self, node: int) -> None:
        for slot in self._slots:
            if slot.node == node:
                slot.node = 0

    def add(self, node: int, name: str) -> None:
        """Store a name for a node, replacing an earlier entry; ignored when full."""
        self.remove(node)
        free = next((slot for slot in self._slots if slot.node == 0), None)
        if free is not None:
            free.node = node
            free.name = name[:MAX_NAMELEN]

    def get_name(self, node: int) -> str | None:
        return next((slot.name for slot in self._slots if slot.node == node), None)

    def get_node(self, name: str | None) -> int | None:
        """Return the node stored under a name, or None."""
        if name is None:
            return None
        key = name[:MAX_NAMELEN]
        found = next((slot.node for slot in self._slots if slot.name == key), 0)
        return found or None

    def commands(self) -> list[str]:
        """Shell commands that recreate the table."""
        return [f"node add -n {slot.node} {slot.name}" for slot in self._slots if slot.node]

    def save(self, path: str | os.PathLike[str]) -> list[str]:
        """Write the table as commands to path and echo it; print only if path fails."""
        lines = self.commands()
        try:
            with open(path, "w", encoding="utf-8") as out:
                out.writelines(line + "\n" for line in lines)
        except OSError:
            for line in lines:
                print(line)
        for line in lines:
            print(line)
        return lines


def hosts_path(home: str | None) -> str:
    """Location of the persisted hosts file."""
    return os.path.join(home, "csh_hosts") if home else "csh_hosts"