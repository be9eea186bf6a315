"""Interactive command shell: prompt, command dispatch, init files and entry point."""

from __future__ import annotations

import os
import platform
import shlex
import subprocess
import sys
import time
from collections.abc import Callable, Sequence
from typing import TextIO

from cshell.known_hosts import KnownHosts, hosts_path
from cshell.params import serial_init

LINE_SIZE = 512
NODE_BUF = 20
NODE_NUM_BUF = 7
DEFAULT_INIT_FILE = "init.csh"

_ESC = "\x1b"

USAGE = "usage: csh -i init.csh [command]\n"


def _segment(fore: int, back: int) -> str:
    """Separator into a new coloured breadcrumb segment."""
    return (
        f" {_ESC}[0;38;5;{fore};48;5;{back};22m "
        f"{_ESC}[0;38;5;255;48;5;{back};1m"
    )


def render_prompt(
    hostname: str,
    node: int = 0,
    node_name: str | None = None,
    queue_type: str | None = None,
    queue_name: str = "",
) -> tuple[str, int]:
    """Build the breadcrumb prompt; return its text and its visible width.

    queue_type is "get" or "set" for an active parameter queue, else None.
    """
    back = 33
    parts = [f"{_ESC}[0;38;5;255;48;5;{back};1m ", hostname]
    length = 1 + len(hostname)

    if node != 0:
        parts.append(_segment(back, 240))
        back = 240
        length += 3
        if node_name is None:
            nodebuf = str(node)[: NODE_BUF - 1]
        else:
            suffix = f"@{node}"[: NODE_NUM_BUF - 1]
            nodebuf = (node_name[: NODE_BUF - 1] + suffix)[: NODE_BUF - 1]
        parts.append(nodebuf)
        length += len(nodebuf)

    kind = queue_type.lower() if queue_type else None
    if kind in ("get", "set"):
        new_back, arrow = (34, "\u2193") if kind == "get" else (124, "\u2191")
        parts.append(_segment(back, new_back))
        back = new_back
        length += 3
        parts.append(f"{arrow} {queue_name}")
        length += 2 + len(queue_name)

    parts.append(f" {_ESC}[0m{_ESC}[0;38;5;{back}m {_ESC}[0m")
    length += 3
    return "".join(parts), length


def init_file_path(dirname: str | None, initfile: str) -> str:
    """Path of the init file: inside dirname when one is given."""
    return f"{dirname}/{initfile}" if dirname else initfile


def join_command(words: Sequence[str], limit: int = LINE_SIZE) -> str:
    """Join command-line words into one command, cut to fit a line of limit bytes."""
    return " ".join(words)[: max(limit - 1, 0)]


class Shell:
    """Runs shell command lines against a table of commands."""

    def __init__(
        self,
        hosts: KnownHosts | None = None,
        out: TextIO | None = None,
        home: str | None = None,
        node: int = 0,
    ) -> None:
        self.hosts = KnownHosts() if hosts is None else hosts
        self.out = sys.stdout if out is None else out
        self.home = os.environ.get("HOME", "") if home is None else home
        self.node = node
        self._commands: dict[tuple[str, ...], Callable[[list[str]], None]] = {
            ("ls",): self._ls,
            ("cd",): self._cd,
            ("node", "add"): self._node_add,
            ("node", "list"): self._node_list,
            ("node", "save"): self._node_save,
        }

    def _write(self, text: str) -> None:
        self.out.write(text)

    def execute(self, line: str) -> None:
        """Run one command line; raise ValueError for bad usage, OSError on failure."""
        words = shlex.split(line, comments=True)
        if not words:
            return
        for size in sorted({len(k) for k in self._commands}, reverse=True):
            handler = self._commands.get(tuple(words[:size]))
            if handler is not None:
                handler(words[size:])
                return
        raise ValueError(f"no such command: {words[0]}")

    def run_file(self, path: str | os.PathLike[str]) -> int:
        """Run every command in a file, reporting failures; return how many were run."""
        count = 0
        with open(path, encoding="utf-8") as script:
            for raw in script:
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                count += 1
                try:
                    self.execute(line)
                except (ValueError, OSError) as exc:
                    self._write(f"{line}: {exc}\n")
        return count

    def prompt(self) -> str:
        text, _ = render_prompt(platform.node(), self.node, self.hosts.get_name(self.node))
        return text

    def loop(self) -> None:
        """Read and run commands until end of input or exit."""
        while True:
            try:
                line = input(self.prompt())
            except (EOFError, KeyboardInterrupt):
                self._write("\n")
                return
            if line.strip() in ("exit", "quit"):
                return
            try:
                self.execute(line)
            except (ValueError, OSError) as exc:
                self._write(f"{exc}\n")

    def _ls(self, args: list[str]) -> None:
        cwd = os.getcwd()
        cmd = ["ls"]
        if len(args) == 1:
            target = args[0]
            cmd.append(target)
            header = target if target.startswith("/") else f"{cwd}/{target}"
        else:
            header = cwd
        self._write(f"{header}:\n")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            self._write(f"{exc}\n")
            return
        self._write(result.stdout + result.stderr)

    def _cd(self, args: list[str]) -> None:
        if len(args) != 1:
            raise ValueError("usage: cd <path>")
        os.chdir(args[0])

    def _node_add(self, args: list[str]) -> None:
        node = self.node
        rest: list[str] = []
        words = iter(args)
        for word in words:
            if word in ("-n", "--node"):
                value = next(words, None)
                if value is None:
                    raise ValueError(f"option {word} requires a value")
                node = _parse_int(value)
            elif word.startswith("--node="):
                node = _parse_int(word.split("=", 1)[1])
            elif word.startswith("-n") and len(word) > 2:
                node = _parse_int(word[2:])
            else:
                rest.append(word)
        if not rest:
            raise ValueError("missing parameter name")
        self.hosts.add(node, rest[0])

    def _node_list(self, args: list[str]) -> None:
        for line in self.hosts.commands():
            self._write(line + "\n")

    def _node_save(self, args: list[str]) -> None:
        self.hosts.save(hosts_path(self.home))


def _parse_int(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        raise ValueError(f"invalid number: {text}") from None


def _parse_options(argv: list[str]) -> tuple[str | None, str | None, list[str], int | None]:
    """Return (dirname override, init file, remaining words, exit status if done)."""
    dirname: str | None = None
    initfile: str | None = None
    args = list(argv)
    while args:
        word = args[0]
        if word == "--":
            args.pop(0)
            break
        if not word.startswith("-") or word == "-":
            break
        args.pop(0)
        if word == "-h":
            sys.stdout.write(USAGE + "\n")
            return None, None, [], 0
        if word.startswith("-i"):
            value = word[2:] or (args.pop(0) if args else None)
            if value is None:
                print("Argument -i not recognized")
                return None, None, [], 1
            dirname, initfile = "", value
            continue
        print(f"Argument -{word[1:2]} not recognized")
        return None, None, [], 1
    return dirname, initfile, args, None


def main(argv: Sequence[str] | None = None) -> int:
    """Start the shell: load hosts and init file, then run a command or go interactive."""
    argv = list(sys.argv[1:] if argv is None else argv)
    dirname, initfile, remain, status = _parse_options(argv)
    if status is not None:
        return status

    home = os.environ.get("HOME", "")
    if dirname is None:
        dirname = home
    if initfile is None:
        initfile = DEFAULT_INIT_FILE

    if not remain:
        print(f"{_ESC}[33m\n  ***********************")
        print("  **     CSP   Shell   **")
        print("  ***********************\n")
        print(f"{_ESC}[0m", end="")
    else:
        print(f"{_ESC}[33m\n  CSP shell batch: {_ESC}[0m")

    serial_init()
    shell = Shell(home=home)

    for path in (hosts_path(home), None):
        if path is None:
            path = init_file_path(dirname, initfile)
            print(f"{_ESC}[34m  Init file: {path}{_ESC}[0m")
        try:
            shell.run_file(path)
        except OSError:
            pass

    ret = 0
    if remain:
        command = join_command(remain)
        time.sleep(0.5)
        print()
        print(command)
        try:
            shell.execute(command)
        except (ValueError, OSError) as exc:
            print(exc)
            ret = 1
    else:
        print("\n")
        shell.loop()

    print()
    return ret