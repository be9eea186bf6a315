import io
import os
from unittest.mock import patch

import pytest

from cshell.known_hosts import KnownHosts
from cshell.shell import Shell, init_file_path, join_command, main, render_prompt


def test_prompt_plain_starts_with_host_segment():
    text, _ = render_prompt("sat")
    assert text.startswith("\x1b[0;38;5;255;48;5;33;1m sat")
    assert text.endswith("\x1b[0m")


def test_prompt_width_follows_hostname():
    _, short = render_prompt("ab")
    _, long = render_prompt("abcdef")
    assert long - short == 4


def test_prompt_node_number_without_name():
    text, width = render_prompt("host", node=12)
    _, plain = render_prompt("host")
    assert "12" in text
    assert "48;5;240" in text
    assert width == plain + 3 + len("12")


def test_prompt_node_with_name():
    text, _ = render_prompt("host", node=12, node_name="obc")
    assert "obc@12" in text


def test_prompt_long_name_is_cut():
    name = "x" * 30
    text, _ = render_prompt("host", node=3, node_name=name)
    assert name not in text
    assert "x" * 19 in text


def test_prompt_queue_arrows():
    get_text, _ = render_prompt("host", queue_type="get", queue_name="q1")
    set_text, _ = render_prompt("host", queue_type="set", queue_name="q1")
    assert "\u2193 q1" in get_text and "48;5;34" in get_text
    assert "\u2191 q1" in set_text and "48;5;124" in set_text


def test_init_file_path():
    assert init_file_path("/home/u", "init.csh") == "/home/u/init.csh"
    assert init_file_path("", "x.csh") == "x.csh"


def test_join_command():
    assert join_command(["ping", "5"]) == "ping 5"
    assert len(join_command(["a" * 20, "b" * 20], 10)) < 10


def test_cd_changes_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "inside_marker.txt").write_text("x")
    out = io.StringIO()
    shell = Shell(out=out)
    shell.execute("cd sub")
    assert os.path.samefile(os.getcwd(), sub)
    shell.execute("ls")
    assert "inside_marker.txt" in out.getvalue()


def test_cd_usage_and_failure(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    shell = Shell(out=io.StringIO())
    with pytest.raises(ValueError):
        shell.execute("cd")
    with pytest.raises(OSError):
        shell.execute("cd missing_dir")


def test_unknown_command():
    with pytest.raises(ValueError):
        Shell(out=io.StringIO()).execute("frobnicate")


def test_ls_lists_directory(tmp_path):
    (tmp_path / "marker.txt").write_text("x")
    out = io.StringIO()
    Shell(out=out).execute(f"ls {tmp_path}")
    text = out.getvalue()
    assert text.startswith(f"{tmp_path}:")
    assert "marker.txt" in text


def test_node_add_and_list():
    out = io.StringIO()
    shell = Shell(hosts=KnownHosts(), out=out)
    shell.execute("node add -n 5 obc")
    shell.execute("node list")
    assert shell.hosts.get_name(5) == "obc"
    assert "node add -n 5 obc" in out.getvalue()


def test_node_add_missing_name():
    with pytest.raises(ValueError):
        Shell(out=io.StringIO()).execute("node add -n 5")


def test_node_save_round_trip(tmp_path):
    shell = Shell(out=io.StringIO(), home=str(tmp_path))
    shell.execute("node add -n 7 eps")
    shell.execute("node save")
    other = Shell(out=io.StringIO())
    other.run_file(tmp_path / "csh_hosts")
    assert other.hosts.get_node("eps") == 7


def test_run_file_skips_comments_and_continues(tmp_path):
    script = tmp_path / "init.csh"
    script.write_text("# comment\n\nnode add -n 2 a\nbogus\nnode add -n 3 b\n")
    out = io.StringIO()
    shell = Shell(out=out)
    assert shell.run_file(script) == 3
    assert shell.hosts.get_name(2) == "a"
    assert shell.hosts.get_name(3) == "b"
    assert "bogus" in out.getvalue()


def test_run_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        Shell(out=io.StringIO()).run_file(tmp_path / "none")


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert "usage: csh -i init.csh [command]" in capsys.readouterr().out


def test_main_bad_option(capsys):
    assert main(["-x"]) == 1
    assert "not recognized" in capsys.readouterr().out


def test_main_batch_runs_init_then_command(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    init = tmp_path / "my_init.csh"
    init.write_text("node add -n 9 gnd\n")
    with patch("cshell.shell.time.sleep"):
        assert main(["-i", str(init), "node", "list"]) == 0
    assert "node add -n 9 gnd" in capsys.readouterr().out


def test_main_batch_failing_command(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    with patch("cshell.shell.time.sleep"):
        assert main(["-i", str(tmp_path / "absent.csh"), "cd"]) == 1