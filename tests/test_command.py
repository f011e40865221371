import errno
import logging

import pytest

from cfgdlib import command
from cfgdlib.command import EXEC_FAILED, MAX_COMMAND_LINE, CommandRunner, render_argv


class TestRenderArgv:
    def test_placeholders_fill_in_order(self):
        argv = render_argv("ip neigh replace {} lladdr {} nud permanent dev {}",
                           "10.0.0.2", "52:54:00:aa:bb:cc", "eth0")
        assert argv == ["ip", "neigh", "replace", "10.0.0.2", "lladdr",
                        "52:54:00:aa:bb:cc", "nud", "permanent", "dev", "eth0"]

    def test_value_with_shell_syntax_stays_one_argument(self):
        argv = render_argv("hostnamectl set-hostname {}", "x; rm -rf / #")
        assert argv == ["hostnamectl", "set-hostname", "x; rm -rf / #"]

    def test_braces_in_values_are_not_reinterpreted(self):
        assert render_argv("echo {}", "{}{0}") == ["echo", "{}{0}"]

    def test_argument_count_mismatch(self):
        with pytest.raises(ValueError):
            render_argv("timedatectl set-ntp {}", 1, 2)


class TestCommandRunner:
    def test_returns_exit_status_without_raising(self, commands):
        commands.fail("systemctl stop foo", rc=5)
        assert CommandRunner().run(["systemctl", "stop", "foo"]) == 5

    def test_logs_before_and_after(self, commands, caplog):
        caplog.set_level(logging.INFO, logger="cfgdlib.command")
        CommandRunner().run(["true"])
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "cmd=[true]"
        assert messages[1].startswith("cmd=[true], rc=0, error=")

    def test_missing_program(self, monkeypatch, caplog):
        def boom(argv, **kwargs):
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", argv[0])

        monkeypatch.setattr(command.subprocess, "run", boom)
        caplog.set_level(logging.INFO, logger="cfgdlib.command")

        assert CommandRunner().run(["no-such-cmd"]) == EXEC_FAILED
        assert "No such file or directory" in caplog.records[-1].getMessage()

    def test_unexecutable_argument_is_logged_not_raised(self, commands, caplog):
        caplog.set_level(logging.INFO, logger="cfgdlib.command")

        assert CommandRunner().run(["echo", "a\x00b"]) == EXEC_FAILED
        assert commands.calls == []
        assert "embedded null byte" in caplog.records[-1].getMessage()

    def test_runf_passes_argv(self, commands):
        CommandRunner().runf("timedatectl set-ntp {}", 1)
        assert commands.calls == [["timedatectl", "set-ntp", "1"]]

    def test_runf_truncates_long_lines(self, commands, caplog):
        caplog.set_level(logging.WARNING, logger="cfgdlib.command")
        CommandRunner().runf("echo {} tail", "x" * 2000)

        argv = commands.calls[0]
        assert len(" ".join(argv)) == MAX_COMMAND_LINE
        assert argv[0] == "echo"
        assert len(argv) == 2
        assert any("truncated" in r.getMessage() for r in caplog.records)
