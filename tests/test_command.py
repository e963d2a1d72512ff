"""Tests for the external command runner."""

import logging
import subprocess

import pytest

from hyprstrap.lib import command
from hyprstrap.lib.command import CommandError, command_exists, run_cmd, run_with_retries
from hyprstrap.lib.chroot import chroot_argv, chroot_cmd, user_exists


def test_run_cmd_captures_output(commands):
    commands.respond("echo", stdout="hello\n")
    r = run_cmd(["echo", "hello"])
    assert r.returncode == 0
    assert r.stdout == "hello\n"
    assert commands.calls == [["echo", "hello"]]
    assert commands.kwargs[0]["stdout"] is subprocess.PIPE


def test_run_cmd_logs_every_command(commands, caplog):
    with caplog.at_level(logging.INFO, logger="hyprstrap.lib.command"):
        run_cmd(["mount", "/dev/sda2", "/mnt"])
    assert "CMD mount /dev/sda2 /mnt" in caplog.text


def test_dry_run_does_not_execute(commands):
    r = run_cmd(["mkfs.btrfs", "-f", "/dev/sda3"], dry_run=True)
    assert r.returncode == 0
    assert commands.calls == []


def test_failure_raises_with_details(commands):
    commands.respond("pacstrap", returncode=1, stderr="error: target not found: bogus\n")
    with pytest.raises(CommandError) as exc:
        run_cmd(["pacstrap", "-K", "/mnt", "bogus"])
    assert exc.value.returncode == 1
    assert exc.value.argv == ["pacstrap", "-K", "/mnt", "bogus"]
    assert "target not found" in str(exc.value)


def test_failure_ignored_without_check(commands):
    commands.respond("ping", returncode=2)
    assert run_cmd(["ping", "-c", "3", "archlinux.org"], check=False).returncode == 2


def test_missing_program_is_command_error(monkeypatch):
    def _missing(argv, **_):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(command.subprocess, "run", _missing)
    with pytest.raises(CommandError) as exc:
        run_cmd(["arch-chroot", "/mnt", "true"])
    assert exc.value.returncode == 127


def test_input_text_is_fed_to_stdin(commands):
    run_cmd(["fdisk", "/dev/sda"], input_text="g\nw\n")
    assert commands.kwargs[0]["input"] == "g\nw\n"


def test_interactive_keeps_the_terminal(commands):
    run_cmd(["passwd"], interactive=True)
    assert "stdout" not in commands.kwargs[0]
    assert "input" not in commands.kwargs[0]


class TestRetries:
    def test_succeeds_after_failures(self, commands):
        commands.respond("passwd", returncode=10, times=2)
        r = run_with_retries(["passwd"], attempts=3, interactive=True)
        assert r.returncode == 0
        assert len(commands.calls) == 3

    def test_gives_up(self, commands):
        commands.respond("passwd", returncode=10)
        with pytest.raises(CommandError):
            run_with_retries(["passwd"], attempts=2)
        assert len(commands.calls) == 2

    def test_needs_one_attempt(self, commands):
        with pytest.raises(ValueError):
            run_with_retries(["passwd"], attempts=0)


def test_command_exists(monkeypatch):
    monkeypatch.setattr(command.shutil, "which", lambda name: "/usr/bin/yay" if name == "yay" else None)
    assert command_exists("yay")
    assert not command_exists("paru")


class TestChroot:
    def test_prefixes_arch_chroot(self):
        assert chroot_argv("/mnt", ["locale-gen"]) == ["arch-chroot", "/mnt", "locale-gen"]

    def test_live_root_runs_directly(self):
        assert chroot_argv("/", ["locale-gen"]) == ["locale-gen"]

    def test_chroot_cmd(self, commands):
        chroot_cmd("/mnt", ["hwclock", "--systohc"])
        assert commands.calls == [["arch-chroot", "/mnt", "hwclock", "--systohc"]]

    def test_user_exists(self, commands):
        commands.respond("arch-chroot", "/mnt", "id", returncode=1)
        assert not user_exists("/mnt", "CyberQuasar")
        commands.responses.clear()
        assert user_exists("/mnt", "CyberQuasar")

    def test_user_exists_dry_run(self, commands):
        assert not user_exists("/mnt", "CyberQuasar", dry_run=True)
        assert commands.calls == []
