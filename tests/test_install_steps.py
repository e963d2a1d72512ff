"""Tests for the live ISO and chroot steps of the install phase."""

import builtins
import json

import pytest

from hyprstrap.lib.command import CommandError
from hyprstrap.lib.pkg import PACMAN_INSTALL
from hyprstrap.steps import (
    BootloaderStep,
    DesktopPackagesStep,
    FinalizeStep,
    PacmanTuningStep,
    PacstrapStep,
    PartitionFilesystemStep,
    PreflightStep,
    SessionServicesStep,
    SystemIdentityStep,
    UsersStep,
    WriteFstabStep,
    ZramStep,
)
from hyprstrap.steps import step_10_preflight

GENFSTAB = "UUID=1111\t/\tbtrfs\trw,relatime\t0 0\nUUID=AB-12\t/boot/efi\tvfat\trw\t0 2\n"


class TestPreflight:
    @pytest.fixture
    def live_iso(self, monkeypatch):
        monkeypatch.setattr(step_10_preflight, "is_root", lambda: True)
        monkeypatch.setattr(step_10_preflight, "is_arch_iso", lambda: True)
        monkeypatch.setattr(step_10_preflight, "detect_firmware", lambda: "uefi")

    def test_passes(self, commands, make_state, live_iso):
        state = PreflightStep().run(make_state())
        assert state["hardware"]["firmware"] == "uefi"
        assert commands.calls == [["ping", "-c", "3", "-W", "2", "archlinux.org"]]

    def test_falls_back_to_ip(self, commands, make_state, live_iso):
        commands.respond("ping", "-c", "3", "-W", "2", "archlinux.org", returncode=2)
        PreflightStep().run(make_state())
        assert commands.calls[-1][-1] == "8.8.8.8"

    def test_offline(self, commands, make_state, live_iso):
        commands.respond("ping", returncode=1)
        with pytest.raises(RuntimeError, match="internet"):
            PreflightStep().run(make_state())

    def test_requires_root(self, commands, make_state, live_iso, monkeypatch):
        monkeypatch.setattr(step_10_preflight, "is_root", lambda: False)
        with pytest.raises(RuntimeError, match="root"):
            PreflightStep().run(make_state())

    def test_dry_run_only_warns(self, commands, make_state, live_iso, monkeypatch):
        monkeypatch.setattr(step_10_preflight, "is_root", lambda: False)
        monkeypatch.setattr(step_10_preflight, "is_arch_iso", lambda: False)
        state = PreflightStep().run(make_state(dry_run=True))
        assert [w["check"] for w in state["execution"]["warnings"]] == ["root", "live_iso"]
        assert commands.calls == []

    def test_bios_needs_confirmation(self, commands, make_state, live_iso, monkeypatch):
        monkeypatch.setattr(step_10_preflight, "detect_firmware", lambda: "bios")
        monkeypatch.setattr(builtins, "input", lambda _prompt: "n")
        with pytest.raises(RuntimeError, match="cancelled"):
            PreflightStep().run(make_state(assume_yes=False))


class TestPartition:
    def test_partitions_and_records_mounts(self, commands, make_state, tmp_path):
        state = make_state(target_disk="/dev/nvme0n1")
        state = PartitionFilesystemStep().run(state)

        assert state["execution"]["mounts"] == {
            "target_root": str(tmp_path),
            "esp_part": "/dev/nvme0n1p1",
            "swap_part": "/dev/nvme0n1p2",
            "root_part": "/dev/nvme0n1p3",
        }
        assert commands.calls[0] == ["lsblk", "/dev/nvme0n1"]
        assert ["mount", "/dev/nvme0n1p3", str(tmp_path)] in commands.calls

    def test_missing_disk(self, commands, make_state):
        commands.respond("lsblk", returncode=32)
        with pytest.raises(RuntimeError, match="not found"):
            PartitionFilesystemStep().run(make_state(target_disk="/dev/sdz"))
        assert "fdisk" not in commands.programs()

    def test_declined(self, commands, make_state, monkeypatch):
        monkeypatch.setattr(builtins, "input", lambda _prompt: "")
        with pytest.raises(RuntimeError, match="cancelled"):
            PartitionFilesystemStep().run(make_state(assume_yes=False))
        assert "fdisk" not in commands.programs()


class TestPacstrap:
    def test_installs_base(self, commands, make_state, tmp_path):
        state = PacstrapStep().run(make_state())
        assert commands.calls[0][:3] == ["pacstrap", "-K", str(tmp_path)]
        assert "linux-firmware" in commands.calls[0]
        assert state["execution"]["decisions"]["base_packages"][0] == "base"

    def test_refreshes_keyring_first(self, commands, make_state):
        PacstrapStep().run(make_state(profile="hyprland-noswap"))
        assert commands.programs() == ["pacman", "pacstrap"]
        assert commands.calls[0] == ["pacman", "-Sy", "--noconfirm", "archlinux-keyring"]

    def test_requires_mounts(self, commands, make_state):
        state = make_state()
        state["execution"]["mounts"] = {}
        with pytest.raises(RuntimeError):
            PacstrapStep().run(state)


def test_write_fstab(commands, make_state, tmp_path):
    commands.respond("genfstab", stdout=GENFSTAB)
    state = WriteFstabStep().run(make_state())
    assert (tmp_path / "etc" / "fstab").read_text() == GENFSTAB
    assert state["execution"]["decisions"]["fstab_mountpoints"] == ["/", "/boot/efi"]


def test_system_identity(commands, make_state, tmp_path):
    (tmp_path / "etc").mkdir()
    (tmp_path / "etc" / "locale.gen").write_text("#en_US.UTF-8 UTF-8\n")

    SystemIdentityStep().run(make_state(hostname="Vendetta", timezone="Asia/Jakarta"))

    root = str(tmp_path)
    assert commands.calls == [
        ["arch-chroot", root, "ln", "-sf", "/usr/share/zoneinfo/Asia/Jakarta", "/etc/localtime"],
        ["arch-chroot", root, "hwclock", "--systohc"],
        ["arch-chroot", root, "locale-gen"],
    ]
    etc = tmp_path / "etc"
    assert (etc / "locale.gen").read_text() == "en_US.UTF-8 UTF-8\n"
    assert (etc / "locale.conf").read_text() == "LANG=en_US.UTF-8\n"
    assert (etc / "vconsole.conf").read_text() == "KEYMAP=us\n"
    assert (etc / "hostname").read_text() == "Vendetta\n"
    assert "Vendetta.localdomain" in (etc / "hosts").read_text()


def test_system_identity_inside_chroot(commands, make_state, tmp_path):
    state = make_state()
    state["execution"]["mounts"]["target_root"] = "/"
    state["config"]["dry_run"] = True
    SystemIdentityStep().run(state)
    assert commands.calls == []


class TestUsers:
    def test_creates_user(self, commands, make_state, tmp_path):
        root = str(tmp_path)
        commands.respond("arch-chroot", root, "id", returncode=1)
        state = UsersStep().run(make_state(username="CyberQuasar"))

        assert commands.calls == [
            ["arch-chroot", root, "passwd"],
            ["arch-chroot", root, "id", "-u", "CyberQuasar"],
            ["arch-chroot", root, "useradd", "-mG", "wheel", "-s", "/bin/bash", "CyberQuasar"],
            ["arch-chroot", root, "passwd", "CyberQuasar"],
        ]
        assert "%wheel ALL=(ALL:ALL) ALL" in (tmp_path / "etc" / "sudoers").read_text()
        assert state["execution"]["decisions"]["user"]["groups"] == ["wheel"]

    def test_existing_user_is_kept(self, commands, make_state):
        UsersStep().run(make_state())
        assert not any("useradd" in c for c in commands.calls)

    def test_password_retries_are_bounded(self, commands, make_state, tmp_path):
        commands.respond("arch-chroot", str(tmp_path), "passwd", returncode=10)
        with pytest.raises(CommandError):
            UsersStep().run(make_state(password_attempts=2))
        assert len(commands.calls) == 2

    def test_passwd_gets_the_terminal(self, commands, make_state):
        UsersStep().run(make_state())
        assert "stdout" not in commands.kwargs[0]


def test_pacman_tuning(commands, make_state, tmp_path):
    (tmp_path / "etc").mkdir()
    (tmp_path / "etc" / "pacman.conf").write_text("[options]\n#ParallelDownloads = 5\n")
    PacmanTuningStep().run(make_state(profile="hyprland-dotfiles"))
    assert (tmp_path / "etc" / "pacman.conf").read_text() == (
        "[options]\nDisableDownloadTimeout\nParallelDownloads = 5\n"
    )


def test_bootloader(commands, make_state, tmp_path):
    (tmp_path / "etc" / "default").mkdir(parents=True)
    (tmp_path / "etc" / "default" / "grub").write_text('GRUB_TIMEOUT=5\nGRUB_CMDLINE_LINUX_DEFAULT="loglevel=3"\n')

    BootloaderStep().run(make_state(profile="hyprland-dotfiles"))

    root = str(tmp_path)
    assert commands.calls == [
        ["arch-chroot", root, "grub-install", "--target=x86_64-efi", "--efi-directory=/boot/efi", "--bootloader-id=Arch"],
        ["arch-chroot", root, "grub-mkconfig", "-o", "/boot/grub/grub.cfg"],
    ]
    assert (tmp_path / "etc" / "default" / "grub").read_text() == (
        'GRUB_TIMEOUT=0\nGRUB_CMDLINE_LINUX_DEFAULT="quiet splash"\n'
    )


class TestZram:
    def test_enabled(self, commands, make_state, tmp_path):
        ZramStep().run(make_state())
        root = str(tmp_path)
        assert commands.calls[0][:3] == ["arch-chroot", root, "pacman"]
        assert commands.calls[0][-1] == "zram-generator"
        assert commands.calls[1] == ["arch-chroot", root, "systemctl", "enable", "systemd-zram-setup@zram0.service"]
        assert "zram-size = ram * 0.95" in (tmp_path / "etc/systemd/zram-generator.conf").read_text()

    def test_disabled(self, commands, make_state, tmp_path):
        state = make_state()
        state["profile"]["zram"]["enabled"] = False
        ZramStep().run(state)
        assert commands.calls == []
        assert not (tmp_path / "etc").exists()


def test_desktop_packages(commands, make_state):
    state = make_state()
    groups = state["profile"]["package_groups"]
    state = DesktopPackagesStep().run(state)

    assert commands.calls[0][2:4] == ["pacman", "-Syu"]
    installs = commands.calls[1:]
    assert len(installs) == len(groups)
    assert all(c[2:7] == PACMAN_INSTALL for c in installs)
    assert state["execution"]["plan"]["package_groups"]["hyprland"] == ["hyprland", "hyprpaper", "xdg-desktop-portal-hyprland"]


def test_desktop_packages_rejects_bad_group(commands, make_state):
    state = make_state()
    state["profile"]["package_groups"] = {"broken": "hyprland"}
    with pytest.raises(RuntimeError):
        DesktopPackagesStep().run(state)


def test_session_services(commands, make_state, tmp_path):
    root = str(tmp_path)
    commands.respond("arch-chroot", root, "systemctl", "disable", returncode=1)

    state = SessionServicesStep().run(make_state(profile="hyprland-dotfiles"))

    assert ["arch-chroot", root, "systemctl", "enable", "greetd"] in commands.calls
    assert ["arch-chroot", root, "systemctl", "disable", "sddm"] in commands.calls
    greetd = (tmp_path / "etc" / "greetd" / "config.toml").read_text()
    assert 'command = "tuigreet --time --remember --cmd Hyprland"' in greetd
    assert "Exec=Hyprland" in (tmp_path / "usr/share/wayland-sessions/hyprland.desktop").read_text()
    assert state["execution"]["decisions"]["services_disabled"] == ["sddm"]


class TestFinalize:
    def test_hands_state_to_user(self, commands, make_state, tmp_path):
        state = make_state(username="CyberQuasar")
        state = FinalizeStep().run(state)

        handover = tmp_path / "home/CyberQuasar/.local/state/hyprstrap/state.json"
        data = json.loads(handover.read_text())
        assert data["config"]["home"] == "/home/CyberQuasar"
        assert data["profile"]["id"] == "hyprland-swap"
        assert "home" not in state["config"]
        assert commands.calls == [
            ["arch-chroot", str(tmp_path), "chown", "-R", "CyberQuasar:CyberQuasar", "/home/CyberQuasar/.local"]
        ]

    def test_reboot_is_opt_in(self, commands, make_state, tmp_path):
        FinalizeStep().run(make_state(finalize_reboot=True, reboot_delay=0))
        assert commands.calls[1:] == [["sync"], ["umount", "-R", str(tmp_path)], ["reboot"]]
