"""hyprstrap: Arch Linux + Hyprland installer (Python-first, state-driven).

Three phases share one resumable pipeline:
- install: partition, format, pacstrap and configure the target from the live ISO
- configure: the chroot half of install, re-runnable inside arch-chroot
- desktop: post-reboot user setup (AUR, hyprpm, Flatpak, dotfiles, themes)

Install variants are YAML profiles under hyprstrap/manifests/profiles.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
