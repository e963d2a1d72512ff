from .step_10_preflight import PreflightStep
from .step_20_partition_fs import PartitionFilesystemStep
from .step_25_pacstrap import PacstrapStep
from .step_28_write_fstab import WriteFstabStep
from .step_40_system_identity import SystemIdentityStep
from .step_45_users import UsersStep
from .step_50_pacman_tuning import PacmanTuningStep
from .step_55_bootloader import BootloaderStep
from .step_60_zram import ZramStep
from .step_65_desktop_packages import DesktopPackagesStep
from .step_70_session_services import SessionServicesStep
from .step_90_finalize import FinalizeStep
from .step_110_user_preflight import UserPreflightStep
from .step_120_aur_helper import AurHelperStep
from .step_125_aur_packages import AurPackagesStep
from .step_130_hyprpm_plugins import HyprpmPluginsStep
from .step_140_flatpak import FlatpakStep
from .step_150_dotfiles import DotfilesStep
from .step_160_themes import ThemesStep
from .step_170_shell_tools import ShellToolsStep
from .step_190_verify import VerifyStep

__all__ = [
    "PreflightStep",
    "PartitionFilesystemStep",
    "PacstrapStep",
    "WriteFstabStep",
    "SystemIdentityStep",
    "UsersStep",
    "PacmanTuningStep",
    "BootloaderStep",
    "ZramStep",
    "DesktopPackagesStep",
    "SessionServicesStep",
    "FinalizeStep",
    "UserPreflightStep",
    "AurHelperStep",
    "AurPackagesStep",
    "HyprpmPluginsStep",
    "FlatpakStep",
    "DotfilesStep",
    "ThemesStep",
    "ShellToolsStep",
    "VerifyStep",
]
