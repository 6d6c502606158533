from .step_10_create_directories import CreateDirectoriesStep
from .step_20_system_update import SystemUpdateStep
from .step_30_remove_apps import RemoveAppsStep
from .step_40_install_homebrew import InstallHomebrewStep
from .step_50_configure_git import ConfigureGitStep
from .step_60_install_packages import InstallPackagesStep
from .step_70_write_configs import WriteConfigsStep
from .step_75_relocate_vscode import RelocateVSCodeStep
from .step_80_apply_preferences import ApplyPreferencesStep
from .step_90_cleanup import CleanupStep

__all__ = [
    "CreateDirectoriesStep",
    "SystemUpdateStep",
    "RemoveAppsStep",
    "InstallHomebrewStep",
    "ConfigureGitStep",
    "InstallPackagesStep",
    "WriteConfigsStep",
    "RelocateVSCodeStep",
    "ApplyPreferencesStep",
    "CleanupStep",
]
