from .step_10_detect_os import DetectOSStep
from .step_20_load_profile import LoadProfileStep
from .step_30_enable_repositories import EnableRepositoriesStep
from .step_40_install_packages import InstallPackagesStep
from .step_50_run_modules import RunModulesStep

__all__ = [
    "DetectOSStep",
    "LoadProfileStep",
    "EnableRepositoriesStep",
    "InstallPackagesStep",
    "RunModulesStep",
]
