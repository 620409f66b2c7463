from .step_10_check_environment import CheckEnvironmentStep
from .step_20_install_packages import InstallPackagesStep
from .step_30_create_directories import CreateDirectoriesStep
from .step_40_configure_nginx import ConfigureNginxStep
from .step_45_create_web_app import CreateWebAppStep
from .step_50_create_html import CreateHtmlStep
from .step_60_configure_ssh import ConfigureSshStep
from .step_65_create_certificates import CreateCertificatesStep
from .step_70_write_scripts import WriteScriptsStep
from .step_75_apply_security import ApplySecurityStep
from .step_80_setup_autostart import SetupAutostartStep
from .step_85_finalize import FinalizeStep
from .step_90_launch import LaunchStep

__all__ = [
    "CheckEnvironmentStep",
    "InstallPackagesStep",
    "CreateDirectoriesStep",
    "ConfigureNginxStep",
    "CreateWebAppStep",
    "CreateHtmlStep",
    "ConfigureSshStep",
    "CreateCertificatesStep",
    "WriteScriptsStep",
    "ApplySecurityStep",
    "SetupAutostartStep",
    "FinalizeStep",
    "LaunchStep",
]
