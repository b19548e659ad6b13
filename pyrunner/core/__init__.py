# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The bootstrap decision engine:
# - Resolver: classify SOURCE_URL / GITHUB_URL
# - SourceFetcher: git clone or S3 archive into a clean workspace
# - DependencyInstaller: pip + setup.sh
# - Detector: ordered framework/entrypoint rules
# - Launcher: build the server command and exec it
# - Bootstrapper: runs the stages in order
# -----------------------------------------------------------------------------

from .bootstrap import Bootstrapper, is_auto
from .config_service import ConfigServiceFailed, load_config_env
from .detector import DETECTION_RULES, detect, find_app_module
from .fetcher import ArchiveFetchFailed, GitCloneFailed, SourceFetcher
from .installer import DependencyInstaller, DependencyInstallFailed, SetupHookFailed
from .launcher import LaunchFailed, UndetectedApplication, build_command, launch
from .manifests import has_package, scan_manifests
from .resolver import MissingSourceLocator, UnsupportedSourceScheme, resolve
from .settings import InvalidSettings, RunnerSettings

__all__ = [
    "Bootstrapper", "is_auto",
    "ConfigServiceFailed", "load_config_env",
    "DETECTION_RULES", "detect", "find_app_module",
    "ArchiveFetchFailed", "GitCloneFailed", "SourceFetcher",
    "DependencyInstaller", "DependencyInstallFailed", "SetupHookFailed",
    "LaunchFailed", "UndetectedApplication", "build_command", "launch",
    "has_package", "scan_manifests",
    "MissingSourceLocator", "UnsupportedSourceScheme", "resolve",
    "InvalidSettings", "RunnerSettings",
]
