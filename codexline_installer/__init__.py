"""
codexline 安装器

从发布站点下载对应平台的 codexline 二进制，校验后原子安装。
"""

from codexline_installer.exceptions import CodexlineInstallError
from codexline_installer.models import InstallerConfig, InstallOutcome, InstallStatus
from codexline_installer.orchestrator import InstallOrchestrator
from codexline_installer.services import installed_binary_path, resolve_target
from codexline_installer.version import __version__

__all__ = [
    "__version__",
    "CodexlineInstallError",
    "InstallerConfig",
    "InstallOrchestrator",
    "InstallOutcome",
    "InstallStatus",
    "installed_binary_path",
    "resolve_target",
]
