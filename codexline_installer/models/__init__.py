"""
codexline 安装器数据模型包

包含配置模型、发布目标和安装结果定义。
"""

from codexline_installer.models.config import (
    DEFAULT_BASE_URL,
    DEFAULT_VERSION,
    InstallerConfig,
    ReleaseLocation,
    RetryPolicy,
    load_config_file,
    read_positive_int,
)
from codexline_installer.models.outcome import (
    InstallOutcome,
    InstallStage,
    InstallStatus,
)
from codexline_installer.models.target import Target

__all__ = [
    # 配置模型
    "DEFAULT_BASE_URL",
    "DEFAULT_VERSION",
    "InstallerConfig",
    "ReleaseLocation",
    "RetryPolicy",
    "load_config_file",
    "read_positive_int",
    # 结果模型
    "InstallOutcome",
    "InstallStage",
    "InstallStatus",
    # 发布目标
    "Target",
]
