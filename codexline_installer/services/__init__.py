"""
codexline 安装器服务层

包含发布目标解析与发布地址拼接。
"""

from codexline_installer.services.release_locator import (
    CHECKSUM_FILE_NAME,
    binary_url,
    checksum_url,
)
from codexline_installer.services.target_resolver import (
    TARGETS,
    detect_platform,
    installed_binary_path,
    is_windows,
    normalize_arch,
    normalize_platform,
    resolve_target,
)

__all__ = [
    "CHECKSUM_FILE_NAME",
    "binary_url",
    "checksum_url",
    "TARGETS",
    "detect_platform",
    "installed_binary_path",
    "is_windows",
    "normalize_arch",
    "normalize_platform",
    "resolve_target",
]
