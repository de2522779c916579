"""
发布目标解析

把 (平台, 架构) 映射到固定的发布产物表，不做跨架构的模糊匹配。
"""

import platform as _platform
from pathlib import Path
from typing import Optional

from codexline_installer.models import Target


TARGETS: dict[tuple[str, str], Target] = {
    ("windows", "x64"): Target("codexline-windows-x64.exe", "codexline.exe"),
    ("linux", "x64"): Target("codexline-linux-x64", "codexline"),
    ("linux", "arm64"): Target("codexline-linux-arm64", "codexline"),
    ("macos", "x64"): Target("codexline-macos-x64", "codexline"),
    ("macos", "arm64"): Target("codexline-macos-arm64", "codexline"),
}


def normalize_platform(system: str) -> str:
    s = system.strip().lower()
    if s in ("win32", "windows", "cygwin", "msys") or s.startswith("win"):
        return "windows"
    if s in ("darwin", "macos", "mac", "osx"):
        return "macos"
    if s.startswith("linux"):
        return "linux"
    return s


def normalize_arch(machine: str) -> str:
    m = machine.strip().lower()
    if m in ("x86_64", "amd64", "x64"):
        return "x64"
    if m in ("aarch64", "arm64"):
        return "arm64"
    return m


def detect_platform() -> tuple[str, str]:
    """返回当前运行环境的 (平台, 架构)"""
    return normalize_platform(_platform.system()), normalize_arch(_platform.machine())


def resolve_target(platform: str, arch: str) -> Optional[Target]:
    """
    解析发布目标

    Returns:
        Target，或 None（不支持的平台/架构组合）
    """
    return TARGETS.get((normalize_platform(platform), normalize_arch(arch)))


def is_windows(platform: str) -> bool:
    return normalize_platform(platform) == "windows"


def installed_binary_path(install_dir: Path, platform: Optional[str] = None) -> Path:
    """命令分发器查找已安装二进制的位置"""
    if platform is None:
        platform = detect_platform()[0]
    name = "codexline.exe" if is_windows(platform) else "codexline"
    return Path(install_dir) / name
