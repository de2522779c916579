from pathlib import Path

import pytest

from codexline_installer.models import Target
from codexline_installer.services import (
    TARGETS,
    installed_binary_path,
    normalize_arch,
    normalize_platform,
    resolve_target,
)


@pytest.mark.parametrize(
    "platform,arch,asset,output",
    [
        ("windows", "x64", "codexline-windows-x64.exe", "codexline.exe"),
        ("linux", "x64", "codexline-linux-x64", "codexline"),
        ("linux", "arm64", "codexline-linux-arm64", "codexline"),
        ("macos", "x64", "codexline-macos-x64", "codexline"),
        ("macos", "arm64", "codexline-macos-arm64", "codexline"),
    ],
)
def test_supported_pairs_resolve(platform, arch, asset, output):
    assert resolve_target(platform, arch) == Target(asset, output)


def test_table_has_exactly_five_targets():
    assert len(TARGETS) == 5


@pytest.mark.parametrize(
    "platform,arch",
    [
        ("freebsd", "x64"),
        ("linux", "ia32"),
        ("windows", "arm64"),
        ("linux", "riscv64"),
        ("sunos", "x64"),
        ("linux", "armv8l"),
        ("linux", "armv8"),
        ("linux", "armv7l"),
    ],
)
def test_unsupported_pairs_return_none(platform, arch):
    assert resolve_target(platform, arch) is None


@pytest.mark.parametrize(
    "system,machine,expected",
    [
        ("Linux", "x86_64", "codexline-linux-x64"),
        ("Linux", "aarch64", "codexline-linux-arm64"),
        ("Darwin", "arm64", "codexline-macos-arm64"),
        ("darwin", "x86_64", "codexline-macos-x64"),
        ("Windows", "AMD64", "codexline-windows-x64.exe"),
        ("win32", "x64", "codexline-windows-x64.exe"),
    ],
)
def test_python_platform_names_are_normalized(system, machine, expected):
    target = resolve_target(system, machine)
    assert target is not None
    assert target.asset_name == expected


def test_normalization_does_not_guess_unknown_values():
    assert normalize_platform("FreeBSD") == "freebsd"
    assert normalize_arch("i686") == "i686"


def test_installed_binary_path(tmp_path: Path):
    assert installed_binary_path(tmp_path, "linux") == tmp_path / "codexline"
    assert installed_binary_path(tmp_path, "win32") == tmp_path / "codexline.exe"
