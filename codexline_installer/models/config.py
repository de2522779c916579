"""
配置模型

一次安装所需的全部配置集中在不可变的 InstallerConfig 中，
由 CLI 在进程启动时构建并显式传给协调器。
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import toml
import yaml

from codexline_installer.exceptions import ConfigError
from codexline_installer.version import __version__


DEFAULT_BASE_URL = "https://github.com/lusipad/codexline/releases/download"
DEFAULT_RETRIES = 3
DEFAULT_TIMEOUT_MS = 20000
DEFAULT_RETRY_DELAY_MS = 400
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_INSTALL_DIR = Path(__file__).resolve().parent.parent / "vendor"
# 发布标签形如 v1.2.3
DEFAULT_VERSION = f"v{__version__}"


def read_positive_int(value: Optional[str], fallback: int) -> int:
    """解析正整数，无效或非正数时返回 fallback"""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return fallback
    if parsed <= 0:
        return fallback
    return parsed


@dataclass(frozen=True)
class RetryPolicy:
    """重试策略：线性退避，第 i 次重试前等待 base_delay_ms * i"""

    attempts: int = DEFAULT_RETRIES
    base_delay_ms: int = DEFAULT_RETRY_DELAY_MS

    def __post_init__(self):
        if self.attempts < 1:
            raise ConfigError(f"attempts must be positive, got {self.attempts}")
        if self.base_delay_ms < 1:
            raise ConfigError(
                f"base_delay_ms must be positive, got {self.base_delay_ms}"
            )

    def delay_for(self, attempt: int) -> float:
        """第 attempt 次失败后的等待时间（秒）"""
        return self.base_delay_ms * attempt / 1000


@dataclass(frozen=True)
class ReleaseLocation:
    """发布地址：<base_url>/<version>/"""

    version: str
    base_url: str = DEFAULT_BASE_URL

    @property
    def release_base(self) -> str:
        # 末尾无论有几个斜杠都只保留一个分隔符
        return self.base_url.rstrip("/") + "/" + self.version + "/"


@dataclass(frozen=True)
class InstallerConfig:
    version: str = DEFAULT_VERSION
    base_url: str = DEFAULT_BASE_URL
    retries: int = DEFAULT_RETRIES
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    verify_checksum: bool = True
    require_checksum: bool = False
    skip_download: bool = False
    install_dir: Path = DEFAULT_INSTALL_DIR
    # None 表示使用当前运行平台
    platform: Optional[str] = None
    arch: Optional[str] = None

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(attempts=self.retries, base_delay_ms=self.retry_delay_ms)

    @property
    def release_location(self) -> ReleaseLocation:
        return ReleaseLocation(version=self.version, base_url=self.base_url)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional["InstallerConfig"] = None,
    ) -> "InstallerConfig":
        """
        从环境变量构建配置

        Args:
            environ: 环境变量映射，默认 os.environ
            base: 作为默认值的配置（例如配置文件加载的结果）

        Returns:
            新的 InstallerConfig
        """
        env = os.environ if environ is None else environ
        config = base or cls()
        changes: dict[str, Any] = {}

        if env.get("CODEXLINE_VERSION"):
            changes["version"] = env["CODEXLINE_VERSION"]
        if env.get("CODEXLINE_BASE_URL"):
            changes["base_url"] = env["CODEXLINE_BASE_URL"]
        if "CODEXLINE_DOWNLOAD_RETRIES" in env:
            changes["retries"] = read_positive_int(
                env["CODEXLINE_DOWNLOAD_RETRIES"], config.retries
            )
        if "CODEXLINE_DOWNLOAD_TIMEOUT_MS" in env:
            changes["timeout_ms"] = read_positive_int(
                env["CODEXLINE_DOWNLOAD_TIMEOUT_MS"], config.timeout_ms
            )
        if "CODEXLINE_VERIFY_CHECKSUM" in env:
            changes["verify_checksum"] = env["CODEXLINE_VERIFY_CHECKSUM"] != "0"
        if "CODEXLINE_REQUIRE_CHECKSUM" in env:
            changes["require_checksum"] = env["CODEXLINE_REQUIRE_CHECKSUM"] == "1"
        if "CODEXLINE_SKIP_DOWNLOAD" in env:
            changes["skip_download"] = env["CODEXLINE_SKIP_DOWNLOAD"] == "1"
        if env.get("CODEXLINE_INSTALL_DIR"):
            changes["install_dir"] = Path(env["CODEXLINE_INSTALL_DIR"])

        return replace(config, **changes)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], base: Optional["InstallerConfig"] = None
    ) -> "InstallerConfig":
        """从配置文件内容构建配置，键名允许使用短横线"""
        config = base or cls()
        known = {f.name for f in fields(cls)}
        changes: dict[str, Any] = {}

        for raw_key, value in data.items():
            key = str(raw_key).replace("-", "_")
            if key not in known:
                raise ConfigError(f"unknown config option: {raw_key}")
            if key == "install_dir":
                value = Path(value)
            elif key in ("retries", "timeout_ms", "retry_delay_ms", "max_redirects"):
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ConfigError(f"{raw_key} must be a positive integer")
            elif key in ("verify_checksum", "require_checksum", "skip_download"):
                if not isinstance(value, bool):
                    raise ConfigError(f"{raw_key} must be a boolean")
            changes[key] = value

        return replace(config, **changes)


def load_config_file(config_path: str) -> dict:
    """加载配置文件（toml / json / yaml）"""
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"config file not found: {config_path}")

    suffix = path.suffix.lower()

    try:
        if suffix == ".toml":
            data = toml.load(path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ConfigError(f"unsupported config file format: {suffix}")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(
            f"failed to parse config file {config_path}: {e}",
            context={"path": config_path},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a mapping")

    # 允许把选项放在 [codexline] 段下
    section = data.get("codexline")
    if isinstance(section, dict):
        return section
    return data
