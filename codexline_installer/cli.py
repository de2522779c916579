"""
CLI 模块

命令行接口实现。配置优先级：默认值 < 配置文件 < 环境变量 < 命令行参数。
"""

import asyncio
import json
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Mapping, Optional

import click
from click.core import ParameterSource
from loguru import logger

from codexline_installer.exceptions import CodexlineInstallError, ConfigError
from codexline_installer.logger import setup_logger
from codexline_installer.models import InstallerConfig, InstallOutcome, load_config_file
from codexline_installer.orchestrator import InstallOrchestrator
from codexline_installer.version import __version__


def _given(name: str) -> bool:
    """命令行上是否显式给出了该选项"""
    source = click.get_current_context().get_parameter_source(name)
    return source is not None and source is not ParameterSource.DEFAULT


def build_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> InstallerConfig:
    """合并配置文件、环境变量和命令行参数，值为 None 的参数不生效"""
    config = InstallerConfig()
    if config_path:
        config = InstallerConfig.from_dict(load_config_file(config_path), base=config)
    config = InstallerConfig.from_env(environ, base=config)

    changes = {key: value for key, value in overrides.items() if value is not None}
    if "install_dir" in changes:
        changes["install_dir"] = Path(changes["install_dir"])
    return replace(config, **changes)


async def run_install(config: InstallerConfig) -> InstallOutcome:
    """异步运行"""
    orchestrator = InstallOrchestrator(config)
    try:
        return await orchestrator.run()
    except CodexlineInstallError as e:
        logger.error(f"[错误] codexline: failed to install binary: {e}")
        raise click.ClickException(str(e))
    except Exception as e:
        logger.exception(f"[错误] codexline: unexpected error: {e}")
        raise click.ClickException(f"unexpected error: {e}")


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="配置文件 (toml/json/yaml)",
)
@click.option("--version-override", help="覆盖要安装的发布版本（如 v1.2.3）")
@click.option("--base-url", help="覆盖发布下载地址前缀")
@click.option("--retries", type=click.IntRange(min=1), help="下载重试次数")
@click.option("--timeout-ms", type=click.IntRange(min=1), help="单次请求超时（毫秒）")
@click.option("--verify/--no-verify", default=None, help="是否校验 SHA-256，默认沿用配置")
@click.option("--require-checksum", is_flag=True, help="校验文件缺失时视为失败")
@click.option("--install-dir", type=click.Path(file_okay=False), help="安装目录")
@click.option("--platform", "target_platform", help="目标平台 (windows/linux/macos)")
@click.option("--arch", "target_arch", help="目标架构 (x64/arm64)")
@click.option("--skip-download", is_flag=True, help="不下载，直接退出")
@click.option("--dry-run", is_flag=True, help="只显示将要下载的地址")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version=__version__)
def main(
    config_path: Optional[str],
    version_override: Optional[str],
    base_url: Optional[str],
    retries: Optional[int],
    timeout_ms: Optional[int],
    verify: Optional[bool],
    require_checksum: bool,
    install_dir: Optional[str],
    target_platform: Optional[str],
    target_arch: Optional[str],
    skip_download: bool,
    dry_run: bool,
    debug: bool,
):
    """codexline 二进制安装器"""
    # 设置日志级别
    setup_logger(level="DEBUG" if debug else None)

    try:
        config = build_config(
            config_path,
            os.environ,
            version=version_override,
            base_url=base_url,
            retries=retries,
            timeout_ms=timeout_ms,
            verify_checksum=verify if _given("verify") else None,
            require_checksum=True if require_checksum else None,
            install_dir=install_dir,
            platform=target_platform,
            arch=target_arch,
            skip_download=True if skip_download else None,
        )
    except ConfigError as e:
        logger.error(f"配置错误: {e}")
        raise click.ClickException(str(e))

    if dry_run:
        plan = InstallOrchestrator(config).plan()
        if plan is None:
            logger.warning("[干运行模式] codexline: unsupported platform")
            return
        click.echo(json.dumps(plan, indent=2))
        return

    outcome = asyncio.run(run_install(config))
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
