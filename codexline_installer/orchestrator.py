"""
主协调器

按 解析 → 下载 → 校验（可选）→ 收尾 的顺序完成一次安装，
失败时清理残留文件并给出单行错误信息。
"""

import asyncio
import os
from pathlib import Path
from typing import Optional

from loguru import logger

from codexline_installer.download import (
    ChecksumVerifier,
    TransferFetcher,
    install_streaming,
    remove_file_if_exists,
    temp_path_for,
    with_retry,
)
from codexline_installer.download.retry import SleepFunc
from codexline_installer.exceptions import CodexlineInstallError
from codexline_installer.models import (
    InstallerConfig,
    InstallOutcome,
    InstallStage,
    Target,
)
from codexline_installer.services import (
    binary_url,
    checksum_url,
    detect_platform,
    is_windows,
    normalize_arch,
    normalize_platform,
    resolve_target,
)


CHUNK_SIZE = 8192
EXECUTABLE_MODE = 0o755


class InstallOrchestrator:
    """codexline 安装协调器"""

    def __init__(
        self,
        config: InstallerConfig,
        fetcher: Optional[TransferFetcher] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.config = config
        self.fetcher = fetcher or TransferFetcher(
            timeout_ms=config.timeout_ms, max_redirects=config.max_redirects
        )
        self.policy = config.retry_policy
        self.verifier = ChecksumVerifier(self.fetcher, self.policy, sleep=sleep)
        self._sleep = sleep

        detected_platform, detected_arch = detect_platform()
        self.platform = normalize_platform(config.platform or detected_platform)
        self.arch = normalize_arch(config.arch or detected_arch)

    def resolve(self) -> Optional[Target]:
        return resolve_target(self.platform, self.arch)

    def output_path(self, target: Target) -> Path:
        return Path(self.config.install_dir) / target.output_name

    def plan(self) -> Optional[dict]:
        """不访问网络，只返回本次安装将使用的目标和地址"""
        target = self.resolve()
        if target is None:
            return None
        location = self.config.release_location
        return {
            "platform": self.platform,
            "arch": self.arch,
            "asset": target.asset_name,
            "binary_url": binary_url(location, target),
            "checksum_url": checksum_url(location),
            "output_path": str(self.output_path(target)),
            "verify_checksum": self.config.verify_checksum,
            "require_checksum": self.config.require_checksum,
        }

    async def _download(self, url: str, output_path: Path) -> int:
        async with self.fetcher.open(url) as response:
            total_size = response.content_length or 0
            if total_size:
                logger.debug(f"[信息] 文件大小: {total_size / (1024 * 1024):.2f} MB")
            return await install_streaming(
                response.content.iter_chunked(CHUNK_SIZE),
                output_path,
                total_size=total_size,
            )

    def _cleanup(self, output_path: Path) -> None:
        remove_file_if_exists(output_path)
        remove_file_if_exists(temp_path_for(output_path))

    async def run(self) -> InstallOutcome:
        """运行完整的安装流程"""
        if self.config.skip_download:
            logger.debug("[跳过] CODEXLINE_SKIP_DOWNLOAD 已设置，不下载")
            return InstallOutcome.skipped("download skipped by configuration")

        target = self.resolve()
        if target is None:
            logger.warning(
                f"[跳过] codexline: unsupported platform {self.platform} {self.arch}"
            )
            return InstallOutcome.unsupported(
                f"unsupported platform {self.platform} {self.arch}"
            )

        location = self.config.release_location
        url = binary_url(location, target)
        output_path = self.output_path(target)
        stage = InstallStage.DOWNLOAD
        verified = False

        logger.info(f"[下载] codexline: downloading {target.asset_name} ({location.version})")

        try:
            os.makedirs(self.config.install_dir, exist_ok=True)
            written = await with_retry(
                "binary download",
                self.policy,
                lambda: self._download(url, output_path),
                sleep=self._sleep,
                # 磁盘写入失败不重试
                fatal=(OSError,),
            )

            if self.config.verify_checksum:
                stage = InstallStage.VERIFY
                verified = await self.verifier.verify(
                    checksum_url(location),
                    target.asset_name,
                    output_path,
                    require_checksum=self.config.require_checksum,
                )

            stage = InstallStage.FINALIZE
            if not is_windows(self.platform):
                os.chmod(output_path, EXECUTABLE_MODE)

        except (CodexlineInstallError, OSError) as e:
            self._cleanup(output_path)
            logger.error(
                f"[错误] codexline: failed to install binary ({stage.value}): {e}"
            )
            return InstallOutcome.failure(stage, str(e))
        except BaseException:
            self._cleanup(output_path)
            raise
        finally:
            await self.fetcher.close()

        logger.success(f"[完成] codexline: installed {target.output_name}")
        return InstallOutcome.success(output_path, bytes_written=written, verified=verified)
