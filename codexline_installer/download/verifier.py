"""
校验器

下载并解析 SHA-256 校验文件，计算已安装文件的摘要并比对。
"""

import asyncio
import hashlib
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
from loguru import logger

from codexline_installer.download.fetcher import TransferFetcher
from codexline_installer.download.retry import SleepFunc, with_retry
from codexline_installer.exceptions import (
    ChecksumEntryMissingError,
    ChecksumMismatchError,
    ChecksumUnavailableError,
    DownloadError,
)
from codexline_installer.models import RetryPolicy


# "*" 是传统的二进制模式标记，不属于文件名
CHECKSUM_LINE = re.compile(r"^([a-fA-F0-9]{64})\s+\*?(.+)$")


@dataclass(frozen=True)
class ChecksumEntry:
    hex_digest: str
    filename: str

    def matches(self, asset_name: str) -> bool:
        if self.filename == asset_name:
            return True
        # 兼容带路径的条目，如 dist/codexline-linux-x64
        return posixpath.basename(self.filename.replace("\\", "/")) == asset_name


def parse_manifest(content: str) -> list[ChecksumEntry]:
    """解析校验文件，忽略空行和无法识别的行"""
    entries = []
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        match = CHECKSUM_LINE.match(trimmed)
        if not match:
            continue
        entries.append(ChecksumEntry(match.group(1), match.group(2).strip()))
    return entries


def find_digest(entries: list[ChecksumEntry], asset_name: str) -> Optional[str]:
    """
    查找 asset_name 的预期摘要

    第一条匹配的记录生效。若后续记录给出了不同的摘要，只记录警告，不做取舍。
    """
    expected: Optional[str] = None
    for entry in entries:
        if not entry.matches(asset_name):
            continue
        if expected is None:
            expected = entry.hex_digest
        elif entry.hex_digest.lower() != expected.lower():
            logger.warning(
                f"[校验] codexline: checksum file lists {asset_name} more than once "
                f"with different digests ({expected} / {entry.hex_digest}), "
                f"using the first entry"
            )
    return expected


async def sha256_file(file_path: Path) -> str:
    """计算文件的 SHA-256"""
    sha256 = hashlib.sha256()
    async with aiofiles.open(file_path, "rb") as f:
        while True:
            data = await f.read(65536)
            if not data:
                break
            sha256.update(data)
    return sha256.hexdigest()


class ChecksumVerifier:
    """校验器"""

    def __init__(
        self,
        fetcher: TransferFetcher,
        policy: RetryPolicy,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.policy = policy
        self._sleep = sleep

    async def _download_manifest(self, manifest_url: str) -> str:
        return await with_retry(
            "checksum download",
            self.policy,
            lambda: self.fetcher.fetch_text(manifest_url),
            sleep=self._sleep,
        )

    async def verify(
        self,
        manifest_url: str,
        asset_name: str,
        installed_path: Path,
        require_checksum: bool = False,
    ) -> bool:
        """
        校验已安装文件

        Returns:
            True 表示校验通过，False 表示按宽松策略跳过了校验

        Raises:
            ChecksumUnavailableError: 校验文件无法获取且要求校验
            ChecksumEntryMissingError: 校验文件中没有该产物且要求校验
            ChecksumMismatchError: 摘要不一致
        """
        try:
            content = await self._download_manifest(manifest_url)
        except DownloadError as e:
            if require_checksum:
                raise ChecksumUnavailableError(
                    f"checksum file unavailable: {e}", context={"url": manifest_url}
                ) from e
            logger.warning(f"[校验] codexline: checksum skipped ({e})")
            return False

        expected = find_digest(parse_manifest(content), asset_name)
        if expected is None:
            if require_checksum:
                raise ChecksumEntryMissingError(
                    f"checksum entry missing for {asset_name}",
                    context={"asset": asset_name, "url": manifest_url},
                )
            logger.warning(
                f"[校验] codexline: checksum entry missing for {asset_name}, skipped"
            )
            return False

        actual = await sha256_file(installed_path)
        if actual.lower() != expected.lower():
            raise ChecksumMismatchError(asset_name, expected, actual)

        logger.debug(f"[校验] {asset_name} sha256 {actual} 校验通过")
        return True
