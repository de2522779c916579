"""
codexline 安装器下载层

包含传输、重试、流式安装与校验。
"""

from codexline_installer.download.fetcher import TransferFetcher
from codexline_installer.download.installer import (
    install_streaming,
    remove_file_if_exists,
    temp_path_for,
)
from codexline_installer.download.retry import with_retry
from codexline_installer.download.verifier import (
    ChecksumEntry,
    ChecksumVerifier,
    find_digest,
    parse_manifest,
    sha256_file,
)

__all__ = [
    "TransferFetcher",
    "install_streaming",
    "remove_file_if_exists",
    "temp_path_for",
    "with_retry",
    "ChecksumEntry",
    "ChecksumVerifier",
    "find_digest",
    "parse_manifest",
    "sha256_file",
]
