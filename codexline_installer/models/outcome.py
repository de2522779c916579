"""
安装结果模型
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class InstallStage(Enum):
    """安装流程阶段"""

    RESOLVE = "resolve"
    DOWNLOAD = "download"
    VERIFY = "verify"
    FINALIZE = "finalize"


class InstallStatus(Enum):
    """一次安装的终态"""

    SUCCESS = "success"
    SKIPPED = "skipped"
    UNSUPPORTED = "unsupported"
    FAILURE = "failure"


@dataclass(frozen=True)
class InstallOutcome:
    status: InstallStatus
    path: Optional[Path] = None
    reason: Optional[str] = None
    stage: Optional[InstallStage] = None
    bytes_written: int = 0
    verified: bool = False

    @property
    def ok(self) -> bool:
        return self.status is not InstallStatus.FAILURE

    @property
    def exit_code(self) -> int:
        """进程退出码：只有硬失败返回 1"""
        return 0 if self.ok else 1

    @classmethod
    def success(
        cls, path: Path, bytes_written: int = 0, verified: bool = False
    ) -> "InstallOutcome":
        return cls(
            status=InstallStatus.SUCCESS,
            path=path,
            bytes_written=bytes_written,
            verified=verified,
        )

    @classmethod
    def skipped(cls, reason: str) -> "InstallOutcome":
        return cls(status=InstallStatus.SKIPPED, reason=reason)

    @classmethod
    def unsupported(cls, reason: str) -> "InstallOutcome":
        return cls(
            status=InstallStatus.UNSUPPORTED,
            reason=reason,
            stage=InstallStage.RESOLVE,
        )

    @classmethod
    def failure(cls, stage: InstallStage, reason: str) -> "InstallOutcome":
        return cls(status=InstallStatus.FAILURE, reason=reason, stage=stage)
