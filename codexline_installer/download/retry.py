"""
重试编排

通用的有限次重试，线性退避。除调用方声明为致命的异常外，所有异常同等重试。
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from loguru import logger

from codexline_installer.exceptions import RetryExhaustedError
from codexline_installer.models import RetryPolicy


T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


async def with_retry(
    name: str,
    policy: RetryPolicy,
    task: Callable[[], Awaitable[T]],
    sleep: SleepFunc = asyncio.sleep,
    fatal: Tuple[Type[BaseException], ...] = (),
) -> T:
    """
    执行 task，失败时按策略重试

    Args:
        name: 操作名称，用于日志和错误信息
        policy: 重试策略
        task: 每次调用都返回新协程的无参函数
        sleep: 退避等待函数
        fatal: 不重试、直接抛出的异常类型

    Returns:
        task 的返回值

    Raises:
        RetryExhaustedError: 所有尝试均失败
    """
    last_error: Optional[Exception] = None

    for attempt in range(1, policy.attempts + 1):
        try:
            return await task()
        except fatal:
            raise
        except Exception as e:
            last_error = e
            if attempt < policy.attempts:
                delay = policy.delay_for(attempt)
                logger.warning(
                    f"[重试] codexline: {name} failed ({attempt}/{policy.attempts}), "
                    f"retrying in {delay:.1f}s: {e}"
                )
                await sleep(delay)
            else:
                logger.debug(f"[重试] {name} 第 {attempt} 次失败: {e}")

    raise RetryExhaustedError(name, policy.attempts, last_error) from last_error
