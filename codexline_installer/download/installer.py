"""
流式安装

先写入同目录下的临时文件，完整写完后再原子替换到最终路径。
任何失败都会删除临时文件，最终路径保持安装前的状态。
"""

import os
from pathlib import Path
from typing import AsyncIterable

import aiofiles
from loguru import logger


def temp_path_for(final_path: Path) -> Path:
    return final_path.with_name(final_path.name + ".tmp")


def remove_file_if_exists(path: Path) -> None:
    """删除文件，文件不存在不算错误"""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


async def install_streaming(
    chunks: AsyncIterable[bytes],
    final_path: Path,
    total_size: int = 0,
) -> int:
    """
    把字节流写入 final_path

    Args:
        chunks: 字节块的异步迭代器
        final_path: 最终安装路径
        total_size: 预期大小（未知时为 0），仅用于进度显示

    Returns:
        写入的字节数
    """
    final_path = Path(final_path)
    temp_path = temp_path_for(final_path)
    remove_file_if_exists(temp_path)

    downloaded = 0
    try:
        async with aiofiles.open(temp_path, "wb") as f:
            last_percent = 0.0

            async for chunk in chunks:
                await f.write(chunk)
                downloaded += len(chunk)

                # 进度（每 5% 记录一次）
                if total_size > 0:
                    percent = (downloaded / total_size) * 100
                    if percent - last_percent >= 5:
                        logger.debug(f"[进度] {final_path.name}: {percent:.1f}%")
                        last_percent = percent

        remove_file_if_exists(final_path)
        os.replace(temp_path, final_path)
    except BaseException:
        remove_file_if_exists(temp_path)
        raise

    logger.debug(f"[写入] {final_path} ({downloaded} bytes)")
    return downloaded
