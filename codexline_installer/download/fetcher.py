"""
传输层

单次 GET 请求：有限次跟随重定向、单请求超时，返回可读取的响应流。
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import urljoin

import aiohttp
from loguru import logger

from codexline_installer.exceptions import (
    DownloadNetworkError,
    DownloadTimeoutError,
    HTTPStatusError,
    TooManyRedirectsError,
)
from codexline_installer.models.config import DEFAULT_MAX_REDIRECTS, DEFAULT_TIMEOUT_MS
from codexline_installer.version import __version__


USER_AGENT = f"codexline-installer/{__version__}"


class TransferFetcher:
    """HTTP 传输器"""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.timeout_ms = timeout_ms
        self.max_redirects = max_redirects
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
        return self._session

    @property
    def client_timeout(self) -> aiohttp.ClientTimeout:
        # 只限制无响应的时长，大文件的总下载时间不设上限
        seconds = self.timeout_ms / 1000
        return aiohttp.ClientTimeout(total=None, sock_connect=seconds, sock_read=seconds)

    async def _get(self, url: str) -> aiohttp.ClientResponse:
        try:
            return await self.session.get(
                url, allow_redirects=False, timeout=self.client_timeout
            )
        except asyncio.TimeoutError as e:
            raise DownloadTimeoutError(self.timeout_ms, url) from e
        except aiohttp.ClientError as e:
            raise DownloadNetworkError(
                f"request to {url} failed: {e}", context={"url": url}
            ) from e

    async def _resolve(self, url: str) -> aiohttp.ClientResponse:
        """请求 url 并跟随重定向，直到得到 200 响应"""
        current = url
        redirects_left = self.max_redirects

        while True:
            response = await self._get(current)
            status = response.status
            location = response.headers.get("Location")

            if 300 <= status < 400 and location:
                response.release()
                if redirects_left <= 0:
                    raise TooManyRedirectsError(current)
                next_url = urljoin(current, location)
                logger.debug(f"[重定向] {current} -> {next_url}")
                redirects_left -= 1
                current = next_url
                continue

            if status != 200:
                response.release()
                raise HTTPStatusError(status, current)

            return response

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        打开 url，产出 200 响应供调用方读取

        退出上下文时释放连接；读取过程中的超时和网络错误会转换为下载异常。
        """
        response = await self._resolve(url)
        try:
            yield response
        except asyncio.TimeoutError as e:
            raise DownloadTimeoutError(self.timeout_ms, url) from e
        except aiohttp.ClientPayloadError as e:
            raise DownloadNetworkError(
                f"incomplete response from {url}: {e}", context={"url": url}
            ) from e
        except aiohttp.ClientConnectionError as e:
            raise DownloadNetworkError(
                f"connection lost while reading {url}: {e}", context={"url": url}
            ) from e
        finally:
            response.release()

    async def fetch_text(self, url: str) -> str:
        """读取完整的文本响应"""
        async with self.open(url) as response:
            body = await response.read()
        return body.decode("utf-8", errors="replace")

    async def close(self):
        """关闭传输器"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
