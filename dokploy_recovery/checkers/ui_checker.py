"""Dokploy Web UI 可访问性检查器"""

import asyncio
import time
from typing import Optional

import aiohttp

from .base import BaseChecker
from ..models.config import VerificationSettings
from ..models.recovery import VerificationResult
from ..utils.console import Console
from ..utils.polling import wait_until


class UIChecker(BaseChecker):
    """向 UI 地址发送一次 HTTP 请求并按状态码判断是否可访问"""

    def __init__(self, settings: VerificationSettings, console: Optional[Console] = None):
        super().__init__(console)
        self.settings = settings

    def _is_status_expected(self, status_code: int) -> bool:
        """
        检查状态码是否属于成功状态

        Args:
            status_code: HTTP状态码

        Returns:
            bool: 是否符合期望
        """
        return status_code in self.settings.success_status

    async def probe(self) -> VerificationResult:
        """
        发送一次请求，不重试

        重定向不跟随，301/302 本身即视为成功。

        Returns:
            VerificationResult: 检查结果
        """
        start_time = time.time()
        status_code = None
        error_message = None
        is_accessible = False

        try:
            timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.settings.url, allow_redirects=False) as response:
                    status_code = response.status
                    if self._is_status_expected(status_code):
                        is_accessible = True
                    else:
                        error_message = f"HTTP状态码不符合期望: {status_code}"
        except aiohttp.ClientError as e:
            error_message = f"HTTP客户端错误: {e}"
        except asyncio.TimeoutError:
            error_message = "HTTP请求超时"

        response_time = time.time() - start_time
        self.logger.debug(f"请求 {self.settings.url}: 状态码={status_code}, 错误={error_message}")

        return VerificationResult(
            url=self.settings.url,
            is_accessible=is_accessible,
            response_time=response_time,
            status_code=status_code,
            error_message=error_message
        )

    async def wait_until_accessible(self) -> VerificationResult:
        """
        在有界时间内反复探测，直到 UI 可访问或超时

        Returns:
            VerificationResult: 最后一次探测的结果
        """
        last_result: Optional[VerificationResult] = None

        async def accessible() -> bool:
            nonlocal last_result
            last_result = await self.probe()
            return last_result.is_accessible

        await wait_until(accessible, self.settings.poll_config(), f"UI {self.settings.url}")
        return last_result

    def report(self, result: VerificationResult) -> None:
        """输出检查结论"""
        if result.is_accessible:
            self.console.success(f"Dokploy UI 可以访问: {result.url}")
        else:
            self.console.error(f"Dokploy UI 无法访问: {result.url}")
            if result.error_message:
                self.logger.info(result.error_message)

    async def check(self) -> VerificationResult:
        """
        测试 UI 可访问性（单次）

        Returns:
            VerificationResult: 检查结果
        """
        self.console.step("测试 UI 可访问性...")
        result = await self.probe()
        self.report(result)
        return result
