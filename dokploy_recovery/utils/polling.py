"""就绪轮询与退避机制"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from .log_manager import get_logger

logger = get_logger('polling')


@dataclass(frozen=True)
class PollConfig:
    """轮询配置"""
    timeout: float = 60.0
    base_delay: float = 1.0
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0


@dataclass
class PollResult:
    """轮询结果"""
    ready: bool
    attempts: int
    elapsed: float


class BackoffCalculator:
    """指数退避时间计算器"""

    def __init__(self, config: PollConfig):
        self.config = config

    def calculate_delay(self, attempt: int) -> float:
        """计算第 attempt 次检查失败后的等待时间"""
        delay = self.config.base_delay * (
            self.config.backoff_multiplier ** (attempt - 1))

        # 限制最大延迟
        return min(delay, self.config.max_delay)


async def wait_until(
        predicate: Callable[[], Awaitable[bool]],
        config: PollConfig,
        description: str = "条件"
) -> PollResult:
    """
    反复执行 predicate 直到返回 True 或超时

    超时不会抛出异常，调用方根据 PollResult.ready 决定后续处理。
    predicate 自身抛出的异常会直接向上传播。

    Args:
        predicate: 异步检查函数
        config: 轮询配置
        description: 日志中使用的描述

    Returns:
        PollResult: 轮询结果
    """
    calculator = BackoffCalculator(config)
    start_time = time.monotonic()
    attempt = 0

    while True:
        attempt += 1
        if await predicate():
            elapsed = time.monotonic() - start_time
            logger.info(f"{description} 已就绪 (尝试 {attempt} 次, 用时 {elapsed:.1f}秒)")
            return PollResult(ready=True, attempts=attempt, elapsed=elapsed)

        elapsed = time.monotonic() - start_time
        remaining = config.timeout - elapsed
        if remaining <= 0:
            logger.warning(f"等待 {description} 超时 ({config.timeout:.0f}秒, 尝试 {attempt} 次)")
            return PollResult(ready=False, attempts=attempt, elapsed=elapsed)

        delay = min(calculator.calculate_delay(attempt), remaining)
        logger.debug(f"{description} 尚未就绪，{delay:.2f}秒后重新检查")
        await asyncio.sleep(delay)
