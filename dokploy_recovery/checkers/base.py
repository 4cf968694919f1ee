"""检查器基类"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..utils.console import Console
from ..utils.log_manager import get_logger


class BaseChecker(ABC):
    """诊断步骤的抽象基类"""

    def __init__(self, console: Optional[Console] = None):
        """
        初始化检查器

        Args:
            console: 面向操作员的输出，默认输出到标准输出
        """
        self.console = console or Console()
        self.checker_type = self.__class__.__name__.replace('Checker', '').lower()
        self.logger = get_logger(f'checker.{self.checker_type}')

    @abstractmethod
    async def check(self) -> Any:
        """
        执行检查并返回该步骤的结果对象
        """
        pass
