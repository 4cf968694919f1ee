"""交互式菜单"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from .recovery_pipeline import RecoveryPipeline
from ..utils.exceptions import RecoveryError
from ..utils.log_manager import get_logger

EXIT_CHOICE = '8'


class ShellState(Enum):
    """菜单状态"""
    IDLE = "idle"
    AWAITING_CHOICE = "awaiting_choice"
    EXITED = "exited"


@dataclass
class MenuItem:
    """菜单项"""
    key: str
    label: str
    action: Callable[[], Awaitable[Any]]


class InteractiveShell:
    """菜单命令分派器

    状态: IDLE → (展示菜单) → AWAITING_CHOICE → (执行选项) → IDLE，
    选择退出或输入结束时进入 EXITED。选项之间不保留任何状态。
    """

    def __init__(self, pipeline: RecoveryPipeline,
                 input_func: Optional[Callable[[str], str]] = None):
        """
        Args:
            pipeline: 恢复流程，菜单项直接调用它的各个步骤
            input_func: 读取输入的函数，默认 input
        """
        self.pipeline = pipeline
        self.console = pipeline.console
        self.input_func = input_func or input
        self.state = ShellState.IDLE
        self.logger = get_logger('shell')
        self.items: Dict[str, MenuItem] = {
            item.key: item for item in (
                MenuItem('1', "完整健康检查与自动修复", pipeline.run_full_check),
                MenuItem('2', "只检查容器状态", pipeline.check_only),
                MenuItem('3', "清理 Docker 资源", pipeline.cleanup),
                MenuItem('4', "重启 Dokploy 服务", pipeline.remediator.fix_database_connection),
                MenuItem('5', "重启 Traefik", pipeline.remediator.fix_proxy_config),
                MenuItem('6', "显示当前状态", pipeline.show_status),
                MenuItem('7', "测试 UI 访问", pipeline.ui_checker.check),
            )
        }

    def show_menu(self) -> None:
        self.console.line()
        self.console.line("请选择操作:")
        for item in self.items.values():
            self.console.line(f"{item.key}) {item.label}")
        self.console.line(f"{EXIT_CHOICE}) 退出")
        self.console.line()

    async def dispatch(self, choice: str) -> ShellState:
        """
        执行一个选项

        选项执行中的错误只输出给操作员，菜单继续运行。

        Args:
            choice: 用户输入

        Returns:
            ShellState: 执行后的状态
        """
        choice = choice.strip()

        if choice == EXIT_CHOICE:
            self.console.line("再见!")
            self.state = ShellState.EXITED
            return self.state

        item = self.items.get(choice)
        if item is None:
            self.console.error("无效的选择，请重试。")
            self.state = ShellState.IDLE
            return self.state

        self.logger.info(f"执行菜单项 {item.key}: {item.label}")
        try:
            await item.action()
        except RecoveryError as e:
            self.logger.error(e.format_error())
            self.console.error(e.message)

        self.state = ShellState.IDLE
        return self.state

    async def step(self) -> ShellState:
        """展示菜单、读取一次输入并执行"""
        self.show_menu()
        self.state = ShellState.AWAITING_CHOICE
        try:
            choice = self.input_func(f"请输入选项 (1-{EXIT_CHOICE}): ")
        except (EOFError, KeyboardInterrupt):
            self.console.line()
            self.state = ShellState.EXITED
            return self.state
        return await self.dispatch(choice)

    async def run(self) -> None:
        """循环执行直到退出"""
        while self.state != ShellState.EXITED:
            await self.step()
