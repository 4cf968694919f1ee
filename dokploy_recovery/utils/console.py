"""面向操作员的终端输出"""

import sys
from typing import Callable, Optional, TextIO

RED = '\033[0;31m'
GREEN = '\033[0;32m'
YELLOW = '\033[1;33m'
BLUE = '\033[0;34m'
RESET = '\033[0m'


class Console:
    """步骤、成功、失败和提示信息的统一输出

    诊断日志走 log_manager（stderr），这里只负责给操作员看的内容（stdout）。
    """

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        """
        Args:
            stream: 输出流，默认在每次输出时取 sys.stdout
            color: 是否使用颜色，None 表示输出到终端时才启用
        """
        self._stream = stream
        self._color = color

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    @property
    def use_color(self) -> bool:
        if self._color is not None:
            return self._color
        isatty = getattr(self.stream, 'isatty', None)
        return bool(isatty and isatty())

    def _paint(self, color: str, text: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{RESET}"

    def line(self, text: str = '') -> None:
        print(text, file=self.stream, flush=True)

    def header(self, title: str) -> None:
        border = '=' * 33
        self.line(self._paint(BLUE, border))
        self.line(self._paint(BLUE, f"  {title}"))
        self.line(self._paint(BLUE, border))
        self.line()

    def step(self, message: str) -> None:
        self.line(self._paint(YELLOW, f">>> {message}"))

    def success(self, message: str) -> None:
        self.line(self._paint(GREEN, f"✓ {message}"))

    def error(self, message: str) -> None:
        self.line(self._paint(RED, f"✗ {message}"))

    def info(self, message: str) -> None:
        self.line(self._paint(BLUE, f"ℹ {message}"))

    def confirm(self, question: str, input_func: Optional[Callable[[str], str]] = None) -> bool:
        """
        询问是/否，只有以 y 开头的回答视为同意

        Args:
            question: 问题
            input_func: 读取输入的函数，默认 input

        Returns:
            bool: 是否同意
        """
        read = input_func or input
        try:
            answer = read(f"{question} (y/n): ")
        except EOFError:
            self.line()
            return False
        return answer.strip().lower().startswith('y')
