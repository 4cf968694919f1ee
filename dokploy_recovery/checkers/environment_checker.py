"""运行环境检查器"""

from typing import Optional

from .base import BaseChecker
from ..services.docker_cli import DockerCLI
from ..utils.console import Console


class EnvironmentChecker(BaseChecker):
    """确认容器运行时命令可以调用"""

    def __init__(self, docker: DockerCLI, console: Optional[Console] = None):
        super().__init__(console)
        self.docker = docker

    async def check(self) -> bool:
        """
        检查容器运行时是否可用

        Returns:
            bool: 可用返回 True
        """
        self.console.step("检查 Docker 是否可用...")

        if not self.docker.is_available():
            self.logger.error(f"在 PATH 中找不到 {self.docker.command}")
            self.console.error("Docker 未安装或不在 PATH 中")
            return False

        self.console.success("Docker 可用")
        return True
