"""Docker 资源清理"""

from typing import Optional

from .docker_cli import DockerCLI
from ..models.recovery import CleanupResult
from ..utils.console import Console
from ..utils.log_manager import get_logger


class ResourceCleaner:
    """清理未使用的镜像、构建缓存和已停止的资源

    清理范围是运行时上所有未使用的资源，不仅限于 Dokploy，且不可恢复。
    按顺序执行，遇到第一个失败的命令即停止。
    """

    def __init__(self, docker: DockerCLI, console: Optional[Console] = None):
        self.docker = docker
        self.console = console or Console()
        self.logger = get_logger('cleaner')

    async def cleanup(self) -> CleanupResult:
        """
        执行清理

        Returns:
            CleanupResult: 清理结果，returncode 为失败命令的退出码或 0
        """
        self.console.step("清理 Docker 资源...")

        steps = [
            ("清理 Docker 系统...", self.docker.prune_system),
            ("清理构建缓存...", self.docker.prune_builder),
            ("清理未使用的镜像...", self.docker.prune_images),
        ]

        result = CleanupResult()
        for label, action in steps:
            self.console.line(label)
            command = await action()
            result.commands.append(command)
            if command.stdout:
                self.logger.info(command.stdout)
            if not command.ok:
                self.logger.error(f"{' '.join(command.argv)} 失败: {command.stderr}")
                self.console.error(f"Docker 清理失败 (退出码 {command.returncode})")
                return result

        self.console.success("Docker 清理完成")
        return result
