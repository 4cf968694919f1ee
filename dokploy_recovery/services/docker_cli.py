"""容器运行时命令行适配器

所有对 docker 的调用都经过这里：固定参数列表、不经过 shell、
每次调用都有超时。读取类命令返回 CommandResult 由调用方判断，
变更类命令失败时抛出 CommandError。
"""

import asyncio
import shutil
from typing import List, Optional, Tuple

from ..models.config import RuntimeSettings
from ..models.recovery import CommandResult
from ..utils.exceptions import CommandError, ErrorCode, RuntimeUnavailableError
from ..utils.log_manager import get_logger

# 与 coreutils timeout 一致的超时退出码
TIMEOUT_RETURNCODE = 124


class DockerCLI:
    """docker 命令行封装"""

    def __init__(self, settings: RuntimeSettings):
        """
        初始化命令行适配器

        Args:
            settings: 运行时设置（可执行文件名和命令超时）
        """
        self.command = settings.command
        self.timeout = settings.command_timeout
        self.cleanup_timeout = settings.cleanup_timeout
        self.logger = get_logger('docker_cli')

    def is_available(self) -> bool:
        """运行时可执行文件是否在 PATH 中"""
        return shutil.which(self.command) is not None

    async def run(self, *args: str, check: bool = False,
                  timeout: Optional[float] = None) -> CommandResult:
        """
        执行一条运行时命令

        Args:
            args: 命令参数（不含可执行文件名）
            check: 为 True 时非零退出码抛出 CommandError
            timeout: 超时时间，默认使用配置值

        Returns:
            CommandResult: 执行结果

        Raises:
            RuntimeUnavailableError: 可执行文件无法启动
            CommandError: check=True 时命令超时或失败
        """
        argv = [self.command, *args]
        timeout = timeout or self.timeout
        self.logger.debug(f"执行命令: {' '.join(argv)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise RuntimeUnavailableError(
                f"无法执行容器运行时命令 {self.command}: {e}",
                command=self.command,
                cause=e
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            message = f"命令执行超时 ({timeout:g}秒): {' '.join(argv)}"
            if check:
                raise CommandError(message, ErrorCode.COMMAND_TIMEOUT, argv=argv, cause=e)
            # 读取类命令超时按失败的结果返回，由调用方按"未找到"处理
            self.logger.warning(message)
            return CommandResult(argv=argv, returncode=TIMEOUT_RETURNCODE, stderr=message)

        result = CommandResult(
            argv=argv,
            returncode=process.returncode,
            stdout=stdout.decode('utf-8', errors='replace').strip(),
            stderr=stderr.decode('utf-8', errors='replace').strip()
        )

        if not result.ok:
            self.logger.debug(f"命令返回 {result.returncode}: {result.stderr}")
            if check:
                raise CommandError(
                    f"命令执行失败 (退出码 {result.returncode}): {' '.join(argv)}",
                    argv=argv,
                    returncode=result.returncode,
                    stderr=result.stderr
                )

        return result

    async def list_services(self, name_filter: str) -> List[Tuple[str, str]]:
        """
        列出名称匹配过滤条件的编排服务

        过滤条件是前缀匹配，调用方需要自行比较完整名称。
        不是 swarm 管理节点时命令会失败，此时返回空列表。

        Returns:
            List[Tuple[str, str]]: (服务名, 副本比例) 列表
        """
        result = await self.run('service', 'ls', '--filter', f'name={name_filter}',
                                '--format', '{{.Name}}\t{{.Replicas}}')
        if not result.ok:
            return []

        services = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            name, _, replicas = line.partition('\t')
            services.append((name.strip(), replicas.strip()))
        return services

    async def get_service_replicas(self, name: str) -> Optional[str]:
        """获取服务的副本比例，服务不存在时返回 None"""
        for service_name, replicas in await self.list_services(name):
            if service_name == name:
                return replicas
        return None

    async def service_exists(self, name: str) -> bool:
        return await self.get_service_replicas(name) is not None

    async def list_containers(self, name_filter: str) -> List[str]:
        """列出名称包含过滤条件的运行中容器"""
        result = await self.run('ps', '--filter', f'name={name_filter}',
                                '--format', '{{.Names}}')
        if not result.ok:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    async def service_logs(self, name: str, tail: Optional[int] = None) -> CommandResult:
        return await self.run('service', 'logs', *self._tail_args(tail), name)

    async def container_logs(self, name: str, tail: Optional[int] = None) -> CommandResult:
        return await self.run('logs', *self._tail_args(tail), name)

    @staticmethod
    def _tail_args(tail: Optional[int]) -> List[str]:
        return ['--tail', str(tail)] if tail else []

    async def scale_service(self, name: str, replicas: int) -> CommandResult:
        return await self.run('service', 'scale', f'{name}={replicas}', check=True)

    async def force_update_service(self, name: str) -> CommandResult:
        return await self.run('service', 'update', '--force', name, check=True)

    async def restart_container(self, name: str) -> CommandResult:
        return await self.run('restart', name, check=True)

    async def prune_system(self) -> CommandResult:
        return await self.run('system', 'prune', '-a', '-f', timeout=self.cleanup_timeout)

    async def prune_builder(self) -> CommandResult:
        return await self.run('builder', 'prune', '-a', '-f', timeout=self.cleanup_timeout)

    async def prune_images(self) -> CommandResult:
        return await self.run('image', 'prune', '-a', '-f', timeout=self.cleanup_timeout)

    async def containers_table(self) -> CommandResult:
        return await self.run('ps', '--format', 'table {{.Names}}\t{{.Status}}\t{{.Ports}}')

    async def services_table(self) -> CommandResult:
        return await self.run('service', 'ls')
