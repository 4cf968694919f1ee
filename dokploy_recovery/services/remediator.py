"""已知故障的修复操作"""

import time
from typing import Optional

from .docker_cli import DockerCLI
from ..checkers.inventory_checker import is_replicas_healthy, matches_container, parse_replica_ratio
from ..models.config import RemediationSettings, ServiceSettings
from ..models.recovery import RemediationResult, ScanOutcome, ScanResult
from ..utils.console import Console
from ..utils.exceptions import CommandError, RemediationError
from ..utils.log_manager import get_logger
from ..utils.polling import wait_until

ACTION_RESTART_PRIMARY = 'restart_primary_service'
ACTION_RESTART_PROXY = 'restart_proxy'


class Remediator:
    """根据日志扫描结论执行对应的修复

    每个修复操作在发出命令后轮询运行时状态，直到就绪或超时，
    而不是固定等待若干秒。超时只记录在结果中，不视为失败；
    命令本身失败时抛出 RemediationError。
    """

    def __init__(self, docker: DockerCLI, services: ServiceSettings,
                 settings: RemediationSettings, console: Optional[Console] = None):
        self.docker = docker
        self.services = services
        self.settings = settings
        self.console = console or Console()
        self.logger = get_logger('remediator')

    async def remediate(self, scan: ScanResult) -> Optional[RemediationResult]:
        """
        按扫描结论分派修复操作

        Args:
            scan: 日志扫描结果

        Returns:
            Optional[RemediationResult]: 修复结果，没有问题时返回 None
        """
        if scan.outcome == ScanOutcome.DATABASE_CONNECTION_ERROR:
            self.console.info("尝试修复数据库连接...")
            return await self.fix_database_connection()
        if scan.outcome == ScanOutcome.PROXY_CONFIG_ERROR:
            self.console.info("尝试修复 Traefik 配置...")
            return await self.fix_proxy_config()
        return None

    async def fix_database_connection(self) -> RemediationResult:
        """
        重启主服务：先缩容到 0，确认停止后再扩容到 1

        Returns:
            RemediationResult: 修复结果

        Raises:
            RemediationError: 缩容或扩容命令失败
        """
        primary = self.services.primary
        poll_config = self.settings.poll_config()
        start_time = time.monotonic()

        self.console.step("修复数据库连接问题...")
        try:
            self.console.line(f"将 {primary} 服务缩容到 0...")
            await self.docker.scale_service(primary, 0)

            self.console.line("等待服务停止...")
            stopped = await wait_until(lambda: self._is_stopped(primary), poll_config,
                                       f"{primary} 停止")
            if not stopped.ready:
                self.console.info(f"{primary} 未在 {poll_config.timeout:.0f} 秒内完全停止，继续扩容")

            self.console.line(f"将 {primary} 服务扩容到 1...")
            await self.docker.scale_service(primary, 1)

            self.console.line("等待服务启动...")
            started = await wait_until(lambda: self._is_service_ready(primary), poll_config,
                                       f"{primary} 启动")
        except CommandError as e:
            self.logger.error(e.format_error())
            raise RemediationError(f"重启 {primary} 服务失败: {e.message}",
                                   action=ACTION_RESTART_PRIMARY, target=primary, cause=e)

        if started.ready:
            self.console.success("Dokploy 服务已重启")
            message = None
        else:
            message = f"{primary} 在 {poll_config.timeout:.0f} 秒内未恢复到期望副本数"
            self.console.error(message)

        return RemediationResult(
            action=ACTION_RESTART_PRIMARY,
            target=primary,
            readiness_confirmed=stopped.ready and started.ready,
            elapsed=time.monotonic() - start_time,
            message=message
        )

    async def fix_proxy_config(self) -> RemediationResult:
        """
        重启反向代理：编排服务用强制滚动更新，独立容器直接重启

        Returns:
            RemediationResult: 修复结果

        Raises:
            RemediationError: 更新或重启命令失败
        """
        proxy = self.services.proxy
        poll_config = self.settings.poll_config()
        start_time = time.monotonic()

        self.console.step("修复 Traefik 配置...")
        self.console.line("重启 Traefik 容器...")
        try:
            is_service = await self.docker.service_exists(proxy)
            if is_service:
                await self.docker.force_update_service(proxy)
                ready_check = lambda: self._is_service_ready(proxy)
            else:
                await self.docker.restart_container(proxy)
                ready_check = lambda: self._is_container_running(proxy)

            self.console.line("等待 Traefik 重启...")
            ready = await wait_until(ready_check, poll_config, f"{proxy} 重启")
        except CommandError as e:
            self.logger.error(e.format_error())
            raise RemediationError(f"重启 {proxy} 失败: {e.message}",
                                   action=ACTION_RESTART_PROXY, target=proxy, cause=e)

        if ready.ready:
            self.console.success("Traefik 已重启")
            message = None
        else:
            message = f"{proxy} 在 {poll_config.timeout:.0f} 秒内未恢复运行"
            self.console.error(message)

        return RemediationResult(
            action=ACTION_RESTART_PROXY,
            target=proxy,
            readiness_confirmed=ready.ready,
            elapsed=time.monotonic() - start_time,
            message=message
        )

    async def _is_stopped(self, name: str) -> bool:
        replicas = await self.docker.get_service_replicas(name)
        if replicas is None:
            return True
        ratio = parse_replica_ratio(replicas)
        return ratio is not None and ratio[0] == 0

    async def _is_service_ready(self, name: str) -> bool:
        replicas = await self.docker.get_service_replicas(name)
        return replicas is not None and is_replicas_healthy(replicas)

    async def _is_container_running(self, name: str) -> bool:
        containers = await self.docker.list_containers(name)
        return any(matches_container(name, container) for container in containers)
