"""
恢复流程

按固定顺序串联各个步骤：环境检查 → 磁盘空间 → 服务清单 →
日志扫描 → 修复 → UI 验证。每一步都是一次独立的调用，
步骤之间只通过返回的结果对象传递信息。
"""

import re
import socket
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import psutil

from .cleaner import ResourceCleaner
from .docker_cli import DockerCLI
from .remediator import Remediator
from ..checkers.disk_checker import DiskChecker
from ..checkers.environment_checker import EnvironmentChecker
from ..checkers.inventory_checker import InventoryChecker
from ..checkers.log_scanner import LogScanChecker
from ..checkers.ui_checker import UIChecker
from ..models.config import RecoveryConfig
from ..models.recovery import (
    CleanupResult, DiskUsageReport, InventoryReport, RecoveryReport
)
from ..utils.console import Console
from ..utils.exceptions import RemediationError, RuntimeUnavailableError
from ..utils.log_manager import get_logger

# show_status 中保留的容器行
STATUS_PATTERN = re.compile(r'dokploy|traefik|postgres|redis')


def primary_ipv4_address() -> Optional[str]:
    """返回第一个非回环的 IPv4 地址"""
    for addresses in psutil.net_if_addrs().values():
        for address in addresses:
            if address.family == socket.AF_INET and not address.address.startswith('127.'):
                return address.address
    return None


def replace_host(url: str, host: str) -> str:
    """把 URL 中的主机名替换为指定地址，保留端口"""
    parts = urlsplit(url)
    netloc = f"{host}:{parts.port}" if parts.port else host
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class RecoveryPipeline:
    """Dokploy 健康检查与恢复流程"""

    def __init__(self, config: RecoveryConfig,
                 docker: Optional[DockerCLI] = None,
                 console: Optional[Console] = None,
                 confirm: Optional[Callable[[str], bool]] = None,
                 host_address: Callable[[], Optional[str]] = primary_ipv4_address):
        """
        初始化恢复流程

        Args:
            config: 运行配置
            docker: 运行时命令行适配器，默认按配置创建
            console: 面向操作员的输出
            confirm: 是/否确认函数，默认从终端读取
            host_address: 获取本机地址的函数，用于失败时的提示
        """
        self.config = config
        self.console = console or Console(color=config.general.color)
        self.docker = docker or DockerCLI(config.runtime)
        self.confirm = confirm or self.console.confirm
        self.host_address = host_address
        self.logger = get_logger('pipeline')

        self.environment_checker = EnvironmentChecker(self.docker, self.console)
        self.disk_checker = DiskChecker(config.disk, self.console)
        self.inventory_checker = InventoryChecker(self.docker, config.services, self.console)
        self.log_scanner = LogScanChecker(self.docker, config.services, config.signatures,
                                          self.console)
        self.ui_checker = UIChecker(config.verification, self.console)
        self.cleaner = ResourceCleaner(self.docker, self.console)
        self.remediator = Remediator(self.docker, config.services, config.remediation,
                                     self.console)

    async def ensure_runtime(self) -> None:
        """
        确认容器运行时可用

        Raises:
            RuntimeUnavailableError: 运行时不可用，整个流程无法继续
        """
        if not await self.environment_checker.check():
            raise RuntimeUnavailableError("Docker 未安装或不在 PATH 中",
                                          command=self.docker.command)

    def _confirm(self, question: str) -> bool:
        if self.config.general.assume_yes:
            self.console.info(f"{question} 自动确认")
            return True
        return self.confirm(question)

    async def check_disk_space(self) -> Tuple[DiskUsageReport, Optional[CleanupResult]]:
        """
        检查磁盘空间，不足时询问一次是否清理

        Returns:
            Tuple[DiskUsageReport, Optional[CleanupResult]]: 检查结果和清理结果
        """
        report = await self.disk_checker.check()
        if not report.is_low:
            return report, None

        if self._confirm("是否运行 Docker 清理以释放空间?"):
            return report, await self.cleaner.cleanup()

        self.console.info("跳过清理，请考虑手动释放磁盘空间")
        return report, None

    async def check_only(self) -> InventoryReport:
        """只执行服务清单检查"""
        inventory = await self.inventory_checker.check()
        if inventory.is_healthy:
            self.console.success("所有必需的服务都在运行")
        else:
            self.console.info(f"共发现 {inventory.problem_count} 个问题")
        return inventory

    async def cleanup(self) -> CleanupResult:
        return await self.cleaner.cleanup()

    async def run_full_check(self) -> RecoveryReport:
        """
        执行完整的诊断和修复流程

        Returns:
            RecoveryReport: 本次运行的全部结果

        Raises:
            RuntimeUnavailableError: 容器运行时不可用
        """
        self.console.header("Dokploy 健康检查与恢复")
        report = RecoveryReport()

        await self.ensure_runtime()
        report.disk, report.cleanup = await self.check_disk_space()

        report.inventory = await self.inventory_checker.check()
        if not report.inventory.is_healthy:
            self.console.info("部分容器运行不正常")

        report.scan = await self.log_scanner.check()
        if report.scan.has_issue:
            try:
                report.remediation = await self.remediator.remediate(report.scan)
            except RemediationError as e:
                self.logger.error(e.format_error())
                self.console.error(e.message)
                report.remediation_error = e.message
        elif not report.inventory.is_healthy:
            self._print_manual_guidance(report.inventory)

        self.console.line()
        self.console.step("最终验证...")
        report.verification = await self.ui_checker.wait_until_accessible()
        self.ui_checker.report(report.verification)

        if report.verification.is_accessible:
            self.console.success("Dokploy 恢复完成!")
        else:
            self._print_failure_help()

        self.logger.info(
            f"恢复流程结束: 问题数={report.inventory.problem_count}, "
            f"日志结论={report.scan.outcome.value}, UI可访问={report.success}")
        return report

    def _print_manual_guidance(self, inventory: InventoryReport) -> None:
        """检测到问题但没有匹配的日志特征，不做自动修复"""
        self.console.info("检测到问题，但日志中没有已知的错误特征，需要人工处理:")
        for service in inventory.services:
            if not service.is_problem:
                continue
            self.console.line(f"  - {service.name}: {service.health.value}")

    def _print_failure_help(self) -> None:
        url = self.config.verification.url
        command = self.docker.command

        self.console.error("UI 仍然无法访问，可能需要人工介入。")
        self.console.line()
        self.console.info("尝试访问以下地址:")
        self.console.line(f"  - {url}")
        address = self.host_address()
        if address:
            self.console.line(f"  - {replace_host(url, address)}")
        self.console.line()
        self.console.info("手动检查日志:")
        self.console.line(f"  {command} service logs {self.config.services.primary}")
        self.console.line(f"  {command} logs {self.config.services.proxy}")

    async def show_status(self) -> None:
        """列出相关的容器和服务（只读）"""
        self.console.step("当前系统状态:")
        self.console.line()
        self.console.line("运行中的容器/服务:")

        table = await self.docker.containers_table()
        lines: List[str] = table.stdout.splitlines() if table.ok else []
        if lines:
            self.console.line(lines[0])
            for line in lines[1:]:
                if STATUS_PATTERN.search(line):
                    self.console.line(line)

        self.console.line()
        services = await self.docker.services_table()
        matching = [line for line in services.stdout.splitlines() if 'dokploy' in line] \
            if services.ok else []
        if matching:
            for line in matching:
                self.console.line(line)
        else:
            self.console.line("未找到 Dokploy 服务")
