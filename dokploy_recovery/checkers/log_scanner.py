"""日志错误特征扫描"""

from typing import Iterable, Optional

from .base import BaseChecker
from ..models.config import ServiceSettings, SignatureSettings
from ..models.recovery import CommandResult, ScanOutcome, ScanResult
from ..services.docker_cli import DockerCLI
from ..utils.console import Console


def find_signature(text: str, signatures: Iterable[str]) -> Optional[str]:
    """
    在日志文本中查找第一个出现的错误特征

    Args:
        text: 日志文本
        signatures: 字面量特征字符串

    Returns:
        Optional[str]: 命中的特征，未命中返回 None
    """
    for signature in signatures:
        if signature in text:
            return signature
    return None


class LogScanChecker(BaseChecker):
    """扫描主服务和反向代理的日志，判断属于哪一类已知故障

    先检查数据库连接错误，命中后直接返回，不再读取代理日志；
    两种特征同时存在时以数据库问题为准。
    """

    def __init__(self, docker: DockerCLI, services: ServiceSettings,
                 signatures: SignatureSettings, console: Optional[Console] = None):
        super().__init__(console)
        self.docker = docker
        self.services = services
        self.signatures = signatures

    async def check(self) -> ScanResult:
        """
        扫描日志

        Returns:
            ScanResult: 扫描结论
        """
        self.console.step("检查容器日志中的常见问题...")

        primary = self.services.primary
        primary_logs = await self.docker.service_logs(primary, self.signatures.log_tail)
        self._log_read_failure(primary, primary_logs)
        signature = find_signature(primary_logs.output, self.signatures.database)
        if signature:
            self.logger.warning(f"{primary} 日志中发现特征: {signature}")
            self.console.error("在 Dokploy 日志中检测到数据库连接问题")
            return ScanResult(ScanOutcome.DATABASE_CONNECTION_ERROR, signature, primary)

        proxy = self.services.proxy
        proxy_logs = await self._read_proxy_logs(proxy)
        signature = find_signature(proxy_logs.output, self.signatures.proxy)
        if signature:
            self.logger.warning(f"{proxy} 日志中发现特征: {signature}")
            self.console.error("检测到 Traefik 配置问题")
            return ScanResult(ScanOutcome.PROXY_CONFIG_ERROR, signature, proxy)

        self.console.success("日志中未发现明显问题")
        return ScanResult(ScanOutcome.NO_ISSUE)

    async def _read_proxy_logs(self, proxy: str) -> CommandResult:
        """代理通常是独立容器，找不到容器时改读同名服务的日志"""
        result = await self.docker.container_logs(proxy, self.signatures.log_tail)
        if result.ok:
            return result
        self.logger.debug(f"读取容器 {proxy} 日志失败，尝试读取服务日志")
        result = await self.docker.service_logs(proxy, self.signatures.log_tail)
        self._log_read_failure(proxy, result)
        return result

    def _log_read_failure(self, name: str, result: CommandResult) -> None:
        if not result.ok:
            self.logger.info(f"无法读取 {name} 的日志 (退出码 {result.returncode})，按未发现问题处理")
