"""服务清单检查器"""

import re
from typing import List, Optional, Tuple

from .base import BaseChecker
from ..models.config import ServiceSettings
from ..models.recovery import HealthStatus, InventoryReport, ServiceKind, ServiceReport
from ..services.docker_cli import DockerCLI
from ..utils.console import Console

_RATIO_PATTERN = re.compile(r'(\d+)/(\d+)')


def parse_replica_ratio(replicas: str) -> Optional[Tuple[int, int]]:
    """
    解析副本比例字符串

    Args:
        replicas: 形如 "1/1" 或 "3/3 (max 1 per node)" 的字符串

    Returns:
        Optional[Tuple[int, int]]: (运行中, 期望) ，无法解析时返回 None
    """
    match = _RATIO_PATTERN.search(replicas or '')
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def is_replicas_healthy(replicas: str) -> bool:
    """运行中的副本数等于期望值且期望值大于 0"""
    ratio = parse_replica_ratio(replicas)
    if ratio is None:
        return False
    running, desired = ratio
    return desired > 0 and running == desired


def matches_container(service: str, container_name: str) -> bool:
    """
    判断容器名是否属于该服务

    接受完全相同的名称、swarm 任务容器 (<服务>.<序号>.<id>)
    和 compose 副本 (<服务>-<序号>)。
    """
    if container_name == service:
        return True
    if container_name.startswith(f'{service}.'):
        return True
    return re.fullmatch(rf'{re.escape(service)}-\d+', container_name) is not None


class InventoryChecker(BaseChecker):
    """逐个检查必需的服务是否以编排服务或独立容器的形式运行"""

    def __init__(self, docker: DockerCLI, settings: ServiceSettings,
                 console: Optional[Console] = None):
        super().__init__(console)
        self.docker = docker
        self.settings = settings

    async def check_service(self, name: str) -> ServiceReport:
        """
        检查单个服务

        先按编排服务查找，找不到再按独立容器查找，每个服务只会得到一种结论。

        Args:
            name: 服务名称

        Returns:
            ServiceReport: 检查结果
        """
        replicas = await self.docker.get_service_replicas(name)
        if replicas is not None:
            health = HealthStatus.HEALTHY if is_replicas_healthy(replicas) else HealthStatus.UNHEALTHY
            return ServiceReport(name=name, kind=ServiceKind.SERVICE, health=health, replicas=replicas)

        containers: List[str] = [
            container for container in await self.docker.list_containers(name)
            if matches_container(name, container)
        ]
        if containers:
            return ServiceReport(name=name, kind=ServiceKind.CONTAINER,
                                 health=HealthStatus.HEALTHY, containers=containers)

        return ServiceReport(name=name, kind=ServiceKind.MISSING, health=HealthStatus.MISSING)

    async def check(self) -> InventoryReport:
        """
        检查所有必需的服务

        Returns:
            InventoryReport: 清单检查结果，problem_count 为缺失和不健康的服务数
        """
        self.console.step("检查容器状态...")

        inventory = InventoryReport()
        for name in self.settings.required:
            report = await self.check_service(name)
            inventory.services.append(report)
            self._print_report(report)

        self.logger.info(
            f"服务清单检查完成: {len(inventory.services)} 个服务，"
            f"{len(inventory.missing)} 个缺失，{len(inventory.unhealthy)} 个不健康")
        return inventory

    def _print_report(self, report: ServiceReport) -> None:
        if report.kind == ServiceKind.SERVICE:
            if report.health == HealthStatus.HEALTHY:
                self.console.success(f"{report.name} 服务运行正常")
            else:
                self.console.error(f"{report.name} 服务状态异常 ({report.replicas})")
        elif report.kind == ServiceKind.CONTAINER:
            self.console.success(f"{report.name} 容器运行中")
        else:
            self.console.error(f"{report.name} 未运行")
