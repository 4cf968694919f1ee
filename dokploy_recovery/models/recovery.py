"""诊断与修复相关的数据模型"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class ServiceKind(Enum):
    """服务的运行形态"""
    SERVICE = "service"      # 编排服务 (docker service)
    CONTAINER = "container"  # 独立容器
    MISSING = "missing"


class HealthStatus(Enum):
    """服务健康状态"""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    MISSING = "missing"


class ScanOutcome(Enum):
    """日志扫描结论"""
    NO_ISSUE = "no_issue"
    DATABASE_CONNECTION_ERROR = "database_connection_error"
    PROXY_CONFIG_ERROR = "proxy_config_error"


@dataclass
class CommandResult:
    """一次运行时命令的执行结果"""
    argv: List[str]
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """标准输出和标准错误合并后的文本"""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


@dataclass
class ServiceReport:
    """单个服务的检查结果"""
    name: str
    kind: ServiceKind
    health: HealthStatus
    replicas: Optional[str] = None
    containers: List[str] = field(default_factory=list)

    @property
    def is_problem(self) -> bool:
        return self.health != HealthStatus.HEALTHY


@dataclass
class InventoryReport:
    """服务清单检查结果"""
    services: List[ServiceReport] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def missing(self) -> List[ServiceReport]:
        return [s for s in self.services if s.health == HealthStatus.MISSING]

    @property
    def unhealthy(self) -> List[ServiceReport]:
        return [s for s in self.services if s.health == HealthStatus.UNHEALTHY]

    @property
    def problem_count(self) -> int:
        """缺失和不健康的服务总数"""
        return len(self.missing) + len(self.unhealthy)

    @property
    def is_healthy(self) -> bool:
        return self.problem_count == 0


@dataclass
class ScanResult:
    """日志扫描结果"""
    outcome: ScanOutcome
    signature: Optional[str] = None
    source: Optional[str] = None

    @property
    def has_issue(self) -> bool:
        return self.outcome != ScanOutcome.NO_ISSUE


@dataclass
class DiskUsageReport:
    """磁盘剩余空间检查结果"""
    path: str
    free_gb: int
    threshold_gb: int

    @property
    def is_low(self) -> bool:
        return self.free_gb < self.threshold_gb


@dataclass
class CleanupResult:
    """资源清理结果，returncode 为第一个失败命令的退出码"""
    commands: List[CommandResult] = field(default_factory=list)

    @property
    def returncode(self) -> int:
        for command in self.commands:
            if not command.ok:
                return command.returncode
        return 0

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class RemediationResult:
    """修复操作结果"""
    action: str
    target: str
    readiness_confirmed: bool = False
    elapsed: float = 0.0
    message: Optional[str] = None


@dataclass
class VerificationResult:
    """UI 可访问性检查结果"""
    url: str
    is_accessible: bool
    response_time: float
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class RecoveryReport:
    """一次完整恢复流程的结果"""
    disk: Optional[DiskUsageReport] = None
    cleanup: Optional[CleanupResult] = None
    inventory: Optional[InventoryReport] = None
    scan: Optional[ScanResult] = None
    remediation: Optional[RemediationResult] = None
    remediation_error: Optional[str] = None
    verification: Optional[VerificationResult] = None

    @property
    def success(self) -> bool:
        return self.verification is not None and self.verification.is_accessible
