"""运行配置数据模型

每个组件在构造时显式接收自己需要的配置段，不读取任何全局变量。
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..utils.polling import PollConfig

DEFAULT_REQUIRED_SERVICES = ('dokploy', 'dokploy-postgres', 'dokploy-redis', 'dokploy-traefik')
DEFAULT_DATABASE_SIGNATURES = ('ENOTFOUND dokploy-postgres',)
DEFAULT_PROXY_SIGNATURES = ('field not found', 'Error occurred during watcher callback')
DEFAULT_SUCCESS_STATUS = (200, 301, 302)


@dataclass(frozen=True)
class GeneralSettings:
    """全局设置（日志、颜色、交互提示）"""
    log_level: str = 'WARNING'
    log_file: Optional[str] = None
    max_log_size: int = 10 * 1024 * 1024
    log_backup_count: int = 5
    color: Optional[bool] = None  # None 表示根据终端自动判断
    assume_yes: bool = False


@dataclass(frozen=True)
class RuntimeSettings:
    """容器运行时命令行设置"""
    command: str = 'docker'
    command_timeout: float = 60.0
    cleanup_timeout: float = 600.0


@dataclass(frozen=True)
class ServiceSettings:
    """需要检查的服务"""
    required: Tuple[str, ...] = DEFAULT_REQUIRED_SERVICES
    primary: str = 'dokploy'
    proxy: str = 'dokploy-traefik'


@dataclass(frozen=True)
class DiskSettings:
    """磁盘空间检查设置"""
    path: str = '/'
    min_free_gb: int = 2


@dataclass(frozen=True)
class SignatureSettings:
    """日志错误特征"""
    database: Tuple[str, ...] = DEFAULT_DATABASE_SIGNATURES
    proxy: Tuple[str, ...] = DEFAULT_PROXY_SIGNATURES
    log_tail: Optional[int] = None


@dataclass(frozen=True)
class RemediationSettings:
    """修复后就绪等待设置"""
    readiness_timeout: float = 60.0
    poll_interval: float = 1.0
    backoff_multiplier: float = 2.0
    max_poll_interval: float = 10.0

    def poll_config(self) -> PollConfig:
        return PollConfig(
            timeout=self.readiness_timeout,
            base_delay=self.poll_interval,
            max_delay=self.max_poll_interval,
            backoff_multiplier=self.backoff_multiplier
        )


@dataclass(frozen=True)
class VerificationSettings:
    """UI 可访问性验证设置"""
    url: str = 'http://localhost:3000'
    success_status: Tuple[int, ...] = DEFAULT_SUCCESS_STATUS
    timeout: float = 10.0
    wait_timeout: float = 30.0
    poll_interval: float = 1.0

    def poll_config(self) -> PollConfig:
        return PollConfig(
            timeout=self.wait_timeout,
            base_delay=self.poll_interval,
            max_delay=max(self.poll_interval, 5.0)
        )


@dataclass(frozen=True)
class RecoveryConfig:
    """完整的运行配置"""
    general: GeneralSettings = field(default_factory=GeneralSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    services: ServiceSettings = field(default_factory=ServiceSettings)
    disk: DiskSettings = field(default_factory=DiskSettings)
    signatures: SignatureSettings = field(default_factory=SignatureSettings)
    remediation: RemediationSettings = field(default_factory=RemediationSettings)
    verification: VerificationSettings = field(default_factory=VerificationSettings)
