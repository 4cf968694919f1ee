"""数据模型模块"""

from .config import RecoveryConfig
from .recovery import (
    ServiceKind, HealthStatus, ScanOutcome, CommandResult, ServiceReport,
    InventoryReport, ScanResult, DiskUsageReport, CleanupResult,
    RemediationResult, VerificationResult, RecoveryReport
)

__all__ = ['RecoveryConfig', 'ServiceKind', 'HealthStatus', 'ScanOutcome',
           'CommandResult', 'ServiceReport', 'InventoryReport', 'ScanResult',
           'DiskUsageReport', 'CleanupResult', 'RemediationResult',
           'VerificationResult', 'RecoveryReport']
