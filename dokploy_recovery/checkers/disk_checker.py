"""磁盘空间检查器"""

from typing import Optional

import psutil

from .base import BaseChecker
from ..models.config import DiskSettings
from ..models.recovery import DiskUsageReport
from ..utils.console import Console
from ..utils.exceptions import ConfigError

GIGABYTE = 1024 * 1024 * 1024


class DiskChecker(BaseChecker):
    """读取文件系统剩余空间，低于阈值时给出提示"""

    def __init__(self, settings: DiskSettings, console: Optional[Console] = None):
        super().__init__(console)
        self.settings = settings

    def read_free_space(self) -> int:
        """
        读取剩余空间

        Returns:
            int: 剩余空间（GB，向下取整）

        Raises:
            ConfigError: 路径不存在或无法访问
        """
        try:
            usage = psutil.disk_usage(self.settings.path)
        except OSError as e:
            raise ConfigError(f"无法读取磁盘空间: {self.settings.path} ({e})", cause=e)
        return int(usage.free // GIGABYTE)

    async def check(self) -> DiskUsageReport:
        """
        检查磁盘剩余空间

        Returns:
            DiskUsageReport: 检查结果
        """
        self.console.step("检查磁盘空间...")

        report = DiskUsageReport(
            path=self.settings.path,
            free_gb=self.read_free_space(),
            threshold_gb=self.settings.min_free_gb
        )
        self.logger.info(f"{report.path} 剩余空间 {report.free_gb}GB，阈值 {report.threshold_gb}GB")

        if report.is_low:
            self.console.error(f"磁盘空间不足 (剩余 {report.free_gb}GB)")
        else:
            self.console.success(f"磁盘空间充足 (剩余 {report.free_gb}GB)")

        return report
