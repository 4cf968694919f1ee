"""诊断检查器模块"""

from .base import BaseChecker
from .disk_checker import DiskChecker
from .environment_checker import EnvironmentChecker
from .inventory_checker import InventoryChecker
from .log_scanner import LogScanChecker
from .ui_checker import UIChecker

__all__ = ['BaseChecker', 'DiskChecker', 'EnvironmentChecker',
           'InventoryChecker', 'LogScanChecker', 'UIChecker']
