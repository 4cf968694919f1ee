"""自定义异常类和错误处理系统"""

import traceback
from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import datetime


class ErrorCode(Enum):
    """错误代码枚举"""
    # 通用错误 (1000-1999)
    UNKNOWN_ERROR = 1000

    # 配置错误 (2000-2999)
    CONFIG_FILE_NOT_FOUND = 2000
    CONFIG_PARSE_ERROR = 2001
    CONFIG_VALIDATION_ERROR = 2002

    # 容器运行时错误 (3000-3999)
    RUNTIME_UNAVAILABLE = 3000
    COMMAND_FAILED = 3001
    COMMAND_TIMEOUT = 3002

    # 修复错误 (4000-4999)
    REMEDIATION_FAILED = 4000


class RecoveryError(Exception):
    """恢复工具基础异常类"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.recoverable = recoverable
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            'error_code': self.error_code.value,
            'error_name': self.error_code.name,
            'message': self.message,
            'details': self.details,
            'recoverable': self.recoverable,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
            'traceback': traceback.format_exc() if self.cause else None
        }

    def format_error(self) -> str:
        """格式化错误信息"""
        error_msg = f"[{self.error_code.name}] {self.message}"
        if self.details:
            details_str = ", ".join([f"{k}={v}" for k, v in self.details.items()])
            error_msg += f" (详情: {details_str})"
        if self.cause:
            error_msg += f" (原因: {str(self.cause)})"
        return error_msg


class ConfigError(RecoveryError):
    """配置相关异常"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_VALIDATION_ERROR,
        config_path: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if config_path:
            details['config_path'] = config_path
        kwargs.setdefault('recoverable', False)
        super().__init__(message, error_code, details, **kwargs)


class RuntimeUnavailableError(RecoveryError):
    """容器运行时不可用（致命的前置条件失败）"""

    def __init__(self, message: str, command: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if command:
            details['command'] = command
        super().__init__(
            message,
            ErrorCode.RUNTIME_UNAVAILABLE,
            details,
            recoverable=False,
            **kwargs
        )


class CommandError(RecoveryError):
    """容器运行时命令执行失败"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.COMMAND_FAILED,
        argv: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if argv:
            details['command'] = ' '.join(argv)
        if returncode is not None:
            details['returncode'] = returncode
        super().__init__(message, error_code, details, **kwargs)
        self.argv = argv or []
        self.returncode = returncode
        self.stderr = stderr or ''


class RemediationError(RecoveryError):
    """修复操作失败"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.REMEDIATION_FAILED,
        action: Optional[str] = None,
        target: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if action:
            details['action'] = action
        if target:
            details['target'] = target
        super().__init__(message, error_code, details, **kwargs)

