"""配置验证工具"""

import os
from typing import Dict, Any, List

from .exceptions import ConfigError

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _require_dict(section: str, value: Any) -> None:
    if not isinstance(value, dict):
        raise ConfigError(f"{section} 配置必须是字典类型")


def _require_positive_number(section: str, key: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{section}.{key} 必须是正数")


def _require_string_list(section: str, key: str, value: Any) -> None:
    if not isinstance(value, list) or not value:
        raise ConfigError(f"{section}.{key} 必须是非空列表")
    for item in value:
        if not isinstance(item, str) or not item:
            raise ConfigError(f"{section}.{key} 只能包含非空字符串")


class ConfigValidator:
    """配置验证器"""

    @staticmethod
    def validate_global_config(global_config: Dict[str, Any]) -> None:
        """
        验证全局配置

        Args:
            global_config: 全局配置

        Raises:
            ConfigError: 配置验证失败
        """
        _require_dict('global', global_config)

        log_level = global_config.get('log_level')
        if log_level is not None and str(log_level).upper() not in VALID_LOG_LEVELS:
            raise ConfigError(f"log_level 必须是以下值之一: {VALID_LOG_LEVELS}")

        log_file = global_config.get('log_file')
        if log_file is not None and not isinstance(log_file, str):
            raise ConfigError("log_file 必须是字符串")

        for key in ('max_log_size', 'log_backup_count'):
            value = global_config.get(key)
            if value is not None and (not isinstance(value, int) or isinstance(value, bool) or value < 0):
                raise ConfigError(f"{key} 必须是非负整数")

        color = global_config.get('color')
        if color is not None and color != 'auto' and not isinstance(color, bool):
            raise ConfigError("color 必须是 true、false 或 auto")

    @staticmethod
    def validate_runtime_config(runtime_config: Dict[str, Any]) -> None:
        """验证容器运行时配置"""
        _require_dict('runtime', runtime_config)

        command = runtime_config.get('command')
        if command is not None and (not isinstance(command, str) or not command.strip()):
            raise ConfigError("runtime.command 必须是非空字符串")

        for key in ('command_timeout', 'cleanup_timeout'):
            if key in runtime_config:
                _require_positive_number('runtime', key, runtime_config[key])

    @staticmethod
    def validate_services_config(services_config: Dict[str, Any]) -> None:
        """
        验证服务配置

        primary 和 proxy 必须出现在 required 列表中。

        Raises:
            ConfigError: 配置验证失败
        """
        _require_dict('services', services_config)

        required: List[str] = services_config.get('required')
        if required is not None:
            _require_string_list('services', 'required', required)
            if len(set(required)) != len(required):
                raise ConfigError("services.required 中存在重复的服务名称")

        for key in ('primary', 'proxy'):
            value = services_config.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value:
                raise ConfigError(f"services.{key} 必须是非空字符串")
            if required is not None and value not in required:
                raise ConfigError(f"services.{key} '{value}' 不在 services.required 列表中")

    @staticmethod
    def validate_disk_config(disk_config: Dict[str, Any]) -> None:
        """验证磁盘检查配置"""
        _require_dict('disk', disk_config)

        path = disk_config.get('path')
        if path is not None and (not isinstance(path, str) or not path):
            raise ConfigError("disk.path 必须是非空字符串")
        if path is not None and not os.path.isdir(path):
            raise ConfigError(f"disk.path 不存在或不是目录: {path}")

        min_free_gb = disk_config.get('min_free_gb')
        if min_free_gb is not None:
            if not isinstance(min_free_gb, int) or isinstance(min_free_gb, bool) or min_free_gb < 0:
                raise ConfigError("disk.min_free_gb 必须是非负整数")

    @staticmethod
    def validate_signatures_config(signatures_config: Dict[str, Any]) -> None:
        """验证日志特征配置"""
        _require_dict('signatures', signatures_config)

        for key in ('database', 'proxy'):
            if key in signatures_config:
                _require_string_list('signatures', key, signatures_config[key])

        log_tail = signatures_config.get('log_tail')
        if log_tail is not None:
            if not isinstance(log_tail, int) or isinstance(log_tail, bool) or log_tail <= 0:
                raise ConfigError("signatures.log_tail 必须是正整数")

    @staticmethod
    def validate_remediation_config(remediation_config: Dict[str, Any]) -> None:
        """验证修复配置"""
        _require_dict('remediation', remediation_config)

        for key in ('readiness_timeout', 'poll_interval', 'max_poll_interval'):
            if key in remediation_config:
                _require_positive_number('remediation', key, remediation_config[key])

        multiplier = remediation_config.get('backoff_multiplier')
        if multiplier is not None:
            _require_positive_number('remediation', 'backoff_multiplier', multiplier)
            if multiplier < 1:
                raise ConfigError("remediation.backoff_multiplier 不能小于 1")

    @staticmethod
    def validate_verification_config(verification_config: Dict[str, Any]) -> None:
        """
        验证 UI 访问检查配置

        Raises:
            ConfigError: 配置验证失败
        """
        _require_dict('verification', verification_config)

        url = verification_config.get('url')
        if url is not None:
            if not isinstance(url, str) or not url.startswith(('http://', 'https://')):
                raise ConfigError("verification.url 必须是 http:// 或 https:// 开头的地址")

        success_status = verification_config.get('success_status')
        if success_status is not None:
            if not isinstance(success_status, list) or not success_status:
                raise ConfigError("verification.success_status 必须是非空列表")
            for status in success_status:
                if not isinstance(status, int) or isinstance(status, bool) or status < 100 or status > 599:
                    raise ConfigError(f"verification.success_status 包含无效的状态码: {status}")

        for key in ('timeout', 'wait_timeout', 'poll_interval'):
            if key in verification_config:
                _require_positive_number('verification', key, verification_config[key])
