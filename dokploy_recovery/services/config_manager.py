"""配置管理器"""

import os
from dataclasses import replace
from typing import Dict, Any, Optional

import yaml

from ..models.config import (
    RecoveryConfig, GeneralSettings, RuntimeSettings, ServiceSettings,
    DiskSettings, SignatureSettings, RemediationSettings, VerificationSettings
)
from ..utils.config_validator import ConfigValidator
from ..utils.exceptions import ConfigError, ErrorCode
from ..utils.log_manager import get_logger

# 配置段名称 -> (验证函数, 数据类, RecoveryConfig 字段名)
_SECTIONS: Dict[str, tuple] = {
    'global': (ConfigValidator.validate_global_config, GeneralSettings, 'general'),
    'runtime': (ConfigValidator.validate_runtime_config, RuntimeSettings, 'runtime'),
    'services': (ConfigValidator.validate_services_config, ServiceSettings, 'services'),
    'disk': (ConfigValidator.validate_disk_config, DiskSettings, 'disk'),
    'signatures': (ConfigValidator.validate_signatures_config, SignatureSettings, 'signatures'),
    'remediation': (ConfigValidator.validate_remediation_config, RemediationSettings, 'remediation'),
    'verification': (ConfigValidator.validate_verification_config, VerificationSettings, 'verification'),
}


class ConfigManager:
    """配置管理器，负责YAML配置文件的加载、验证和转换

    没有配置文件时使用内置默认值（Dokploy 的标准部署）。
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        初始化配置管理器

        Args:
            config_path: 配置文件路径，None 表示只使用默认值
        """
        self.config_path = config_path
        self.raw_config: Dict[str, Any] = {}
        self.config: Optional[RecoveryConfig] = None
        self.logger = get_logger('config_manager')

    def load_config(self) -> RecoveryConfig:
        """
        加载配置

        Returns:
            RecoveryConfig: 配置对象

        Raises:
            ConfigError: 配置加载或验证失败
        """
        if self.config_path is None:
            self.logger.debug("未指定配置文件，使用默认配置")
            self.raw_config = {}
            self.config = RecoveryConfig()
            return self.config

        self.logger.info(f"开始加载配置文件: {self.config_path}")

        if not os.path.exists(self.config_path):
            self.logger.error(f"配置文件不存在: {self.config_path}")
            raise ConfigError(f"配置文件不存在: {self.config_path}",
                              ErrorCode.CONFIG_FILE_NOT_FOUND,
                              config_path=self.config_path)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as file:
                raw = yaml.safe_load(file)
        except yaml.YAMLError as e:
            self.logger.error(f"YAML格式错误: {e}")
            raise ConfigError(f"YAML格式错误: {e}", ErrorCode.CONFIG_PARSE_ERROR,
                              config_path=self.config_path, cause=e)
        except PermissionError as e:
            self.logger.error(f"没有权限读取配置文件: {self.config_path}")
            raise ConfigError(f"没有权限读取配置文件: {self.config_path}",
                              ErrorCode.CONFIG_FILE_NOT_FOUND,
                              config_path=self.config_path, cause=e)

        # 空文件等同于全部使用默认值
        if raw is None:
            raw = {}

        self._validate_config(raw)
        self.raw_config = raw
        self.config = self._build_config(raw)

        self.logger.info(
            f"配置验证成功，检查 {len(self.config.services.required)} 个服务，"
            f"UI 地址 {self.config.verification.url}")
        return self.config

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """
        验证配置文件内容

        Raises:
            ConfigError: 配置验证失败
        """
        if not isinstance(config, dict):
            raise ConfigError("配置文件根节点必须是字典类型", config_path=self.config_path)

        unknown = set(config.keys()) - set(_SECTIONS.keys())
        if unknown:
            raise ConfigError(f"未知的配置段: {', '.join(sorted(unknown))}",
                              config_path=self.config_path)

        for section, (validate, _, _) in _SECTIONS.items():
            if config.get(section) is not None:
                validate(config[section])

        # primary/proxy 使用默认值时也必须在 required 列表中
        services = config.get('services') or {}
        required = services.get('required', list(ServiceSettings.required))
        for key in ('primary', 'proxy'):
            value = services.get(key, getattr(ServiceSettings, key))
            if value not in required:
                raise ConfigError(f"services.{key} '{value}' 不在 services.required 列表中",
                                  config_path=self.config_path)

    def _build_config(self, config: Dict[str, Any]) -> RecoveryConfig:
        """把原始字典转换为配置对象"""
        sections = {}
        for section, (_, settings_class, field_name) in _SECTIONS.items():
            data = dict(config.get(section) or {})
            unknown = set(data.keys()) - set(settings_class.__dataclass_fields__.keys())
            if unknown:
                raise ConfigError(f"{section} 配置中存在未知的配置项: {', '.join(sorted(unknown))}",
                                  config_path=self.config_path)
            if data.get('color') == 'auto':
                data['color'] = None
            # 列表统一转换为元组，保持配置对象不可变
            for key, value in data.items():
                if isinstance(value, list):
                    data[key] = tuple(value)
            sections[field_name] = settings_class(**data)
        return RecoveryConfig(**sections)

    @staticmethod
    def apply_overrides(config: RecoveryConfig, **overrides: Any) -> RecoveryConfig:
        """
        用命令行参数覆盖全局设置

        值为 None 的参数不覆盖配置文件中的设置。

        Args:
            config: 原配置
            overrides: GeneralSettings 中的字段

        Returns:
            RecoveryConfig: 新的配置对象
        """
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return config
        return replace(config, general=replace(config.general, **changes))

