"""测试公共夹具：内存中的容器运行时替身"""

import io
from typing import Dict, List, Optional

import pytest

from dokploy_recovery.models.config import (
    GeneralSettings, RecoveryConfig, RemediationSettings, VerificationSettings
)
from dokploy_recovery.models.recovery import CommandResult
from dokploy_recovery.utils.console import Console
from dokploy_recovery.utils.exceptions import CommandError

GB = 1024 * 1024 * 1024


class FakeDocker:
    """模拟 DockerCLI 的公开接口，记录所有调用

    缩容/扩容/重启立即生效，方便验证修复操作的顺序。
    """

    def __init__(self,
                 services: Optional[Dict[str, str]] = None,
                 containers: Optional[List[str]] = None,
                 service_logs: Optional[Dict[str, str]] = None,
                 container_logs: Optional[Dict[str, str]] = None,
                 available: bool = True):
        self.command = 'docker'
        self.services = dict(services or {})
        self.containers = list(containers or [])
        self.service_log_text = dict(service_logs or {})
        self.container_log_text = dict(container_logs or {})
        self.available = available
        self.prune_returncodes = {'system': 0, 'builder': 0, 'image': 0}
        self.failing = set()
        self.calls: List[tuple] = []

    def _result(self, argv, returncode=0, stdout='', stderr=''):
        return CommandResult(argv=['docker', *argv], returncode=returncode,
                             stdout=stdout, stderr=stderr)

    def _maybe_fail(self, name: str, argv: List[str]) -> None:
        if name in self.failing:
            raise CommandError(f"命令执行失败 (退出码 1): docker {' '.join(argv)}",
                               argv=['docker', *argv], returncode=1, stderr='boom')

    def is_available(self) -> bool:
        return self.available

    async def get_service_replicas(self, name: str) -> Optional[str]:
        return self.services.get(name)

    async def service_exists(self, name: str) -> bool:
        return name in self.services

    async def list_containers(self, name_filter: str) -> List[str]:
        return [c for c in self.containers if name_filter in c]

    async def service_logs(self, name: str, tail: Optional[int] = None) -> CommandResult:
        self.calls.append(('service_logs', name))
        if name in self.service_log_text:
            return self._result(['service', 'logs', name], stdout=self.service_log_text[name])
        return self._result(['service', 'logs', name], 1, stderr=f'Error: no such service: {name}')

    async def container_logs(self, name: str, tail: Optional[int] = None) -> CommandResult:
        self.calls.append(('container_logs', name))
        if name in self.container_log_text:
            return self._result(['logs', name], stderr=self.container_log_text[name])
        return self._result(['logs', name], 1, stderr=f'Error: No such container: {name}')

    async def scale_service(self, name: str, replicas: int) -> CommandResult:
        argv = ['service', 'scale', f'{name}={replicas}']
        self.calls.append(('scale', name, replicas))
        self._maybe_fail('scale', argv)
        self.services[name] = f'{replicas}/{replicas}'
        return self._result(argv)

    async def force_update_service(self, name: str) -> CommandResult:
        argv = ['service', 'update', '--force', name]
        self.calls.append(('force_update', name))
        self._maybe_fail('force_update', argv)
        self.services[name] = '1/1'
        return self._result(argv)

    async def restart_container(self, name: str) -> CommandResult:
        argv = ['restart', name]
        self.calls.append(('restart', name))
        self._maybe_fail('restart', argv)
        if name not in self.containers:
            self.containers.append(name)
        return self._result(argv)

    async def _prune(self, kind: str) -> CommandResult:
        self.calls.append(('prune', kind))
        returncode = self.prune_returncodes[kind]
        return self._result([kind, 'prune', '-a', '-f'], returncode,
                            stdout='Total reclaimed space: 0B',
                            stderr='' if returncode == 0 else 'prune failed')

    async def prune_system(self) -> CommandResult:
        return await self._prune('system')

    async def prune_builder(self) -> CommandResult:
        return await self._prune('builder')

    async def prune_images(self) -> CommandResult:
        return await self._prune('image')

    async def containers_table(self) -> CommandResult:
        lines = ['NAMES\tSTATUS\tPORTS'] + [f'{c}\tUp 2 hours\t' for c in self.containers]
        return self._result(['ps'], stdout='\n'.join(lines))

    async def services_table(self) -> CommandResult:
        lines = ['ID  NAME  MODE  REPLICAS'] + [
            f'x1  {name}  replicated  {replicas}' for name, replicas in self.services.items()]
        return self._result(['service', 'ls'], stdout='\n'.join(lines))


def healthy_deployment() -> FakeDocker:
    """标准 Dokploy 部署：三个编排服务加一个独立的 Traefik 容器"""
    return FakeDocker(
        services={'dokploy': '1/1', 'dokploy-postgres': '1/1', 'dokploy-redis': '1/1'},
        containers=['dokploy.1.abc123', 'dokploy-postgres.1.def456',
                    'dokploy-redis.1.ghi789', 'dokploy-traefik'],
        service_logs={'dokploy': 'Server listening on port 3000'},
        container_logs={'dokploy-traefik': 'Configuration loaded from flags.'}
    )


@pytest.fixture
def console():
    """输出到内存的控制台"""
    return Console(stream=io.StringIO(), color=False)


@pytest.fixture
def fake_docker():
    return healthy_deployment()


@pytest.fixture
def fast_config():
    """轮询间隔和超时都很短的配置，所有确认自动通过"""
    return RecoveryConfig(
        general=GeneralSettings(assume_yes=True),
        remediation=RemediationSettings(readiness_timeout=0.05, poll_interval=0.01,
                                        max_poll_interval=0.01),
        verification=VerificationSettings(wait_timeout=0.05, poll_interval=0.01)
    )
