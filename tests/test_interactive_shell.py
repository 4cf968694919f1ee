"""交互式菜单测试"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from dokploy_recovery.services.interactive_shell import InteractiveShell, ShellState
from dokploy_recovery.services.recovery_pipeline import RecoveryPipeline
from dokploy_recovery.utils.exceptions import RemediationError


def scripted_input(*answers):
    """按顺序返回给定输入，用完后模拟输入结束"""
    iterator = iter(answers)

    def read(prompt):
        try:
            return next(iterator)
        except StopIteration:
            raise EOFError
    return read


class TestInteractiveShell:
    """测试InteractiveShell类"""

    def _shell(self, fast_config, fake_docker, console, *answers):
        pipeline = RecoveryPipeline(fast_config, docker=fake_docker, console=console)
        return InteractiveShell(pipeline, input_func=scripted_input(*answers))

    def test_menu_lists_all_items(self, fast_config, fake_docker, console):
        shell = self._shell(fast_config, fake_docker, console)

        shell.show_menu()

        output = console.stream.getvalue()
        for key in '1234567':
            assert f"{key}) " in output
        assert "8) 退出" in output

    @pytest.mark.asyncio
    async def test_exit(self, fast_config, fake_docker, console):
        """测试选择 8 退出"""
        shell = self._shell(fast_config, fake_docker, console, '8')

        await shell.run()

        assert shell.state == ShellState.EXITED
        assert "再见!" in console.stream.getvalue()

    @pytest.mark.asyncio
    async def test_invalid_choice_returns_to_menu(self, fast_config, fake_docker, console):
        """测试无效选项不执行任何操作"""
        shell = self._shell(fast_config, fake_docker, console, '9', 'x', '8')

        await shell.run()

        output = console.stream.getvalue()
        assert output.count("无效的选择，请重试。") == 2
        assert fake_docker.calls == []

    @pytest.mark.asyncio
    async def test_end_of_input_exits(self, fast_config, fake_docker, console):
        """测试输入结束时退出"""
        shell = self._shell(fast_config, fake_docker, console)

        state = await shell.step()

        assert state == ShellState.EXITED

    @pytest.mark.asyncio
    async def test_dispatch_cleanup(self, fast_config, fake_docker, console):
        """测试选项 3 执行清理"""
        shell = self._shell(fast_config, fake_docker, console)

        state = await shell.dispatch('3')

        assert state == ShellState.IDLE
        assert ('prune', 'system') in fake_docker.calls

    @pytest.mark.asyncio
    async def test_dispatch_restart_primary(self, fast_config, fake_docker, console):
        """测试选项 4 重启主服务"""
        shell = self._shell(fast_config, fake_docker, console)

        await shell.dispatch(' 4 ')

        assert [c for c in fake_docker.calls if c[0] == 'scale'] == [
            ('scale', 'dokploy', 0), ('scale', 'dokploy', 1)]

    @pytest.mark.asyncio
    async def test_dispatch_restart_proxy(self, fast_config, fake_docker, console):
        shell = self._shell(fast_config, fake_docker, console)

        await shell.dispatch('5')

        assert ('restart', 'dokploy-traefik') in fake_docker.calls

    @pytest.mark.asyncio
    async def test_action_error_keeps_menu_running(self, fast_config, fake_docker, console):
        """测试选项执行失败后菜单继续运行"""
        fake_docker.failing.add('restart')
        shell = self._shell(fast_config, fake_docker, console, '5', '8')

        await shell.run()

        output = console.stream.getvalue()
        assert "重启 dokploy-traefik 失败" in output
        assert "再见!" in output

    @pytest.mark.asyncio
    async def test_dispatch_ui_test(self, fast_config, fake_docker, console):
        """测试选项 7 只探测一次 UI"""
        shell = self._shell(fast_config, fake_docker, console)
        probe = AsyncMock(return_value=Mock(is_accessible=True, url='http://localhost:3000'))

        with patch.object(shell.pipeline.ui_checker, 'probe', probe):
            await shell.dispatch('7')

        probe.assert_called_once()
        assert "Dokploy UI 可以访问" in console.stream.getvalue()

    @pytest.mark.asyncio
    async def test_items_are_independent(self, fast_config, fake_docker, console):
        """测试选项之间不保留状态"""
        shell = self._shell(fast_config, fake_docker, console)
        shell.items['2'].action = AsyncMock(side_effect=RemediationError("失败"))

        assert await shell.dispatch('2') == ShellState.IDLE
        assert await shell.dispatch('6') == ShellState.IDLE
        assert "当前系统状态" in console.stream.getvalue()

    @pytest.mark.asyncio
    async def test_unreadable_disk_path_keeps_menu_running(self, fast_config, fake_docker, console):
        """测试磁盘路径无法读取时只输出错误，菜单继续运行"""
        shell = self._shell(fast_config, fake_docker, console, '1', '8')

        with patch.object(shell.pipeline.environment_checker, 'check', AsyncMock(return_value=True)), \
                patch('dokploy_recovery.checkers.disk_checker.psutil.disk_usage',
                      side_effect=FileNotFoundError(2, 'No such file or directory')):
            await shell.run()

        output = console.stream.getvalue()
        assert "无法读取磁盘空间: /" in output
        assert "再见!" in output
        assert shell.state == ShellState.EXITED
