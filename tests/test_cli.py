"""
命令行接口测试
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from main import MAX_EXIT_CODE, create_argument_parser, load_config, main
from dokploy_recovery.utils.exceptions import RuntimeUnavailableError


def mock_pipeline_class(**results):
    """构造 RecoveryPipeline 的模拟类，results 为各方法的返回值或异常"""
    pipeline = Mock()
    for name in ('check_only', 'cleanup', 'run_full_check'):
        value = results.get(name)
        if isinstance(value, Exception):
            setattr(pipeline, name, AsyncMock(side_effect=value))
        else:
            setattr(pipeline, name, AsyncMock(return_value=value))
    return Mock(return_value=pipeline), pipeline


class TestArgumentParser:
    """测试命令行参数解析"""

    def test_default_arguments(self):
        args = create_argument_parser().parse_args([])

        assert args.check_only is False
        assert args.cleanup is False
        assert args.interactive is False
        assert args.config is None
        assert args.yes is False

    def test_modes(self):
        parser = create_argument_parser()
        assert parser.parse_args(['--check-only']).check_only is True
        assert parser.parse_args(['--cleanup']).cleanup is True
        assert parser.parse_args(['--interactive']).interactive is True

    def test_config_and_overrides(self):
        args = create_argument_parser().parse_args(
            ['-c', 'recovery.yaml', '-y', '--log-level', 'DEBUG', '--no-color'])

        assert args.config == 'recovery.yaml'
        assert args.yes is True
        assert args.log_level == 'DEBUG'
        assert args.no_color is True

    def test_unknown_option_exits_with_1(self, capsys):
        """测试未知参数以退出码 1 结束"""
        with pytest.raises(SystemExit) as exc_info:
            create_argument_parser().parse_args(['--bogus'])

        assert exc_info.value.code == 1
        assert "--help" in capsys.readouterr().err

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit) as exc_info:
            create_argument_parser().parse_args(['--check-only', '--cleanup'])
        assert exc_info.value.code == 1

    def test_help_exits_with_0(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_argument_parser().parse_args(['--help'])

        assert exc_info.value.code == 0
        output = capsys.readouterr().out
        assert '--check-only' in output
        assert '--cleanup' in output
        assert '--interactive' in output


class TestLoadConfig:
    """测试配置加载和命令行覆盖"""

    def test_non_tty_assumes_yes(self):
        args = create_argument_parser().parse_args([])
        with patch('main.is_interactive_terminal', return_value=False):
            config = load_config(args)
        assert config.general.assume_yes is True

    def test_tty_prompts(self):
        args = create_argument_parser().parse_args(['--no-color', '--log-level', 'INFO'])
        with patch('main.is_interactive_terminal', return_value=True):
            config = load_config(args)

        assert config.general.assume_yes is False
        assert config.general.color is False
        assert config.general.log_level == 'INFO'


class TestMain:
    """测试主函数的退出码"""

    def test_check_only_exit_code_is_problem_count(self):
        pipeline_class, _ = mock_pipeline_class(check_only=Mock(problem_count=3))
        with patch('main.RecoveryPipeline', pipeline_class):
            assert main(['--check-only']) == 3

    def test_check_only_healthy(self):
        pipeline_class, _ = mock_pipeline_class(check_only=Mock(problem_count=0))
        with patch('main.RecoveryPipeline', pipeline_class):
            assert main(['--check-only']) == 0

    def test_check_only_exit_code_saturates(self):
        """测试问题数超过上限时退出码饱和"""
        pipeline_class, _ = mock_pipeline_class(check_only=Mock(problem_count=300))
        with patch('main.RecoveryPipeline', pipeline_class):
            assert main(['--check-only']) == MAX_EXIT_CODE

    def test_cleanup_exit_code(self):
        pipeline_class, _ = mock_pipeline_class(cleanup=Mock(returncode=125))
        with patch('main.RecoveryPipeline', pipeline_class):
            assert main(['--cleanup']) == 125

    def test_full_run_non_interactive(self):
        """测试非交互调用时完整流程结束后不询问是否进入交互模式"""
        pipeline_class, pipeline = mock_pipeline_class(run_full_check=Mock(success=False))
        with patch('main.RecoveryPipeline', pipeline_class), \
                patch('main.is_interactive_terminal', return_value=False):
            assert main([]) == 0

        pipeline.run_full_check.assert_awaited_once()
        pipeline.console.confirm.assert_not_called()

    def test_full_run_declines_interactive_mode(self):
        pipeline_class, pipeline = mock_pipeline_class(run_full_check=Mock(success=True))
        pipeline.console.confirm.return_value = False
        with patch('main.RecoveryPipeline', pipeline_class), \
                patch('main.is_interactive_terminal', return_value=True), \
                patch('main.InteractiveShell') as shell_class:
            assert main([]) == 0

        pipeline.console.confirm.assert_called_once_with("是否进入交互模式?")
        shell_class.assert_not_called()

    def test_interactive_mode(self):
        pipeline_class, pipeline = mock_pipeline_class()
        with patch('main.RecoveryPipeline', pipeline_class), \
                patch('main.InteractiveShell') as shell_class:
            shell_class.return_value.run = AsyncMock()
            assert main(['--interactive']) == 0

        shell_class.assert_called_once_with(pipeline)
        shell_class.return_value.run.assert_awaited_once()

    def test_runtime_unavailable_exits_with_1(self, capsys):
        pipeline_class, _ = mock_pipeline_class(
            run_full_check=RuntimeUnavailableError("Docker 未安装或不在 PATH 中"))
        with patch('main.RecoveryPipeline', pipeline_class), \
                patch('main.is_interactive_terminal', return_value=False):
            assert main([]) == 1

        assert "Docker 未安装或不在 PATH 中" in capsys.readouterr().err

    def test_missing_config_file_exits_with_1(self, capsys):
        assert main(['-c', '/nonexistent/recovery.yaml']) == 1
        assert "配置错误" in capsys.readouterr().err

    def test_logging_configured_from_config(self, tmp_path):
        """测试按配置文件中的 global 段设置日志系统"""
        log_file = tmp_path / 'recovery.log'
        config_file = tmp_path / 'recovery.yaml'
        config_file.write_text(
            "global:\n"
            "  log_level: DEBUG\n"
            f"  log_file: {log_file}\n"
            "  max_log_size: 1024\n"
            "  log_backup_count: 2\n",
            encoding='utf-8'
        )
        pipeline_class, _ = mock_pipeline_class(check_only=Mock(problem_count=0))
        with patch('main.RecoveryPipeline', pipeline_class), \
                patch('main.configure_logging') as configure:
            assert main(['--check-only', '-c', str(config_file)]) == 0

        configure.assert_called_once_with({
            'log_level': 'DEBUG',
            'log_file': str(log_file),
            'max_file_size': 1024,
            'backup_count': 2,
        })
