#!/usr/bin/env python3
"""
Dokploy 健康检查与恢复工具入口

解析命令行参数，加载配置，按所选模式执行完整恢复流程、
只检查服务清单、只清理资源或进入交互式菜单。
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from dokploy_recovery.models.config import RecoveryConfig
from dokploy_recovery.services.config_manager import ConfigManager
from dokploy_recovery.services.interactive_shell import InteractiveShell
from dokploy_recovery.services.recovery_pipeline import RecoveryPipeline
from dokploy_recovery.utils.exceptions import ConfigError, RecoveryError, RuntimeUnavailableError
from dokploy_recovery.utils.log_manager import configure_logging, log_manager

# 版本信息
__version__ = "1.0.0"

# 进程退出码上限，问题数超过时饱和而不是回绕
MAX_EXIT_CODE = 255


class RecoveryArgumentParser(argparse.ArgumentParser):
    """参数错误时以退出码 1 结束"""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: 错误: {message}", file=sys.stderr)
        print("使用 --help 查看用法说明", file=sys.stderr)
        sys.exit(1)


def create_argument_parser() -> argparse.ArgumentParser:
    """创建命令行参数解析器"""
    parser = RecoveryArgumentParser(
        prog='dokploy-recovery',
        description='Dokploy 健康检查与恢复工具 - 自动排查 Dokploy UI 无法访问的常见问题',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  %(prog)s                       # 完整检查并自动修复
  %(prog)s --check-only          # 只检查容器状态，退出码为问题数量
  %(prog)s --cleanup             # 只清理 Docker 资源
  %(prog)s --interactive         # 进入交互模式
  %(prog)s -c recovery.yaml -y   # 使用配置文件，所有提示自动确认

不带参数运行时执行完整的自动恢复流程。
        """
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '--check-only',
        action='store_true',
        help='只检查容器状态'
    )
    mode.add_argument(
        '--cleanup',
        action='store_true',
        help='只运行 Docker 清理'
    )
    mode.add_argument(
        '--interactive',
        action='store_true',
        help='进入交互模式'
    )

    parser.add_argument(
        '--config', '-c',
        help='YAML配置文件路径（不指定时使用默认配置）'
    )

    parser.add_argument(
        '--yes', '-y',
        action='store_true',
        help='所有确认提示自动回答“是”'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='设置日志级别（覆盖配置文件设置）'
    )

    parser.add_argument(
        '--log-file',
        help='日志文件路径（覆盖配置文件设置）'
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help='不使用彩色输出'
    )

    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def is_interactive_terminal() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def load_config(args: argparse.Namespace) -> RecoveryConfig:
    """
    加载配置并应用命令行参数覆盖

    标准输入不是终端时视为非交互调用，确认提示自动通过。

    Args:
        args: 解析后的命令行参数

    Returns:
        RecoveryConfig: 最终配置

    Raises:
        ConfigError: 配置文件无效
    """
    config = ConfigManager(args.config).load_config()
    return ConfigManager.apply_overrides(
        config,
        log_level=args.log_level,
        log_file=args.log_file,
        color=False if args.no_color else None,
        assume_yes=True if (args.yes or not is_interactive_terminal()) else None
    )


def setup_logging(config: RecoveryConfig) -> None:
    """按配置设置日志系统"""
    general = config.general
    configure_logging({
        'log_level': general.log_level,
        'log_file': general.log_file,
        'max_file_size': general.max_log_size,
        'backup_count': general.log_backup_count,
    })


async def run(args: argparse.Namespace, config: RecoveryConfig) -> int:
    """
    按所选模式执行

    Returns:
        int: 进程退出码
    """
    pipeline = RecoveryPipeline(config)

    if args.check_only:
        inventory = await pipeline.check_only()
        return min(inventory.problem_count, MAX_EXIT_CODE)

    if args.cleanup:
        result = await pipeline.cleanup()
        return result.returncode

    if args.interactive:
        await InteractiveShell(pipeline).run()
        return 0

    await pipeline.run_full_check()

    if not config.general.assume_yes:
        pipeline.console.line()
        if pipeline.console.confirm("是否进入交互模式?"):
            await InteractiveShell(pipeline).run()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
        setup_logging(config)
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        print("\n用户中断程序", file=sys.stderr)
        return 130
    except ConfigError as e:
        print(f"配置错误: {e.message}", file=sys.stderr)
        return 1
    except RuntimeUnavailableError as e:
        print(f"错误: {e.message}", file=sys.stderr)
        return 1
    except RecoveryError as e:
        print(f"恢复工具错误: {e.format_error()}", file=sys.stderr)
        return 1
    finally:
        log_manager.cleanup()


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
