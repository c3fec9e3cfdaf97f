"""
CLI 模块

命令行接口实现。
"""

import asyncio
from typing import Optional

import click
from loguru import logger

from dlwrap import __version__
from dlwrap.backends import list_backends
from dlwrap.config import (
    ENV_BACKEND_DIR,
    ENV_BUILD_DIR,
    ENV_CHECK_HASH,
    FetchConfig,
    load_config,
)
from dlwrap.exceptions import DlwrapError
from dlwrap.logger import setup_logger
from dlwrap.models import FetchRequest, FetchResult, FetchStatus
from dlwrap.orchestrator import FetchOrchestrator


def _backends_epilog() -> str:
    lines = ["\b", "支持的后端:"]
    for name, description in sorted(list_backends().items()):
        lines.append(f"  {name:<6} {description}")
    return "\n".join(lines)


def build_config(
    config_path: Optional[str],
    build_dir: Optional[str],
    backend_dir: Optional[str],
    check_hash: Optional[str],
) -> FetchConfig:
    """按 命令行/环境变量 > 配置文件 > 默认值 的顺序合并配置"""
    config = FetchConfig()
    if config_path:
        config = FetchConfig.from_dict(load_config(config_path))
    return config.merge(
        build_dir=build_dir,
        backend_dir=backend_dir,
        check_hash=check_hash,
    )


async def run_async(config: FetchConfig, request: FetchRequest) -> FetchResult:
    """异步运行"""
    orchestrator = FetchOrchestrator(config)
    return await orchestrator.fetch(request)


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=_backends_epilog(),
)
@click.option(
    "-b",
    "--backend",
    required=True,
    type=click.Choice(sorted(list_backends())),
    help="下载后端",
)
@click.option(
    "-o",
    "--output",
    required=True,
    type=click.Path(dir_okay=False),
    help="输出文件（共享下载目录中的最终路径）",
)
@click.option(
    "-H",
    "--hash-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="哈希记录文件",
)
@click.option("-q", "--quiet", is_flag=True, help="静默模式")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="配置文件（TOML / JSON / YAML）",
)
@click.option("--build-dir", envvar=ENV_BUILD_DIR, help="构建临时目录")
@click.option("--backend-dir", envvar=ENV_BACKEND_DIR, help="后端脚本目录")
@click.option("--check-hash", envvar=ENV_CHECK_HASH, help="哈希校验程序")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version=__version__, prog_name="dl-wrapper")
@click.argument("backend_args", nargs=-1, type=click.UNPROCESSED)
def main(
    backend: str,
    output: str,
    hash_file: Optional[str],
    quiet: bool,
    config_path: Optional[str],
    build_dir: Optional[str],
    backend_dir: Optional[str],
    check_hash: Optional[str],
    debug: bool,
    backend_args: tuple,
):
    """
    dl-wrapper - 下载单个源码包，校验哈希后原子地放入共享下载目录

    "--" 之后的参数原样传给下载后端。
    """
    if debug:
        setup_logger(level="DEBUG")
    elif quiet:
        setup_logger(level="WARNING")
    else:
        setup_logger()

    request = FetchRequest(
        backend=backend,
        output=output,
        hash_file=hash_file,
        quiet=quiet,
        backend_args=tuple(backend_args),
    )

    try:
        config = build_config(config_path, build_dir, backend_dir, check_hash)
        result = asyncio.run(run_async(config, request))
    except DlwrapError as e:
        if e.reported:
            # 诊断信息已由校验程序或后端输出
            logger.debug(f"[错误] {e}")
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e))

    if result.status is FetchStatus.REUSED:
        logger.debug(f"[完成] 复用已有文件 {result.path}")


if __name__ == "__main__":
    main()
