import asyncio
import os
import shlex
from typing import Optional, Sequence

from loguru import logger


def current_umask() -> int:
    """
    读取当前进程的 umask（os 模块没有只读接口）

    两次 os.umask 之间进程的 umask 为 0，此时其他线程创建的文件不受 umask 限制；
    多线程调用方应在启动时读取一次并传给 permission_mode。
    """
    mask = os.umask(0)
    os.umask(mask)
    return mask


def is_executable(path: str) -> bool:
    return os.access(path, os.X_OK)


async def run_command(argv: Sequence[str], cwd: Optional[str] = None) -> int:
    """
    运行外部程序并返回退出码

    子进程继承 stdout/stderr，由它自己输出诊断信息。
    程序无法启动时抛出 OSError。
    """
    logger.debug(f"[执行] {shlex.join(argv)}" + (f" (cwd={cwd})" if cwd else ""))
    process = await asyncio.create_subprocess_exec(*argv, cwd=cwd)
    return await process.wait()
