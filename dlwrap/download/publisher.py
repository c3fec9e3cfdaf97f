"""
原子发布

把校验通过的文件放到共享下载目录，读者只会看到旧状态或完整的新文件。

步骤:
    1. 在目标目录中用 mkstemp 创建唯一命名的暂存文件（O_EXCL，不会覆盖已有文件）
    2. 写入内容之前先修正权限（mkstemp 默认只有属主可读写）
    3. 以追加方式写入内容，不走截断或删除后重建的路径
    4. 删除工作目录
    5. rename 到目标路径；任何一步失败都删除暂存文件，目标路径保持原样
"""

import contextlib
import os
import tempfile
from typing import Iterator, List, Optional

import aiofiles
from loguru import logger

from dlwrap.download.workspace import ScratchWorkspace
from dlwrap.exceptions import PublishError
from dlwrap.utils import current_umask, is_executable

CHUNK_SIZE = 64 * 1024


def permission_mode(executable: bool, umask: Optional[int] = None) -> int:
    """
    计算发布文件的权限位

    Args:
        executable: 下载内容是否可执行
        umask: 使用的 umask（默认读取当前进程的）
    """
    if umask is None:
        umask = current_umask()
    base = 0o777 if executable else 0o666
    return base & ~umask


@contextlib.contextmanager
def staging_file(target: str) -> Iterator[str]:
    """
    在目标所在目录创建唯一命名的暂存文件

    只在出错时删除暂存文件；成功 rename 之后这个名字已不属于本进程。
    """
    directory, filename = os.path.split(target)
    fd, path = tempfile.mkstemp(prefix=f"{filename}.", dir=directory or ".")
    os.close(fd)
    try:
        yield path
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)
        raise


def missing_parents(target: str) -> List[str]:
    """返回目标路径尚不存在的上级目录，由深到浅"""
    missing = []
    directory = os.path.dirname(os.path.abspath(target))
    while not os.path.isdir(directory):
        missing.append(directory)
        parent = os.path.dirname(directory)
        if parent == directory:
            break
        directory = parent
    return missing


def remove_empty_dirs(directories: List[str]) -> None:
    """删除本次发布创建的空目录；目录已被其他进程使用时保留"""
    for directory in directories:
        try:
            os.rmdir(directory)
        except OSError:
            break


async def append_file(src_path: str, dest_path: str) -> int:
    """以追加方式复制文件内容，返回写入的字节数"""
    written = 0
    async with aiofiles.open(src_path, "rb") as src:
        async with aiofiles.open(dest_path, "ab") as dest:
            while True:
                chunk = await src.read(CHUNK_SIZE)
                if not chunk:
                    break
                await dest.write(chunk)
                written += len(chunk)
    return written


async def publish(
    source: str,
    target: str,
    workspace: Optional[ScratchWorkspace] = None,
    umask: Optional[int] = None,
) -> int:
    """
    原子地把 source 发布到 target

    Args:
        source: 已校验的文件（位于工作目录中）
        target: 共享下载目录中的目标路径
        workspace: rename 之前需要删除的工作目录
        umask: 使用的 umask（默认读取当前进程的）

    Returns:
        发布文件的权限位
    """
    filename = os.path.basename(target)
    executable = is_executable(source)
    created_dirs = missing_parents(target)

    try:
        os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
        with staging_file(target) as staging:
            mode = permission_mode(executable, umask)
            os.chmod(staging, mode)
            size = await append_file(source, staging)
            logger.debug(
                f"[发布] '{filename}' 已写入暂存文件 {staging} ({size} 字节, {oct(mode)})"
            )

            if workspace is not None:
                workspace.discard()

            os.replace(staging, target)
    except OSError as e:
        remove_empty_dirs(created_dirs)
        raise PublishError(
            f"发布 '{filename}' 失败: {e}",
            context={"target": target, "error": str(e)},
        ) from e

    return mode
