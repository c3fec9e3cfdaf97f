import os
import shutil

from loguru import logger

from dlwrap.backends.base import FetchBackend
from dlwrap.exceptions import BackendError


class LocalCopyBackend(FetchBackend):
    """复制本地文件（保留权限位）"""

    name = "cp"
    description = "复制本地文件系统中的文件"

    async def _fetch(
        self,
        output: str,
        args: list[str],
        cwd: str,
        quiet: bool,
    ) -> None:
        if len(args) != 1:
            raise BackendError(
                f"后端 'cp' 需要且只需要一个源文件参数，收到 {len(args)} 个",
                context={"args": args},
            )

        src_path = args[0]
        if not os.path.isfile(src_path):
            raise BackendError(
                f"源文件不存在: {src_path}", context={"source": src_path}
            )

        if not quiet:
            logger.info(f"[复制] 本地文件: {os.path.basename(src_path)}")
        try:
            shutil.copy(src_path, output)
        except OSError as e:
            raise BackendError(
                f"复制文件失败: {e}", context={"source": src_path, "error": str(e)}
            ) from e
