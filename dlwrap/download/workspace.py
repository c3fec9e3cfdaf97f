"""
工作目录

每次下载在构建临时目录下创建一个唯一命名的私有工作目录，
后端在其中运行，结束时无论成败都整体删除。
"""

import os
import shutil
import tempfile
from typing import Optional

from loguru import logger

from dlwrap.exceptions import DlwrapError


class ScratchWorkspace:
    """下载工作目录（异步上下文管理器）"""

    OUTPUT_NAME = "output"

    def __init__(self, build_dir: str, filename: str):
        self.build_dir = build_dir
        self.filename = filename
        self.path: Optional[str] = None
        self._discarded = False

    @property
    def output(self) -> str:
        """后端写入的文件路径"""
        if self.path is None:
            raise RuntimeError("工作目录尚未创建")
        return os.path.join(self.path, self.OUTPUT_NAME)

    def create(self) -> str:
        try:
            os.makedirs(self.build_dir, exist_ok=True)
            self.path = tempfile.mkdtemp(prefix=f".{self.filename}.", dir=self.build_dir)
        except OSError as e:
            raise DlwrapError(
                f"无法创建工作目录: {e}", context={"build_dir": self.build_dir}
            ) from e
        logger.debug(f"[工作目录] 已创建 {self.path}")
        return self.path

    def discard(self) -> None:
        """删除工作目录及后端留下的所有文件，可重复调用"""
        if self.path is None or self._discarded:
            return
        self._discarded = True
        try:
            shutil.rmtree(self.path)
            logger.debug(f"[工作目录] 已删除 {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[工作目录] 删除 {self.path} 失败: {e}")

    async def __aenter__(self) -> "ScratchWorkspace":
        self.create()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.discard()
