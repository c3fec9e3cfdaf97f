import os
from abc import ABC, abstractmethod
from typing import Sequence

from loguru import logger

from dlwrap.exceptions import BackendError


class FetchBackend(ABC):
    """
    下载后端基类

    后端把内容写入 output，当前目录是一个可丢弃的工作目录，
    留下的其他文件会随工作目录一起删除。
    """

    name: str = ""
    description: str = ""

    async def fetch(
        self,
        output: str,
        args: Sequence[str],
        cwd: str,
        quiet: bool = False,
    ) -> None:
        """
        获取内容到 output

        Args:
            output: 需要创建的目标文件
            args: 后端专用参数，原样传递
            cwd: 工作目录
            quiet: 是否静默

        Raises:
            BackendError: 后端失败或没有生成 output
        """
        logger.info(f"[下载] 使用后端 '{self.name}' 获取 '{os.path.basename(output)}'")
        await self._fetch(output, list(args), cwd, quiet)

        if not os.path.isfile(output):
            raise BackendError(
                f"后端 '{self.name}' 执行成功但未生成输出文件",
                context={"backend": self.name, "output": output},
            )

    @abstractmethod
    async def _fetch(
        self,
        output: str,
        args: list[str],
        cwd: str,
        quiet: bool,
    ) -> None:
        """具体的获取逻辑"""
