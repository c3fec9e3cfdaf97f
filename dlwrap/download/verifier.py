"""
文件校验器

通过外部哈希校验程序判断文件内容是否与哈希记录一致。
"""

from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger

from dlwrap.exceptions import VerifierUnavailableError
from dlwrap.models import HashStatus
from dlwrap.utils import run_command

# 校验程序保留的退出码：找不到哈希记录
HARD_ERROR_EXIT_CODE = 2


class HashVerifier(ABC):
    """哈希校验器接口"""

    # 校验失败时是否已自行输出诊断信息
    reports_errors: bool = False

    @abstractmethod
    async def verify(
        self,
        hash_file: Optional[str],
        file_path: str,
        filename: str,
        quiet: bool = False,
    ) -> HashStatus:
        """
        校验文件内容

        Args:
            hash_file: 哈希记录文件路径（可选）
            file_path: 待校验的文件
            filename: 哈希记录中的文件名
            quiet: 是否静默

        Returns:
            MATCH / MISMATCH / HARD_ERROR 三者之一
        """


class CommandHashVerifier(HashVerifier):
    """调用外部校验程序: <command> [-q] <hash_file> <file> <filename>"""

    reports_errors = True

    def __init__(self, command: str):
        self.command = command

    async def verify(
        self,
        hash_file: Optional[str],
        file_path: str,
        filename: str,
        quiet: bool = False,
    ) -> HashStatus:
        argv = [self.command]
        if quiet:
            argv.append("-q")
        argv += [hash_file or "", file_path, filename]

        try:
            returncode = await run_command(argv)
        except OSError as e:
            raise VerifierUnavailableError(
                f"无法运行哈希校验程序: {e}",
                context={"command": self.command, "file": filename},
            ) from e

        if returncode == 0:
            return HashStatus.MATCH
        if returncode == HARD_ERROR_EXIT_CODE:
            return HashStatus.HARD_ERROR
        logger.debug(f"[校验] '{filename}' 校验程序退出码 {returncode}")
        return HashStatus.MISMATCH
