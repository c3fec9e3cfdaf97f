"""
脚本后端

git、svn、wget 等协议由后端目录中的同名脚本实现，这里只负责调用:

    <backend_dir>/<name> [-q] -o <output> -- <args...>
"""

import os

from dlwrap.backends.base import FetchBackend
from dlwrap.exceptions import BackendError
from dlwrap.utils import run_command


class ScriptBackend(FetchBackend):
    """调用外部脚本的后端"""

    def __init__(self, name: str, backend_dir: str, description: str = ""):
        self.name = name
        self.backend_dir = backend_dir
        self.description = description

    @property
    def program(self) -> str:
        return os.path.join(self.backend_dir, self.name)

    def build_command(self, output: str, args: list[str], quiet: bool) -> list[str]:
        argv = [self.program]
        if quiet:
            argv.append("-q")
        argv += ["-o", output, "--"]
        argv += args
        return argv

    async def _fetch(
        self,
        output: str,
        args: list[str],
        cwd: str,
        quiet: bool,
    ) -> None:
        argv = self.build_command(output, args, quiet)
        try:
            returncode = await run_command(argv, cwd=cwd)
        except OSError as e:
            raise BackendError(
                f"无法运行后端 '{self.name}': {e}",
                context={"backend": self.name, "program": self.program},
            ) from e

        if returncode != 0:
            # 脚本自己输出了错误信息
            raise BackendError(
                f"后端 '{self.name}' 失败 (退出码 {returncode})",
                context={"backend": self.name, "returncode": returncode},
                reported=True,
            )
