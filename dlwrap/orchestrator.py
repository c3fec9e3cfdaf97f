"""
下载协调器

编排单个文件的下载流程:

    检查已有文件 -> [复用 | 删除后重新下载] -> 后端下载 -> 哈希校验 -> 原子发布

每次调用只尝试一次，不重试也不切换来源；失败时所有临时文件都会被删除，
目标路径保持调用前的状态。
"""

import os
from typing import Callable, Optional

from loguru import logger

from dlwrap.backends import FetchBackend, get_backend
from dlwrap.config import FetchConfig
from dlwrap.download import (
    CommandHashVerifier,
    HashVerifier,
    ScratchWorkspace,
    publish,
)
from dlwrap.exceptions import (
    AmbiguousTrustError,
    UsageError,
    VerificationError,
)
from dlwrap.models import FetchRequest, FetchResult, FetchStatus, HashStatus
from dlwrap.utils import is_executable

BackendFactory = Callable[[str, FetchConfig], FetchBackend]


class FetchOrchestrator:
    """下载协调器"""

    def __init__(
        self,
        config: FetchConfig,
        verifier: Optional[HashVerifier] = None,
        backend_factory: BackendFactory = get_backend,
        umask: Optional[int] = None,
    ):
        self.config = config.validate()
        self.verifier = verifier or CommandHashVerifier(self.config.check_hash)
        self._backend_factory = backend_factory
        # 多线程环境中应在启动时读取一次 umask 传入
        self.umask = umask

    async def fetch(self, request: FetchRequest) -> FetchResult:
        """
        下载单个文件到 request.output

        Returns:
            下载结果

        Raises:
            DlwrapError: 任何失败（此时目标路径未被修改，临时文件已清理）
        """
        if not request.output:
            raise UsageError("必须指定输出文件")
        backend = self._backend_factory(request.backend, self.config)

        if await self._check_existing(request):
            return FetchResult(
                path=request.output,
                status=FetchStatus.REUSED,
                backend=request.backend,
                executable=is_executable(request.output),
            )

        async with ScratchWorkspace(self.config.build_dir, request.filename) as workspace:
            await backend.fetch(
                workspace.output,
                request.backend_args,
                cwd=workspace.path,
                quiet=request.quiet,
            )
            await self._verify_fetched(request, workspace.output)
            mode = await publish(
                workspace.output, request.output, workspace, umask=self.umask
            )

        logger.success(f"[完成] '{request.filename}' 已发布到 {request.output}")
        return FetchResult(
            path=request.output,
            status=FetchStatus.FETCHED,
            backend=request.backend,
            executable=bool(mode & 0o111),
            mode=mode,
        )

    async def _check_existing(self, request: FetchRequest) -> bool:
        """
        检查目标文件是否已存在且校验通过

        Returns:
            True 表示可直接复用；False 表示需要下载（不匹配的旧文件已删除）
        """
        target = request.output
        if not os.path.exists(target):
            return False

        status = await self.verifier.verify(
            request.hash_file, target, request.filename, request.quiet
        )

        if status is HashStatus.MATCH:
            logger.info(f"[跳过] '{request.filename}' 已存在且校验通过")
            return True

        if status is HashStatus.HARD_ERROR:
            raise AmbiguousTrustError(
                f"'{request.filename}' 已存在但找不到对应的哈希记录",
                context={"target": target, "hash_file": request.hash_file},
                reported=self.verifier.reports_errors,
            )

        # 可能是从其他来源下载的新版本，删除后重新下载
        logger.warning(f"[重新下载] '{request.filename}' 校验不通过，将重新下载")
        try:
            os.remove(target)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise VerificationError(
                f"无法删除校验不通过的文件 '{request.filename}': {e}",
                context={"target": target},
            ) from e
        return False

    async def _verify_fetched(self, request: FetchRequest, path: str) -> None:
        """校验后端下载的文件，不通过则抛出 VerificationError"""
        status = await self.verifier.verify(
            request.hash_file, path, request.filename, request.quiet
        )
        if status is HashStatus.MATCH:
            logger.debug(f"[校验] '{request.filename}' 校验通过")
            return

        if status is HashStatus.HARD_ERROR:
            message = f"找不到 '{request.filename}' 的哈希记录"
        else:
            message = f"'{request.filename}' 下载后哈希校验失败"
        raise VerificationError(
            message,
            context={
                "file": request.filename,
                "hash_file": request.hash_file,
                "status": status.value,
            },
            reported=self.verifier.reports_errors,
        )


async def fetch(
    backend: str,
    output: str,
    hash_file: Optional[str] = None,
    quiet: bool = False,
    *backend_args: str,
    config: Optional[FetchConfig] = None,
    verifier: Optional[HashVerifier] = None,
) -> FetchResult:
    """
    下载单个文件的便捷入口

    未传入 config 时从环境变量读取（需要 BUILD_DIR）。
    """
    if config is None:
        config = FetchConfig.from_env()
    orchestrator = FetchOrchestrator(config, verifier=verifier)
    request = FetchRequest(
        backend=backend,
        output=output,
        hash_file=hash_file,
        quiet=quiet,
        backend_args=tuple(backend_args),
    )
    return await orchestrator.fetch(request)
