"""
dlwrap - 源码包下载包装器

通过可插拔的后端下载单个文件，校验哈希后原子地发布到共享下载目录。
"""

__version__ = "0.1.0"

from dlwrap.config import FetchConfig  # noqa: E402
from dlwrap.models import FetchRequest, FetchResult, FetchStatus, HashStatus  # noqa: E402
from dlwrap.orchestrator import FetchOrchestrator, fetch  # noqa: E402

__all__ = [
    "__version__",
    "FetchConfig",
    "FetchOrchestrator",
    "FetchRequest",
    "FetchResult",
    "FetchStatus",
    "HashStatus",
    "fetch",
]
