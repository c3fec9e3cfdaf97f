"""
dlwrap 数据模型

包含校验结果、下载请求与下载结果的定义。
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class HashStatus(Enum):
    """哈希校验结果"""

    MATCH = "match"
    MISMATCH = "mismatch"
    HARD_ERROR = "hard_error"  # 找不到哈希记录等无法判断的情况


class FetchStatus(Enum):
    """下载结果状态"""

    REUSED = "reused"  # 已存在且校验通过
    FETCHED = "fetched"


@dataclass
class FetchRequest:
    """下载请求"""

    backend: str
    output: str
    hash_file: Optional[str] = None
    quiet: bool = False
    backend_args: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def filename(self) -> str:
        """目标文件名（哈希记录以此为键）"""
        return os.path.basename(self.output)


@dataclass
class FetchResult:
    """下载结果"""

    path: str
    status: FetchStatus
    backend: str
    executable: bool = False
    mode: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "status": self.status.value,
            "backend": self.backend,
            "executable": self.executable,
            "mode": oct(self.mode) if self.mode is not None else None,
        }
