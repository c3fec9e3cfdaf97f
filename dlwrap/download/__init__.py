"""
dlwrap 下载层

包含工作目录管理、哈希校验、原子发布等功能。
"""

from dlwrap.download.publisher import publish, permission_mode
from dlwrap.download.verifier import (
    HARD_ERROR_EXIT_CODE,
    CommandHashVerifier,
    HashVerifier,
)
from dlwrap.download.workspace import ScratchWorkspace

__all__ = [
    "publish",
    "permission_mode",
    "HARD_ERROR_EXIT_CODE",
    "CommandHashVerifier",
    "HashVerifier",
    "ScratchWorkspace",
]
