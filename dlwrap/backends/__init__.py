"""
下载后端

根据后端标识选择实现。除本地复制外，协议都由后端目录中的脚本实现。
"""

from typing import Dict

from dlwrap.backends.base import FetchBackend
from dlwrap.backends.local import LocalCopyBackend
from dlwrap.backends.script import ScriptBackend
from dlwrap.config import FetchConfig
from dlwrap.exceptions import UsageError

BACKENDS: Dict[str, str] = {
    "bzr": "Bazaar 版本库",
    "cp": LocalCopyBackend.description,
    "cvs": "CVS 版本库",
    "file": "file:// 形式的本地 URL",
    "git": "Git 版本库",
    "hg": "Mercurial 版本库",
    "scp": "通过 scp 安全复制",
    "sftp": "通过 sftp 安全复制",
    "svn": "Subversion 版本库",
    "wget": "HTTP / HTTPS / FTP 下载",
}


def list_backends() -> Dict[str, str]:
    """返回所有支持的后端标识及说明"""
    return dict(BACKENDS)


def get_backend(name: str, config: FetchConfig) -> FetchBackend:
    """根据标识返回后端实例"""
    if not name:
        raise UsageError("必须指定下载后端")

    if name not in BACKENDS:
        raise UsageError(
            f"不支持的下载后端: {name}",
            context={"supported": sorted(BACKENDS)},
        )

    if name == LocalCopyBackend.name:
        return LocalCopyBackend()
    return ScriptBackend(name, config.backend_dir, BACKENDS[name])


__all__ = [
    "BACKENDS",
    "FetchBackend",
    "LocalCopyBackend",
    "ScriptBackend",
    "get_backend",
    "list_backends",
]
