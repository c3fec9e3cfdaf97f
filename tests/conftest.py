import hashlib
import os
import stat
import sys
from typing import Dict, Iterable, Optional

import pytest
from loguru import logger

from dlwrap.backends.base import FetchBackend
from dlwrap.config import FetchConfig
from dlwrap.download.verifier import HashVerifier
from dlwrap.exceptions import BackendError
from dlwrap.models import HashStatus


def sha256_of(path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_script(path, body: str):
    """写出一个可执行的 shell 脚本"""
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class DigestVerifier(HashVerifier):
    """按文件名查表的 sha256 校验器，digests 为 None 表示没有哈希记录"""

    def __init__(self, digests: Optional[Dict[str, Iterable[str]]] = None):
        self.digests = digests
        self.calls = []

    async def verify(self, hash_file, file_path, filename, quiet=False):
        self.calls.append((hash_file, str(file_path), filename))
        if self.digests is None or filename not in self.digests:
            return HashStatus.HARD_ERROR
        if sha256_of(file_path) in set(self.digests[filename]):
            return HashStatus.MATCH
        return HashStatus.MISMATCH


class BrokenBackend(FetchBackend):
    """写了一半内容后失败的后端"""

    name = "broken"

    async def _fetch(self, output, args, cwd, quiet):
        with open(output, "wb") as f:
            f.write(b"partial")
        with open(os.path.join(cwd, "aux.log"), "w") as f:
            f.write("leftover")
        raise BackendError("模拟的后端失败", reported=True)


@pytest.fixture(autouse=True)
def _loguru_sink():
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
    yield
    logger.remove()


@pytest.fixture
def build_dir(tmp_path):
    path = tmp_path / "build"
    path.mkdir()
    return path


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "dl"
    path.mkdir()
    return path


@pytest.fixture
def config(build_dir):
    return FetchConfig(build_dir=str(build_dir))


@pytest.fixture
def umask_022():
    old = os.umask(0o022)
    yield 0o022
    os.umask(old)


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "src" / "foo.tar.gz"
    path.parent.mkdir()
    path.write_bytes(b"release tarball contents\n" * 100)
    path.chmod(0o644)
    return path
