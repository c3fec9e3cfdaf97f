"""
配置模块

从配置文件、环境变量和命令行选项合并出运行配置。
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

import toml
import yaml

from dlwrap.exceptions import ConfigParseError, UsageError

DEFAULT_BACKEND_DIR = os.path.join("support", "download")
DEFAULT_CHECK_HASH = os.path.join(DEFAULT_BACKEND_DIR, "check-hash")

ENV_BUILD_DIR = "BUILD_DIR"
ENV_BACKEND_DIR = "DLWRAP_BACKEND_DIR"
ENV_CHECK_HASH = "DLWRAP_CHECK_HASH"


@dataclass
class FetchConfig:
    """
    运行配置

    Attributes:
        build_dir: 可随时清理的构建临时目录，工作目录建在其下
        backend_dir: 后端脚本所在目录
        check_hash: 哈希校验程序路径
    """

    build_dir: Optional[str] = None
    backend_dir: str = DEFAULT_BACKEND_DIR
    check_hash: str = DEFAULT_CHECK_HASH

    @classmethod
    def from_dict(cls, data: Mapping) -> "FetchConfig":
        """从字典创建配置，忽略未知键"""
        known = {f.name for f in fields(cls)}
        values = {k: str(v) for k, v in data.items() if k in known and v is not None}
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FetchConfig":
        """从环境变量创建配置"""
        environ = os.environ if environ is None else environ
        config = cls()
        return config.merge(
            build_dir=environ.get(ENV_BUILD_DIR) or None,
            backend_dir=environ.get(ENV_BACKEND_DIR) or None,
            check_hash=environ.get(ENV_CHECK_HASH) or None,
        )

    def merge(self, **overrides: Optional[str]) -> "FetchConfig":
        """返回合并后的新配置，值为 None 的项不覆盖"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> "FetchConfig":
        """
        验证配置并将程序路径转换为绝对路径

        后端运行时的当前目录是工作目录，相对路径必须在此之前解析。
        """
        if not self.build_dir:
            raise UsageError(
                f"未设置构建临时目录，请设置 {ENV_BUILD_DIR} 环境变量或 --build-dir 选项"
            )
        return replace(
            self,
            build_dir=os.path.abspath(self.build_dir),
            backend_dir=os.path.abspath(self.backend_dir),
            check_hash=os.path.abspath(self.check_hash),
        )


def load_config(config_path: str) -> dict:
    """加载配置文件（支持 TOML / JSON / YAML）"""
    path = Path(config_path)

    if not path.exists():
        raise ConfigParseError(
            f"配置文件不存在: {config_path}", context={"path": config_path}
        )

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text())
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text())
        else:
            raise ConfigParseError(
                f"不支持的配置文件格式: {suffix}", context={"path": config_path}
            )
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(
            "配置文件顶层必须是键值表", context={"path": config_path}
        )
    # 允许把配置放在 [dlwrap] 表下
    section = data.get("dlwrap")
    if isinstance(section, dict):
        return section
    return data
