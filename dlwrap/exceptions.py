"""
dlwrap 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, Optional


class DlwrapError(Exception):
    """dlwrap 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        reported: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}
        # 外部程序已经输出过诊断信息时为 True，调用方不再重复输出
        self.reported = reported

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class UsageError(DlwrapError):
    """缺少必需的选项或参数"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigError(UsageError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E110"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E111"


class AmbiguousTrustError(DlwrapError):
    """目标文件已存在但找不到对应的哈希记录"""

    def _get_default_code(self) -> str:
        return "E200"


class VerificationError(DlwrapError):
    """内容与记录的哈希不匹配"""

    def _get_default_code(self) -> str:
        return "E300"


class VerifierUnavailableError(VerificationError):
    """哈希校验程序无法运行"""

    def _get_default_code(self) -> str:
        return "E301"


class BackendError(DlwrapError):
    """下载后端执行失败"""

    def _get_default_code(self) -> str:
        return "E400"


class PublishError(DlwrapError):
    """权限修正、复制或重命名失败"""

    def _get_default_code(self) -> str:
        return "E500"


__all__ = [
    "DlwrapError",
    "UsageError",
    "ConfigError",
    "ConfigParseError",
    "AmbiguousTrustError",
    "VerificationError",
    "VerifierUnavailableError",
    "BackendError",
    "PublishError",
]
