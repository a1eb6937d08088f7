"""统一异常体系

所有业务异常继承 CppkgError，替代散落的 ValueError / RuntimeError。
CLI 层据此输出友好提示并以非零码退出。

包装类异常（ResolutionError / InstallError）携带包名和阶段，
在每个传播边界补充上下文，原始异常保存在 cause 中。
"""

from __future__ import annotations


class CppkgError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(CppkgError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ManifestError(CppkgError):
    """清单文件（cppkg.json / cppkg.lock）缺失或格式错误"""

    code = "MANIFEST_ERROR"


class InvalidDeclarationError(CppkgError):
    """依赖声明不是 url#constraint 格式"""

    code = "INVALID_DECLARATION"


class NetworkOrVcsError(CppkgError):
    """git clone / fetch / checkout 失败

    retryable=True 表示可重试（例如网络操作超时）。
    """

    code = "VCS_ERROR"

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class NoSatisfyingVersionError(CppkgError):
    """没有任何 tag 满足版本范围"""

    code = "NO_SATISFYING_VERSION"


class UnresolvableReferenceError(CppkgError):
    """字面引用（tag / 分支 / commit）不存在"""

    code = "UNRESOLVABLE_REFERENCE"


class InvalidResolvedVersionError(CppkgError):
    """冲突仲裁时解析出的版本标签不是合法语义化版本"""

    code = "INVALID_RESOLVED_VERSION"


class FilesystemError(CppkgError):
    """缓存或输出目录复制失败"""

    code = "FILESYSTEM_ERROR"


class HookFailureError(CppkgError):
    """生命周期脚本以非零码退出"""

    code = "HOOK_FAILURE"

    def __init__(self, message: str, returncode: int = 1) -> None:
        super().__init__(message)
        self.returncode = returncode


class _StageError(CppkgError):
    """带包名和阶段上下文的包装异常"""

    def __init__(self, package: str, stage: str, cause: Exception) -> None:
        super().__init__(f"[{stage}] {package or '<root>'}: {cause}")
        self.package = package
        self.stage = stage
        self.cause = cause


class ResolutionError(_StageError):
    """依赖发现 / 版本解析阶段失败"""

    code = "RESOLUTION_ERROR"


class InstallError(_StageError):
    """安装阶段失败（fetch / cache / copy / lockfile / generate / hook）"""

    code = "INSTALL_ERROR"
