"""清单与锁文件存储

职责:
- 读写项目根目录的 cppkg.json
- 读取依赖仓库检出目录中的 cppkg.json
- 读写 cppkg.lock（整体重写，不做增量合并）
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from cppkg.core.exceptions import ManifestError
from cppkg.core.models import Lockfile, PackageManifest
from cppkg.utils.yaml_io import load_json, save_json

logger = logging.getLogger(__name__)

MANIFEST_FILE = "cppkg.json"
LOCK_FILE = "cppkg.lock"


def load_manifest_from_path(path: Path) -> PackageManifest:
    """从指定路径读取清单"""
    try:
        data = load_json(path)
    except FileNotFoundError as e:
        raise ManifestError(f"清单文件不存在: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        raise ManifestError(f"清单文件格式错误 {path}: {e}") from e
    except OSError as e:
        raise ManifestError(f"读取清单失败 {path}: {e}") from e
    return PackageManifest.from_dict(data, source=str(path))


class ManifestStore:
    """项目清单 / 锁文件存储"""

    def __init__(
        self,
        project_dir: str | Path = ".",
        manifest_file: str = MANIFEST_FILE,
        lock_file: str = LOCK_FILE,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.manifest_path = self.project_dir / manifest_file
        self.lock_path = self.project_dir / lock_file

    # ---- 清单 ----

    def exists(self) -> bool:
        return self.manifest_path.exists()

    def load(self) -> PackageManifest:
        """读取项目清单；不存在时提示先执行 init"""
        if not self.manifest_path.exists():
            raise ManifestError(
                f"找不到 {self.manifest_path.name}，请先执行 'cppkg init'"
            )
        return load_manifest_from_path(self.manifest_path)

    def save(self, manifest: PackageManifest) -> None:
        try:
            save_json(self.manifest_path, manifest.to_dict())
        except OSError as e:
            raise ManifestError(f"写入清单失败 {self.manifest_path}: {e}") from e
        logger.debug("清单已保存: %s", self.manifest_path)

    # ---- 锁文件 ----

    def load_lockfile(self) -> Lockfile:
        """读取锁文件；不存在时返回空锁文件"""
        if not self.lock_path.exists():
            return Lockfile()
        try:
            data = load_json(self.lock_path)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            raise ManifestError(f"锁文件格式错误 {self.lock_path}: {e}") from e
        except OSError as e:
            raise ManifestError(f"读取锁文件失败 {self.lock_path}: {e}") from e
        return Lockfile.from_dict(data, source=str(self.lock_path))

    def save_lockfile(self, lock: Lockfile) -> None:
        try:
            save_json(self.lock_path, lock.to_dict())
        except OSError as e:
            raise ManifestError(f"写入锁文件失败 {self.lock_path}: {e}") from e
        logger.info("锁文件已写入: %s (%d 个包)", self.lock_path, len(lock.dependencies))
