"""服务容器 — 统一依赖注入

CLI 通过容器获取服务，而非直接构造；同一容器内共享配置和版本来源。

用法:
    container = ServiceContainer(config=cfg)
    container.project.install()

    # 测试时注入 fake 版本来源
    container = ServiceContainer(config=cfg, source=FakeSource())
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from cppkg.core.config import Config
    from cppkg.core.protocols import ProgressSink, RevisionSource
    from cppkg.services.project_service import ProjectService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        source: RevisionSource | None = None,
        progress: ProgressSink | None = None,
        transfer_progress: IO[str] | None = None,
    ) -> None:
        if config is None:
            from cppkg.core.config import get_config
            config = get_config()
        self._config = config
        self._source = source
        self._progress = progress
        self._transfer_progress = transfer_progress
        self._project: ProjectService | None = None

    @property
    def config(self) -> Config:
        return self._config

    @property
    def source(self) -> RevisionSource:
        if self._source is None:
            from cppkg.utils.git import GitSource
            self._source = GitSource(
                timeout=self._config.vcs_timeout,
                retries=self._config.vcs_retries,
            )
        return self._source

    @property
    def project(self) -> ProjectService:
        if self._project is None:
            from cppkg.services.project_service import ProjectService
            self._project = ProjectService(
                self._config, self.source,
                progress=self._progress,
                transfer_progress=self._transfer_progress,
            )
        return self._project
