"""Primary public API for Pipesmith."""

from __future__ import annotations

from pipesmith.bootstrap import Bootstrap, BootstrapData
from pipesmith.core import (
    BootstrapConfig,
    ContentType,
    FlushResult,
    Fragment,
    JinjaTemplateEngine,
    PipesmithError,
    ReductionReport,
    RenderMode,
    RequestInfo,
    TagDependencyResolver,
    TreeReducer,
    UnmatchedPolicy,
    load_config,
)
from pipesmith.version import get_version


__version__ = get_version()

__all__ = [
    "Bootstrap",
    "BootstrapConfig",
    "BootstrapData",
    "ContentType",
    "FlushResult",
    "Fragment",
    "JinjaTemplateEngine",
    "PipesmithError",
    "ReductionReport",
    "RenderMode",
    "RequestInfo",
    "TagDependencyResolver",
    "TreeReducer",
    "UnmatchedPolicy",
    "__version__",
    "get_version",
    "load_config",
]
