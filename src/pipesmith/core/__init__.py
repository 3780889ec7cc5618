"""Fragment composition primitives shared by the bootstrap and the CLI."""

from __future__ import annotations

from .config import BootstrapConfig, RequestInfo, load_config
from .content_type import ContentType, ContentTypeNegotiator, HeaderSink, parse_charset
from .dependencies import DependencyResolver, TagDependencyResolver, join_dependencies
from .diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from .exceptions import (
    ConfigurationError,
    MissingCollaboratorError,
    PipesmithError,
    SerializationError,
    StreamClosedError,
    StreamWriteError,
    TemplateError,
)
from .fallback import RenderMode, build_fallback
from .flush import Completion, FlushResult, OutputStream
from .fragments import Fragment, FragmentQueue, is_empty_payload
from .markers import DEFAULT_MARKER_ATTRIBUTE, iter_markers, locate
from .reducer import ReductionReport, TreeReducer, UnmatchedPolicy
from .response import BufferedResponse
from .serializer import JoinResult, join_fragments
from .templates import JinjaTemplateEngine, TemplateEngine


__all__ = [
    "DEFAULT_MARKER_ATTRIBUTE",
    "BootstrapConfig",
    "BufferedResponse",
    "Completion",
    "ConfigurationError",
    "ContentType",
    "ContentTypeNegotiator",
    "DependencyResolver",
    "DiagnosticEmitter",
    "FlushResult",
    "Fragment",
    "FragmentQueue",
    "HeaderSink",
    "JinjaTemplateEngine",
    "JoinResult",
    "LoggingEmitter",
    "MissingCollaboratorError",
    "NullEmitter",
    "OutputStream",
    "PipesmithError",
    "ReductionReport",
    "RenderMode",
    "RequestInfo",
    "SerializationError",
    "StreamClosedError",
    "StreamWriteError",
    "TagDependencyResolver",
    "TemplateEngine",
    "TemplateError",
    "TreeReducer",
    "UnmatchedPolicy",
    "build_fallback",
    "is_empty_payload",
    "iter_markers",
    "join_dependencies",
    "join_fragments",
    "load_config",
    "locate",
    "parse_charset",
]
