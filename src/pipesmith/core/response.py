"""In-memory response satisfying both the stream and header collaborators."""

from __future__ import annotations

from collections.abc import Callable


class BufferedResponse:
    """Collect flushed bytes and headers in memory.

    Useful for tests, offline rendering and the command line front-end. Writes
    are confirmed through the optional callback right away.
    """

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.headers_sent = False
        self.closed = False
        self.chunks: list[bytes] = []

    def set_header(self, name: str, value: str) -> None:
        if self.headers_sent:
            raise RuntimeError("Headers already sent")
        self.headers[name] = value

    def write(
        self,
        data: bytes,
        encoding: str,
        callback: Callable[[BaseException | None], None] | None = None,
    ) -> None:
        if self.closed:
            error = RuntimeError("write after end")
            if callback is None:
                raise error
            callback(error)
            return
        self.headers_sent = True
        self.chunks.append(bytes(data))
        if callback is not None:
            callback(None)

    def close(self) -> None:
        self.headers_sent = True
        self.closed = True

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)


__all__ = ["BufferedResponse"]
