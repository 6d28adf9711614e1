"""Forwards generator stdout/stderr to listeners as they arrive."""

from __future__ import annotations

import asyncio
import codecs
import itertools
from typing import Callable

from react_installer.installer.models import OutputChunk, StreamName

OutputListener = Callable[[OutputChunk], None]

DEFAULT_CHUNK_SIZE = 4096


class OutputRelay:
    """Reads both output streams of a process and re-emits ``OutputChunk``s.

    Chunks keep their arrival order within a stream; the sequence counter is
    shared by both streams, so it also records the observed interleaving.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size
        self._listeners: list[OutputListener] = []
        self._sequence = itertools.count(1)

    def subscribe(self, listener: OutputListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, stream: StreamName, text: str) -> OutputChunk:
        chunk = OutputChunk(stream=stream, text=text, sequence=next(self._sequence))
        for listener in list(self._listeners):
            listener(chunk)
        return chunk

    async def pump(self, reader: asyncio.StreamReader | None, stream: StreamName) -> None:
        """Read *reader* until EOF, emitting each decoded chunk."""
        if reader is None:
            return
        # Incremental decoding keeps multi-byte characters split across reads intact.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await reader.read(self.chunk_size)
            if not data:
                tail = decoder.decode(b"", final=True)
                if tail:
                    self.emit(stream, tail)
                return
            text = decoder.decode(data)
            if text:
                self.emit(stream, text)

    async def relay(self, handle) -> None:
        """Pump both streams of *handle* until each reaches EOF."""
        await asyncio.gather(
            self.pump(handle.stdout, StreamName.STDOUT),
            self.pump(handle.stderr, StreamName.STDERR),
        )
