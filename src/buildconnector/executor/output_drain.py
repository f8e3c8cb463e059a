"""
Draining of subprocess output streams.

An OutputDrain reads one pipe of a running process to end-of-file, so the
process can never stall on a full pipe buffer, and returns everything it read
as text. Optionally the text is copied to a log file as it arrives.
"""

import codecs
import logging
import os
from pathlib import Path
from typing import BinaryIO, IO, List, Optional

from ..validation import ErrorSeverity, handle_file_error

logger = logging.getLogger(__name__)

DRAIN_CHUNK_SIZE = 8192


class OutputDrain:
    """
    Callable that fully consumes a binary stream into a string.

    The drain is meant to be submitted to a thread pool; calling it blocks
    until the stream reaches end-of-input. Text is decoded incrementally and
    invalid bytes are replaced, so the log file (when given) holds exactly
    the returned text.
    """

    def __init__(
        self,
        stream: BinaryIO,
        log_file: Optional[Path] = None,
        name: str = "stdout",
        encoding: str = "utf-8",
    ):
        """
        Args:
            stream: Readable byte stream, typically ``Popen.stdout``
            log_file: Existing file to copy the output into, or None
            name: Stream name used in log messages and the error marker
            encoding: Encoding of the produced bytes
        """
        self.stream = stream
        self.log_file = log_file
        self.name = name
        self.encoding = encoding

    def __call__(self) -> str:
        return self.drain()

    def drain(self) -> str:
        """
        Read the stream to completion.

        Returns:
            The full text produced on the stream. If reading fails part way,
            the text read so far followed by an error marker line.
        """
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
        chunks: List[str] = []
        log_handle = self._open_log()
        read = getattr(self.stream, "read1", self.stream.read)

        try:
            while True:
                try:
                    data = read(DRAIN_CHUNK_SIZE)
                except (OSError, ValueError) as e:
                    logger.warning(f"Reading {self.name} failed, keeping partial output: {e}")
                    text = decoder.decode(b"", final=True) + f"\n[{self.name} drain failed: {e}]\n"
                    chunks.append(text)
                    log_handle = self._write_log(log_handle, text)
                    break

                if not data:
                    text = decoder.decode(b"", final=True)
                    if text:
                        chunks.append(text)
                        log_handle = self._write_log(log_handle, text)
                    break

                text = decoder.decode(data)
                if text:
                    chunks.append(text)
                    log_handle = self._write_log(log_handle, text)
        finally:
            self._close_stream()
            self._close_log(log_handle)

        return "".join(chunks)

    def _open_log(self) -> Optional[IO[str]]:
        if self.log_file is None:
            return None
        try:
            # newline="" keeps the file byte-identical to the captured text.
            return open(self.log_file, "w", encoding=self.encoding, newline="")
        except OSError as e:
            handle_file_error(
                error=e,
                context=f"opening log file {self.log_file}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return None

    def _write_log(self, handle: Optional[IO[str]], text: str) -> Optional[IO[str]]:
        """Append text to the log; on failure stop logging and keep capturing."""
        if handle is None:
            return None
        try:
            handle.write(text)
            handle.flush()
            return handle
        except OSError as e:
            handle_file_error(
                error=e,
                context=f"writing log file {self.log_file}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            self._close_log(handle)
            return None

    def _close_log(self, handle: Optional[IO[str]]) -> None:
        if handle is None or handle.closed:
            return
        try:
            handle.flush()
            os.fsync(handle.fileno())
        except OSError as e:
            logger.warning(f"Failed to sync log file {self.log_file}: {e}")
        finally:
            try:
                handle.close()
            except OSError as e:
                logger.warning(f"Failed to close log file {self.log_file}: {e}")

    def _close_stream(self) -> None:
        # Closing our end makes a producer that keeps writing fail fast instead of blocking.
        try:
            self.stream.close()
        except OSError as e:
            logger.debug(f"Error closing {self.name} stream: {e}")
