"""
Chunked CSV Reader - streams large IT / Master exports window by window.

Reads a file in fixed-size byte windows, reassembles lines split across
window boundaries and yields Raw Rows (Dict[str, str]) lazily. The header is
parsed once from the first non-blank line and fixes the delimiter for the
rest of the file.

Usage:
    reader = ChunkedCsvReader(Path("master.csv"), on_progress=print)
    header = reader.read_header()
    for row in reader:
        ...
"""

import codecs
import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Iterator, List, Optional, Tuple, Union

from tarifcheck.core.config import DEFAULT_CHUNK_SIZE
from tarifcheck.core.exceptions import ReaderExhaustedError
from tarifcheck.parsers.text import (
    build_row,
    detect_delimiter,
    detect_encoding,
    normalize_newlines,
    parse_line,
    strip_bom,
)

logger = logging.getLogger(__name__)

Source = Union[str, Path, BinaryIO]
ProgressCallback = Callable[[float], None]

# Longest byte-order mark (UTF-32) is 4 bytes
SNIFF_BYTES = 4


class ChunkedCsvReader:
    """
    Forward-only, single-use reader of delimited text files.

    Features:
    - Fixed-size byte windows (default 5 MiB), never the whole file at once
    - Incremental decoding, so multibyte characters cut by a window survive
    - BOM stripped from the first window only
    - Delimiter detected once from the header line
    - Progress fraction reported after every window via on_progress
    """

    def __init__(
        self,
        source: Source,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize reader.

        Args:
            source: Path to the file or an open binary file object
            chunk_size: Window size in bytes
            encoding: Codec name; sniffed from the first bytes when None
            on_progress: Called with a 0.0-1.0 fraction after each window
            name: Label used in log and error messages

        Raises:
            ValueError: If chunk_size is not positive
            TypeError: If source is a text-mode stream
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if isinstance(source, io.TextIOBase):
            raise TypeError(
                f"{getattr(source, 'name', '<stream>')}: text stream given, open the file in binary mode ('rb')"
            )

        self.source = source
        self.chunk_size = chunk_size
        self.encoding = encoding
        self.on_progress = on_progress
        self.name = name or self._source_name(source)

        self.header: Optional[List[str]] = None
        self.delimiter: Optional[str] = None
        self.bytes_consumed = 0
        self.total_bytes: Optional[int] = None

        self._lines: Optional[Iterator[str]] = None
        self._iterated = False

    @staticmethod
    def _source_name(source: Source) -> str:
        if isinstance(source, (str, Path)):
            return Path(source).name
        return getattr(source, "name", None) or "<stream>"

    @property
    def progress(self) -> float:
        """Fraction of the input consumed so far (0.0-1.0)."""
        if self.total_bytes is None:
            return 0.0
        if self.total_bytes == 0:
            return 1.0
        return min(self.bytes_consumed / self.total_bytes, 1.0)

    def _report_progress(self) -> None:
        if self.on_progress is not None:
            self.on_progress(self.progress)

    @staticmethod
    def _stream_size(stream: BinaryIO) -> Optional[int]:
        try:
            return os.fstat(stream.fileno()).st_size
        except (AttributeError, OSError, ValueError):
            pass
        try:
            position = stream.tell()
            stream.seek(0, os.SEEK_END)
            size = stream.tell()
            stream.seek(position)
            return size - position
        except (AttributeError, OSError, ValueError):
            return None

    def _iter_windows(self) -> Iterator[bytes]:
        if isinstance(self.source, (str, Path)):
            path = Path(self.source)
            self.total_bytes = path.stat().st_size
            with open(path, "rb") as f:
                yield from self._read_windows(f)
        else:
            self.total_bytes = self._stream_size(self.source)
            yield from self._read_windows(self.source)

    def _read_windows(self, stream: BinaryIO) -> Iterator[bytes]:
        while True:
            window = stream.read(self.chunk_size)
            if not window:
                return
            self.bytes_consumed += len(window)
            yield window

    def _start_decoder(self, sample: bytes):
        if self.encoding is None:
            self.encoding = detect_encoding(sample)
            logger.debug(f"{self.name}: detected encoding {self.encoding}")
        return codecs.getincrementaldecoder(self.encoding)(errors="replace")

    def _iter_lines(self) -> Iterator[str]:
        """Yield complete logical lines, reassembled across windows."""
        decoder = None
        pending = b""
        leftover = ""
        bom_checked = False

        for window in self._iter_windows():
            if decoder is None:
                # Sniff from at least SNIFF_BYTES so a BOM is never cut
                pending += window
                if len(pending) < SNIFF_BYTES:
                    self._report_progress()
                    continue
                window, pending = pending, b""
                decoder = self._start_decoder(window)

            text = decoder.decode(window, final=False)
            if text and not bom_checked:
                text = strip_bom(text)
                bom_checked = True

            lines = (leftover + normalize_newlines(text)).split("\n")
            leftover = lines.pop()
            self._report_progress()

            yield from lines

        tail = ""
        if decoder is None and pending:
            decoder = self._start_decoder(pending)
            tail = decoder.decode(pending, final=False)
        if decoder is not None:
            tail += decoder.decode(b"", final=True)
        if not bom_checked:
            tail = strip_bom(tail)
        if self.total_bytes is None:
            self.total_bytes = self.bytes_consumed
        self._report_progress()

        lines = (leftover + normalize_newlines(tail)).split("\n")
        if not lines[-1]:
            lines.pop()
        yield from lines

    def _ensure_lines(self) -> Iterator[str]:
        if self._lines is None:
            self._lines = self._iter_lines()
        return self._lines

    def read_header(self) -> List[str]:
        """
        Read up to and including the header line.

        Safe to call before iterating; later calls return the cached header.

        Returns:
            Header column names (trimmed); empty list for an empty file
        """
        if self.header is not None:
            return self.header

        for line in self._ensure_lines():
            if line.strip():
                self.delimiter = detect_delimiter(line)
                self.header = [h.strip() for h in parse_line(line, self.delimiter)]
                logger.debug(
                    f"{self.name}: delimiter {self.delimiter!r}, {len(self.header)} columns"
                )
                return self.header

        self.header = []
        return self.header

    def __iter__(self) -> Iterator[Dict[str, str]]:
        if self._iterated:
            raise ReaderExhaustedError(self.name)
        self._iterated = True
        return self._rows()

    def _rows(self) -> Iterator[Dict[str, str]]:
        header = self.read_header()
        if not header:
            return

        for line in self._ensure_lines():
            if not line.strip():
                continue
            row = build_row(header, parse_line(line, self.delimiter))
            if row:
                yield row

    def rows_with_progress(self) -> Iterator[Tuple[Dict[str, str], int]]:
        """Yield (row, bytes_consumed) pairs."""
        for row in self:
            yield row, self.bytes_consumed

    def close(self) -> None:
        """Release the underlying file if iteration was abandoned early."""
        if self._lines is not None:
            self._lines.close()
