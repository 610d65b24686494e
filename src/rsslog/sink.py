"""Frame output sink."""

import sys

from .errors import SinkOpenFailed, SinkWriteFailed


class OutputSink:
    """Line-oriented output to a file or stdout.

    A file is created (or truncated) on [`open`][.], and only flushed when it
    is closed. Stdout is flushed after every line so that the output can be
    piped into a live consumer, and is never closed.

    Usage:
        ```python
        with OutputSink(path) as sink:
            sink.write_line("1\\t2\\t3\\t\\n")
        ```

    Args:
        path: output file; `None` for stdout.
    """

    def __init__(self, path: str | None = None) -> None:
        self.path = path
        self._stream = None

    @property
    def is_stdout(self) -> bool:
        return self.path is None

    def open(self) -> "OutputSink":
        """Open the sink.

        Raises:
            SinkOpenFailed: the output file could not be created.
        """
        if self.path is None:
            # Resolved at open time, so that redirected stdout is respected.
            self._stream = sys.stdout
        else:
            try:
                self._stream = open(self.path, "w")
            except OSError as e:
                raise SinkOpenFailed(
                    f"Opening file {self.path} failed: {e}") from e
        return self

    def write_line(self, line: str) -> None:
        """Write a (newline-terminated) line.

        Raises:
            SinkWriteFailed: the output could not be written.
        """
        if self._stream is None:
            raise ValueError("Sink is not open.")
        try:
            self._stream.write(line)
            if self.is_stdout:
                self._stream.flush()
        except OSError as e:
            raise SinkWriteFailed(f"Writing to {self._name} failed: {e}") from e

    def flush(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.flush()
        except OSError as e:
            raise SinkWriteFailed(
                f"Flushing {self._name} failed: {e}") from e

    def close(self) -> None:
        """Close the output file; stdout is only flushed.

        The sink is closed even if the final flush fails.
        """
        if self._stream is None:
            return
        try:
            if self.is_stdout:
                self._stream.flush()
            else:
                self._stream.close()
        except OSError as e:
            raise SinkWriteFailed(f"Closing {self._name} failed: {e}") from e
        finally:
            self._stream = None

    @property
    def _name(self) -> str:
        return "stdout" if self.path is None else f"file {self.path}"

    def __enter__(self) -> "OutputSink":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
