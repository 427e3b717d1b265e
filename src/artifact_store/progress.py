"""
Download progress reporting.

The downloader only talks to a ProgressSink: it sets a total, reports
byte counts as they are read, and always finishes the sink. Rendering is
left to the sink implementation.
"""

from typing import BinaryIO, Callable, Optional, Protocol, TextIO

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class ProgressSink(Protocol):
    """Receives byte totals during a transfer."""

    def set_total(self, total: int) -> None:
        ...

    def start(self) -> None:
        ...

    def add(self, count: int) -> None:
        ...

    def finish(self) -> None:
        ...


ProgressFactory = Callable[[TextIO], ProgressSink]


class ProgressReader:
    """
    Read-through proxy that reports every chunk to a progress sink.

    Only read() is proxied; that is all shutil.copyfileobj needs.
    """

    def __init__(self, stream: BinaryIO, sink: ProgressSink):
        self._stream = stream
        self._sink = sink
        self.consumed = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self.consumed += len(chunk)
            self._sink.add(len(chunk))
        return chunk


class NullProgress:
    """Sink that ignores everything."""

    def set_total(self, total: int) -> None:
        pass

    def start(self) -> None:
        pass

    def add(self, count: int) -> None:
        pass

    def finish(self) -> None:
        pass


class RichProgressBar:
    """
    Progress bar rendered with rich on the given output stream.

    A total of 0 means the size is unknown; the bar then shows bytes
    transferred without a percentage. finish() is safe to call without
    start() and more than once.
    """

    def __init__(self, output: TextIO):
        self._console = Console(file=output)
        self._progress = Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self._console,
            transient=False,
        )
        self._task_id: Optional[TaskID] = None
        self.total = 0
        self.completed = 0
        self._started = False

    def set_total(self, total: int) -> None:
        self.total = total

    def start(self) -> None:
        self._task_id = self._progress.add_task(
            "download", total=self.total or None, completed=self.completed
        )
        self._progress.start()
        self._started = True

    def add(self, count: int) -> None:
        self.completed += count
        if self._task_id is not None:
            self._progress.update(self._task_id, advance=count)

    def finish(self) -> None:
        if not self._started:
            return
        if self._task_id is not None and self.total:
            self._progress.update(self._task_id, completed=self.total)
        self._progress.stop()
        self._started = False


def rich_progress(output: TextIO) -> ProgressSink:
    return RichProgressBar(output)
