"""
Routing of inbound session messages.

The dispatcher handles one message at a time: it reports progress, saves
stage results, and closes the connection when the server reports an error
or exits.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from rich.console import Console
from rich.markup import escape

from hybsearch.errors import ProtocolError, ServerReportedError
from hybsearch.messages import (
    Envelope,
    Exit,
    ServerError,
    StageComplete,
    StageStart,
    UnrecognizedMessage,
    decode_envelope,
)
from hybsearch.persistence import ResultPersister
from hybsearch.utils import format_duration

if TYPE_CHECKING:
    from hybsearch.session import Session

console = Console()
err_console = Console(stderr=True)


class MessageDispatcher:
    """Routes decoded envelopes to their handlers."""

    def __init__(
        self,
        persister: Optional[ResultPersister] = None,
        console: Console = console,
        err_console: Console = err_console,
    ) -> None:
        self.persister = persister or ResultPersister()
        self.console = console
        self.err_console = err_console

    async def handle(self, raw: Union[str, bytes], dest_dir: Optional[Path], session: "Session") -> None:
        """Process one raw message for ``session``.

        Malformed and unknown messages are reported and skipped. Errors from
        saving a result propagate.
        """
        if session.finished:
            return

        try:
            envelope = decode_envelope(raw)
        except ProtocolError as e:
            self.err_console.print(f"Warning: ignoring malformed message: {escape(str(e))}", style="yellow")
            return

        await self.dispatch(envelope, dest_dir, session)

    async def dispatch(self, envelope: Envelope, dest_dir: Optional[Path], session: "Session") -> None:
        if isinstance(envelope, StageStart):
            self._on_stage_start(envelope)
        elif isinstance(envelope, StageComplete):
            self._on_stage_complete(envelope, dest_dir, session)
        elif isinstance(envelope, ServerError):
            await self._on_error(envelope, session)
        elif isinstance(envelope, Exit):
            await self._on_exit(session)
        elif isinstance(envelope, UnrecognizedMessage):
            self.err_console.print(f'unknown cmd "{escape(envelope.type)}"', style="yellow")

    def _on_stage_start(self, message: StageStart) -> None:
        self.console.print(f"{escape(message.stage)}: start")

    def _on_stage_complete(self, message: StageComplete, dest_dir: Optional[Path], session: "Session") -> None:
        cached = " (cached)" if message.cached else ""
        self.console.print(
            f"{escape(message.stage)}: completed in {format_duration(message.time_taken)}{cached}"
        )

        if message.stage in session.completed_stages:
            self.err_console.print(
                f"Warning: stage {escape(message.stage)} completed again, keeping the latest result",
                style="yellow",
            )
        else:
            session.completed_stages.append(message.stage)

        if dest_dir is not None:
            self.persister.persist(dest_dir, message.stage, message.result)

    async def _on_error(self, message: ServerError, session: "Session") -> None:
        text = message.error if isinstance(message.error, str) else str(message.error)
        self.err_console.print(escape(text), style="red")
        session.server_error = ServerReportedError(text)
        await self._finish(session)

    async def _on_exit(self, session: "Session") -> None:
        self.console.print("server exited")
        await self._finish(session)

    async def _finish(self, session: "Session") -> None:
        session.finished = True
        if session.connection is not None:
            await session.connection.close()
