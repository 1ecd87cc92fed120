"""
One end-to-end hybsearch run.

SessionClient checks the server can run the requested pipeline, sends the
input file with a single start command, then hands every inbound message to
the MessageDispatcher until the server reports an error or exits.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape

from hybsearch.config import ConfigManager
from hybsearch.connection import Connection, ConnectionManager
from hybsearch.dispatcher import MessageDispatcher
from hybsearch.errors import ServerReportedError, UnsupportedPipelineError
from hybsearch.messages import StartCommand
from hybsearch.persistence import ResultPersister
from hybsearch.server import ServerApi
from hybsearch.utils import format_duration
from hybsearch.validation import detect_sequence_format, read_sequence_file

console = Console()
err_console = Console(stderr=True)


@dataclass
class Session:
    """State of a single run against one server."""
    server: str
    pipeline: str
    input_file: Path
    out_dir: Optional[Path] = None

    data: Optional[str] = None
    dest_dir: Optional[Path] = None
    connection: Optional[Connection] = None
    server_error: Optional[ServerReportedError] = None
    completed_stages: List[str] = field(default_factory=list)
    finished: bool = False

    @property
    def socket_url(self) -> str:
        return f"ws://{self.server}"


class SessionClient:
    """Runs sessions against a hybsearch server."""

    def __init__(
        self,
        connection_manager: Optional[ConnectionManager] = None,
        api_factory: Optional[Callable[[str], ServerApi]] = None,
        persister: Optional[ResultPersister] = None,
        dispatcher: Optional[MessageDispatcher] = None,
        config_manager: Optional[ConfigManager] = None,
    ) -> None:
        self.config_manager = config_manager or ConfigManager()
        self.connection_manager = connection_manager or ConnectionManager()
        self.api_factory = api_factory or self._default_api
        self.persister = persister or ResultPersister()
        self.dispatcher = dispatcher or MessageDispatcher(self.persister)

    def _default_api(self, server: str) -> ServerApi:
        return ServerApi(
            server,
            timeout=self.config_manager.get_http_timeout(),
            debug=self.config_manager.is_debug(),
        )

    async def run(self, session: Session) -> Session:
        """Run ``session`` to completion.

        A server-reported error ends the run and is left on
        ``session.server_error``; every setup failure is raised after the
        connection has been closed.

        Raises:
            ServerConnectionError: If the connection fails to open or drops
            ControlPlaneError: If the uptime or pipeline queries fail
            UnsupportedPipelineError: If the server does not offer the pipeline
            FilesystemError: If the input cannot be read or a result cannot be saved
        """
        async with self.connection_manager.connect(session.socket_url) as connection:
            session.connection = connection
            console.print(f"connected to {escape(session.server)}")

            # One client per thread; requests sessions are not shared across threads
            uptime_api = self.api_factory(session.server)
            pipelines_api = self.api_factory(session.server)
            uptime, pipelines = await asyncio.gather(
                asyncio.to_thread(uptime_api.get_uptime),
                asyncio.to_thread(pipelines_api.list_pipelines),
            )
            console.print(f"server uptime: {format_duration(uptime)}")

            if session.pipeline not in pipelines:
                raise UnsupportedPipelineError(session.server, session.pipeline)

            session.data = read_sequence_file(session.input_file)
            if detect_sequence_format(session.data) is None:
                err_console.print(
                    f"Warning: {escape(str(session.input_file))} does not look like GenBank or FASTA",
                    style="yellow",
                )

            if session.out_dir is not None:
                session.dest_dir = self.persister.prepare_destination(session.out_dir, session.input_file)

            start = StartCommand(
                pipeline=session.pipeline,
                filepath=str(session.input_file),
                data=session.data,
            )
            if self.config_manager.is_debug():
                console.print(f"[dim]Sending {len(session.data)} characters to {escape(session.socket_url)}[/dim]")
            await connection.send(start.encode())

            async for raw in connection:
                await self.dispatcher.handle(raw, session.dest_dir, session)
                if session.finished:
                    break

            if not session.finished:
                err_console.print("Warning: server closed the connection before the run finished", style="yellow")

        return session
