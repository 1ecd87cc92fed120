"""
Error types for the hybsearch CLI.

Every failure the client knows how to describe derives from HybsearchError,
so the CLI can report it without a traceback.
"""


class HybsearchError(Exception):
    """Base class for all hybsearch client errors."""


class ServerConnectionError(HybsearchError, ConnectionError):
    """The session connection could not be opened, dropped, or was already closed."""


class ControlPlaneError(HybsearchError):
    """An HTTP control-plane request failed or returned an unexpected body."""


class UnsupportedPipelineError(HybsearchError):
    """The server does not advertise the requested pipeline."""

    def __init__(self, server: str, pipeline: str) -> None:
        self.server = server
        self.pipeline = pipeline
        super().__init__(f'{server} does not understand the pipeline "{pipeline}"')


class FilesystemError(HybsearchError):
    """Reading the input, creating the output directory, or writing a result failed."""


class ServerReportedError(HybsearchError):
    """The server sent an error envelope. Terminal for the session, never raised by it."""


class ProtocolError(HybsearchError):
    """A message could not be decoded or encoded."""
