"""Exceptions raised by discovery providers."""

from typing import Optional


class ProviderFailure(Exception):
    """
    A discovery provider could not produce a business record.

    When a remote browser session was opened before the failure, its id and
    replay URL travel with the exception so callers can still offer playback.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        session_id: Optional[str] = None,
        session_url: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.session_id = session_id
        self.session_url = session_url
        self.cause = cause

    @property
    def has_session(self) -> bool:
        return bool(self.session_id or self.session_url)
