"""
Long-lived event loop for one UI session.

Async HTTP clients (google-genai, the LangChain chat model) pool their
connections on the loop that opened them. Every coroutine of a session must
therefore run on the same loop, which stays open until the session ends.
"""

import asyncio
import logging
from typing import Any, Awaitable

logger = logging.getLogger(__name__)


class SessionLoop:
    """Runs a session's coroutines to completion on one persistent loop."""

    def __init__(self):
        self._loop = asyncio.new_event_loop()
        logger.debug("Session event loop created")

    @property
    def closed(self) -> bool:
        return self._loop.is_closed()

    def run(self, coro: Awaitable[Any]) -> Any:
        """Run a coroutine on the session loop and return its result."""
        if self._loop.is_closed():
            if asyncio.iscoroutine(coro):
                coro.close()
            raise RuntimeError("Session event loop is closed")
        return self._loop.run_until_complete(coro)

    def close(self):
        """Shut down async generators and close the loop; safe to repeat."""
        if self._loop.is_closed():
            return
        try:
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
        finally:
            self._loop.close()
            logger.debug("Session event loop closed")
