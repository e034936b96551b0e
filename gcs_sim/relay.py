"""
relay.py

Pass-through broadcast group standing in for the peer link. Payloads are
forwarded verbatim and never interpreted.
"""

import logging
from typing import Any, List, Union

from fastapi import WebSocketDisconnect

logger = logging.getLogger(__name__)

# Raised by a member whose socket has gone away underneath us
SEND_ERRORS = (WebSocketDisconnect, RuntimeError, ConnectionError)


class RelayChannel:
    """
    Open broadcast group of WebSocket-like members.

    A member only needs async accept(), send_text() and send_bytes() methods. Messages fan
    out to every other open member in join order; the sender never gets its
    own message back and there is no acknowledgement.
    """

    def __init__(self):
        self.members: List[Any] = []

    def __len__(self) -> int:
        return len(self.members)

    async def join(self, member: Any):
        await member.accept()
        self.members.append(member)
        logger.info(f"Client connected ({len(self.members)} open)")

    def leave(self, member: Any):
        if member in self.members:
            self.members.remove(member)
            logger.info(f"Client disconnected ({len(self.members)} open)")

    async def relay(self, sender: Any, message: Union[str, bytes]) -> int:
        """
        Forward message to every open member except the sender

        Binary payloads go out as binary frames, text as text.

        Returns:
            int: Number of members the message was delivered to
        """
        delivered = 0
        for member in list(self.members):
            if member is sender:
                continue
            try:
                if isinstance(message, bytes):
                    await member.send_bytes(message)
                else:
                    await member.send_text(message)
                delivered += 1
            except SEND_ERRORS as e:
                logger.debug(f"Dropping relay member after send failure: {e!r}")
                self.leave(member)
        return delivered
