"""
Line-oriented request protocol spoken over the /ws WebSocket.

Client -> server (text frames, "|"-delimited):
    GENERATE|<count>|<length>
    USE|<code>

Server -> client:
    {"Result":true}        text frame, codes were generated
    {"Result":<n>}         text frame, outcome of USE (DiscountCodeResult)
    b"\\x03"                single binary byte, invalid request

Exactly one reply per request, sent on the connection that asked, in order.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from .logic import DiscountService
from .models import DiscountCodeResult, GenerateRequest, GenerateResponse, UseCodeRequest, UseCodeResponse

log = logging.getLogger(__name__)

GENERATE = "GENERATE"
USE = "USE"
DELIMITER = "|"


@dataclass(frozen=True)
class Reply:
    text: Optional[str] = None
    data: Optional[bytes] = None

    @classmethod
    def invalid(cls) -> "Reply":
        return cls(data=bytes([DiscountCodeResult.INVALID_REQUEST]))

    @classmethod
    def of(cls, response) -> "Reply":
        return cls(text=response.model_dump_json())


def handle_frame(service: DiscountService, frame: str) -> Reply:
    if not frame or frame.isspace():
        return Reply.invalid()

    parts = frame.split(DELIMITER)
    command = parts[0]
    if command == GENERATE:
        return _handle_generate(service, parts)
    if command == USE:
        return _handle_use(service, parts)
    return Reply.invalid()


def _handle_generate(service: DiscountService, parts: List[str]) -> Reply:
    if len(parts) != 3:
        return Reply.invalid()
    try:
        request = GenerateRequest(count=parts[1], length=parts[2])
    except ValidationError:
        return Reply.invalid()

    codes = service.generate_codes(request.count, request.length)
    if not codes:
        return Reply.invalid()
    # only the success flag goes back on the wire, not the codes
    return Reply.of(GenerateResponse(Result=True))


def _handle_use(service: DiscountService, parts: List[str]) -> Reply:
    if len(parts) != 2:
        return Reply.invalid()
    request = UseCodeRequest(code=parts[1])
    result = service.use_code(request.code)
    return Reply.of(UseCodeResponse(Result=int(result)))


def _frame_text(message: dict) -> str:
    text = message.get("text")
    if text is not None:
        return text
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


async def send_reply(websocket: WebSocket, reply: Reply) -> None:
    if reply.text is not None:
        await websocket.send_text(reply.text)
    else:
        await websocket.send_bytes(reply.data)


async def serve_connection(websocket: WebSocket, service: DiscountService) -> None:
    """Receive -> dispatch -> reply until the peer closes. The socket must already be accepted."""
    client = websocket.client
    peer = f"{client.host}:{client.port}" if client else "unknown"
    log.info("Connection opened: %s", peer)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            frame = _frame_text(message)
            reply = await run_in_threadpool(handle_frame, service, frame)
            await send_reply(websocket, reply)
    except WebSocketDisconnect:
        log.debug("Peer %s went away before the reply was sent", peer)
    log.info("Connection closed: %s", peer)
