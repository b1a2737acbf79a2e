"""Pass-through ASGI ``send`` wrapper that remembers the response status."""

from starlette.types import Message, Send


class ResponseCapture:
    """Forward every ASGI message to *send*, recording the status on the way.

    ``status_code`` starts at 200 so an app that never sends
    ``http.response.start`` is reported as successful.  Messages are awaited on
    the real ``send`` one at a time and are never copied or buffered.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self.status_code = 200

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
        await self._send(message)
