"""Fake push adapter: tracks which users are "connected" and what they were sent."""

from storefront.channel.push_port import PushPort


class FakePushAdapter(PushPort):
    def __init__(self):
        self.connected: set[str] = set()
        self.sent_pushes: list[dict] = []
        self.should_succeed = True

    def connect(self, user_id: str):
        self.connected.add(str(user_id))

    def disconnect(self, user_id: str):
        self.connected.discard(str(user_id))

    def configure(self, should_succeed: bool = True):
        self.should_succeed = should_succeed

    def is_connected(self, user_id: str) -> bool:
        return str(user_id) in self.connected

    def send(self, user_id: str, payload: dict) -> dict:
        if not self.should_succeed:
            raise ConnectionError("Push channel unavailable")

        self.sent_pushes.append({"user_id": str(user_id), "payload": payload})
        return {"status": "sent"}

    def reset(self):
        self.connected.clear()
        self.sent_pushes.clear()
        self.should_succeed = True
