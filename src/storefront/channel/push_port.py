"""Real-time push port: delivers a payload to a user only while they are connected."""

from abc import ABC, abstractmethod


class PushPort(ABC):
    @abstractmethod
    def is_connected(self, user_id: str) -> bool: ...

    @abstractmethod
    def send(self, user_id: str, payload: dict) -> dict:
        """Push ``payload`` to every live connection of ``user_id``.

        Returns:
            dict with keys: status ("sent" or "failed"), error (optional)
        """
        ...
