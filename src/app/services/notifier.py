from abc import ABC, abstractmethod

from pydantic import BaseModel


class OutgoingEmail(BaseModel):
    """Plain-text email handed to a Notifier"""

    to: str
    subject: str
    body: str


class Notifier(ABC):
    """Out-of-band message delivery - application layer"""

    @abstractmethod
    async def send(self, email: OutgoingEmail) -> None:
        """
        Deliver one message, making a single attempt.

        Raises:
            DeliveryFailed: the transport reported an error
        """
        pass
