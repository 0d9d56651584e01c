from abc import ABC, abstractmethod


class TokenIssuer(ABC):
    """Source of unguessable one-time tokens - application layer"""

    @abstractmethod
    def generate(self) -> str:
        """
        Return a fresh token of at least 16 random bytes, hex encoded.

        Raises:
            EntropyUnavailable: the secure random source failed
        """
        pass
