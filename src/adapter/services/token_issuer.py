import secrets

from src.app.services.token_issuer import TokenIssuer
from src.domain.exceptions import EntropyUnavailable

TOKEN_BYTES = 16  # 32 hex characters


class SecureTokenIssuer(TokenIssuer):
    """Token issuer backed by the OS CSPRNG through the secrets module"""

    def __init__(self, nbytes: int = TOKEN_BYTES):
        if nbytes < TOKEN_BYTES:
            raise ValueError(f"Tokens need at least {TOKEN_BYTES} random bytes")
        self.nbytes = nbytes

    def generate(self) -> str:
        try:
            return secrets.token_hex(self.nbytes)
        except (OSError, NotImplementedError) as exc:
            raise EntropyUnavailable("secure random source unavailable") from exc
