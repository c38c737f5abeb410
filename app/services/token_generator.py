import uuid


class TokenGenerator:
    """Issues random 128-bit QR tokens (UUID4, backed by os.urandom)."""

    def generate(self) -> uuid.UUID:
        return uuid.uuid4()


token_generator = TokenGenerator()
