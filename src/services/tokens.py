import base64
import secrets

from src.services.errors import InfrastructureError

TOKEN_BYTES = 18


def generate_token(nbytes: int = TOKEN_BYTES) -> str:
    """
    Return an unguessable, URL-safe deletion token.

    The token is an opaque string and is never decoded. 18 random bytes
    encode to 24 characters without padding.
    """
    try:
        raw = secrets.token_bytes(nbytes)
    except (NotImplementedError, OSError) as exc:
        raise InfrastructureError(
            "Unable to generate a subscription token",
        ) from exc
    return base64.b64encode(raw).decode("ascii").translate(str.maketrans("+/", "-_"))
