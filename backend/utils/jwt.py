from jose import jwt
from config.env import JWT_SECRET, JWT_ALGORITHM


def _jwt_secret() -> str | None:
    secret = (JWT_SECRET or "").strip()
    return secret or None


def decode_token(token: str) -> dict:
    """
    Claims of a storefront access token. Tokens are issued by the commerce
    API; without a shared secret the claims are read unverified and the
    commerce API remains the one enforcing them.
    """
    secret = _jwt_secret()
    if secret is None:
        return jwt.get_unverified_claims(token)
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
