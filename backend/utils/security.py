from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from utils.jwt import decode_token

security = HTTPBearer()


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    return credentials.credentials


def get_token_claims(token: str = Depends(get_bearer_token)) -> dict:
    try:
        return decode_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def _claim(claims: dict, *keys) -> str | None:
    for key in keys:
        value = claims.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


async def get_current_customer_id(claims: dict = Depends(get_token_claims)) -> str:
    customer_id = _claim(claims, "customerId", "sub")

    if not customer_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return customer_id


async def get_current_store_id(claims: dict = Depends(get_token_claims)) -> str:
    store_id = _claim(claims, "storeId")

    if not store_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Seller access only",
        )
    return store_id
