from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backoffice.core.security import InvalidTokenError, TenantContext, decode_access_token
from backoffice.storage.gateway import S3BlobStore, get_blob_store
from backoffice.storage.thumbnails import Thumbnailer

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_context(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> TenantContext:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_storage() -> S3BlobStore:
    return get_blob_store()


def get_thumbnail_generator(blob_store: S3BlobStore = Depends(get_storage)) -> Thumbnailer:
    return Thumbnailer(blob_store)
