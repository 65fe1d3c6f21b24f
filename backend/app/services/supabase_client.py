"""
Supabase REST Clients
=====================

Thin ``httpx`` clients for the parts of Supabase that are not plain
database tables:

- Auth (GoTrue): password sign-in and the admin user API
- Storage: document upload, download and removal

Requests use the service role key and are never retried. Upstream
failures surface as ``UpstreamServiceError`` so the API returns a
user-facing 502.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    UpstreamServiceError,
)
from app.core.logging import get_logger

logger = get_logger(__name__)


class SupabaseClient:
    """
    Base client holding the HTTP session and API keys.

    Args:
        base_url: Supabase project URL
        service_key: Service role key used for admin and storage calls
        anon_key: Public key used for password sign-in
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    service_name = "supabase"

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        anon_key: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.SUPABASE_SERVICE_ROLE_KEY
        self.anon_key = anon_key if anon_key is not None else settings.SUPABASE_ANON_KEY
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    def _headers(self, use_anon_key: bool = False) -> Dict[str, str]:
        key = self.anon_key if use_anon_key else self.service_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
        }

    def _request(
        self,
        method: str,
        path: str,
        use_anon_key: bool = False,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        merged = self._headers(use_anon_key)
        if headers:
            merged.update(headers)

        try:
            response = self._http.request(method, path, headers=merged, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Supabase request failed",
                service=self.service_name,
                method=method,
                path=path,
                error=str(e),
            )
            raise UpstreamServiceError(self.service_name)

        logger.debug(
            "Supabase request completed",
            service=self.service_name,
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    def _fail(self, response: httpx.Response, action: str) -> UpstreamServiceError:
        logger.error(
            "Supabase returned an error",
            service=self.service_name,
            action=action,
            status_code=response.status_code,
            body=response.text[:500],
        )
        return UpstreamServiceError(self.service_name, upstream_status=response.status_code)

    def close(self) -> None:
        self._http.close()


# =====================================
# Auth
# =====================================

class SupabaseAuthClient(SupabaseClient):
    """Supabase Auth (GoTrue) operations used by the console."""

    service_name = "auth"

    def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """
        Exchange email and password for a session.

        Returns:
            GoTrue token response (access_token, refresh_token, expires_in, user)

        Raises:
            InvalidCredentialsError: If the credentials are rejected
        """
        response = self._request(
            "POST",
            "/auth/v1/token",
            use_anon_key=True,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in (400, 401):
            raise InvalidCredentialsError()
        if response.is_error:
            raise self._fail(response, "sign_in")
        return response.json()

    def create_user(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a confirmed auth user.

        Returns:
            The new auth user id

        Raises:
            ConflictError: If the email is already registered
        """
        response = self._request(
            "POST",
            "/auth/v1/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata or {},
            },
        )
        if response.status_code in (409, 422):
            raise ConflictError("A user with this email already exists")
        if response.is_error:
            raise self._fail(response, "create_user")
        return response.json()["id"]

    def update_user_password(self, user_id: str, password: str) -> None:
        response = self._request(
            "PUT",
            f"/auth/v1/admin/users/{user_id}",
            json={"password": password},
        )
        if response.is_error:
            raise self._fail(response, "update_user")

    def delete_user(self, user_id: str) -> None:
        """Delete an auth user. A user that is already gone is not an error."""
        response = self._request("DELETE", f"/auth/v1/admin/users/{user_id}")
        if response.status_code == 404:
            logger.warning("Auth user already deleted", user_id=user_id)
            return
        if response.is_error:
            raise self._fail(response, "delete_user")


# =====================================
# Storage
# =====================================

class SupabaseStorageClient(SupabaseClient):
    """Supabase Storage operations on the documents bucket."""

    service_name = "storage"

    def __init__(self, bucket: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.bucket = bucket or settings.STORAGE_BUCKET

    def _object_path(self, path: str) -> str:
        return f"/storage/v1/object/{self.bucket}/{quote(path)}"

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Store a new object. Existing objects are never overwritten.

        Returns:
            The storage path of the object
        """
        response = self._request(
            "POST",
            self._object_path(path),
            content=content,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "x-upsert": "false",
            },
        )
        if response.is_error:
            raise self._fail(response, "upload")
        logger.info("Object uploaded", bucket=self.bucket, path=path, size=len(content))
        return path

    def download(self, path: str) -> Tuple[bytes, str]:
        """
        Fetch an object.

        Returns:
            Tuple of (content, content type)
        """
        response = self._request("GET", self._object_path(path))
        if response.status_code == 404 or (
            response.status_code == 400 and "not_found" in response.text.lower()
        ):
            raise NotFoundError(resource="Stored file", identifier=path)
        if response.is_error:
            raise self._fail(response, "download")
        return response.content, response.headers.get("content-type", "application/octet-stream")

    def remove(self, paths: List[str]) -> None:
        response = self._request(
            "DELETE",
            f"/storage/v1/object/{self.bucket}",
            json={"prefixes": paths},
        )
        if response.is_error:
            raise self._fail(response, "remove")
        logger.info("Objects removed", bucket=self.bucket, paths=paths)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"


# =====================================
# Dependencies
# =====================================

@lru_cache
def get_auth_client() -> SupabaseAuthClient:
    """FastAPI dependency returning the shared auth client."""
    return SupabaseAuthClient()


@lru_cache
def get_storage_client() -> SupabaseStorageClient:
    """FastAPI dependency returning the shared storage client."""
    return SupabaseStorageClient()
