"""Cloudinary upload API client."""

import hashlib
import time
from typing import Any, Dict, Optional

import httpx

from ..core.config import CDNConfig, get_config
from ..core.exceptions import ConfigurationError, IntegrationError
from ..core.logger import get_logger

logger = get_logger(__name__)

# Parameters never included in the upload signature
UNSIGNED_PARAMS = {'file', 'api_key', 'resource_type', 'cloud_name', 'signature'}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """SHA-1 over the sorted ``k=v`` pairs joined by ``&``, followed by the secret."""
    to_sign = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if key not in UNSIGNED_PARAMS and params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode('utf-8')).hexdigest()


def video_thumbnail_url(secure_url: str, size: int = 800) -> str:
    """JPEG poster frame for an uploaded video, e.g. ``.../video/upload/<t>/reel.jpg``."""
    url = secure_url.replace(
        "/video/upload/", f"/video/upload/c_fill,f_auto,q_auto,w_{size},h_{size}/", 1
    )
    stem, dot, _ = url.rpartition('.')
    if not dot or '/' in url[len(stem):]:
        return f"{url}.jpg"
    return f"{stem}.jpg"


class CloudinaryClient:
    """Signed uploads, deletions and delivery URLs for the image CDN."""

    def __init__(
        self,
        config: Optional[CDNConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_config().cdn
        self.timeout = httpx.Timeout(self.config.upload_timeout)
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _require_credentials(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(
                "CDN credentials are not configured",
                detail="Set PHOTO_STUDIO_CDN__CLOUD_NAME, PHOTO_STUDIO_CDN__API_KEY and PHOTO_STUDIO_CDN__API_SECRET",
            )

    def _endpoint(self, resource_type: str, action: str) -> str:
        return f"{self.config.api_url.rstrip('/')}/{self.config.cloud_name}/{resource_type}/{action}"

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v not in (None, "")}
        params['timestamp'] = int(time.time())
        params['signature'] = sign_params(params, self.config.api_secret)
        params['api_key'] = self.config.api_key
        return params

    def _folder(self, folder: Optional[str]) -> str:
        base = self.config.base_folder.strip('/')
        if not folder:
            return base
        return folder if folder.startswith(base) else f"{base}/{folder.strip('/')}"

    async def _post(self, url: str, data: Dict[str, Any], files: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error(f"CDN request failed: {e}")
            raise IntegrationError("CDN request failed", detail=str(e))

        if response.status_code >= 400:
            try:
                detail = response.json().get('error', response.text)
            except ValueError:
                detail = response.text
            logger.error(f"CDN returned {response.status_code}: {detail}")
            raise IntegrationError("CDN request failed", detail=detail, upstream_status=response.status_code)

        return response.json()

    async def upload(
        self,
        content: bytes,
        folder: Optional[str] = None,
        public_id: Optional[str] = None,
        resource_type: str = "image",
        filename: str = "upload",
        tags: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload raw bytes; returns the CDN's JSON (``secure_url``, ``public_id``...)."""
        self._require_credentials()
        params = self._signed({
            'folder': self._folder(folder),
            'public_id': public_id,
            'tags': tags,
        })
        result = await self._post(
            self._endpoint(resource_type, "upload"),
            data=params,
            files={'file': (filename, content)},
        )
        logger.info(f"Uploaded {resource_type} {result.get('public_id')} ({len(content)} bytes)")
        return result

    async def upload_from_url(
        self,
        url: str,
        folder: Optional[str] = None,
        resource_type: str = "auto",
        tags: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Let the CDN fetch a remote file."""
        self._require_credentials()
        params = self._signed({'folder': self._folder(folder), 'tags': tags})
        params['file'] = url
        result = await self._post(self._endpoint(resource_type, "upload"), data=params)
        logger.info(f"Imported {url} as {result.get('public_id')}")
        return result

    async def destroy(self, public_id: str, resource_type: str = "image") -> bool:
        self._require_credentials()
        params = self._signed({'public_id': public_id})
        result = await self._post(self._endpoint(resource_type, "destroy"), data=params)
        return result.get('result') == 'ok'

    def build_url(
        self,
        public_id: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        crop: str = "fill",
        quality: str = "auto",
        resource_type: str = "image",
    ) -> str:
        """Delivery URL such as ``.../image/upload/c_fill,f_auto,q_auto,w_800,h_800/<id>``."""
        if not self.config.cloud_name:
            raise ConfigurationError("CDN cloud name is not configured")

        transformation = [f"c_{crop}", "f_auto", f"q_{quality}"]
        if width:
            transformation.append(f"w_{width}")
        if height:
            transformation.append(f"h_{height}")

        return (
            f"{self.config.delivery_url.rstrip('/')}/{self.config.cloud_name}/"
            f"{resource_type}/upload/{','.join(transformation)}/{public_id}"
        )
