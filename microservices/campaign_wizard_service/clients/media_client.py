"""
Media Service Client

MediaUploader backed by media_service.
"""

import logging

import httpx

from core.service_client_base import BaseServiceClient

from ..models import MediaFile
from ..protocols import MediaUploadError

logger = logging.getLogger(__name__)


class MediaClient(BaseServiceClient):
    """Client for media_service"""

    service_name = "media_service"

    async def upload(self, file: MediaFile) -> str:
        """
        Upload a creative asset and return its URL.

        Raises:
            MediaUploadError: upload rejected or the service is unreachable
        """
        try:
            response = await self.post(
                "/api/v1/media/upload",
                files={"file": (file.filename, file.content, file.content_type)},
            )
            response.raise_for_status()
            url = response.json().get("url")

        except httpx.HTTPStatusError as e:
            logger.error(f"Media upload of {file.filename} rejected: {e.response.status_code}")
            raise MediaUploadError(
                self.error_detail(e.response, f"Upload failed (HTTP {e.response.status_code})")
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Error uploading {file.filename}: {e}")
            raise MediaUploadError(f"Upload failed: {e}") from e

        except (ValueError, AttributeError) as e:
            logger.error(f"Malformed upload response for {file.filename}: {e}")
            raise MediaUploadError("Upload failed: malformed response from media service") from e

        if not url:
            raise MediaUploadError("Upload failed: no URL returned")
        logger.info(f"Uploaded {file.filename}")
        return url
