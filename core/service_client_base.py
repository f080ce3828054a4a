"""
Base Service Client for Peer Service Communication

Base class for the HTTP clients the wizard uses to reach its collaborators.
"""

import httpx
import logging
from typing import Optional, Dict, Any
from abc import ABC
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from core.config import WizardConfig, get_settings

logger = logging.getLogger(__name__)


class BaseServiceClient(ABC):
    """
    Base class for peer service clients

    Handles:
    1. Base URL resolution from WizardConfig
    2. Internal service authentication header
    3. HTTP client management
    4. Timeouts
    5. GET retries on transport errors

    Example:
        class WalletClient(BaseServiceClient):
            service_name = "wallet_service"

            async def get_available(self, owner_id: str):
                response = await self.get(f"/api/v1/users/{owner_id}/balance")
                return response.json()
    """

    # Subclasses must define this
    service_name: str = None

    # Writes are never retried
    retry_attempts: int = 3
    retry_wait_multiplier: float = 1.0

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[WizardConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        enable_retry: bool = True,
    ):
        """
        Initialize service client

        Args:
            base_url: Service base URL (defaults to the URL configured for service_name)
            config: WizardConfig instance (defaults to global settings)
            transport: Optional httpx transport (used for testing)
            enable_retry: Retry GET requests on transport errors
        """
        self.enable_retry = enable_retry
        if not self.service_name:
            raise ValueError(f"{self.__class__.__name__} must define 'service_name'")

        config = config or get_settings().wizard
        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            self.base_url = config.service_urls[self.service_name].rstrip('/')

        self.client = httpx.AsyncClient(
            timeout=config.http_timeout,
            headers=self._build_default_headers(config.internal_service_token),
            transport=transport,
        )

        logger.debug(f"Initialized {self.service_name} client: {self.base_url}")

    def _build_default_headers(self, token: Optional[str]) -> Dict[str, str]:
        """Build default request headers"""
        headers = {
            "Accept": "application/json",
            "User-Agent": f"campaign-wizard/{self.service_name}",
        }
        if token:
            headers["X-Internal-Service-Token"] = token
        return headers

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.service_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP helpers
    # ========================================

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """GET request, retried on transport errors"""
        url = f"{self.base_url}{path}"
        if not self.enable_retry:
            return await self.client.get(url, params=params)

        @retry(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait_multiplier, min=0, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True
        )
        async def _retry_wrapper():
            return await self.client.get(url, params=params)

        try:
            return await _retry_wrapper()
        except httpx.TransportError as e:
            logger.error(f"[{self.service_name}] GET {path} failed after retries: {e}")
            raise

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """POST request"""
        url = f"{self.base_url}{path}"
        return await self.client.post(url, json=json, files=files, data=data)

    @staticmethod
    def error_detail(response: httpx.Response, default: str) -> str:
        """Error detail from the response body, or default when it has none"""
        try:
            body = response.json()
        except ValueError:
            return default
        detail = body.get("detail") if isinstance(body, dict) else None
        return str(detail) if detail else default

    async def health_check(self) -> bool:
        """Check whether the peer service is healthy"""
        try:
            response = await self.get("/health")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"{self.service_name} health check failed: {e}")
            return False


__all__ = ["BaseServiceClient"]
