"""
Component Tests for Campaign Wizard Service Clients

Tests the wallet, media and campaign clients against httpx mock transports.
"""

import json
from decimal import Decimal

import httpx
import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import WizardConfig
from microservices.campaign_wizard_service.clients import (
    CampaignClient,
    MediaClient,
    WalletClient,
)
from microservices.campaign_wizard_service.models import FinishOutcome, WizardSnapshot, WizardState
from microservices.campaign_wizard_service.protocols import (
    BalanceUnavailableError,
    FinalizeCampaignError,
    MediaUploadError,
)


@pytest.fixture
def config():
    return WizardConfig(
        wallet_service_url="http://wallet.test",
        media_service_url="http://media.test",
        campaign_service_url="http://campaign.test",
        internal_service_token="internal-token",
    )


def make_client(client_cls, config, handler):
    client = client_cls(config=config, transport=httpx.MockTransport(handler))
    client.retry_wait_multiplier = 0
    return client


class TestWalletClient:
    """Tests for the balances provider"""

    @pytest.mark.asyncio
    async def test_get_available(self, config, owner_id):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"available_balance": "300.50"})

        client = make_client(WalletClient, config, handler)
        balance = await client.get_available(owner_id)
        await client.close()

        assert balance == Decimal("300.50")
        assert str(requests[0].url) == f"http://wallet.test/api/v1/users/{owner_id}/balance"
        assert requests[0].headers["X-Internal-Service-Token"] == "internal-token"

    @pytest.mark.asyncio
    async def test_negative_balance(self, config, owner_id):
        client = make_client(
            WalletClient, config, lambda request: httpx.Response(200, json={"available_balance": -20})
        )
        assert await client.get_available(owner_id) == Decimal("-20")
        await client.close()

    @pytest.mark.asyncio
    async def test_http_error(self, config, owner_id):
        client = make_client(WalletClient, config, lambda request: httpx.Response(503))

        with pytest.raises(BalanceUnavailableError):
            await client.get_available(owner_id)
        await client.close()

    @pytest.mark.asyncio
    async def test_malformed_response(self, config, owner_id):
        client = make_client(WalletClient, config, lambda request: httpx.Response(200, json={"balance": 1}))

        with pytest.raises(BalanceUnavailableError):
            await client.get_available(owner_id)
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_errors_retried(self, config, owner_id):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"available_balance": "1000"})

        client = make_client(WalletClient, config, handler)
        balance = await client.get_available(owner_id)
        await client.close()

        assert balance == Decimal("1000")
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, config, owner_id):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(WalletClient, config, handler)

        with pytest.raises(BalanceUnavailableError):
            await client.get_available(owner_id)
        await client.close()


class TestMediaClient:
    """Tests for the media uploader"""

    @pytest.mark.asyncio
    async def test_upload(self, config, factory):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"url": "https://cdn.example.com/media/banner.png"})

        client = make_client(MediaClient, config, handler)
        url = await client.upload(factory.make_media_file("banner.png"))
        await client.close()

        assert url == "https://cdn.example.com/media/banner.png"
        assert requests[0].url.path == "/api/v1/media/upload"
        assert b'filename="banner.png"' in requests[0].content

    @pytest.mark.asyncio
    async def test_rejected_upload_uses_service_detail(self, config, factory):
        client = make_client(
            MediaClient, config, lambda request: httpx.Response(413, json={"detail": "File too large"})
        )

        with pytest.raises(MediaUploadError, match="File too large"):
            await client.upload(factory.make_media_file())
        await client.close()

    @pytest.mark.asyncio
    async def test_rejected_upload_without_detail(self, config, factory):
        client = make_client(MediaClient, config, lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(MediaUploadError, match="HTTP 500"):
            await client.upload(factory.make_media_file())
        await client.close()

    @pytest.mark.asyncio
    async def test_non_json_body(self, config, factory):
        client = make_client(
            MediaClient, config, lambda request: httpx.Response(200, text="<html>gateway</html>")
        )

        with pytest.raises(MediaUploadError, match="malformed response"):
            await client.upload(factory.make_media_file())
        await client.close()

    @pytest.mark.asyncio
    async def test_non_object_body(self, config, factory):
        client = make_client(MediaClient, config, lambda request: httpx.Response(200, json=["banner.png"]))

        with pytest.raises(MediaUploadError, match="malformed response"):
            await client.upload(factory.make_media_file())
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_url(self, config, factory):
        client = make_client(MediaClient, config, lambda request: httpx.Response(200, json={}))

        with pytest.raises(MediaUploadError):
            await client.upload(factory.make_media_file())
        await client.close()


class TestCampaignClient:
    """Tests for campaign finalization"""

    @pytest.mark.asyncio
    async def test_finalize(self, config, factory, owner_id):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"campaign_id": "cmp_test_0001"})

        snapshot = factory.make_valid_snapshot()
        client = make_client(CampaignClient, config, handler)
        campaign_id = await client.finalize(snapshot, owner_id, draft_id="drf_test_0001")
        await client.close()

        assert campaign_id == "cmp_test_0001"
        body = json.loads(requests[0].content)
        assert body["owner_id"] == owner_id
        assert body["draft_id"] == "drf_test_0001"
        assert body["configuration"] == snapshot.to_payload()

    @pytest.mark.asyncio
    async def test_service_error_passed_verbatim(self, config, factory, owner_id):
        client = make_client(
            CampaignClient,
            config,
            lambda request: httpx.Response(409, json={"detail": "Campaign title already in use"}),
        )

        with pytest.raises(FinalizeCampaignError) as exc_info:
            await client.finalize(factory.make_valid_snapshot(), owner_id)
        await client.close()

        assert str(exc_info.value) == "Campaign title already in use"

    @pytest.mark.asyncio
    async def test_finalize_not_retried(self, config, factory, owner_id):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(CampaignClient, config, handler)

        with pytest.raises(FinalizeCampaignError, match="Campaign service unavailable"):
            await client.finalize(factory.make_valid_snapshot(), owner_id)
        await client.close()

        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_missing_campaign_id(self, config, factory, owner_id):
        client = make_client(CampaignClient, config, lambda request: httpx.Response(201, json={}))

        with pytest.raises(FinalizeCampaignError):
            await client.finalize(factory.make_valid_snapshot(), owner_id)
        await client.close()

    @pytest.mark.asyncio
    async def test_non_json_body(self, config, factory, owner_id):
        client = make_client(
            CampaignClient, config, lambda request: httpx.Response(201, text="<html>gateway</html>")
        )

        with pytest.raises(FinalizeCampaignError, match="malformed response"):
            await client.finalize(factory.make_valid_snapshot(), owner_id)
        await client.close()


class TestMalformedResponsesInWizard:
    """Garbled peer responses stay inside the wizard's failure results"""

    @pytest.mark.asyncio
    async def test_attach_media_does_not_raise(self, config, make_wizard, factory, error_observer):
        # Given: a media gateway answering with an HTML page
        media = make_client(
            MediaClient, config, lambda request: httpx.Response(200, text="<html>gateway</html>")
        )
        wizard = make_wizard(media_uploader=media)

        # When: attaching a creative
        result = await wizard.attach_media(factory.make_media_file())
        await media.close()

        # Then: a local, reported failure
        assert not result.success
        assert "malformed response" in result.error
        assert error_observer.contexts == ["media_upload"]
        assert wizard.snapshot == WizardSnapshot()

    @pytest.mark.asyncio
    async def test_finish_reports_finalize_failure(self, config, make_wizard, valid_snapshot):
        campaigns = make_client(CampaignClient, config, lambda request: httpx.Response(201, json=[]))
        wizard = make_wizard(snapshot=valid_snapshot, finalizer=campaigns)

        result = await wizard.finish()
        await campaigns.close()

        assert result.outcome == FinishOutcome.FINALIZE_FAILED
        assert result.message == "Campaign service returned a malformed response"
        assert wizard.state == WizardState.FINISHING
