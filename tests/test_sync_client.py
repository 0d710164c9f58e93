"""Tests for the remote sync client."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import httpx
import pytest

from tasksync.models import BatchSyncRequest, OutcomeStatus, QueuedMutation, SyncOperation
from tasksync.remote import NetworkError, SyncClient, SyncClientError


def make_request() -> BatchSyncRequest:
    mutation = QueuedMutation(
        id="m-1",
        task_id="t-1",
        operation=SyncOperation.CREATE,
        payload={"id": "t-1", "title": "x"},
        created_at=datetime(2025, 3, 1, tzinfo=UTC),
    )
    return BatchSyncRequest(items=[mutation.to_wire()])


def make_response(status_code: int = 200, body=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def client():
    client = SyncClient("http://sync.test/api/")
    yield client
    client.close()


class TestSyncClientInit:
    """Tests for SyncClient initialization."""

    def test_urls(self, client: SyncClient):
        """Trailing slashes are normalized away."""
        assert client.base_url == "http://sync.test/api"
        assert client._batch_url == "http://sync.test/api/sync/batch"
        assert client._health_url == "http://sync.test/api/sync/health"

    def test_context_manager(self):
        with SyncClient("http://sync.test") as client:
            assert client.timeout == 15.0

    def test_network_error_is_client_error(self):
        assert issubclass(NetworkError, SyncClientError)


class TestPostBatch:
    """Tests for SyncClient.post_batch."""

    def test_success(self, client: SyncClient):
        body = {
            "processed_items": [
                {"id": "m-1", "server_id": "srv-1", "status": "success", "resolved_data": {}}
            ]
        }
        with patch.object(client._client, "post", return_value=make_response(body=body)):
            result = client.post_batch(make_request())

        [item] = result.processed_items
        assert item.id == "m-1"
        assert item.server_id == "srv-1"
        assert item.status == OutcomeStatus.SUCCESS

    def test_sends_wire_format(self, client: SyncClient):
        """The request body follows the batch wire contract."""
        with patch.object(
            client._client, "post", return_value=make_response(body={"processed_items": []})
        ) as mock_post:
            client.post_batch(make_request(), timeout=3.0)

        call = mock_post.call_args
        assert call.args[0] == "http://sync.test/api/sync/batch"
        assert call.kwargs["timeout"] == 3.0
        [item] = call.kwargs["json"]["items"]
        assert set(item) == {"id", "task_id", "operation", "task_data", "retry_count", "created_at"}
        assert item["operation"] == "create"
        assert item["task_data"] == {"id": "t-1", "title": "x"}
        assert isinstance(item["created_at"], str)

    def test_default_timeout(self, client: SyncClient):
        with patch.object(
            client._client, "post", return_value=make_response(body={"processed_items": []})
        ) as mock_post:
            client.post_batch(make_request())
        assert mock_post.call_args.kwargs["timeout"] == 15.0

    def test_timeout_raises_network_error(self, client: SyncClient):
        with (
            patch.object(client._client, "post", side_effect=httpx.ReadTimeout("slow")),
            pytest.raises(NetworkError, match="timed out"),
        ):
            client.post_batch(make_request())

    def test_connection_error_raises_network_error(self, client: SyncClient):
        with (
            patch.object(client._client, "post", side_effect=httpx.ConnectError("refused")),
            pytest.raises(NetworkError, match="Request failed"),
        ):
            client.post_batch(make_request())

    def test_non_2xx_raises_network_error(self, client: SyncClient):
        with (
            patch.object(
                client._client, "post", return_value=make_response(500, text="Internal error")
            ),
            pytest.raises(NetworkError) as exc_info,
        ):
            client.post_batch(make_request())
        assert exc_info.value.status_code == 500
        assert "Internal error" in str(exc_info.value)

    def test_invalid_json_raises_network_error(self, client: SyncClient):
        response = make_response()
        response.json.side_effect = ValueError("not json")
        with (
            patch.object(client._client, "post", return_value=response),
            pytest.raises(NetworkError, match="Invalid JSON"),
        ):
            client.post_batch(make_request())

    def test_malformed_body_raises_network_error(self, client: SyncClient):
        body = {"processed_items": "not a list"}
        with (
            patch.object(client._client, "post", return_value=make_response(body=body)),
            pytest.raises(NetworkError, match="Malformed"),
        ):
            client.post_batch(make_request())

    def test_bad_item_does_not_fail_batch(self, client: SyncClient):
        body = {
            "processed_items": [
                {"client_id": "m-1", "server_id": "srv-1", "status": "success"},
                {"client_id": "m-2", "status": "rejected"},
                {"status": "success"},
            ]
        }
        with patch.object(client._client, "post", return_value=make_response(body=body)):
            result = client.post_batch(make_request())

        assert [(item.id, item.status) for item in result.processed_items] == [
            ("m-1", OutcomeStatus.SUCCESS),
            ("m-2", OutcomeStatus.ERROR),
        ]


class TestCheckHealth:
    """Tests for SyncClient.check_health."""

    def test_ok(self, client: SyncClient):
        with patch.object(client._client, "get", return_value=make_response(200)) as mock_get:
            client.check_health(timeout=2.0)
        assert mock_get.call_args.args[0] == "http://sync.test/api/sync/health"
        assert mock_get.call_args.kwargs["timeout"] == 2.0

    def test_error_status(self, client: SyncClient):
        with (
            patch.object(client._client, "get", return_value=make_response(503)),
            pytest.raises(NetworkError),
        ):
            client.check_health()

    def test_connection_error(self, client: SyncClient):
        with (
            patch.object(client._client, "get", side_effect=httpx.ConnectError("refused")),
            pytest.raises(NetworkError),
        ):
            client.check_health()


class TestMockTransport:
    """End-to-end through httpx with a mock transport."""

    def test_round_trip(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/sync/batch"
            return httpx.Response(
                200, json={"processed_items": [{"client_id": "m-1", "status": "error"}]}
            )

        with SyncClient("http://sync.test/api", transport=httpx.MockTransport(handler)) as client:
            result = client.post_batch(make_request())

        assert result.processed_items[0].id == "m-1"
        assert result.processed_items[0].status == OutcomeStatus.ERROR
