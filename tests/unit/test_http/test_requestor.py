"""Unit tests for the request facade."""

import io
import json
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel, Field

from smartsheet_core.http.errors import DomainError, FileAccessError, TransportError
from smartsheet_core.http.metrics import RequestMetrics
from smartsheet_core.http.models import RawResponse, RequestIntent, ResolvedRequest
from smartsheet_core.http.request_logger import RequestLogger
from smartsheet_core.http.requestor import HttpRequestor, serialize_body
from smartsheet_core.settings import ClientSettings
from smartsheet_core.version import __version__


SUCCESS = RawResponse(status_code=200, body=b"response body")
FAILURE = RawResponse(status_code=500, body=b"error message")

EXPECTED_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "User-Agent": f"smartsheet-python-core/{__version__}",
}


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None, None, None]:
    """Give every test fresh metrics."""
    RequestMetrics.reset()
    yield
    RequestMetrics.reset()


@pytest.fixture
def transport() -> MagicMock:
    """Create a transport that always succeeds."""
    mock = MagicMock()
    for verb in ("get", "post", "put", "delete"):
        getattr(mock, verb).return_value = SUCCESS
    return mock


@pytest.fixture
def request_logger() -> MagicMock:
    return MagicMock(spec=RequestLogger)


@pytest.fixture
def requestor(transport: MagicMock, request_logger: MagicMock) -> HttpRequestor:
    return HttpRequestor(
        transport=transport, request_logger=request_logger, sleep=MagicMock()
    )


@pytest.fixture
def intent() -> RequestIntent:
    return RequestIntent(
        base_url="http://test.com/",
        url="path/to/endpoint",
        query_parameters={"key": "value", "other key": 123},
    )


def _sent(transport_method: MagicMock) -> ResolvedRequest:
    return transport_method.call_args[0][0]


class TestGet:
    """Tests for GET requests."""

    def test_successful_get(
        self,
        requestor: HttpRequestor,
        transport: MagicMock,
        request_logger: MagicMock,
        intent: RequestIntent,
    ) -> None:
        """Test the wire request and logging of a successful GET."""
        content = requestor.get(intent)

        assert content == "response body"
        transport.get.assert_called_once()
        sent = _sent(transport.get)
        assert sent.url == "http://test.com/path/to/endpoint"
        assert sent.qs == {"key": "value", "other key": 123}
        assert sent.headers == EXPECTED_HEADERS
        assert sent.body is None
        request_logger.log_request.assert_called_once_with("GET", sent)
        request_logger.log_successful_response.assert_called_once()
        logged = request_logger.log_successful_response.call_args[0][0]
        assert logged.status_code == 200
        assert logged.content == "response body"

    def test_unsuccessful_get_raises(
        self,
        requestor: HttpRequestor,
        transport: MagicMock,
        request_logger: MagicMock,
        intent: RequestIntent,
    ) -> None:
        """Test that a failure raises and is logged once."""
        transport.get.return_value = FAILURE

        with pytest.raises(DomainError) as exc_info:
            requestor.get(intent)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "error message"
        request_logger.log_error_response.assert_called_once_with(
            "GET", _sent(transport.get), exc_info.value
        )
        request_logger.log_successful_response.assert_not_called()

    def test_uses_default_host(self, transport: MagicMock) -> None:
        """Test that the requestor's default host is applied."""
        requestor = HttpRequestor(
            transport=transport,
            request_logger=MagicMock(spec=RequestLogger),
            default_host="https://api.smartsheet.eu/2.0/",
        )

        requestor.get(RequestIntent(url="sheets/", id=7))

        assert _sent(transport.get).url == "https://api.smartsheet.eu/2.0/sheets/7"


class TestCallbackConvention:
    """Tests for the callback calling convention."""

    def test_callback_success(
        self,
        requestor: HttpRequestor,
        request_logger: MagicMock,
        intent: RequestIntent,
    ) -> None:
        """Test that success reaches the callback with no error."""
        callback = MagicMock()

        result = requestor.get(intent, callback)

        assert result is None
        callback.assert_called_once_with(None, "response body")
        request_logger.log_successful_response.assert_called_once()

    def test_callback_failure(
        self,
        requestor: HttpRequestor,
        transport: MagicMock,
        request_logger: MagicMock,
        intent: RequestIntent,
    ) -> None:
        """Test that failure reaches the callback instead of raising."""
        transport.get.return_value = FAILURE
        callback = MagicMock()

        requestor.get(intent, callback)

        error, content = callback.call_args[0]
        assert isinstance(error, DomainError)
        assert error.status_code == 500
        assert content is None
        request_logger.log_error_response.assert_called_once()

    def test_callback_transport_error(
        self,
        requestor: HttpRequestor,
        transport: MagicMock,
        intent: RequestIntent,
    ) -> None:
        """Test that transport errors reach the callback."""
        transport.delete.side_effect = TransportError("Connection failed")
        callback = MagicMock()

        requestor.delete(intent, callback)

        assert isinstance(callback.call_args[0][0], TransportError)

    def test_callback_exceptions_propagate(
        self, requestor: HttpRequestor, intent: RequestIntent
    ) -> None:
        """Test that errors raised by the callback itself are not swallowed."""
        callback = MagicMock(side_effect=RuntimeError("callback bug"))

        with pytest.raises(RuntimeError, match="callback bug"):
            requestor.get(intent, callback)

    def test_conventions_retry_identically(
        self, transport: MagicMock, intent: RequestIntent
    ) -> None:
        """Test that both conventions make the same transport calls."""
        retrying = intent.model_copy(
            update={
                "max_retry_duration_millis": 10_000,
                "calc_retry_backoff": lambda attempt, error: -1 if attempt == 2 else 0,
            }
        )
        transport.get.return_value = FAILURE
        requestor = HttpRequestor(
            transport=transport, request_logger=MagicMock(spec=RequestLogger)
        )

        with pytest.raises(DomainError):
            requestor.get(retrying)
        calls_without_callback = transport.get.call_count

        transport.get.reset_mock()
        requestor.get(retrying, MagicMock())

        assert calls_without_callback == transport.get.call_count == 2


class TestWriteVerbs:
    """Tests for POST, PUT, and DELETE bodies."""

    def test_post_json_encodes_body(
        self, requestor: HttpRequestor, transport: MagicMock
    ) -> None:
        """Test that dict bodies are JSON-encoded."""
        requestor.post(RequestIntent(url="sheets", body={"name": "New Sheet"}))

        assert json.loads(_sent(transport.post).body) == {"name": "New Sheet"}

    def test_post_string_body_unchanged(
        self, requestor: HttpRequestor, transport: MagicMock
    ) -> None:
        """Test that string bodies are sent as-is."""
        requestor.post(RequestIntent(url="sheets", body="raw text"))

        assert _sent(transport.post).body == "raw text"

    def test_put_json_encodes_body(
        self, requestor: HttpRequestor, transport: MagicMock
    ) -> None:
        """Test that PUT bodies are JSON-encoded."""
        requestor.put(RequestIntent(url="rows", body=[{"id": 1}]))

        assert _sent(transport.put).body == '[{"id": 1}]'

    def test_delete_has_no_body(
        self, requestor: HttpRequestor, transport: MagicMock
    ) -> None:
        """Test DELETE requests."""
        requestor.delete(RequestIntent(url="sheets/", id=1))

        assert _sent(transport.delete).body is None

    def test_serialize_pydantic_model(self) -> None:
        """Test that pydantic models are dumped by alias without None fields."""

        class Row(BaseModel):
            sheet_id: int = Field(alias="sheetId")
            parent_id: int | None = Field(default=None, alias="parentId")

        assert json.loads(serialize_body(Row(sheetId=5))) == {"sheetId": 5}



class TestPostFile:
    """Tests for binary uploads."""

    def test_upload_from_path(
        self,
        requestor: HttpRequestor,
        transport: MagicMock,
        request_logger: MagicMock,
        tmp_path: Path,
    ) -> None:
        """Test that the file is opened, stat'ed, and streamed."""
        upload = tmp_path / "file.bin"
        upload.write_bytes(b"x" * 1234)
        bodies: list[bytes] = []
        transport.post.side_effect = lambda request: (
            bodies.append(request.body.read()) or SUCCESS
        )

        content = requestor.post_file(
            RequestIntent(
                base_url="http://test.com/",
                url="path/to/endpoint",
                path=str(upload),
            )
        )

        assert content == "response body"
        sent = _sent(transport.post)
        assert sent.headers == {**EXPECTED_HEADERS, "Content-Length": "1234"}
        assert bodies == [b"x" * 1234]
        assert sent.body.closed
        request_logger.log_request.assert_called_once_with("POST", sent)

    def test_upload_from_stream(
        self, requestor: HttpRequestor, transport: MagicMock
    ) -> None:
        """Test that a caller stream is used directly."""
        stream = io.BytesIO(b"file body")

        requestor.post_file(
            RequestIntent(url="attachments", file_stream=stream, file_size=9)
        )

        sent = _sent(transport.post)
        assert sent.body is stream
        assert sent.headers["Content-Length"] == "9"

    def test_stream_rewound_between_attempts(self, transport: MagicMock) -> None:
        """Test that retried uploads resend the whole stream."""
        reads: list[bytes] = []

        def post(request: ResolvedRequest) -> RawResponse:
            reads.append(request.body.read())
            return FAILURE if len(reads) == 1 else SUCCESS

        transport.post.side_effect = post
        requestor = HttpRequestor(
            transport=transport,
            request_logger=MagicMock(spec=RequestLogger),
            sleep=MagicMock(),
        )

        requestor.post_file(
            RequestIntent(
                url="attachments",
                file_stream=io.BytesIO(b"file body"),
                max_retry_duration_millis=10_000,
                calc_retry_backoff=lambda attempt, error: 0,
            )
        )

        assert reads == [b"file body", b"file body"]

    def test_missing_file_raises_without_callback(
        self, requestor: HttpRequestor, transport: MagicMock, tmp_path: Path
    ) -> None:
        """Test that an unreadable path fails before any attempt."""
        callback = MagicMock()

        with pytest.raises(FileAccessError):
            requestor.post_file(
                RequestIntent(
                    url="attachments",
                    path=str(tmp_path / "missing.bin"),
                    max_retry_duration_millis=10_000,
                ),
                callback,
            )

        transport.post.assert_not_called()
        callback.assert_not_called()

    def test_no_file_source(self, requestor: HttpRequestor) -> None:
        """Test that post_file requires a file source."""
        with pytest.raises(ValueError, match="requires path or file_stream"):
            requestor.post_file(RequestIntent(url="attachments"))


class TestRetryDefaults:
    """Tests for requestor-level retry defaults."""

    def test_requestor_budget_applies(self, transport: MagicMock) -> None:
        """Test that the requestor budget is used when the intent has none."""
        transport.get.side_effect = [TransportError("down"), SUCCESS]
        sleep = MagicMock()
        requestor = HttpRequestor(
            transport=transport,
            request_logger=MagicMock(spec=RequestLogger),
            max_retry_duration_millis=60_000,
            calc_retry_backoff=lambda attempt, error: 250,
            sleep=sleep,
        )

        assert requestor.get(RequestIntent(url="sheets")) == "response body"
        sleep.assert_called_once_with(0.25)

    def test_intent_overrides_requestor(self, transport: MagicMock) -> None:
        """Test that intent retry settings take precedence."""
        transport.get.return_value = FAILURE
        requestor = HttpRequestor(
            transport=transport,
            request_logger=MagicMock(spec=RequestLogger),
            max_retry_duration_millis=60_000,
            calc_retry_backoff=lambda attempt, error: 0,
            sleep=MagicMock(),
        )

        with pytest.raises(DomainError):
            requestor.get(
                RequestIntent(
                    url="sheets", calc_retry_backoff=lambda attempt, error: -1
                )
            )

        transport.get.assert_called_once()


class TestFromSettings:
    """Tests for settings-driven construction."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Remove settings variables from the environment."""
        for name in (
            "SMARTSHEET_API_HOST",
            "SMARTSHEET_ACCESS_TOKEN",
            "SMARTSHEET_MAX_RETRY_DURATION_SECONDS",
            "SMARTSHEET_LOG_LEVEL",
            "SMARTSHEET_LOG_FORMAT",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_settings_applied(
        self, monkeypatch: pytest.MonkeyPatch, transport: MagicMock
    ) -> None:
        """Test host, budget, and log level from the environment."""
        monkeypatch.setenv("SMARTSHEET_API_HOST", "https://api.smartsheetgov.com/2.0/")
        monkeypatch.setenv("SMARTSHEET_MAX_RETRY_DURATION_SECONDS", "2.5")
        monkeypatch.setenv("SMARTSHEET_LOG_LEVEL", "debug")

        requestor = HttpRequestor.from_settings(
            ClientSettings(_env_file=None), transport=transport
        )
        requestor.get(RequestIntent(url="sheets"))

        assert requestor.default_host == "https://api.smartsheetgov.com/2.0/"
        assert requestor.max_retry_duration_millis == 2500
        assert _sent(transport.get).url == "https://api.smartsheetgov.com/2.0/sheets"

    def test_access_token_from_settings(
        self, monkeypatch: pytest.MonkeyPatch, transport: MagicMock
    ) -> None:
        """Test that the configured token authorizes intents without one."""
        monkeypatch.setenv("SMARTSHEET_ACCESS_TOKEN", "ENV_TOKEN")

        requestor = HttpRequestor.from_settings(
            ClientSettings(_env_file=None), transport=transport
        )
        requestor.get(RequestIntent(url="sheets"))

        assert requestor.access_token == "ENV_TOKEN"
        assert _sent(transport.get).headers["Authorization"] == "Bearer ENV_TOKEN"

    def test_intent_token_wins(
        self, monkeypatch: pytest.MonkeyPatch, transport: MagicMock
    ) -> None:
        """Test that an intent's own token overrides the configured one."""
        monkeypatch.setenv("SMARTSHEET_ACCESS_TOKEN", "ENV_TOKEN")

        requestor = HttpRequestor.from_settings(
            ClientSettings(_env_file=None), transport=transport
        )
        requestor.get(RequestIntent(url="sheets", access_token="CALL_TOKEN"))

        assert _sent(transport.get).headers["Authorization"] == "Bearer CALL_TOKEN"

    def test_no_token_configured(self, transport: MagicMock) -> None:
        """Test that no Authorization header is sent without any token."""
        requestor = HttpRequestor.from_settings(
            ClientSettings(_env_file=None), transport=transport
        )
        requestor.get(RequestIntent(url="sheets"))

        assert "Authorization" not in _sent(transport.get).headers

    def test_log_format_configures_logging(
        self, monkeypatch: pytest.MonkeyPatch, transport: MagicMock
    ) -> None:
        """Test that a log format in the environment sets up structlog."""
        configure = MagicMock()
        monkeypatch.setattr("smartsheet_core.http.requestor.configure_logging", configure)
        monkeypatch.setenv("SMARTSHEET_LOG_FORMAT", "console")
        monkeypatch.setenv("SMARTSHEET_LOG_LEVEL", "warn")

        HttpRequestor.from_settings(ClientSettings(_env_file=None), transport=transport)

        configure.assert_called_once_with(level="warn", json_format=False)

    def test_logging_untouched_without_format(
        self, monkeypatch: pytest.MonkeyPatch, transport: MagicMock
    ) -> None:
        """Test that structlog is left alone when no format is configured."""
        configure = MagicMock()
        monkeypatch.setattr("smartsheet_core.http.requestor.configure_logging", configure)

        HttpRequestor.from_settings(ClientSettings(_env_file=None), transport=transport)

        configure.assert_not_called()


class TestClose:
    """Tests for transport lifecycle."""

    def test_owned_transport_closed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that close releases a transport the requestor created."""
        transport_cls = MagicMock()
        monkeypatch.setattr("smartsheet_core.http.requestor.HttpxTransport", transport_cls)

        requestor = HttpRequestor(request_logger=MagicMock(spec=RequestLogger))
        requestor.close()

        transport_cls.return_value.close.assert_called_once()

    def test_injected_transport_left_open(self, transport: MagicMock) -> None:
        """Test that a caller-supplied transport is not closed."""
        requestor = HttpRequestor(
            transport=transport, request_logger=MagicMock(spec=RequestLogger)
        )
        requestor.close()

        transport.close.assert_not_called()

    def test_context_manager(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that leaving a with block closes the owned transport."""
        transport_cls = MagicMock()
        transport_cls.return_value.get.return_value = SUCCESS
        monkeypatch.setattr("smartsheet_core.http.requestor.HttpxTransport", transport_cls)

        with HttpRequestor(request_logger=MagicMock(spec=RequestLogger)) as requestor:
            assert requestor.get(RequestIntent(url="sheets")) == "response body"
            transport_cls.return_value.close.assert_not_called()

        transport_cls.return_value.close.assert_called_once()
