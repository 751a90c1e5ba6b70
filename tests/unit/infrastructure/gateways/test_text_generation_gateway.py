from __future__ import annotations

import httpx
import pytest

from src.domain.entities.errors import TextGenerationError
from src.infrastructure.gateways.text_generation_gateway import TextGenerationGateway


class _StubResponse:
    def __init__(self, status_code: int, json_data=None, invalid_json: bool = False):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}
        self._invalid_json = invalid_json
        self.text = "error"

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("POST", "http://textgen/v1/generate")
            response = httpx.Response(self.status_code, request=request, text=self.text)
            raise httpx.HTTPStatusError("error", request=request, response=response)


class _StubAsyncClient:
    def __init__(self, response: _StubResponse | Exception):
        self._response = response
        self.calls: list[dict] = []

    async def __aenter__(self) -> "_StubAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def post(self, url, json=None, headers=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def _install(monkeypatch, response) -> _StubAsyncClient:
    client = _StubAsyncClient(response)
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)
    return client


@pytest.mark.asyncio
async def test_generate_posts_prompt_and_parses_text(monkeypatch) -> None:
    client = _install(
        monkeypatch,
        _StubResponse(200, {"text": "  Demand keeps growing.  ", "confidence": 0.9}),
    )
    gateway = TextGenerationGateway("http://textgen/", api_key="token", model="small")

    result = await gateway.generate("Analyze this forecast")

    assert result.text == "Demand keeps growing."
    assert result.confidence == pytest.approx(0.9)
    call = client.calls[0]
    assert call["url"] == "http://textgen/v1/generate"
    assert call["json"] == {"prompt": "Analyze this forecast", "model": "small"}
    assert call["headers"]["Authorization"] == "Bearer token"


@pytest.mark.asyncio
async def test_generate_accepts_alternate_keys_and_clamps_confidence(
    monkeypatch,
) -> None:
    _install(monkeypatch, _StubResponse(200, {"response": "ok", "confidence": 7}))

    result = await TextGenerationGateway("http://textgen").generate("prompt")

    assert result.text == "ok"
    assert result.confidence == 1.0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        _StubResponse(200, ["not", "a", "dict"]),
        _StubResponse(200, invalid_json=True),
        _StubResponse(200, {"unexpected": 1}),
    ],
)
async def test_generate_tolerates_malformed_payloads(monkeypatch, response) -> None:
    _install(monkeypatch, response)

    result = await TextGenerationGateway("http://textgen").generate("prompt")

    assert result.text == ""


@pytest.mark.asyncio
async def test_generate_uses_default_confidence(monkeypatch) -> None:
    _install(monkeypatch, _StubResponse(200, {"output": "fine", "confidence": "x"}))

    result = await TextGenerationGateway("http://textgen").generate("prompt")

    assert result.confidence == pytest.approx(0.7)


@pytest.mark.asyncio
async def test_generate_raises_on_http_error(monkeypatch) -> None:
    _install(monkeypatch, _StubResponse(503))

    with pytest.raises(TextGenerationError) as exc_info:
        await TextGenerationGateway("http://textgen").generate("prompt")

    assert exc_info.value.details == {"status_code": 503}


@pytest.mark.asyncio
async def test_generate_raises_on_connection_error(monkeypatch) -> None:
    request = httpx.Request("POST", "http://textgen/v1/generate")
    _install(monkeypatch, httpx.ConnectError("refused", request=request))

    with pytest.raises(TextGenerationError):
        await TextGenerationGateway("http://textgen").generate("prompt")
