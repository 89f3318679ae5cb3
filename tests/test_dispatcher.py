import pytest
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

from core.dispatcher import utc_now_iso
from core.errors import (
    ErrorKind,
    ProtocolError,
    RequestError,
    ToolExecutionError,
    ValidationError,
)

from tests.conftest import http_error

CONTRACT = "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D"


def test_unknown_tool_is_a_protocol_error(dispatcher, fake_http):
    with pytest.raises(ProtocolError, match="Unknown tool: getNFTPrices") as excinfo:
        dispatcher.call_tool("getNFTPrices", {"contractAddress": CONTRACT})

    assert excinfo.value.code == METHOD_NOT_FOUND
    assert excinfo.value.kind is ErrorKind.PROTOCOL
    assert fake_http.requests == []


def test_missing_argument_fails_before_any_request(dispatcher, fake_http):
    with pytest.raises(ValidationError, match="tokenId") as excinfo:
        dispatcher.call_tool("getNFTMetadata", {"contractAddress": CONTRACT})

    assert excinfo.value.code == INVALID_PARAMS
    assert excinfo.value.kind is ErrorKind.VALIDATION
    assert fake_http.requests == []


def test_terminal_http_error_is_wrapped_once(dispatcher, fake_http, sleeps):
    fake_http.add("getNFTMetadata", http_error(404, "Not Found"))

    with pytest.raises(ToolExecutionError) as excinfo:
        dispatcher.call_tool("getNFTMetadata", {"contractAddress": CONTRACT, "tokenId": "1"})

    error = excinfo.value
    assert str(error) == "Failed to get NFT metadata: HTTP 404: Not Found"
    assert error.tool_name == "getNFTMetadata"
    assert error.kind is ErrorKind.REQUEST
    assert isinstance(error.cause, RequestError)
    assert error.cause.status == 404
    assert len(fake_http.requests) == 1
    assert sleeps == [1.0]


def test_rate_limit_exhaustion_reports_attempts(dispatcher, fake_http):
    fake_http.add("getFloorPrice", http_error(429, "Too Many Requests"))

    with pytest.raises(ToolExecutionError, match="^Failed to get floor price: .*gave up after 4 attempts") as excinfo:
        dispatcher.call_tool("getNFTFloorPrice", {"contractAddress": CONTRACT})

    assert excinfo.value.cause.attempts == 4
    assert len(fake_http.requests) == 4


def test_unexpected_exception_is_internal(dispatcher, monkeypatch):
    def explode(*args, **kwargs):
        raise KeyError("ownedNfts")

    monkeypatch.setattr(dispatcher._alchemy, "owned_nfts", explode)

    with pytest.raises(ToolExecutionError, match="^Failed to get wallet NFTs: ") as excinfo:
        dispatcher.call_tool("getWalletNFTs", {"walletAddress": "0xd8dA"})

    assert excinfo.value.kind is ErrorKind.INTERNAL
    assert excinfo.value.code == INTERNAL_ERROR
    assert isinstance(excinfo.value.cause, KeyError)


@pytest.mark.parametrize("name, arguments, prefix", [
    ("getNFTTransfers", {"contractAddress": CONTRACT}, "Failed to get NFT transfers"),
    ("getNFTSales", {"contractAddress": CONTRACT}, "Failed to get NFT sales"),
    ("searchNFTCollections", {"query": "apes"}, "Failed to search collections"),
])
def test_failure_prefix_per_tool(dispatcher, fake_http, name, arguments, prefix):
    fake_http.add("alchemy.com", http_error(500, "Internal Server Error"))
    fake_http.add("opensea.io", http_error(500, "Internal Server Error"))

    with pytest.raises(ToolExecutionError) as excinfo:
        dispatcher.call_tool(name, arguments)

    assert str(excinfo.value).startswith(f"{prefix}: HTTP 500")


def test_utc_now_iso_format():
    stamp = utc_now_iso()

    assert stamp.endswith("Z")
    assert len(stamp) == len("2026-01-01T00:00:00.000Z")
