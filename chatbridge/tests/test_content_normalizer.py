"""Image normalization: data URLs, remote fetches, dropped parts."""
import asyncio
import base64
import logging

import httpx
import pytest

from chatbridge.base.errors import ValidationError
from chatbridge.base.models import ChatMessage, ChatRequest, ImagePart, InlineData, ModelConfig, RemoteURL, TextPart
from chatbridge.base.normalize import ContentNormalizer, ensure_images_encoded
from chatbridge.base.normalize.data_url import canonical_mime, guess_image_mime, parse_data_url

PNG = b"\x89PNG\r\n\x1a\nfake"


def _png_data_url(mime="image/png"):
    return f"data:{mime};base64,{base64.b64encode(PNG).decode()}"


def _normalizer(handler):
    def factory():
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return ContentNormalizer(client_factory=factory, provider="bedrock")


def _image_server(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        if request.url.path.endswith("/missing.png"):
            return httpx.Response(404)
        if request.url.path.endswith("/empty.png"):
            return httpx.Response(200, content=b"")
        if request.url.path.endswith("/photo"):
            return httpx.Response(200, content=PNG, headers={"content-type": "image/JPG; charset=binary"})
        return httpx.Response(200, content=PNG)

    return handler


def _request(*parts):
    return ChatRequest(messages=[ChatMessage("user", list(parts))], config=ModelConfig(model="anthropic.claude-v2"))


def test_data_url_is_decoded():
    normalizer = ContentNormalizer(provider="bedrock")
    result = asyncio.run(normalizer.normalize_request(_request(ImagePart(RemoteURL(_png_data_url())))))
    part = result.messages[0].content[0]
    assert part.source == InlineData("image/png", PNG)  # nosec B101


def test_remote_images_fetched_in_order():
    seen = []
    normalizer = _normalizer(_image_server(seen))
    request = _request(
        TextPart("look"),
        ImagePart(RemoteURL("https://img.example/a.png")),
        ImagePart(RemoteURL("https://img.example/photo")),
        TextPart("done"),
    )
    result = asyncio.run(normalizer.normalize_request(request))
    parts = result.messages[0].content
    assert [type(p).__name__ for p in parts] == ["TextPart", "ImagePart", "ImagePart", "TextPart"]  # nosec B101
    assert parts[1].source.mime_type == "image/png"  # nosec B101
    assert parts[2].source.mime_type == "image/jpeg"  # nosec B101
    assert sorted(seen) == ["https://img.example/a.png", "https://img.example/photo"]  # nosec B101


def test_failed_fetches_are_dropped_and_logged(caplog):
    seen = []
    normalizer = _normalizer(_image_server(seen))
    request = _request(
        ImagePart(RemoteURL("https://img.example/missing.png")),
        TextPart("kept"),
        ImagePart(RemoteURL("https://img.example/empty.png")),
    )
    with caplog.at_level(logging.WARNING, logger="chatbridge"):
        result = asyncio.run(normalizer.normalize_request(request))
    assert result.messages[0].content == [TextPart("kept")]  # nosec B101
    dropped = [r for r in caplog.records if "normalize.part.dropped" in r.getMessage()]
    assert len(dropped) == 2  # nosec B101


def test_network_error_drops_part():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    normalizer = _normalizer(handler)
    result = asyncio.run(normalizer.normalize_request(_request(ImagePart(RemoteURL("http://down.example/x.png")))))
    assert result.messages[0].content == [TextPart("")]  # nosec B101


def test_message_with_no_parts_left_gets_empty_text():
    normalizer = ContentNormalizer(provider="openai")
    request = _request(ImagePart(RemoteURL("ftp://files.example/x.png")), ImagePart(RemoteURL("data:image/png;base64,!!")))
    result = asyncio.run(normalizer.normalize_request(request))
    assert result.messages[0].content == [TextPart("")]  # nosec B101


def test_plain_text_and_no_fetch_opens_no_client():
    opened = []

    def factory():
        opened.append(True)
        return httpx.AsyncClient()

    normalizer = ContentNormalizer(client_factory=factory)
    request = ChatRequest(
        messages=[ChatMessage("user", "hi"), ChatMessage("user", [ImagePart(RemoteURL(_png_data_url("image/jpg")))])],
        config=ModelConfig(model="gpt-4o"),
    )
    result = asyncio.run(normalizer.normalize_request(request))
    assert opened == []  # nosec B101
    assert result.messages[0].content == "hi"  # nosec B101
    assert result.messages[1].content[0].source.mime_type == "image/jpeg"  # nosec B101


def test_inline_parts_are_retagged():
    normalizer = ContentNormalizer()
    request = _request(ImagePart(InlineData("IMAGE/PJPEG", PNG)))
    result = asyncio.run(normalizer.normalize_request(request))
    assert result.messages[0].content[0].source.mime_type == "image/jpeg"  # nosec B101


def test_ensure_images_encoded():
    ensure_images_encoded(_request(ImagePart(InlineData("image/png", PNG))))
    with pytest.raises(ValidationError) as ei:
        ensure_images_encoded(_request(ImagePart(RemoteURL("https://img.example/a.png"))), provider="bedrock")
    assert ei.value.http_status == 400  # nosec B101
    assert ei.value.provider == "bedrock"  # nosec B101


@pytest.mark.parametrize(
    "url,expected",
    [
        ("data:image/gif;base64,R0lGOA==", ("image/gif", b"GIF8")),
        ("data:,hello%20world", ("image/jpeg", b"hello world")),
        ("data:image/png;base64,", None),
        ("data:image/png;base64,***", None),
        ("https://example.com/a.png", None),
    ],
)
def test_parse_data_url(url, expected):
    assert parse_data_url(url) == expected  # nosec B101


def test_mime_helpers():
    assert canonical_mime("image/jpg") == "image/jpeg"  # nosec B101
    assert canonical_mime(None) == "image/jpeg"  # nosec B101
    assert guess_image_mime("https://x.example/pic.png?size=2") == "image/png"  # nosec B101
    assert guess_image_mime("https://x.example/pic", "image/gif") == "image/gif"  # nosec B101
