"""Claude Messages content-block rendering.

Both Claude backends (Bedrock-hosted and the Anthropic API) accept the same
block shapes, so the rendering lives here.
"""
from __future__ import annotations

from typing import Any, Dict, List

from ..models import ChatMessage, ImagePart, InlineData, TextPart


def render_claude_content(message: ChatMessage) -> List[Dict[str, Any]]:
    """Render one message's content as ``text``/``image`` blocks.

    Images must already be inline (see ``ensure_images_encoded``).
    """
    if isinstance(message.content, str):
        return [{"type": "text", "text": message.content}]
    blocks: List[Dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, TextPart):
            blocks.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart) and isinstance(part.source, InlineData):
            blocks.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": part.source.mime_type,
                        "data": part.source.b64(),
                    },
                }
            )
    return blocks


def render_claude_messages(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    return [{"role": m.role, "content": render_claude_content(m)} for m in messages]


__all__ = ["render_claude_content", "render_claude_messages"]
