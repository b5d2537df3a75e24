from .claude_blocks import render_claude_content, render_claude_messages
from .messages import join_system_text, split_system_and_rest
from .sdk import get_field, to_epoch

__all__ = [
    "join_system_text",
    "split_system_and_rest",
    "render_claude_content",
    "render_claude_messages",
    "get_field",
    "to_epoch",
]
