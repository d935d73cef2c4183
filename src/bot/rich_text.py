"""
Rich text → mrkdwn normalization.

Slack's ``rich_text_input`` returns a document tree. The wizard keeps only
the flattened mrkdwn string (compact and safe to serialize into the state
token); the tree is consumed once here and discarded.

Node kinds:
    rich_text, rich_text_section   concatenate children
    text                           literal text (styles are dropped)
    emoji                          :name:
    link                           <url|text>  (text defaults to url)
    user                           <@id>
    rich_text_list                 "- item" lines, newline-joined, trailing newline

Unknown node kinds render as "" so newer Slack element types degrade
instead of failing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

RichTextNode = Mapping[str, Any]

LIST_BULLET = "- "


def _children(node: RichTextNode) -> Iterable[Any]:
    elements = node.get("elements")
    if not isinstance(elements, list):
        return ()
    return elements


def _walk_all(nodes: Iterable[Any]) -> str:
    return "".join(_walk(child) for child in nodes)


def _walk(node: Any) -> str:
    if not isinstance(node, Mapping):
        return ""

    kind = node.get("type")
    if kind in ("rich_text", "rich_text_section"):
        return _walk_all(_children(node))
    if kind == "text":
        return str(node.get("text") or "")
    if kind == "emoji":
        name = node.get("name")
        return f":{name}:" if name else ""
    if kind == "link":
        url = node.get("url")
        if not url:
            return ""
        return f"<{url}|{node.get('text') or url}>"
    if kind == "user":
        user_id = node.get("user_id")
        return f"<@{user_id}>" if user_id else ""
    if kind == "rich_text_list":
        items = [LIST_BULLET + _walk_all(_children(item)) for item in _children(node)
                 if isinstance(item, Mapping)]
        return "\n".join(items) + "\n"
    return ""


def normalize(document: RichTextNode | None) -> str:
    """
    Flatten a rich text document into mrkdwn.

    Pure and total: never raises, ``normalize(None) == ""``.

    Args:
        document: Rich text tree (usually a "rich_text" node) or None

    Returns:
        mrkdwn text with leading/trailing whitespace removed
    """
    if document is None:
        return ""
    return _walk(document).strip()


def to_rich_text(text: str | None) -> dict[str, Any] | None:
    """
    Wrap stored mrkdwn in a minimal rich text document.

    Used to pre-populate a rich text input when the user goes back to an
    entry. ``normalize(to_rich_text(s)) == s.strip()``.

    Returns:
        A "rich_text" document, or None for empty input
    """
    if not text:
        return None
    return {
        "type": "rich_text",
        "elements": [
            {
                "type": "rich_text_section",
                "elements": [{"type": "text", "text": text}],
            }
        ],
    }


__all__ = ["normalize", "to_rich_text", "LIST_BULLET"]
