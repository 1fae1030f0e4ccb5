"""
Chat identity helpers

Tell group chats from direct chats by their JID and normalize account JIDs
so mention checks compare like with like.
"""

from typing import Optional

GROUP_SUFFIX = "@g.us"


def is_group_chat(chat_id: Optional[str]) -> bool:
    """
    Check whether a chat JID points at a group

    Args:
        chat_id: chat JID, e.g. "12036302@g.us"

    Returns:
        bool: True for group chats
    """
    if not chat_id:
        return False
    return chat_id.endswith(GROUP_SUFFIX)


def detect_chat_type(chat_id: Optional[str]) -> str:
    """
    Classify a chat

    Args:
        chat_id: chat JID

    Returns:
        str: "group" or "private" ("unknown" for an empty id)
    """
    if not chat_id:
        return "unknown"
    return "group" if is_group_chat(chat_id) else "private"


def bare_jid(jid: Optional[str]) -> str:
    """
    Strip the device part from a JID ("628123:12@s.whatsapp.net" -> "628123@s.whatsapp.net")

    Args:
        jid: JID as delivered by the transport

    Returns:
        str: JID without device suffix
    """
    if not jid:
        return ""
    user, sep, server = jid.partition("@")
    if ":" in user:
        user = user.split(":", 1)[0]
    return f"{user}{sep}{server}"

