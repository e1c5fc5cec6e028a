"""
Mirror node REST client for the HCS Purchase Ledger demo.

Reads every message of a topic through the mirror node's paginated
`/api/v1/topics/{topicId}/messages` endpoint, following `links.next` until the
mirror reports no further page. Payloads arrive base64-encoded and are decoded
to UTF-8 JSON before they leave this module.

A failed page (non-2xx status, network error, timeout, unreadable envelope)
aborts the whole scan with MirrorNodeError. Entries whose payload cannot be
decoded are skipped with a warning and the scan continues.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.parse import urlsplit

import aiohttp

from purchase_ledger.config import Settings, get_settings
from purchase_ledger.domain.models import MirrorMessage
from purchase_ledger.errors import MirrorNodeError
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)

API_PREFIX = "/api/v1"


def decode_message(entry: Dict[str, Any]) -> Optional[MirrorMessage]:
    """
    Decode one raw mirror entry into a MirrorMessage.

    Returns None (after logging a warning) when the payload is not base64,
    not UTF-8, not JSON, or not a JSON object, or when the entry carries no
    usable sequence number.
    """
    timestamp = str(entry.get("consensus_timestamp", ""))
    try:
        text = base64.b64decode(entry["message"], validate=True).decode("utf-8")
        payload = json.loads(text)
        sequence_number = int(entry["sequence_number"])
    except (KeyError, TypeError, ValueError, binascii.Error, UnicodeDecodeError):
        log.warning(
            f"[WARNING] Failed to parse message content JSON at timestamp {timestamp}",
            extra={"consensus_timestamp": timestamp},
        )
        return None
    if not isinstance(payload, dict):
        log.warning(
            f"[WARNING] Message content at timestamp {timestamp} is not a JSON object",
            extra={"consensus_timestamp": timestamp},
        )
        return None
    return MirrorMessage(
        consensus_timestamp=timestamp,
        sequence_number=sequence_number,
        payload=payload,
    )


class MirrorNodeReader:
    """
    Paginated reader over a topic's messages.

    Attributes
    ----------
    call_count : int
        Number of page requests issued over the reader's lifetime.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        page_size: int = 100,
        order: str = "asc",
    ) -> None:
        self._session = session
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.order = order
        self.call_count = 0

    def messages_url(self, topic_id: str) -> str:
        """First-page URL for a topic."""
        return (
            f"{self.base_url}{API_PREFIX}/topics/{topic_id}/messages"
            f"?limit={self.page_size}&order={self.order}"
        )

    def _next_url(self, envelope: Dict[str, Any]) -> Optional[str]:
        links = envelope.get("links") or {}
        next_link = links.get("next")
        if not next_link:
            return None
        if urlsplit(next_link).scheme:
            return next_link
        # Mirror links are rooted at the API, so any path prefix of the base URL is kept.
        return f"{self.base_url}/{next_link.lstrip('/')}"

    async def _get_page(self, url: str) -> Dict[str, Any]:
        self.call_count += 1
        try:
            async with self._session.get(url) as response:
                if response.status >= 400:
                    raise MirrorNodeError(
                        f"HTTP error! status: {response.status} from URL: {url}",
                        url=url,
                        status=response.status,
                    )
                envelope = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as exc:
            raise MirrorNodeError(f"Request to {url} failed: {exc}", url=url) from exc

        if not isinstance(envelope, dict) or not isinstance(envelope.get("messages"), list):
            raise MirrorNodeError(f"Unexpected response envelope from URL: {url}", url=url)
        return envelope

    async def iter_pages(self, topic_id: str) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Yield the raw `messages` list of every page, in order.
        """
        next_url: Optional[str] = self.messages_url(topic_id)
        while next_url:
            envelope = await self._get_page(next_url)
            messages = envelope["messages"]
            relative = next_url[len(self.base_url):] if next_url.startswith(self.base_url) else next_url
            log.info(
                f"[PAGINATION] Fetched {len(messages)} messages from: {relative}",
                extra={"topic_id": topic_id, "messages": len(messages)},
            )
            yield messages
            next_url = self._next_url(envelope)

    async def fetch_messages(self, topic_id: str) -> List[MirrorMessage]:
        """
        Read and decode every message of a topic.

        Raises
        ------
        MirrorNodeError
            If any page fails; no partial result is returned.
        """
        log.info(
            f"[FETCH] Starting query to Mirror Node for all messages on topic {topic_id} "
            "(using pagination)...",
            extra={"topic_id": topic_id},
        )
        decoded: List[MirrorMessage] = []
        processed = 0
        async for page in self.iter_pages(topic_id):
            for entry in page:
                processed += 1
                message = decode_message(entry)
                if message is not None:
                    decoded.append(message)

        log.info(
            f"[FETCH] Completed query. Total messages processed in topic: {processed}.",
            extra={"topic_id": topic_id, "processed": processed, "decoded": len(decoded)},
        )
        return decoded


@asynccontextmanager
async def mirror_reader(settings: Settings | None = None) -> AsyncIterator[MirrorNodeReader]:
    """
    Open an aiohttp session and yield a reader bound to the configured mirror node.
    """
    settings = settings or get_settings()
    timeout = aiohttp.ClientTimeout(total=settings.mirror_request_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        yield MirrorNodeReader(
            session,
            base_url=settings.mirror_node_url,
            page_size=settings.mirror_page_size,
        )


__all__ = ["API_PREFIX", "MirrorNodeReader", "decode_message", "mirror_reader"]
