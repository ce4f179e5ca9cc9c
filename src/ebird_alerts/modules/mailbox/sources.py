from __future__ import annotations

import base64
import os
import re
import time
from dataclasses import dataclass
from email import policy
from email.parser import BytesParser
from pathlib import Path
from typing import Any

import httpx

from ebird_alerts.core.config import settings
from ebird_alerts.core.logging import get_logger, log_event, log_exception, monotonic_ms

logger = get_logger(__name__)

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


class MailSourceError(RuntimeError):
    pass


@dataclass(frozen=True)
class RawDigest:
    id: str
    body_text: str
    is_unread: bool


class MailSource:
    def list_unread_ids(self) -> list[str]:  # pragma: no cover
        raise NotImplementedError

    def fetch(self, message_id: str) -> RawDigest:  # pragma: no cover
        raise NotImplementedError

    def mark_read(self, message_id: str) -> None:  # pragma: no cover
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> MailSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def to_crlf(text: str) -> str:
    """Digest markers are CRLF-sensitive; transports and parsers don't all keep CRLF."""
    return _NEWLINE_RE.sub("\r\n", text)


class GmailMailSource(MailSource):
    """Gmail REST API, authorised with an already-issued OAuth bearer token."""

    def __init__(
        self,
        *,
        access_token: str,
        user_id: str = "me",
        query: str = "is:unread",
        base_url: str = "https://gmail.googleapis.com/gmail/v1",
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._query = query
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/users/{user_id}",
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout_s,
            transport=transport,
        )

    def list_unread_ids(self) -> list[str]:
        start = time.monotonic()
        ids: list[str] = []
        page_token: str | None = None
        while True:
            params: dict[str, str] = {"q": self._query}
            if page_token:
                params["pageToken"] = page_token
            data = self._request("GET", "/messages", op="list", params=params)
            ids.extend(m["id"] for m in data.get("messages") or [] if m.get("id"))
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        log_event(
            logger,
            "mailbox.list.success",
            backend="gmail",
            message_count=len(ids),
            duration_ms=monotonic_ms(start),
        )
        return ids

    def fetch(self, message_id: str) -> RawDigest:
        data = self._request(
            "GET", f"/messages/{message_id}", op="fetch", params={"format": "full"}
        )
        body = _gmail_plain_text(data.get("payload") or {})
        if body is None:
            raise MailSourceError(f"No text/plain part in message {message_id}")
        return RawDigest(
            id=message_id,
            body_text=to_crlf(body),
            is_unread="UNREAD" in (data.get("labelIds") or []),
        )

    def mark_read(self, message_id: str) -> None:
        self._request(
            "POST",
            f"/messages/{message_id}/modify",
            op="mark_read",
            json={"removeLabelIds": ["UNREAD"]},
        )
        log_event(logger, "mailbox.mark_read.success", backend="gmail", message_id=message_id)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, *, op: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log_exception(logger, f"mailbox.{op}.failure", backend="gmail", path=path)
            raise MailSourceError(f"Gmail {op} failed: {e}") from e


def _gmail_plain_text(part: dict[str, Any]) -> str | None:
    mime_type = part.get("mimeType") or ""
    data = (part.get("body") or {}).get("data")
    if mime_type.startswith("text/plain") and data:
        return _decode_base64url(data, charset=_part_charset(part))
    for child in part.get("parts") or []:
        text = _gmail_plain_text(child)
        if text is not None:
            return text
    return None


def _part_charset(part: dict[str, Any]) -> str:
    for header in part.get("headers") or []:
        if str(header.get("name", "")).lower() != "content-type":
            continue
        m = re.search(r'charset="?([\w-]+)"?', str(header.get("value", "")), re.I)
        if m:
            return m.group(1)
    return "utf-8"


def _decode_base64url(data: str, *, charset: str) -> str:
    raw = base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class LocalMailSource(MailSource):
    """
    A directory of `.eml` files. Files at the top level are unread; marking a
    message read moves it into `read/`.
    """

    def __init__(self, root: Path):
        self._root = root
        self._read_dir = root / "read"
        self._read_dir.mkdir(parents=True, exist_ok=True)

    def list_unread_ids(self) -> list[str]:
        ids = sorted(p.name for p in self._root.glob("*.eml") if p.is_file())
        log_event(logger, "mailbox.list.success", backend="local", message_count=len(ids))
        return ids

    def fetch(self, message_id: str) -> RawDigest:
        path = self._root / message_id
        is_unread = path.exists()
        if not is_unread:
            path = self._read_dir / message_id
            if not path.exists():
                raise MailSourceError(f"Message not found: {message_id}")

        msg = BytesParser(policy=policy.default).parsebytes(path.read_bytes())
        part = msg.get_body(preferencelist=("plain",))
        if part is None:
            raise MailSourceError(f"No text/plain part in message {message_id}")
        return RawDigest(id=message_id, body_text=to_crlf(part.get_content()), is_unread=is_unread)

    def mark_read(self, message_id: str) -> None:
        path = self._root / message_id
        if not path.exists():
            if (self._read_dir / message_id).exists():
                return
            raise MailSourceError(f"Message not found: {message_id}")
        path.replace(self._read_dir / message_id)
        log_event(logger, "mailbox.mark_read.success", backend="local", message_id=message_id)


def get_mail_source() -> MailSource:
    if settings.mail_backend == "gmail":
        if not settings.gmail_access_token:
            raise MailSourceError("GMAIL_ACCESS_TOKEN is required for the gmail mail backend")
        return GmailMailSource(
            access_token=settings.gmail_access_token,
            user_id=settings.gmail_user_id,
            query=settings.gmail_query,
            base_url=settings.gmail_api_base_url,
            timeout_s=settings.gmail_timeout_s,
        )

    root = settings.local_mailbox_path
    if not root.is_absolute():
        root = Path(os.getcwd()) / root
    return LocalMailSource(root)
