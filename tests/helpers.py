"""Shared helpers for tests."""

from __future__ import annotations

import base64
import json
from typing import Any

from portal_client.i18n.translator import build_table

TEST_CATALOG = {
    "vi": build_table(
        {
            "hello": "Xin chào",
            "greeting": "Xin chào, {{name}}!",
            "only_vi": "Chỉ có tiếng Việt",
            "profile": {"vietnamese": "Tiếng Việt", "english": "Tiếng Anh"},
        }
    ),
    "en": build_table(
        {
            "hello": "Hello",
            "greeting": "Hello, {{name}}!",
            "profile": {"vietnamese": "Vietnamese", "english": "English"},
        }
    ),
}


def make_unsigned_jwt(claims: dict[str, Any]) -> str:
    """Build a structurally valid JWT; the signature is never checked client-side."""

    def _segment(payload: dict[str, Any]) -> str:
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    return f"{_segment({'alg': 'HS256', 'typ': 'JWT'})}.{_segment(claims)}.c2lnbmF0dXJl"
