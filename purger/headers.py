"""
purger.headers — Outbound request headers.
"""

import base64
import json

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36"
)

# Client fingerprint sent as x-super-properties
SUPER_PROPERTIES = {
    "os": "Windows",
    "browser": "Chrome",
    "device": "",
    "system_locale": "en-US",
    "browser_user_agent": USER_AGENT,
    "browser_version": "135.0.0.0",
    "os_version": "10",
    "release_channel": "stable",
    "client_event_source": None,
}


def encode_super_properties(props: dict) -> str:
    return base64.b64encode(json.dumps(props, separators=(",", ":")).encode("utf-8")).decode("ascii")


def build_headers(token: str, locale: str = "en-US") -> dict:
    """Header set attached verbatim to every search and delete request."""
    return {
        "accept": "*/*",
        "accept-language": f"{locale},en;q=0.9",
        "authorization": token,
        "user-agent": USER_AGENT,
        "x-discord-locale": locale,
        "x-super-properties": encode_super_properties(SUPER_PROPERTIES),
    }
