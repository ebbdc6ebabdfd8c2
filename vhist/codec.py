"""Content identifiers and their string encoding."""

import base64
import binascii
import hashlib
from dataclasses import dataclass

MULTIBASE_BASE32 = "b"


@dataclass(frozen=True, order=True)
class ContentId:
    """Opaque identifier of a version's state snapshot.

    Only equality, ordering and hashing are meaningful. Use a
    ``LinkCodec`` to turn one into a string.
    """

    digest: bytes

    @classmethod
    def of(cls, data: bytes) -> "ContentId":
        """Derive an identifier from content (sha256)."""
        return cls(hashlib.sha256(data).digest())


class LinkCodec:
    """Stable string encoding for content identifiers.

    Encodes as lowercase unpadded base32 with a multibase ``b`` prefix.
    """

    def encode_string(self, cid: ContentId) -> str:
        text = base64.b32encode(cid.digest).decode("ascii").rstrip("=")
        return MULTIBASE_BASE32 + text.lower()

    def decode_string(self, text: str) -> ContentId:
        if not text.startswith(MULTIBASE_BASE32):
            raise ValueError(f"Unsupported multibase prefix in {text!r}")
        body = text[len(MULTIBASE_BASE32):].upper()
        body += "=" * (-len(body) % 8)
        try:
            return ContentId(base64.b32decode(body))
        except binascii.Error as e:
            raise ValueError(f"Invalid base32 identifier {text!r}: {e}") from e


def link_codec() -> LinkCodec:
    """Return the default codec."""
    return LinkCodec()
