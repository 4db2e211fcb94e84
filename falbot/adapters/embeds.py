"""
Inline media embed syntax shared by the core and chat transports.

    --embed[alt=<urlencoded>,type=<mime>,data=<base64>]--
"""

import base64
import mimetypes
import re
from dataclasses import dataclass
from typing import List, Tuple
from urllib.parse import quote, unquote

EMBED_PATTERN = re.compile(
    r"--embed\[alt=(?P<alt>[^,\]]*),type=(?P<type>[^,\]]*),data=(?P<data>[A-Za-z0-9+/=]*)\]--"
)


@dataclass
class InlineEmbed:
    alt: str
    mime_type: str
    data: bytes

    @property
    def filename(self) -> str:
        ext = mimetypes.guess_extension(self.mime_type) or ".bin"
        stem = re.sub(r"[^A-Za-z0-9_-]+", "_", self.alt).strip("_") or "media"
        return f"{stem[:60]}{ext}"


def format_embed(alt: str, mime_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"--embed[alt={quote(alt, safe='')},type={mime_type},data={encoded}]--"


def parse_embeds(text: str) -> Tuple[str, List[InlineEmbed]]:
    """Split text into its plain part and the embeds it carries."""
    embeds: List[InlineEmbed] = []

    def _collect(match: "re.Match[str]") -> str:
        embeds.append(
            InlineEmbed(
                alt=unquote(match.group("alt")),
                mime_type=match.group("type"),
                data=base64.b64decode(match.group("data")),
            )
        )
        return ""

    plain = EMBED_PATTERN.sub(_collect, text)
    return plain.strip(), embeds
