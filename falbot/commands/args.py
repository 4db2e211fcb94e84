"""
Command argument parsing

Commands take free text plus `--key value` flags:

    !text2image a red fox in snow --image_size square --num_images 2
    !image2video https://example.com/cat.png the cat yawns --duration=6

Double quotes group words; apostrophes are left alone so prompts like
"don't stop" survive. A flag with no value reads as true.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from falbot.fal.types import Capability

_TOKEN = re.compile(r'"([^"]*)"|(\S+)')

# Chat command -> capability it drives
COMMAND_CAPABILITIES: Dict[str, Capability] = {
    "text2image": Capability.TEXT2IMAGE,
    "image2image": Capability.IMAGE2IMAGE,
    "text2video": Capability.TEXT2VIDEO,
    "image2video": Capability.IMAGE2VIDEO,
    "video2video": Capability.VIDEO2VIDEO,
    "text2speech": Capability.TEXT2SPEECH,
    "audio2audio": Capability.AUDIO2AUDIO,
    "text2music": Capability.TEXT2MUSIC,
    "video2audio": Capability.VIDEO2AUDIO,
    "transcribe": Capability.AUDIO2TEXT,
}


def is_url(token: str) -> bool:
    return token.startswith(("http://", "https://"))


@dataclass
class ParsedArgs:
    """Positional words, URLs pulled from the front, and flags."""
    words: List[str] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)
    flags: Dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return " ".join(self.words).strip()

    def pop_flag(self, name: str) -> Optional[str]:
        return self.flags.pop(name, None)


def tokenize(raw: str) -> List[str]:
    tokens = []
    for match in _TOKEN.finditer(raw or ""):
        quoted = match.group(1)
        tokens.append(quoted if quoted is not None else match.group(2))
    return tokens


def parse_args(raw: str) -> ParsedArgs:
    """
    Split a command's argument string.

    URL tokens before the first plain word are collected into `urls` (in
    order) so a command can take `<url> [url] <prompt>`; URLs later in the
    text stay part of it.
    """
    parsed = ParsedArgs()
    tokens = tokenize(raw)
    i = 0
    leading = True
    while i < len(tokens):
        token = tokens[i]
        if token.startswith("--") and len(token) > 2:
            key, sep, value = token[2:].partition("=")
            key = key.replace("-", "_").lower()
            if not sep:
                if i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
                    value = tokens[i + 1]
                    i += 1
                else:
                    value = "true"
            parsed.flags[key] = value
        elif leading and is_url(token):
            parsed.urls.append(token)
        else:
            leading = False
            parsed.words.append(token)
        i += 1
    return parsed
