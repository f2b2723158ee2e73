"""
Template-based meme kit content and kit request validation.
"""

import hashlib
import random
import re
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError


TICKER_PATTERN = re.compile(r"^[A-Z0-9]{3,8}$")
MAX_NAME_LENGTH = 30


class Vibe(str, Enum):
    FUNNY = "funny"
    SERIOUS = "serious"
    DEGEN = "degen"


class Preset(str, Enum):
    HONEST = "honest"
    DEGEN = "degen"


class MemeKitRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    ticker: str
    vibe: Vibe
    preset: Preset
    share_url: str
    use_ai: bool = False
    require_ai: bool = False

    @field_validator("ticker")
    @classmethod
    def _check_ticker(cls, value: str) -> str:
        if not TICKER_PATTERN.match(value):
            raise ValueError("Invalid ticker format (3-8 characters: uppercase letters and numbers only)")
        return value

    @field_validator("share_url")
    @classmethod
    def _check_share_url(cls, value: str) -> str:
        if not value.startswith("http"):
            raise ValueError("Invalid share URL")
        return value

    def tagline_key(self) -> str:
        return "|".join([self.name, self.ticker, self.vibe.value])


VIBE_CONTENT: Dict[Vibe, Dict[str, List[str]]] = {
    Vibe.FUNNY: {
        "emojis": ["😂", "🤣", "💀", "🔥", "🚀", "💎", "👀", "🤡"],
        "hashtags": ["#Solana", "#Memes", "#Crypto", "#Moon", "#WAGMI", "#HODL"],
        "ctas": ["LFG!", "WAGMI!", "To the moon!", "Diamond hands!", "Trust the process!"],
        "roadmap": [
            "Step 1: Launch with maximum chaos",
            "Step 2: Confuse everyone with memes",
            "Step 3: Accidentally moon",
            "Step 4: Profit (somehow)",
        ],
        "threads": [
            "🧵 Why ${ticker} is the most hilarious token you'll ever buy:\n\n1. Even your wallet will laugh\n2. The memes write themselves\n3. {name} has no roadmap, only vibes",
            "😂 The ${ticker} story in 3 tweets:\n\n1. \"This will never work\"\n2. \"Maybe it will work\"\n3. \"I can't believe it worked\"",
        ],
        "copypastas": [
            "BUY ${ticker} OR STAY BROKE {emoji}",
            "${ticker} is so good, even my cat wants to invest {emoji}",
            "I sold my kidney for ${ticker} and I don't regret it {emoji}",
            "{name} holders don't sleep, they meme {emoji}",
        ],
    },
    Vibe.SERIOUS: {
        "emojis": ["📊", "📈", "💼", "🎯", "🏆", "💡", "🔗"],
        "hashtags": ["#Solana", "#Blockchain", "#DeFi", "#Innovation", "#Growth"],
        "ctas": ["Join the revolution!", "Build the future!", "Grow together!"],
        "roadmap": [
            "Phase 1: Platform Development",
            "Phase 2: Community Building",
            "Phase 3: Partnership Expansion",
            "Phase 4: Ecosystem Growth",
        ],
        "threads": [
            "📊 ${ticker} at a glance:\n\n• Mint authority revoked\n• Liquidity on Solana DEXes\n• Growing community\n\nThis is not financial advice.",
            "🔍 Why {name}?\n\nTransparent launch, open liquidity and a community that ships.",
        ],
        "copypastas": [
            "${ticker} represents the future of decentralized finance {emoji}",
            "Investing in ${ticker} is investing in innovation {emoji}",
            "${ticker} - building the future, one block at a time {emoji}",
            "{name}: fundamentals first {emoji}",
        ],
    },
    Vibe.DEGEN: {
        "emojis": ["🚀", "💎", "🔥", "🦍", "🌕", "💰"],
        "hashtags": ["#Solana", "#Degen", "#Moon", "#100x", "#WAGMI"],
        "ctas": ["APE IN!", "SEND IT!", "NO SELLING!", "LFG!"],
        "roadmap": ["Step 1: Launch", "Step 2: Vibe", "Step 3: Moon", "Step 4: Lambo"],
        "threads": [
            "🚀 ${ticker} APE IN NOW OR MISS OUT FOREVER:\n\n• 1000x potential\n• Early gem alert\n• DYOR but ape anyway",
            "💎 ${ticker} DIAMOND HANDS ONLY:\n\n• Paper hands not welcome\n• HODL to the moon\n• We're all gonna make it",
        ],
        "copypastas": [
            "${ticker} OR STAY POOR FOREVER {emoji}",
            "APE INTO ${ticker} NOW BEFORE IT'S TOO LATE {emoji}",
            "${ticker} IS THE NEXT 1000X GEM {emoji}",
            "{name} TO VALHALLA {emoji}",
        ],
    },
}

STICKER_TEXTS = ["gm", "wen", "send it", "buy", "sell", "moon"]


def seeded_rng(*parts: str) -> random.Random:
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return random.Random(int(digest[:16], 16))


def hashtagify(text: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "", text).upper()


def _fill(template: str, name: str, ticker: str, emoji: str = "") -> str:
    return template.replace("{name}", name).replace("{ticker}", ticker).replace("{emoji}", emoji)


def generate_meme_content(name: str, ticker: str, vibe: Vibe) -> Dict[str, List[str]]:
    """Deterministic threads, copypastas, roadmap and hashtags for a token."""
    content = VIBE_CONTENT[vibe]
    rng = seeded_rng(ticker, vibe.value)

    threads = [_fill(t, name, ticker) + "\n\n" + rng.choice(content["ctas"]) for t in content["threads"]]
    copypastas = [
        _fill(t, name, ticker, rng.choice(content["emojis"]))
        for t in rng.sample(content["copypastas"], 3)
    ]
    hashtags = [f"#{hashtagify(ticker)}", f"#{hashtagify(name)}"] + content["hashtags"]

    return {
        "twitter_threads": threads,
        "copypastas": copypastas,
        "roadmap": list(content["roadmap"]),
        "hashtags": list(dict.fromkeys(h for h in hashtags if len(h) > 1)),
    }


def template_taglines(name: str, ticker: str, vibe: Vibe) -> List[str]:
    content = VIBE_CONTENT[vibe]
    rng = seeded_rng(name, ticker, "tagline")
    return [f"${ticker}: {cta}" for cta in rng.sample(content["ctas"], min(3, len(content["ctas"])))]


def badge_for(preset: Preset) -> str:
    return "✅ Honest Launch" if preset is Preset.HONEST else "⚡ Degen Mode"


def validate_kit_request(payload: Dict) -> MemeKitRequest:
    """Parse a raw kit request body, raising the service's ValidationError."""
    try:
        return MemeKitRequest.model_validate(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ())) or "body"
        message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
        raise ValidationError(message, details={"field": field_name})
