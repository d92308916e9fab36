"""
CANNED RESPONDER MODULE
=======================

Replies without any model call. Used when no GROQ_API_KEY is configured, and as
the fallback when an inference call fails or comes back empty.

HOW A REPLY IS PICKED:
  1. Lower-case the message and scan KEYWORD_RESPONSES in declaration order;
     the first keyword contained in the message wins, even if later ones match too.
  2. Otherwise pick at random: from DEFAULT_RESPONSES when no responseStyle is
     set, from STYLE_RESPONSES[style] when it is (unknown styles use "friendly").
"""

import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.models import ChatMessage

# Order matters: first match wins.
KEYWORD_RESPONSES: Tuple[Tuple[str, str], ...] = (
    ("ssl", "For SSL, make sure your certificate covers every hostname you serve and "
            "that the full chain is installed. Set the SSL mode to Full (strict) once "
            "the origin presents a valid certificate, and renew before expiry."),
    ("performance", "To improve performance, enable caching for static assets, set "
                    "sensible Cache-Control headers, and turn on compression. Check "
                    "cache hit ratios to find requests that still reach the origin."),
    ("billing", "Billing questions are handled from the Billing section of your "
                "dashboard, where you can see invoices and payment methods. Charges "
                "are prorated when you change plans mid-cycle."),
    ("dns", "For DNS issues, confirm your nameservers point to us and that the A, "
            "AAAA or CNAME records target the right origin. Changes can take up to "
            "the record's TTL to propagate."),
    ("llama", "Llama models run directly on the edge network with optimized inference, "
              "so you can call them without managing GPUs."),
    ("workflow", "Workflows coordinate multi-step operations across services with "
                 "built-in step tracking and error handling."),
    ("memory", "Use a key-value store for simple conversation memory, or a strongly "
               "consistent store when several writers update the same state."),
    ("voice", "Capture voice input with the browser's Web Speech API, then send the "
              "transcript to the chat endpoint like any other message."),
    ("deploy", "Deploy globally in seconds from the command line, or connect a "
               "repository and deploy from CI on every push."),
    ("cost", "Inference is billed per request, with a free tier that covers "
             "development and testing."),
)

DEFAULT_RESPONSES: Tuple[str, ...] = (
    "Thanks for reaching out! Could you share a bit more detail so I can point you "
    "in the right direction?",
    "I can help with SSL, DNS, performance and billing questions. What are you "
    "working on?",
    "Happy to help. If something is broken, tell me what you expected and what "
    "happened instead.",
    "Good question. Can you tell me which domain or project this is about?",
)

STYLE_RESPONSES: Dict[str, Tuple[str, ...]] = {
    "friendly": (
        "I'd be happy to help with that! Running your app at the edge keeps it fast "
        "for everyone.",
        "That's a great question! Let me walk you through how this works...",
        "I can definitely help you with that! The global network is perfect for "
        "low-latency apps.",
        "Awesome question! Here's how you can set that up...",
        "I understand what you're asking! Let me break this down for you...",
    ),
    "technical": (
        "Serverless functions execute in isolated runtimes across hundreds of "
        "locations with cold starts under 5 ms.",
        "Strongly consistent storage gives you transactional guarantees for shared state.",
        "Key-value storage is eventually consistent with low-latency reads at every location.",
        "Requests are routed to the nearest location by anycast and served from cache "
        "when possible.",
        "Workflows persist step state so long-running jobs resume after failures.",
    ),
    "concise": (
        "Edge functions. Low latency, global scale.",
        "Consistent store for shared state. KV for simple data.",
        "Functions for logic, static hosting for the frontend.",
        "Voice via Web Speech API, then send the text to chat.",
        "Cache static assets. Compress everything else.",
    ),
}

DEFAULT_STYLE = "friendly"


class CannedResponder:
    """Keyword table first, then a random pick from the default or style pool."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def match_keyword(message: str) -> Optional[str]:
        """Return the response for the first keyword found in message, else None."""
        lowered = message.lower()
        for keyword, response in KEYWORD_RESPONSES:
            if keyword in lowered:
                return response
        return None

    def pool_for(self, style: Optional[str]) -> Sequence[str]:
        if not style:
            return DEFAULT_RESPONSES
        if not isinstance(style, str):
            style = DEFAULT_STYLE
        return STYLE_RESPONSES.get(style.lower(), STYLE_RESPONSES[DEFAULT_STYLE])

    async def generate(
        self,
        message: str,
        history: Optional[List[ChatMessage]] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> str:
        matched = self.match_keyword(message)
        if matched is not None:
            return matched
        style = (settings or {}).get("responseStyle")
        return self.rng.choice(self.pool_for(style))
