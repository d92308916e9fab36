import random

import pytest

from app.services.canned_responder import (
    DEFAULT_RESPONSES,
    KEYWORD_RESPONSES,
    STYLE_RESPONSES,
    CannedResponder,
)

KEYWORDS = dict(KEYWORD_RESPONSES)


@pytest.mark.asyncio
@pytest.mark.parametrize("keyword,expected", KEYWORD_RESPONSES)
async def test_keyword_reply_is_fixed_for_any_seed(keyword, expected):
    for seed in range(5):
        responder = CannedResponder(rng=random.Random(seed))
        reply = await responder.generate(f"Question about {keyword.upper()} please")
        assert reply == expected


@pytest.mark.asyncio
async def test_ssl_question_gets_certificate_guidance():
    reply = await CannedResponder().generate("What about SSL setup?")
    assert reply == KEYWORDS["ssl"]
    assert "certificate" in reply


@pytest.mark.asyncio
async def test_first_declared_keyword_wins():
    # "dns" appears first in the message, but "ssl" is declared first in the table.
    reply = await CannedResponder().generate("dns and ssl are both broken")
    assert reply == KEYWORDS["ssl"]


@pytest.mark.asyncio
async def test_keyword_beats_response_style():
    reply = await CannedResponder().generate("billing question", settings={"responseStyle": "concise"})
    assert reply == KEYWORDS["billing"]


@pytest.mark.asyncio
async def test_no_match_without_style_uses_default_pool():
    responder = CannedResponder(rng=random.Random(1))
    for _ in range(10):
        assert await responder.generate("hello there") in DEFAULT_RESPONSES


@pytest.mark.asyncio
@pytest.mark.parametrize("style", ["friendly", "technical", "concise"])
async def test_no_match_with_style_uses_style_pool(style):
    responder = CannedResponder(rng=random.Random(7))
    for _ in range(10):
        reply = await responder.generate("hello there", settings={"responseStyle": style})
        assert reply in STYLE_RESPONSES[style]


@pytest.mark.asyncio
async def test_unknown_style_falls_back_to_friendly():
    responder = CannedResponder(rng=random.Random(3))
    reply = await responder.generate("hello there", settings={"responseStyle": "pirate"})
    assert reply in STYLE_RESPONSES["friendly"]


def test_match_keyword_returns_none_without_match():
    assert CannedResponder.match_keyword("nothing relevant here") is None
