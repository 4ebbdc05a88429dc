import pytest

from ghosthuman.services.prompts import (
    KEY_POINT_INSTRUCTION,
    STRENGTH_INSTRUCTIONS,
    STRICTER_INSTRUCTION,
    TONE_INSTRUCTIONS,
    RewriteConfiguration,
    build_evaluator_prompt,
    build_system_prompt,
    build_user_prompt,
)


@pytest.mark.parametrize("tone", ["professional", "friendly", "confident"])
@pytest.mark.parametrize("strength", ["light", "medium", "strong"])
def test_system_prompt_selects_tone_and_strength_blocks(tone, strength):
    prompt = build_system_prompt(RewriteConfiguration(tone=tone, strength=strength))

    assert TONE_INSTRUCTIONS[tone] in prompt
    assert STRENGTH_INSTRUCTIONS[strength] in prompt
    assert "NEVER add information" in prompt
    assert "Output ONLY the rewritten text" in prompt
    for other in set(TONE_INSTRUCTIONS) - {tone}:
        assert TONE_INSTRUCTIONS[other] not in prompt


def test_system_prompt_is_deterministic():
    config = RewriteConfiguration(tone="friendly", strength="medium", preserve_key_points=True)

    assert build_system_prompt(config) == build_system_prompt(config)


def test_key_point_block_only_when_requested():
    without = build_system_prompt(RewriteConfiguration(tone="professional", strength="light"))
    with_points = build_system_prompt(
        RewriteConfiguration(tone="professional", strength="light", preserve_key_points=True)
    )

    assert KEY_POINT_INSTRUCTION not in without
    assert KEY_POINT_INSTRUCTION in with_points
    assert STRICTER_INSTRUCTION not in with_points


def test_stricter_forces_key_points():
    config = RewriteConfiguration(tone="confident", strength="strong", preserve_key_points=False, stricter=True)

    assert config.preserve_key_points is True
    prompt = build_system_prompt(config)
    assert KEY_POINT_INSTRUCTION in prompt
    assert prompt.endswith(STRICTER_INSTRUCTION)


def test_as_stricter_returns_new_configuration():
    base = RewriteConfiguration(tone="friendly", strength="light")
    stricter = base.as_stricter()

    assert base.stricter is False
    assert base.preserve_key_points is False
    assert stricter.stricter is True
    assert stricter.preserve_key_points is True
    assert (stricter.tone, stricter.strength) == ("friendly", "light")


@pytest.mark.parametrize(("tone", "strength"), [("casual", "light"), ("friendly", "extreme")])
def test_configuration_rejects_unknown_values(tone, strength):
    with pytest.raises(ValueError):
        RewriteConfiguration(tone=tone, strength=strength)


def test_user_prompt_wraps_text_only():
    assert build_user_prompt("Hello there.") == "Rewrite the following text:\n\nHello there."


def test_evaluator_prompt_lists_checks_and_schema():
    prompt = build_evaluator_prompt("Revenue grew 12% in 2023.", "Revenue rose in 2023.")

    assert "Revenue grew 12% in 2023." in prompt
    assert "Revenue rose in 2023." in prompt
    for category in ("facts", "claims", "numbers", "names", "arguments"):
        assert category in prompt
    for key in ('"meaningPreserved"', '"issuesFound"', '"severity"'):
        assert key in prompt
    assert '"none" | "minor" | "major"' in prompt
