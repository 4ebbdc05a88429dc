from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, get_args

Tone = Literal["professional", "friendly", "confident"]
Strength = Literal["light", "medium", "strong"]

VALID_TONES: tuple[str, ...] = get_args(Tone)
VALID_STRENGTHS: tuple[str, ...] = get_args(Strength)

TONE_INSTRUCTIONS: dict[str, str] = {
    "professional": (
        "Keep a polished, business-appropriate tone. Use clear, direct language that suits emails, "
        "reports and documentation. Skip slang without sounding stiff; write like a competent "
        "professional who respects the reader's time."
    ),
    "friendly": (
        "Use a warm, approachable tone, as if talking to a respected colleague over coffee. Stay "
        "conversational but never sloppy. Contractions are welcome, and so are natural transitions "
        'like "honestly," "here\'s the thing," or "that said."'
    ),
    "confident": (
        "Write with authority and conviction. Prefer strong, declarative sentences and avoid hedges "
        'such as "maybe," "perhaps," or "it seems." State things directly so the reader feels the '
        "writer knows exactly what they are talking about."
    ),
}

STRENGTH_INSTRUCTIONS: dict[str, str] = {
    "light": (
        "Make minimal changes. Fix only the most obviously robotic patterns: uniform sentence length, "
        'heavy use of "Furthermore/Moreover/Additionally," and needless filler phrases. Keep the '
        "original structure largely intact, like a light editorial pass."
    ),
    "medium": (
        "Restructure for natural flow while keeping the original organization. Vary sentence length "
        "noticeably, swap generic transitions for specific ones, cut filler and redundant qualifiers, "
        "and simplify vocabulary where a simpler word works. Aim for a solid second draft."
    ),
    "strong": (
        "Substantially rewrite for maximum naturalness. Reorder sentences and paragraphs when it helps "
        "the flow, replace every robotic pattern, and mix short punchy sentences with longer "
        "explanatory ones. Cut aggressively. The result should read as if a skilled writer produced it "
        "from scratch with the same information."
    ),
}

CORE_RULES = """CORE RULES:
1. PRESERVE ALL FACTUAL CONTENT: every name, date, number, statistic, URL, technical term and specific claim must survive unchanged.
2. NEVER add information that is not in the original.
3. NEVER drop key points or arguments from the original.
4. Output ONLY the rewritten text. No preamble such as "Here's the rewritten version:", no commentary."""

HUMANIZATION_TECHNIQUES = """HUMANIZATION TECHNIQUES TO APPLY:
- Vary sentence length on purpose (mix 5-word sentences with 25-word ones)
- Replace stock AI transitions ("Furthermore," "Moreover," "Additionally," "It is important to note") with natural connectors, or just start a new sentence
- Cut filler: "In order to" becomes "To", "Due to the fact that" becomes "Because", "It should be noted that" disappears
- Prefer active voice where it reads more clearly
- Use concrete language over abstract ("helped 50 teams", not "facilitated numerous organizational units")
- Never start more than two sentences in a row the same way
- Prefer common words over inflated ones ("use" not "utilize", "help" not "facilitate", "start" not "commence")"""

KEY_POINT_INSTRUCTION = (
    "KEY POINT PRESERVATION: Take extra care to keep every distinct argument, recommendation and "
    "conclusion from the original. Do not merge or compress separate points."
)

STRICTER_INSTRUCTION = (
    "CRITICAL: A previous rewrite lost meaning. Be extremely careful to keep every single fact, number "
    "and claim from the original. Do not omit anything."
)

EVALUATOR_SYSTEM_PROMPT = "You are a precise text comparison tool. Respond only with valid JSON."


@dataclass(frozen=True)
class RewriteConfiguration:
    tone: Tone
    strength: Strength
    preserve_key_points: bool = False
    stricter: bool = False

    def __post_init__(self) -> None:
        if self.tone not in TONE_INSTRUCTIONS:
            raise ValueError(f"Unsupported tone: {self.tone!r}")
        if self.strength not in STRENGTH_INSTRUCTIONS:
            raise ValueError(f"Unsupported strength: {self.strength!r}")
        if self.stricter and not self.preserve_key_points:
            object.__setattr__(self, "preserve_key_points", True)

    def as_stricter(self) -> RewriteConfiguration:
        return replace(self, stricter=True, preserve_key_points=True)


def build_system_prompt(config: RewriteConfiguration) -> str:
    blocks = [
        "You are an expert writing editor who turns AI-generated text into natural, human-sounding prose. "
        "Your rewrites should be indistinguishable from the work of a skilled human professional.",
        CORE_RULES,
        f"TONE:\n{TONE_INSTRUCTIONS[config.tone]}",
        f"REWRITE STRENGTH:\n{STRENGTH_INSTRUCTIONS[config.strength]}",
        HUMANIZATION_TECHNIQUES,
    ]
    if config.preserve_key_points:
        blocks.append(KEY_POINT_INSTRUCTION)
    if config.stricter:
        blocks.append(STRICTER_INSTRUCTION)
    return "\n\n".join(blocks)


def build_user_prompt(text: str) -> str:
    return f"Rewrite the following text:\n\n{text}"


def build_evaluator_prompt(original: str, rewritten: str) -> str:
    return f"""Compare the original text below with its rewritten version. Check whether any key facts, claims, numbers, names, or arguments were lost, changed, or distorted in the rewrite.

ORIGINAL:
\"\"\"
{original}
\"\"\"

REWRITTEN:
\"\"\"
{rewritten}
\"\"\"

Respond with a JSON object:
{{
  "meaningPreserved": true/false,
  "issuesFound": ["list of specific issues, if any"],
  "severity": "none" | "minor" | "major"
}}

If meaning is fully preserved, respond: {{"meaningPreserved": true, "issuesFound": [], "severity": "none"}}"""
