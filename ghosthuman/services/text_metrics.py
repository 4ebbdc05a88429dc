from __future__ import annotations

import math
import re
from dataclasses import dataclass

from ghosthuman.utils.text import clamp, round_half_up, sentences, word_count, words

FILLER_PHRASES: tuple[str, ...] = (
    "it is important to note that",
    "it should be noted that",
    "it is worth mentioning that",
    "in order to",
    "due to the fact that",
    "as a matter of fact",
    "at the end of the day",
    "in today's world",
    "in this day and age",
    "it goes without saying",
    "needless to say",
    "all things considered",
    "when all is said and done",
    "in the realm of",
    "in terms of",
    "with regard to",
    "with respect to",
    "on the other hand",
    "in light of the fact that",
    "for the purpose of",
    "in the event that",
    "at this point in time",
    "the fact of the matter is",
    "it is crucial to",
    "it is essential to",
    "it is imperative to",
    "plays a crucial role",
    "plays a vital role",
    "plays an important role",
    "serves as a testament",
    "serves as a reminder",
)

TRANSITION_WORDS: tuple[str, ...] = (
    "furthermore",
    "moreover",
    "additionally",
    "consequently",
    "nevertheless",
    "henceforth",
    "notwithstanding",
    "in conclusion",
    "to summarize",
    "in summary",
)

IRREGULAR_PARTICIPLES: frozenset[str] = frozenset(
    {
        "written",
        "shown",
        "known",
        "made",
        "done",
        "given",
        "taken",
        "seen",
        "found",
        "built",
        "told",
        "sent",
        "held",
        "kept",
        "brought",
        "thought",
        "said",
    }
)

_NON_LETTER_RE = re.compile(r"[^a-z]")
_SILENT_SUFFIX_RE = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
_LEADING_Y_RE = re.compile(r"^y")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]{1,2}")
_PASSIVE_RE = re.compile(
    r"\b(?:is|are|was|were|be|been|being)\s+(?:\w+ed|"
    + "|".join(sorted(IRREGULAR_PARTICIPLES))
    + r")\b",
    flags=re.IGNORECASE,
)
_TRANSITION_RES = tuple(re.compile(rf"\b{re.escape(word)}\b") for word in TRANSITION_WORDS)


@dataclass(frozen=True)
class QualityMetrics:
    readability_before: float
    readability_after: float
    readability_improved: bool
    length_ratio: float
    sentence_variance_before: float
    sentence_variance_after: float
    passive_voice_before: int
    passive_voice_after: int
    filler_count_before: int
    filler_count_after: int
    overall_score: int


def _syllables(word: str) -> int:
    w = _NON_LETTER_RE.sub("", word.lower())
    if len(w) <= 3:
        return 1
    w = _SILENT_SUFFIX_RE.sub("", w, count=1)
    w = _LEADING_Y_RE.sub("", w, count=1)
    return len(_VOWEL_GROUP_RE.findall(w)) or 1


def flesch_kincaid_score(text: str) -> float:
    """Flesch reading ease clamped to 0-100; 0 when there is nothing to score."""
    sent = sentences(text)
    if not sent:
        return 0.0
    toks = words(text)
    if not toks:
        return 0.0

    syllable_count = sum(_syllables(token) for token in toks)
    score = 206.835 - 1.015 * (len(toks) / len(sent)) - 84.6 * (syllable_count / len(toks))
    return round_half_up(clamp(score, 0.0, 100.0), 1)


def sentence_length_variance(text: str) -> float:
    """Population standard deviation of words per sentence."""
    sent = sentences(text)
    if len(sent) < 2:
        return 0.0

    lengths = [word_count(s) for s in sent]
    mean_len = sum(lengths) / len(lengths)
    variance = sum((x - mean_len) ** 2 for x in lengths) / len(lengths)
    return round_half_up(math.sqrt(variance), 1)


def passive_voice_percentage(text: str) -> int:
    sent = sentences(text)
    if not sent:
        return 0
    passive = sum(1 for s in sent if _PASSIVE_RE.search(s))
    return int(round_half_up(passive / len(sent) * 100))


def count_filler_phrases(text: str) -> int:
    lower = text.lower()
    count = sum(lower.count(phrase) for phrase in FILLER_PHRASES)
    count += sum(len(pattern.findall(lower)) for pattern in _TRANSITION_RES)
    return count


def overall_score(
    *,
    readability_before: float,
    readability_after: float,
    sentence_variance_before: float,
    sentence_variance_after: float,
    passive_voice_before: int,
    passive_voice_after: int,
    filler_count_before: int,
    filler_count_after: int,
    length_ratio: float,
) -> int:
    # Five additive before/after comparisons on top of a neutral 50; tops out at 100.
    score = 50

    if readability_after > readability_before:
        score += 10
    elif readability_after < readability_before - 10:
        score -= 5

    if sentence_variance_after > sentence_variance_before:
        score += 10

    if passive_voice_after < passive_voice_before:
        score += 10
    elif passive_voice_after > passive_voice_before:
        score -= 5

    if filler_count_after < filler_count_before:
        score += 10

    if 0.7 <= length_ratio <= 1.1:
        score += 10
    elif length_ratio < 0.5 or length_ratio > 1.5:
        score -= 10

    return int(clamp(score, 0, 100))


def compute_quality_metrics(original: str, rewritten: str) -> QualityMetrics:
    readability_before = flesch_kincaid_score(original)
    readability_after = flesch_kincaid_score(rewritten)
    length_ratio = round_half_up(word_count(rewritten) / max(word_count(original), 1), 2)
    sentence_variance_before = sentence_length_variance(original)
    sentence_variance_after = sentence_length_variance(rewritten)
    passive_voice_before = passive_voice_percentage(original)
    passive_voice_after = passive_voice_percentage(rewritten)
    filler_count_before = count_filler_phrases(original)
    filler_count_after = count_filler_phrases(rewritten)

    return QualityMetrics(
        readability_before=readability_before,
        readability_after=readability_after,
        readability_improved=readability_after >= readability_before,
        length_ratio=length_ratio,
        sentence_variance_before=sentence_variance_before,
        sentence_variance_after=sentence_variance_after,
        passive_voice_before=passive_voice_before,
        passive_voice_after=passive_voice_after,
        filler_count_before=filler_count_before,
        filler_count_after=filler_count_after,
        overall_score=overall_score(
            readability_before=readability_before,
            readability_after=readability_after,
            sentence_variance_before=sentence_variance_before,
            sentence_variance_after=sentence_variance_after,
            passive_voice_before=passive_voice_before,
            passive_voice_after=passive_voice_after,
            filler_count_before=filler_count_before,
            filler_count_after=filler_count_after,
            length_ratio=length_ratio,
        ),
    )
