from __future__ import annotations

import unicodedata

from reading_analyzer.types import AccuracyResult


def _keep(char: str) -> bool:
    return char.isspace() or unicodedata.category(char)[0] in ("L", "N")


def tokenize(text: str) -> list[str]:
    # Lowercase first: some capitals (Turkish "İ") lower to a letter plus a combining mark.
    cleaned = "".join(char for char in text.lower() if _keep(char))
    return cleaned.split()


def count_matches(reference: list[str], transcribed: list[str]) -> int:
    """Greedy exact-token matching; each transcribed position is used at most once.

    Every reference token scans the transcription from the start, so the
    result can undercount when repeated words appear out of order.
    """
    used: set[int] = set()
    matched = 0
    for word in reference:
        for index, candidate in enumerate(transcribed):
            if index not in used and candidate == word:
                used.add(index)
                matched += 1
                break
    return matched


class AlignmentScorer:
    def score(self, reference: str, transcribed: str) -> AccuracyResult:
        reference_words = tokenize(reference)
        transcribed_words = tokenize(transcribed)
        matched = count_matches(reference_words, transcribed_words)

        denominator = max(len(reference_words), len(transcribed_words))
        percentage = round(matched / denominator * 100, 2) if denominator else 0.0

        return AccuracyResult(
            percentage=percentage,
            matched_count=matched,
            reference_word_count=len(reference_words),
            transcribed_word_count=len(transcribed_words),
        )


def score(reference: str, transcribed: str) -> AccuracyResult:
    return AlignmentScorer().score(reference, transcribed)
