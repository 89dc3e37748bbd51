"""Keyword extraction and placement checks."""

import re
from collections import Counter
from dataclasses import dataclass

from ..document import HtmlDocument
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..scoring import single_dimension


KEYWORDS = Category.KEYWORDS.value

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "from", "as", "is", "was", "are", "were", "been", "be", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might", "must",
    "shall", "can", "need", "dare", "ought", "used", "it", "its", "this", "that", "these",
    "those", "i", "you", "he", "she", "we", "they", "what", "which", "who", "whom",
    "when", "where", "why", "how", "all", "each", "every", "both", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same", "so", "than",
    "too", "very", "just", "also", "now", "here", "there", "then", "once", "if", "else",
}

MAX_DENSITY = 3.0
TOP_N = 10

_NON_LETTERS = re.compile(r"[^a-z\s]")


@dataclass(frozen=True)
class Keyword:
    word: str
    count: int
    density: float  # percent of counted words

    def to_dict(self) -> dict:
        return {"word": self.word, "count": self.count, "density": round(self.density, 2)}


def extract_keywords(text: str, limit: int = TOP_N) -> list[Keyword]:
    """Most frequent non-stop-words, ties broken by first appearance."""
    words = [
        w for w in _NON_LETTERS.sub("", text.lower()).split()
        if len(w) > 2 and w not in STOP_WORDS
    ]
    total = len(words) or 1
    # Counter.most_common keeps insertion order for equal counts
    return [
        Keyword(word, count, count / total * 100)
        for word, count in Counter(words).most_common(limit)
    ]


def check_keywords(doc: HtmlDocument) -> CheckResult:
    keywords = extract_keywords(doc.body_text())
    outcomes: list[Outcome] = []

    if not keywords:
        outcomes.append(Outcome(Finding(
            category=Category.KEYWORDS,
            subcategory="content",
            issue="No significant keywords found",
            impact="Your page may lack focused content",
            priority=Priority.IMPORTANT,
            how_to_fix="Add more meaningful content with keywords relevant to your topic",
        ), {KEYWORDS: -20}))
        return single_dimension(KEYWORDS, outcomes, metadata={"keywords": []})

    top = keywords[0]
    title = doc.title().lower()
    h1_text = " ".join(doc.text(h) for h in doc.select_all("h1")).lower()
    description = doc.meta(name="description").lower()

    if top.word in title or top.word in h1_text:
        outcomes.append(Outcome(Finding(
            category=Category.KEYWORDS,
            subcategory="placement",
            issue=f'Top keyword "{top.word}" found in title/H1',
            impact="Good keyword placement for SEO",
            priority=Priority.OPTIONAL,
            passed=True,
        )))
    else:
        outcomes.append(Outcome(Finding(
            category=Category.KEYWORDS,
            subcategory="placement",
            issue=f'Top keyword "{top.word}" not in title or H1',
            impact="Main keywords should appear in title and H1 for better SEO",
            priority=Priority.IMPORTANT,
            how_to_fix=f'Include "{top.word}" naturally in your page title and H1 heading',
        ), {KEYWORDS: -15}))

    if top.density > MAX_DENSITY:
        outcomes.append(Outcome(Finding(
            category=Category.KEYWORDS,
            subcategory="density",
            issue=f'Keyword "{top.word}" density is {top.density:.1f}% (may be too high)',
            impact="Keyword stuffing can hurt SEO rankings",
            priority=Priority.IMPORTANT,
            how_to_fix="Reduce repetition of this keyword. Aim for 1-2% density",
        ), {KEYWORDS: -10}))
    else:
        outcomes.append(Outcome(Finding(
            category=Category.KEYWORDS,
            subcategory="density",
            issue=f'Keyword "{top.word}" density is {top.density:.1f}%',
            impact="Natural keyword density reads well and avoids stuffing penalties",
            priority=Priority.OPTIONAL,
            passed=True,
        )))

    return single_dimension(KEYWORDS, outcomes, metadata={
        "keywords": [k.to_dict() for k in keywords],
        "top_keyword_in_description": top.word in description,
    })
