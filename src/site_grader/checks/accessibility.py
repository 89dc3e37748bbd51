"""WCAG-oriented accessibility checks."""

import re

from bs4 import Tag

from ..document import HtmlDocument
from ..models import Category, CheckResult, Finding, Outcome, Priority
from ..scoring import single_dimension


ACCESSIBILITY = Category.ACCESSIBILITY.value

LABELLED_INPUT_SELECTOR = 'input:not([type="hidden"]):not([type="submit"]):not([type="button"])'
_SKIP_TEXT = re.compile(r"skip", re.IGNORECASE)


def _capped(count: int, each: int, cap: int) -> int:
    return -min(cap, count * each)


def _has_label(doc: HtmlDocument, field: Tag, label_targets: set[str]) -> bool:
    if doc.attribute(field, "aria-label").strip() or doc.attribute(field, "aria-labelledby").strip():
        return True
    field_id = doc.attribute(field, "id")
    if field_id and field_id in label_targets:
        return True
    return field.find_parent("label") is not None


def _inputs_outcome(doc: HtmlDocument) -> Outcome | None:
    fields = doc.select_all(LABELLED_INPUT_SELECTOR)
    label_targets = {doc.attribute(label, "for") for label in doc.select_all("label[for]")}
    unlabeled = sum(1 for f in fields if not _has_label(doc, f, label_targets))
    if unlabeled:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="forms",
            issue=f"{unlabeled} form input(s) missing labels",
            impact="Screen reader users won't know what to enter in these fields",
            priority=Priority.CRITICAL,
            how_to_fix="Add <label for='inputId'> or aria-label attribute to each input field",
            code_example='<label for="email">Email</label>\n<input id="email" type="email">',
        ), {ACCESSIBILITY: _capped(unlabeled, 5, 20)})
    if fields:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="forms",
            issue="All form inputs have proper labels",
            impact="Screen reader users can navigate forms",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return None


def _buttons_outcome(doc: HtmlDocument) -> Outcome | None:
    buttons = doc.select_all("button")
    nameless = sum(
        1 for b in buttons
        if not (doc.text(b) or doc.attribute(b, "aria-label") or doc.attribute(b, "aria-labelledby") or doc.attribute(b, "title"))
    )
    if nameless:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="buttons",
            issue=f"{nameless} button(s) without accessible text",
            impact="Screen reader users won't know what these buttons do",
            priority=Priority.IMPORTANT,
            how_to_fix="Add text content, aria-label, or title attribute to buttons",
        ), {ACCESSIBILITY: _capped(nameless, 5, 15)})
    if buttons:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="buttons",
            issue="All buttons have accessible names",
            impact="Screen reader users know what each button does",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return None


def _links_outcome(doc: HtmlDocument) -> Outcome | None:
    links = doc.select_all("a[href]")
    nameless = sum(
        1 for a in links
        if not (doc.text(a) or doc.attribute(a, "aria-label") or a.select("img[alt]"))
    )
    if nameless:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="links",
            issue=f"{nameless} link(s) without accessible text",
            impact="Screen reader users won't know where these links go",
            priority=Priority.IMPORTANT,
            how_to_fix="Add descriptive link text or aria-label to all links",
        ), {ACCESSIBILITY: _capped(nameless, 5, 15)})
    if links:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="links",
            issue="All links have accessible names",
            impact="Screen reader users know where links go",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return None


def _has_skip_link(doc: HtmlDocument) -> bool:
    for a in doc.select_all('a[href^="#"]'):
        classes = doc.attribute(a, "class").split()
        if _SKIP_TEXT.search(doc.text(a)) or "skip-link" in classes or "sr-only" in classes:
            return True
    return False


def _skip_link_outcome(doc: HtmlDocument) -> Outcome:
    if _has_skip_link(doc):
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="navigation",
            issue="Skip navigation link present",
            impact="Keyboard users can skip repetitive content",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(Finding(
        category=Category.ACCESSIBILITY,
        subcategory="navigation",
        issue="No skip navigation link found",
        impact="Keyboard users must tab through all navigation on every page",
        priority=Priority.IMPORTANT,
        how_to_fix="Add a 'Skip to main content' link at the top of your page",
        code_example='<a class="skip-link" href="#main">Skip to main content</a>',
    ), {ACCESSIBILITY: -10})


def heading_skips(levels: list[int]) -> int:
    """Count places where a heading jumps more than one level deeper."""
    skips = 0
    previous = 0
    for level in levels:
        if previous and level > previous + 1:
            skips += 1
        previous = level
    return skips


def _headings_outcome(doc: HtmlDocument) -> Outcome | None:
    levels = [int(h.name[1]) for h in doc.select_all("h1, h2, h3, h4, h5, h6")]
    if heading_skips(levels):
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="headings",
            issue="Heading hierarchy is inconsistent",
            impact="Screen reader users rely on heading structure for navigation",
            priority=Priority.IMPORTANT,
            how_to_fix="Use headings in order (h1, then h2, then h3). Don't skip levels",
        ), {ACCESSIBILITY: -10})
    if levels:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="headings",
            issue="Proper heading hierarchy",
            impact="Good structure for screen reader navigation",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return None


def _lang_outcome(doc: HtmlDocument) -> Outcome:
    if doc.attribute(doc.select_one("html"), "lang").strip():
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="language",
            issue="Language attribute present",
            impact="Screen readers can pronounce content correctly",
            priority=Priority.OPTIONAL,
            passed=True,
        ))
    return Outcome(Finding(
        category=Category.ACCESSIBILITY,
        subcategory="language",
        issue="Missing language attribute on <html>",
        impact="Screen readers may mispronounce content",
        priority=Priority.IMPORTANT,
        how_to_fix='Add lang attribute: <html lang="en">',
    ), {ACCESSIBILITY: -10})


def _tabindex_outcome(doc: HtmlDocument) -> Outcome | None:
    positive = 0
    for el in doc.select_all("[tabindex]"):
        try:
            if int(doc.attribute(el, "tabindex").strip()) > 0:
                positive += 1
        except ValueError:
            continue
    if positive:
        return Outcome(Finding(
            category=Category.ACCESSIBILITY,
            subcategory="keyboard",
            issue=f"{positive} element(s) with positive tabindex values",
            impact="Positive tabindex disrupts natural keyboard navigation order",
            priority=Priority.OPTIONAL,
            how_to_fix="Use tabindex='0' for focusable elements or tabindex='-1' to remove from tab order",
        ), {ACCESSIBILITY: -5})
    return None


def check_accessibility(doc: HtmlDocument) -> CheckResult:
    outcomes = [
        _inputs_outcome(doc),
        _buttons_outcome(doc),
        _links_outcome(doc),
        _skip_link_outcome(doc),
        _headings_outcome(doc),
        _lang_outcome(doc),
        _tabindex_outcome(doc),
    ]
    return single_dimension(ACCESSIBILITY, [o for o in outcomes if o is not None])
