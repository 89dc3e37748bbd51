"""HTML document access used by every analyzer.

Analyzers only go through :class:`HtmlDocument`, so the parser behind it
(BeautifulSoup with lxml) stays in one place.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag


_WHITESPACE = re.compile(r"\s+")

# Elements whose text never reaches a reader.
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class HtmlDocument:
    """A parsed HTML page with a small query surface."""

    def __init__(self, html: Optional[str]):
        self.html = html or ""
        self.soup = BeautifulSoup(self.html, "lxml")

    def select_all(self, selector: str) -> list[Tag]:
        return self.soup.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    @staticmethod
    def attribute(node: Optional[Tag], name: str) -> str:
        """Return an attribute value as a string, '' when absent."""
        if node is None:
            return ""
        value = node.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    @staticmethod
    def text(node: Optional[Tag]) -> str:
        if node is None:
            return ""
        return collapse_whitespace(node.get_text(" "))

    @staticmethod
    def has_attribute(node: Tag, name: str) -> bool:
        return node.has_attr(name)

    def title(self) -> str:
        return self.text(self.soup.find("title"))

    def meta(self, name: Optional[str] = None, property: Optional[str] = None) -> str:
        """Return the content of a <meta name=...> or <meta property=...> tag."""
        if name is not None:
            tag = self.soup.find("meta", attrs={"name": name})
        else:
            tag = self.soup.find("meta", attrs={"property": property})
        return self.attribute(tag, "content").strip()

    def link_href(self, rel: str) -> str:
        for tag in self.soup.find_all("link", href=True):
            rels = tag.get("rel") or []
            if isinstance(rels, str):
                rels = rels.split()
            if rel in (r.lower() for r in rels):
                return self.attribute(tag, "href").strip()
        return ""

    def body_text(self) -> str:
        """Visible body text with whitespace collapsed.

        Script, style, noscript and template contents are excluded.
        """
        body = self.soup.body
        if body is None:
            return ""
        body = BeautifulSoup(str(body), "lxml").body
        for tag in body.find_all(NON_CONTENT_TAGS):
            tag.decompose()
        return collapse_whitespace(body.get_text(" "))

    def json_ld_scripts(self) -> list[str]:
        """Raw bodies of every JSON-LD script block."""
        scripts = self.soup.find_all("script", attrs={"type": "application/ld+json"})
        return [script.string or script.get_text() or "" for script in scripts]
