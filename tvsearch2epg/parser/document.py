"""
tvsearch2epg.parser.document - HTML document wrapper

Thin query layer over BeautifulSoup. The stdlib-backed "html.parser" tree
builder keeps unknown and HTML5 block tags (header, section, ...) as real
elements, so nested blocks stay queryable.
"""

import logging
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag


class DocumentParser:
    """Parse markup and run tag/class queries against it"""

    def __init__(self, features: str = "html.parser"):
        self.features = features

    def parse(self, text: Optional[str]) -> BeautifulSoup:
        """Parse raw markup; empty or malformed input yields an empty tree"""
        if not text:
            logging.debug("Parsing empty document")
            return BeautifulSoup("", self.features)
        return BeautifulSoup(text, self.features)

    @staticmethod
    def _query(tag: Optional[str], class_attr: Optional[str]) -> dict:
        query = {}
        if tag:
            query["name"] = tag
        if class_attr:
            query["class_"] = class_attr
        return query

    def find_first(
        self, root: Optional[Tag], tag: Optional[str] = None, class_attr: Optional[str] = None
    ) -> Optional[Tag]:
        """First descendant matching tag and/or class"""
        if root is None:
            return None
        return root.find(**self._query(tag, class_attr))

    def find_all(
        self, root: Optional[Tag], tag: Optional[str] = None, class_attr: Optional[str] = None
    ) -> List[Tag]:
        """All descendants matching tag and/or class, in document order"""
        if root is None:
            return []
        return list(root.find_all(**self._query(tag, class_attr)))

    @staticmethod
    def attr(node: Optional[Tag], name: str) -> Optional[str]:
        """Attribute value, joined when the attribute is multi-valued"""
        if node is None:
            return None
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    @staticmethod
    def text(node: Optional[Tag]) -> str:
        """Concatenated visible text, trimmed"""
        if node is None:
            return ""
        return node.get_text().strip()

    def extract_links(self, root: Optional[Tag], tag: str = "a") -> List[Tuple[str, Tag]]:
        """(href, node) pairs for every matching element carrying an href"""
        return [
            (node["href"], node)
            for node in self.find_all(root, tag)
            if node.get("href")
        ]
