"""
Structured result trees for machine-readable API responses.

The toolbar attaches its snapshot to an API result through the small
ResultTree interface, so any response builder that can name list elements
and attach a subtree can carry debug info. ApiResult is the dict-backed
implementation used by the Flask integration; it serialises to JSON-ready
dicts or to XML, where the element names set with set_indexed_tag_name()
are used for list items.
"""

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence, Tuple

# Key holding the text content of a node
CONTENT_KEY = "*"

DEFAULT_ITEM_TAG = "_v"


class ResultTree(ABC):
    """Abstract base class for result trees."""

    @abstractmethod
    def set_indexed_tag_name(self, path: Sequence[str], tag: str):
        """
        Name the elements of the list found at ``path``.

        Args:
            path: Keys leading from the root to the list
            tag: Element name for each item (e.g. "query")
        """
        pass

    @abstractmethod
    def add_value(self, path: Sequence[str], name: str, value: Any):
        """
        Attach ``value`` under ``name`` in the node found at ``path``.

        Args:
            path: Keys leading from the root to the parent node
            name: Key for the new value
            value: Scalar, list or dict subtree
        """
        pass


class ApiResult(ResultTree):
    """
    Dict-backed result tree.

    Usage:
        result = ApiResult()
        result.add_value((), "status", "ok")
        result.set_indexed_tag_name(("pages",), "page")
        result.add_value((), "pages", [{"title": "Main"}])

        result.to_dict()   # {"status": "ok", "pages": [{"title": "Main"}]}
        result.to_xml()    # '<api status="ok"><pages><page title="Main" /></pages></api>'
    """

    def __init__(self, root_tag: str = "api"):
        self.root_tag = root_tag
        self.data: Dict[str, Any] = {}
        self.tags: Dict[Tuple[str, ...], str] = {}

    def set_indexed_tag_name(self, path: Sequence[str], tag: str):
        self.tags[tuple(path)] = tag

    def add_value(self, path: Sequence[str], name: str, value: Any):
        node = self.data
        for key in path:
            node = node.setdefault(key, {})
        node[name] = value

    def get_value(self, path: Sequence[str]) -> Optional[Any]:
        """Return the value at ``path`` or None if it is missing."""
        node: Any = self.data
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return node

    def to_dict(self) -> Dict[str, Any]:
        return self.data

    def to_xml(self) -> str:
        """Serialise the tree as XML; scalars become attributes."""
        root = ET.Element(self.root_tag)
        self._fill_element(root, self.data, ())
        return ET.tostring(root, encoding="unicode")

    def _fill_element(self, element: ET.Element, value: Any, path: Tuple[str, ...]):
        if isinstance(value, dict):
            for key, child in value.items():
                if key == CONTENT_KEY:
                    element.text = _to_text(child)
                elif isinstance(child, (dict, list, tuple)):
                    sub = ET.SubElement(element, key)
                    self._fill_element(sub, child, path + (key,))
                elif child is not None:
                    element.set(key, _to_text(child))
        elif isinstance(value, (list, tuple)):
            tag = self.tags.get(path, DEFAULT_ITEM_TAG)
            for item in value:
                sub = ET.SubElement(element, tag)
                if isinstance(item, (dict, list, tuple)):
                    self._fill_element(sub, item, path)
                else:
                    sub.text = _to_text(item)
        else:
            element.text = _to_text(value)


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)
