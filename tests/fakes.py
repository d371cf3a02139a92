"""
Minimal stand-ins for Playwright pages and element handles.
"""

from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock


class FakeNode:
    def __init__(self, text: str = "", attrs: Optional[Dict[str, str]] = None):
        self.text = text
        self.attrs = attrs or {}

    async def text_content(self):
        return self.text

    async def get_attribute(self, name: str):
        return self.attrs.get(name)


class FakeElement:
    """Element (or page) answering query_selector from a selector -> node map."""

    def __init__(
        self,
        nodes: Optional[Dict[str, FakeNode]] = None,
        scripts: Optional[Callable[[str, Any], Any]] = None,
    ):
        self.nodes = nodes or {}
        self.scripts = scripts or (lambda script, arg: "")

    async def query_selector(self, selector: str):
        return self.nodes.get(selector)

    async def evaluate(self, script: str, arg: Any = None):
        return self.scripts(script, arg)


class FakePage(FakeElement):
    def __init__(
        self,
        nodes: Optional[Dict[str, FakeNode]] = None,
        scripts: Optional[Callable[[str, Any], Any]] = None,
        items: Optional[List[FakeElement]] = None,
        title: str = "Blue Door Bakery - Google Maps",
    ):
        super().__init__(nodes, scripts)
        self.items = items or []
        self._title = title
        self.goto = AsyncMock()
        self.wait_for_timeout = AsyncMock()

    async def title(self):
        return self._title

    async def query_selector_all(self, selector: str):
        return list(self.items)
