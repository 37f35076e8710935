"""Shared fakes for the BizHub test-suite: scripted model, in-memory store, recording page."""

from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Sequence,
)

import pytest

from bizhub.store.content_store import ContentStoreError
from bizhub.tools.host import HostEnvironment


class ScriptedCompletionClient:
    """Plays back canned completions; an ``Exception`` item is raised instead of returned."""

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: List[Any] = []

    async def complete(self, conversation: Any) -> str:
        # Snapshot: the agent loop keeps appending to the same list after the call.
        self.calls.append(conversation if isinstance(conversation, str) else list(conversation))
        if not self.responses:
            raise AssertionError("completion requested more times than scripted")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeContentStore:
    """In-memory content store with the same matching rules as the real one."""

    def __init__(self, records: Iterable[Dict[str, Any]] = (), error: str | None = None):
        self.records = list(records)
        self.error = error
        self.searches: List[Dict[str, Any]] = []
        self.inserted: List[tuple] = []
        self.uploaded: List[tuple] = []

    async def search(
        self,
        table: str,
        fields: Sequence[str],
        pattern: str,
        limit: int,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        self.searches.append(
            {"table": table, "fields": list(fields), "pattern": pattern, "limit": limit}
        )
        if self.error:
            raise ContentStoreError(self.error)
        needle = pattern.lower()
        hits = [r for r in self.records if any(needle in str(r.get(f, "")).lower() for f in fields)]
        return hits[:limit]

    async def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        if self.error:
            raise ContentStoreError(self.error)
        self.inserted.append((table, dict(record)))
        return {"id": len(self.inserted), **record}

    async def upload_blob(
        self, bucket: str, path: str, data: bytes, content_type: str = "application/octet-stream"
    ) -> str:
        if self.error:
            raise ContentStoreError(self.error)
        self.uploaded.append((bucket, path, data, content_type))
        return f"https://blobs.test/{bucket}/{path}"


class FakePage:
    """Implements every page capability and remembers what it was asked to do."""

    def __init__(self, element_ids: Iterable[str] = ()):
        self.element_ids = set(element_ids)
        self.visited: List[str] = []
        self.themes: List[str] = []
        self.alerts: List[tuple] = []
        self.scrolls: List[str] = []
        self.search_value = ""
        self.submitted: List[str] = []

    def go_to(self, url: str) -> None:
        self.visited.append(url)

    def set_theme(self, theme: str) -> None:
        self.themes.append(theme)

    def notify(self, message: str, level: str) -> None:
        self.alerts.append((message, level))

    def scroll_to_top(self) -> None:
        self.scrolls.append("top")

    def scroll_to_bottom(self) -> None:
        self.scrolls.append("bottom")

    def scroll_to_element(self, element_id: str) -> bool:
        if element_id not in self.element_ids:
            return False
        self.scrolls.append(element_id)
        return True

    def fill(self, query: str) -> None:
        self.search_value = query

    def submit(self) -> None:
        self.submitted.append(self.search_value)


BUSINESSES = [
    {"name": "Luigi's Pizza", "description": "Wood-fired pizza and pasta", "phone": "555-0100"},
    {"name": "Bright Smiles Dental", "description": "Family dentistry", "phone": "555-0101"},
    {"name": "Pipe Pros", "description": "Plumbing and PIZZA oven repair", "phone": "555-0102"},
]


@pytest.fixture
def page() -> FakePage:
    return FakePage(element_ids=["featured", "contact"])


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore(BUSINESSES)


@pytest.fixture
def host(page: FakePage, store: FakeContentStore) -> HostEnvironment:
    return HostEnvironment(
        navigator=page,
        theme_switcher=page,
        notifier=page,
        scroller=page,
        content_store=store,
    )
