from __future__ import annotations

from dataclasses import dataclass

from pinoc_core.tool_invoker import ToolInvoker

DEFAULT_QUERY = "pinocchio"
NO_DESCRIPTION = "No description"
_TRUNCATION_MARKER = "..."
_NAME_SEPARATOR = " = "
_DESCRIPTION_SEPARATOR = " # "


@dataclass(frozen=True)
class SearchResult:
    name: str
    version: str
    description: str


def parse_search_line(line: str) -> SearchResult | None:
    stripped = line.strip()
    if not stripped or stripped.startswith(_TRUNCATION_MARKER):
        return None

    name, sep, rest = stripped.partition(_NAME_SEPARATOR)
    name = name.strip()
    if not sep or not name:
        return None

    open_quote = rest.find('"')
    close_quote = rest.find('"', open_quote + 1) if open_quote >= 0 else -1
    if open_quote < 0 or close_quote < 0:
        return None
    version = rest[open_quote + 1 : close_quote]

    tail = rest[close_quote + 1 :]
    _, sep, description = tail.partition(_DESCRIPTION_SEPARATOR)
    description = description.strip() if sep else ""
    return SearchResult(name=name, version=version, description=description or NO_DESCRIPTION)


def parse_search_output(raw: str) -> list[SearchResult]:
    """Parse ``cargo search`` output; lines that don't fit are skipped."""
    results: list[SearchResult] = []
    for line in raw.splitlines():
        parsed = parse_search_line(line)
        if parsed is not None:
            results.append(parsed)
    return results


def search_packages(invoker: ToolInvoker, query: str | None = None) -> list[SearchResult]:
    term = query.strip() if query and query.strip() else DEFAULT_QUERY
    return parse_search_output(invoker.capture("cargo", ["search", term]))
