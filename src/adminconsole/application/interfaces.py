"""Collaborator contracts consumed by the list controller.

The controller never talks to the network itself; it is handed callables
that satisfy these shapes.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Mapping, Protocol, Sequence

from adminconsole.domain.models import FilterSet, Page

# ``(filters, page_number, page_size)`` -> raw list payload (or a ``Page``).
# May raise ``TransportError``; anything else is wrapped into one.
PageFetcher = Callable[[FilterSet, int, int], "Mapping[str, Any] | Page"]

# ``(filters, page_size)`` -> every row matching *filters*, unpaged.
RowExporter = Callable[[FilterSet, int], Sequence[Mapping[str, Any]]]

# Mutation applied to one resource id. Its return value is ignored.
ResourceAction = Callable[[Hashable], Any]

# No arguments -> summary counters for the whole resource, e.g. ``{total, serviceable}``.
StatsFetcher = Callable[[], Mapping[str, Any]]


class ResourceGateway(Protocol):
    """Everything a list screen needs from one backend resource."""

    def fetch_page(self, filters: FilterSet, page_number: int, page_size: int) -> Mapping[str, Any]: ...

    def export_rows(self, filters: FilterSet, page_size: int) -> Sequence[Mapping[str, Any]]: ...

    def mutate(self, resource_id: Hashable, payload: Mapping[str, Any], *, method: str = "PUT", suffix: str = "") -> Any: ...

    def delete(self, resource_id: Hashable) -> Any: ...

    def fetch_stats(self) -> Mapping[str, Any]: ...
