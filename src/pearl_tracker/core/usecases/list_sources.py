from __future__ import annotations

from ..domain.catalog import SourceCatalog


class ListSourcesUseCase:
    def __init__(self, *, catalog: SourceCatalog) -> None:
        self._catalog = catalog

    def execute(self) -> SourceCatalog:
        return self._catalog
