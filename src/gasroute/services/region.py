"""Region selection with explicit change notification."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..config import settings
from ..data.regions import is_known_region
from ..models.domain import RegionSelection
from .results import FailureKind, OperationResult

logger = logging.getLogger(__name__)

RegionListener = Callable[[RegionSelection], None]


class RegionSelector:
    """Holds the active country/region and the visibility of the region prompt.

    Dependents register with :meth:`subscribe` and are called synchronously,
    in registration order, whenever the selection changes.
    """

    def __init__(self, country: Optional[str] = None, region: Optional[str] = None) -> None:
        self._selection = RegionSelection(
            country=country or settings.default_country,
            region=region or settings.default_region,
        )
        self.is_open = False
        self._listeners: list[RegionListener] = []

    @property
    def selection(self) -> RegionSelection:
        return self._selection

    def subscribe(self, listener: RegionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def select(self, country: str, region: str) -> OperationResult:
        country = (country or "").strip()
        region = (region or "").strip()
        if not country or not region:
            return OperationResult.failure(FailureKind.VALIDATION, "Select both a country and a region.")
        if not is_known_region(country, region):
            return OperationResult.failure(
                FailureKind.VALIDATION, f"Unknown region '{region}' for country '{country}'."
            )

        self.is_open = False
        selection = RegionSelection(country=country, region=region)
        if selection == self._selection:
            return OperationResult.success(selection)

        self._selection = selection
        logger.info(f"Region changed to {region}, {country}")
        for listener in list(self._listeners):
            listener(selection)
        return OperationResult.success(selection)
