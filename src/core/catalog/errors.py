from __future__ import annotations
from typing import List, Optional


class CatalogImportError(ValueError):
    """Structurele fout in een upload: het hele bestand wordt afgewezen."""


class CatalogValidationError(ValueError):
    """Handmatige invoer die niet opgeslagen mag worden."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems: List[str] = list(problems or [])


class ZoneReplaceError(RuntimeError):
    """Safe-replace van zones is halverwege gestopt.

    `city` is de stad waarvan delete+insert faalde; `replaced` zijn de steden
    die al vervangen waren. Steden daarna zijn niet aangeraakt.
    """

    def __init__(self, city: str, replaced: List[str], cause: BaseException):
        self.city = city
        self.replaced = list(replaced)
        self.cause = cause
        done = ", ".join(self.replaced) if self.replaced else "none"
        super().__init__(
            f"Saving delivery zones failed for city '{city}': {cause} "
            f"(already replaced: {done})"
        )
