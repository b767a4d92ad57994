"""MIME boundary allocation and top-level structure decisions."""

from __future__ import annotations

import random
from dataclasses import dataclass

from ..core.models import ItemType, MailItem

DEFAULT_BOUNDARY_PREFIX = "--boundary-mailrender-iamunique-"

_PROCESS_RANDOM = random.Random()


def seed_process_random(seed: int | None) -> None:
    """Seed the generator shared by every allocator in this process."""
    _PROCESS_RANDOM.seed(seed)


@dataclass(frozen=True, slots=True)
class Boundaries:
    """Boundary tokens for one message."""

    outer: str
    alternative: str | None = None


class BoundaryAllocator:
    """Hand out boundary tokens and filename nonces."""

    def __init__(
        self,
        prefix: str = DEFAULT_BOUNDARY_PREFIX,
        rng: random.Random | None = None,
    ) -> None:
        """Use ``rng`` when given, else the process-wide generator."""
        self._prefix = prefix
        self._rng = rng if rng is not None else _PROCESS_RANDOM

    def nonce(self) -> int:
        """Return a random non-negative integer."""
        return self._rng.randrange(2**31)

    def allocate(self, *, with_alternative: bool) -> Boundaries:
        """Create the outer token and, if requested, a distinct inner one."""
        outer = f"{self._prefix}{self.nonce()}_-_-"
        return Boundaries(
            outer=outer,
            alternative=f"alt-{outer}" if with_alternative else None,
        )


def outer_content_type(item: MailItem, report_type: str) -> str:
    """Return the top-level multipart type of ``item`` without its boundary."""
    if item.item_type is ItemType.REPORT:
        return f"multipart/report; report-type={report_type}"
    return "multipart/mixed"


__all__ = [
    "Boundaries",
    "BoundaryAllocator",
    "DEFAULT_BOUNDARY_PREFIX",
    "outer_content_type",
    "seed_process_random",
]
