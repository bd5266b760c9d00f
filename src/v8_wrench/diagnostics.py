import logging
from collections.abc import Iterator

from v8_wrench.errors import WrenchError

logger = logging.getLogger(__name__)


class Diagnostics:
    """Side channel for everything that went wrong during a run, in report order."""

    def __init__(self) -> None:
        self._reported: list[WrenchError] = []

    def report(self, error: WrenchError) -> None:
        self._reported.append(error)
        if error.fatal:
            logger.error("%s: %s", error.kind, error)
        else:
            logger.warning("%s: %s", error.kind, error)

    def __iter__(self) -> Iterator[WrenchError]:
        return iter(self._reported)

    def __len__(self) -> int:
        return len(self._reported)

    @property
    def has_fatal(self) -> bool:
        return any(error.fatal for error in self._reported)

    def of_kind(self, kind: type[WrenchError]) -> list[WrenchError]:
        return [error for error in self._reported if isinstance(error, kind)]
