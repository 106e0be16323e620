# app/selection.py
import queue
from dataclasses import dataclass

from platform_router.domain.entities.osm import PlatformID


@dataclass(frozen=True)
class PlatformChoice:
    platform: PlatformID
    service: int  # route relation id


@dataclass(frozen=True)
class Selection:
    source: PlatformChoice
    destination: PlatformChoice


class SelectionHandoff:
    """One-shot channel carrying the user's pick from the host to the router.

    `get` blocks until the host calls `submit`; a second submit before the
    first is consumed raises instead of silently replacing it.
    """

    def __init__(self):
        self._q: queue.Queue[Selection] = queue.Queue(maxsize=1)

    def submit(self, selection: Selection) -> None:
        try:
            self._q.put_nowait(selection)
        except queue.Full:
            raise RuntimeError("a selection is already pending") from None

    def get(self, timeout: float | None = None) -> Selection:
        try:
            return self._q.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no selection delivered within {timeout}s") from None
