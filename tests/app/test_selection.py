import threading
import time

import pytest

from platform_router.app.selection import PlatformChoice, Selection, SelectionHandoff
from platform_router.domain.entities.osm import RelationID, WayID

PICK = Selection(PlatformChoice(WayID(1), 10), PlatformChoice(RelationID(2), 20))


def test_get_blocks_until_submit():
    handoff = SelectionHandoff()
    got = []
    t = threading.Thread(target=lambda: got.append(handoff.get(timeout=5)))
    t.start()
    time.sleep(0.05)
    assert got == []
    handoff.submit(PICK)
    t.join(timeout=5)
    assert got == [PICK]


def test_get_times_out():
    with pytest.raises(TimeoutError):
        SelectionHandoff().get(timeout=0.01)


def test_second_pending_submit_is_rejected():
    handoff = SelectionHandoff()
    handoff.submit(PICK)
    with pytest.raises(RuntimeError, match="already pending"):
        handoff.submit(PICK)
    assert handoff.get(timeout=1) == PICK
    handoff.submit(PICK)
