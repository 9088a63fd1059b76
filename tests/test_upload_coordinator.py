import asyncio

import pytest

from gallery.client.api_client import ApiError
from gallery.client.models import NotificationKind, SelectedFile, UploadStatus
from gallery.client.notifications import NotificationCenter
from gallery.client.uploads import BatchOutcome, UploadCoordinator

TICK = 0.01


class FakeTransport:
    def __init__(self):
        self.calls = []
        self.release = asyncio.Event()
        self.fail = False

    async def upload(self, files):
        self.calls.append(list(files))
        await self.release.wait()
        if self.fail:
            raise ApiError(500, "Failed to upload images")
        return {"message": "ok", "images": [{"id": i} for i, _ in enumerate(files)]}


def jpeg(name):
    return SelectedFile(name=name, content=b"\xff\xd8data", content_type="image/jpeg")


def make_coordinator(transport, on_success=None):
    notifications = NotificationCenter(dismiss_after=60)
    coordinator = UploadCoordinator(
        transport,
        notifications,
        on_success=on_success,
        tick_interval=TICK,
        removal_delay=0.05,
    )
    return coordinator, notifications


@pytest.mark.asyncio
async def test_start_batch_sends_one_request_and_returns_immediately():
    transport = FakeTransport()
    coordinator, _ = make_coordinator(transport)

    ids = coordinator.start_batch([jpeg("a.jpg"), jpeg("b.jpg")])

    assert len(ids) == 2
    assert all(coordinator.tasks.get(i).status is UploadStatus.UPLOADING for i in ids)
    assert all(coordinator.tasks.get(i).progress == 0 for i in ids)
    await asyncio.sleep(0)
    assert len(transport.calls) == 1
    assert [f.name for f in transport.calls[0]] == ["a.jpg", "b.jpg"]

    transport.release.set()
    await coordinator.wait_idle()
    coordinator.close()


@pytest.mark.asyncio
async def test_start_batch_requires_files():
    coordinator, _ = make_coordinator(FakeTransport())
    with pytest.raises(ValueError):
        coordinator.start_batch([])


@pytest.mark.asyncio
async def test_simulated_progress_stops_at_95_until_settled():
    transport = FakeTransport()
    refreshed = []

    async def on_success(files):
        refreshed.append([f.name for f in files])

    coordinator, notifications = make_coordinator(transport, on_success)
    ids = coordinator.start_batch([jpeg("a.jpg"), jpeg("b.jpg")])

    seen = set()
    for _ in range(40):
        await asyncio.sleep(TICK)
        seen.update(coordinator.tasks.get(i).progress for i in ids)
    assert max(seen) == 95
    assert 100 not in seen
    assert all(p % 5 == 0 for p in seen)

    transport.release.set()
    await coordinator.wait_idle()

    assert all(coordinator.tasks.get(i).status is UploadStatus.SUCCESS for i in ids)
    assert all(coordinator.tasks.get(i).progress == 100 for i in ids)
    assert refreshed == [["a.jpg", "b.jpg"]]
    assert [e.title for e in notifications.events] == ["Upload Successful"]
    assert notifications.events[0].message == "2 image(s) have been uploaded"

    await asyncio.sleep(0.1)
    assert len(coordinator.tasks) == 0
    coordinator.close()


@pytest.mark.asyncio
async def test_failed_batch_flips_every_task_to_error():
    transport = FakeTransport()
    transport.fail = True
    transport.release.set()
    coordinator, notifications = make_coordinator(transport)

    ids = coordinator.start_batch([jpeg("a.jpg"), jpeg("b.jpg")])
    await coordinator.wait_idle()

    for task_id in ids:
        task = coordinator.tasks.get(task_id)
        assert task.status is UploadStatus.ERROR
        assert task.progress == 0
        assert task.error == "Failed to upload images"
    assert len(notifications.events) == 1
    assert notifications.events[0].kind is NotificationKind.ERROR

    # error tasks stay until retried
    await asyncio.sleep(0.1)
    assert len(coordinator.tasks) == 2
    coordinator.close()


@pytest.mark.asyncio
async def test_retry_resends_only_the_failed_file():
    transport = FakeTransport()
    transport.fail = True
    transport.release.set()
    coordinator, _ = make_coordinator(transport)
    ids = coordinator.start_batch([jpeg("a.jpg"), jpeg("b.jpg")])
    await coordinator.wait_idle()

    transport.fail = False
    assert coordinator.retry(ids[1]) is True
    task = coordinator.tasks.get(ids[1])
    assert task.status is UploadStatus.UPLOADING
    assert task.progress == 0
    assert task.error is None
    assert task.attempt == 1

    await coordinator.wait_idle()
    assert [f.name for f in transport.calls[-1]] == ["b.jpg"]
    assert coordinator.tasks.get(ids[1]).status is UploadStatus.SUCCESS
    assert coordinator.tasks.get(ids[0]).status is UploadStatus.ERROR
    coordinator.close()


@pytest.mark.asyncio
async def test_retry_ignores_tasks_not_in_error():
    transport = FakeTransport()
    coordinator, _ = make_coordinator(transport)
    ids = coordinator.start_batch([jpeg("a.jpg")])

    assert coordinator.retry(ids[0]) is False
    assert coordinator.retry("unknown") is False
    await asyncio.sleep(0)
    assert len(transport.calls) == 1

    transport.release.set()
    await coordinator.wait_idle()
    assert coordinator.retry(ids[0]) is False
    assert len(transport.calls) == 1
    coordinator.close()


@pytest.mark.asyncio
async def test_settlement_wins_over_pending_ticks():
    transport = FakeTransport()
    coordinator, _ = make_coordinator(transport)
    ids = coordinator.start_batch([jpeg("a.jpg")])
    await asyncio.sleep(TICK * 3)

    await coordinator.on_batch_settled(ids, BatchOutcome(ok=False, error="connection reset"))
    await asyncio.sleep(TICK * 5)

    task = coordinator.tasks.get(ids[0])
    assert task.status is UploadStatus.ERROR
    assert task.progress == 0

    # a tick stamped with an older attempt is dropped after a retry
    coordinator.tasks.update(ids[0], status=UploadStatus.UPLOADING, attempt=1)
    coordinator._apply_tick(ids[0], 0, 50)
    assert coordinator.tasks.get(ids[0]).progress == 0
    coordinator.close()
    await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_discard_cancels_pending_removal():
    transport = FakeTransport()
    transport.release.set()
    coordinator, _ = make_coordinator(transport)
    ids = coordinator.start_batch([jpeg("a.jpg")])
    await coordinator.wait_idle()

    removed = coordinator.discard(ids[0])
    assert removed.status is UploadStatus.SUCCESS
    assert ids[0] not in coordinator.tasks
    await asyncio.sleep(0.1)
    assert len(coordinator.tasks) == 0
    coordinator.close()
