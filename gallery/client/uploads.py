"""Upload lifecycle: task state, simulated progress and batch settlement.

Every file of a batch gets an :class:`UploadTask`. The transport reports no
byte-level progress, so a timer walks each task up to ``progress_cap`` while
the request is in flight; only the settled request sets the final value.
"""
import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Set

from .api_client import ApiError
from .models import SelectedFile, UploadStatus, UploadTask, generate_id
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)


class UploadTransport(Protocol):
    async def upload(self, files: Sequence[SelectedFile]) -> dict:
        ...


@dataclass(frozen=True)
class BatchOutcome:
    ok: bool
    uploaded: int = 0
    error: Optional[str] = None


class TaskStore:
    """Ordered tasks keyed by id; changes replace a task, never mutate it."""

    def __init__(self) -> None:
        self._tasks: Dict[str, UploadTask] = {}

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def all(self) -> List[UploadTask]:
        return list(self._tasks.values())

    def get(self, task_id: str) -> Optional[UploadTask]:
        return self._tasks.get(task_id)

    def add(self, task: UploadTask) -> None:
        self._tasks[task.id] = task

    def update(self, task_id: str, **changes) -> Optional[UploadTask]:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        updated = dataclasses.replace(task, **changes)
        self._tasks[task_id] = updated
        return updated

    def remove(self, task_id: str) -> Optional[UploadTask]:
        return self._tasks.pop(task_id, None)


SuccessCallback = Callable[[List[SelectedFile]], Awaitable[None]]


class UploadCoordinator:
    def __init__(self, transport: UploadTransport, notifications: NotificationCenter,
                 on_success: Optional[SuccessCallback] = None, tick_interval: float = 0.2,
                 progress_step: int = 5, progress_cap: int = 95, removal_delay: float = 2.0):
        if progress_cap >= 100:
            raise ValueError("progress_cap must stay below 100")
        self.transport = transport
        self.notifications = notifications
        self.on_success = on_success
        self.tick_interval = tick_interval
        self.progress_step = progress_step
        self.progress_cap = progress_cap
        self.removal_delay = removal_delay
        self.tasks = TaskStore()
        self._simulations: Dict[str, asyncio.Task] = {}
        self._removals: Dict[str, asyncio.TimerHandle] = {}
        self._transfers: Set[asyncio.Task] = set()

    # ---------- operations ----------
    def start_batch(self, files: Sequence[SelectedFile]) -> List[str]:
        """Create tasks for ``files`` and send them as one request; returns at once."""
        files = list(files)
        if not files:
            raise ValueError("start_batch requires at least one file")
        task_ids = []
        for source in files:
            task = UploadTask(id=generate_id(), source=source, status=UploadStatus.UPLOADING)
            self.tasks.add(task)
            task_ids.append(task.id)
        logger.info(f"Starting upload batch of {len(files)} file(s)")
        self._launch(task_ids, files)
        return task_ids

    def retry(self, task_id: str) -> bool:
        """Resend one failed task on its own. Anything not in ``error`` is left alone."""
        task = self.tasks.get(task_id)
        if task is None or task.status is not UploadStatus.ERROR:
            logger.debug(f"Ignoring retry of task {task_id}")
            return False
        self.tasks.update(task_id, status=UploadStatus.UPLOADING, progress=0,
                          error=None, attempt=task.attempt + 1)
        logger.info(f"Retrying upload of {task.source.name}")
        self._launch([task_id], [task.source])
        return True

    async def on_batch_settled(self, task_ids: Sequence[str], outcome: BatchOutcome) -> None:
        self._stop_simulation(task_ids)
        # Only tasks still in flight are settled; the rest were removed meanwhile
        settled = []
        for task_id in task_ids:
            task = self.tasks.get(task_id)
            if task is not None and task.status is UploadStatus.UPLOADING:
                settled.append(task_id)
        if outcome.ok:
            sources = []
            for task_id in settled:
                task = self.tasks.update(task_id, status=UploadStatus.SUCCESS, progress=100, error=None)
                sources.append(task.source)
                self._schedule_removal(task_id)
            self.notifications.success(
                "Upload Successful", f"{outcome.uploaded} image(s) have been uploaded"
            )
            if self.on_success is not None:
                await self.on_success(sources)
        else:
            message = outcome.error or "Upload failed"
            for task_id in settled:
                self.tasks.update(task_id, status=UploadStatus.ERROR, progress=0, error=message)
            self.notifications.error("Upload Failed", message)

    def discard(self, task_id: str) -> Optional[UploadTask]:
        """Forget a task and cancel any timer it owns."""
        timer = self._removals.pop(task_id, None)
        if timer is not None:
            timer.cancel()
        self._stop_simulation([task_id])
        return self.tasks.remove(task_id)

    async def wait_idle(self) -> None:
        """Wait until no upload request is outstanding."""
        while self._transfers:
            await asyncio.gather(*list(self._transfers))

    def close(self) -> None:
        for timer in self._removals.values():
            timer.cancel()
        self._removals.clear()
        for sim in set(self._simulations.values()):
            sim.cancel()
        self._simulations.clear()
        for transfer in self._transfers:
            transfer.cancel()

    # ---------- internals ----------
    def _launch(self, task_ids: List[str], files: List[SelectedFile]) -> None:
        attempts = {task_id: self.tasks.get(task_id).attempt for task_id in task_ids}
        simulation = asyncio.create_task(self._simulate_progress(attempts))
        for task_id in task_ids:
            self._simulations[task_id] = simulation
        transfer = asyncio.create_task(self._transfer(task_ids, files))
        self._transfers.add(transfer)
        transfer.add_done_callback(self._transfers.discard)

    async def _transfer(self, task_ids: List[str], files: List[SelectedFile]) -> None:
        try:
            result = await self.transport.upload(files)
        except ApiError as e:
            outcome = BatchOutcome(ok=False, error=str(e) or "Upload failed")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Unexpected upload failure")
            outcome = BatchOutcome(ok=False, error=f"Upload failed: {e}")
        else:
            uploaded = len(result.get("images", [])) if isinstance(result, dict) else len(files)
            outcome = BatchOutcome(ok=True, uploaded=uploaded)
        await self.on_batch_settled(task_ids, outcome)

    async def _simulate_progress(self, attempts: Dict[str, int]) -> None:
        progress = 0
        while progress < self.progress_cap:
            await asyncio.sleep(self.tick_interval)
            progress = min(progress + self.progress_step, self.progress_cap)
            for task_id, attempt in attempts.items():
                self._apply_tick(task_id, attempt, progress)

    def _apply_tick(self, task_id: str, attempt: int, progress: int) -> None:
        task = self.tasks.get(task_id)
        # A settled or retried task never takes a simulated value
        if task is None or task.status is not UploadStatus.UPLOADING or task.attempt != attempt:
            return
        if progress > task.progress:
            self.tasks.update(task_id, progress=progress)

    def _stop_simulation(self, task_ids: Sequence[str]) -> None:
        for task_id in task_ids:
            simulation = self._simulations.pop(task_id, None)
            if simulation is not None and simulation not in self._simulations.values():
                simulation.cancel()

    def _schedule_removal(self, task_id: str) -> None:
        loop = asyncio.get_running_loop()
        self._removals[task_id] = loop.call_later(self.removal_delay, self._remove_settled, task_id)

    def _remove_settled(self, task_id: str) -> None:
        self._removals.pop(task_id, None)
        self.tasks.remove(task_id)
