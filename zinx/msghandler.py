"""Routes requests to routers, directly or through a pool of worker threads."""

from __future__ import annotations

import queue
import threading
from typing import Any, Optional

from zinx import stdlog
from zinx.config import get_config
from zinx.interfaces import AbstractMsgHandler


class DuplicateRouteError(ValueError):
    """A router is already registered for the message id."""


class MsgHandler(AbstractMsgHandler):
    """Maps message ids to routers and runs them.

    Requests of one connection always go to the same worker: the one at
    ``conn_id % worker_pool_size``. Sizes left as ``None`` come from the
    current configuration.
    """

    def __init__(self, worker_pool_size: Optional[int] = None,
                 max_worker_task_len: Optional[int] = None):
        if worker_pool_size is None or max_worker_task_len is None:
            config = get_config()
            if worker_pool_size is None:
                worker_pool_size = config.worker_pool_size
            if max_worker_task_len is None:
                max_worker_task_len = config.max_worker_task_len
        self.apis: dict[int, Any] = {}
        self.worker_pool_size = worker_pool_size
        self.max_worker_task_len = max_worker_task_len
        self.task_queues: list[queue.Queue] = []
        self._lock = threading.Lock()

    def send_msg_to_task_queue(self, request: Any) -> None:
        """Queue ``request`` for its connection's worker, blocking while that queue is full."""
        if not self.task_queues:
            raise RuntimeError("worker pool is not started")
        worker_id = request.connection.conn_id % self.worker_pool_size
        self.task_queues[worker_id].put(request)

    def do_msg_handler(self, request: Any) -> None:
        """Run pre_handle, handle and post_handle of the request's router."""
        router = self.apis.get(request.msg_id)
        if router is None:
            stdlog.warn("api msgID =", request.msg_id, "is not FOUND!")
            return
        router.pre_handle(request)
        router.handle(request)
        router.post_handle(request)

    def add_router(self, msg_id: int, router: Any) -> None:
        if msg_id in self.apis:
            raise DuplicateRouteError(f"repeated api , msgID = {msg_id}")
        self.apis[msg_id] = router
        stdlog.info("Add api msgID =", msg_id)

    def _worker(self, worker_id: int, task_queue: queue.Queue) -> None:
        stdlog.info("Worker ID =", worker_id, "is started.")
        while True:
            request = task_queue.get()
            try:
                self.do_msg_handler(request)
            except Exception as exc:  # a failing router must not kill the worker
                stdlog.error("worker", worker_id, "handler error:", repr(exc))

    def start_worker_pool(self) -> None:
        """Create one queue and one daemon worker thread per pool slot; idempotent."""
        with self._lock:
            if self.task_queues:
                return
            queues = [queue.Queue(maxsize=max(1, self.max_worker_task_len))
                      for _ in range(self.worker_pool_size)]
            for worker_id, task_queue in enumerate(queues):
                threading.Thread(
                    target=self._worker,
                    args=(worker_id, task_queue),
                    name=f"zinx-worker-{worker_id}",
                    daemon=True,
                ).start()
            self.task_queues = queues