import threading

import pytest

from zinx.message import Message
from zinx.msghandler import DuplicateRouteError, MsgHandler
from zinx.request import Request
from zinx.router import Router


class FakeConn:
    def __init__(self, conn_id):
        self.conn_id = conn_id


class RecordingRouter(Router):
    def __init__(self):
        self.calls = []
        self.threads = []
        self.done = threading.Event()

    def pre_handle(self, request):
        self.calls.append(("pre", request.data))

    def handle(self, request):
        self.calls.append(("handle", request.data))
        self.threads.append(threading.current_thread().name)

    def post_handle(self, request):
        self.calls.append(("post", request.data))
        self.done.set()


class FailingRouter(Router):
    def handle(self, request):
        raise RuntimeError("boom")


def make_request(conn_id, msg_id, data):
    return Request(FakeConn(conn_id), Message(msg_id, data))


def test_duplicate_router_raises():
    handler = MsgHandler(1, 4)
    handler.add_router(1, Router())
    with pytest.raises(DuplicateRouteError):
        handler.add_router(1, Router())


def test_do_msg_handler_runs_hooks_in_order():
    handler = MsgHandler(1, 4)
    router = RecordingRouter()
    handler.add_router(5, router)
    handler.do_msg_handler(make_request(0, 5, b"abc"))
    assert router.calls == [("pre", b"abc"), ("handle", b"abc"), ("post", b"abc")]


def test_unknown_msg_id_is_ignored():
    handler = MsgHandler(1, 4)
    router = RecordingRouter()
    handler.add_router(1, router)
    handler.do_msg_handler(make_request(0, 2, b"x"))
    assert router.calls == []


def test_queue_before_start_raises():
    handler = MsgHandler(2, 4)
    with pytest.raises(RuntimeError):
        handler.send_msg_to_task_queue(make_request(0, 1, b""))


def test_start_creates_one_queue_per_worker():
    handler = MsgHandler(3, 4)
    handler.start_worker_pool()
    handler.start_worker_pool()
    assert len(handler.task_queues) == 3


def test_worker_processes_request():
    handler = MsgHandler(2, 4)
    router = RecordingRouter()
    handler.add_router(9, router)
    handler.start_worker_pool()
    handler.send_msg_to_task_queue(make_request(4, 9, b"payload"))
    assert router.done.wait(5)
    assert ("handle", b"payload") in router.calls


def test_worker_is_chosen_by_conn_id():
    handler = MsgHandler(3, 4)
    router = RecordingRouter()
    handler.add_router(1, router)
    handler.start_worker_pool()
    handler.send_msg_to_task_queue(make_request(7, 1, b"a"))
    assert router.done.wait(5)
    assert router.threads == ["zinx-worker-1"]


def test_same_connection_uses_same_worker():
    handler = MsgHandler(4, 8)
    router = RecordingRouter()
    handler.add_router(1, router)
    handler.start_worker_pool()
    for _ in range(3):
        router.done.clear()
        handler.send_msg_to_task_queue(make_request(6, 1, b"a"))
        assert router.done.wait(5)
    assert len(set(router.threads)) == 1


def test_worker_survives_failing_router():
    handler = MsgHandler(1, 4)
    router = RecordingRouter()
    handler.add_router(1, FailingRouter())
    handler.add_router(2, router)
    handler.start_worker_pool()
    handler.send_msg_to_task_queue(make_request(0, 1, b"bad"))
    handler.send_msg_to_task_queue(make_request(0, 2, b"good"))
    assert router.done.wait(5)
    assert ("post", b"good") in router.calls