import threading
import time

import pytest

from hoylink.parser import LastCommandSuccess, Parser


def test_set_last_update_stores_value():
    parser = Parser()
    assert parser.last_update == 0
    parser.set_last_update(1234)
    assert parser.last_update == 1234


def test_append_lock_blocks_other_thread():
    parser = Parser()
    order = []
    parser.begin_append_fragment()

    def worker():
        parser.begin_append_fragment()
        order.append("worker")
        parser.set_last_update(2)
        parser.end_append_fragment()

    thread = threading.Thread(target=worker)
    thread.start()
    time.sleep(0.05)
    parser.set_last_update(1)
    order.append("main")
    assert parser.last_update == 1
    parser.end_append_fragment()
    thread.join(2)
    assert order == ["main", "worker"]
    assert parser.last_update == 2


def test_context_manager_releases_lock():
    parser = Parser()
    with parser as entered:
        assert entered is parser
    done = threading.Event()

    def worker():
        parser.begin_append_fragment()
        parser.end_append_fragment()
        done.set()

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join(2)
    assert done.is_set()


def test_end_without_begin_raises():
    parser = Parser()
    with pytest.raises(RuntimeError):
        parser.end_append_fragment()


def test_last_command_success_lookup():
    assert LastCommandSuccess(2) is LastCommandSuccess.PENDING
    assert LastCommandSuccess["NOK"] == 1