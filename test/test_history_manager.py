import os
import tempfile
import unittest
from unittest import mock

from clipnotes.clipboard import HistoryManager
from clipnotes.errors import StoreError
from clipnotes.sampler import MemorySampler
from clipnotes.store import JsonStore


def make_manager(tmp, clipboard="", history=None, **kwargs):
    store = JsonStore(os.path.join(tmp, "clipnotes.json"))
    if history is not None:
        store.set("clipboardHistory", history)
    sampler = MemorySampler(clipboard)
    return HistoryManager(store, sampler, **kwargs), sampler, store


def entry(entry_id, text):
    return {"id": entry_id, "text": text, "timestamp": "2026-01-01T00:00:00.000+00:00"}


class HistoryManagerTests(unittest.TestCase):
    def test_startup_content_is_not_recorded(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, _, _ = make_manager(tmp, clipboard="already there")
            for step in range(5):
                self.assertIsNone(manager.on_tick(now=float(step * 10)))
            self.assertEqual(manager.list(), [])

    def test_unchanged_text_never_creates_entries(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp)
            sampler.text = "same"
            self.assertIsNotNone(manager.on_tick(now=0.0))
            for step in range(1, 20):
                self.assertIsNone(manager.on_tick(now=float(step * 5)))
            self.assertEqual(len(manager.list()), 1)

    def test_empty_text_is_ignored(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, clipboard="x")
            sampler.text = ""
            self.assertIsNone(manager.on_tick(now=0.0))
            self.assertEqual(manager.last_observed_text, "x")
            self.assertEqual(manager.list(), [])

    def test_new_text_is_prepended_and_notified(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, store = make_manager(tmp, history=[entry("1", "a")])
            received = []
            manager.add_listener(received.append)
            sampler.text = "b"
            recorded = manager.on_tick(now=100.0)
            self.assertEqual([e.text for e in manager.list()], ["b", "a"])
            self.assertEqual(received, [recorded])
            self.assertEqual(recorded.text, "b")
            self.assertEqual([e["text"] for e in store.get("clipboardHistory")], ["b", "a"])

    def test_head_duplicate_is_skipped_regardless_of_time(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, history=[entry("1", "X")])
            received = []
            manager.add_listener(received.append)
            sampler.text = "X"
            self.assertIsNone(manager.on_tick(now=10000.0))
            self.assertEqual(len(manager.list()), 1)
            self.assertEqual(manager.last_observed_text, "X")
            self.assertEqual(received, [])

    def test_rapid_changes_are_debounced(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, debounce_sec=1.0)
            received = []
            manager.add_listener(received.append)
            sampler.text = "first"
            first = manager.on_tick(now=10.0)
            self.assertIsNotNone(first)
            sampler.text = "second"
            self.assertIsNone(manager.on_tick(now=10.5))
            self.assertEqual(manager.last_observed_text, "second")
            # the rejected change is not reconsidered later
            self.assertIsNone(manager.on_tick(now=20.0))
            self.assertEqual([e.text for e in manager.list()], ["first"])
            self.assertEqual(received, [first])

    def test_listener_fires_once_per_accepted_change(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, clipboard="startup", debounce_sec=1.0)
            received = []
            manager.add_listener(received.append)
            manager.on_tick(now=0.0)
            sampler.text = "a"
            first = manager.on_tick(now=10.0)
            # debounced change
            sampler.text = "b"
            self.assertIsNone(manager.on_tick(now=10.5))
            # unchanged ticks
            for step in range(1, 5):
                self.assertIsNone(manager.on_tick(now=10.5 + step))
            # back to the head text after the window has passed
            sampler.text = "a"
            self.assertIsNone(manager.on_tick(now=20.0))
            sampler.text = "c"
            second = manager.on_tick(now=30.0)
            self.assertEqual(received, [first, second])
            self.assertEqual([e.text for e in received], ["a", "c"])

    def test_change_after_debounce_window_is_accepted(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, debounce_sec=1.0)
            sampler.text = "first"
            manager.on_tick(now=10.0)
            sampler.text = "second"
            self.assertIsNotNone(manager.on_tick(now=11.0))
            self.assertEqual([e.text for e in manager.list()], ["second", "first"])

    def test_history_is_capped_dropping_oldest(self):
        with tempfile.TemporaryDirectory() as tmp:
            history = [entry(str(200 - i), f"text {200 - i}") for i in range(200)]
            manager, sampler, store = make_manager(tmp, history=history)
            sampler.text = "fresh"
            manager.on_tick(now=0.0)
            items = manager.list()
            self.assertEqual(len(items), 200)
            self.assertEqual(items[0].text, "fresh")
            self.assertEqual(items[-1].text, "text 2")
            self.assertNotIn("1", [e.id for e in items])
            self.assertEqual(len(store.get("clipboardHistory")), 200)

    def test_custom_limit(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, max_items=2, debounce_sec=0)
            for step, text in enumerate(["a", "b", "c"]):
                sampler.text = text
                manager.on_tick(now=float(step))
            self.assertEqual([e.text for e in manager.list()], ["c", "b"])

    def test_limit_above_200_is_capped(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, store = make_manager(tmp, max_items=1000, debounce_sec=0)
            for step in range(250):
                sampler.text = f"text {step}"
                manager.on_tick(now=float(step))
            self.assertEqual(len(manager.list()), 200)
            self.assertEqual(manager.list()[0].text, "text 249")
            self.assertEqual(len(store.get("clipboardHistory")), 200)

    def test_ids_are_unique_and_increasing(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, debounce_sec=0)
            with mock.patch("clipnotes.ids.time.time", return_value=1000.0):
                for step, text in enumerate(["a", "b", "c"]):
                    sampler.text = text
                    manager.on_tick(now=float(step))
            ids = [int(e.id) for e in manager.list()]
            self.assertEqual(ids, sorted(ids, reverse=True))
            self.assertEqual(len(set(ids)), 3)

    def test_copy_out_is_not_recorded_again(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp, history=[entry("2", "new"), entry("1", "old")])
            manager.copy_out("old")
            self.assertEqual(sampler.text, "old")
            self.assertIsNone(manager.on_tick(now=100.0))
            self.assertEqual([e.text for e in manager.list()], ["new", "old"])

    def test_record_external_copy(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp)
            sampler.text = "written by app"
            manager.record_external_copy("written by app")
            self.assertIsNone(manager.on_tick(now=0.0))

    def test_read_failure_does_not_raise(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp)
            with mock.patch.object(sampler, "read", side_effect=RuntimeError("busy")):
                self.assertIsNone(manager.on_tick(now=0.0))
            sampler.text = "ok"
            self.assertIsNotNone(manager.on_tick(now=1.0))

    def test_write_failure_keeps_entry_and_retries(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, store = make_manager(tmp)
            sampler.text = "kept"
            with mock.patch.object(store, "set", side_effect=StoreError("disk full")):
                recorded = manager.on_tick(now=0.0)
            self.assertIsNotNone(recorded)
            self.assertEqual([e.text for e in manager.list()], ["kept"])
            self.assertEqual(store.get("clipboardHistory"), [])
            self.assertTrue(manager.flush())
            self.assertEqual([e["text"] for e in store.get("clipboardHistory")], ["kept"])

    def test_listener_failure_does_not_break_tick(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp)

            def broken(_entry):
                raise RuntimeError("ui gone")

            manager.add_listener(broken)
            sampler.text = "still recorded"
            self.assertIsNotNone(manager.on_tick(now=0.0))
            self.assertEqual(len(manager.list()), 1)

    def test_remove_and_clear(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, _, store = make_manager(tmp, history=[entry("2", "b"), entry("1", "a")])
            self.assertEqual([e.id for e in manager.remove("missing")], ["2", "1"])
            self.assertEqual([e.id for e in manager.remove("2")], ["1"])
            self.assertEqual(len(store.get("clipboardHistory")), 1)
            self.assertEqual(manager.clear(), [])
            self.assertEqual(store.get("clipboardHistory"), [])

    def test_failed_remove_is_not_committed(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, _, store = make_manager(tmp, history=[entry("1", "a")])
            with mock.patch.object(store, "set", side_effect=StoreError("read-only")):
                with self.assertRaises(StoreError):
                    manager.remove("1")
            self.assertEqual([e.id for e in manager.list()], ["1"])

    def test_remove_missing_id_never_raises_after_failed_write(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, store = make_manager(tmp)
            sampler.text = "unsaved"
            with mock.patch.object(store, "_write", side_effect=StoreError("disk full")):
                manager.on_tick(now=0.0)
                self.assertEqual([e.text for e in manager.remove("missing")], ["unsaved"])
            self.assertEqual(store.get("clipboardHistory"), [])
            # the pending write is retried once the disk is writable again
            manager.remove("missing")
            self.assertEqual([e["text"] for e in store.get("clipboardHistory")], ["unsaved"])
            self.assertTrue(manager.flush())

    def test_history_survives_restart(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager, sampler, _ = make_manager(tmp)
            sampler.text = "persisted"
            manager.on_tick(now=0.0)
            reloaded, _, _ = make_manager(tmp, clipboard="persisted")
            self.assertEqual([e.text for e in reloaded.list()], ["persisted"])


if __name__ == "__main__":
    unittest.main()
