import json
import tempfile
import threading
import time
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from daytracker.service import (
    DayRecordService,
    default_record,
    replace_non_finite,
    summarize_record,
    utc_timestamp,
)
from daytracker.storage import FileDayStore, InMemoryDayStore

DEFAULT = {"timeBlocks": [], "dayPlan": [], "customCategories": []}


def _parse(timestamp: str) -> datetime:
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


class DayRecordServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDayStore()
        self.service = DayRecordService(self.store)

    def test_get_unsaved_date_returns_default(self):
        self.assertEqual(self.service.get("2024-01-01"), DEFAULT)
        # Reads never persist the default.
        self.assertEqual(self.store.records, {})

    def test_default_record_is_fresh_each_time(self):
        first = default_record()
        first["timeBlocks"].append({"startBlock": 0, "endBlock": 0})
        self.assertEqual(default_record(), DEFAULT)

    def test_save_then_get_adds_last_modified(self):
        record = {
            "timeBlocks": [{"startBlock": 2, "endBlock": 4, "label": "gym"}],
            "dayPlan": ["run"],
            "customCategories": [{"name": "gym", "color": "#f00"}],
        }
        before = datetime.now(timezone.utc).replace(microsecond=0)
        saved = self.service.save("2024-01-01", record)

        loaded = self.service.get("2024-01-01")
        self.assertEqual(loaded, saved)
        self.assertEqual({k: v for k, v in loaded.items() if k != "lastModified"}, record)
        self.assertGreaterEqual(_parse(loaded["lastModified"]), before)
        self.assertNotIn("lastModified", record)

    def test_save_replaces_non_finite_numbers(self):
        saved = self.service.save(
            "2024-01-01", {"dayPlan": [{"weight": float("inf"), "ratio": float("nan")}]}
        )
        self.assertEqual(saved["dayPlan"], [{"weight": None, "ratio": None}])
        self.assertNotIn("Infinity", self.store.records["2024-01-01"])

    def test_save_twice_changes_last_modified(self):
        record = {"timeBlocks": [], "dayPlan": [], "customCategories": []}
        first = self.service.save("2024-01-01", record)["lastModified"]
        time.sleep(0.01)
        second = self.service.save("2024-01-01", record)["lastModified"]
        self.assertNotEqual(first, second)
        self.assertLess(_parse(first), _parse(second))

    def test_delete_then_get_returns_default(self):
        self.service.save("2024-01-01", {"timeBlocks": [{"startBlock": 0, "endBlock": 1}]})
        self.service.delete("2024-01-01")
        self.assertEqual(self.service.get("2024-01-01"), DEFAULT)

    def test_get_swallows_backend_errors(self):
        store = MagicMock()
        store.load.side_effect = OSError("disk gone")
        service = DayRecordService(store)
        with self.assertLogs("daytracker.service", level="ERROR"):
            self.assertEqual(service.get("2024-01-01"), DEFAULT)

    def test_get_corrupt_stored_document_returns_default(self):
        self.store.records["2024-01-01"] = "{broken"
        with self.assertLogs("daytracker.service", level="ERROR"):
            self.assertEqual(self.service.get("2024-01-01"), DEFAULT)

    def test_save_propagates_backend_errors(self):
        store = MagicMock()
        store.save.side_effect = OSError("read-only")
        with self.assertRaises(OSError):
            DayRecordService(store).save("2024-01-01", {})

    def test_delete_propagates_backend_errors(self):
        store = MagicMock()
        store.delete.side_effect = OSError("read-only")
        with self.assertRaises(OSError):
            DayRecordService(store).delete("2024-01-01")

    def test_list_summaries_descending(self):
        self.service.save("2024-01-01", {"timeBlocks": []})
        self.service.save("2024-01-03", {"timeBlocks": [{"startBlock": 0, "endBlock": 5}]})
        summaries = self.service.list_summaries()
        self.assertEqual([s.date for s in summaries], ["2024-01-03", "2024-01-01"])
        self.assertEqual(summaries[0].total_minutes, 30)
        self.assertEqual(summaries[0].block_count, 1)
        self.assertIsNotNone(summaries[0].last_modified)

    def test_list_summaries_isolates_corrupt_entries(self):
        self.service.save("2024-01-01", {"timeBlocks": [{"startBlock": 0, "endBlock": 1}]})
        self.store.records["2024-01-02"] = "not json at all"
        self.service.save("2024-01-03", {"timeBlocks": []})

        summaries = self.service.list_summaries()
        self.assertEqual(
            [s.date for s in summaries], ["2024-01-03", "2024-01-02", "2024-01-01"]
        )
        broken = summaries[1]
        self.assertEqual(broken.block_count, 0)
        self.assertEqual(broken.total_minutes, 0)
        self.assertIsNone(broken.last_modified)
        self.assertEqual(summaries[2].total_minutes, 10)

    def test_list_summaries_backend_failure_returns_empty(self):
        store = MagicMock()
        store.list_days.side_effect = ConnectionError("unreachable")
        with self.assertLogs("daytracker.service", level="ERROR"):
            self.assertEqual(DayRecordService(store).list_summaries(), [])

    def test_concurrent_saves_last_writer_wins(self):
        payloads = [
            {"timeBlocks": [], "dayPlan": ["a" * 64], "customCategories": []},
            {"timeBlocks": [], "dayPlan": ["b" * 64], "customCategories": []},
        ]
        with tempfile.TemporaryDirectory() as tmp:
            for store in (InMemoryDayStore(), FileDayStore(tmp)):
                store.initialize()
                service = DayRecordService(store)
                barrier = threading.Barrier(len(payloads))

                def worker(payload):
                    barrier.wait()
                    service.save("2024-01-01", payload)

                threads = [
                    threading.Thread(target=worker, args=(p,)) for p in payloads
                ]
                for thread in threads:
                    thread.start()
                for thread in threads:
                    thread.join()

                final = service.get("2024-01-01")
                final.pop("lastModified")
                self.assertIn(final, payloads)


class SummarizeRecordTests(unittest.TestCase):
    def test_six_slots_is_thirty_minutes(self):
        summary = summarize_record(
            "2024-01-01", {"timeBlocks": [{"startBlock": 0, "endBlock": 5}]}
        )
        self.assertEqual(summary.block_count, 1)
        self.assertEqual(summary.total_minutes, 30)

    def test_multiple_blocks(self):
        record = {
            "timeBlocks": [
                {"startBlock": 0, "endBlock": 0},
                {"startBlock": 12, "endBlock": 23},
            ],
            "lastModified": "2024-01-01T00:00:00.000Z",
        }
        summary = summarize_record("2024-01-01", record)
        self.assertEqual(summary.block_count, 2)
        self.assertEqual(summary.total_minutes, 65)
        self.assertEqual(summary.last_modified, "2024-01-01T00:00:00.000Z")

    def test_missing_time_blocks_counts_as_empty(self):
        summary = summarize_record("2024-01-01", {"dayPlan": []})
        self.assertEqual(summary.block_count, 0)
        self.assertEqual(summary.total_minutes, 0)

    def test_inverted_block_is_not_validated(self):
        summary = summarize_record(
            "2024-01-01", {"timeBlocks": [{"startBlock": 5, "endBlock": 1}]}
        )
        self.assertEqual(summary.total_minutes, -15)

    def test_serializes_with_camel_case_keys(self):
        summary = summarize_record("2024-01-01", {"timeBlocks": []})
        self.assertEqual(
            json.loads(summary.model_dump_json(by_alias=True)),
            {
                "date": "2024-01-01",
                "blockCount": 0,
                "totalMinutes": 0,
                "lastModified": None,
            },
        )


class ReplaceNonFiniteTests(unittest.TestCase):
    def test_nested_values(self):
        value = {"a": [1, 2.5, float("-inf"), {"b": float("nan")}], "c": "x", "d": None}
        self.assertEqual(
            replace_non_finite(value),
            {"a": [1, 2.5, None, {"b": None}], "c": "x", "d": None},
        )


class UtcTimestampTests(unittest.TestCase):
    def test_format(self):
        value = utc_timestamp(datetime(2024, 1, 3, 9, 15, 0, 123456, tzinfo=timezone.utc))
        self.assertEqual(value, "2024-01-03T09:15:00.123Z")


if __name__ == "__main__":
    unittest.main()
