"""
Unit tests for operation/storage/state_store.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import tempfile
import unittest
from operation.storage.state_store import InMemoryStateStore, JsonFileStateStore


class StateStoreContract:
    """Behaviour shared by every store implementation."""

    def test_get_missing_key(self):
        self.assertIsNone(self.store.get("fingame-state"))

    def test_set_get_overwrite(self):
        self.store.set("fingame-state", '{"xp": 5}')
        self.store.set("fingame-state", '{"xp": 10}')
        self.assertEqual(self.store.get("fingame-state"), '{"xp": 10}')

    def test_delete(self):
        self.store.set("rollover-2024-04", "2500")
        self.store.delete("rollover-2024-04")
        self.store.delete("rollover-2024-04")
        self.assertIsNone(self.store.get("rollover-2024-04"))

    def test_keys(self):
        self.store.set("rollover-2024-05", "1")
        self.store.set("fingame-state", "{}")
        self.assertEqual(self.store.keys(), ["fingame-state", "rollover-2024-05"])

    def test_invalid_key_raises(self):
        for key in ("", "../escape", "a/b", "with space"):
            with self.assertRaises(ValueError, msg=key):
                self.store.set(key, "x")


class TestInMemoryStateStore(StateStoreContract, unittest.TestCase):
    """Test cases for InMemoryStateStore class."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = InMemoryStateStore()

    def test_initial_data(self):
        store = InMemoryStateStore({"fingame-state": "{}"})
        self.assertEqual(store.get("fingame-state"), "{}")


class TestJsonFileStateStore(StateStoreContract, unittest.TestCase):
    """Test cases for JsonFileStateStore class."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp = tempfile.TemporaryDirectory()
        self.store = JsonFileStateStore(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_one_file_per_key(self):
        self.store.set("fingame-state", "{}")
        self.assertTrue(os.path.exists(os.path.join(self.tmp.name, "fingame-state.json")))

    def test_values_survive_a_new_instance(self):
        self.store.set("fingame-state", '{"xp": 42}')
        reopened = JsonFileStateStore(self.tmp.name)
        self.assertEqual(reopened.get("fingame-state"), '{"xp": 42}')

    def test_creates_missing_directory(self):
        nested = os.path.join(self.tmp.name, "nested", "state")
        store = JsonFileStateStore(nested)
        store.set("fingame-state", "{}")
        self.assertTrue(os.path.isdir(nested))

    def test_no_temporary_files_left_behind(self):
        self.store.set("fingame-state", "{}")
        self.assertEqual(sorted(os.listdir(self.tmp.name)), ["fingame-state.json"])

    def test_undecodable_file_raises_os_error(self):
        with open(os.path.join(self.tmp.name, "fingame-state.json"), "wb") as f:
            f.write(b"\xff\xfe{bad")
        with self.assertRaises(OSError):
            self.store.get("fingame-state")


if __name__ == '__main__':
    unittest.main()
