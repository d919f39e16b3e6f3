import json
import os
import stat
import tempfile
import unittest

from storefront_server.store import JsonFileStore


class JsonFileStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "store.json")
        self.store = JsonFileStore(self.path)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_missing_file_reads_as_empty(self):
        self.assertIsNone(await self.store.get("cart"))

    async def test_set_then_get(self):
        await self.store.set("cart", "[]")
        await self.store.set("userOrders", '[{"id": 1}]')

        self.assertEqual(await self.store.get("cart"), "[]")
        self.assertEqual(await JsonFileStore(self.path).get("userOrders"), '[{"id": 1}]')

    async def test_set_replaces_whole_value(self):
        await self.store.set("cart", "[1, 2]")
        await self.store.set("cart", "[3]")

        self.assertEqual(await self.store.get("cart"), "[3]")

    async def test_file_is_private(self):
        await self.store.set("cart", "[]")

        mode = stat.S_IMODE(os.stat(self.path).st_mode)
        self.assertEqual(mode, 0o600)

    async def test_corrupt_file_reads_as_empty(self):
        with open(self.path, "w") as f:
            f.write("{broken")

        with self.assertLogs("storefront_server.store", level="WARNING"):
            self.assertIsNone(await self.store.get("cart"))

    async def test_non_object_file_reads_as_empty(self):
        with open(self.path, "w") as f:
            json.dump(["not", "a", "dict"], f)

        with self.assertLogs("storefront_server.store", level="WARNING"):
            self.assertIsNone(await self.store.get("cart"))


if __name__ == "__main__":
    unittest.main()
