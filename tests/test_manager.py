import json
import unittest

from vdrivemgr.local import ItemState, TreeStore
from vdrivemgr.manager import FileManager
from vdrivemgr.models import TRASH_ID, OperationResult, UploadState
from vdrivemgr.options import TreeOptions
from vdrivemgr.storage import MemoryStorage
from vdrivemgr.view import ROOT_CRUMB, TRASH_CRUMB, ViewContext


class TestFileManager(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = MemoryStorage()
        self.results: list[OperationResult] = []
        self.mgr = FileManager(self.storage, on_complete=self.results.append)

    def _stored_ids(self) -> set[str]:
        return {r["id"] for r in json.loads(self.storage.load_blob() or "[]")}

    def test_successful_mutation_autosaves_and_notifies(self) -> None:
        res = self.mgr.create_folder("Docs")

        self.assertTrue(res.ok)
        self.assertEqual(res.action, "CREATE_FOLDER")
        self.assertTrue(res.persisted)
        self.assertEqual(self._stored_ids(), set(res.item_ids))
        self.assertEqual(self.results, [res])

    def test_failure_becomes_typed_result(self) -> None:
        self.mgr.create_folder("Docs")
        blob_before = self.storage.load_blob()

        res = self.mgr.create_folder("docs")

        self.assertFalse(res.ok)
        self.assertEqual(res.error_type, "DuplicateName")
        self.assertEqual(res.error_details["name"], "docs")
        self.assertFalse(res.persisted)
        self.assertEqual(self.storage.load_blob(), blob_before)
        self.assertEqual(len(self.results), 2)

    def test_error_kinds_for_common_failures(self) -> None:
        self.assertEqual(self.mgr.create_folder("a/b").error_type, "InvalidName")
        self.assertEqual(self.mgr.create_folder("x", "nope").error_type, "ParentNotFound")
        self.assertEqual(self.mgr.rename("nope", "x").error_type, "NotFound")

        folder_id = self.mgr.create_folder("Docs").item_ids[0]
        self.assertEqual(self.mgr.restore(folder_id).error_type, "NotInTrash")
        self.assertEqual(self.mgr.fail_upload(folder_id, "x").error_type, "NotAFile")

        child_id = self.mgr.create_folder("Child", folder_id).item_ids[0]
        self.assertEqual(self.mgr.move(folder_id, child_id).error_type, "InvalidState")

    def test_programming_errors_still_raise(self) -> None:
        with self.assertRaises(ValueError):
            self.mgr.create_file("a.txt", size=-1)

    def test_load_round_trip(self) -> None:
        folder_id = self.mgr.create_folder("Docs").item_ids[0]
        file_id = self.mgr.upload_file("a.txt", lambda: "hello", folder_id).item_ids[0]
        self.mgr.toggle_favorite(folder_id)

        other = FileManager(self.storage)
        self.assertEqual(other.load(), 2)
        self.assertTrue(other.get(folder_id).is_favorite)
        self.assertEqual(other.get(file_id).content, "hello")
        self.assertEqual(other.get(file_id).parent_id, folder_id)

    def test_load_discards_malformed_blob(self) -> None:
        storage = MemoryStorage("{oops")
        mgr = FileManager(storage)
        with self.assertLogs("vdrivemgr.manager", level="WARNING"):
            self.assertEqual(mgr.load(), 0)
        self.assertIsNone(storage.load_blob())

    def test_load_repairs_orphans(self) -> None:
        blob = json.dumps(
            [
                {"id": "o", "name": "orphan", "parentId": "gone", "type": "folder",
                 "createdAt": "2025-01-01T00:00:00Z", "updatedAt": "2025-01-01T00:00:00Z"},
            ]
        )
        mgr = FileManager(MemoryStorage(blob))
        mgr.load()
        self.assertIsNone(mgr.get("o").parent_id)
        self.assertEqual(mgr.check_integrity(), [])

    def test_upload_file_success(self) -> None:
        res = self.mgr.upload_file("notes.txt", lambda: "hi there")

        self.assertTrue(res.ok)
        info = self.mgr.get(res.item_ids[0])
        self.assertEqual(info.content, "hi there")
        self.assertEqual(info.size, 8)
        self.assertEqual(info.mime_type, "text/plain")
        self.assertIsNone(info.upload_state)

    def test_upload_file_read_failure_keeps_failed_placeholder(self) -> None:
        def reader():
            raise OSError("disk gone")

        res = self.mgr.upload_file("big.bin", reader)

        self.assertFalse(res.ok)
        self.assertEqual(res.error_type, "ContentReadFailure")
        self.assertTrue(res.persisted)
        item_id = res.error_details["item_id"]
        self.assertEqual(self.mgr.get(item_id).upload_state, UploadState.failed("disk gone"))
        self.assertIn(item_id, self._stored_ids())

        self.assertTrue(self.mgr.dismiss_upload(item_id).ok)
        self.assertIsNone(self.mgr.get(item_id))

    def test_upload_file_duplicate_and_overwrite(self) -> None:
        first = self.mgr.upload_file("a.txt", lambda: "v1").item_ids[0]

        dup = self.mgr.upload_file("A.TXT", lambda: "v2")
        self.assertEqual(dup.error_type, "DuplicateName")
        self.assertEqual(len(self.mgr.store), 1)

        res = self.mgr.upload_file("a.txt", lambda: "v2", overwrite=True)
        self.assertTrue(res.ok)
        self.assertEqual(self.mgr.state_of(first), ItemState.TRASHED)
        self.assertEqual(self.mgr.get(res.item_ids[0]).content, "v2")
        self.assertEqual([e.item.id for e in self.mgr.trash_entries()], [first])

    def test_two_phase_upload(self) -> None:
        file_id = self.mgr.create_file("clip.mp4", size=100).item_ids[0]
        saved = self.storage.load_blob()

        progress = self.mgr.update_upload_progress(file_id, 40)
        self.assertTrue(progress.ok)
        self.assertFalse(progress.persisted)
        self.assertEqual(self.storage.load_blob(), saved)
        self.assertEqual(self.mgr.get(file_id).upload_state, UploadState.in_progress(40))

        self.assertTrue(self.mgr.replace_content(file_id, b"\x00" * 100).ok)
        self.assertIsNone(self.mgr.get(file_id).upload_state)
        self.assertEqual(self.mgr.update_upload_progress(file_id, 50).error_type, "InvalidState")

    def test_cancel_upload_removes_placeholder(self) -> None:
        file_id = self.mgr.create_file("x.bin").item_ids[0]
        self.assertTrue(self.mgr.cancel_upload(file_id).ok)
        self.assertEqual(self.mgr.state_of(file_id), ItemState.PURGED)

    def test_quota_exceeded_is_not_persisted(self) -> None:
        mgr = FileManager(MemoryStorage(quota_bytes=10))
        with self.assertLogs("vdrivemgr.manager", level="WARNING"):
            res = mgr.create_folder("Docs")
        self.assertTrue(res.ok)
        self.assertFalse(res.persisted)
        self.assertEqual(len(mgr.store), 1)

    def test_autosave_disabled(self) -> None:
        mgr = FileManager(self.storage, autosave=False)
        res = mgr.create_folder("Docs")
        self.assertFalse(res.persisted)
        self.assertIsNone(self.storage.load_blob())
        self.assertTrue(mgr.save())
        self.assertEqual(self._stored_ids(), set(res.item_ids))

    def test_without_storage(self) -> None:
        mgr = FileManager()
        self.assertTrue(mgr.create_folder("Docs").ok)
        self.assertFalse(mgr.save())
        self.assertEqual(mgr.load(), 0)

    def test_trash_restore_and_navigation(self) -> None:
        docs = self.mgr.create_folder("Docs").item_ids[0]
        work = self.mgr.create_folder("Work", docs).item_ids[0]
        self.mgr.upload_file("a.txt", lambda: "12345", work)

        res = self.mgr.move_to_trash([work, docs])
        self.assertEqual(res.item_ids, [docs])
        self.assertEqual(self.mgr.get(docs).parent_id, TRASH_ID)
        self.assertEqual(self.mgr.get(work).parent_id, docs)

        (entry,) = self.mgr.trash_entries()
        self.assertEqual((entry.descendant_count, entry.total_size), (2, 5))
        self.assertEqual(self.mgr.breadcrumbs(work)[:2], [ROOT_CRUMB, TRASH_CRUMB])
        self.assertEqual(self.mgr.resolve_location(work), work)
        self.assertEqual(self.mgr.list_view(ViewContext(location=None)), [])

        self.assertTrue(self.mgr.restore(docs).ok)
        self.assertEqual(self.mgr.state_of(work), ItemState.LIVE)

        self.mgr.move_to_trash([docs])
        deleted = self.mgr.delete_permanently(docs)
        self.assertEqual(len(deleted.item_ids), 3)
        self.assertIsNone(self.mgr.resolve_location(work))
        self.assertEqual(self.mgr.breadcrumbs(work), [ROOT_CRUMB])

    def test_empty_trash(self) -> None:
        keep = self.mgr.create_folder("Keep").item_ids[0]
        gone = self.mgr.create_folder("Gone").item_ids[0]
        self.mgr.upload_file("x.txt", lambda: "x", gone)
        self.mgr.move_to_trash([gone])

        res = self.mgr.empty_trash()
        self.assertEqual(res.action, "EMPTY_TRASH")
        self.assertEqual(len(res.item_ids), 2)
        self.assertEqual([i.id for i in self.mgr.store.items()], [keep])

    def test_list_view_uses_manager_options(self) -> None:
        mgr = FileManager(options=TreeOptions(favorites_first=True))
        a = mgr.create_folder("A").item_ids[0]
        b = mgr.create_folder("B").item_ids[0]
        mgr.toggle_favorite(b)
        self.assertEqual([i.id for i in mgr.list_view()], [b, a])

    def test_from_store(self) -> None:
        store = TreeStore()
        folder = store.create_folder("Docs")
        mgr = FileManager.from_store(store, self.storage)
        self.assertIs(mgr.store, store)
        self.assertTrue(mgr.rename(folder.id, "Papers").ok)
        self.assertEqual(store.get(folder.id).name, "Papers")


if __name__ == "__main__":
    unittest.main()
