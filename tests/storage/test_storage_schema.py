import json
import unittest
from datetime import datetime, timezone

from vdrivemgr.models import FileCategory, FileItem, FolderItem, UploadState
from vdrivemgr.storage import (
    INTERRUPTED_UPLOAD_REASON,
    MalformedSnapshotError,
    decode_items,
    encode_items,
)

DT = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _file(**kwargs) -> FileItem:
    base = dict(
        id="f1",
        name="a.txt",
        parent_id="d1",
        created_at=DT,
        updated_at=DT,
        size=5,
        mime_type="text/plain",
        category=FileCategory.DOCUMENT,
        content="hello",
    )
    base.update(kwargs)
    return FileItem(**base)


class TestSnapshotCodec(unittest.TestCase):
    def test_encode_uses_camel_case_records(self) -> None:
        folder = FolderItem(id="d1", name="Docs", parent_id=None, created_at=DT, updated_at=DT)
        data = json.loads(encode_items([folder, _file()], content_max_bytes=1024))

        self.assertEqual(data[0]["type"], "folder")
        self.assertEqual(data[0]["createdAt"], "2025-01-02T03:04:05.000Z")
        self.assertNotIn("parentId", data[0])
        self.assertEqual(data[1]["parentId"], "d1")
        self.assertEqual(data[1]["fileCategory"], "document")
        self.assertEqual(data[1]["mimeType"], "text/plain")
        self.assertEqual(data[1]["content"], "hello")
        self.assertFalse(data[1]["isUploading"])

    def test_large_content_is_session_only(self) -> None:
        data = json.loads(encode_items([_file()], content_max_bytes=4))
        self.assertNotIn("content", data[0])
        self.assertEqual(data[0]["size"], 5)

    def test_bytes_content_survives_as_base64(self) -> None:
        blob = encode_items([_file(content=b"\x00\xffbin")], content_max_bytes=1024)
        self.assertEqual(json.loads(blob)[0]["contentEncoding"], "base64")
        (item,) = decode_items(blob)
        self.assertEqual(item.content, b"\x00\xffbin")

    def test_decode_reads_browser_records(self) -> None:
        blob = json.dumps(
            [
                {
                    "id": "r1",
                    "name": "Docs",
                    "parentId": None,
                    "createdAt": "2025-01-01T00:00:00.000Z",
                    "updatedAt": "2025-01-01T00:00:00.000Z",
                    "type": "folder",
                    "isFavorite": True,
                },
                {
                    "id": "f1",
                    "name": "a.txt",
                    "parentId": "r1",
                    "createdAt": "2025-01-01T00:00:00.000Z",
                    "updatedAt": "2025-01-01T00:00:00",
                    "type": "file",
                    "size": 10,
                    "fileCategory": "document",
                },
            ]
        )
        folder, info = decode_items(blob)
        self.assertIsInstance(folder, FolderItem)
        self.assertTrue(folder.is_favorite)
        self.assertIsInstance(info, FileItem)
        self.assertEqual(info.parent_id, "r1")
        self.assertEqual(info.mime_type, "text/plain")
        self.assertEqual(info.category, FileCategory.DOCUMENT)
        self.assertEqual(info.updated_at.tzinfo, timezone.utc)
        self.assertIsNone(info.upload_state)

    def test_invalid_records_are_dropped(self) -> None:
        good = {"id": "ok", "name": "ok", "type": "folder",
                "createdAt": "2025-01-01T00:00:00Z", "updatedAt": "2025-01-01T00:00:00Z"}
        records = [
            good,
            {**good, "id": "bad-type", "type": "symlink"},
            {**good, "id": "bad-name", "name": "a/b"},
            {**good, "id": ""},
            {**good, "id": "no-dates", "createdAt": None},
            {**good, "id": "neg", "type": "file", "size": -1},
            {**good, "id": "b64", "type": "file", "content": "!!", "contentEncoding": "base64"},
            "not a record",
        ]
        with self.assertLogs("vdrivemgr.storage.schema", level="WARNING"):
            items = decode_items(json.dumps(records))
        self.assertEqual([i.id for i in items], ["ok"])

    def test_malformed_blob(self) -> None:
        with self.assertRaises(MalformedSnapshotError):
            decode_items("{not json")
        with self.assertRaises(MalformedSnapshotError):
            decode_items(json.dumps({"items": []}))

    def test_upload_states_round_trip(self) -> None:
        items = [
            _file(id="p", name="p.bin", upload_state=UploadState.in_progress(30), content=None),
            _file(id="e", name="e.bin", upload_state=UploadState.failed("boom"), content=None),
        ]
        blob = encode_items(items, content_max_bytes=0)
        raw = json.loads(blob)
        self.assertEqual(raw[0]["uploadProgress"], 30)
        self.assertTrue(raw[0]["isUploading"])
        self.assertEqual(raw[1]["error"], "boom")

        pending, failed = decode_items(blob)
        self.assertEqual(pending.upload_state, UploadState.failed(INTERRUPTED_UPLOAD_REASON))
        self.assertEqual(failed.upload_state, UploadState.failed("boom"))


if __name__ == "__main__":
    unittest.main()
