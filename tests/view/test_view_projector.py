import unittest
from datetime import datetime, timezone

from vdrivemgr.local import TreeStore
from vdrivemgr.models import TRASH_ID, FileCategory, FileItem, FolderItem
from vdrivemgr.view import ViewContext, project_view

DT = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _file(item_id, name, parent_id=None, category=FileCategory.OTHER, fav=False) -> FileItem:
    return FileItem(
        id=item_id,
        name=name,
        parent_id=parent_id,
        created_at=DT,
        updated_at=DT,
        is_favorite=fav,
        category=category,
    )


def _folder(item_id, name, parent_id=None, fav=False) -> FolderItem:
    return FolderItem(
        id=item_id, name=name, parent_id=parent_id, created_at=DT, updated_at=DT, is_favorite=fav
    )


class TestProjectView(unittest.TestCase):
    def setUp(self) -> None:
        self.store = TreeStore.from_items(
            [
                _folder("d2", "zeta"),
                _folder("d1", "Alpha"),
                _file("f1", "beta.png", category=FileCategory.IMAGE),
                _file("f2", "Report.pdf", category=FileCategory.PDF, fav=True),
                _file("f3", "alpha.txt", category=FileCategory.DOCUMENT),
                _file("f4", "inner.txt", parent_id="d1", category=FileCategory.DOCUMENT),
            ]
        )
        self.snap = self.store.snapshot

    def _names(self, ctx: ViewContext, **kwargs) -> list[str]:
        return [i.name for i in project_view(self.snap, ctx, **kwargs)]

    def test_folders_first_then_name(self) -> None:
        self.assertEqual(
            self._names(ViewContext()),
            ["Alpha", "zeta", "alpha.txt", "beta.png", "Report.pdf"],
        )

    def test_location_selects_children(self) -> None:
        self.assertEqual(self._names(ViewContext(location="d1")), ["inner.txt"])
        self.assertEqual(self._names(ViewContext(location="unknown")), [])

    def test_search_is_case_insensitive_substring(self) -> None:
        self.assertEqual(self._names(ViewContext(search_query="ALPHA")), ["Alpha", "alpha.txt"])
        self.assertEqual(self._names(ViewContext(search_query="port")), ["Report.pdf"])
        self.assertEqual(self._names(ViewContext(search_query="  ")), [])

    def test_search_keeps_surrounding_whitespace(self) -> None:
        snap = TreeStore.from_items([_folder("a", "my doc"), _folder("b", "mydoc")]).snapshot
        names = [i.name for i in project_view(snap, ViewContext(search_query="my "))]
        self.assertEqual(names, ["my doc"])
        names = [i.name for i in project_view(snap, ViewContext(search_query=" doc"))]
        self.assertEqual(names, ["my doc"])

    def test_category_filters(self) -> None:
        self.assertEqual(self._names(ViewContext(category_filter="folder")), ["Alpha", "zeta"])
        self.assertEqual(self._names(ViewContext(category_filter="favorites")), ["Report.pdf"])
        self.assertEqual(
            self._names(ViewContext(category_filter=FileCategory.IMAGE)), ["beta.png"]
        )
        self.assertEqual(self._names(ViewContext(category_filter="document")), ["alpha.txt"])

    def test_unknown_filter_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ViewContext(category_filter="spreadsheets")

    def test_favorites_first_toggle(self) -> None:
        self.store.toggle_favorite("d2")
        self.assertEqual(
            self._names(ViewContext(favorites_first=True)),
            ["zeta", "Report.pdf", "Alpha", "alpha.txt", "beta.png"],
        )
        self.assertEqual(
            self._names(ViewContext(), favorites_first=True)[:2], ["zeta", "Report.pdf"]
        )

    def test_ties_broken_by_id(self) -> None:
        snap = TreeStore.from_items(
            [_file("b", "same.txt", "p"), _file("a", "same.txt", "p"), _folder("p", "P")],
            repair=False,
        ).snapshot
        self.assertEqual([i.id for i in project_view(snap, ViewContext(location="p"))], ["a", "b"])

    def test_projection_is_deterministic(self) -> None:
        ctx = ViewContext(search_query="a")
        first = [i.id for i in project_view(self.snap, ctx)]
        second = [i.id for i in project_view(self.snap, ctx)]
        self.assertEqual(first, second)

    def test_example_scenario(self) -> None:
        store = TreeStore.from_items(
            [
                _folder("r1", "Docs"),
                FileItem(
                    id="f1",
                    name="a.txt",
                    parent_id="r1",
                    created_at=DT,
                    updated_at=DT,
                    size=10,
                    category=FileCategory.DOCUMENT,
                ),
            ]
        )
        store.move_to_trash({"r1"})
        snap = store.snapshot
        self.assertEqual(project_view(snap, ViewContext(location=None)), [])
        self.assertEqual([i.name for i in project_view(snap, ViewContext(location=TRASH_ID))], ["Docs"])
        self.assertEqual([i.name for i in project_view(snap, ViewContext(location="r1"))], ["a.txt"])


if __name__ == "__main__":
    unittest.main()
