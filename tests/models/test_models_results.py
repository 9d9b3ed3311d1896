import unittest

from vdrivemgr.models import Action, OperationResult


class TestResults(unittest.TestCase):
    def test_operation_result_defaults(self) -> None:
        r = OperationResult(action=Action.RENAME.value, status="success")
        self.assertTrue(r.ok)
        self.assertEqual(r.item_ids, [])
        self.assertIsNone(r.error_type)
        self.assertIsNone(r.error_details)
        self.assertFalse(r.persisted)

    def test_failed_result_is_not_ok(self) -> None:
        r = OperationResult(
            action=Action.TRASH.value,
            status="failed",
            error_type="NotFound",
            error_details={"item_id": "x"},
        )
        self.assertFalse(r.ok)
        self.assertEqual(r.error_details, {"item_id": "x"})


if __name__ == "__main__":
    unittest.main()
