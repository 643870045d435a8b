import tempfile
import unittest
from pathlib import Path

from main import load_rows_from_file, run, run_with_trace

from test_counting import SAMPLE_RECORDS


class TestMainTextInput(unittest.TestCase):
    def test_loads_records_from_file(self) -> None:
        file_path = self._write_text(SAMPLE_RECORDS)

        rows = load_rows_from_file(file_path)

        self.assertEqual(len(rows), 6)
        self.assertEqual(str(rows[0]), "???.### 1,1,3")

    def test_raises_when_file_is_missing(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(ValueError):
                load_rows_from_file(str(Path(temp_dir) / "missing.txt"))

    def test_raises_when_file_has_no_records(self) -> None:
        file_path = self._write_text("\n\n")
        with self.assertRaises(ValueError):
            load_rows_from_file(file_path)

    def test_raises_when_record_is_malformed(self) -> None:
        file_path = self._write_text("???.### 1,1,3\n???.### one\n")
        with self.assertRaisesRegex(ValueError, "line 2"):
            load_rows_from_file(file_path)

    def test_loaded_rows_can_be_counted(self) -> None:
        rows = load_rows_from_file(self._write_text(SAMPLE_RECORDS))
        self.assertEqual(run(rows), {"folded": 21, "unfolded": 525152})

    def test_run_with_custom_unfold_factor_and_method(self) -> None:
        rows = load_rows_from_file(self._write_text(SAMPLE_RECORDS))
        self.assertEqual(run(rows, unfold_factor=1, method="iterative"), {"folded": 21, "unfolded": 21})

    def test_run_rejects_bad_options(self) -> None:
        rows = load_rows_from_file(self._write_text(SAMPLE_RECORDS))
        with self.assertRaises(ValueError):
            run(rows, unfold_factor=0)
        with self.assertRaises(ValueError):
            run(rows, method="guess")
        with self.assertRaises(ValueError):
            run(tuple(rows))

    def test_run_with_trace_passes_workers_through(self) -> None:
        rows = load_rows_from_file(self._write_text(SAMPLE_RECORDS))
        result, trace_log = run_with_trace(rows, workers=2)
        self.assertEqual(result, {"folded": 21, "unfolded": 525152})
        self.assertTrue(any("Row 6: ?###???????? 3,2,1 -> 10" in line for line in trace_log))

    def test_run_with_trace_collects_trace(self) -> None:
        rows = load_rows_from_file(self._write_text(SAMPLE_RECORDS))
        result, trace_log = run_with_trace(rows, unfold_factor=2)
        self.assertEqual(result["folded"], 21)
        self.assertTrue(any(line.startswith("Counting 6 rows") for line in trace_log))

    def _write_text(self, text: str) -> str:
        tmp_file = tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False, encoding="utf-8")
        tmp_file.write(text)
        tmp_file.flush()
        tmp_file.close()
        self.addCleanup(lambda: Path(tmp_file.name).unlink(missing_ok=True))
        return tmp_file.name


if __name__ == "__main__":
    unittest.main()
