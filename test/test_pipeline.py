from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from camtrap_tally.data_processing.activity import ActivityPeriodParser
from camtrap_tally.data_processing.errors import SourceIOError
from camtrap_tally.data_processing.pipeline import TallyOptions, load_activity_periods, process_file, process_text

DETECTIONS = (
    "Site_ID;Date;Species\r\n"
    "1;2020.07.10 10:00;Deer\r\n"
    "1;2020.07.10 10:30;Deer\r\n"
    "1;2020.03.05 08:00;Fox\r\n"
    "1;2020.03.05 08:10;fox\r\n"
)
ACTIVITY = "1;2020.01.01;2020.06.01\r\n"


class FlatModeTestCase(TestCase):
    def test_flat_output(self):
        result = process_text(DETECTIONS, TallyOptions(interval_minutes=60), source="site.csv")
        self.assertEqual(result.n_records, 4)
        self.assertEqual(result.n_selected, 2)
        self.assertEqual(
            result.text,
            "1;2020.07.10 10:00;Deer\r\n"
            "1;2020.07.10 10:30;\r\n"
            "1;2020.03.5 8:00;Fox\r\n"
            "1;2020.03.5 8:10;\r\n",
        )
        for stage in ("parse", "dedup", "render"):
            self.assertIn(stage, result.timings)


class MatrixModeTestCase(TestCase):
    def setUp(self):
        self._periods = ActivityPeriodParser().parse(ACTIVITY, "activity.csv")

    def test_matrix_counts_suppressed_detections(self):
        options = TallyOptions(interval_minutes=60, matrix_mode=True)
        result = process_text(DETECTIONS, options, source="site.csv", activity_periods=self._periods)
        lines = result.text.split("\r\n")
        self.assertEqual(lines[0], "cameraNumber;year;month;DEER;FOX")
        self.assertEqual(lines[1], "1;2020;1;0;0")
        self.assertEqual(lines[3], "1;2020;3;0;1")
        self.assertEqual(lines[7], "1;2020;7;1;N/A")
        self.assertEqual(lines[12], "1;2020;12;N/A;N/A")
        self.assertEqual(lines[13], "")
        self.assertIn("aggregate", result.timings)

    def test_matrix_mode_needs_periods(self):
        with self.assertRaises(ValueError):
            process_text(DETECTIONS, TallyOptions(interval_minutes=60, matrix_mode=True))


class FileTestCase(TestCase):
    def test_process_file_with_bom(self):
        with TemporaryDirectory() as tmp:
            fp = Path(tmp) / "site.csv"
            fp.write_bytes("\ufeff".encode("utf-8") + DETECTIONS.encode("utf-8"))
            af = Path(tmp) / "activity.csv"
            af.write_text(ACTIVITY, encoding="utf-8")

            periods = load_activity_periods(af)
            result = process_file(fp, TallyOptions(interval_minutes=60, matrix_mode=True), periods)
        self.assertEqual(result.source, "site.csv")
        self.assertIn("read", result.timings)
        self.assertTrue(result.text.startswith("cameraNumber;year;month;DEER;FOX\r\n"))

    def test_missing_file(self):
        with TemporaryDirectory() as tmp:
            with self.assertRaises(SourceIOError) as ctx:
                process_file(Path(tmp) / "nope.csv", TallyOptions(interval_minutes=1))
        self.assertIsInstance(ctx.exception, OSError)
        self.assertEqual(ctx.exception.source, "nope.csv")

    def test_invalid_utf8(self):
        with TemporaryDirectory() as tmp:
            fp = Path(tmp) / "latin.csv"
            fp.write_bytes("1;2020.07.10 10:00;Őz\n".encode("latin2"))
            with self.assertRaises(SourceIOError):
                process_file(fp, TallyOptions(interval_minutes=1))
