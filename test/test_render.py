from datetime import datetime
from unittest import TestCase

from camtrap_tally.data_processing.delimited import iter_rows, parse_camera_id, parse_timestamp, format_timestamp
from camtrap_tally.data_processing.render import render_flat, render_matrix
from camtrap_tally.data_processing.schemas import INACTIVE, CellValue, CountMatrix, EventRecord, YearMonth


class TimestampFormatTestCase(TestCase):
    def test_padding(self):
        self.assertEqual(format_timestamp(datetime(2021, 3, 7, 9, 5)), "2021.03.7 9:05")
        self.assertEqual(format_timestamp(datetime(2021, 11, 23, 18, 40)), "2021.11.23 18:40")


class FlatRenderTestCase(TestCase):
    def setUp(self):
        self._records = [
            EventRecord(1, datetime(2020, 5, 1, 10, 0), "Deer", "Deer"),
            EventRecord(1, datetime(2020, 5, 1, 10, 30), "Deer"),
            EventRecord(12, datetime(2020, 5, 2, 7, 3), "Red; fox", "Red; fox"),
        ]

    def test_rows_in_input_order(self):
        self.assertEqual(
            render_flat(self._records),
            "1;2020.05.1 10:00;Deer\r\n"
            "1;2020.05.1 10:30;\r\n"
            '12;2020.05.2 7:03;"Red; fox"\r\n',
        )

    def test_without_camera_column(self):
        lines = render_flat(self._records, include_camera_id=False).split("\r\n")
        self.assertEqual(lines[0], "2020.05.1 10:00;Deer")
        self.assertEqual(lines[1], "2020.05.1 10:30;")

    def test_empty(self):
        self.assertEqual(render_flat([]), "")

    def test_camera_and_time_survive_reparse(self):
        rows = [row for _, row in iter_rows(render_flat(self._records))]
        self.assertEqual(len(rows), len(self._records))
        for rec, row in zip(self._records, rows):
            self.assertEqual(parse_camera_id(row[0]), rec.camera_id)
            self.assertEqual(parse_timestamp(row[1]), rec.timestamp)


class MatrixRenderTestCase(TestCase):
    def test_header_and_cell_states(self):
        matrix = CountMatrix(
            species=["DEER", "FOX"],
            cells={
                (2, YearMonth(2020, 2)): {"DEER": INACTIVE, "FOX": CellValue.active(0)},
                (1, YearMonth(2020, 1)): {"DEER": CellValue.active(3)},
            },
        )
        self.assertEqual(
            render_matrix(matrix),
            "cameraNumber;year;month;DEER;FOX\r\n"
            "1;2020;1;3;ERROR\r\n"
            "2;2020;2;N/A;0\r\n",
        )

    def test_empty_matrix_has_header_only(self):
        self.assertEqual(render_matrix(CountMatrix(species=[], cells={})), "cameraNumber;year;month\r\n")


class CameraIdParseTestCase(TestCase):
    def test_bom_prefix(self):
        self.assertEqual(parse_camera_id("\ufeff12a"), 12)
