from unittest import TestCase

from camtrap_tally.utils.timer import timed


class TimedTestCase(TestCase):
    def test_repeated_section_accumulates(self):
        timings = {}
        with timed("parse", timings):
            pass
        first = timings["parse"]
        with timed("parse", timings):
            sum(range(1000))
        self.assertGreaterEqual(timings["parse"], first)
        self.assertEqual(list(timings), ["parse"])

    def test_failing_block_is_recorded(self):
        timings = {}
        with self.assertRaises(RuntimeError):
            with timed("render", timings):
                raise RuntimeError("boom")
        self.assertIn("render", timings)

    def test_without_store(self):
        with self.assertLogs("camtrap_tally.utils.timer", level="DEBUG") as logs:
            with timed("dedup"):
                pass
        self.assertIn("Stage dedup took", logs.output[0])
