"""Tests for the console logger."""

from pdbgeom.utils.logger import Logger


class TestLogger:
    def test_capture_respects_level(self):
        logger = Logger(capture=True, use_colors=False)
        logger.debug("hidden")
        logger.info("shown")
        logger.warning("careful")
        assert logger.records == ["INFO: shown", "WARNING: careful"]

    def test_debug_enabled(self):
        logger = Logger(debug=True, capture=True, use_colors=False)
        logger.debug("visible")
        assert logger.records == ["DEBUG: visible"]
        assert logger.is_enabled("DEBUG")

    def test_child_shares_records(self):
        parent = Logger(capture=True, use_colors=False, module_name="pdbgeom")
        child = parent.child("bonds")
        child.error("boom")
        assert child.module_name == "pdbgeom.bonds"
        assert parent.records == ["ERROR: boom"]

    def test_output_goes_to_stderr(self, capsys):
        Logger(use_colors=False, module_name="test").info("hello")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[test] hello" in captured.err

    def test_log_file(self, tmp_path):
        path = tmp_path / "logs" / "run.log"
        logger = Logger(log_file=str(path), use_colors=False)
        logger.warning("written")
        assert "written" in path.read_text()

    def test_table(self):
        logger = Logger(capture=True, use_colors=False)
        logger.table(["Key", "Count"], [["C", 5], ["N", 2]])
        assert logger.records[0] == "INFO: Key | Count"
        assert logger.records[2] == "INFO: C   | 5    "

    def test_empty_table_skipped(self):
        logger = Logger(capture=True, use_colors=False)
        logger.table(["Key"], [])
        assert logger.records == []
