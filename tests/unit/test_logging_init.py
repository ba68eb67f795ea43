from __future__ import annotations

import json
import logging
from io import StringIO

from floorimport.logging.error_log import ErrorLogBuffer
from floorimport.logging.init import (
    LOGGER_NAME,
    PREVIEW_LEVEL,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_preview,
    log_summary,
    reset_logging,
    setup_logging,
)
from floorimport.models.error_record import ErrorRecord


def test_setup_logging_is_idempotent():
    reset_logging()
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert setup_logging() is logger
    assert get_logger() is logger
    assert len(logger.handlers) == 1


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_floorimport_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("reading file")
    logger.warning("row 3 rejected")
    logger.error("snapshot broken")
    logger.log(PREVIEW_LEVEL, "rows=1")
    logger.log(SUMMARY_LEVEL, "rows=1 added=1")

    lines = captured.getvalue().splitlines()
    assert lines == [
        "INFO reading file",
        "WARN row 3 rejected",
        "ERROR snapshot broken",
        "PREVIEW rows=1",
        "SUMMARY rows=1 added=1",
    ]


def test_module_loggers_propagate_into_app_logger(capsys):
    reset_logging()
    setup_logging()
    logging.getLogger("floorimport.services.orchestrator").info("child message")
    log_preview("rows=0")
    log_summary("rows=0")
    out = capsys.readouterr().out
    assert "INFO child message" in out
    assert "PREVIEW rows=0" in out
    assert "SUMMARY rows=0" in out


def test_error_log_buffer_flush(tmp_path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()

    buf.append(ErrorRecord.create("p.xlsx", "Sheet1", 3, "ROW_REJECTED", "code missing"))
    buf.append(ErrorRecord.create("p.xlsx", "Sheet1", 5, "ROW_REJECTED", "name missing"))
    path = buf.flush()
    assert path is not None
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [3, 5]
    assert buf.records == []

    # 2 回目の flush は同じファイルに追記
    buf.append(ErrorRecord.create("p.xlsx", "Sheet1", 9, "COMMIT_FAILED", "write rejected"))
    assert buf.flush() == path
    assert len(path.read_text(encoding="utf-8").splitlines()) == 3
