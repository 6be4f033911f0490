import io
import json
import logging

from emergicare.common.config import settings
from emergicare.common.logging import get_logger, setup_logging


def test_json_lines_are_flat_records(monkeypatch):
    monkeypatch.setattr(settings, "LOG_JSON", True)
    setup_logging()
    stream = io.StringIO()
    logging.getLogger().handlers[0].setStream(stream)
    try:
        get_logger("emergicare.tests.json").warning(
            "claim_conflict", consultation_id="c-1", caller_id="d-2"
        )
        record = json.loads(stream.getvalue().strip().splitlines()[-1])
    finally:
        monkeypatch.setattr(settings, "LOG_JSON", False)
        setup_logging()

    assert record["message"] == "claim_conflict"
    assert record["consultation_id"] == "c-1"
    assert record["caller_id"] == "d-2"
    assert record["level"] == "warning"


def test_event_keys_do_not_clash_with_log_record_fields(monkeypatch):
    monkeypatch.setattr(settings, "LOG_JSON", True)
    setup_logging()
    stream = io.StringIO()
    logging.getLogger().handlers[0].setStream(stream)
    try:
        get_logger("emergicare.tests.fields").warning(
            "change_published", table="consultations", change="update", subscribers=0
        )
        get_logger("emergicare.tests.fields").warning(
            "doctor_saved", caller_id="d-1", was_created=True, is_available=False
        )
        lines = stream.getvalue().strip().splitlines()
    finally:
        monkeypatch.setattr(settings, "LOG_JSON", False)
        setup_logging()

    published, saved = (json.loads(line) for line in lines[-2:])
    assert published["change"] == "update"
    assert saved["was_created"] is True
