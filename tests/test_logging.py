import io
import json
import sys

from loguru import logger

from invoice_dispatch.core.config import Settings
from invoice_dispatch.core.logging import setup_logging


def teardown_function():
    logger.remove()
    logger.add(sys.stderr)


def test_text_output_carries_context():
    sink = io.StringIO()
    setup_logging(Settings(app_name="dispatch-test", log_level="info"), sink=sink)

    logger.bind(file="export.csv").info("Processing file")
    logger.debug("hidden")

    output = sink.getvalue()
    assert "Processing file" in output
    assert "export.csv" in output
    assert "dispatch-test" in output
    assert "hidden" not in output


def test_json_output():
    sink = io.StringIO()
    setup_logging(Settings(log_json=True), sink=sink)

    logger.info("Receipt created", receipt="Invoice-1")

    record = json.loads(sink.getvalue().splitlines()[0])["record"]
    assert record["message"] == "Receipt created"
    assert record["extra"]["receipt"] == "Invoice-1"
