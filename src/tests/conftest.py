import json

import pytest

from ttdl_lunar.logging_setup import reset_logging


def pytest_addoption(parser):
    parser.addoption(
        "--show-records",
        action="store_true",
        default=False,
        help="Print every input/output record pair handled by the flow tests",
    )


@pytest.fixture
def show_records(request):
    return request.config.getoption("--show-records")


@pytest.fixture
def make_message():
    """Build a TTDL plugin message dict; `optional=None` leaves the member out."""

    def _make(special_tags, optional=None, description="test"):
        message = {
            "description": description,
            "specialTags": [{k: v} for k, v in special_tags],
        }
        if optional is not None:
            message["optional"] = [{k: v} for k, v in optional]
        return message

    return _make


@pytest.fixture
def run_json(show_records):
    """Run the whole flow on a message dict and decode the answer."""
    from ttdl_lunar.top_flows import run

    def _run(message):
        output = run(json.dumps(message))
        if show_records:
            print("IN :", json.dumps(message, ensure_ascii=False))
            print("OUT:", output)
        return json.loads(output)

    return _run


@pytest.fixture(autouse=True)
def _isolated_logging():
    yield
    reset_logging()
