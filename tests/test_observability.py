import logging

from fastapi.testclient import TestClient

from shrinkray.core.errors import NotAnImage
from shrinkray.core.log_buffer import clear_log_entries, get_log_entries, install_log_buffer
from shrinkray.core.models import Compressed, Fallback, Passthrough
from shrinkray.core.outcome_metrics import get_outcome_metrics, record_outcome, reset_outcome_metrics
from shrinkray.core.placeholder import load_placeholder, render_placeholder
from shrinkray.main import app


def test_outcome_metrics_count_by_decision():
    reset_outcome_metrics()
    record_outcome(Compressed(b"c", "image/webp", 100, 40, "webp", 75, "single"))
    record_outcome(Passthrough(b"p", "image/gif", "animation"))
    record_outcome(Fallback(NotAnImage("text/html")))
    record_outcome(Fallback(NotAnImage("text/html")))
    metrics = get_outcome_metrics()
    assert metrics["optimized"]["webp"] == 1
    assert metrics["optimized"]["bytes_saved"] == 60
    assert metrics["passthrough"]["animation"] == 1
    assert metrics["fallback"]["NotAnImage"] == 2
    assert metrics["fallback"]["total"] == 2


def test_log_buffer_keeps_url_and_reason():
    install_log_buffer()
    clear_log_entries()
    logging.getLogger("shrinkray.core.pipeline").warning(
        "[pipeline] fallback", extra={"url": "https://x.test/a.png", "reason": "Timeout"}
    )
    items, last_id = get_log_entries(None, 10)
    assert last_id == items[-1]["id"]
    assert items[-1]["url"] == "https://x.test/a.png"
    assert items[-1]["reason"] == "Timeout"


def test_log_buffer_last_id_when_nothing_new():
    install_log_buffer()
    clear_log_entries()
    assert get_log_entries(None, 10) == ([], None)

    logger = logging.getLogger("shrinkray.core.fetcher")
    logger.warning("[fetch] first")
    logger.warning("[fetch] second")
    _, newest = get_log_entries(None, 10)
    items, last_id = get_log_entries(newest, 10)
    assert items == []
    assert last_id == newest == 2


def test_logs_endpoint_filters_errors():
    install_log_buffer()
    clear_log_entries()
    logging.getLogger("shrinkray.core.fetcher").warning("[fetch] slow origin")
    logging.getLogger("shrinkray.core.fetcher").info("[fetch] fine")
    client = TestClient(app)
    response = client.get("/logs", params={"scope": "errors"})
    assert response.status_code == 200
    messages = [item["message"] for item in response.json()["items"]]
    assert "[fetch] slow origin" in messages
    assert "[fetch] fine" not in messages


def test_health_reports_codecs():
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["codecs"]["webp"] is True
    assert "avif" in data["codecs"]
    assert data["status"] in ("ok", "degraded")
    assert "outcomes" in data


def test_placeholder_falls_back_to_rendered_image(tmp_path):
    missing = tmp_path / "nope.png"
    data, media_type = load_placeholder(str(missing))
    assert media_type == "image/png"
    assert data == render_placeholder()


def test_placeholder_from_file(tmp_path):
    path = tmp_path / "error.png"
    path.write_bytes(render_placeholder((10, 10)))
    data, media_type = load_placeholder(str(path))
    assert media_type == "image/png"
    assert data == path.read_bytes()
