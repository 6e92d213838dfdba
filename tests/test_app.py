import base64
import io
from types import SimpleNamespace

import pytest
from PIL import Image
from pymongo.errors import ServerSelectionTimeoutError

import app as service
from qr_service.tracking import Tracker


class FakeCollection:
    def __init__(self):
        self.docs = []

    def insert_one(self, doc):
        self.docs.append(dict(doc))
        return SimpleNamespace(inserted_id=len(self.docs))


class DownCollection:
    def insert_one(self, doc):
        raise ServerSelectionTimeoutError("no servers")


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def client(collection):
    flask_app = service.create_app(Tracker(collection))
    flask_app.testing = True
    return flask_app.test_client()


def _png_b64(color=(0, 128, 0)) -> str:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()


class TestRoutes:
    def test_health_check(self, client):
        assert client.get("/health_check").status_code == 200

    def test_bare_string_renders_svg(self, client, collection):
        resp = client.post("/api/v1/createQr", json="https://example.com")

        assert resp.status_code == 200
        assert resp.mimetype == "image/svg+xml"
        assert b"<svg" in resp.data
        assert collection.docs[0]["data"] == "https://example.com"
        assert collection.docs[0]["format"] == "svg"
        assert "timestamp" in collection.docs[0]

    def test_png_with_options(self, client, collection):
        resp = client.post("/api/v1/createQr", json={
            "data": "ticket-42", "format": "PNG", "size": 256,
            "fill": "navy", "background": "#fafafa", "logo": _png_b64(),
        })

        assert resp.status_code == 200
        assert resp.mimetype == "image/png"
        assert Image.open(io.BytesIO(resp.data)).size == (256, 256)
        assert collection.docs[0]["format"] == "png"

    def test_cors_header(self, client):
        resp = client.get("/health_check", headers={"Origin": "https://shop.example"})

        assert resp.headers.get("Access-Control-Allow-Origin") in ("*", "https://shop.example")


class TestValidation:
    @pytest.mark.parametrize("body, message", [
        ({"format": "svg"}, "data is required"),
        ({"data": ""}, "data is required"),
        ({"data": "x", "format": "gif"}, "format"),
        ({"data": "x", "size": 10}, "size"),
        ({"data": "x", "size": "big"}, "size"),
        ({"data": "x", "size": True}, "size"),
        ({"data": "x", "border": 40}, "border"),
        ({"data": "x", "fill": 5}, "fill"),
        ({"data": "x", "fill": "nope"}, "color"),
        ({"data": "x", "format": "png", "logo": "***"}, "base64"),
        ({"data": "x", "logo": _png_b64()}, "png"),
        (["data"], "JSON string or object"),
    ])
    def test_rejected(self, client, collection, body, message):
        resp = client.post("/api/v1/createQr", json=body)

        assert resp.status_code == 400
        assert resp.get_json()["status"] == "error"
        assert message in resp.get_json()["message"]
        assert collection.docs == []

    def test_not_json(self, client):
        resp = client.post("/api/v1/createQr", data="plain", content_type="text/plain")

        assert resp.status_code == 400

    def test_png_too_small_for_payload(self, client, collection):
        resp = client.post("/api/v1/createQr",
                           json={"data": "x" * 2000, "format": "png", "size": 64})

        assert resp.status_code == 400
        assert "too small" in resp.get_json()["message"]
        assert collection.docs == []

    def test_data_too_long(self, client, collection):
        resp = client.post("/api/v1/createQr", json="x" * 8000)

        assert resp.status_code == 400
        assert collection.docs == []


class TestTracking:
    def test_tracking_failure_is_500(self):
        flask_app = service.create_app(Tracker(DownCollection()))
        resp = flask_app.test_client().post("/api/v1/createQr", json="hello")

        assert resp.status_code == 500
        assert resp.get_json()["message"] == "tracking failed"

    def test_track_returns_id(self, collection):
        assert Tracker(collection).track("hello", "svg") == "1"


class TestParse:
    def test_defaults(self):
        opts = service.parse_qr_request("hello")

        assert opts == {"data": "hello", "fmt": "svg", "size": 300, "border": 4,
                        "fill": "#000000", "background": "#FFFFFF", "logo": None}
