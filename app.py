#!/usr/bin/env python3
"""
QR tracking backend  (Flask + MongoDB + attribute table)
─────────────────────────────────────────────────────────
* Renders QR codes as SVG or PNG (colors, size, optional logo)
* Logs every rendered request to MongoDB
* Seeds the on‑disk attribute table once at boot
"""
from __future__ import annotations
import base64, binascii, logging

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from qr_service import config
from qr_service.attributes import seed_attributes
from qr_service.generator import RenderError, render
from qr_service.tracking import Tracker, TrackingError

log = logging.getLogger(__name__)

FORMATS    = ("svg", "png")
SIZE_RANGE = (64, 2048)
MAX_BORDER = 16


class RequestError(ValueError):
    """Malformed createQr body."""

# ───────────────────────── request parsing ────────────────────
def _int(payload: dict, key: str, default: int, lo: int, hi: int) -> int:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise RequestError(f"{key} must be an integer")
    if not lo <= value <= hi:
        raise RequestError(f"{key} must be between {lo} and {hi}")
    return value

def _str(payload: dict, key: str, default: str | None) -> str | None:
    value = payload.get(key, default)
    if value is not None and not isinstance(value, str):
        raise RequestError(f"{key} must be a string")
    return value

def parse_qr_request(payload) -> dict:
    """Accept a bare JSON string or an options object; return render kwargs."""
    if isinstance(payload, str):
        payload = {"data": payload}
    if not isinstance(payload, dict):
        raise RequestError("body must be a JSON string or object")

    data = _str(payload, "data", None)
    if not data:
        raise RequestError("data is required")
    fmt = (_str(payload, "format", "svg") or "svg").lower()
    if fmt not in FORMATS:
        raise RequestError(f"format must be one of {', '.join(FORMATS)}")

    logo = _str(payload, "logo", None)
    if logo is not None:
        try:
            logo = base64.b64decode(logo, validate=True)
        except binascii.Error as e:
            raise RequestError("logo must be base64") from e

    return {
        "data"      : data,
        "fmt"       : fmt,
        "size"      : _int(payload, "size", 300, *SIZE_RANGE),
        "border"    : _int(payload, "border", 4, 0, MAX_BORDER),
        "fill"      : _str(payload, "fill", "#000000"),
        "background": _str(payload, "background", "#FFFFFF"),
        "logo"      : logo,
    }

def _error(message: str, status: int):
    return jsonify({"status": "error", "message": message}), status

# ───────────────────────── app factory ────────────────────────
def create_app(tracker: Tracker | None = None) -> Flask:
    app = Flask(__name__)
    CORS(app, origins="*", supports_credentials=True,
         methods=["POST", "GET", "OPTIONS"],
         allow_headers=["Authorization", "Accept", "Content-Type"],
         max_age=3600)
    tracker = tracker or Tracker.from_config()

    @app.errorhandler(RequestError)
    @app.errorhandler(RenderError)
    def bad_request(e):
        return _error(str(e), 400)

    @app.errorhandler(TrackingError)
    def tracking_failed(e):
        return _error("tracking failed", 500)

    @app.get("/health_check")
    def health_check():
        return "", 200

    @app.post("/api/v1/createQr")
    def create_qr():
        opts = parse_qr_request(request.get_json(silent=True))
        body, mimetype = render(**opts)
        tracker.track(opts["data"], opts["fmt"])
        log.debug("rendered %s (%d bytes)", opts["fmt"], len(body))
        return Response(body, mimetype=mimetype)

    return app

# ───────────────────────── launch ─────────────────────────────
def main():
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    table = seed_attributes()
    print(f"✓ attributes → {table!r}")
    print(f"✓ MongoDB → {config.MONGO_URI}/{config.DB_NAME}")
    app = create_app()
    app.run(host=config.HOST, port=config.PORT)

if __name__ == "__main__":
    main()
