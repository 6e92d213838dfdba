# qr_service/generator.py   – QR encoding + SVG/PNG rendering
from __future__ import annotations
import io
from typing import Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError
from PIL import Image, ImageColor

SVG_MIME = "image/svg+xml"
PNG_MIME = "image/png"

LOGO_FRACTION = 4      # logo side is at most size // LOGO_FRACTION
LOGO_PAD = 4           # px of background around the logo


class RenderError(ValueError):
    """Request data or options cannot be rendered."""


# ── encoding ─────────────────────────────────────────────────
def generate_qr_code(data: str, error_correction: int = ERROR_CORRECT_M) -> list[list[bool]]:
    """Encode ``data`` and return the module matrix (no quiet zone)."""
    qr = qrcode.QRCode(version=None, error_correction=error_correction, border=0)
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except DataOverflowError as e:
        raise RenderError("data too long for a QR code") from e
    return [list(row) for row in qr.get_matrix()]

def parse_color(value: str) -> tuple[int, int, int]:
    try:
        rgb = ImageColor.getrgb(value)
    except (ValueError, AttributeError) as e:
        raise RenderError(f"unknown color {value!r}") from e
    return rgb[:3]

def _hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


# ── svg ──────────────────────────────────────────────────────
def to_svg_string(matrix: list[list[bool]], border: int = 4,
                  fill: str = "#000000", background: str = "#FFFFFF",
                  size: Optional[int] = None) -> str:
    """SVG with one ``h1v1`` path segment per dark module; Unix newlines."""
    if border < 0:
        raise RenderError("border must be non-negative")
    dimension = len(matrix) + border * 2
    sized = f' width="{size}" height="{size}"' if size else ""
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
        '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">\n',
        f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
        f'viewBox="0 0 {dimension} {dimension}"{sized} stroke="none">\n',
        f'\t<rect width="100%" height="100%" fill="{_hex(parse_color(background))}"/>\n',
    ]
    path = [f"M{x + border},{y + border}h1v1h-1z"
            for y, row in enumerate(matrix)
            for x, dark in enumerate(row) if dark]
    parts.append(f'\t<path d="{" ".join(path)}" fill="{_hex(parse_color(fill))}"/>\n')
    parts.append("</svg>\n")
    return "".join(parts)


# ── png ──────────────────────────────────────────────────────
def to_png_bytes(matrix: list[list[bool]], size: int = 300, border: int = 4,
                 fill: str = "#000000", background: str = "#FFFFFF",
                 logo: Optional[bytes] = None) -> bytes:
    if border < 0:
        raise RenderError("border must be non-negative")
    fg, bg = parse_color(fill), parse_color(background)
    dimension = len(matrix) + border * 2
    if size < dimension:
        # below one pixel per module the code cannot be scanned
        raise RenderError(f"size {size} is too small for {dimension} modules")
    img = Image.new("RGB", (dimension, dimension), bg)
    px  = img.load()
    for y, row in enumerate(matrix):
        for x, dark in enumerate(row):
            if dark:
                px[x + border, y + border] = fg
    img = img.resize((size, size), Image.Resampling.NEAREST)
    if logo is not None:
        overlay_logo(img, logo, bg)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()

def overlay_logo(img: Image.Image, logo: bytes, background=(255, 255, 255)) -> None:
    """Paste ``logo`` centred on ``img`` in place, over a background pad."""
    try:
        mark = Image.open(io.BytesIO(logo))
        mark.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise RenderError("logo is not a readable image") from e
    mark = mark.convert("RGBA")
    limit = max(1, img.width // LOGO_FRACTION)
    mark.thumbnail((limit, limit))

    left = (img.width - mark.width) // 2
    top  = (img.height - mark.height) // 2
    pad  = Image.new("RGB", (mark.width + 2 * LOGO_PAD, mark.height + 2 * LOGO_PAD), background)
    img.paste(pad, (left - LOGO_PAD, top - LOGO_PAD))
    img.paste(mark, (left, top), mark)


# ── entry point used by the route ────────────────────────────
def render(data: str, fmt: str = "svg", size: int = 300, border: int = 4,
           fill: str = "#000000", background: str = "#FFFFFF",
           logo: Optional[bytes] = None) -> tuple[bytes, str]:
    """Return ``(body, mimetype)`` for ``data`` in ``fmt``."""
    if fmt == "svg":
        if logo is not None:
            raise RenderError("logo overlay is only supported for png")
        matrix = generate_qr_code(data)
        return to_svg_string(matrix, border, fill, background, size).encode("utf-8"), SVG_MIME
    if fmt == "png":
        # a logo hides modules, so use the highest error correction
        matrix = generate_qr_code(data, ERROR_CORRECT_H if logo else ERROR_CORRECT_M)
        return to_png_bytes(matrix, size, border, fill, background, logo), PNG_MIME
    raise RenderError(f"unsupported format {fmt!r}")
