"""
QR-код со ссылкой на публичную страницу резюме ({origin}/resume/{id}).
"""
import qrcode
import qrcode.image.svg

SVG_MEDIA_TYPE = "image/svg+xml"


def public_resume_url(origin: str, resume_id: str) -> str:
    return f"{origin.rstrip('/')}/resume/{resume_id}"


def qr_svg(data: str, box_size: int = 10, border: int = 2) -> str:
    """SVG (path) с QR-кодом для строки data."""
    img = qrcode.make(
        data,
        image_factory=qrcode.image.svg.SvgPathImage,
        box_size=box_size,
        border=border,
    )
    return img.to_string(encoding="unicode")
