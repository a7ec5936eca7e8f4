# backend/qr_attendance/services/qr_service.py
"""QR code image rendering for the teacher display."""
import base64
import io

import qrcode


class QRService:
    """Service for QR code operations."""

    @staticmethod
    def render_data_uri(payload: str, box_size: int = 10, border: int = 4) -> str:
        """
        Render payload as a PNG QR code.
        Returns: data URI (data:image/png;base64,...)
        """
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
