import base64
import io
import logging
from typing import Optional

import qrcode

from app.core.config import settings
from app.core.metrics import qr_code_failures_total

logger = logging.getLogger(__name__)


def build_join_url(invitation_code: str) -> str:
    return f"{settings.FRONTEND_BASE_URL.rstrip('/')}/invite/{invitation_code}"


def generate_project_qr(invitation_code: str) -> Optional[str]:
    """
    Render the join link for ``invitation_code`` as a PNG data URL.

    A project without a QR image is still fully usable, so failures are
    logged and reported as None instead of failing project creation.
    """
    try:
        img = qrcode.make(build_join_url(invitation_code))
        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
    except (OSError, ValueError) as e:
        qr_code_failures_total.inc()
        logger.warning(f"Failed to generate QR code for invitation {invitation_code}: {e}")
        return None

    qr_code_base64 = base64.b64encode(buffered.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{qr_code_base64}"
