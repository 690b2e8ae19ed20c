"""
Profile transcription rules (MongoDB profile document → app.profiles row)
"""
from pathlib import PurePosixPath
from typing import Any, Dict, Optional

from cityvizor_migrate.domain.errors import UnknownStatus
from cityvizor_migrate.utils.numbers import to_int, to_number

# Source status → destination status
PROFILE_STATUSES = {
    "active": "visible",
    "pending": "pending",
    "hidden": "hidden",
}

# mapasamospravy.cz codes at or above this value are not valid registry codes
MAPASAMOSPRAVY_LIMIT = 1000


def map_status(status: Any) -> str:
    try:
        return PROFILE_STATUSES[status]
    except (KeyError, TypeError):
        raise UnknownStatus(status) from None


def clamp_mapasamospravy(code: Any) -> Optional[int]:
    number = to_int(code)
    if number is None or number >= MAPASAMOSPRAVY_LIMIT:
        return None
    return number


def avatar_extension(avatar: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Extension of the stored avatar filename ("logo.png" → ".png")

    Returns None when the profile has no avatar.
    """
    if not avatar:
        return None
    return PurePosixPath(avatar.get("name") or "").suffix


def split_gps(gps: Any) -> tuple[Optional[float], Optional[float]]:
    if not gps:
        return None, None
    x = to_number(gps[0]) if len(gps) > 0 else None
    y = to_number(gps[1]) if len(gps) > 1 else None
    return (
        float(x) if x is not None else None,
        float(y) if y is not None else None,
    )


def profile_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the app.profiles row for a source profile document

    Raises:
        UnknownStatus: status is not active/pending/hidden
    """
    gps_x, gps_y = split_gps(doc.get("gps"))
    return {
        "name": doc.get("name"),
        "status": map_status(doc.get("status")),
        "url": doc.get("url"),
        "email": doc.get("email"),
        "ico": str(doc["ico"]) if doc.get("ico") is not None else None,
        "edesky": to_int(doc.get("edesky")),
        "mapasamospravy": clamp_mapasamospravy(doc.get("mapasamospravy")),
        "gps_x": gps_x,
        "gps_y": gps_y,
        "avatar_type": avatar_extension(doc.get("avatar")),
    }
