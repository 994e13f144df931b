import logging
from datetime import datetime

from sn_admin.config import ACTIVITY_LOG_TABLE, MAX_LOG_LENGTH

_log_cache = {}
logger = logging.getLogger("sn_admin")


def log_debug_event(record_id=None, source: str = "BACKEND", label: str = "", message: str = ""):
    timestamp = datetime.utcnow().isoformat()
    tag = f"[{timestamp}] [{source}] {label}: {message}"

    if not record_id:
        logger.debug(f"📄 Debug (no record_id): {tag}")
        return

    _log_cache.setdefault(str(record_id), []).append(tag)


def pending_debug_log(record_id) -> list:
    return list(_log_cache.get(str(record_id), []))


def flush_debug_log(db, record_id, action_type: str = "booking_updated", user_role: str = "admin"):
    """
    Write the cached debug lines for a booking as one activity_logs row.
    Failures are logged and swallowed so a logging hiccup never fails the
    booking operation that produced it.
    """
    if not record_id:
        return ""

    key = str(record_id)
    logs = _log_cache.get(key, [])
    if not logs:
        return ""

    combined = "\n".join(logs).strip()
    if len(combined) > MAX_LOG_LENGTH:
        combined = combined[-MAX_LOG_LENGTH:]
    _log_cache[key] = []

    payload = {
        "action_type": action_type,
        "entity_type": "booking",
        "entity_id": key,
        "user_role": user_role,
        "details": {"log": combined, "lines": len(combined.splitlines())},
    }

    try:
        db.insert(ACTIVITY_LOG_TABLE, payload)
        logger.info(f"✅ Debug log flushed for booking {key}")
    except Exception as e:
        logger.error(f"❌ Error flushing debug log for booking {key}: {e}")

    return combined
