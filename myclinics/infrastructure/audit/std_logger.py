import json
import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from ...application.ports.audit_logger import AuditLogger

audit_logger = logging.getLogger("myclinics.audit")


def mask_email(email: Optional[str]) -> str:
    """Short stable digest so audit lines can be correlated without storing addresses."""
    normalized = (email or "").strip().lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:16]


class StdAuditLogger(AuditLogger):
    """Writes one JSON line per security event to the ``myclinics.audit`` logger."""

    def log(self, action: str, email: str, user_id: Optional[str] = None, ip_address: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        record: Dict[str, Any] = {"at": datetime.now(timezone.utc).isoformat(), "event": action, "ok": success, "who": mask_email(email)}
        if user_id:
            record["user_id"] = user_id
        if ip_address:
            record["ip"] = ip_address
        if details:
            record.update({k: v for k, v in details.items() if k not in record})
        level = logging.INFO if success else logging.WARNING
        audit_logger.log(level, "AUDIT %s", json.dumps(record, ensure_ascii=False, default=str))
