from datetime import datetime
import platform

def start_audit(source: str | None = None) -> list[str]:
    audit = [f"Session start: {datetime.now().isoformat()}",
             f"Platform: {platform.platform()}"]
    if source:
        audit.append(f"Source: {source}")
    return audit

def log_step(audit: list[str], msg: str):
    audit.append(msg)
