from datetime import datetime, timezone


def utc_now() -> datetime:
    """当前 UTC 时间（带时区）"""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """统一转换为带时区的 UTC 时间；无时区信息的时间按 UTC 处理（SQLite 读出的时间不带时区）"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
