from datetime import timezone as dt_tz


def to_iso(dt):
    if dt is None:
        return None
    return dt.astimezone(dt_tz.utc).isoformat().replace("+00:00", "Z")
