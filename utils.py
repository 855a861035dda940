from datetime import date, datetime, timezone


# ISO date of today, the form offer validity windows are compared in
def today_iso():
    return date.today().isoformat()


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat()


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_email(email):
    return (email or "").strip().lower()
