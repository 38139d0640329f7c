import datetime


def format_currency(price: float) -> str:
    """Whole-dollar AUD amount, e.g. ``A$1,234``."""

    return f"A${round(price):,}"


def format_time(timestamp_utc: int) -> str:
    moment = datetime.datetime.fromtimestamp(timestamp_utc, tz=datetime.timezone.utc)
    return f"{moment:%a, %b} {moment.day}, {moment:%H:%M} UTC"


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(max(seconds, 0), 3600)
    return f"{hours}h {remainder // 60:02d}m"
