# driverdash/formatters.py


def format_duration(seconds: int) -> str:
    """HH:MM:SS, hours keep growing past 99."""
    seconds = max(0, int(seconds))
    h, rest = divmod(seconds, 3600)
    m, s = divmod(rest, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_currency(amount: float, symbol: str = "€") -> str:
    # German grouping: 1.234,56 €
    text = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 and round(abs(amount), 2) else ""
    return f"{sign}{text} {symbol}"
