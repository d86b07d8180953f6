# byte counts are scaled by 1024 but labelled kb/mb/gb/tb, the same way
# the cluster itself prints them in _cat output ("10.2gb", "214.2kb")

UNITS = ["kb", "mb", "gb", "tb"]


def humanize_bytes(size):
    """
    scale a raw byte count down to something readable

    returns (scaled_value, unit), e.g. humanize_bytes(1536) -> (1.5, 'kb')
    the step only happens when the value is strictly greater than 1024,
    so 1024 stays as bytes
    """
    units = list(UNITS)
    unit = "b"
    size_short = float(size or 0)
    while size_short > 1024 and units:
        size_short /= 1024
        unit = units.pop(0)
    return size_short, unit


def format_bytes(size):
    size_short, unit = humanize_bytes(size)
    return "{:.2f} {}".format(size_short, unit)
