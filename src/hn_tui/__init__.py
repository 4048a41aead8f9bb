"""hn-tui - A terminal client for browsing Hacker News."""

try:
    from importlib.metadata import version

    __version__ = version("hn-tui")
except Exception:
    __version__ = "0.0.0+unknown"
