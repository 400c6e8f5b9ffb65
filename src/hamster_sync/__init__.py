__version__ = "0.3.0"


def version() -> str:
    return __version__
