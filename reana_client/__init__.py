"""
reana_client package initialisation.

``reana_client.__version__`` is resolved at import-time from the installed
distribution metadata so that the ``version`` and ``ping`` commands report the
same value as ``pip show reana-client``.

Module attributes
-----------------
__version__ : str
    Semantic version derived from the installed wheel.
"""

from importlib.metadata import PackageNotFoundError, version

# --------------------------------------------------------------------------- #
# Version resolution
# --------------------------------------------------------------------------- #
try:
    # Using the *distribution* name works for both regular and editable installs.
    __version__: str = version("reana-client")
except PackageNotFoundError:
    # Source tree without an installed wheel (e.g. early development checkout).
    __version__ = "0.0.0"

__all__: list[str] = ["__version__"]
