"""jxauth

A native replacement for the Jagex launcher: authenticates a Jagex account,
keeps the session fresh across invocations and launches game clients with
the session bound into their environment.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("jxauth")
except PackageNotFoundError:
    # Fallback for source checkouts that were never installed
    __version__ = "0.1.0"
__author__ = "jxauth"
