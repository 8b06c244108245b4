"""firestore-cli — read, list and query a Cloud Firestore collection.

Documents are printed as JSON, one per line, built on the
google-cloud-firestore client with a strict layered architecture.
"""

from firestore_cli.version import __version__

__all__: list[str] = ["__version__"]
