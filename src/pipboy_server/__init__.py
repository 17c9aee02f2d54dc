"""Pip-Boy Party Server.

Backend for a tabletop Pip-Boy companion app: accounts, a shared item
catalog, personal inventories, party storage, a quest log and map markers,
with change notifications pushed to every connected viewer.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``;
``api/server.py`` and the health routes import it from here.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("pipboy_server")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
