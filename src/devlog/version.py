"""Installed devlog version, read from the package metadata."""

from __future__ import annotations

import importlib.metadata as importlib_metadata

try:
    __version__ = importlib_metadata.version("devlog")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0+unknown"
