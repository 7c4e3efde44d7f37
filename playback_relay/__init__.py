"""Playback Relay - webhook, push and poll bridge for a single playback group"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("playback-relay")
except PackageNotFoundError:
    __version__ = "dev"
