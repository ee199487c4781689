"""
Error taxonomy for extraction and export.

Every error carries a ``user_message`` that is safe to show as-is; the
exception text itself may contain diagnostic detail.
"""
from __future__ import annotations


class PlaylistProbeError(Exception):
    user_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class SourceError(PlaylistProbeError):
    """A collaborator (API, page, capture service) did not deliver."""

    user_message = "Failed to process the playlist. Check the link and try again."


class SourceUnavailable(SourceError):
    """Transport failure or non-success status."""

    def __init__(self, message: str | None = None, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class SourceEmpty(SourceError):
    """Well-formed response without usable data."""


class InvalidPlaylistReference(PlaylistProbeError, ValueError):
    user_message = "Please enter a valid YouTube playlist link."


class EmptyPlaylist(PlaylistProbeError):
    user_message = "No videos found in the playlist."


class ExtractionFailed(PlaylistProbeError):
    user_message = "Failed to process the playlist. Check the link and try again."


class ExtractionCancelled(PlaylistProbeError):
    user_message = "Extraction cancelled."


class PipelineBusy(PlaylistProbeError):
    user_message = "An extraction is already running. Wait for it to finish."


class EmptyInput(PlaylistProbeError, ValueError):
    user_message = "No data available to export yet."


class EncoderUnavailable(PlaylistProbeError):
    """Raised by an encoder that cannot run; the renderer degrades instead of failing."""

    user_message = "Export format not available."
