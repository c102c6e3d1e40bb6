"""Errors raised while composing form documents.

None of these are retried by the compositor. Final renders propagate them to the
caller; the live preview logs them and keeps the previous frame.
"""
from __future__ import annotations


class FormRenderError(Exception):
    """Base exception for document rendering."""


class AssetLoadError(FormRenderError):
    """A template image or the check icon could not be read or decoded."""

    def __init__(self, asset: str, reason: str = "") -> None:
        self.asset = asset
        self.reason = reason
        message = f"Could not load template asset '{asset}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SignatureDecodeError(FormRenderError):
    """The signature bytes are not a decodable image."""


class EncodeError(FormRenderError):
    """The finished render could not be encoded as PNG."""


class ConfigurationError(FormRenderError):
    """A field referenced by the layout has no position entry."""
