# roadit/services/errors.py
"""Errors raised by the third-party service wrappers (assessment, geocoding)."""


class UpstreamError(Exception):
    """A remote service failed. The message is safe to show to the user."""


class MissingCredentials(UpstreamError):
    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"{setting} is not configured.")
