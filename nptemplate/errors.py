# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations


class NanopubError(Exception):
    pass


class ConfigError(NanopubError):

    def __init__(self, msg: str, reasons: list[str]) -> None:
        super().__init__(msg)
        self.reasons = reasons


class FetcherError(NanopubError):
    pass


class NotFound(FetcherError):
    pass


class ProtocolError(FetcherError):
    pass


class ParseError(NanopubError):
    pass


class MalformedNanopublicationError(NanopubError):
    pass


class TemplateError(NanopubError):
    pass


class SigningError(NanopubError):

    def __init__(self, msg: str, reasons: list[str] | None = None) -> None:
        super().__init__(msg)
        self.reasons = reasons or []


class NotOverriddenError(NanopubError, NotImplementedError):
    pass
