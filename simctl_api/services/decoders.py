"""Decoders turning simctl output bytes into typed models.

Malformed output is an expected condition (the format drifts between Xcode
releases), so every parser failure is reported as ``DecodeError``.  A model
is only returned when the whole document validated.
"""

from __future__ import annotations

import plistlib
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from simctl_api.errors import DecodeError
from simctl_api.utils import openstep

M = TypeVar("M")

# Anything else is treated as an OpenStep text plist
_PLISTLIB_HEADERS = (b"bplist", b"<?xml", b"<!DOCTYPE", b"<plist", b"\xef\xbb\xbf<")


class Decoder(Generic[M]):
    format = ""

    def __init__(self, model: type[M]) -> None:
        self.model = model
        self._adapter: TypeAdapter[M] = TypeAdapter(model)

    @property
    def model_name(self) -> str:
        return getattr(self.model, "__name__", repr(self.model))

    def decode(self, data: bytes) -> M:
        raise NotImplementedError

    def __call__(self, data: bytes) -> M:
        return self.decode(data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model_name})"


class JSONDecoder(Decoder[M]):
    """Strict schema match; unknown keys are ignored, missing ones fail."""

    format = "json"

    def decode(self, data: bytes) -> M:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as exc:
            raise DecodeError(self.format, self.model_name, exc) from exc


class PropertyListDecoder(Decoder[M]):
    """XML, binary or OpenStep text property lists, validated like JSON."""

    format = "plist"

    def decode(self, data: bytes) -> M:
        try:
            raw = _load_plist(data)
        except Exception as exc:
            # plistlib raises assorted error types on malformed input
            raise DecodeError(self.format, self.model_name, exc) from exc
        try:
            return self._adapter.validate_python(raw)
        except ValidationError as exc:
            raise DecodeError(self.format, self.model_name, exc) from exc


def _load_plist(data: bytes) -> Any:
    if data.startswith(_PLISTLIB_HEADERS):
        return plistlib.loads(data)
    return openstep.loads(data.decode("utf-8"))
