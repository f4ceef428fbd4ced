"""Codec boundary: format-specific decode/encode behind one protocol."""

from .base import Codec, EncodeFailure, FormatError
from .json_codec import JsonCodec
from .toon import ToonCodec

__all__ = ["Codec", "EncodeFailure", "FormatError", "JsonCodec", "ToonCodec"]
