"""Codecs — translate typed values to and from the store's raw form."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, cast

from pydantic import TypeAdapter, ValidationError

from defaults_store.exceptions import DecodeError, EncodeError
from defaults_store.stores.base import RawValue

V = TypeVar("V")

_SCALARS = (str, int, float, bool)


def _is_json_native(value: Any, *, nested: bool = False) -> bool:
    if isinstance(value, _SCALARS):
        return True
    if value is None:
        return nested
    if isinstance(value, list):
        return all(_is_json_native(item, nested=True) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(k, str) and _is_json_native(v, nested=True) for k, v in value.items()
        )
    return False


class Codec(ABC, Generic[V]):
    """Encode/decode pair for one value type.

    ``decode(encode(v)) == v`` must hold for every value the codec accepts.
    Failures are raised as :class:`EncodeError` / :class:`DecodeError`;
    accessors translate them into "no write" and "absent" respectively.
    """

    @property
    @abstractmethod
    def type_name(self) -> str:
        """Human-readable name of the value type, for diagnostics."""
        ...

    @abstractmethod
    def encode(self, value: V) -> RawValue:
        """Return the raw form of *value* or raise :class:`EncodeError`."""
        ...

    @abstractmethod
    def decode(self, raw: RawValue) -> V:
        """Return the typed value held in *raw* or raise :class:`DecodeError`."""
        ...


class IdentityCodec(Codec[V]):
    """Pass-through codec for values every store can hold natively.

    Native means a top-level ``bytes`` value, or a JSON-shaped tree of
    ``str``, ``int``, ``float``, ``bool`` and ``None`` inside ``list`` and
    ``dict`` (string keys).  Anything else raises :class:`EncodeError`, so
    a value is accepted or refused the same way whatever store is wired in.
    Decoding never fails.
    """

    @property
    def type_name(self) -> str:
        return "primitive"

    def encode(self, value: V) -> RawValue:
        if not (isinstance(value, bytes) or _is_json_native(value)):
            raise EncodeError(type(value).__name__, "not a value the store can hold natively")
        return cast(RawValue, value)

    def decode(self, raw: RawValue) -> V:
        return cast(V, raw)


class JsonCodec(Codec[V]):
    """Schema-driven JSON codec built on a pydantic :class:`TypeAdapter`.

    Accepts any type pydantic can validate and serialize, such as models
    and dataclasses.  The raw form is UTF-8 JSON ``bytes``.  Payloads
    written under an older schema that no longer validate raise
    :class:`DecodeError`.

    Parameters:
        value_type: The type every stored value must conform to.
    """

    def __init__(self, value_type: Any) -> None:
        self._value_type = value_type
        self._adapter: TypeAdapter[V] = TypeAdapter(value_type)

    @property
    def value_type(self) -> Any:
        return self._value_type

    @property
    def type_name(self) -> str:
        return getattr(self._value_type, "__name__", repr(self._value_type))

    def encode(self, value: V) -> RawValue:
        try:
            return self._adapter.dump_json(value, warnings="error")
        except (TypeError, ValueError) as exc:
            # PydanticSerializationError is a ValueError
            raise EncodeError(self.type_name, str(exc)) from exc

    def decode(self, raw: RawValue) -> V:
        if not isinstance(raw, (bytes, str)):
            raise DecodeError(self.type_name, f"expected JSON text, got {type(raw).__name__}")
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as exc:
            raise DecodeError(self.type_name, str(exc)) from exc
