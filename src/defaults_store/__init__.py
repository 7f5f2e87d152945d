"""defaults_store — typed, observable key-value settings.

Read and write named settings through typed accessors, and subscribe to a
stream that starts with the current value and follows every change made in
the same process.
"""

import logging

from defaults_store.accessor import CodableDefaults, Defaults
from defaults_store.bus import ChangeBus, Subscription
from defaults_store.codec import Codec, IdentityCodec, JsonCodec
from defaults_store.config import StoreConfig, create_store
from defaults_store.exceptions import (
    DecodeError,
    DefaultsError,
    EncodeError,
    StoreConfigError,
    StoreError,
)
from defaults_store.keys import AccessorKind, DefaultsKey, Topic
from defaults_store.manager import DefaultsManager

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AccessorKind",
    "ChangeBus",
    "Codec",
    "CodableDefaults",
    "DecodeError",
    "Defaults",
    "DefaultsError",
    "DefaultsKey",
    "DefaultsManager",
    "EncodeError",
    "IdentityCodec",
    "JsonCodec",
    "StoreConfig",
    "StoreConfigError",
    "StoreError",
    "Subscription",
    "Topic",
    "create_store",
]
