"""
GLTF Extension and Extras Passthrough

Extension objects and extras payloads are kept as opaque, deep-frozen JSON
values. Consumers look them up by name and either take the raw value or ask
for a typed decoding through a decoder registered for that extension.
"""

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional


# Extensions the loader implements itself. Anything else listed in
# extensionsRequired must be declared supported by the caller.
SUPPORTED_EXTENSIONS = frozenset({
    "KHR_mesh_quantization",
})

ExtensionDecoder = Callable[[Any], Any]


def freeze_json(value: Any) -> Any:
    """Deep-freeze a decoded JSON value: objects become read-only mappings, arrays tuples."""
    if isinstance(value, dict):
        return MappingProxyType({key: freeze_json(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_json(item) for item in value)
    return value


def thaw_json(value: Any) -> Any:
    """Turn a frozen JSON value back into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw_json(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw_json(item) for item in value]
    return value


class ExtensionMap(Mapping):
    """
    Read-only mapping of extension name to its raw (frozen) JSON object.

    Decoders are supplied by the caller at load time, so two documents loaded
    with different options never share decoding state.
    """

    __slots__ = ("_values", "_decoders")

    def __init__(self, values: Optional[Mapping[str, Any]] = None,
                 decoders: Optional[Mapping[str, ExtensionDecoder]] = None):
        frozen = {name: freeze_json(value) for name, value in (values or {}).items()}
        self._values = MappingProxyType(frozen)
        self._decoders = decoders if decoders is not None else MappingProxyType({})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        return hash(tuple(self._values))

    def __repr__(self) -> str:
        return f"ExtensionMap({list(self._values)})"

    def raw(self, name: str) -> Any:
        """Return the raw JSON subtree for an extension, or None if absent."""
        return self._values.get(name)

    def has_decoder(self, name: str) -> bool:
        return name in self._decoders

    def decode(self, name: str) -> Any:
        """
        Decode an extension with its registered decoder.

        Returns None when the extension is absent. Raises KeyError when the
        extension is present but no decoder was registered for it.
        """
        if name not in self._values:
            return None
        decoder = self._decoders.get(name)
        if decoder is None:
            raise KeyError(f"No decoder registered for extension '{name}'")
        return decoder(self._values[name])


EMPTY_EXTENSIONS = ExtensionMap()


def build_extension_map(values: Optional[Dict[str, Any]],
                        decoders: Optional[Mapping[str, ExtensionDecoder]] = None) -> ExtensionMap:
    """Build an ExtensionMap, sharing the empty instance when there is nothing to hold."""
    if not values:
        return EMPTY_EXTENSIONS if not decoders else ExtensionMap(None, decoders)
    return ExtensionMap(values, decoders)
