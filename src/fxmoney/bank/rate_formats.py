"""Named codecs used by `VariableExchange.export_rates` / `import_rates`.

Every codec converts between a flat mapping `{"USD_TO_EUR": Decimal("1.33"), ...}` and
its serialized form. Built-in formats:

- `json`: JSON object; rates are written as exact JSON numbers and read back as Decimal.
- `yaml`: YAML mapping (PyYAML); rates are YAML floats read back as Decimal.
- `pickle`: Python object serialization (bytes). Only load data you trust.
- `csv`: two columns `pair,rate` written and read with pandas.
"""

from __future__ import annotations

import io
import json
import logging
import pickle
from collections.abc import Mapping
from decimal import Decimal
from typing import Dict, Protocol, Union

import pandas as pd
import yaml

from fxmoney.errors import UnknownRateFormat
from fxmoney.utils.decimal_tools import as_decimal

logger = logging.getLogger(__name__)

EncodedRates = Union[str, bytes]


# region Interface


class RateCodec(Protocol):
    """Encodes and decodes a `"FROM_TO_TO" -> rate` mapping."""

    def encode(self, rates: Mapping[str, Decimal]) -> EncodedRates:
        ...

    def decode(self, data: EncodedRates) -> Dict[str, Decimal]:
        ...


# endregion


def _rate_to_text(rate) -> str:
    return format(as_decimal(rate), "f")


def _as_text(data: EncodedRates) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data


def _as_rate_mapping(decoded, format_name: str) -> Dict[str, Decimal]:
    # Raise: every format carries one flat mapping
    if not isinstance(decoded, Mapping):
        raise ValueError(f"Cannot decode rates in format '{format_name}' because data is not a mapping, but: {type(decoded).__name__}")

    return {str(key): as_decimal(rate) for key, rate in decoded.items()}


class JsonRateCodec:
    """JSON object with exact decimal numbers."""

    def encode(self, rates: Mapping[str, Decimal]) -> str:
        # Numbers are written by hand: `json` would go through float and lose digits
        items = ", ".join(f"{json.dumps(key)}: {_rate_to_text(rate)}" for key, rate in rates.items())
        return "{" + items + "}"

    def decode(self, data: EncodedRates) -> Dict[str, Decimal]:
        decoded = json.loads(data, parse_float=Decimal, parse_int=Decimal)
        return _as_rate_mapping(decoded, "json")


class _RateDumper(yaml.SafeDumper):
    pass


class _RateLoader(yaml.SafeLoader):
    pass


def _represent_decimal(dumper: yaml.SafeDumper, value: Decimal):
    return dumper.represent_scalar("tag:yaml.org,2002:float", _rate_to_text(value))


def _construct_decimal(loader: yaml.SafeLoader, node):
    return Decimal(loader.construct_scalar(node).replace("_", ""))


_RateDumper.add_representer(Decimal, _represent_decimal)
_RateLoader.add_constructor("tag:yaml.org,2002:float", _construct_decimal)


class YamlRateCodec:
    """YAML mapping with decimal-exact floats."""

    def encode(self, rates: Mapping[str, Decimal]) -> str:
        return yaml.dump(dict(rates), Dumper=_RateDumper, default_flow_style=False, sort_keys=False)

    def decode(self, data: EncodedRates) -> Dict[str, Decimal]:
        decoded = yaml.load(_as_text(data), Loader=_RateLoader)
        return _as_rate_mapping(decoded if decoded is not None else {}, "yaml")


class PickleRateCodec:
    """Native Python object serialization."""

    def encode(self, rates: Mapping[str, Decimal]) -> bytes:
        return pickle.dumps(dict(rates))

    def decode(self, data: EncodedRates) -> Dict[str, Decimal]:
        # Raise: pickle data is binary
        if not isinstance(data, bytes):
            raise TypeError(f"Cannot decode rates in format 'pickle' because $data must be bytes, but provided value is: {type(data).__name__}")
        return _as_rate_mapping(pickle.loads(data), "pickle")


class CsvRateCodec:
    """Table with `pair` and `rate` columns."""

    COLUMNS = ("pair", "rate")

    def encode(self, rates: Mapping[str, Decimal]) -> str:
        frame = pd.DataFrame(
            {
                "pair": list(rates.keys()),
                "rate": [_rate_to_text(rate) for rate in rates.values()],
            },
            columns=list(self.COLUMNS),
        )
        return frame.to_csv(index=False)

    def decode(self, data: EncodedRates) -> Dict[str, Decimal]:
        # Read as strings so pandas never turns rates into floats
        frame = pd.read_csv(io.StringIO(_as_text(data)), dtype=str, keep_default_na=False)

        missing = [column for column in self.COLUMNS if column not in frame.columns]
        if missing:
            raise ValueError(f"Cannot decode rates in format 'csv' because columns {missing} are missing")

        return {pair: as_decimal(rate) for pair, rate in zip(frame["pair"], frame["rate"])}


# region Registry

_RATE_FORMATS: Dict[str, RateCodec] = {
    "json": JsonRateCodec(),
    "yaml": YamlRateCodec(),
    "pickle": PickleRateCodec(),
    "csv": CsvRateCodec(),
}


def _normalize_format(format_name: str) -> str:
    if not isinstance(format_name, str):
        raise UnknownRateFormat(f"Rate format must be a name like 'json', but provided value is: {format_name!r}")
    return format_name.strip().lower()


def register_rate_format(format_name: str, codec: RateCodec, overwrite: bool = False) -> None:
    """Make $codec available under $format_name.

    Raises:
        ValueError: If the format exists and $overwrite is False.
        TypeError: If $codec does not provide `encode` and `decode`.
    """
    name = _normalize_format(format_name)

    if not callable(getattr(codec, "encode", None)) or not callable(getattr(codec, "decode", None)):
        raise TypeError(f"$codec must provide `encode` and `decode`, but provided value is: {codec!r}")

    if name in _RATE_FORMATS and not overwrite:
        raise ValueError(f"Rate format '{name}' already exists. Use overwrite=True to replace it.")

    _RATE_FORMATS[name] = codec
    logger.debug(f"Registered rate format '{name}' ({codec.__class__.__name__})")


def unregister_rate_format(format_name: str) -> None:
    """Remove $format_name from the registry. Unknown names are ignored."""
    _RATE_FORMATS.pop(_normalize_format(format_name), None)


def get_rate_format(format_name: str) -> RateCodec:
    """Return the codec registered under $format_name.

    Raises:
        UnknownRateFormat: If no codec has that name.
    """
    name = _normalize_format(format_name)
    codec = _RATE_FORMATS.get(name)
    if codec is None:
        raise UnknownRateFormat(f"Unknown rate format '{format_name}'. Available formats: {list_rate_formats()}")
    return codec


def list_rate_formats() -> list[str]:
    return list(_RATE_FORMATS.keys())


# endregion
