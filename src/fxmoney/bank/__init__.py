"""Banks convert money between currencies."""

from fxmoney.bank.base import BaseBank
from fxmoney.bank.rate_formats import RateCodec, get_rate_format, list_rate_formats, register_rate_format
from fxmoney.bank.variable_exchange import VariableExchange

__all__ = ["BaseBank", "RateCodec", "VariableExchange", "get_rate_format", "list_rate_formats", "register_rate_format"]
