from fxmoney.domain.monetary.currency import Currency, CurrencyType


# Fiat currencies
USD = Currency("USD", 2, "US Dollar", CurrencyType.FIAT)
EUR = Currency("EUR", 2, "Euro", CurrencyType.FIAT)
GBP = Currency("GBP", 2, "British Pound", CurrencyType.FIAT)
JPY = Currency("JPY", 0, "Japanese Yen", CurrencyType.FIAT)
AUD = Currency("AUD", 2, "Australian Dollar", CurrencyType.FIAT)
CAD = Currency("CAD", 2, "Canadian Dollar", CurrencyType.FIAT)
CHF = Currency("CHF", 2, "Swiss Franc", CurrencyType.FIAT)
CZK = Currency("CZK", 2, "Czech Koruna", CurrencyType.FIAT)
BHD = Currency("BHD", 3, "Bahraini Dinar", CurrencyType.FIAT)
KWD = Currency("KWD", 3, "Kuwaiti Dinar", CurrencyType.FIAT)
# Five khoums make one ouguiya
MRU = Currency("MRU", 1, "Mauritanian Ouguiya", CurrencyType.FIAT, subunit_to_unit=5)

# Crypto currencies
BTC = Currency("BTC", 8, "Bitcoin", CurrencyType.CRYPTO)
ETH = Currency("ETH", 18, "Ethereum", CurrencyType.CRYPTO)
USDT = Currency("USDT", 6, "Tether", CurrencyType.CRYPTO)

# Commodities
XAU = Currency("XAU", 4, "Gold", CurrencyType.COMMODITY)
XAG = Currency("XAG", 4, "Silver", CurrencyType.COMMODITY)

PREDEFINED_CURRENCIES = (USD, EUR, GBP, JPY, AUD, CAD, CHF, CZK, BHD, KWD, MRU, BTC, ETH, USDT, XAU, XAG)

# Register all predefined currencies
for _currency in PREDEFINED_CURRENCIES:
    Currency.register(_currency, overwrite=True)
