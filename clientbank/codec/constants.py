"""Literals of the 1C client-bank exchange format."""

HEADER = "1CClientBankExchange"
FOOTER = "КонецФайла"

EXCHANGE_VERSION = "1.03"
DEFAULT_SENDER = "Бухгалтерия предприятия, редакция 3.0"

# Wire line terminator; parsing works on '\n' after normalisation
LINE_BREAK = "\r\n"

DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M:%S"

# Line index (0-based) that declares the encoding
ENCODING_LINE = 2
