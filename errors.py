class HuffmanError(Exception):
    """Base class for errors raised by the Huffman codec."""


class MalformedHeaderError(HuffmanError, ValueError):
    """The container header is truncated or describes an impossible table."""


class CorruptStreamError(HuffmanError, ValueError):
    """The packed bitstream cannot be decoded to the declared symbol count."""
