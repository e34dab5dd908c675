from typing import BinaryIO

CHUNK_SIZE = 64 * 1024  #: Default number of bytes moved per stream read/write


class BitWriter:
    """Bit-packing writer over a binary output stream.

    Accumulates individual bits into bytes, buffers the completed bytes and
    drains them to ``stream`` in chunks.

    :ivar stream: Destination stream.
    :type stream: BinaryIO
    :ivar buffer: Completed bytes not yet written to ``stream``.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    :ivar bytes_written: Number of bytes already handed to ``stream``.
    :type bytes_written: int
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE):
        """Initialize an empty bit writer.

        :param stream: Writable binary stream receiving the packed bytes.
        :type stream: BinaryIO
        :param chunk_size: Buffered byte count that triggers a write.
        :type chunk_size: int
        :returns: None
        :rtype: None
        """
        self.stream = stream
        self.chunk_size = chunk_size
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0
        self.bytes_written = 0

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value``, MSB first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write.
        :type nbits: int
        :returns: None
        :rtype: None
        """
        for i in range(nbits - 1, -1, -1):
            self.bit_buffer = (self.bit_buffer << 1) | ((value >> i) & 1)
            self.bit_count += 1
            if self.bit_count == 8:
                self.buffer.append(self.bit_buffer)
                self.bit_buffer = 0
                self.bit_count = 0
        if len(self.buffer) >= self.chunk_size:
            self._drain()

    def _drain(self):
        """Write all completed bytes to the stream."""
        if self.buffer:
            self.stream.write(self.buffer)
            self.bytes_written += len(self.buffer)
            self.buffer = bytearray()

    def flush(self) -> int:
        """Pad the pending bits (if any) with zeros and drain the buffer.

        :returns: Total number of bytes written to the stream.
        :rtype: int
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        self._drain()
        return self.bytes_written


class BitReader:
    """Bit reader over a binary input stream.

    Pulls ``chunk_size`` bytes from the stream whenever the current chunk is
    used up.

    :ivar stream: Source stream.
    :type stream: BinaryIO
    :ivar data: Current chunk read from ``stream``.
    :type data: bytes
    :ivar pos: Index of the next unread byte in ``data``.
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_count: Number of unread bits remaining in ``bit_buffer`` (0-8).
    :type bit_count: int
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE):
        """Create a bit reader for ``stream``.

        :param stream: Readable binary stream positioned at the first packed byte.
        :type stream: BinaryIO
        :param chunk_size: Number of bytes requested per read.
        :type chunk_size: int
        :returns: None
        :rtype: None
        """
        self.stream = stream
        self.chunk_size = chunk_size
        self.data = b""
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0

    def read_bit(self) -> int:
        """Read the next bit, most significant bit of each byte first.

        :returns: ``0`` or ``1``.
        :rtype: int
        :raises EOFError: If the stream has no more data.
        """
        if self.bit_count == 0:
            if self.pos >= len(self.data):
                self.data = self.stream.read(self.chunk_size)
                self.pos = 0
                if not self.data:
                    raise EOFError("Unexpected end of data")
            self.bit_buffer = self.data[self.pos]
            self.pos += 1
            self.bit_count = 8
        self.bit_count -= 1
        return (self.bit_buffer >> self.bit_count) & 1

