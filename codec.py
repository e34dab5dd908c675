import io
from typing import BinaryIO, Callable, Dict, Optional

from bitops import CHUNK_SIZE, BitReader, BitWriter
from errors import CorruptStreamError
from header import read_header, write_header
from huffman import NO_NODE, HuffmanTree, build_tree, count_frequencies, generate_codes

ProgressCallback = Callable[[int, int], None]


def pack_symbols(
    codes: Dict[int, str],
    input_stream: BinaryIO,
    writer: BitWriter,
    total: int = 0,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Write the code of every byte of ``input_stream`` into ``writer``.

    The input is rewound to its start and read to the end. The writer is
    not flushed.

    :param codes: Code table covering every byte of the input.
    :type codes: Dict[int, str]
    :param input_stream: Seekable readable binary stream.
    :type input_stream: BinaryIO
    :param writer: Bit writer receiving the packed codes.
    :type writer: BitWriter
    :param total: Expected number of input bytes, reported to ``on_progress``.
    :type total: int
    :param on_progress: Optional callback ``on_progress(done, total)``
        invoked after each chunk.
    :type on_progress: Optional[Callable[[int, int], None]]
    :param chunk_size: Number of bytes requested per read.
    :type chunk_size: int
    :returns: Number of symbols encoded.
    :rtype: int
    :raises KeyError: If a byte has no code.
    """
    table = {symbol: (int(code, 2), len(code)) for symbol, code in codes.items()}
    done = 0
    input_stream.seek(0)
    while True:
        chunk = input_stream.read(chunk_size)
        if not chunk:
            break
        for byte in chunk:
            code, length = table[byte]
            writer.write_bits(code, length)
        done += len(chunk)
        if on_progress is not None:
            on_progress(done, total)
    return done


def unpack_symbols(
    tree: HuffmanTree,
    total: int,
    input_stream: BinaryIO,
    output_stream: BinaryIO,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Decode exactly ``total`` symbols by walking ``tree`` bit by bit.

    Bits left in the stream after the last symbol are padding and are not
    read.

    :param tree: Tree rebuilt from the container header.
    :type tree: HuffmanTree
    :param total: Number of symbols to decode.
    :type total: int
    :param input_stream: Readable binary stream positioned at the bitstream.
    :type input_stream: BinaryIO
    :param output_stream: Writable binary stream receiving decoded bytes.
    :type output_stream: BinaryIO
    :param on_progress: Optional callback ``on_progress(done, total)``.
    :type on_progress: Optional[Callable[[int, int], None]]
    :param chunk_size: Number of bytes moved per read/write.
    :type chunk_size: int
    :returns: Number of symbols decoded (always ``total``).
    :rtype: int
    :raises CorruptStreamError: If the bitstream ends early or holds a bit
        sequence with no matching code.
    """
    reader = BitReader(input_stream, chunk_size)
    output = bytearray()
    decoded = 0
    node = tree.root

    while decoded < total:
        try:
            bit = reader.read_bit()
        except EOFError:
            raise CorruptStreamError(
                f"Bitstream ended after {decoded} of {total} symbols"
            ) from None
        node = tree.child(node, bit)
        if node == NO_NODE:
            raise CorruptStreamError(
                f"Invalid code in bitstream at symbol {decoded}"
            )
        if tree.is_leaf(node):
            output.append(tree.symbols[node])
            decoded += 1
            node = tree.root
            if len(output) >= chunk_size:
                output_stream.write(output)
                output = bytearray()
                if on_progress is not None:
                    on_progress(decoded, total)

    if output:
        output_stream.write(output)
    return decoded


class HuffmanCodec:
    """Huffman compressor/decompressor over binary streams.

    The codec keeps no state between calls; an instance only carries its
    chunk size and stage callback, so one instance may be reused.

    :ivar CHUNK_SIZE: Default number of bytes moved per read/write.
    :type CHUNK_SIZE: int
    :ivar chunk_size: Chunk size used by this instance.
    :type chunk_size: int
    :ivar on_stage: Optional callback receiving the name of each step.
    :type on_stage: Optional[Callable[[str], None]]
    """

    CHUNK_SIZE = CHUNK_SIZE

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        on_stage: Optional[Callable[[str], None]] = None,
    ):
        """Configure the codec.

        :param chunk_size: I/O chunk size, ``CHUNK_SIZE`` if omitted.
        :type chunk_size: Optional[int]
        :param on_stage: Optional callback ``on_stage(message)`` announcing
            each pipeline step.
        :type on_stage: Optional[Callable[[str], None]]
        :returns: None
        :rtype: None
        """
        self.chunk_size = chunk_size or self.CHUNK_SIZE
        self.on_stage = on_stage

    def _stage(self, message: str):
        """Forward ``message`` to the stage callback, if one is set.

        :param message: Name of the step about to run.
        :type message: str
        :returns: None
        :rtype: None
        """
        if self.on_stage is not None:
            self.on_stage(message)

    def compress(
        self,
        input_stream: BinaryIO,
        output_stream: BinaryIO,
        on_progress: Optional[ProgressCallback] = None,
    ) -> int:
        """Compress ``input_stream`` into ``output_stream``.

        The input is read twice, once to count frequencies and once to encode,
        so it must be seekable. An empty input writes nothing.

        :param input_stream: Seekable readable binary stream.
        :type input_stream: BinaryIO
        :param output_stream: Writable binary stream.
        :type output_stream: BinaryIO
        :param on_progress: Optional callback ``on_progress(done, total)``
            reporting input bytes encoded.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bytes written to ``output_stream``.
        :rtype: int
        """
        self._stage("Building frequency table")
        frequencies = count_frequencies(input_stream, self.chunk_size)
        if not frequencies:
            self._stage("Input is empty")
            return 0
        total = sum(frequencies.values())

        self._stage("Building Huffman tree")
        tree = build_tree(frequencies)

        self._stage("Generating Huffman codes")
        codes = generate_codes(tree)

        self._stage("Writing header")
        header_len = write_header(output_stream, frequencies)

        self._stage("Writing compressed data")
        writer = BitWriter(output_stream, self.chunk_size)
        pack_symbols(
            codes, input_stream, writer, total, on_progress, self.chunk_size
        )
        body_len = writer.flush()

        if on_progress is not None:
            on_progress(total, total)
        return header_len + body_len

    def decompress(
        self,
        input_stream: BinaryIO,
        output_stream: BinaryIO,
        on_progress: Optional[ProgressCallback] = None,
    ) -> int:
        """Decompress data produced by :meth:`compress`.

        :param input_stream: Readable binary stream positioned at the
            container start.
        :type input_stream: BinaryIO
        :param output_stream: Writable binary stream.
        :type output_stream: BinaryIO
        :param on_progress: Optional callback ``on_progress(done, total)``
            reporting bytes recovered.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bytes written to ``output_stream``.
        :rtype: int
        :raises MalformedHeaderError: If the header is invalid or truncated.
        :raises CorruptStreamError: If the bitstream cannot be decoded to
            the declared number of symbols.
        """
        self._stage("Reading header")
        frequencies = read_header(input_stream)
        if not frequencies:
            self._stage("Input is empty")
            return 0
        total = sum(frequencies.values())

        self._stage("Rebuilding Huffman tree")
        tree = build_tree(frequencies)

        self._stage("Decoding data")
        decoded = unpack_symbols(
            tree, total, input_stream, output_stream, on_progress, self.chunk_size
        )

        if on_progress is not None:
            on_progress(decoded, total)
        return decoded


def compress_bytes(data: bytes, codec: Optional[HuffmanCodec] = None) -> bytes:
    """Compress an in-memory byte string."""
    codec = codec or HuffmanCodec()
    output = io.BytesIO()
    codec.compress(io.BytesIO(data), output)
    return output.getvalue()


def decompress_bytes(data: bytes, codec: Optional[HuffmanCodec] = None) -> bytes:
    """Decompress an in-memory byte string produced by :func:`compress_bytes`."""
    codec = codec or HuffmanCodec()
    output = io.BytesIO()
    codec.decompress(io.BytesIO(data), output)
    return output.getvalue()
