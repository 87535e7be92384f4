"""SHA-1 digest (readable reference implementation).

This module implements the SHA-1 padding and compression pipeline
(FIPS 180-4): the input is split into 512-bit blocks, the final block is
padded with a single 1 bit, zeros and the 64-bit big-endian bit length, and
every block is folded into a five-word running state by an 80-step
compression function.

"""
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

MASK = 0xffffffff


def rotate_left(x, n):
    """Rotate the 32-bit word x left by n bits (0 < n < 32)."""
    assert 0 < n < 32
    x = x & MASK
    return ((x << n) | (x >> (32 - n))) & MASK


def format_word(x):
    """Render a 32-bit word as 8 uppercase hex digits."""
    return "%08X" % (x & MASK)


class SHA1Digest(namedtuple("SHA1Digest", ["h0", "h1", "h2", "h3", "h4"])):
    """Final 160-bit SHA-1 state, with its output projections."""

    __slots__ = ()

    def words(self):
        """Return the digest as a list of five unsigned 32-bit integers."""
        return list(self)

    def hex_string(self):
        """Return e.g. 'A9993E36 4706816A BA3E2571 7850C26C 9CD0D89D'."""
        return " ".join(format_word(h) for h in self)

    def __str__(self):
        return self.hex_string()


class SHA1:

    # Initial state h0..h4
    IV = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)

    # One constant per 20-step round
    K_table = (0x5A827999, 0x6ED9EBA1, 0x8F1BBCDC, 0xCA62C1D6)

    BLOCK_BYTES = 64

    @staticmethod
    def K(i):
        """Return the round constant for step index i (0 <= i < 80)."""
        if not 0 <= i < 80:
            raise ValueError("Invalid loop index")
        return SHA1.K_table[i // 20]

    @staticmethod
    def F(b, c, d, i):
        """SHA-1 non-linear boolean function selected by step index i.

        Round 0 (i < 20): (b & c) | (~b & d)
        Round 1 (i < 40): b ^ c ^ d
        Round 2 (i < 60): (b & c) | (b & d) | (c & d)
        Round 3 (i < 80): b ^ c ^ d
        """
        if i < 0:
            raise ValueError("Invalid loop index")
        elif i < 20:
            return ((b & c) | (~b & d)) & MASK
        elif i < 40:
            return b ^ c ^ d
        elif i < 60:
            return (b & c) | (b & d) | (c & d)
        elif i < 80:
            return b ^ c ^ d
        else:
            raise ValueError("Invalid loop index")

    @staticmethod
    def expand_schedule(block):
        """Extend a 16-word block to the 80-word message schedule."""
        assert len(block) == 16
        w = list(block)
        for i in range(16, 80):
            w.append(rotate_left(w[i-3] ^ w[i-8] ^ w[i-14] ^ w[i-16], 1))
        return w

    @staticmethod
    def sha1_iteration(a, b, c, d, e, w, i):
        """Perform one SHA-1 step (i) on state (a,b,c,d,e) with schedule word w."""
        temp = (rotate_left(a, 5) + SHA1.F(b, c, d, i) + e + SHA1.K(i) + w) & MASK
        return temp, a, rotate_left(b, 30), c, d

    @staticmethod
    def sha1_chunk(state, block):
        """Compress one 16-word block into state and return the new state.

        state is a 5-tuple (h0..h4); the caller's value is never modified.
        """
        assert len(state) == 5
        w = SHA1.expand_schedule(block)
        a, b, c, d, e = state

        for i in range(80):
            a, b, c, d, e = SHA1.sha1_iteration(a, b, c, d, e, w[i], i)

        return tuple((h + v) & MASK for h, v in zip(state, (a, b, c, d, e)))

    @staticmethod
    def _bytes_to_words(data):
        """Interpret data (a multiple of 4 bytes) as big-endian 32-bit words."""
        return tuple(int.from_bytes(data[i:i+4], 'big') for i in range(0, len(data), 4))

    @staticmethod
    def sha1_blocks(input_bytes):
        """Yield the padded message as 16-word blocks, in order.

        Full 64-byte blocks are emitted straight from the input. The tail
        (0-63 bytes) gets the 0x80 marker; if the marker leaves no room for
        the 8-byte length field, the tail block is emitted zero-filled and a
        fresh block carries the length.
        """
        num_bits = len(input_bytes) * 8
        full = len(input_bytes) - len(input_bytes) % SHA1.BLOCK_BYTES
        for offset in range(0, full, SHA1.BLOCK_BYTES):
            yield SHA1._bytes_to_words(input_bytes[offset:offset+SHA1.BLOCK_BYTES])

        tail = bytes(input_bytes[full:]) + b"\x80"
        if len(tail) > 56:
            yield SHA1._bytes_to_words(tail.ljust(SHA1.BLOCK_BYTES, b"\x00"))
            tail = b""

        # Last 8 bytes hold the bit length as a 64-bit big-endian value
        last = tail.ljust(56, b"\x00") + (num_bits & 0xffffffffffffffff).to_bytes(8, 'big')
        yield SHA1._bytes_to_words(last)

    @staticmethod
    def sha1_padded(input_bytes):
        """Return input_bytes padded to a multiple of 64 bytes per SHA-1."""
        return b"".join(word.to_bytes(4, 'big')
                        for block in SHA1.sha1_blocks(input_bytes)
                        for word in block)

    @staticmethod
    def sha1_state(blocks):
        """Fold blocks into a fresh state starting from the IV."""
        state = SHA1.IV
        for block in blocks:
            state = SHA1.sha1_chunk(state, block)
        return state

    @staticmethod
    def sha1_digest(input_bytes):
        """Compute the SHA-1 digest of input_bytes as a SHA1Digest."""
        blocks = list(SHA1.sha1_blocks(input_bytes))
        logger.debug("sha1: %d bytes, %d blocks", len(input_bytes), len(blocks))
        return SHA1Digest(*SHA1.sha1_state(blocks))


def _to_bytes(buffer):
    if isinstance(buffer, (bytes, bytearray)):
        return bytes(buffer)
    if isinstance(buffer, memoryview):
        if buffer.format not in ("B", "b"):
            raise TypeError("memoryview must be of a byte-oriented format")
        return buffer.tobytes()
    raise TypeError("buffer must be bytes-like, got %s" % type(buffer).__name__)


def digest_from_bytes(buffer):
    """Return the SHA1Digest of a bytes, bytearray or memoryview buffer."""
    return SHA1.sha1_digest(_to_bytes(buffer))


def digest_from_text(text, encoding="utf-8"):
    """Hash text encoded with encoding.

    Returns (True, SHA1Digest), or (False, None) if the text cannot be encoded.
    """
    try:
        data = text.encode(encoding)
    except (UnicodeEncodeError, LookupError) as exc:
        logger.warning("cannot encode text as %s: %s", encoding, exc)
        return False, None
    return True, SHA1.sha1_digest(data)


def digest_from_file(path):
    """Hash the whole contents of the file at path.

    Returns (True, SHA1Digest), or (False, None) if the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return False, None
    return True, SHA1.sha1_digest(data)


def hex_string_from_bytes(buffer):
    return digest_from_bytes(buffer).hex_string()


def hash_from_bytes(buffer):
    return digest_from_bytes(buffer).words()


def hex_string_from_text(text, encoding="utf-8"):
    ok, digest = digest_from_text(text, encoding)
    return digest.hex_string() if ok else None


def hash_from_text(text, encoding="utf-8"):
    ok, digest = digest_from_text(text, encoding)
    return digest.words() if ok else None


def hex_string_from_file(path):
    ok, digest = digest_from_file(path)
    return digest.hex_string() if ok else None


def hash_from_file(path):
    ok, digest = digest_from_file(path)
    return digest.words() if ok else None
