from itertools import islice

from Cryptodome.Util.strxor import strxor

from util import WORD_MASK, random

STATE_SIZE = 624
SHIFT_SIZE = 397
SEED_MULTIPLIER = 0x6c078965
UPPER_MASK = 0x80000000
LOWER_MASK = 0x7fffffff
TWIST_CONSTANT = 0x9908b0df
FIRST_MASK = 0x9d2c5680
SECOND_MASK = 0xefc60000


class MT19937_RNG:
    """Mersenne Twister random number generator"""

    def __init__(self, seed, twist_limit=STATE_SIZE):
        self.seed(seed, twist_limit)

    @classmethod
    def from_state(cls, state, index=STATE_SIZE):
        """Create a generator with the given buffer, skipping the seeding."""
        state = list(state)
        if len(state) != STATE_SIZE:
            raise ValueError("state must have {} words".format(STATE_SIZE))
        if not all(0 <= word <= WORD_MASK for word in state):
            raise ValueError("state words must be 32-bit unsigned integers")
        if not 0 <= index <= STATE_SIZE:
            raise ValueError("index must be between 0 and {}".format(STATE_SIZE))
        rng = cls.__new__(cls)
        rng.buffer = state
        rng.index = index
        return rng

    @classmethod
    def random(cls):
        return cls(random.getrandbits(32))

    def seed(self, seed, twist_limit=STATE_SIZE):
        # twist_limit is passed on to twist(). It is only meant for code
        # that searches for a seed by looking at the first few outputs.
        if not 0 <= seed <= WORD_MASK:
            raise ValueError("seed must be a 32-bit unsigned integer")
        buffer = self.buffer = [seed] + [0]*(STATE_SIZE - 1)
        prev = seed
        for i in range(1, STATE_SIZE):
            prev = buffer[i] = WORD_MASK & (SEED_MULTIPLIER * (prev ^ (prev >> 30)) + i)
        self.twist(twist_limit)

    @property
    def state(self):
        return tuple(self.buffer)

    def next_u32(self):
        if self.index >= STATE_SIZE:
            self.twist()
        result = temper(self.buffer[self.index])
        self.index += 1
        return result

    def next_u8(self):
        return self.next_u32() & 0xff

    def next_u16(self):
        return self.next_u32() & 0xffff

    def next_u64(self):
        return (self.next_u32() << 32) ^ self.next_u32()

    def twist(self, limit=STATE_SIZE):
        # limit makes this function only twist part of the buffer, instead of
        # the whole buffer. This is a performance optimization for code that
        # cracks the RNG by examining its output, and not intended for normal
        # use of the RNG.
        buffer = self.buffer
        for i in range(limit):
            y = ((buffer[i] & UPPER_MASK) +
                 (buffer[(i + 1) % STATE_SIZE] & LOWER_MASK))
            buffer[i] = buffer[(i + SHIFT_SIZE) % STATE_SIZE] ^ (y >> 1)

            if y & 1:
                buffer[i] ^= TWIST_CONSTANT
        self.index = 0

    def keystream(self):
        """Yield the low byte of each output, forever."""
        while True:
            yield self.next_u8()

    def encrypt(self, data):
        return strxor(bytes(data), bytes(islice(self.keystream(), len(data))))

    decrypt = encrypt

    def __eq__(self, other):
        if not isinstance(other, MT19937_RNG):
            return NotImplemented
        return self.index == other.index and self.buffer == other.buffer

    __hash__ = None

    def __repr__(self):
        return "<{} index={}>".format(type(self).__name__, self.index)


def temper(x):
    x ^= (x >> 11)
    x ^= (x << 7) & FIRST_MASK
    x ^= (x << 15) & SECOND_MASK
    x ^= (x >> 18)
    return x


def mt19937_encrypt(data, key):
    """Encrypt or decrypt data with the keystream of an RNG seeded with key."""
    return MT19937_RNG(key).encrypt(data)


mt19937_decrypt = mt19937_encrypt
