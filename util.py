from random import SystemRandom

random = SystemRandom()

# Mask for the 32-bit words the Mersenne Twister works with.
WORD_MASK = 0xffffffff


def bit_mask(bit_count):
    """Return an int with the lowest bit_count bits set."""
    return (1 << bit_count) - 1


def bit_string(bits):
    return "".join(str(bit) for bit in bits)
