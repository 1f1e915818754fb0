"""Attacks that recover the state, seed or key of an MT19937 generator."""

from functools import lru_cache
from itertools import islice
from time import time

from Cryptodome.Util.strxor import strxor

from linear_algebra import BitMatrix, BitVector, GaussElimination, LinearAlgebraError
from mersenne_twister import (FIRST_MASK, SECOND_MASK, STATE_SIZE, MT19937_RNG,
                              temper)
from util import WORD_MASK

# Largest number of seconds recover_timestamp_seed looks into the past.
MAXIMUM_DELTA = 1000

STREAM_KEYS = range(0x10000)


class RecoveryError(ValueError):
    pass


@lru_cache(maxsize=None)
def _tempering_matrix():
    # Row i of the matrix says which bits of the input are added together to
    # get bit i of the output. Starting from the identity and applying the
    # steps of temper() to the rows gives the matrix of the whole function.
    matrix = BitMatrix.diagonal(32)

    # x ^= (x >> 11)
    matrix += matrix >> 11

    # x ^= (x << 7) & FIRST_MASK
    matrix += (matrix << 7) & BitVector.from_uint(FIRST_MASK, 32)

    # x ^= (x << 15) & SECOND_MASK
    matrix += (matrix << 15) & BitVector.from_uint(SECOND_MASK, 32)

    # x ^= (x >> 18)
    matrix += matrix >> 18
    return matrix


def tempering_matrix():
    """Return the 32x32 matrix T such that T * x == temper(x) over GF(2)."""
    # The cached matrix is shared, so callers only ever get copies of it.
    return _tempering_matrix().copy()


def recover_state_word(observed):
    """Return the buffer word that temper() turned into observed."""
    try:
        solver = GaussElimination(tempering_matrix(), BitVector.from_uint(observed, 32))
        return solver.solve().to_uint(32)
    except LinearAlgebraError as e:
        raise RecoveryError("could not untemper {!r}".format(observed)) from e


def recover_full_state(source):
    """Clone a generator from 624 consecutive outputs.

    source is either a generator to draw the outputs from, or an iterable
    of outputs that were already observed. The clone's state is identical
    to the state of the generator after producing those outputs.
    """
    if isinstance(source, MT19937_RNG):
        outputs = [source.next_u32() for _ in range(STATE_SIZE)]
    else:
        outputs = list(islice(source, STATE_SIZE))
    if len(outputs) < STATE_SIZE:
        raise RecoveryError("need {} outputs, got {}".format(STATE_SIZE, len(outputs)))
    words = [recover_state_word(output) for output in outputs]
    return MT19937_RNG.from_state(words, STATE_SIZE)


def recover_timestamp_seed(output, now=None, max_delta=MAXIMUM_DELTA):
    """Find the Unix timestamp that seeded a generator whose first output is
    known, assuming it was seeded at most max_delta seconds before now.
    """
    if now is None:
        now = int(time())
    for delta in range(max_delta + 1):
        seed_guess = now - delta
        rng = MT19937_RNG(seed_guess & WORD_MASK, twist_limit=1)
        if temper(rng.buffer[0]) == output:
            return seed_guess
    raise RecoveryError("no seed found in the last {} seconds".format(max_delta))


def _keystream_for(key, length):
    if length > STATE_SIZE:
        return bytes(islice(MT19937_RNG(key).keystream(), length))
    # Only the first length words of the buffer are needed, so there is no
    # point twisting the rest.
    rng = MT19937_RNG(key, twist_limit=length)
    return bytes(temper(word) & 0xff for word in rng.buffer[:length])


def recover_stream_key(plaintext, ciphertext, candidates=STREAM_KEYS):
    """Find the key that mt19937_encrypt used to turn plaintext into ciphertext."""
    if not plaintext or len(plaintext) != len(ciphertext):
        raise ValueError("plaintext and ciphertext must be non-empty and of equal length")
    keystream = strxor(bytes(plaintext), bytes(ciphertext))
    for key in candidates:
        if _keystream_for(key, len(keystream)) == keystream:
            return key
    raise RecoveryError("key not found")


def recover_prefixed_stream_key(ciphertext, known_suffix, candidates=STREAM_KEYS):
    """Find the key of a ciphertext whose plaintext ends with known_suffix.

    The plaintext may start with any number of unknown bytes.
    """
    if not known_suffix or len(known_suffix) > len(ciphertext):
        raise ValueError("known_suffix must be non-empty and no longer than ciphertext")
    offset = len(ciphertext) - len(known_suffix)
    keystream = strxor(bytes(ciphertext[offset:]), bytes(known_suffix))
    for key in candidates:
        if _keystream_for(key, len(ciphertext))[offset:] == keystream:
            return key
    raise RecoveryError("key not found")
