#!/usr/bin/env python3

# standard library modules
import cProfile
import inspect
import os
import re
import sys
import traceback
import warnings

from argparse import ArgumentParser
from contextlib import redirect_stdout
from time import time


# modules in this project
import mersenne_twister
import mersenne_twister_attacks
import util

random = util.random


warnings.simplefilter("default", BytesWarning)
warnings.simplefilter("default", ResourceWarning)
warnings.simplefilter("default", DeprecationWarning)

EXAMPLE_PLAIN_BYTES = (b"Give a man a beer, he'll waste an hour. "
                       b"Teach a man to brew, he'll waste a lifetime.")


def challenge21():
    """Implement the MT19937 Mersenne Twister RNG"""
    rng = mersenne_twister.MT19937_RNG(seed=0)
    numbers = [rng.next_u32() for _ in range(10)]
    assert numbers == [2357136044, 2546248239, 3071714933, 3626093760, 2588848963,
                       3684848379, 2340255427, 3638918503, 1819583497, 2678185683]

    rng = mersenne_twister.MT19937_RNG(seed=1)
    numbers = [rng.next_u32() for _ in range(8)]
    print(" ".join("{:08x}".format(n) for n in numbers))
    assert numbers == [0x6ac1f425, 0xff4780eb, 0xb8672f8c, 0xeebc1448,
                       0x00077eff, 0x20ccc389, 0x4d65aacb, 0xffc11e85]


def challenge22():
    """Crack an MT19937 seed"""
    seed = int(time()) - random.randint(40, 900)
    output = mersenne_twister.MT19937_RNG(seed).next_u32()
    seed_guess = mersenne_twister_attacks.recover_timestamp_seed(output)
    print("found seed: {}".format(seed_guess))
    assert seed_guess == seed


def challenge23(seed=None):
    """Clone an MT19937 RNG from its output"""
    if seed is None:
        seed = random.getrandbits(32)
    print("tempering matrix:")
    print(mersenne_twister_attacks.tempering_matrix())

    rng = mersenne_twister.MT19937_RNG(seed)
    rng2 = mersenne_twister_attacks.recover_full_state(rng)

    reference_rng = mersenne_twister.MT19937_RNG(seed)
    for _ in range(624):
        reference_rng.next_u32()
    assert rng2 == reference_rng
    assert rng2.index == reference_rng.index == 624

    numbers = [rng.next_u32() for _ in range(624)]
    numbers2 = [rng2.next_u32() for _ in range(624)]
    assert numbers == numbers2


def challenge24(seed=None):
    """Create the MT19937 stream cipher and break it"""
    def encrypt_with_random_prefix(key, plain_bytes):
        prefix = os.urandom(random.randint(0, 64))
        return mersenne_twister.mt19937_encrypt(prefix + plain_bytes, key)

    key = random.getrandbits(16) if seed is None else seed & 0xffff
    test_ciphertext = mersenne_twister.mt19937_encrypt(EXAMPLE_PLAIN_BYTES, key)
    test_plaintext = mersenne_twister.mt19937_decrypt(test_ciphertext, key)
    assert test_plaintext == EXAMPLE_PLAIN_BYTES

    key_guess = mersenne_twister_attacks.recover_stream_key(EXAMPLE_PLAIN_BYTES,
                                                            test_ciphertext)
    assert key_guess == key

    my_bytes = b"A" * 14
    ciphertext = encrypt_with_random_prefix(key, my_bytes)
    key_guess = mersenne_twister_attacks.recover_prefixed_stream_key(ciphertext, my_bytes)
    print("found key: {}".format(key_guess))
    assert key_guess == key


class ChallengeNotFoundError(ValueError):
    pass


def get_challenges(challenge_nums):
    result = []
    for num in challenge_nums:
        fn = globals().get("challenge" + str(num))
        if not callable(fn):
            raise ChallengeNotFoundError("challenge {} not found".format(num))
        result.append(fn)
    return result


def get_all_challenges():
    challenges = {}
    for name, var in globals().items():
        try:
            num = int(re.findall(r"^challenge(\d+)$", name)[0])
        except IndexError:
            pass
        else:
            if callable(var):
                challenges[num] = var
    return [challenges[num] for num in sorted(challenges)]


def run_challenges(challenges, quiet=False, profile=None, **kwargs):
    """Run the given challenges and return the numbers of the ones that failed.

    Keyword arguments are passed to each challenge that accepts them.
    """
    failed = []
    with open(os.devnull, "w") as null_stream:
        output_stream = null_stream if quiet else sys.stdout
        for challenge in challenges:
            num = re.findall(r"^challenge(.+)$", challenge.__name__)[0]
            print("Running challenge {}: {}".format(num, challenge.__doc__))
            try:
                challenge_args = {name: value for name, value in kwargs.items()
                                  if name in inspect.signature(challenge).parameters}
                with redirect_stdout(output_stream):
                    if profile:
                        profile.runcall(challenge, **challenge_args)
                    else:
                        challenge(**challenge_args)
            except Exception:
                traceback.print_exc()
                failed.append(num)
            else:
                print("Challenge {} passed.".format(num))
    return failed


def main():
    parser = ArgumentParser(description="Solve the Cryptopals MT19937 challenges.")
    parser.add_argument(
        "challenges", nargs="*",
        help="Challenge(s) to run. If not specified, all challenges will be run.")
    parser.add_argument(
        "-p", "--profile", help="Profile challenges.", action="store_true")
    parser.add_argument(
        "-q", "--quiet", help="Don't show challenge output.", action="store_true")
    parser.add_argument(
        "-s", "--seed", type=int,
        help="Seed for the generators attacked by the challenges. If not specified, a "
             "random seed is used.")
    args = parser.parse_args()
    try:
        challenges = get_challenges(args.challenges) or get_all_challenges()
    except ChallengeNotFoundError as e:
        parser.error(e)

    profile = cProfile.Profile() if args.profile else None
    try:
        failed = run_challenges(challenges, quiet=args.quiet, profile=profile,
                                seed=args.seed)
    finally:
        if profile:
            print()
            profile.print_stats(sort="cumulative")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
