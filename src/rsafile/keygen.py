"""Key Generation Utility, mainly focusing on the generation of random primes for toy-sized moduli.

Loosely follows the FIPS 186-5 recipe for probable primes, but without its minimum sizes: any even modulus size from
32 bits upwards is accepted, since the block cipher only needs the modulus to span a few bytes.

Typical usage example:

    get_pre_primes(12000)
    p, q = generate_primes(64)
    (n, e), (n, d) = generate_key_pair(512)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math
import secrets
from typing import Literal, overload

MINIMUM_KEY_SIZE: int = 32

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    `_SMALL_PRIMES` acts as a cache. Regeneration occurs if requested range is greater, forced by `change` or the
    cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Args:
         no: The number to check. Must be integer and non-negative.
         n: The number up to which to generate primes. Defaults to 10000.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, iters: int) -> bool:
    """Perform Miller-Rabin primality test as specified in FIPS 186-5.

    Args:
        w: Odd integer to be tested.
        iters: Number of Miller-Rabin iterations to perform.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    if w <= 3:
        return w in (2, 3)
    if w % 2 == 0:
        return False
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw >> a
    for _ in range(iters):
        b = secrets.randbelow(w - 3) + 2
        z = pow(b, m, w)
        if z in (1, w - 1):
            continue
        for _ in range(1, a):
            z = pow(z, 2, w)
            if z == w - 1:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def check_prime(candidate: int, iters: None | int = None, n: int = 10000) -> bool:
    """Performs a composite Primality test: trial division by small primes, then Miller-Rabin.

    Args:
        candidate: The candidate prime to test.
        iters: Number of Miller-Rabin iterations to perform.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        n: The number up to which to generate primes for trial division. Defaults to 10000.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if iters is None:
        if candidate.bit_length() <= 512:
            iters = 40
        elif candidate.bit_length() <= 1024:
            iters = 56
        elif candidate.bit_length() <= 1536:
            iters = 64
        elif candidate.bit_length() <= 2048:
            iters = 70
        else:
            iters = 74
    return _miller_rabin(candidate, iters)


def _generate_probable_prime(size: int, pub: int = 65537, prm_p: int | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Args:
        size: The size of the prime to generate in bits.
        pub: The public exponent the prime has to be compatible with.
        prm_p: The other prime in the pair if this is the second generation.
            Candidates too close to it are rejected.

    Returns:
        A probable prime number.

    Raises:
        RuntimeError: If generation loops way beyond a reasonable time and a bit.
    """
    ml = 1 if prm_p is None else 2
    rep_cap = size * 5 * ml
    # Top two bits make p * q exactly twice as long, the low one makes it odd.
    msk = (1 << size - 1) | (1 << size - 2) | 1
    separation = 1 << max(size - _MINIMUM_PRIME_SEPARATION, 0)
    for _ in range(rep_cap):
        byts = secrets.randbits(size) | msk
        if prm_p is not None and abs(prm_p - byts) <= separation:
            continue
        if math.gcd(byts - 1, pub) == 1 and check_prime(byts):
            return byts
    raise RuntimeError(f"Run an improbable {rep_cap} amount of loops with no prime found. "
                       "Check system random number generator.")


def generate_primes(size: int, pub: int = 65537) -> tuple[int, int]:
    """Generates a pair of prime numbers suitable for a modulus of `size` bits.

    Args:
        size: The key size to generate the prime pair for. Must be even and at least `MINIMUM_KEY_SIZE`.
        pub: The public exponent. Has to be odd and at least 3.

    Returns:
        A pair of distinct probable primes, each `size // 2` bits long.

    Raises:
        ValueError: If `size` or `pub` do not meet requirements.
    """
    if size < MINIMUM_KEY_SIZE:
        raise ValueError(f"Size must be at least {MINIMUM_KEY_SIZE}.")
    if size % 2 != 0:
        raise ValueError("Size must be an even number.")
    if pub % 2 == 0 or pub < 3:
        raise ValueError("Public exponent does not meet requirements.")
    p = _generate_probable_prime(size // 2, pub)
    q = _generate_probable_prime(size // 2, pub, p)
    while p == q:
        q = _generate_probable_prime(size // 2, pub, p)
    return p, q


@overload
def generate_key_pair(size: int,
                      pub: int = 65537,
                      expose_primes: Literal[False] = False) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(size: int,
                      pub: int = 65537,
                      expose_primes: Literal[True] = False) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    size: int,
    pub: int = 65537,
    expose_primes: bool = False
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Args:
        size: The modulus size in bits. Must be even and at least `MINIMUM_KEY_SIZE`.
        pub: The public exponent. Has to be odd, at least 3 and below `2**(size - 1)`.
        expose_primes: Whether to return the prime numbers as well or not. Defaults to False.

    Returns:
        A tuple of (public, private) sub-tuples (modulus, exponent) or if exposed for the private
        (modulus, exponent, p, q)

    Raises:
        ValueError: If the public exponent could exceed the modulus.
    """
    if size >= MINIMUM_KEY_SIZE and pub >= 1 << (size - 1):
        raise ValueError("Public exponent must be smaller than the modulus.")
    p, q = generate_primes(size, pub)
    n = p * q
    totient = math.lcm(p - 1, q - 1)
    d = pow(pub, -1, totient)
    if not expose_primes:
        del p, q
        return (n, pub), (n, d)
    return (n, pub), (n, d, p, q)
