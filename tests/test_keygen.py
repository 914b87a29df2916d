# pylint: disable=protected-access,missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math
import secrets

import pytest
import sympy

from rsafile import keygen

base_primetest_cases = [
    # Edge Cases (neither)
    (0, False),
    (1, False),
    # Known Primes
    (2, True),
    (3, True),
    (101, True),
    (3571, True),
    (9973, True),
    (48109, True),
    (52453, True),
    # Composite
    (4, False),
    (6, False),
    (9, False),
    # Fermat Pseudoprimes (numbers that fool naive tests)
    (341, False),  # 11 * 31
    (561, False),  # 3 * 11 * 17 (Carmichael number)
    (1105, False),  # 5 * 13 * 17 (Carmichael number)
    # Pseudo-prime (PsP)
    (121, False),
    (703, False),
    (781, False),
    (1541, False),
    (2047, False),
    (52633, False),
]

large_primetest_cases = [
    (0x9668_F701, False),  # 48109 * 52453, beyond trial division
    (2**127 - 1, True),
    (2**521 - 1, True),
    (sympy.nextprime(2**1023), True),
    (2**128 + 1, False),
    ((2**127 - 1) * (2**61 - 1), False),
    (sympy.nextprime(2**511) * sympy.nextprime(2**512), False),
    pytest.param(2**4423 - 1, True, marks=pytest.mark.extreme, id="LargeInt-Mersenne4423"),
]

test_sizes = [
    32,
    64,
    256,
    1024,
    pytest.param(2048, marks=pytest.mark.slow),
    pytest.param(4096, marks=pytest.mark.extreme),
]


def id_generator(param):
    if isinstance(param, int) and param > 1000000:
        return f"LargeInt-{param.bit_length()}bits"
    return str(param)


@pytest.mark.parametrize("n", [0, 1, 2, 3, 20, 50, 1000, 5000, 10000, 10**5])
def test_sieve_sane(n):
    assert keygen._sieve(n) == list(sympy.primerange(0, n + 1))


@pytest.mark.parametrize("n,expected", [(10**6, 78498), pytest.param(10**7, 664579, marks=pytest.mark.slow)])
def test_sieve_large_approx(n, expected):
    assert len(keygen._sieve(n)) == expected


@pytest.mark.parametrize("n", [-27358709381728, -10, -1])
def test_get_pre_primes_errors(n):
    with pytest.raises(ValueError):
        keygen.get_pre_primes(n)


def test_get_pre_primes_caches(mocker):
    mocked_primes = [2, 3, 5, 7, 11]
    mocker.patch("rsafile.keygen._sieve", return_value=mocked_primes)
    mocker.patch("rsafile.keygen._SMALL_PRIMES", [])
    mocker.patch("rsafile.keygen._SMALL_PRIMES_CAP", 0)

    rs = keygen.get_pre_primes(50)
    keygen._sieve.assert_called_once_with(50)
    assert rs == mocked_primes


@pytest.mark.parametrize("n", [25, 50])
def test_get_pre_primes_cache_hit(mocker, n):
    mocked_primes = [2, 3, 5, 7, 11]
    mocker.patch("rsafile.keygen._sieve")
    mocker.patch("rsafile.keygen._SMALL_PRIMES", mocked_primes)
    mocker.patch("rsafile.keygen._SMALL_PRIMES_CAP", 50)

    rs = keygen.get_pre_primes(n)
    keygen._sieve.assert_not_called()
    assert rs == mocked_primes


def test_get_pre_primes_cache_miss(mocker):
    greater_mocked_primes = [2, 3, 5, 7, 11, 13, 17, 19, 23]
    mocker.patch("rsafile.keygen._sieve", return_value=greater_mocked_primes)
    mocker.patch("rsafile.keygen._SMALL_PRIMES", [2, 3, 5, 7, 11])
    mocker.patch("rsafile.keygen._SMALL_PRIMES_CAP", 50)

    rs = keygen.get_pre_primes(75)
    keygen._sieve.assert_called_once_with(75)
    assert rs == greater_mocked_primes


def test_get_pre_primes_cache_forced(mocker):
    mocked_primes = [2, 3, 5, 7, 11]
    mocker.patch("rsafile.keygen._sieve", return_value=mocked_primes)
    mocker.patch("rsafile.keygen._SMALL_PRIMES", [2, 3, 5, 7, 11, 13, 17, 19, 23])
    mocker.patch("rsafile.keygen._SMALL_PRIMES_CAP", 75)

    rs = keygen.get_pre_primes(50, change=True)
    keygen._sieve.assert_called_with(50)
    assert rs == mocked_primes


@pytest.mark.parametrize("num,expected", base_primetest_cases + large_primetest_cases[1:4], ids=id_generator)
def test_trial_division(num, expected):
    assert keygen._trial_division(num) == expected


@pytest.mark.parametrize("n,expected", [case for case in base_primetest_cases if case[0] > 3], ids=id_generator)
def test_miller_rabin(n, expected):
    assert keygen._miller_rabin(n, 5) == expected


@pytest.mark.parametrize("n,expected", base_primetest_cases + large_primetest_cases, ids=id_generator)
def test_check_prime(n, expected):
    assert keygen.check_prime(n) == expected


@pytest.mark.parametrize("size", test_sizes)
def test_generate_probable_prime(size):
    size = size // 2
    p = keygen._generate_probable_prime(size)
    q = keygen._generate_probable_prime(size, prm_p=p)
    for prime in (p, q):
        assert prime.bit_length() == size
        assert sympy.isprime(prime)
        assert math.gcd(prime - 1, 65537) == 1
        assert prime**2 > (1 << (2 * size - 1))


def test_generate_probable_prime_separation(mocker):
    size = 16
    p = 0xC00B
    good_q = 0xFFF1
    mocker.patch("secrets.randbits", side_effect=[p, good_q])
    mocker.patch("rsafile.keygen.check_prime", return_value=True)

    assert keygen._generate_probable_prime(size, prm_p=p) == good_q
    assert secrets.randbits.call_count == 2


def test_generate_probable_prime_faulty(mocker):
    mocker.patch("rsafile.keygen.check_prime", return_value=False)
    with pytest.raises(RuntimeError):
        keygen._generate_probable_prime(64)


def test_generate_primes_conditions(mocker):
    p, q = 48109, 52453
    mocker.patch("rsafile.keygen._generate_probable_prime", side_effect=[p, p, q])
    rp, rq = keygen.generate_primes(32)
    assert (rp, rq) == (p, q)
    assert keygen._generate_probable_prime.call_count == 3


@pytest.mark.parametrize("size,pub", [(16, 65537), (30, 65537), (33, 65537), (64, 65538), (64, 1), (64, 2)])
def test_generate_primes_validates(size, pub):
    with pytest.raises(ValueError):
        keygen.generate_primes(size, pub)


def test_generate_key_pair_validates_exponent():
    with pytest.raises(ValueError, match="smaller than the modulus"):
        keygen.generate_key_pair(32, 2**31 + 1)


@pytest.mark.parametrize("size", [32, 64, 512])
def test_generate_key_pair_roundcryption(size):
    pub_key, priv_key = keygen.generate_key_pair(size)
    assert pub_key[0] == priv_key[0]
    assert pub_key[0].bit_length() == size
    message = 1709202523 % pub_key[0]
    ciphertext = pow(message, pub_key[1], pub_key[0])
    assert pow(ciphertext, priv_key[1], priv_key[0]) == message


def test_generate_key_pair_functional(mocker):
    src_p, src_q = 48109, 52453
    mocker.patch("rsafile.keygen.generate_primes", return_value=(src_p, src_q))
    (n, pub), (n2, d, p, q) = keygen.generate_key_pair(32, 65537, expose_primes=True)
    assert (p, q) == (src_p, src_q)
    assert n == n2 == 0x9668_F701
    assert pub == 65537
    assert d == 0x147B_7F71 % math.lcm(src_p - 1, src_q - 1)
