"""Configures pytest further and provides the shared key material."""
import pytest

from rsafile import rsa

# 0x9668F701 has 32 significant bits, 3 byte plaintext blocks and 5 byte ciphertext blocks.
REFERENCE_MODULUS = 0x9668_F701
REFERENCE_PUBLIC_EXPONENT = 0x1_0001
REFERENCE_PRIVATE_EXPONENT = 0x147B_7F71


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: slower tests, skipped with --skip-slow")
    config.addinivalue_line("markers", "extreme: extremely slow tests, run with --run-extreme")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


@pytest.fixture
def reference_pair() -> rsa.KeyPair:
    return rsa.KeyPair(rsa.RSAPubKey(REFERENCE_MODULUS, REFERENCE_PUBLIC_EXPONENT),
                       rsa.RSAPrivKey(REFERENCE_MODULUS, REFERENCE_PRIVATE_EXPONENT))
