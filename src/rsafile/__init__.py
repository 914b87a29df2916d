"""Textbook RSA encryption of whole files, one fixed-size block at a time.

Provides RSA key pairs with a round-trip validity check, block-wise encryption and decryption of byte streams and
files, PEM import/export of keys and, under-the-hood, probable-prime generation for the key pairs.
No padding is used, this is for teaching purposes only.

Typical usage example:

    pair = KeyPair.generate(1024)
    assert pair.is_valid()
    cypher = encrypt_file(pair.public_key, pathlib.Path("notes.txt"))
    clear = decrypt_file(pair.private_key, cypher)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsafile.blocks import decrypt_file
from rsafile.blocks import decrypt_stream
from rsafile.blocks import encrypt_file
from rsafile.blocks import encrypt_stream
from rsafile.keygen import check_prime
from rsafile.keygen import generate_key_pair
from rsafile.keygen import generate_primes
from rsafile.rsa import KeyPair
from rsafile.rsa import KeyVariant
from rsafile.rsa import RSAPrivKey
from rsafile.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "KeyPair",
    "KeyVariant",
    "RSAPrivKey",
    "RSAPubKey",
    "encrypt_stream",
    "decrypt_stream",
    "encrypt_file",
    "decrypt_file",
    "check_prime",
    "generate_primes",
    "generate_key_pair",
]
