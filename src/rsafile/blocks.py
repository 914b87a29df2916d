"""Block-wise RSA encryption and decryption of byte streams and files.

Input is cut into blocks of `bsize - 1` bytes, each block is read as a little-endian integer and raised to the key's
exponent. Ciphertext blocks are written zero-padded to exactly `bsize + 1` bytes, which is the only framing the
format has: there is no header and no length prefix, the modulus alone tells where blocks start. Decrypted blocks
are written with no padding at all.

Textbook RSA without padding, do not use this to protect anything that matters.

Typical usage example:

    with open("notes.txt", "rb") as src, open("notes.cypher", "wb") as dst:
        encrypt_stream(pair.public_key, src, dst)
    decrypt_file(pair.private_key, pathlib.Path("notes.cypher"), pathlib.Path("notes.message"))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import os
import pathlib
import typing
import warnings

from rsafile.rsa import integer_to_le_bytes
from rsafile.rsa import KeyVariant
from rsafile.rsa import le_bytes_to_integer
from rsafile.rsa import RSAKey
from rsafile.rsa import RSAPrivKey
from rsafile.rsa import RSAPubKey

ENCRYPTION_BYTE_OFFSET = 1

DEFAULT_NAMES = {
    KeyVariant.PUBLIC: ("encrypted", ".cypher"),
    KeyVariant.PRIVATE: ("decrypted", ".message"),
}

ProgressCallback = typing.Callable[[int], None]


def _require(key: RSAKey, variant: KeyVariant, action: str) -> None:
    if not isinstance(key, RSAKey) or key.variant is not variant:
        raise TypeError(f"{action} requires a {variant.value} key, got {type(key).__name__}.")


def _require_capacity(key: RSAPubKey) -> None:
    if key.bsize - ENCRYPTION_BYTE_OFFSET < 1:
        raise ValueError(f"Modulus of {key.mod.bit_length()} bits is too small for block encryption.")


def encrypt_stream(key: RSAPubKey,
                   source: typing.BinaryIO,
                   destination: typing.BinaryIO,
                   progress: ProgressCallback | None = None) -> int:
    """Encrypts everything left in `source` into `destination`.

    Reads up to `bsize - 1` bytes at a time, so every block is strictly below the modulus, and writes each encrypted
    block as exactly `bsize + 1` little-endian bytes. Stops after the first short read. An empty source produces an
    empty destination. Neither stream is closed.

    Args:
        key: The public key to encrypt with.
        source: Readable binary stream.
        destination: Writable binary stream.
        progress: Called with the number of plaintext bytes consumed after each block.

    Returns:
        The number of ciphertext blocks written.

    Raises:
        TypeError: If `key` is not a public key.
        ValueError: If the modulus is too small to hold a single plaintext byte.
    """
    _require(key, KeyVariant.PUBLIC, "Encryption")
    warnings.warn("Textbook RSA encryption is unsecure! Please use with care.", RuntimeWarning)
    _require_capacity(key)
    max_bytes_read = key.bsize - ENCRYPTION_BYTE_OFFSET
    max_bytes_write = key.bsize + ENCRYPTION_BYTE_OFFSET
    source_bytes = bytearray(max_bytes_read)
    blocks = 0
    bytes_amount_read = max_bytes_read
    while bytes_amount_read == max_bytes_read:
        source_bytes[:] = bytes(max_bytes_read)
        bytes_amount_read = source.readinto(source_bytes) or 0
        if bytes_amount_read == 0:
            break
        encrypted = key.encrypt_block(le_bytes_to_integer(source_bytes))
        destination.write(integer_to_le_bytes(encrypted, max_bytes_write))
        blocks += 1
        if progress is not None:
            progress(bytes_amount_read)
    return blocks


def decrypt_stream(key: RSAPrivKey,
                   source: typing.BinaryIO,
                   destination: typing.BinaryIO,
                   progress: ProgressCallback | None = None) -> int:
    """Decrypts everything left in `source` into `destination`.

    Reads `bsize + 1` byte blocks and writes each decrypted block with its shortest little-endian encoding. A short
    trailing block is still decrypted. Neither stream is closed.

    Args:
        key: The private key to decrypt with.
        source: Readable binary stream of ciphertext blocks.
        destination: Writable binary stream.
        progress: Called with the number of ciphertext bytes consumed after each block.

    Returns:
        The number of ciphertext blocks read.

    Raises:
        TypeError: If `key` is not a private key.
    """
    _require(key, KeyVariant.PRIVATE, "Decryption")
    max_bytes = key.bsize + ENCRYPTION_BYTE_OFFSET
    source_bytes = bytearray(max_bytes)
    blocks = 0
    bytes_amount_read = max_bytes
    while bytes_amount_read == max_bytes:
        source_bytes[:] = bytes(max_bytes)
        bytes_amount_read = source.readinto(source_bytes) or 0
        if bytes_amount_read == 0:
            break
        message = key.decrypt_block(le_bytes_to_integer(source_bytes))
        destination.write(integer_to_le_bytes(message))
        blocks += 1
        if progress is not None:
            progress(bytes_amount_read)
    return blocks


def resolve_output_path(variant: KeyVariant, out_path: pathlib.Path | None = None) -> pathlib.Path:
    """Picks where the result of a file operation goes.

    Args:
        variant: Role of the key used, public meaning encryption.
        out_path: Requested destination.
            None puts `encrypted.cypher` or `decrypted.message` in the working directory.
            An existing file keeps its name but gets the `.cypher` or `.message` suffix.
            An existing directory gets the default file name inside it.
            Anything else is used verbatim, its parent directories being created.

    Returns:
        The destination path.
    """
    name, suffix = DEFAULT_NAMES[variant]
    if out_path is None:
        return pathlib.Path(".") / (name + suffix)
    out_path = pathlib.Path(out_path)
    if out_path.is_file():
        return out_path.with_suffix(suffix)
    if out_path.is_dir():
        return out_path / (name + suffix)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    return out_path


def _require_input(file_path: pathlib.Path) -> pathlib.Path:
    file_path = pathlib.Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Path '{file_path}' is inexistent")
    return file_path


def input_size(file_path: pathlib.Path) -> int:
    """Size of the input in bytes, for progress displays.

    Raises:
        FileNotFoundError: If `file_path` is not a file.
    """
    return os.path.getsize(_require_input(file_path))


def _run_file(key: RSAKey, file_path: pathlib.Path, out_path: pathlib.Path | None,
              progress: ProgressCallback | None) -> pathlib.Path:
    file_path = _require_input(file_path)
    destination = resolve_output_path(key.variant, out_path)
    if destination.exists() and os.path.samefile(file_path, destination):
        raise ValueError(f"Destination '{destination}' would overwrite the input file")
    with open(file_path, "rb") as src, open(destination, "wb") as dst:
        if key.is_public():
            encrypt_stream(key, src, dst, progress)
        else:
            decrypt_stream(key, src, dst, progress)
    return destination


def encrypt_file(key: RSAPubKey,
                 file_path: pathlib.Path,
                 out_path: pathlib.Path | None = None,
                 progress: ProgressCallback | None = None) -> pathlib.Path:
    """Encrypts a file chunk by chunk.

    Args:
        key: The public key to encrypt with.
        file_path: File to encrypt, has to exist.
        out_path: Destination, see `resolve_output_path`.
        progress: See `encrypt_stream`.

    Returns:
        The path the ciphertext was written to.

    Raises:
        FileNotFoundError: If `file_path` is not a file.
        TypeError: If `key` is not a public key.
        ValueError: If the modulus is too small, or the destination is the input file itself.
    """
    _require(key, KeyVariant.PUBLIC, "Encryption")
    _require_capacity(key)
    return _run_file(key, file_path, out_path, progress)


def decrypt_file(key: RSAPrivKey,
                 file_path: pathlib.Path,
                 out_path: pathlib.Path | None = None,
                 progress: ProgressCallback | None = None) -> pathlib.Path:
    """Decrypts a file chunk by chunk.

    Args:
        key: The private key to decrypt with.
        file_path: File to decrypt, has to exist.
        out_path: Destination, see `resolve_output_path`.
        progress: See `decrypt_stream`.

    Returns:
        The path the cleartext was written to.

    Raises:
        FileNotFoundError: If `file_path` is not a file.
        TypeError: If `key` is not a private key.
        ValueError: If the destination is the input file itself.
    """
    _require(key, KeyVariant.PRIVATE, "Decryption")
    return _run_file(key, file_path, out_path, progress)
