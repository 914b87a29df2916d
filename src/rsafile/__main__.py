"""The Command Line Interface for the utility, including Interactive elements.

A hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface): whatever the command line leaves out
is asked for interactively, unless non-interactive mode is on, in which case defaults are used or the run fails.

Typical usage example:

    rsafile keygen -P keys/key_pair --keysize 1024
    rsafile encrypt -p keys/key_pair.pub -i notes.txt -o out/
    rsafile decrypt -P keys/key_pair -i out/encrypted.cypher
    OR
    python -m rsafile
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import pathlib
import sys
import typing

from pyasn1 import error as asn1_error

import rsafile
from rsafile import blocks
from rsafile import rsa


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in RSA File.",
            choices=["keygen", "encrypt", "decrypt", "check"],
        ),
    "keygen":
        HelpData("Key pair generation utility."),
    "encrypt":
        HelpData("File encryption utility."),
    "decrypt":
        HelpData("File decryption utility."),
    "check":
        HelpData("Key pair validation utility."),
    "public_key":
        HelpData(
            description="Location of the public key file. Defaults to the private key location with .pub appended.",
            format=pathlib.Path,
        ),
    "private_key":
        HelpData(
            description="Location of the private key file.",
            format=pathlib.Path,
        ),
    "input":
        HelpData(
            description="Location of the file to process.",
            format=pathlib.Path,
        ),
    "output":
        HelpData(
            description="Destination file or directory. Defaults to the working directory.",
            format=pathlib.Path,
        ),
    "keysize":
        HelpData(
            description="Key size (in bits). Even, at least 32.",
            format=int,
            default=2048,
        ),
    "pub_exponent":
        HelpData(
            description="Exponent for the public key.",
            format=int,
            advanced=True,
            default=65537,
        ),
    "overwrite":
        HelpData(
            description="Overwrite specified destination files if they exist?",
            choices=["Y", "N"],
            default="N",
        )
}

needs = {
    "keygen": ("private_key", "keysize", "pub_exponent"),
    "encrypt": ("public_key", "input"),
    "decrypt": ("private_key", "input"),
    "check": ("private_key",),
}

pubkey = argparse.ArgumentParser(add_help=False)
pubkey.add_argument("--public_key", "-p", type=help_dict["public_key"].format, help=help_dict["public_key"].description)
privkey = argparse.ArgumentParser(add_help=False)
privkey.add_argument("--private_key",
                     "-P",
                     type=help_dict["private_key"].format,
                     help=help_dict["private_key"].description)
files = argparse.ArgumentParser(add_help=False)
files.add_argument("--input", "-i", type=help_dict["input"].format, help=help_dict["input"].description)
files.add_argument("--output", "-o", type=help_dict["output"].format, help=help_dict["output"].description)
corep = argparse.ArgumentParser(prog="rsafile")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsafile.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.set_defaults(public_key=None, private_key=None, input=None, output=None, keysize=None, pub_exponent=None,
                   overwrite=None)
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keygen", parents=[privkey, pubkey], help=help_dict["keygen"].description)
keygen.add_argument("--keysize", type=help_dict["keysize"].format, help=help_dict["keysize"].description)
keygen.add_argument("--pub-exponent", type=help_dict["pub_exponent"].format, help=help_dict["pub_exponent"].description)
keygen.add_argument("--overwrite", "-O", action="store_const", const="Y", help=help_dict["overwrite"].description)

encrypt = commands.add_parser("encrypt", parents=[pubkey, files], help=help_dict["encrypt"].description)
decrypt = commands.add_parser("decrypt", parents=[privkey, files], help=help_dict["decrypt"].description)
check = commands.add_parser("check", parents=[privkey, pubkey], help=help_dict["check"].description)


def checkmodes(arg: str, mode: tuple[bool, bool]):
    helper_data = help_dict[arg]
    if (mode[0] or (helper_data.advanced and not mode[1])) and helper_data.default:
        return helper_data.default
    if mode[0]:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    choices = helper_data.choices
    vald = set(choices)
    for choice in choices:
        defstring = " (Default)" if choice == helper_data.default else ""
        if help_dict.get(choice, None):
            prntr(f"{choice} - {help_dict[choice].description}" + defstring)
        else:
            prntr(f"{choice}" + defstring)
    if helper_data.default is not None:
        prntr("To accept default just click enter. Otherwise specify value.")
    while True:
        ch = input(f"{arg}: ")
        if ch in vald:
            return ch
        if not ch and helper_data.default is not None:
            return helper_data.default
        prntr("Please select an option from the list.")


def input_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and helper_data.default is not None:
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


class ProgressPrinter:
    """Renders byte-count deltas as a single `{message} {done}/{total}` line."""

    def __init__(self, message: str, total: int, enabled: bool = True) -> None:
        self.message = message
        self.total = total
        self.done = 0
        self.enabled = enabled

    def __call__(self, delta: int) -> None:
        self.done += delta
        if self.enabled:
            print(f"\r{self.message} {self.done}/{self.total}", end="", flush=True)

    def finish(self, message: str) -> None:
        if self.enabled:
            print(f"\r{message} {self.done}/{self.total}")


def main(argv: list[str] | None = None):
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args(argv)
    pstatus = (args.non_interactive, args.advanced)

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not pstatus[0]:
            print(text)

    pspr("Welcome to RSA File!\n")
    try:
        if not args.subcommand:
            args.subcommand = choice_handler("subcommand", pstatus)
        for reqs in needs[args.subcommand]:
            if getattr(args, reqs) is None:
                if help_dict[reqs].choices is not None:
                    res = choice_handler(reqs, pstatus)
                else:
                    res = input_handler(reqs, pstatus)
                setattr(args, reqs, res)
            else:
                pspr(f"{reqs}: {getattr(args, reqs)}")
        if args.subcommand in ("keygen", "check") and args.public_key is None:
            args.public_key = rsa.public_path(args.private_key)
        pspr("\nInput Complete! Executing...")
        match args.subcommand:
            case "keygen":
                if args.private_key.exists() or args.public_key.exists():
                    rs = args.overwrite
                    if rs is None:
                        rs = choice_handler("overwrite", pstatus, pspr)
                    if rs == "N":
                        print("Destination private or public key already exists!")
                        return
                pair = rsa.KeyPair.generate(int(args.keysize), args.pub_exponent)
                args.private_key.parent.mkdir(parents=True, exist_ok=True)
                args.public_key.parent.mkdir(parents=True, exist_ok=True)
                pair.private_key.export(args.private_key)
                pair.public_key.export(args.public_key)
                pspr("\nKey pair generated!")
            case "encrypt":
                rpu = rsa.RSAPubKey.import_key(args.public_key)
                bar = ProgressPrinter("Encrypting", blocks.input_size(args.input), not pstatus[0])
                dest = blocks.encrypt_file(rpu, args.input, args.output, bar)
                bar.finish("Successfully encrypted")
                pspr("Ciphertext written to:")
                print(dest)
            case "decrypt":
                rpk = rsa.RSAPrivKey.import_key(args.private_key)
                bar = ProgressPrinter("Decrypting", blocks.input_size(args.input), not pstatus[0])
                dest = blocks.decrypt_file(rpk, args.input, args.output, bar)
                bar.finish("Successfully decrypted")
                pspr("Cleartext written to:")
                print(dest)
            case "check":
                pair = rsa.KeyPair.import_keypair(args.private_key, args.public_key)
                if pair.is_valid():
                    pspr("Key pair is valid!")
                else:
                    print("Key pair is invalid!")
                    sys.exit(1)
    except (OSError, ValueError, asn1_error.PyAsn1Error) as exc:
        sys.exit(f"Error: {exc}")
    pspr("Thank you for using RSA File!")
    pspr("Goodbye!")


if __name__ == "__main__":
    main()
