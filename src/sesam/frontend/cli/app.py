"""Command line front end for creating and opening SESAM envelopes.

Passwords come from ``SESAM_MASTER_PASSWORD`` (and ``SESAM_NEW_MASTER_PASSWORD``
for ``passwd``) when set, otherwise they are prompted for without echo.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from sesam.core.exceptions import SesamError
from sesam.core.settings import Settings
from sesam.frontend.cli.logging_config import configure_logging
from sesam.security import decode, generate_kgk, parse_header, rewrap, seal
from sesam.security.kdf import kdf_params_to_dict
from sesam.security.presets import PRESETS

logger = logging.getLogger(__name__)

ENV_PASSWORD = "SESAM_MASTER_PASSWORD"
ENV_NEW_PASSWORD = "SESAM_NEW_MASTER_PASSWORD"


def _read_password(env_var: str, prompt: str, confirm: bool = False) -> str:
    password = os.getenv(env_var)
    if password:
        return password

    password = getpass.getpass(prompt)
    if not password:
        raise SesamError("master password must not be empty")
    if confirm and getpass.getpass("Repeat password: ") != password:
        raise SesamError("passwords do not match")
    return password


def _write_atomic(target: Path, data: bytes) -> None:
    """Replace ``target`` with ``data`` without ever leaving it half written.

    The envelope is the only durable copy of the KGK, so it is written to a
    temporary file in the same directory and moved over the target.
    """
    with tempfile.NamedTemporaryFile(dir=target.parent, prefix=f".{target.name}.", delete=False) as tmpf:
        tmp_path = Path(tmpf.name)

    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _cmd_new(args: argparse.Namespace, settings: Settings) -> int:
    target = Path(args.envelope)
    if target.exists() and not args.force:
        raise SesamError(f"{target} already exists (use --force to overwrite)")

    data = Path(args.input).read_bytes() if args.input else b""
    password = _read_password(ENV_PASSWORD, "New master password: ", confirm=True)
    level = settings.compression_level if args.level is None else args.level

    with generate_kgk() as kgk:
        blob = seal(password, kgk, data, args.compress, compression_level=level)
    _write_atomic(target, blob)
    print(f"Created {target} ({len(blob)} bytes).")
    return 0


def _cmd_open(args: argparse.Namespace, settings: Settings) -> int:
    blob = Path(args.envelope).read_bytes()
    password = _read_password(ENV_PASSWORD, "Master password: ")

    payload, kgk = decode(password, blob, args.uncompress)
    kgk.wipe()
    if args.output:
        Path(args.output).write_bytes(payload)
        logger.info("wrote %d byte payload", len(payload))
    else:
        sys.stdout.buffer.write(payload)
        sys.stdout.buffer.flush()
    return 0


def _cmd_passwd(args: argparse.Namespace, settings: Settings) -> int:
    target = Path(args.envelope)
    blob = target.read_bytes()
    old = _read_password(ENV_PASSWORD, "Current master password: ")
    new = _read_password(ENV_NEW_PASSWORD, "New master password: ", confirm=True)

    _write_atomic(target, rewrap(old, new, blob, args.uncompress))
    print(f"Master password of {target} changed.")
    return 0


def _cmd_info(args: argparse.Namespace, settings: Settings) -> int:
    header = parse_header(Path(args.envelope).read_bytes())
    params = kdf_params_to_dict(header.salt)
    print(f"format:      0x{header.format_flag:02x} (AES-256 encrypted masterkey)")
    print(f"size:        {header.size} bytes")
    print(f"outer salt:  {params['salt']}")
    print(f"outer kdf:   pbkdf2-{params['outer']['hash']}, {params['outer']['iterations']} iterations")
    print(f"inner kdf:   pbkdf2-{params['inner']['hash']}, {params['inner']['iterations']} iterations")
    print(f"wrapped KGK: {len(header.encrypted_kgk)} bytes")
    print(f"payload:     {len(header.ciphertext)} bytes ciphertext")
    return 0


def _cmd_presets(args: argparse.Namespace, settings: Settings) -> int:
    for name, preset in PRESETS.items():
        mode = "random" if preset.pick_randomly else "fixed"
        print(f"{name}: {len(preset.templates)} template(s), {preset.length} chars, {mode}")
    return 0


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sesam",
        description="Create, open and inspect SESAM key envelopes.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="create an envelope holding a fresh KGK")
    new.add_argument("envelope", help="Path of the envelope to write")
    new.add_argument("--input", default=None, help="Payload file (default: empty payload)")
    new.add_argument("--compress", action="store_true", help="Compress the payload before encryption")
    new.add_argument(
        "--level",
        type=int,
        choices=range(-1, 10),
        default=None,
        help="Compression level (default: SESAM_COMPRESSION_LEVEL or 9)",
    )
    new.add_argument("--force", action="store_true", help="Overwrite an existing envelope")
    new.set_defaults(handler=_cmd_new)

    open_ = sub.add_parser("open", help="decrypt the payload of an envelope")
    open_.add_argument("envelope", help="Path of the envelope to read")
    open_.add_argument("--output", default=None, help="Write the payload here (default: stdout)")
    open_.add_argument("--uncompress", action="store_true", help="Payload was compressed")
    open_.set_defaults(handler=_cmd_open)

    passwd = sub.add_parser("passwd", help="change the master password of an envelope")
    passwd.add_argument("envelope", help="Path of the envelope to update in place")
    passwd.add_argument("--uncompress", action="store_true", help="Payload was compressed")
    passwd.set_defaults(handler=_cmd_passwd)

    info = sub.add_parser("info", help="show the cleartext header of an envelope")
    info.add_argument("envelope", help="Path of the envelope to read")
    info.set_defaults(handler=_cmd_info)

    presets = sub.add_parser("presets", help="list password presets")
    presets.set_defaults(handler=_cmd_presets)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(settings.log_level)

    try:
        return args.handler(args, settings)
    except SesamError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc.strerror or exc}: {exc.filename}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
