import argparse
import json
import logging
import pathlib
from typing import Any, Mapping, cast

from colorama import Fore, Style, init as colorama_init

from .backup import build_backup_url, create_backup_payload
from .builder import build_encrypted_share_url_sync, build_share_url
from .errors import ShareLinkError, ShortenerError
from .parser import parse_url
from .routes import SEG_PAX, SEG_TEMPLATE_ID, SEG_TITLE, VALID_MODES
from .schema import validate_compressed_data
from .shortener import create_short_link_sync
from .twqr import create_twqr_string, payment_from_decoded, render_qr_png
from .unlock import unlock_share_blob_sync


def _load_json(path: pathlib.Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        raise SystemExit(f"File not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise SystemExit(f"{path} is not valid JSON: {exc}") from exc


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _write_png(path: pathlib.Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(render_qr_png(payload))
    print(Fore.GREEN + f"QR code written to {path}")


def _cmd_build(args: argparse.Namespace) -> None:
    raw = _load_json(args.input)
    if not isinstance(raw, Mapping):
        raise SystemExit(f"{args.input} must contain a JSON object.")
    data = dict(cast(Mapping[str, Any], raw))

    mode = args.mode or data.get("mo") or "pay"
    data["mo"] = mode

    schema_error = validate_compressed_data(data)
    if schema_error:
        raise SystemExit(f"Refusing to build an invalid link: {schema_error}")

    path_params = {
        SEG_TITLE: args.title,
        SEG_PAX: args.pax,
        SEG_TEMPLATE_ID: args.template_id,
    }

    if args.password:
        url = build_encrypted_share_url_sync(
            mode, path_params, data, args.password, origin=args.origin
        )
    else:
        url = build_share_url(mode, path_params, data, origin=args.origin)

    print(Fore.CYAN + "Share link:")
    print(url)

    if args.shorten:
        try:
            short_url = create_short_link_sync(url)
        except ShortenerError as exc:
            print(Fore.RED + f"[shortener] {exc.message}")
            print(Fore.YELLOW + "Use the full link above instead.")
        else:
            print(Fore.CYAN + "Short link:")
            print(short_url)

    if args.qr:
        _write_png(args.qr, payment_from_decoded(data))


def _cmd_parse(args: argparse.Namespace) -> None:
    result = parse_url(args.url)

    if result.is_backup_link:
        print(Fore.CYAN + "Backup link")
        if result.error:
            raise SystemExit(Fore.RED + result.error + Style.RESET_ALL)
        if result.backup_data is not None:
            _print_json(result.backup_data.to_dict())
        return

    print(f"{Fore.CYAN}mode:{Style.RESET_ALL} {result.mode or '-'}")
    for key, value in result.path_params.items():
        print(f"{Fore.CYAN}{key}:{Style.RESET_ALL} {value}")

    if result.error:
        raise SystemExit(Fore.RED + result.error + Style.RESET_ALL)

    decoded = result.decoded_data
    if result.is_encrypted:
        if not args.password:
            raise SystemExit(
                Fore.YELLOW + "This link is password protected, pass --password."
                + Style.RESET_ALL
            )
        try:
            decoded = unlock_share_blob_sync(result.encrypted_blob or "", args.password)
        except ShareLinkError as exc:
            raise SystemExit(Fore.RED + exc.message + Style.RESET_ALL) from exc
        print(Fore.GREEN + "Unlocked.")

    if decoded is None:
        print(Fore.YELLOW + "No share data in this link.")
        return
    _print_json(decoded)


def _cmd_backup(args: argparse.Namespace) -> None:
    raw = _load_json(args.settings)
    if not isinstance(raw, Mapping):
        raise SystemExit(f"{args.settings} must contain a JSON object.")
    store = {
        str(key): value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
        for key, value in cast(Mapping[str, Any], raw).items()
    }
    payload = create_backup_payload(store)
    if not payload.keys:
        print(Fore.YELLOW + "No user data keys found, the backup will be empty.")
    print(Fore.CYAN + "Backup link:")
    print(build_backup_url(payload, origin=args.origin))


def _cmd_twqr(args: argparse.Namespace) -> None:
    payload = create_twqr_string(args.bank, args.account, args.amount, args.comment)
    print(payload)
    if args.png:
        _write_png(args.png, payload)


def main(argv: list[str] | None = None) -> None:
    colorama_init(autoreset=True)

    parser = argparse.ArgumentParser(
        prog="payme-share",
        description="Build and read TWQR payment share links.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log parsing and network details to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build a share link from a JSON payload.")
    build.add_argument(
        "input",
        type=pathlib.Path,
        help="Path to a JSON file with the share data (b, a, m, c, mo, bd, ...).",
    )
    build.add_argument("--mode", choices=VALID_MODES, default=None)
    build.add_argument("--title", default=None, help="Title path segment.")
    build.add_argument("--pax", default=None, help="People count path segment (pay mode).")
    build.add_argument(
        "--template-id", default=None, help="Template id path segment (bill mode)."
    )
    build.add_argument(
        "--password",
        default=None,
        help="Encrypt the link; the recipient needs this password to open it.",
    )
    build.add_argument(
        "--origin",
        default=None,
        help="Origin for the link (default: $PAYME_ORIGIN or https://payme.tw).",
    )
    build.add_argument(
        "--shorten",
        action="store_true",
        help="Also create an end-to-end encrypted short link.",
    )
    build.add_argument(
        "--qr",
        type=pathlib.Path,
        default=None,
        help="Write the TWQR payment QR code for this payload to a PNG file.",
    )
    build.set_defaults(func=_cmd_build)

    parse = sub.add_parser("parse", help="Decode a share or backup link.")
    parse.add_argument("url", help="Full share link.")
    parse.add_argument("--password", default=None, help="Password for encrypted links.")
    parse.set_defaults(func=_cmd_parse)

    backup = sub.add_parser("backup", help="Build a backup link from saved settings.")
    backup.add_argument(
        "settings",
        type=pathlib.Path,
        help="Path to a JSON object of local setting keys and values.",
    )
    backup.add_argument("--origin", default=None)
    backup.set_defaults(func=_cmd_backup)

    twqr = sub.add_parser("twqr", help="Print (and optionally render) a TWQR payload.")
    twqr.add_argument("--bank", required=True, help="3 digit bank code.")
    twqr.add_argument("--account", required=True, help="Account number.")
    twqr.add_argument("--amount", default=None, help="Amount in TWD.")
    twqr.add_argument("--comment", default=None, help="Transfer note.")
    twqr.add_argument("--png", type=pathlib.Path, default=None, help="Output PNG path.")
    twqr.set_defaults(func=_cmd_twqr)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    args.func(args)


if __name__ == "__main__":
    main()
