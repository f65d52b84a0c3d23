"""Console entry point for the QR code URL generator.

Runs the interactive menu by default, or a single preview/insert when a
subcommand is given::

    qrcode-urls              # interactive menu
    qrcode-urls preview 5    # print 5 fresh URLs
    qrcode-urls insert 1000  # persist 1000 records
"""

import argparse
import asyncio
import sys
from collections.abc import Callable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from qrcode_urls.codes import CodeSpaceExhaustedError
from qrcode_urls.database import async_session, close_db, init_db
from qrcode_urls.dependencies import RequestContext, get_service_manager
from qrcode_urls.enums import MenuChoice
from qrcode_urls.schemas import MAX_COUNT, GenerateRequest
from qrcode_urls.service import QRCodeUrlService

__all__ = ["build_parser", "main", "run_menu"]

MENU_LINES = (
    "Select operation mode:",
    f"{MenuChoice.PREVIEW}. Generate and preview random URLs",
    f"{MenuChoice.INSERT}. Insert into database",
    f"{MenuChoice.EXIT}. Exit",
)
INVALID_NUMBER = "Invalid input. Please enter a valid non-negative number."
INVALID_CHOICE = "Invalid option. Please select again."
GOODBYE = "Program terminated."

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def _read_count(prompt: str, read: Reader, write: Writer) -> int | None:
    try:
        return GenerateRequest.from_text(read(prompt)).count
    except ValidationError:
        write(INVALID_NUMBER)
        return None


async def _preview(service: QRCodeUrlService, count: int, write: Writer) -> None:
    write("Generated random URLs:")
    for url in await service.preview_urls(count):
        write(url)


async def _insert(service: QRCodeUrlService, count: int, write: Writer) -> None:
    write(f"Inserting {count} records...")
    records = await service.insert_urls(count)
    write(f"Data insertion completed: {len(records)} records written.")


async def run_menu(service: QRCodeUrlService, read: Reader = input, write: Writer = print) -> None:
    """Loop over the menu until the user exits or input ends.

    Bad counts and unknown options are reported and the loop continues.
    Storage errors propagate to the caller.
    """
    while True:
        for line in MENU_LINES:
            write(line)
        try:
            choice = MenuChoice.parse(read("> "))
            if choice is MenuChoice.EXIT:
                write(GOODBYE)
                return
            if choice is None:
                write(INVALID_CHOICE)
                continue

            if choice is MenuChoice.PREVIEW:
                count = _read_count("Enter the number of random URLs to generate: ", read, write)
                if count is not None:
                    await _preview(service, count, write)
            else:
                count = _read_count("Enter the number of records to insert: ", read, write)
                if count is not None:
                    await _insert(service, count, write)
        except EOFError:
            write(GOODBYE)
            return
        except CodeSpaceExhaustedError as exc:
            write(f"Could not generate codes: {exc}")


def _count_arg(raw: str) -> int:
    try:
        return GenerateRequest.from_text(raw).count
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(f"invalid count {raw!r}: expected an integer from 0 to {MAX_COUNT}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrcode-urls",
        description="Generate unique codes for QR code URLs",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("menu", help="interactive menu (default)")
    preview = subparsers.add_parser("preview", help="print fresh URLs without saving them")
    preview.add_argument("count", type=_count_arg)
    insert = subparsers.add_parser("insert", help="generate and save URL records")
    insert.add_argument("count", type=_count_arg)
    return parser


async def _run(args: argparse.Namespace) -> int:
    manager = get_service_manager()
    await init_db()
    try:
        async with async_session() as session:
            service = QRCodeUrlService.from_context(RequestContext(database=session, service_manager=manager))

            if args.command in (None, "menu"):
                await run_menu(service)
                return 0

            try:
                if args.command == "preview":
                    await _preview(service, args.count, print)
                else:
                    await _insert(service, args.count, print)
            except CodeSpaceExhaustedError as exc:
                print(f"Could not generate codes: {exc}", file=sys.stderr)
                return 1
            except SQLAlchemyError as exc:
                manager.logger.error(f"{args.command} aborted by storage error: {exc}")
                print(f"Database error: {exc}", file=sys.stderr)
                return 1
            return 0
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
