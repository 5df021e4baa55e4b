#!/usr/bin/env python3
"""
Interactive local browsing harness (no HTTP).

Usage:
  python3 scripts/browse_local.py

What it does:
- Builds the store, booking manager and a view coordinator through app.wiring
- Seeds the demo catalog into an empty store
- Lets you filter, sort and book from the prompt, printing the list after each step
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass

from app.application.exceptions import RecordStoreError
from app.application.use_cases.view_state import ViewSnapshot, ViewStateCoordinator
from app.infrastructure.store.seed_data import seed_demo_data
from app.wiring.dependencies import get_booking_manager, get_record_store, get_view_coordinator


def _print_header(user_id: str | None) -> None:
    print("\nLocal Class Browser")
    print("-" * 60)
    print(f"user_id: {user_id or '(not logged in)'}")
    print("Commands: /day <name|->, /time <HH:MM|->, /sort, /book <id>, /mine, /login <id>, /quit, /help")
    print("-" * 60)


def _print_snapshot(snapshot: ViewSnapshot) -> None:
    sort = "price ascending" if snapshot.sort_order.value == "asc" else "price descending"
    day = snapshot.day_filter.value if snapshot.day_filter else "any day"
    print(f"\n[{snapshot.status.value}] {day}, {snapshot.time_filter or 'any time'}, {sort}")
    if snapshot.error:
        print(f"error: {snapshot.error}")
    for item in snapshot.items:
        info = item.info
        mark = "BOOKED" if item.booked else "      "
        print(
            f"  {mark} {info.id:<14} {info.type_of_class:<12} "
            f"{info.date:%a %d/%m/%Y} {info.time} {info.duration}min ${info.price_per_class:g} ({info.teacher})"
        )
    if not snapshot.items:
        print("  (no classes)")


async def _handle(coordinator: ViewStateCoordinator, cmd: str, arg: str) -> None:
    if cmd == "/day":
        _print_snapshot(await coordinator.set_day_filter(None if arg in ("", "-") else arg))
    elif cmd == "/time":
        _print_snapshot(await coordinator.set_time_filter(None if arg in ("", "-") else arg))
    elif cmd == "/sort":
        _print_snapshot(await coordinator.toggle_sort_order())
    elif cmd == "/book":
        item = coordinator.find_item(arg)
        if item is None:
            print(f"No class {arg!r} in the current list.")
            return
        result = await coordinator.book(item)
        print(result.message)
        _print_snapshot(coordinator.snapshot())
    elif cmd == "/mine":
        if not coordinator.user_id:
            print("You must be logged in to view booked classes.")
            return
        try:
            bookings = await get_booking_manager().list_user_bookings(coordinator.user_id)
        except RecordStoreError:
            print("Failed to fetch booked classes. Please try again.")
            return
        for booking in bookings:
            print(f"  {booking.class_name:<12} {booking.date:%d/%m/%Y} {booking.time} with {booking.teacher}")
    else:
        print(f"Unknown command: {cmd}")


async def main() -> None:
    user_id = os.getenv("BROWSE_USER_ID") or None
    await seed_demo_data(get_record_store())
    coordinator = get_view_coordinator("local", user_id)
    _print_header(user_id)
    _print_snapshot(await coordinator.refresh())

    while True:
        try:
            line = (await asyncio.to_thread(input, "\n> ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not line:
            continue
        cmd, _, arg = line.partition(" ")
        cmd, arg = cmd.lower(), arg.strip()

        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            _print_header(coordinator.user_id)
            continue
        if cmd == "/login":
            coordinator = get_view_coordinator("local", arg or None)
            _print_snapshot(await coordinator.refresh())
            continue

        try:
            await _handle(coordinator, cmd, arg)
        except ValueError as e:
            print(f"Invalid value: {e}")


if __name__ == "__main__":
    asyncio.run(main())
