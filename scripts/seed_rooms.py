"""
Seed the room inventory for a fresh lodge database.

Usage: python scripts/seed_rooms.py
Existing room numbers are left untouched.
"""
import asyncio
import os
import sys

# Ensure usage of the project root for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from frontdesk.config.database import db_config, Collections
from frontdesk.database.db_operations import db_ops

ROOM_LAYOUT = [
    # floor, numbers, type, base, ac, geyser
    (0, ["Hall"], "function_hall", 5000, 1500, 0),
    (1, ["101", "102", "103", "104", "105", "106"], "standard", 800, 200, 100),
    (2, ["201", "202", "203", "204", "205", "206"], "standard", 800, 200, 100),
    (3, ["301", "302", "303", "304"], "luxury", 1500, 300, 100),
    (4, ["401"], "penthouse", 3000, 500, 150),
]

async def seed_rooms():
    print("🌱 Seeding rooms...")

    try:
        await db_config.connect_db()

        created = 0
        for floor, numbers, room_type, base_price, ac_charge, geyser_charge in ROOM_LAYOUT:
            for room_number in numbers:
                existing = await db_ops.get_one(Collections.ROOMS, {"room_number": room_number})
                if existing:
                    print(f"⚠️ Room {room_number} already exists")
                    continue
                await db_ops.create(Collections.ROOMS, {
                    "room_number": room_number,
                    "floor": floor,
                    "room_type": room_type,
                    "base_price": base_price,
                    "ac_charge": ac_charge,
                    "geyser_charge": geyser_charge,
                    "status": "available",
                    "description": None,
                })
                created += 1
                print(f"✅ Created Room {room_number} ({room_type})")

        print(f"\n🎉 Seeding complete: {created} room(s) added")

    finally:
        await db_config.close_db()

if __name__ == "__main__":
    asyncio.run(seed_rooms())
