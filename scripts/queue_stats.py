#!/usr/bin/env python3
"""
Print today's queue statistics and board for a clinic.

Usage:
    python scripts/queue_stats.py demo-clinic
"""

import argparse
import asyncio
import sys
from pathlib import Path

_src_dir = str(Path(__file__).resolve().parent.parent / "src")
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from clinicqueue.api.deps import get_queue_engine
from clinicqueue.app import init_database
from clinicqueue.core.config import get_settings


async def main(slug: str) -> None:
    settings = get_settings()
    client = await init_database(settings)
    try:
        engine = get_queue_engine()
        tenant = await engine.get_tenant_by_slug(slug)
        stats = await engine.get_today_stats(tenant.id)
        board = await engine.get_clinic_status(tenant.id)

        print("=" * 70)
        print(f"Queue statistics for {tenant.name} ({engine.today().isoformat()}, {settings.queue.timezone})")
        print("=" * 70)
        print(f"  QR intake: {'active' if tenant.qr_active else 'inactive'}")
        print(f"  Issued:    {stats.total} / {board.max_tokens_per_day}")
        print(f"  Waiting:   {stats.waiting}")
        print(f"  Completed: {stats.completed}")
        print(f"  Expired:   {stats.expired}")
        print()
        for doctor in board.doctors:
            print(f"  {doctor.status.value:<3} {doctor.name} ({doctor.specialty}) waiting={doctor.waiting_count}")
    finally:
        client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print today's queue statistics")
    parser.add_argument("slug", help="Clinic slug")
    asyncio.run(main(parser.parse_args().slug))
