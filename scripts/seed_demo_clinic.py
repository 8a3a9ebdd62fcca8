#!/usr/bin/env python3
"""
Seed a demo clinic with one specialist into MongoDB.

Usage:
    python scripts/seed_demo_clinic.py
    python scripts/seed_demo_clinic.py --slug my-clinic --name "My Clinic" --lat 28.6139 --lng 77.2090
    python scripts/seed_demo_clinic.py --no-geofence --open
"""

import argparse
import asyncio
import sys
import uuid
from pathlib import Path

# Bootstrap: Add src directory to Python path for src-layout convenience
_src_dir = str(Path(__file__).resolve().parent.parent / "src")
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from clinicqueue.adapters.db.mongo.repositories import (
    MongoDoctorStatusRepository,
    MongoSpecialistRepository,
    MongoTenantRepository,
)
from clinicqueue.app import init_database
from clinicqueue.core.config import get_settings
from clinicqueue.core.utils.datetime_utils import clinic_today, get_current_timestamp
from clinicqueue.domain.entities import Specialist, Tenant
from clinicqueue.domain.enums.token_status import DoctorStatusType


async def seed(args: argparse.Namespace) -> None:
    settings = get_settings()
    client = await init_database(settings)
    try:
        tenants = MongoTenantRepository()
        specialists = MongoSpecialistRepository()

        existing = await tenants.find_by_slug(args.slug)
        if existing:
            print(f"Clinic '{args.slug}' already exists (id={existing.id}), nothing to do")
            return

        tenant = await tenants.save(Tenant(
            id=str(uuid.uuid4()),
            slug=args.slug,
            name=args.name,
            qr_active=True,
            geo_lat=None if args.no_geofence else args.lat,
            geo_lng=None if args.no_geofence else args.lng,
            location_radius_m=args.radius,
            address=args.address,
        ))
        specialist = await specialists.save(Specialist(
            id=str(uuid.uuid4()),
            tenant_id=tenant.id,
            name=args.specialist_name,
            specialty=args.specialty,
            max_tokens_per_day=args.max_tokens,
        ))
        print(f"✅ Seeded clinic '{tenant.slug}' (tenant id {tenant.id})")
        print(f"   Specialist '{specialist.name}' (id {specialist.id}), cap {args.max_tokens}/day")

        if args.open:
            today = clinic_today(get_current_timestamp(), settings.queue.tzinfo)
            await MongoDoctorStatusRepository().upsert(
                tenant.id, None, today, DoctorStatusType.IN, "seed"
            )
            print(f"   Clinic marked IN for {today.isoformat()}")
    finally:
        client.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo clinic")
    parser.add_argument("--slug", default="demo-clinic")
    parser.add_argument("--name", default="Demo Clinic")
    parser.add_argument("--address", default="Demo Address")
    parser.add_argument("--lat", type=float, default=28.6139)
    parser.add_argument("--lng", type=float, default=77.2090)
    parser.add_argument("--radius", type=float, default=100.0)
    parser.add_argument("--no-geofence", action="store_true", help="Leave the clinic location unset")
    parser.add_argument("--specialist-name", default="Dr. Demo")
    parser.add_argument("--specialty", default="General Practitioner")
    parser.add_argument("--max-tokens", type=int, default=50)
    parser.add_argument("--open", action="store_true", help="Mark the clinic IN for today")
    asyncio.run(seed(parser.parse_args()))


if __name__ == "__main__":
    main()
