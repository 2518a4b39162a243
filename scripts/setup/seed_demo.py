# scripts/setup/seed_demo.py
"""
Seed a demo organization with cameras so the API can be tried by hand.
Usage: python scripts/setup/seed_demo.py --name "Demo Site" --cameras 3
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables, transaction
from app.models.organization import Organization
from app.services.camera_service import register_camera


def main():
    parser = argparse.ArgumentParser(description="Seed a demo organization")
    parser.add_argument("--name", default="Demo Site")
    parser.add_argument("--cameras", type=int, default=3)
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        with transaction(db):
            org = Organization(name=args.name)
            db.add(org)
            db.flush()
        print(f"🏢 Organization {org.id}: {org.name}")

        for i in range(1, args.cameras + 1):
            cam = register_camera(db, org.id, {
                "location": f"Entrance {i}",
                "ip_address": f"192.168.1.{100 + i}",
                "camera_type": "dome",
            })
            print(f"   📷 Camera {cam.id} at {cam.location} ({cam.ip_address})")

        print("\nCall the API with:")
        print(f"   -H 'X-Organization-Id: {org.id}' -H 'X-User-Role: organization_admin'")
    finally:
        db.close()


if __name__ == "__main__":
    main()
