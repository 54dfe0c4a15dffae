#!/usr/bin/env python3
"""
College Seed Script

Loads the default college directory into MongoDB. Colleges cannot be
created through the API, so run this once per environment.

Usage:
    python scripts/seed_colleges.py            # insert missing colleges
    python scripts/seed_colleges.py --replace  # wipe and reload
"""
import argparse
import logging
import sys
sys.path.insert(0, '.')

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.db.mongodb import get_mongo_db, init_mongo_indexes
from app.services.college_service import CollegeService

logger = logging.getLogger("seed_colleges")

DEFAULT_COLLEGES = [
    # IITs
    "Indian Institute of Technology Bombay",
    "Indian Institute of Technology Delhi",
    "Indian Institute of Technology Madras",
    "Indian Institute of Technology Kanpur",
    "Indian Institute of Technology Kharagpur",
    "Indian Institute of Technology Roorkee",
    "Indian Institute of Technology Guwahati",
    "Indian Institute of Technology Hyderabad",
    # NITs
    "National Institute of Technology Trichy",
    "National Institute of Technology Karnataka Surathkal",
    "National Institute of Technology Rourkela",
    "National Institute of Technology Warangal",
    "National Institute of Technology Calicut",
    # IIITs
    "International Institute of Information Technology Hyderabad",
    "International Institute of Information Technology Bangalore",
    "International Institute of Information Technology Allahabad",
    # Other institutes
    "Birla Institute of Technology and Science Pilani",
    "Vellore Institute of Technology",
    "Manipal Institute of Technology",
    "Delhi Technological University",
    "Thapar Institute of Engineering and Technology",
    "PES University Bangalore",
    "RV College of Engineering Bangalore",
    "College of Engineering Pune",
    "Jadavpur University Kolkata",
    "Anna University Chennai",
    "PSG College of Technology Coimbatore",
    # State universities
    "University of Mumbai",
    "University of Delhi",
    "Pune University",
    "Gujarat Technological University",
    "Osmania University Hyderabad",
    "Jawaharlal Nehru Technological University Hyderabad",
    "Visvesvaraya Technological University Belgaum",
]


def main():
    parser = argparse.ArgumentParser(description="Seed the college directory")
    parser.add_argument("--replace", action="store_true", help="Delete existing colleges first")
    args = parser.parse_args()

    setup_logging(get_settings())
    db = get_mongo_db()
    init_mongo_indexes(db)

    inserted = CollegeService(db).seed(DEFAULT_COLLEGES, replace=args.replace)
    logger.info("Seeded %d of %d colleges", inserted, len(DEFAULT_COLLEGES))


if __name__ == "__main__":
    main()
