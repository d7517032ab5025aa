"""Look up one player against FIDE with full debug logging.

Uses exactly the same fetch / parse / disambiguation code as the pipeline, but
prints the result instead of writing a page::

    python debug_lookup.py Xia Justin Australia
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from config import load_settings
from etl.federations import resolve_federation_code
from ingest.fide import fetch_rating, search_url


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Debug a single FIDE rating lookup.")
    parser.add_argument("surname")
    parser.add_argument("first_name")
    parser.add_argument("country", nargs="?", default="Australia")
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = load_settings()

    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    print(f"Player:    {args.surname}, {args.first_name}")
    print(f"Country:   {args.country}")
    print(f"FIDE code: {resolve_federation_code(args.country) or 'N/A'}")
    print(f"Search:    {search_url(args.surname, args.first_name)}")
    print()

    match = fetch_rating(
        args.surname,
        args.first_name,
        args.country,
        timeout=settings.request_timeout,
        birth_year_cutoff=settings.birth_year_cutoff,
    )
    if match is None:
        print("No FIDE data found. Possible reasons:")
        print("  - player not in the FIDE database")
        print("  - federation mismatch (country not recognised, or registered elsewhere)")
        print("  - network or parsing error (see log above)")
        return 1

    print("Found FIDE data:")
    print(f"  FIDE ID:         {match.fide_id or 'N/A'}")
    print(f"  Name:            {match.name or 'N/A'}")
    print(f"  Title:           {match.title or 'N/A'}")
    print(f"  Standard rating: {match.std_rating or 'N/A'}")
    print(f"  Federation:      {match.fed_code or 'N/A'}")
    print(f"  Birth year:      {match.birth_year or 'N/A'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
