"""
Print the stored landing page preferences as JSON.

    python scripts/export_preferences.py               # full document
    python scripts/export_preferences.py --summary     # ranked summary only
    python scripts/export_preferences.py --path data/prefs.json
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))
from landing_prefs import FileSlot, LandingPreferences, PreferenceStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Export landing page preferences")
    parser.add_argument("--summary", action="store_true", help="Print the ranked summary instead of the raw document.")
    parser.add_argument("--path", type=Path, default=None, help="Preference document to read (defaults to the configured path).")
    args = parser.parse_args()

    store = PreferenceStore(FileSlot(args.path)) if args.path else None
    prefs = LandingPreferences(store=store)

    if args.summary:
        print(json.dumps(prefs.get_summary().model_dump(mode="json", by_alias=True), indent=2))
    else:
        print(prefs.export_state())


if __name__ == "__main__":
    main()
