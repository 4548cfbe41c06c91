# caltrail/cli/export.py
import csv
import os
from datetime import datetime

import click
from flask.cli import AppGroup

from caltrail.models.food import NUTRIENT_FIELDS
from caltrail.services.store import get_store

export_group = AppGroup("export", help="Export commands (CSV)")

FOOD_CSV_FIELDS = ["name", "brand", "description", *NUTRIENT_FIELDS, "source", "usda_fdc_id"]


@export_group.command("foods")
@click.option("--to", "dest_path", default=None,
              help="Destination CSV (default: instance/foods_export_YYYYMMDD.csv)")
def export_foods(dest_path):
    """
    Export every food to a CSV with the same headers `seed foods --from-csv` reads.
    """
    if not dest_path:
        ts = datetime.now().strftime("%Y%m%d")
        dest_path = os.path.join("instance", f"foods_export_{ts}.csv")

    folder = os.path.dirname(dest_path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    rows = get_store().all_foods()
    with open(dest_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=FOOD_CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for food in rows:
            writer.writerow(food.to_dict())

    click.secho(f"Exported {len(rows)} foods to: {dest_path}", fg="green")
