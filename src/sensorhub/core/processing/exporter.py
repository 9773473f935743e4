import csv
import io
import json
from enum import Enum
from typing import List, Sequence

from sensorhub.core.models.sensor_data import SensorReading


class ExportFormat(Enum):
    CSV = "csv"
    JSON = "json"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


def export_readings(readings: Sequence[SensorReading], export_format: ExportFormat) -> str:
    """Render readings oldest-first as CSV (one row per reading) or a JSON array."""
    rows = [reading.to_dict() for reading in readings]

    if export_format == ExportFormat.JSON:
        return json.dumps(rows, indent=2)

    output = io.StringIO()
    if not rows:
        return ""
    headers: List[str] = list(rows[0].keys())
    writer = csv.DictWriter(output, fieldnames=headers)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return output.getvalue()
