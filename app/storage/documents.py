"""Codecs between storage records and Appwrite documents.

Appwrite documents use their own flattened shape: system attributes are
``$``-prefixed, attribute names are camelCase, sites keep their coordinates
in a ``location`` object and nested project documents are stored as JSON
strings.
"""

import json
import re
from typing import Any, Dict, Optional, Tuple

from fastapi.encoders import jsonable_encoder

from app.schemas.common import to_camel
from app.services.health_score import weighted_progress
from app.storage.base import Record

DEFAULT_COUNTRY = "India"
SITE_TYPE = "railway"
# kg of CO2 avoided per kWh, stored alongside each production row
CO2_KG_PER_KWH = 0.85

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(string: str) -> str:
    """Convert camelCase to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", string).lower()


class DocumentCodec:
    """Generic mapping; subclasses rename, pack and unpack entity specific attributes."""

    collection_id: str = ""
    key_field: str = "id"
    renames: Dict[str, str] = {}
    json_fields: Tuple[str, ...] = ()
    packed_fields: Tuple[str, ...] = ()
    derived_attributes: Tuple[str, ...] = ()

    _system_fields = {"created_at": "$createdAt", "updated_at": "$updatedAt"}

    def attribute(self, field: str) -> Optional[str]:
        """Document attribute for a record field, None when it is not directly queryable."""
        if field == self.key_field:
            return "$id"
        if field in self._system_fields:
            return self._system_fields[field]
        if field in self.packed_fields or field in self.json_fields:
            return None
        return self.renames.get(field, to_camel(field))

    def encode(self, record: Record) -> Dict[str, Any]:
        data = jsonable_encoder(record)
        document = {}
        for name, value in data.items():
            if name == self.key_field or name in self._system_fields or name in self.packed_fields:
                continue
            if name in self.json_fields:
                document[to_camel(name)] = json.dumps(value)
                continue
            document[self.attribute(name)] = value
        self.pack(data, document)
        return document

    def decode(self, document: Dict[str, Any]) -> Record:
        reverse = {attribute: name for name, attribute in self.renames.items()}
        record: Record = {
            self.key_field: document["$id"],
            "created_at": document.get("$createdAt"),
            "updated_at": document.get("$updatedAt"),
        }
        for attribute, value in document.items():
            if attribute.startswith("$") or attribute in self.derived_attributes:
                continue
            name = reverse.get(attribute, to_snake(attribute))
            if name in self.json_fields and isinstance(value, str):
                value = json.loads(value)
            record[name] = value
        self.unpack(document, record)
        return record

    def pack(self, data: Record, document: Dict[str, Any]) -> None:
        pass

    def unpack(self, document: Dict[str, Any], record: Record) -> None:
        pass


class SiteCodec(DocumentCodec):
    collection_id = "sites"
    renames = {"location_name": "name", "feasible_capacity": "capacity"}
    packed_fields = ("latitude", "longitude", "address")
    derived_attributes = ("location", "type")

    def pack(self, data, document):
        document["location"] = {
            "latitude": data.get("latitude"),
            "longitude": data.get("longitude"),
            "address": data.get("address"),
            "country": DEFAULT_COUNTRY,
        }
        document["type"] = SITE_TYPE

    def unpack(self, document, record):
        location = document.get("location") or {}
        if isinstance(location, str):
            location = json.loads(location)
        record["latitude"] = location.get("latitude")
        record["longitude"] = location.get("longitude")
        record["address"] = location.get("address")


class ProjectCodec(DocumentCodec):
    collection_id = "epc_projects"
    key_field = "project_id"
    renames = {"project_name": "name", "overall_status": "status"}
    json_fields = ("phases", "resources", "quality_control", "risks")
    derived_attributes = ("budget", "progress", "startDate", "endDate")

    def pack(self, data, document):
        resources = data.get("resources") or {}
        timeline = resources.get("timeline") or {}
        phases = data.get("phases") or {}
        document["budget"] = (resources.get("budget") or {}).get("total", 0)
        document["startDate"] = timeline.get("planned_start_date")
        document["endDate"] = timeline.get("planned_end_date")
        document["progress"] = weighted_progress(
            *((phases.get(name) or {}).get("progress", 0) for name in ("engineering", "procurement", "construction"))
        )


class EnergyCodec(DocumentCodec):
    collection_id = "energy_production"
    renames = {"energy_produced": "energy", "peak_output": "peakPower", "sun_hours": "sunshine"}
    derived_attributes = ("co2Saved",)

    def pack(self, data, document):
        document["co2Saved"] = round((data.get("energy_produced") or 0) * CO2_KG_PER_KWH, 2)


class ZoneCodec(DocumentCodec):
    collection_id = "zones"


class DivisionCodec(DocumentCodec):
    collection_id = "divisions"


class StationCodec(DocumentCodec):
    collection_id = "stations"
