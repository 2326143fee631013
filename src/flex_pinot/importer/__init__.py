"""CSV import pipeline: load, validate, build payloads and create resources."""

from flex_pinot.importer.csv_loader import CsvTable, load_csv
from flex_pinot.importer.lookups import ExistenceCache, ExistenceChecker
from flex_pinot.importer.orchestrator import ImportRunContext, ResourceImporter
from flex_pinot.importer.payloads import parse_tags
from flex_pinot.importer.validator import RowValidator, validate_headers

__all__ = [
    "CsvTable",
    "ExistenceCache",
    "ExistenceChecker",
    "ImportRunContext",
    "ResourceImporter",
    "RowValidator",
    "load_csv",
    "parse_tags",
    "validate_headers",
]
