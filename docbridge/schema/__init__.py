from docbridge.schema.inference import DEFAULT_SAMPLE_SIZE, SchemaInferrer
from docbridge.schema.paths import (
    ColumnPath,
    FieldStep,
    IndexStep,
    PathStep,
    assign_path,
    parse_path,
    resolve_path,
)

__all__ = [
    "ColumnPath",
    "DEFAULT_SAMPLE_SIZE",
    "FieldStep",
    "IndexStep",
    "PathStep",
    "SchemaInferrer",
    "assign_path",
    "parse_path",
    "resolve_path",
]
