"""JSON schema definition for reporter output."""
from __future__ import annotations

SCHEMA_VERSION = "1.0.0"

_CHECK_SCHEMA = {
    "type": "object",
    "required": ["kind", "verdict", "failed"],
    "properties": {
        "kind": {"type": "string", "enum": ["stdout", "stderr", "predict"]},
        "verdict": {"type": ["string", "null"], "enum": ["match", "significant", "cosmetic", None]},
        "failed": {"type": "boolean"},
        "reference": {"type": ["string", "null"]},
        "actual": {"type": "string"},
        "message": {"type": "string"},
        "missing_reference": {"type": "boolean"},
        "overwritten": {"type": "boolean"},
        "differing_lines": {"type": "integer", "minimum": 0},
    },
}

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "vwtest report",
    "type": "object",
    "required": ["schema_version", "generated_at", "summary", "tests"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "summary": {
            "type": "object",
            "required": ["total", "passed", "failed", "failures", "exit_code", "aborted", "duration_s"],
            "properties": {
                "total": {"type": "integer"},
                "passed": {"type": "integer"},
                "failed": {"type": "integer"},
                "failures": {"type": "integer"},
                "exit_code": {"type": "integer"},
                "aborted": {"type": "boolean"},
                "full_suite": {"type": "boolean"},
                "duration_s": {"type": "number"},
                "cpu_s": {"type": "number"},
                "epsilon": {"type": "number"},
                "fuzzy": {"type": "boolean"},
                "perf": {
                    "type": ["object", "null"],
                    "required": ["current", "previous", "ratio", "regressed"],
                    "properties": {
                        "current": {"type": "number"},
                        "previous": {"type": ["number", "null"]},
                        "ratio": {"type": ["number", "null"]},
                        "regressed": {"type": "boolean"},
                    },
                },
            },
        },
        "tests": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["number", "command", "status", "duration_ms"],
                "properties": {
                    "number": {"type": "integer", "minimum": 1},
                    "command": {"type": "string"},
                    "status": {"type": "string", "enum": ["passed", "failed", "exec-failed"]},
                    "duration_ms": {"type": "number"},
                    "exit_status": {"type": ["integer", "null"]},
                    "failure": {"type": "string"},
                    "checks": {"type": "array", "items": _CHECK_SCHEMA},
                },
            },
        },
    },
}
