"""
Total, defaulting validators for records read from the backing file.

None of these functions raise: a field with the wrong shape is replaced by a
type-correct default so that one damaged record never aborts a whole load.
"""
from __future__ import annotations
import json
from typing import Any, List, Mapping

from backend.models.forms import Box, FormFileContents, FormInstance, FormTemplate, Slot

def _as_mapping(x: Any) -> Mapping[str, Any]:
    return x if isinstance(x, Mapping) else {}

def as_string(x: Any) -> str:
    if isinstance(x, str):
        # lone surrogates (e.g. a "\ud800" escape) cannot be written back as UTF-8
        return x.encode("utf-8", "surrogatepass").decode("utf-8", "replace")
    if x is None:
        return ""
    if isinstance(x, bool):
        return "true" if x else "false"
    if isinstance(x, (int, float)):
        return str(x)
    return json.dumps(x, separators=(",", ":"), default=str)

def as_number(x: Any) -> float | int:
    if isinstance(x, (int, float)) and not isinstance(x, bool):
        return x
    return 0

def fix_box(x: Any) -> Box:
    b = _as_mapping(x)
    return Box(x=as_number(b.get("x")), y=as_number(b.get("y")), w=as_number(b.get("w")), h=as_number(b.get("h")))

def fix_slot(x: Any) -> Slot:
    s = _as_mapping(x)
    return Slot(description=as_string(s.get("description")), location=fix_box(s.get("location")))

def fix_slots(x: Any) -> List[Slot]:
    if not isinstance(x, list):
        return []
    return [fix_slot(s) for s in x]

def fix_form_template(x: Any) -> FormTemplate:
    t = _as_mapping(x)
    debug = t.get("debug")
    return FormTemplate(
        name=as_string(t.get("name")),
        image=as_string(t.get("image")),
        slots=fix_slots(t.get("slots")),
        debug=debug if isinstance(debug, bool) else None,
    )

def fix_form_instance(x: Any) -> FormInstance:
    i = _as_mapping(x)
    contents = i.get("contents")
    return FormInstance(
        id=as_string(i.get("id")),
        form=as_string(i.get("form")),
        contents=[as_string(c) for c in contents] if isinstance(contents, list) else [],
    )

def fix_file_contents(x: Any) -> FormFileContents:
    doc = _as_mapping(x)
    templates = doc.get("templates")
    instances = doc.get("instances")
    return FormFileContents(
        templates=[fix_form_template(t) for t in templates] if isinstance(templates, list) else [],
        instances=[fix_form_instance(i) for i in instances] if isinstance(instances, list) else [],
    )
