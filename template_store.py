"""Save and load card templates (card size plus field layout) as JSON."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Tuple, Union

from card_geometry import CardSpec
from field_model import Field, new_field_id


class TemplateFormatError(ValueError):
    """Raised when a template file cannot be understood."""


def field_to_dict(field: Field) -> Dict[str, object]:
    return dict(field._asdict())


def field_from_dict(data: Mapping[str, object]) -> Field:
    if not isinstance(data, Mapping):
        raise TemplateFormatError(f"Field entry must be an object, got {data!r}")
    values = {key: data[key] for key in Field._fields if key in data}
    if "name" not in values or "x" not in values or "y" not in values:
        raise TemplateFormatError(f"Field entry needs name, x and y: {dict(data)!r}")
    values.setdefault("id", new_field_id())
    return Field(**values)


def template_to_dict(card: CardSpec, fields: List[Field]) -> Dict[str, object]:
    return {
        "card": dict(card._asdict()),
        "fields": [field_to_dict(field) for field in fields],
    }


def template_from_dict(data: Mapping[str, object]) -> Tuple[CardSpec, List[Field]]:
    if not isinstance(data, Mapping):
        raise TemplateFormatError("Template must be a JSON object")
    card_data = data.get("card", {})
    if not isinstance(card_data, Mapping):
        raise TemplateFormatError("'card' must be an object")
    card = CardSpec().resized(
        width=card_data.get("width"),
        height=card_data.get("height"),
        resolution=card_data.get("resolution"),
    )
    fields_data = data.get("fields", [])
    if not isinstance(fields_data, list):
        raise TemplateFormatError("'fields' must be a list")
    return card, [field_from_dict(entry) for entry in fields_data]


def save_template(path: Union[str, Path], card: CardSpec, fields: List[Field]) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(template_to_dict(card, fields), handle, indent=2)
    return path


def load_template(path: Union[str, Path]) -> Tuple[CardSpec, List[Field]]:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise TemplateFormatError(f"{path}: {exc}") from exc
    return template_from_dict(data)
