"""
Field configuration loader for the Nomad admin app.
Loads the YAML field lists that drive the generic form renderer and checks
them against the validation models and page defaults.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Type
import logging

from pydantic import BaseModel, ValidationError

from .amenities import get_available_amenities
from .exceptions import FieldConfigError
from .field_config import FieldConfig

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).parent / "schemas"

# Named vocabularies a tag picker can draw its options from
TAG_OPTION_SOURCES = {
    'amenities': get_available_amenities,
}

# Loaded field lists, keyed by form name
_fields_cache: Dict[str, List[FieldConfig]] = {}


def load_field_document(form_name: str, schemas_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read the raw YAML document for a form.

    Args:
        form_name: Document name without extension (e.g. 'space')
        schemas_dir: Directory holding the documents (defaults to the bundled one)

    Returns:
        Parsed document

    Raises:
        FieldConfigError: If the file is missing, unparsable or not a mapping
    """
    path = (schemas_dir or SCHEMAS_DIR) / f"{form_name}.yaml"

    if not path.exists():
        raise FieldConfigError(form_name, [f"file not found: {path}"], path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {path}: {e}")
        raise FieldConfigError(form_name, [f"YAML parsing error: {e}"], path) from e

    if not isinstance(document, dict) or not isinstance(document.get('fields'), list):
        raise FieldConfigError(form_name, ["document must be a mapping with a 'fields' list"], path)

    return document


def parse_fields(form_name: str, raw_fields: List[Any], path: Optional[Path] = None) -> List[FieldConfig]:
    """
    Turn raw field entries into FieldConfig objects.

    All problems are collected before raising so a broken document is
    reported in one go.

    Raises:
        FieldConfigError: If any entry is invalid or a name repeats
    """
    fields: List[FieldConfig] = []
    problems: List[str] = []
    seen = set()

    for index, raw in enumerate(raw_fields):
        if not isinstance(raw, dict):
            problems.append(f"entry {index} is not a mapping")
            continue

        label = raw.get('name', f"#{index}")
        try:
            field = FieldConfig(**raw)
        except ValidationError as e:
            for error in e.errors():
                location = '.'.join(str(part) for part in error.get('loc', ()))
                where = f"{label}.{location}" if location else str(label)
                problems.append(f"{where}: {error.get('msg')}")
            continue

        if field.name in seen:
            problems.append(f"{field.name}: duplicate field name")
            continue
        seen.add(field.name)

        if field.tag_options_source:
            source = TAG_OPTION_SOURCES.get(field.tag_options_source)
            if source is None:
                problems.append(f"{field.name}: unknown tag_options_source '{field.tag_options_source}'")
                continue
            field = field.model_copy(update={'tag_options': source()})

        fields.append(field)

    if problems:
        for problem in problems:
            logger.error(f"Field configuration '{form_name}': {problem}")
        raise FieldConfigError(form_name, problems, path)

    return fields


def load_fields(form_name: str, schemas_dir: Optional[Path] = None) -> List[FieldConfig]:
    """
    Load the field list for a form, using the cache when possible.

    Args:
        form_name: Document name without extension (e.g. 'event')
        schemas_dir: Directory override, bypasses the cache

    Returns:
        Ordered list of FieldConfig objects
    """
    if schemas_dir is None and form_name in _fields_cache:
        return _fields_cache[form_name]

    document = load_field_document(form_name, schemas_dir)
    path = (schemas_dir or SCHEMAS_DIR) / f"{form_name}.yaml"
    fields = parse_fields(form_name, document['fields'], path)

    logger.info(f"Loaded {len(fields)} fields for form '{form_name}'")

    if schemas_dir is None:
        _fields_cache[form_name] = fields

    return fields


def get_form_title(form_name: str) -> str:
    document = load_field_document(form_name)
    return str(document.get('title') or form_name.replace('_', ' ').title())


def clear_fields_cache() -> None:
    """Forget loaded field lists so the next load re-reads the YAML."""
    _fields_cache.clear()
    logger.debug("Field configuration cache cleared")


def check_field_coverage(fields: List[FieldConfig], model: Type[BaseModel],
                         defaults: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Report configured fields that the validation model or the defaults
    mapping does not know about.

    Args:
        fields: Field list of a form
        model: Validation model used on submit
        defaults: Defaults mapping the page passes to the renderer

    Returns:
        Dict with 'missing_in_model' and 'missing_in_defaults' name lists
    """
    model_fields = set(model.model_fields.keys())
    report = {
        'missing_in_model': [f.name for f in fields if f.name not in model_fields],
        'missing_in_defaults': [f.name for f in fields if f.name not in defaults],
    }

    if report['missing_in_model'] or report['missing_in_defaults']:
        logger.warning(f"Field coverage gaps for {model.__name__}: {report}")

    return report
