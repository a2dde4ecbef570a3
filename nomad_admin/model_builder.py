"""
Coercion types and validation helpers shared by the form models.

Form widgets hand back loosely typed values (numbers typed as text, blank
strings for untouched inputs, uploaded file objects). The annotated types
here turn them into what the backend expects before the models apply their
own rules.
"""

from typing import Dict, Any, Type, Optional, List, Tuple, Annotated
from datetime import datetime, date, time
import re
import logging

from dateutil import parser as date_parser
from pydantic import BaseModel, BeforeValidator, AfterValidator, AnyUrl, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticCustomError

from .config_loader import get_config_value
from .storage import is_pending_upload, upload_size, upload_content_type

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$')
SLUG_INVALID = re.compile(r'[^a-z0-9]+')

_URL_ADAPTER = TypeAdapter(AnyUrl)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def blank_to_none(value: Any) -> Any:
    """Blank strings become None, other strings are stripped."""
    if is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    return value


# --- numbers --------------------------------------------------------------

def _parse_number(value: Any, integer: bool) -> Any:
    if isinstance(value, bool):
        raise PydanticCustomError('number_parsing', 'Expected a number')

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise PydanticCustomError('number_parsing', 'Expected a number')
    else:
        raise PydanticCustomError('number_parsing', 'Expected a number')

    if number != number or number in (float('inf'), float('-inf')):
        raise PydanticCustomError('number_parsing', 'Expected a number')

    if integer:
        if float(number) != int(number):
            raise PydanticCustomError('int_parsing', 'Expected a whole number')
        return int(number)

    return float(number)


def _required_float(value: Any) -> Any:
    return 0.0 if is_blank(value) else _parse_number(value, integer=False)


def _optional_float(value: Any) -> Any:
    return None if is_blank(value) else _parse_number(value, integer=False)


def _optional_int(value: Any) -> Any:
    return None if is_blank(value) else _parse_number(value, integer=True)


RequiredFloat = Annotated[float, BeforeValidator(_required_float)]
OptionalFloat = Annotated[Optional[float], BeforeValidator(_optional_float)]
OptionalInt = Annotated[Optional[int], BeforeValidator(_optional_int)]

# The limit sits on the inner type so a blank value (None) skips it.
OptionalNonNegFloat = Annotated[Optional[Annotated[float, Field(ge=0)]], BeforeValidator(_optional_float)]
OptionalNonNegInt = Annotated[Optional[Annotated[int, Field(ge=0)]], BeforeValidator(_optional_int)]


# --- text -----------------------------------------------------------------

def required_text(message: str):
    """
    Build a required string type whose blank-value error is ``message``
    (e.g. "Name is required").
    """
    def _check(value: Any) -> Any:
        if is_blank(value):
            raise PydanticCustomError('required', message)
        return value.strip() if isinstance(value, str) else value

    return Annotated[str, BeforeValidator(_check)]


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise PydanticCustomError('url', 'Invalid url')
    if '://' not in value:
        raise PydanticCustomError('url', 'Invalid url')
    return value


OptionalText = Annotated[Optional[str], BeforeValidator(blank_to_none)]
OptionalUrl = Annotated[Optional[str], BeforeValidator(blank_to_none), AfterValidator(_check_url)]


# --- choices and tags -----------------------------------------------------

def _lower_choice(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _coerce_tags(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(',') if part.strip()]
    if isinstance(value, (list, tuple)):
        tags: List[str] = []
        for item in value:
            text = str(item).strip()
            if text and text not in tags:
                tags.append(text)
        return tags
    return value


TagList = Annotated[List[str], BeforeValidator(_coerce_tags)]
LowerChoice = BeforeValidator(_lower_choice)


# --- dates and times ------------------------------------------------------

def _normalize_time(value: Any) -> Any:
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.strftime('%H:%M')
    if isinstance(value, time):
        return value.strftime('%H:%M')
    if isinstance(value, str):
        match = TIME_PATTERN.match(value.strip())
        if match:
            hour, minute = int(match.group(1)), int(match.group(2))
            if hour < 24 and minute < 60:
                return f"{hour:02d}:{minute:02d}"
    raise PydanticCustomError('time_parsing', 'Expected a time as HH:MM')


def parse_date_value(value: Any) -> Optional[date]:
    """
    Read a date from a widget or a stored record value.

    Accepts date, datetime and ISO strings ("2025-01-10",
    "2025-01-10T09:00:00+00:00"). Blank values give None.

    Raises:
        ValueError: If the value is not a recognizable date
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date_parser.isoparse(value.strip()).date()
    raise ValueError(f"Unsupported date value: {value!r}")


def _coerce_date(value: Any) -> Any:
    try:
        return parse_date_value(value)
    except (ValueError, OverflowError):
        raise PydanticCustomError('date_parsing', 'Invalid date')


def required_date(message: str):
    def _check(value: Any) -> Any:
        parsed = _coerce_date(value)
        if parsed is None:
            raise PydanticCustomError('required', message)
        return parsed

    return Annotated[date, BeforeValidator(_check)]


OptionalTime = Annotated[Optional[str], BeforeValidator(_normalize_time)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_coerce_date)]


# --- files ----------------------------------------------------------------

def _format_types(mime_types: List[str]) -> str:
    names = [t.split('/')[-1] for t in mime_types]
    names = ['mov' if n == 'quicktime' else n for n in names]
    if len(names) <= 1:
        return ''.join(names)
    return f"{', '.join(names[:-1])} or {names[-1]}"


def check_file(value: Any, kind: str = 'image') -> Any:
    """
    Validate a file field value.

    None and blank strings mean "no file"; a non-blank string is an already
    stored path and is kept as is; a pending upload must satisfy the size
    and MIME limits configured for ``kind`` ('image' or 'video').
    """
    if is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if not is_pending_upload(value):
        raise PydanticCustomError('file_type', f"Please select an {kind} file")

    max_mb = get_config_value('uploads', f'max_{kind}_size_mb', 5 if kind == 'image' else 50)
    allowed = get_config_value('uploads', f'{kind}_types', [])

    if upload_size(value) > int(float(max_mb) * 1024 * 1024):
        raise PydanticCustomError('file_size', 'File size must be less than {max_mb}MB', {'max_mb': max_mb})

    if upload_content_type(value) not in allowed:
        raise PydanticCustomError(
            'file_type',
            'Please upload {kind} in {formats} format',
            {'kind': kind, 'formats': _format_types(allowed)}
        )

    return value


ImageFile = Annotated[Any, BeforeValidator(lambda v: check_file(v, 'image'))]
VideoFile = Annotated[Any, BeforeValidator(lambda v: check_file(v, 'video'))]

_FILE_ADAPTERS = {
    'image': TypeAdapter(ImageFile),
    'video': TypeAdapter(VideoFile),
}


def validate_upload(file: Any, kind: str = 'image') -> Optional[str]:
    """
    Check a single picked file outside of a form model.

    Returns:
        The validation message, or None if the file is acceptable
    """
    try:
        _FILE_ADAPTERS[kind].validate_python(file)
        return None
    except ValidationError as e:
        return e.errors()[0].get('msg', 'Invalid file')


# --- helpers --------------------------------------------------------------

def slugify(text: str) -> str:
    """Lowercase, hyphen separated slug built from ASCII letters and digits."""
    return SLUG_INVALID.sub('-', (text or '').lower()).strip('-')


def validate_form_data(model_class: Type[BaseModel],
                       data: Dict[str, Any]) -> Tuple[Optional[BaseModel], Dict[str, str]]:
    """
    Validate form values against a model.

    Args:
        model_class: Pydantic model for the form
        data: Raw widget values keyed by field name

    Returns:
        (instance, {}) on success, (None, {field: message}) on failure with
        the first message per failing field
    """
    try:
        return model_class(**data), {}
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            loc = error.get('loc') or ('__root__',)
            field_name = str(loc[0])
            message = error.get('msg', 'Invalid value')
            if message.startswith('Value error, '):
                message = message[len('Value error, '):]
            errors.setdefault(field_name, message)
        logger.debug(f"{model_class.__name__} validation failed: {errors}")
        return None, errors


def to_record(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert validated values into JSON-ready column values (dates and times
    as ISO strings). Pending uploads are left untouched.
    """
    record: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, (datetime, date, time)):
            record[key] = value.isoformat()
        else:
            record[key] = value
    return record


def get_model_fields_info(model_class: Type[BaseModel]) -> Dict[str, Dict[str, Any]]:
    """
    Get information about all fields in a Pydantic model.

    Returns:
        Dictionary with 'required' and 'default' per field
    """
    fields_info = {}
    for field_name, field in model_class.model_fields.items():
        fields_info[field_name] = {
            'required': field.is_required(),
            'default': None if field.is_required() else field.get_default(call_default_factory=True),
        }
    return fields_info


def model_defaults(model_class: Type[BaseModel]) -> Dict[str, Any]:
    """Blank form values for a new record, taken from the model defaults."""
    defaults: Dict[str, Any] = {}
    for field_name, info in get_model_fields_info(model_class).items():
        value = info['default']
        defaults[field_name] = "" if value is None and info['required'] else value
    return defaults
