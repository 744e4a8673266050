"""
Request field parsing
Each helper raises ValidationError with a message naming the field.
"""

from datetime import datetime

from app.errors import ValidationError


TRUE_VALUES = {'true', '1', 'yes', 'on'}
FALSE_VALUES = {'false', '0', 'no', 'off', ''}


def require_fields(data, fields):
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f'{field} is required')


def parse_str(value, field, strip=True):
    """Free-text field; None passes through, anything but a string is rejected"""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    return value.strip() if strip else value


def parse_enum(enum_cls, value, field):
    try:
        return enum_cls(value.strip().lower() if isinstance(value, str) else value)
    except ValueError:
        allowed = ', '.join(m.value for m in enum_cls)
        raise ValidationError(f'Invalid {field}. Must be one of: {allowed}')


def parse_float(value, field):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')


def parse_coordinates(latitude, longitude):
    lat = parse_float(latitude, 'latitude')
    lng = parse_float(longitude, 'longitude')
    if not -90 <= lat <= 90:
        raise ValidationError('latitude must be between -90 and 90')
    if not -180 <= lng <= 180:
        raise ValidationError('longitude must be between -180 and 180')
    return lat, lng


def parse_bool(value, field='value'):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValidationError(f'{field} must be true or false')


def parse_rating(value):
    if isinstance(value, bool):
        raise ValidationError('Rating must be between 1 and 5')
    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise ValidationError('Rating must be between 1 and 5')
    if rating != value and str(rating) != str(value).strip():
        raise ValidationError('Rating must be between 1 and 5')
    if not 1 <= rating <= 5:
        raise ValidationError('Rating must be between 1 and 5')
    return rating


def parse_datetime(value, field):
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f'{field} must be an ISO 8601 date')
    # Stored as naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - parsed.utcoffset()
    return parsed
