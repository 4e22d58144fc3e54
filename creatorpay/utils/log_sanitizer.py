"""
Masking of secrets and personal data before they reach log handlers

``mask_sensitive_data`` can be called directly on payloads, and
``SensitiveDataFilter`` can be attached to any handler through Django's
``LOGGING`` setting::

    'filters': {
        'mask': {'()': 'creatorpay.utils.log_sanitizer.SensitiveDataFilter'},
    },
"""
import logging

from creatorpay.settings import get_creatorpay_setting


SENSITIVE_MARKERS = (
    'password',
    'api_key',
    'apikey',
    'secret',
    'token',
    'authorization',
    'phone',
    'email',
    'till',
    'channel',
)

MAX_DEPTH = 3
MAX_STRING_LENGTH = 100
MAX_LIST_ITEMS = 5
REDACTED = '[REDACTED]'
DEEP_OBJECT = '[Deep Object]'


def is_sensitive_key(key):
    key = str(key).lower()
    return any(marker in key for marker in SENSITIVE_MARKERS)


def mask_value(value):
    """
    Keep the first and last two characters of a string and star up to six
    in between; anything else is replaced entirely
    """
    if not isinstance(value, str):
        return REDACTED
    if not value:
        return value
    if len(value) <= 4:
        return '*' * len(value)
    return value[:2] + '*' * min(len(value) - 4, 6) + value[-2:]


def mask_sensitive_data(data, depth=0):
    """Return a copy of ``data`` that is safe to log"""
    if depth > MAX_DEPTH:
        return DEEP_OBJECT

    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        if len(data) > MAX_STRING_LENGTH:
            return data[:MAX_STRING_LENGTH] + '...[truncated]'
        return data

    if isinstance(data, (list, tuple)):
        items = [mask_sensitive_data(item, depth + 1) for item in data[:MAX_LIST_ITEMS]]
        if len(data) > MAX_LIST_ITEMS:
            items.append(f"...[{len(data) - MAX_LIST_ITEMS} more items]")
        return items

    if isinstance(data, dict):
        return {
            key: mask_value(value) if is_sensitive_key(key) else mask_sensitive_data(value, depth + 1)
            for key, value in data.items()
        }

    return data


class SensitiveDataFilter(logging.Filter):
    """Masks dict arguments of log records in place"""

    def filter(self, record):
        if not get_creatorpay_setting('MASK_SENSITIVE_LOGS'):
            return True

        if isinstance(record.args, dict):
            record.args = mask_sensitive_data(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(
                mask_sensitive_data(arg) if isinstance(arg, (dict, list)) else arg
                for arg in record.args
            )
        return True
