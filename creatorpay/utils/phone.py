"""
M-Pesa phone number helpers

PayHero expects Kenyan numbers in international form without the plus
sign, e.g. ``254712345678``.
"""
import re

from creatorpay.exceptions import InvalidPhoneNumber


MPESA_PHONE_PATTERN = re.compile(r'^254[17]\d{8}$')


def normalize_phone(phone_number):
    """
    Convert ``07XXXXXXXX``, ``+2547XXXXXXXX`` or ``2547XXXXXXXX`` (with
    optional spaces or dashes) into ``2547XXXXXXXX``.

    Raises:
        InvalidPhoneNumber: If the number is missing or cannot be converted
    """
    if not phone_number:
        raise InvalidPhoneNumber()

    cleaned = re.sub(r'[\s\-()]', '', str(phone_number))
    if cleaned.startswith('+'):
        cleaned = cleaned[1:]

    if cleaned.startswith('0') and len(cleaned) == 10:
        cleaned = '254' + cleaned[1:]
    elif len(cleaned) == 9 and cleaned[0] in '17':
        cleaned = '254' + cleaned

    if not validate_phone(cleaned):
        raise InvalidPhoneNumber(phone_number)

    return cleaned


def validate_phone(phone_number):
    """True when ``phone_number`` is already in ``2547XXXXXXXX`` form"""
    return bool(phone_number) and bool(MPESA_PHONE_PATTERN.match(phone_number))
