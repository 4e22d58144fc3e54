import random
import string
import time

from creatorpay.constants import REFERRAL_CODE_LENGTH


def generate_random_string(length=10, include_digits=True, include_uppercase=True, include_lowercase=False):
    """
    Generate a random string from the selected character sets

    Args:
        length (int): Length of the string
        include_digits (bool): Use 0-9
        include_uppercase (bool): Use A-Z
        include_lowercase (bool): Use a-z

    Returns:
        str: Random string
    """
    chars = ''
    if include_digits:
        chars += string.digits
    if include_uppercase:
        chars += string.ascii_uppercase
    if include_lowercase:
        chars += string.ascii_lowercase
    if not chars:
        chars = string.ascii_uppercase + string.digits

    rng = random.SystemRandom()
    return ''.join(rng.choice(chars) for _ in range(length))


def _epoch_ms():
    return int(time.time() * 1000)


def generate_prefixed_reference(prefix, user_id):
    """
    Build a reference of the form ``{PREFIX}_{epoch_ms}_{user_id}``

    This is the shape handed to PayHero as ``external_reference`` and
    stored on withdrawals and refunds.
    """
    return f"{prefix}_{_epoch_ms()}_{user_id}"


def generate_deposit_reference(user_id):
    return generate_prefixed_reference('DEPOSIT', user_id)


def generate_course_reference(user_id):
    return generate_prefixed_reference('COURSE', user_id)


def generate_withdrawal_reference(user_id):
    return generate_prefixed_reference('WITHDRAWAL', user_id)


def generate_refund_reference(user_id):
    return generate_prefixed_reference('REFUND', user_id)


def generate_transaction_reference(prefix='TRX'):
    """Fallback reference for transactions created without one"""
    return f"{prefix}{int(time.time())}{generate_random_string(8)}"


def generate_referral_code(length=REFERRAL_CODE_LENGTH):
    """Upper-case alphanumeric referral code"""
    return generate_random_string(length)
