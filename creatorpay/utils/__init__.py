from creatorpay.utils.id_generators import (
    generate_random_string, generate_transaction_reference,
    generate_deposit_reference, generate_course_reference,
    generate_withdrawal_reference, generate_refund_reference,
    generate_referral_code
)
from creatorpay.utils.phone import normalize_phone, validate_phone
from creatorpay.utils.log_sanitizer import mask_sensitive_data, SensitiveDataFilter
from creatorpay.utils.exporters import (
    get_export_filename, export_queryset_to_csv,
    export_queryset_to_excel, export_queryset_to_pdf
)


__all__ = [
    'generate_random_string',
    'generate_transaction_reference',
    'generate_deposit_reference',
    'generate_course_reference',
    'generate_withdrawal_reference',
    'generate_refund_reference',
    'generate_referral_code',
    'normalize_phone',
    'validate_phone',
    'mask_sensitive_data',
    'SensitiveDataFilter',
    'get_export_filename',
    'export_queryset_to_csv',
    'export_queryset_to_excel',
    'export_queryset_to_pdf',
]
