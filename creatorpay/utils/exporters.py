import io
import csv
import datetime
import xlsxwriter
from decimal import Decimal
from django.http import HttpResponse
from django.utils import timezone
from djmoney.money import Money
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet

from creatorpay.settings import get_creatorpay_setting


def get_export_filename(prefix, extension):
    """Build ``{prefix}_{YYYYmmdd_HHMMSS}.{extension}``"""
    timestamp = timezone.now().strftime('%Y%m%d_%H%M%S')
    return f"{prefix}_{timestamp}.{extension}"


def _attachment(response, prefix, extension):
    response['Content-Disposition'] = f'attachment; filename="{get_export_filename(prefix, extension)}"'
    return response


def _header_row(model, fields):
    """Column titles: model verbose names where available, else the field path"""
    concrete = {f.name: f for f in model._meta.fields}
    header = []
    for field in fields:
        if field in concrete:
            header.append(str(concrete[field].verbose_name).title())
        else:
            header.append(field.replace('.', ' ').replace('_', ' ').title())
    return header


def _resolve_value(obj, field):
    """Follow dotted paths such as ``wallet.user.email``"""
    value = obj
    for attr in field.split('.'):
        if value is None:
            return None
        value = getattr(value, attr, None)
    if callable(value):
        value = value()
    return value


def _as_text(value):
    if value is None:
        return ''
    if isinstance(value, datetime.datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, datetime.date):
        return value.strftime('%Y-%m-%d')
    return str(value)


def export_queryset_to_csv(queryset, fields, filename_prefix='export'):
    """
    Export a queryset to CSV

    Args:
        queryset: Django queryset to export
        fields (list): Field names, dotted paths allowed
        filename_prefix (str): Prefix for the export filename

    Returns:
        HttpResponse: CSV attachment
    """
    response = _attachment(HttpResponse(content_type='text/csv'), filename_prefix, 'csv')
    writer = csv.writer(response)
    writer.writerow(_header_row(queryset.model, fields))

    for obj in queryset:
        writer.writerow([_as_text(_resolve_value(obj, field)) for field in fields])

    return response


def export_queryset_to_excel(queryset, fields, filename_prefix='export', sheet_name='Sheet1'):
    """
    Export a queryset to an Excel workbook

    Money values are written as plain numbers so they can be summed.
    """
    output = io.BytesIO()
    workbook = xlsxwriter.Workbook(output, {'remove_timezone': True})
    worksheet = workbook.add_worksheet(sheet_name)

    header_format = workbook.add_format({'bold': True, 'bg_color': '#f0f0f0', 'border': 1})
    date_format = workbook.add_format({'num_format': 'yyyy-mm-dd'})
    datetime_format = workbook.add_format({'num_format': 'yyyy-mm-dd hh:mm:ss'})
    money_format = workbook.add_format({'num_format': '#,##0.00'})

    for col, title in enumerate(_header_row(queryset.model, fields)):
        worksheet.write(0, col, title, header_format)

    for row_idx, obj in enumerate(queryset, start=1):
        for col_idx, field in enumerate(fields):
            value = _resolve_value(obj, field)

            if isinstance(value, datetime.datetime):
                worksheet.write_datetime(row_idx, col_idx, value, datetime_format)
            elif isinstance(value, datetime.date):
                worksheet.write_datetime(row_idx, col_idx, value, date_format)
            elif isinstance(value, Money):
                worksheet.write_number(row_idx, col_idx, float(value.amount), money_format)
            elif isinstance(value, Decimal):
                worksheet.write_number(row_idx, col_idx, float(value))
            elif isinstance(value, (int, float, bool)):
                worksheet.write(row_idx, col_idx, value)
            else:
                worksheet.write_string(row_idx, col_idx, _as_text(value))

    worksheet.set_column(0, max(len(fields) - 1, 0), 18)
    workbook.close()

    output.seek(0)
    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    return _attachment(response, filename_prefix, 'xlsx')


def _page_size():
    page_size = A4 if get_creatorpay_setting('EXPORT_PAGESIZE') == 'A4' else letter
    if get_creatorpay_setting('EXPORT_ORIENTATION') == 'landscape':
        page_size = landscape(page_size)
    return page_size


def export_queryset_to_pdf(queryset, fields, filename_prefix='export', title=None):
    """
    Export a queryset to a PDF table, using the configured page size and
    orientation
    """
    buffer = io.BytesIO()
    pdf = SimpleDocTemplate(
        buffer,
        pagesize=_page_size(),
        rightMargin=36,
        leftMargin=36,
        topMargin=48,
        bottomMargin=48
    )
    styles = getSampleStyleSheet()

    elements = []
    if title:
        elements.append(Paragraph(str(title), styles['Heading1']))
        elements.append(Spacer(1, 12))

    data = [_header_row(queryset.model, fields)]
    for obj in queryset:
        data.append([_as_text(_resolve_value(obj, field)) for field in fields])

    table = Table(data, repeatRows=1)
    style = TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.darkslategray),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 7),
        ('ALIGN', (0, 1), (-1, -1), 'LEFT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ])
    for row in range(2, len(data), 2):
        style.add('BACKGROUND', (0, row), (-1, row), colors.whitesmoke)
    table.setStyle(style)
    elements.append(table)

    pdf.build(elements)
    pdf_data = buffer.getvalue()
    buffer.close()

    response = HttpResponse(pdf_data, content_type='application/pdf')
    return _attachment(response, filename_prefix, 'pdf')
