"""
tarifcheck reports - CSV, Excel and DataFrame exports plus input templates.
"""

from .reconciliation_report import (
    ReconciliationReporter,
    report_header,
    report_values,
    write_csv,
    to_csv_string,
    to_dataframe,
)
from .templates import template_content, template_filename, write_template

__all__ = [
    'ReconciliationReporter',
    'report_header',
    'report_values',
    'write_csv',
    'to_csv_string',
    'to_dataframe',
    'template_content',
    'template_filename',
    'write_template',
]
