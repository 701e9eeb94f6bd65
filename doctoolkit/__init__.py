"""
doctoolkit - Office document utilities

Reads and writes Excel workbooks, reconciles shipment exports against a
reference code table, renders workbooks to PDF, and turns Markdown into
Word documents.
"""

__version__ = "1.0.0"
