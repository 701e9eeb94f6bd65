from .excel_io import ExcelReader, ExcelWriter, ExcelReadError, ReadRetryPolicy
from .pdf_converter import ExcelToPdfConverter, PdfConversionResult, ConversionError
from .word_converter import MarkdownToWordConverter, parse_markdown_table

__all__ = [
    "ExcelReader",
    "ExcelWriter",
    "ExcelReadError",
    "ReadRetryPolicy",
    "ExcelToPdfConverter",
    "PdfConversionResult",
    "ConversionError",
    "MarkdownToWordConverter",
    "parse_markdown_table",
]
