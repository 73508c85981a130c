"""Intake Form OCR Assistant.

Forwards scanned intake forms to Azure Document Intelligence, extracts
page text, tables and form fields from the analysis result, and can
rewrite the text into a clinical-note template.
"""

__version__ = "1.0.0"
