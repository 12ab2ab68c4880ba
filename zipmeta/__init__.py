"""Zip archive document metadata pipeline.

Extracts text from scanned documents inside zip archives with Tesseract
OCR, derives short captions with a language model, and writes one JSON
metadata sidecar per archive.
"""
