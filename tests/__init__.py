"""Test suite for the PDF Chat application."""
