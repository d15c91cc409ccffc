"""
PDF Chat Application

Upload a PDF, extract its text, and converse with an LLM about its contents.
Conversation history is persisted in a relational store.

Features:
- Per-API-key LLM client cache
- PDF-grounded chat completions (Google Gemini)
- Conversation persistence with SQLAlchemy
- Clerk authentication
- NiceGUI chat interface with optimistic message rendering
"""

__version__ = "1.0.0"
__author__ = "PDF Chat Team"
__description__ = "Chat with the contents of an uploaded PDF"
