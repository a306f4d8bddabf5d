"""Contacts service: streaming regex-filtered listing and create-and-publish."""

__version__ = "0.1.0"
