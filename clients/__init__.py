"""
Clients for external record sources.
"""
from clients.notion_source import NotionRecordSource, transform_page

__all__ = ["NotionRecordSource", "transform_page"]
