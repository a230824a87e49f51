"""REST clients for the Databasin platform API."""

from databasin.client.base import DatabasinClient
from databasin.client.bulk import BulkResult, fetch_bulk, parse_bulk_ids
from databasin.client.configuration import ConfigurationClient
from databasin.client.connectors import ConnectorsClient
from databasin.client.pipelines import PipelinesClient

__all__ = [
    "BulkResult",
    "ConfigurationClient",
    "ConnectorsClient",
    "DatabasinClient",
    "PipelinesClient",
    "fetch_bulk",
    "parse_bulk_ids",
]
