"""Connector classification: subtype → artifact type and technology tag."""

from __future__ import annotations

from enum import StrEnum

from databasin.errors import UnsupportedConnectorError, ValidationError
from databasin.models.connector import ArtifactType, Connector


class Technology(StrEnum):
    """Every connector subtype the platform accepts in a pipeline."""

    # RDBMS
    POSTGRES = "postgres"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MSSQL = "mssql"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"
    MARIADB = "mariadb"
    DB2 = "db2"
    SQLITE = "sqlite"
    SYBASE = "sybase"
    TERADATA = "teradata"
    # Big data / NoSQL
    DATABRICKS = "databricks"
    SNOWFLAKE = "snowflake"
    LAKEHOUSE = "lakehouse"
    REDSHIFT = "redshift"
    BIGQUERY = "bigquery"
    ATHENA = "athena"
    SYNAPSE = "synapse"
    TRINO = "trino"
    PRESTO = "presto"
    HIVE = "hive"
    CASSANDRA = "cassandra"
    MONGODB = "mongodb"
    # Files and file stores
    CSV = "csv"
    JSON = "json"
    PARQUET = "parquet"
    AVRO = "avro"
    ORC = "orc"
    XML = "xml"
    EXCEL = "excel"
    SFTP = "sftp"
    FTP = "ftp"
    FTPS = "ftps"
    BOX = "box"
    S3 = "s3"
    AZURE_BLOB = "azureblob"
    AZURE_DATA_LAKE_STORAGE = "azuredatalakestorage"
    AZURE_DATA_LAKE_STORAGE_GEN2 = "azuredatalakestoragegen2"
    GOOGLE_CLOUD_STORAGE = "googlecloudstorage"
    GOOGLE_DRIVE = "googledrive"
    ONEDRIVE = "onedrive"
    SHAREPOINT = "sharepoint"
    DROPBOX = "dropbox"
    # CRM / ERP
    SALESFORCE = "salesforce"
    DYNAMICS = "dynamics"
    DYNAMICS365 = "dynamics365"
    SAP = "sap"
    NETSUITE = "netsuite"
    ORACLE_ERP = "oracle_erp"
    WORKDAY = "workday"
    SERVICENOW = "servicenow"
    ZENDESK = "zendesk"
    JIRA = "jira"
    # Marketing
    MAILCHIMP = "mailchimp"
    HUBSPOT = "hubspot"
    GOOGLE_ANALYTICS = "googleanalytics"
    GOOGLE_ADS = "googleads"
    FACEBOOK_ADS = "facebookads"
    LINKEDIN_ADS = "linkedinads"
    MARKETO = "marketo"
    PARDOT = "pardot"
    KLAVIYO = "klaviyo"
    SENDGRID = "sendgrid"


_T = Technology

_ARTIFACT_TYPES: dict[ArtifactType, tuple[Technology, ...]] = {
    ArtifactType.RDBMS: (
        _T.POSTGRES, _T.POSTGRESQL, _T.MYSQL, _T.MSSQL, _T.SQLSERVER, _T.ORACLE,
        _T.MARIADB, _T.DB2, _T.SQLITE, _T.SYBASE, _T.TERADATA,
    ),
    ArtifactType.BIG_DATA_NOSQL: (
        _T.DATABRICKS, _T.SNOWFLAKE, _T.LAKEHOUSE, _T.REDSHIFT, _T.BIGQUERY, _T.ATHENA,
        _T.SYNAPSE, _T.TRINO, _T.PRESTO, _T.HIVE, _T.CASSANDRA, _T.MONGODB,
    ),
    ArtifactType.FILE_API: (
        _T.CSV, _T.JSON, _T.PARQUET, _T.AVRO, _T.ORC, _T.XML, _T.EXCEL, _T.SFTP, _T.FTP,
        _T.FTPS, _T.BOX, _T.S3, _T.AZURE_BLOB, _T.AZURE_DATA_LAKE_STORAGE,
        _T.AZURE_DATA_LAKE_STORAGE_GEN2, _T.GOOGLE_CLOUD_STORAGE, _T.GOOGLE_DRIVE,
        _T.ONEDRIVE, _T.SHAREPOINT, _T.DROPBOX,
    ),
    ArtifactType.CRM_ERP: (
        _T.SALESFORCE, _T.DYNAMICS, _T.DYNAMICS365, _T.SAP, _T.NETSUITE, _T.ORACLE_ERP,
        _T.WORKDAY, _T.SERVICENOW, _T.ZENDESK, _T.JIRA,
    ),
    ArtifactType.MARKETING: (
        _T.MAILCHIMP, _T.HUBSPOT, _T.GOOGLE_ANALYTICS, _T.GOOGLE_ADS, _T.FACEBOOK_ADS,
        _T.LINKEDIN_ADS, _T.MARKETO, _T.PARDOT, _T.KLAVIYO, _T.SENDGRID,
    ),
}

_TYPE_BY_TECHNOLOGY: dict[Technology, ArtifactType] = {
    tech: artifact_type for artifact_type, techs in _ARTIFACT_TYPES.items() for tech in techs
}

_TYPE_NAMES: dict[ArtifactType, str] = {
    ArtifactType.RDBMS: "RDBMS",
    ArtifactType.BIG_DATA_NOSQL: "Big Data / NoSQL",
    ArtifactType.FILE_API: "File & API",
    ArtifactType.CRM_ERP: "CRM & ERP",
    ArtifactType.MARKETING: "Marketing",
}


def lookup_technology(sub_type: str) -> Technology:
    """Resolve a free-text subtype to a :class:`Technology` member.

    Raises :class:`UnsupportedConnectorError` for anything not in the table.
    """
    try:
        return Technology(sub_type.strip().lower())
    except ValueError:
        raise UnsupportedConnectorError(
            sub_type, available=[t.value for t in Technology]
        ) from None


def classify_artifact_type(connector: Connector) -> ArtifactType:
    """Map the connector's subtype to its artifact-type code."""
    if not connector.sub_type:
        raise ValidationError(
            f"Connector {connector.connector_id} is missing connectorSubType field",
            field="connectorSubType",
            suggestions=[
                "The connector must have a valid connectorSubType to determine artifact type"
            ],
        )
    return _TYPE_BY_TECHNOLOGY[lookup_technology(connector.sub_type)]


def classify_technology(connector: Connector) -> list[str]:
    """Return the connector's technology tag as a one-element list."""
    sub_type = (connector.sub_type or "").strip()
    if not sub_type:
        raise ValidationError(
            f"Connector {connector.connector_id} is missing connectorSubType field",
            field="connectorSubType",
            suggestions=["The connector must have a valid connectorSubType"],
        )
    return [sub_type.lower()]


# -- lookup helpers ----------------------------------------------------------


def artifact_type_name(code: int) -> str:
    try:
        return _TYPE_NAMES[ArtifactType(code)]
    except ValueError:
        return "Unknown"


def technologies_for(artifact_type: ArtifactType) -> list[str]:
    return [t.value for t in _ARTIFACT_TYPES[artifact_type]]


def is_supported_subtype(sub_type: str) -> bool:
    return _artifact_type_of(sub_type) is not None


def is_rdbms(sub_type: str) -> bool:
    return _artifact_type_of(sub_type) is ArtifactType.RDBMS


def is_big_data(sub_type: str) -> bool:
    return _artifact_type_of(sub_type) is ArtifactType.BIG_DATA_NOSQL


def _artifact_type_of(sub_type: str) -> ArtifactType | None:
    try:
        return _TYPE_BY_TECHNOLOGY[Technology(sub_type.strip().lower())]
    except ValueError:
        return None
