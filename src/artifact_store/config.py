"""
S3 source configuration.

Loaded from a YAML mapping using the dashed key names below, either at the
top level or nested under an `s3:` key:

    bucket: releases
    access-key-id: AKIA...
    secret-access-key: ...
    region-name: us-east-1
    endpoint: https://minio.internal:9000   # optional
    disable-ssl: false                      # optional
    enable-v2-signing: false                # optional
    path: products                          # optional bucket prefix
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from artifact_store.common.exceptions import ConfigurationError, ValidationError
from artifact_store.gateway.base import ConfigMap
from artifact_store.gateway.s3 import (
    CONFIG_ACCESS_KEY_ID,
    CONFIG_DISABLE_SSL,
    CONFIG_ENDPOINT,
    CONFIG_REGION,
    CONFIG_SECRET_KEY,
    CONFIG_V2_SIGNING,
)


class S3Configuration(BaseModel):
    """Settings needed to reach the bucket holding product files.

    Attributes:
        bucket: Bucket name
        access_key_id: Access key id
        secret_access_key: Secret key
        region_name: Region
        endpoint: Custom endpoint for S3-compatible stores (empty = AWS)
        disable_ssl: Talk plain HTTP to the endpoint
        enable_v2_signing: Use legacy SigV2 request signing
        path: Bucket-internal prefix under which product files live
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    bucket: str = Field(..., alias="bucket", min_length=1)
    access_key_id: str = Field(..., alias="access-key-id", min_length=1)
    secret_access_key: str = Field(..., alias="secret-access-key", min_length=1)
    region_name: str = Field(..., alias="region-name", min_length=1)
    endpoint: str = Field(default="", alias="endpoint")
    disable_ssl: bool = Field(default=False, alias="disable-ssl")
    enable_v2_signing: bool = Field(default=False, alias="enable-v2-signing")
    path: str = Field(default="", alias="path")

    @field_validator("bucket", "access_key_id", "secret_access_key", "region_name")
    @classmethod
    def validate_non_empty_strings(cls, v: str, info) -> str:
        """Ensure required fields are not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @field_validator("endpoint", "path", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "S3Configuration":
        """Validate a mapping, raising ValidationError that names each bad field.

        Raises:
            ValidationError: If a required field is missing or invalid
        """
        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as e:
            fields = []
            details = []
            for error in e.errors():
                name = ".".join(str(part) for part in error["loc"]) or "<root>"
                fields.append(name)
                details.append(f"{name}: {error['msg']}")
            raise ValidationError(
                "invalid s3 configuration: " + "; ".join(details),
                cause=e,
                context={"fields": fields},
            )

    def to_config_map(self) -> ConfigMap:
        """Gateway settings for the s3 backend."""
        return ConfigMap(
            {
                CONFIG_ACCESS_KEY_ID: self.access_key_id,
                CONFIG_SECRET_KEY: self.secret_access_key,
                CONFIG_REGION: self.region_name,
                CONFIG_ENDPOINT: self.endpoint,
                CONFIG_DISABLE_SSL: str(self.disable_ssl).lower(),
                CONFIG_V2_SIGNING: str(self.enable_v2_signing).lower(),
            }
        )


def parse_configuration(
    config: Union[S3Configuration, Mapping[str, Any]],
) -> S3Configuration:
    """Accept a configuration model or a raw mapping and return a validated model."""
    if isinstance(config, S3Configuration):
        # Re-validate: model_construct() and model_copy(update=...) skip validators
        return S3Configuration.from_dict(config.model_dump(by_alias=True))
    return S3Configuration.from_dict(config)


def load_config(config_path: Path) -> S3Configuration:
    """Load S3 configuration from a YAML file.

    Raises:
        ConfigurationError: If the file is missing or not a YAML mapping
        ValidationError: If a required field is missing or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(
            f"configuration file not found: {config_path}",
            context={"path": str(config_path)},
        )

    try:
        with open(config_path, "r") as f:
            yaml_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"configuration file is not valid YAML: {config_path}",
            cause=e,
            context={"path": str(config_path)},
        )

    if not isinstance(yaml_data, dict):
        raise ConfigurationError(
            f"configuration file must contain a mapping: {config_path}",
            context={"path": str(config_path)},
        )

    s3_data: Dict[str, Any] = yaml_data.get("s3", yaml_data)
    if not isinstance(s3_data, dict):
        raise ConfigurationError(
            f"'s3' section must be a mapping: {config_path}",
            context={"path": str(config_path)},
        )
    return S3Configuration.from_dict(s3_data)
